"""
Heuristic Agent

A rule-based policy for the computer seats. Greedy, not a search: it only
has to be deterministic given the game state.

Turn:
    Win if the hand is complete, otherwise discard by priority
    1. an honor tile held as a singleton
    2. a numbered tile with no other same-suit tile within one value
    3. the first tile in sorted hand order

Claim window:
    Win > Kong > Pung > Chow > Pass
"""

from typing import Optional, Sequence

from mahjong_engine.player import PlayerState
from mahjong_engine.state import CLAIM_PRIORITY, Action, ActionType, GamePhase, GameState
from mahjong_engine.tiles import Tile, is_same_kind
from mahjong_engine.winning import can_win


def choose_discard(hand: Sequence[Tile]) -> Tile:
    """
    Pick the tile to throw away.

    Args:
        hand: Concealed tiles in sorted order (must not be empty)
    """
    if not hand:
        raise ValueError("Cannot choose a discard from an empty hand")

    for tile in hand:
        if tile.is_honor and sum(1 for t in hand if is_same_kind(t, tile)) == 1:
            return tile

    for tile in hand:
        if tile.is_honor:
            continue
        has_neighbor = any(
            t.id != tile.id and t.suit == tile.suit and abs(t.value - tile.value) <= 1
            for t in hand
        )
        if not has_neighbor:
            return tile

    return hand[0]


def choose_claim(actions: Sequence[ActionType]) -> ActionType:
    """Strongest claim on offer, or PASS"""
    for action_type in CLAIM_PRIORITY:
        if action_type in actions:
            return action_type
    return ActionType.PASS


class HeuristicAgent:
    """
    Policy for AI seats.

    Returns exactly one command per call; the caller feeds it through the
    same validated command path as human input.
    """

    def turn_action(self, player: PlayerState, may_win: bool = True) -> Action:
        """
        Self-draw win if available, otherwise a discard.

        Args:
            player: Seat on turn
            may_win: False on a turn taken by claiming a discard
        """
        if may_win and can_win(player.hand, player.melds):
            return Action(ActionType.WIN, player.seat)
        tile = choose_discard(player.hand)
        return Action(ActionType.DISCARD, player.seat, tile.id)

    def claim_action(self, seat: int, actions: Sequence[ActionType]) -> Action:
        return Action(choose_claim(actions), seat)

    def get_action(self, state: GameState, seat: int) -> Optional[Action]:
        """
        Select the command for ``seat`` in ``state``.

        Returns:
            The chosen Action, or None when the seat has nothing to do
        """
        if state.phase == GamePhase.PLAYING and state.current_turn == seat:
            return self.turn_action(state.players[seat], may_win=not state.turn_from_claim)

        if state.phase == GamePhase.ACTION_WINDOW:
            offered = state.claim_actions(seat)
            if offered:
                return self.claim_action(seat, offered)

        return None

    def __repr__(self) -> str:
        return "HeuristicAgent()"
