"""
Mahjong Game Engine

Turn and claim state machine. Every transition takes a ``GameState`` and an
``Action`` and returns a new ``GameState``; a command whose preconditions do
not hold raises ``InvalidCommand`` and leaves the input state as it was.

Phases:
    DEALING -> PLAYING -> ACTION_WINDOW -> (PLAYING | GAME_OVER)
"""

import logging
import random
from dataclasses import replace
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from .config import DEFAULT_CONFIG, SessionConfig
from .errors import InvalidCommand, WallExhausted
from .player import Meld, MeldType, PlayerState
from .state import (
    CLAIM_PRIORITY, Action, ActionType, Claim, GamePhase, GameState, LastDiscard, WinType,
)
from .tiles import Tile, sort_hand
from .wall import create_deck, deal_hands, draw, shuffle
from .winning import can_win, find_winning_shape

logger = logging.getLogger(__name__)

NUM_PLAYERS = 4
HAND_SIZE = 13
DEALER_SEAT = 0

_MELD_TYPES = {
    ActionType.CHOW: MeldType.CHOW,
    ActionType.PUNG: MeldType.PUNG,
    ActionType.KONG: MeldType.KONG,
}

_CLAIM_NAMES = {
    ActionType.CHOW: "Chow",
    ActionType.PUNG: "Pung",
    ActionType.KONG: "Kong",
}


def next_seat(seat: int) -> int:
    """Seat immediately clockwise of ``seat``"""
    return (seat + 1) % NUM_PLAYERS


def new_game(config: Optional[SessionConfig] = None, rng: Optional[random.Random] = None) -> GameState:
    """
    Seat four players, shuffle a fresh deck and deal.

    Args:
        config: Seating configuration
        rng: Random source for the shuffle

    Returns:
        State in the PLAYING phase with the dealer to act
    """
    config = config or DEFAULT_CONFIG
    players = tuple(
        PlayerState(
            seat=seat,
            name=config.player_names[seat],
            is_ai=config.is_ai(seat),
            score=config.starting_score,
            is_dealer=(seat == DEALER_SEAT),
        )
        for seat in range(NUM_PLAYERS)
    )
    state = GameState(
        deck=tuple(shuffle(create_deck(), rng)),
        players=players,
        current_turn=DEALER_SEAT,
        phase=GamePhase.DEALING,
    )
    return deal(state)


def deal(state: GameState) -> GameState:
    """
    Deal 13 tiles to every seat round-robin, then one more to the dealer.
    The deck is taken as already shuffled.
    """
    if state.phase != GamePhase.DEALING:
        raise InvalidCommand(f"Cannot deal in phase {state.phase.name}")

    hands, remaining = deal_hands(state.deck, NUM_PLAYERS, HAND_SIZE)
    dealer = state.dealer
    extra, remaining = draw(remaining)
    hands[dealer].append(extra)

    players = tuple(
        replace(player, hand=sort_hand(hands[player.seat]), melds=(), discards=())
        for player in state.players
    )
    dealt = replace(
        state,
        deck=remaining,
        players=players,
        current_turn=dealer,
        phase=GamePhase.PLAYING,
        last_discard=None,
        pending_claims=(),
        winner=None,
        win_type=None,
        turn_from_claim=False,
    )
    logger.debug(f"Dealt hands, {dealt.wall_count} tiles left in the wall")
    return dealt.with_log(f"Game started. {players[dealer].name} is the dealer.")


def step(state: GameState, action: Action) -> GameState:
    """
    Apply one command.

    Args:
        state: Current state
        action: Command to apply

    Returns:
        The next state

    Raises:
        InvalidCommand: if the command is not allowed in ``state``
    """
    if state.phase == GamePhase.GAME_OVER:
        raise InvalidCommand("Game is already over")
    if not 0 <= action.seat < NUM_PLAYERS:
        raise InvalidCommand(f"No such seat: {action.seat}")

    handler = _HANDLERS.get(action.action_type)
    if handler is None:
        raise InvalidCommand(f"Unknown action type {action.action_type!r}")

    new_state = handler(state, action)
    logger.debug(f"{action} -> {new_state!r}")
    if new_state.phase == GamePhase.GAME_OVER:
        if new_state.winner is None:
            logger.info("Game over: wall exhausted, no winner")
        else:
            logger.info(f"Game over: seat {new_state.winner} wins by {new_state.win_type.name}")
    return new_state


def compute_claims(players: Sequence[PlayerState], tile: Tile, discarder: int) -> Tuple[Claim, ...]:
    """
    Claim set for a fresh discard, in clockwise order from the discarder.

    Win is open to any seat whose hand completes with the tile; Kong needs
    the other three copies, Pung two; Chow only for the next seat.
    Seats with nothing to claim are left out.
    """
    claims = []
    for offset in range(1, NUM_PLAYERS):
        seat = (discarder + offset) % NUM_PLAYERS
        player = players[seat]
        actions = []

        if can_win(player.hand + (tile,), player.melds):
            actions.append(ActionType.WIN)
        if player.can_kong(tile):
            actions.append(ActionType.KONG)
        if player.can_pung(tile):
            actions.append(ActionType.PUNG)
        if seat == next_seat(discarder) and player.can_chow(tile):
            actions.append(ActionType.CHOW)

        if actions:
            claims.append(Claim(seat, tuple(actions)))
    return tuple(claims)


def valid_actions(state: GameState, seat: int) -> List[Action]:
    """
    Commands ``seat`` may issue right now.

    Discards are listed once per kind held. Claims that are waiting on a
    stronger claim held by another seat are left out, as is the scheduler's DRAW.
    Win is not offered on a turn taken by claiming a discard.
    """
    valid: List[Action] = []
    player = state.players[seat]

    if state.phase == GamePhase.PLAYING and seat == state.current_turn:
        seen = set()
        for tile in player.hand:
            if tile.kind not in seen:
                seen.add(tile.kind)
                valid.append(Action(ActionType.DISCARD, seat, tile.id))

        for tile in player.concealed_kong_options():
            valid.append(Action(ActionType.CONCEALED_KONG, seat, tile.id))

        if not state.turn_from_claim and can_win(player.hand, player.melds):
            valid.append(Action(ActionType.WIN, seat))

    elif state.phase == GamePhase.ACTION_WINDOW:
        offered = state.claim_actions(seat)
        for action_type in offered:
            if _outranked(state, seat, action_type):
                continue
            valid.append(Action(action_type, seat))
        if offered:
            valid.append(Action(ActionType.PASS, seat))

    return valid


def _require_phase(state: GameState, phase: GamePhase, action: Action) -> None:
    if state.phase != phase:
        raise InvalidCommand(f"Cannot {action.action_type.name} in phase {state.phase.name}")


def _require_turn(state: GameState, action: Action) -> None:
    if action.seat != state.current_turn:
        raise InvalidCommand(f"Seat {action.seat} cannot act on seat {state.current_turn}'s turn")


def _require_claim(state: GameState, action: Action) -> None:
    _require_phase(state, GamePhase.ACTION_WINDOW, action)
    if state.last_discard is None:
        raise InvalidCommand("There is no discard to claim")
    if action.action_type not in state.claim_actions(action.seat):
        raise InvalidCommand(f"{action.action_type.name} is not open to seat {action.seat}")


def _outranked(state: GameState, seat: int, action_type: ActionType) -> bool:
    """True while another seat still holds a stronger claim on the discard"""
    stronger = CLAIM_PRIORITY[:CLAIM_PRIORITY.index(action_type)]
    return any(
        claim.seat != seat and any(a in stronger for a in claim.actions)
        for claim in state.pending_claims
    )


def _without_ids(tiles: Sequence[Tile], ids) -> Tuple[Tile, ...]:
    return tuple(t for t in tiles if t.id not in ids)


def _draw_for(state: GameState, seat: int) -> GameState:
    """Draw from the wall into ``seat``'s hand; an empty wall ends the game."""
    try:
        tile, deck = draw(state.deck)
    except WallExhausted:
        over = replace(
            state,
            phase=GamePhase.GAME_OVER,
            winner=None,
            win_type=None,
            last_discard=None,
            pending_claims=(),
        )
        return over.with_log("The wall is empty. The game is a draw.")

    player = state.players[seat]
    player = replace(player, hand=sort_hand(player.hand + (tile,)))
    return replace(
        state.with_player(player),
        deck=deck,
        current_turn=seat,
        phase=GamePhase.PLAYING,
        turn_count=state.turn_count + 1,
        turn_from_claim=False,
    )


def _handle_discard(state: GameState, action: Action) -> GameState:
    """Move a tile from hand to the discard pile and open the claim window."""
    _require_phase(state, GamePhase.PLAYING, action)
    _require_turn(state, action)

    player = state.players[action.seat]
    tile = player.find_tile(action.tile_id) if action.tile_id is not None else None
    if tile is None:
        raise InvalidCommand(f"Seat {action.seat} doesn't hold tile {action.tile_id}")

    player = replace(
        player,
        hand=_without_ids(player.hand, {tile.id}),
        discards=player.discards + (tile,),
    )
    state = state.with_player(player)
    claims = compute_claims(state.players, tile, action.seat)

    state = replace(
        state,
        last_discard=LastDiscard(tile, action.seat),
        phase=GamePhase.ACTION_WINDOW,
        pending_claims=claims,
    )
    return state.with_log(f"{player.name} discarded {tile.name}")


def _handle_draw(state: GameState, action: Action) -> GameState:
    """Next seat draws once nobody is left to claim the discard."""
    _require_phase(state, GamePhase.ACTION_WINDOW, action)
    if state.pending_claims:
        raise InvalidCommand("Claims are still pending on the last discard")
    if state.last_discard is None:
        raise InvalidCommand("There is no discard to move past")

    expected = next_seat(state.last_discard.seat)
    if action.seat != expected:
        raise InvalidCommand(f"Seat {expected} draws next, not seat {action.seat}")

    return _draw_for(replace(state, last_discard=None), expected)


def _handle_win(state: GameState, action: Action) -> GameState:
    """Self-draw win while PLAYING, discard win while the claim window is open."""
    if state.phase == GamePhase.PLAYING:
        _require_turn(state, action)
        if state.turn_from_claim:
            raise InvalidCommand("A self-draw win needs a tile drawn from the wall")
        player = state.players[action.seat]
        shape = find_winning_shape(player.hand, player.melds)
        if shape is None:
            raise InvalidCommand(f"Seat {action.seat}'s hand is not a winning hand")

        over = replace(
            state,
            phase=GamePhase.GAME_OVER,
            winner=action.seat,
            win_type=WinType.SELF_DRAW,
        )
        return over.with_log(f"{player.name} won by self-draw! ({shape.describe()})")

    _require_claim(state, action)
    tile = state.last_discard.tile
    discarder = state.players[state.last_discard.seat]
    winner = state.players[action.seat]

    winner = replace(winner, hand=sort_hand(winner.hand + (tile,)))
    discarder = replace(discarder, discards=_without_ids(discarder.discards, {tile.id}))

    over = replace(
        state.with_player(winner).with_player(discarder),
        phase=GamePhase.GAME_OVER,
        winner=action.seat,
        win_type=WinType.DISCARD,
        pending_claims=(),
    )
    return over.with_log(f"{winner.name} won on {discarder.name}'s {tile.name}!")


def _handle_meld_claim(state: GameState, action: Action) -> GameState:
    """Take the discard into a Chow, Pung or Kong."""
    _require_claim(state, action)
    if _outranked(state, action.seat, action.action_type):
        raise InvalidCommand(
            f"A stronger claim than {action.action_type.name} is still pending on this discard")

    tile = state.last_discard.tile
    discarder = state.players[state.last_discard.seat]
    claimant = state.players[action.seat]

    if action.action_type == ActionType.CHOW:
        used = list(claimant.chow_options(tile)[0])
    elif action.action_type == ActionType.PUNG:
        used = claimant.tiles_of_kind(tile)[:2]
    else:
        used = claimant.tiles_of_kind(tile)[:3]

    meld = Meld(
        meld_type=_MELD_TYPES[action.action_type],
        tiles=sort_hand(used + [tile]),
        from_player=discarder.seat,
        claimed_tile=tile,
    )
    claimant = replace(
        claimant,
        hand=_without_ids(claimant.hand, {t.id for t in used}),
        melds=claimant.melds + (meld,),
    )
    discarder = replace(discarder, discards=_without_ids(discarder.discards, {tile.id}))

    state = replace(
        state.with_player(claimant).with_player(discarder),
        current_turn=action.seat,
        phase=GamePhase.PLAYING,
        last_discard=None,
        pending_claims=(),
        turn_from_claim=True,
    )
    state = state.with_log(f"{claimant.name} claimed {_CLAIM_NAMES[action.action_type]} on {tile.name}")

    if action.action_type == ActionType.KONG:
        state = _draw_for(state, action.seat)
    return state


def _handle_concealed_kong(state: GameState, action: Action) -> GameState:
    """Lay down four of a kind from hand and draw a replacement tile."""
    _require_phase(state, GamePhase.PLAYING, action)
    _require_turn(state, action)

    player = state.players[action.seat]
    tile = player.find_tile(action.tile_id) if action.tile_id is not None else None
    if tile is None:
        raise InvalidCommand(f"Seat {action.seat} doesn't hold tile {action.tile_id}")
    if player.count(tile) != 4:
        raise InvalidCommand(f"Seat {action.seat} doesn't hold four {tile.name}")

    used = player.tiles_of_kind(tile)
    meld = Meld(meld_type=MeldType.CONCEALED_KONG, tiles=tuple(used))
    player = replace(
        player,
        hand=_without_ids(player.hand, {t.id for t in used}),
        melds=player.melds + (meld,),
    )
    state = state.with_player(player).with_log(f"{player.name} declared a concealed kong")
    return _draw_for(state, action.seat)


def _handle_pass(state: GameState, action: Action) -> GameState:
    """Drop the seat from the claim set."""
    _require_phase(state, GamePhase.ACTION_WINDOW, action)
    if action.seat not in state.claims:
        raise InvalidCommand(f"Seat {action.seat} has nothing to pass on")

    remaining = tuple(c for c in state.pending_claims if c.seat != action.seat)
    return replace(state, pending_claims=remaining)


_HANDLERS: Dict[ActionType, Callable[[GameState, Action], GameState]] = {
    ActionType.DISCARD: _handle_discard,
    ActionType.DRAW: _handle_draw,
    ActionType.WIN: _handle_win,
    ActionType.CHOW: _handle_meld_claim,
    ActionType.PUNG: _handle_meld_claim,
    ActionType.KONG: _handle_meld_claim,
    ActionType.CONCEALED_KONG: _handle_concealed_kong,
    ActionType.PASS: _handle_pass,
}
