"""
Game state values.

``GameState`` is a frozen snapshot of the whole table. Transitions in
``mahjong_engine.game`` never modify a state; they return a new one.
"""

from enum import IntEnum
from dataclasses import dataclass, replace
from typing import Dict, Optional, Tuple

from .player import PlayerState
from .tiles import Tile

# Size of the in-game event log
LOG_LIMIT = 50


class GamePhase(IntEnum):
    """Phases of the game"""
    DEALING = 0        # Only while a session is being set up
    PLAYING = 1        # Current seat must discard (or declare)
    ACTION_WINDOW = 2  # Other seats may claim the last discard
    GAME_OVER = 3


class WinType(IntEnum):
    SELF_DRAW = 0  # 自摸
    DISCARD = 1    # 点炮


class ActionType(IntEnum):
    """Types of commands a seat (or the scheduler) can issue"""
    DISCARD = 0
    CHOW = 1            # Claim for a sequence (吃)
    PUNG = 2            # Claim for a triplet (碰)
    KONG = 3            # Claim for a quad (杠)
    CONCEALED_KONG = 4  # Declare concealed kong (暗杠)
    WIN = 5             # Declare win (胡)
    PASS = 6            # Pass on claiming (过)
    DRAW = 7            # Next seat draws once the claim window is empty


# Strongest first
CLAIM_PRIORITY = (ActionType.WIN, ActionType.KONG, ActionType.PUNG, ActionType.CHOW)


@dataclass(frozen=True)
class Action:
    """
    A command for the state machine.

    Attributes:
        action_type: Type of command
        seat: Seat issuing the command
        tile_id: Tile to discard or kong (DISCARD, CONCEALED_KONG only)
    """
    action_type: ActionType
    seat: int
    tile_id: Optional[int] = None

    def __repr__(self) -> str:
        if self.tile_id is None:
            return f"Action({self.action_type.name}, P{self.seat})"
        return f"Action({self.action_type.name}, P{self.seat}, tile={self.tile_id})"


@dataclass(frozen=True)
class LastDiscard:
    tile: Tile
    seat: int


@dataclass(frozen=True)
class Claim:
    """Claim actions open to one seat for the current discard, strongest first"""
    seat: int
    actions: Tuple[ActionType, ...]


@dataclass(frozen=True)
class GameState:
    """
    Snapshot of a game session.

    Attributes:
        deck: Remaining wall; draws take the last tile
        players: The four seats
        current_turn: Seat whose turn it is
        last_discard: The discard open for claims, if any
        phase: Current phase
        winner: Winning seat once the game is over (None on a draw)
        win_type: How the winner won
        logs: Recent events, newest first
        pending_claims: Seats that may still claim ``last_discard``
        turn_count: Number of wall draws since the deal
        turn_from_claim: The current turn was taken by claiming a discard, not
            by drawing from the wall
    """
    deck: Tuple[Tile, ...]
    players: Tuple[PlayerState, ...]
    current_turn: int = 0
    last_discard: Optional[LastDiscard] = None
    phase: GamePhase = GamePhase.DEALING
    winner: Optional[int] = None
    win_type: Optional[WinType] = None
    logs: Tuple[str, ...] = ()
    pending_claims: Tuple[Claim, ...] = ()
    turn_count: int = 0
    turn_from_claim: bool = False

    @property
    def wall_count(self) -> int:
        return len(self.deck)

    @property
    def dealer(self) -> int:
        for player in self.players:
            if player.is_dealer:
                return player.seat
        return 0

    @property
    def is_over(self) -> bool:
        return self.phase == GamePhase.GAME_OVER

    @property
    def claims(self) -> Dict[int, Tuple[ActionType, ...]]:
        """Pending claim set as {seat: available actions}"""
        return {claim.seat: claim.actions for claim in self.pending_claims}

    def claim_actions(self, seat: int) -> Tuple[ActionType, ...]:
        for claim in self.pending_claims:
            if claim.seat == seat:
                return claim.actions
        return ()

    def with_player(self, player: PlayerState) -> 'GameState':
        """Copy with one seat replaced"""
        players = list(self.players)
        players[player.seat] = player
        return replace(self, players=tuple(players))

    def with_log(self, message: str) -> 'GameState':
        """Copy with ``message`` prepended to the event log"""
        return replace(self, logs=((message,) + self.logs)[:LOG_LIMIT])

    def __repr__(self) -> str:
        return (f"GameState(phase={self.phase.name}, current={self.current_turn}, "
                f"wall={self.wall_count})")
