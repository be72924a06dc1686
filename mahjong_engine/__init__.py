"""
Mahjong Game Engine
Four-seat table rules: tiles, dealing, claims and win detection.

The session controller takes its AI policy from the caller.
"""

from .tiles import Tile, TileSuit, sort_hand, is_same_kind
from .player import PlayerState, Meld, MeldType
from .wall import create_deck, shuffle
from .winning import can_win, find_winning_shape
from .state import GameState, GamePhase, WinType, Action, ActionType
from .game import new_game, step, valid_actions
from .config import SessionConfig
from .errors import InvalidCommand, StaleAction
from .session import GameSession

__version__ = "0.1.0"
__all__ = [
    "GameSession",
    "Tile",
    "TileSuit",
    "sort_hand",
    "is_same_kind",
    "PlayerState",
    "Meld",
    "MeldType",
    "create_deck",
    "shuffle",
    "can_win",
    "find_winning_shape",
    "GameState",
    "GamePhase",
    "WinType",
    "Action",
    "ActionType",
    "new_game",
    "step",
    "valid_actions",
    "SessionConfig",
    "InvalidCommand",
    "StaleAction",
]
