"""
Mahjong Wall Module

Handles deck construction, shuffling, dealing and drawing. The wall is an
ordered tuple of tiles; draws always take the last tile.
"""

import random
from typing import List, Optional, Sequence, Tuple

from .errors import WallExhausted
from .tiles import Tile, TileSuit

NUM_TILES = 136
COPIES_PER_KIND = 4


def create_deck() -> List[Tile]:
    """Create a complete, unshuffled set of 136 tiles with ids 0-135"""
    tiles = []
    instance_id = 0

    # Numbered suits, in Wan, Tiao, Tong order
    for suit in (TileSuit.WAN, TileSuit.TIAO, TileSuit.TONG):
        for value in range(1, 10):
            for _ in range(COPIES_PER_KIND):
                tiles.append(Tile(suit, value, instance_id))
                instance_id += 1

    # Winds
    for value in range(1, 5):
        for _ in range(COPIES_PER_KIND):
            tiles.append(Tile(TileSuit.WIND, value, instance_id))
            instance_id += 1

    # Dragons
    for value in range(1, 4):
        for _ in range(COPIES_PER_KIND):
            tiles.append(Tile(TileSuit.DRAGON, value, instance_id))
            instance_id += 1

    return tiles


def shuffle(tiles: Sequence[Tile], rng: Optional[random.Random] = None) -> List[Tile]:
    """
    Return a shuffled copy of ``tiles``.

    Args:
        tiles: Tiles to shuffle (left unmodified)
        rng: Random source; the module-level generator when omitted
    """
    shuffled = list(tiles)
    (rng or random).shuffle(shuffled)
    return shuffled


def draw(deck: Sequence[Tile]) -> Tuple[Tile, Tuple[Tile, ...]]:
    """
    Draw one tile from the end of the wall.

    Returns:
        Tuple of (drawn tile, remaining wall)

    Raises:
        WallExhausted: if the wall is empty
    """
    if not deck:
        raise WallExhausted("Cannot draw from an empty wall")
    return deck[-1], tuple(deck[:-1])


def deal_hands(
    deck: Sequence[Tile],
    num_players: int = 4,
    hand_size: int = 13,
) -> Tuple[List[List[Tile]], Tuple[Tile, ...]]:
    """
    Deal initial hands one tile at a time, round-robin from seat 0.

    Returns:
        Tuple of (hands, remaining wall)
    """
    remaining = tuple(deck)
    hands: List[List[Tile]] = [[] for _ in range(num_players)]

    for _ in range(hand_size):
        for player_idx in range(num_players):
            tile, remaining = draw(remaining)
            hands[player_idx].append(tile)

    return hands, remaining
