"""
Mahjong Tiles

Defines the 136 physical tiles of a four-player table:
- 9 Wan (万) x4 = 36
- 9 Tiao (条) x4 = 36
- 9 Tong (筒) x4 = 36
- 4 Winds (东南西北) x4 = 16
- 3 Dragons (中发白) x4 = 12
Total: 136 tiles
"""

from enum import IntEnum
from dataclasses import dataclass
from typing import List, Sequence, Tuple
import numpy as np


class TileSuit(IntEnum):
    """Tile suits. The ordinal is also the hand display order."""
    WAN = 0     # 万 - Numbers 1-9
    TONG = 1    # 筒 - Numbers 1-9
    TIAO = 2    # 条 - Numbers 1-9
    WIND = 3    # 风 - East, South, West, North (1-4)
    DRAGON = 4  # 箭 - Red, Green, White (1-3)


class WindType(IntEnum):
    EAST = 1   # 东
    SOUTH = 2  # 南
    WEST = 3   # 西
    NORTH = 4  # 北


class DragonType(IntEnum):
    RED = 1    # 中
    GREEN = 2  # 发
    WHITE = 3  # 白


NUMBERED_SUITS = (TileSuit.WAN, TileSuit.TONG, TileSuit.TIAO)

# Number of distinct (suit, value) kinds
NUM_KINDS = 34

_SUIT_CHARS = {TileSuit.WAN: "万", TileSuit.TONG: "筒", TileSuit.TIAO: "条"}
WIND_NAMES = ["东", "南", "西", "北"]
DRAGON_NAMES = ["中", "发", "白"]

# First kind index of each suit
_SUIT_OFFSETS = {
    TileSuit.WAN: 0,
    TileSuit.TONG: 9,
    TileSuit.TIAO: 18,
    TileSuit.WIND: 27,
    TileSuit.DRAGON: 31,
}


@dataclass(frozen=True)
class Tile:
    """
    A single physical Mahjong tile.

    Attributes:
        suit: The suit of the tile
        value: 1-9 for numbered suits, 1-4 for winds, 1-3 for dragons
        id: Identifier of this physical tile (0-135 in a dealt deck)

    Two tiles compare equal only when they are the same physical tile.
    Use ``is_same_kind`` to compare for rule purposes.
    """
    suit: TileSuit
    value: int
    id: int = 0

    def __post_init__(self):
        if self.suit in NUMBERED_SUITS:
            if not 1 <= self.value <= 9:
                raise ValueError(f"Numbered suits must have value 1-9, got {self.value}")
        elif self.suit == TileSuit.WIND:
            if not 1 <= self.value <= 4:
                raise ValueError(f"Wind tiles must have value 1-4, got {self.value}")
        elif self.suit == TileSuit.DRAGON:
            if not 1 <= self.value <= 3:
                raise ValueError(f"Dragon tiles must have value 1-3, got {self.value}")

    @property
    def kind(self) -> Tuple[TileSuit, int]:
        """The (suit, value) pair shared by all four copies of this tile."""
        return (self.suit, self.value)

    @property
    def is_numbered(self) -> bool:
        return self.suit in NUMBERED_SUITS

    @property
    def is_honor(self) -> bool:
        """Check if tile is an honor tile (Wind or Dragon)"""
        return self.suit in (TileSuit.WIND, TileSuit.DRAGON)

    @property
    def tile_index(self) -> int:
        """
        Index of this tile's kind (0-33).

        Wan 0-8, Tong 9-17, Tiao 18-26, Winds 27-30, Dragons 31-33.
        """
        return _SUIT_OFFSETS[self.suit] + self.value - 1

    @property
    def name(self) -> str:
        """Display label, e.g. 5万, 东, 中"""
        if self.suit in NUMBERED_SUITS:
            return f"{self.value}{_SUIT_CHARS[self.suit]}"
        if self.suit == TileSuit.WIND:
            return WIND_NAMES[self.value - 1]
        return DRAGON_NAMES[self.value - 1]

    @property
    def sort_key(self) -> Tuple[int, int]:
        return (int(self.suit), self.value)

    def __repr__(self) -> str:
        return f"Tile({self.suit.name}, {self.value}, id={self.id})"

    def __str__(self) -> str:
        return self.name

    @classmethod
    def from_index(cls, tile_index: int, instance_id: int = 0) -> 'Tile':
        """
        Create a tile from its kind index (0-33).

        Args:
            tile_index: Kind index (0-33)
            instance_id: Physical id to give the tile
        """
        if not 0 <= tile_index < NUM_KINDS:
            raise ValueError(f"Tile index must be 0-33, got {tile_index}")
        if tile_index < 9:
            return cls(TileSuit.WAN, tile_index + 1, instance_id)
        elif tile_index < 18:
            return cls(TileSuit.TONG, tile_index - 9 + 1, instance_id)
        elif tile_index < 27:
            return cls(TileSuit.TIAO, tile_index - 18 + 1, instance_id)
        elif tile_index < 31:
            return cls(TileSuit.WIND, tile_index - 27 + 1, instance_id)
        else:
            return cls(TileSuit.DRAGON, tile_index - 31 + 1, instance_id)

    @classmethod
    def from_string(cls, s: str, instance_id: int = 0) -> 'Tile':
        """
        Create tile from its display label.

        Args:
            s: String like "1万", "9条", "东", "中", etc.
            instance_id: Physical id to give the tile
        """
        s = s.strip()

        if len(s) == 2 and s[0].isdigit():
            value = int(s[0])
            for suit, char in _SUIT_CHARS.items():
                if s[1] == char:
                    return cls(suit, value, instance_id)

        if s in WIND_NAMES:
            return cls(TileSuit.WIND, WIND_NAMES.index(s) + 1, instance_id)
        if s in DRAGON_NAMES:
            return cls(TileSuit.DRAGON, DRAGON_NAMES.index(s) + 1, instance_id)

        raise ValueError(f"Cannot parse tile string: {s}")


def is_same_kind(a: Tile, b: Tile) -> bool:
    """Two tiles are interchangeable for rule purposes iff suit and value match."""
    return a.suit == b.suit and a.value == b.value


def sort_hand(tiles: Sequence[Tile]) -> Tuple[Tile, ...]:
    """Sort tiles by suit (Wan, Tong, Tiao, Wind, Dragon) then value. Stable."""
    return tuple(sorted(tiles, key=lambda t: t.sort_key))


def count_array(tiles: Sequence[Tile]) -> np.ndarray:
    """
    Convert tiles to a 34-element array counting each kind.
    Used for hand analysis and observation encoding.
    """
    counts = np.zeros(NUM_KINDS, dtype=np.int8)
    for tile in tiles:
        counts[tile.tile_index] += 1
    return counts


def count_kind(tiles: Sequence[Tile], tile: Tile) -> int:
    """Count tiles of the same kind as ``tile``"""
    return sum(1 for t in tiles if is_same_kind(t, tile))


def tiles_from_string(s: str, start_id: int = 0) -> List[Tile]:
    """
    Build a list of tiles from space-separated labels, e.g. "1万 1万 东".
    Tiles get consecutive ids starting at ``start_id``.
    """
    return [Tile.from_string(part, start_id + i) for i, part in enumerate(s.split())]


# Convenience functions for creating specific tiles
def wan(value: int, instance_id: int = 0) -> Tile:
    """Create a Wan tile (1-9万)"""
    return Tile(TileSuit.WAN, value, instance_id)

def tong(value: int, instance_id: int = 0) -> Tile:
    """Create a Tong tile (1-9筒)"""
    return Tile(TileSuit.TONG, value, instance_id)

def tiao(value: int, instance_id: int = 0) -> Tile:
    """Create a Tiao tile (1-9条)"""
    return Tile(TileSuit.TIAO, value, instance_id)

def wind(wind_type: WindType, instance_id: int = 0) -> Tile:
    """Create a Wind tile (东南西北)"""
    return Tile(TileSuit.WIND, int(wind_type), instance_id)

def dragon(dragon_type: DragonType, instance_id: int = 0) -> Tile:
    """Create a Dragon tile (中发白)"""
    return Tile(TileSuit.DRAGON, int(dragon_type), instance_id)


# Named wind tiles
EAST = wind(WindType.EAST)
SOUTH = wind(WindType.SOUTH)
WEST = wind(WindType.WEST)
NORTH = wind(WindType.NORTH)

# Named dragon tiles
RED_DRAGON = dragon(DragonType.RED)
GREEN_DRAGON = dragon(DragonType.GREEN)
WHITE_DRAGON = dragon(DragonType.WHITE)
