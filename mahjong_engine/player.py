"""
Mahjong Player Module

Seat state and melds. Both are immutable values; the game module builds
new instances with ``dataclasses.replace`` on every transition.
"""

from enum import IntEnum
from dataclasses import dataclass
from typing import List, Optional, Tuple

from .tiles import Tile, count_kind, is_same_kind


class MeldType(IntEnum):
    """Types of melds (combinations) a player can have"""
    CHOW = 0            # 吃 - Sequence of 3 consecutive tiles in same suit
    PUNG = 1            # 碰 - 3 identical tiles
    KONG = 2            # 杠 - 4 identical tiles (exposed)
    CONCEALED_KONG = 3  # 暗杠 - 4 identical tiles (concealed)


@dataclass(frozen=True)
class Meld:
    """
    A committed group of tiles taken out of a hand.

    Attributes:
        meld_type: Type of meld (Chow, Pung, Kong, Concealed Kong)
        tiles: Tiles in the meld, in display order
        from_player: Seat that supplied the claimed tile (None for concealed kongs)
        claimed_tile: The discarded tile that completed the meld
    """
    meld_type: MeldType
    tiles: Tuple[Tile, ...]
    from_player: Optional[int] = None
    claimed_tile: Optional[Tile] = None

    def __post_init__(self):
        """Validate meld shape"""
        if self.meld_type == MeldType.CHOW:
            if len(self.tiles) != 3:
                raise ValueError("Chow must have exactly 3 tiles")
            if not self._is_valid_sequence():
                raise ValueError("Invalid Chow sequence")
        elif self.meld_type == MeldType.PUNG:
            if len(self.tiles) != 3:
                raise ValueError("Pung must have exactly 3 tiles")
            if not all(is_same_kind(t, self.tiles[0]) for t in self.tiles):
                raise ValueError("Pung tiles must be identical")
        elif self.meld_type in (MeldType.KONG, MeldType.CONCEALED_KONG):
            if len(self.tiles) != 4:
                raise ValueError("Kong must have exactly 4 tiles")
            if not all(is_same_kind(t, self.tiles[0]) for t in self.tiles):
                raise ValueError("Kong tiles must be identical")

    def _is_valid_sequence(self) -> bool:
        if not self.tiles[0].is_numbered:
            return False
        if not all(t.suit == self.tiles[0].suit for t in self.tiles):
            return False
        values = sorted(t.value for t in self.tiles)
        return values[1] == values[0] + 1 and values[2] == values[1] + 1

    @property
    def is_concealed(self) -> bool:
        return self.meld_type == MeldType.CONCEALED_KONG

    def __str__(self) -> str:
        tiles_str = " ".join(t.name for t in self.tiles)
        concealed = "暗" if self.is_concealed else "明"
        return f"[{concealed}{self.meld_type.name}: {tiles_str}]"


@dataclass(frozen=True)
class PlayerState:
    """
    One seat at the table.

    Attributes:
        seat: Seat index (0-3), fixed clockwise order
        name: Display name
        is_ai: Whether the seat is played by the AI policy
        hand: Concealed tiles, kept sorted
        melds: Declared melds
        discards: Discard pile, oldest first
        score: Current score
        is_dealer: Whether this seat is the dealer
    """
    seat: int
    name: str
    is_ai: bool = True
    hand: Tuple[Tile, ...] = ()
    melds: Tuple[Meld, ...] = ()
    discards: Tuple[Tile, ...] = ()
    score: int = 0
    is_dealer: bool = False

    def find_tile(self, tile_id: int) -> Optional[Tile]:
        """Get the tile in hand with the given id"""
        for tile in self.hand:
            if tile.id == tile_id:
                return tile
        return None

    def count(self, tile: Tile) -> int:
        """Count tiles in hand of the same kind as ``tile``"""
        return count_kind(self.hand, tile)

    def tiles_of_kind(self, tile: Tile) -> List[Tile]:
        return [t for t in self.hand if is_same_kind(t, tile)]

    def _first_of(self, tile: Tile, value: int) -> Optional[Tile]:
        for t in self.hand:
            if t.suit == tile.suit and t.value == value:
                return t
        return None

    def chow_options(self, tile: Tile) -> List[Tuple[Tile, Tile]]:
        """
        Pairs from hand that complete a Chow with ``tile``.
        Ordered from the lowest-valued sequence to the highest.
        Only valid for numbered suits.
        """
        if not tile.is_numbered:
            return []

        v = tile.value
        possible = []
        for low, high in ((v - 2, v - 1), (v - 1, v + 1), (v + 1, v + 2)):
            if low < 1 or high > 9:
                continue
            t1 = self._first_of(tile, low)
            t2 = self._first_of(tile, high)
            if t1 is not None and t2 is not None:
                possible.append((t1, t2))
        return possible

    def can_chow(self, tile: Tile) -> bool:
        return bool(self.chow_options(tile))

    def can_pung(self, tile: Tile) -> bool:
        """Check if player can form a Pung with the given discard"""
        return self.count(tile) >= 2

    def can_kong(self, tile: Tile) -> bool:
        """Check if player holds the other three copies of the given discard"""
        return self.count(tile) == 3

    def concealed_kong_options(self) -> List[Tile]:
        """First tile of every kind held four times"""
        options = []
        seen = set()
        for tile in self.hand:
            if tile.kind not in seen and self.count(tile) == 4:
                options.append(tile)
            seen.add(tile.kind)
        return options

    def get_all_tiles(self) -> List[Tile]:
        """Get all tiles (hand + melds)"""
        all_tiles = list(self.hand)
        for meld in self.melds:
            all_tiles.extend(meld.tiles)
        return all_tiles

    def __repr__(self) -> str:
        return f"PlayerState({self.seat}, hand={len(self.hand)}, melds={len(self.melds)})"

    def __str__(self) -> str:
        hand_str = " ".join(t.name for t in self.hand)
        melds_str = " | ".join(str(m) for m in self.melds) if self.melds else "None"
        return f"{self.name}: Hand[{hand_str}] Melds[{melds_str}]"
