"""
Winning hand detection.

A standard winning hand is one pair plus (n - 2) / 3 groups, where a group
is a triplet of one kind or a run of three consecutive values in one
numbered suit. Declared melds are already-resolved groups and are not
re-checked; only the concealed hand is decomposed.
"""

from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple
import numpy as np

from .player import Meld
from .tiles import NUM_KINDS, Tile, count_array

# Kinds below this index belong to numbered suits
_HONOR_START = 27


@dataclass(frozen=True)
class WinningShape:
    """
    One decomposition of a winning hand.

    Attributes:
        pair: Kind index of the pair
        groups: Kind indices of each triplet or run
    """
    pair: int
    groups: Tuple[Tuple[int, int, int], ...]

    def describe(self) -> str:
        def label(idx: int) -> str:
            return Tile.from_index(idx).name
        parts = [" ".join(label(i) for i in group) for group in self.groups]
        parts.append(f"{label(self.pair)} {label(self.pair)}")
        return " | ".join(parts)


def find_winning_shape(hand: Sequence[Tile], melds: Sequence[Meld] = ()) -> Optional[WinningShape]:
    """
    Find a pair-plus-groups decomposition of ``hand``.

    Args:
        hand: Concealed tiles, including the winning tile
        melds: Declared melds (accepted as valid groups)

    Returns:
        The first decomposition found, or None if the hand does not win
    """
    if len(hand) % 3 != 2:
        return None
    return _shape_from_counts(count_array(hand), (len(hand) - 2) // 3)


def can_win(hand: Sequence[Tile], melds: Sequence[Meld] = ()) -> bool:
    """Check whether ``hand`` forms a standard winning shape."""
    return find_winning_shape(hand, melds) is not None


def winning_kinds(hand: Sequence[Tile], melds: Sequence[Meld] = ()) -> List[int]:
    """
    Kind indices that would complete a hand one tile short of winning.

    Kinds the hand already holds four of are skipped; there is no fifth copy.
    """
    if len(hand) % 3 != 1:
        return []

    counts = count_array(hand)
    groups_needed = (len(hand) - 1) // 3
    waits = []
    for idx in range(NUM_KINDS):
        if counts[idx] >= 4:
            continue
        counts[idx] += 1
        if _shape_from_counts(counts, groups_needed) is not None:
            waits.append(idx)
        counts[idx] -= 1
    return waits


def _shape_from_counts(counts: np.ndarray, groups_needed: int) -> Optional[WinningShape]:
    """Try every kind with two or more copies as the pair."""
    for pair_idx in np.flatnonzero(counts >= 2):
        counts[pair_idx] -= 2
        groups = _decompose(counts, groups_needed)
        counts[pair_idx] += 2
        if groups is not None:
            return WinningShape(int(pair_idx), tuple(groups))
    return None


def _decompose(counts: np.ndarray, groups_needed: int) -> Optional[List[Tuple[int, int, int]]]:
    """
    Recursively split ``counts`` into exactly ``groups_needed`` groups.

    Always works on the smallest remaining kind, trying a triplet first and
    then a run starting at that kind. ``counts`` is restored before returning.
    """
    remaining = np.flatnonzero(counts)
    if len(remaining) == 0:
        return [] if groups_needed == 0 else None
    if groups_needed == 0:
        return None

    first = int(remaining[0])

    # Try triplet
    if counts[first] >= 3:
        counts[first] -= 3
        rest = _decompose(counts, groups_needed - 1)
        counts[first] += 3
        if rest is not None:
            return [(first, first, first)] + rest

    # Try run - numbered suits only, starting at values 1-7
    if first < _HONOR_START and first % 9 <= 6:
        run = [first, first + 1, first + 2]
        if counts[first + 1] > 0 and counts[first + 2] > 0:
            counts[run] -= 1
            rest = _decompose(counts, groups_needed - 1)
            counts[run] += 1
            if rest is not None:
                return [(first, first + 1, first + 2)] + rest

    return None
