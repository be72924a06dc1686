"""
Tests for winning hand detection
"""

import itertools
import random

import pytest

import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent))

from mahjong_engine.player import Meld, MeldType
from mahjong_engine.tiles import NUM_KINDS, Tile, tiles_from_string, wan, tong
from mahjong_engine.wall import create_deck, shuffle
from mahjong_engine.winning import can_win, find_winning_shape, winning_kinds


def hand(labels: str):
    return tiles_from_string(labels)


def _runs_only(counts) -> bool:
    """Sweep left to right; the lowest remaining kind must start a run"""
    counts = list(counts)
    for i in range(NUM_KINDS):
        n = counts[i]
        if n == 0:
            continue
        if i >= 27 or i % 9 > 6 or counts[i + 1] < n or counts[i + 2] < n:
            return False
        counts[i + 1] -= n
        counts[i + 2] -= n
    return True


def brute_force_win(tiles) -> bool:
    """Try every pair and every choice of triplets, then require runs for the rest"""
    counts = [0] * NUM_KINDS
    for tile in tiles:
        counts[tile.tile_index] += 1
    if len(tiles) % 3 != 2:
        return False

    for pair in range(NUM_KINDS):
        if counts[pair] < 2:
            continue
        rest = list(counts)
        rest[pair] -= 2
        candidates = [k for k in range(NUM_KINDS) if rest[k] >= 3]
        for picks in itertools.product((False, True), repeat=len(candidates)):
            left = list(rest)
            for kind, take in zip(candidates, picks):
                if take:
                    left[kind] -= 3
            if _runs_only(left):
                return True
    return False


def random_winning_hand(rng: random.Random):
    """Pair plus four random groups, never more than four copies of a kind"""
    while True:
        counts = [0] * NUM_KINDS
        counts[rng.randrange(NUM_KINDS)] += 2
        for _ in range(4):
            if rng.random() < 0.5:
                kinds = [rng.randrange(NUM_KINDS)] * 3
            else:
                suit = rng.randrange(3)
                start = suit * 9 + rng.randrange(7)
                kinds = [start, start + 1, start + 2]
            for kind in kinds:
                counts[kind] += 1
        if max(counts) <= 4:
            break

    kinds = [kind for kind, n in enumerate(counts) for _ in range(n)]
    tiles = [Tile.from_index(kind, tile_id) for tile_id, kind in enumerate(kinds)]
    rng.shuffle(tiles)
    return tiles


class TestCanWin:
    """Pair plus groups"""

    def test_four_runs_and_pair(self):
        """Four numbered runs plus a pair of 5万"""
        tiles = hand("1万 2万 3万 1筒 2筒 3筒 4条 5条 6条 7条 8条 9条 5万 5万")
        assert len(tiles) == 14
        assert can_win(tiles)

    def test_isolated_dragon_does_not_win(self):
        """Same hand with the pair replaced by a lone dragon and a stray tile"""
        tiles = hand("1万 2万 3万 1筒 2筒 3筒 4条 5条 6条 7条 8条 9条 5万 中")
        assert not can_win(tiles)

    def test_triplets(self):
        tiles = hand("东 东 东 中 中 中 1万 1万 1万 9筒 9筒 9筒 白 白")
        assert can_win(tiles)

    def test_honors_never_form_runs(self):
        tiles = hand("东 南 西 1万 2万 3万 1筒 2筒 3筒 4条 5条 6条 9条 9条")
        assert not can_win(tiles)

    def test_runs_do_not_wrap(self):
        tiles = hand("8万 9万 1万 1筒 2筒 3筒 4条 5条 6条 7条 8条 9条 5万 5万")
        assert not can_win(tiles)

    def test_runs_do_not_cross_suits(self):
        tiles = hand("8万 9万 1筒 2筒 3筒 4筒 4条 5条 6条 7条 8条 9条 5万 5万")
        assert not can_win(tiles)

    def test_wrong_size_is_never_a_win(self):
        """Hand size must be 2 mod 3"""
        assert not can_win(hand("1万 2万 3万 5万 5万 5万 9筒 9筒 9筒 东 东 东 中"))
        assert not can_win(hand("5万 5万 5万"))
        assert not can_win([])

    def test_pair_alone(self):
        assert can_win(hand("中 中"))

    def test_needs_backtracking(self):
        """1万 x3 must be read as a pair plus a run here, not as a triplet"""
        tiles = hand("1万 1万 1万 2万 3万 5筒 6筒 7筒 东 东 东 9条 9条 9条")
        assert can_win(tiles)
        assert can_win(hand("1万 1万 1万 2万 2万 2万 3万 3万"))
        assert not can_win(hand("1万 1万 1万 2万 3万 5万 5万 9筒"))

    def test_order_does_not_matter(self):
        tiles = hand("1万 2万 3万 1筒 2筒 3筒 4条 5条 6条 7条 8条 9条 5万 5万")
        shuffled = list(tiles)
        for seed in range(5):
            random.Random(seed).shuffle(shuffled)
            assert can_win(shuffled)
            assert can_win(list(reversed(shuffled)))

    def test_with_declared_melds(self):
        """Melds count as resolved groups; only the concealed hand is split"""
        melds = (
            Meld(MeldType.PUNG, tuple(tiles_from_string("东 东 东", 100))),
            Meld(MeldType.CHOW, tuple(tiles_from_string("1万 2万 3万", 110))),
        )
        tiles = hand("4条 5条 6条 7筒 8筒 9筒 5万 5万")
        assert can_win(tiles, melds)
        assert not can_win(hand("4条 5条 6条 7筒 8筒 9筒 5万 中"), melds)


class TestWinningShape:
    def test_shape_contents(self):
        tiles = hand("1万 2万 3万 1筒 2筒 3筒 4条 5条 6条 7条 8条 9条 5万 5万")
        shape = find_winning_shape(tiles)
        assert shape is not None
        assert shape.pair == wan(5).tile_index
        assert len(shape.groups) == 4
        assert (0, 1, 2) in shape.groups

    def test_no_shape(self):
        assert find_winning_shape(hand("1万 5万")) is None

    def test_describe(self):
        shape = find_winning_shape(hand("7筒 8筒 9筒 白 白"))
        assert shape.describe() == "7筒 8筒 9筒 | 白 白"


class TestWinningKinds:
    """Kinds that complete a hand one tile short"""

    def test_two_sided_wait(self):
        tiles = hand("2万 3万 1筒 2筒 3筒 4条 5条 6条 7条 8条 9条 5万 5万")
        waits = winning_kinds(tiles)
        assert waits == [wan(1).tile_index, wan(4).tile_index]

    def test_single_wait(self):
        waits = winning_kinds(hand("中"))
        assert waits == [Tile.from_string("中").tile_index]

    def test_not_one_short(self):
        assert winning_kinds(hand("5万 5万")) == []

    def test_fifth_copy_is_not_a_wait(self):
        tiles = hand("5筒 5筒 5筒 5筒 6筒 7筒 8筒")
        waits = winning_kinds(tiles)
        assert tong(5).tile_index not in waits
        assert waits == [tong(8).tile_index]


class TestAgainstBruteForce:
    """Backtracking search agrees with exhaustive enumeration"""

    @pytest.mark.parametrize("seed", range(4))
    def test_random_deals(self, seed):
        rng = random.Random(seed)
        deck = create_deck()
        for _ in range(50):
            tiles = shuffle(deck, rng)[:14]
            assert can_win(tiles) == brute_force_win(tiles)

    @pytest.mark.parametrize("seed", range(4))
    def test_random_winning_hands(self, seed):
        rng = random.Random(seed)
        for _ in range(50):
            tiles = random_winning_hand(rng)
            assert brute_force_win(tiles)
            assert can_win(tiles)

    @pytest.mark.parametrize("seed", range(4))
    def test_one_tile_swapped(self, seed):
        """Near misses: a winning hand with one tile replaced"""
        rng = random.Random(seed)
        for _ in range(50):
            tiles = random_winning_hand(rng)
            tiles[rng.randrange(len(tiles))] = Tile.from_index(rng.randrange(NUM_KINDS), 500)
            assert can_win(tiles) == brute_force_win(tiles)
