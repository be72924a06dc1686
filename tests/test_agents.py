"""
Tests for the heuristic AI policy
"""

import pytest

import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent))

from agents import HeuristicAgent, choose_claim, choose_discard
from mahjong_engine.game import step
from mahjong_engine.player import PlayerState
from mahjong_engine.state import Action, ActionType, GamePhase, GameState
from mahjong_engine.tiles import sort_hand, tiles_from_string


def sorted_hand(labels: str):
    return sort_hand(tiles_from_string(labels))


class TestChooseDiscard:
    """Discard priority"""

    def test_single_honor_first(self):
        hand = sorted_hand("1万 5万 5万 9筒 中 东 东")
        assert choose_discard(hand).name == "中"

    def test_paired_honors_are_kept(self):
        hand = sorted_hand("1万 2万 5筒 东 东")
        assert choose_discard(hand).name == "5筒"

    def test_isolated_numbered_tile(self):
        """No same-suit tile within one value"""
        hand = sorted_hand("1万 2万 5万 7筒 8筒")
        assert choose_discard(hand).name == "5万"

    def test_other_suits_are_not_neighbors(self):
        hand = sorted_hand("4万 5万 5筒 4条 6条")
        assert choose_discard(hand).name == "5筒"

    def test_copies_count_as_neighbors(self):
        """A pair is not isolated"""
        hand = sorted_hand("2筒 3筒 7条 7条")
        assert choose_discard(hand).name == "2筒"

    def test_falls_back_to_first_tile(self):
        hand = sorted_hand("2万 3万 4万 6筒 7筒 东 东")
        assert choose_discard(hand) == hand[0]

    def test_empty_hand(self):
        with pytest.raises(ValueError):
            choose_discard(())


class TestChooseClaim:
    def test_priority(self):
        assert choose_claim([ActionType.CHOW, ActionType.WIN]) == ActionType.WIN
        assert choose_claim([ActionType.PUNG, ActionType.KONG]) == ActionType.KONG
        assert choose_claim([ActionType.CHOW, ActionType.PUNG]) == ActionType.PUNG
        assert choose_claim([ActionType.CHOW]) == ActionType.CHOW

    def test_nothing_to_claim(self):
        assert choose_claim([]) == ActionType.PASS


class TestHeuristicAgent:
    def make_state(self, hands, current_turn: int = 0) -> GameState:
        players = tuple(
            PlayerState(seat=seat, name=f"P{seat}", hand=sort_hand(tiles_from_string(labels, 20 * seat)))
            for seat, labels in enumerate(hands)
        )
        return GameState(
            deck=tuple(tiles_from_string("9筒", 200)),
            players=players,
            current_turn=current_turn,
            phase=GamePhase.PLAYING,
        )

    def test_wins_when_complete(self):
        agent = HeuristicAgent()
        state = self.make_state(["1万 2万 3万 中 中", "东", "南", "西"])
        assert agent.get_action(state, 0) == Action(ActionType.WIN, 0)

    def test_discards_otherwise(self):
        agent = HeuristicAgent()
        state = self.make_state(["1万 2万 3万 中 白", "东", "南", "西"])
        action = agent.get_action(state, 0)
        assert action.action_type == ActionType.DISCARD
        assert state.players[0].find_tile(action.tile_id).name == "中"

    def test_nothing_to_do_off_turn(self):
        agent = HeuristicAgent()
        state = self.make_state(["1万 2万 3万 中 白", "东", "南", "西"])
        assert agent.get_action(state, 2) is None

    def test_claims_in_window(self):
        agent = HeuristicAgent()
        state = self.make_state(["5万 1筒 1筒 东 东", "4万 6万 9条 北", "5万 5万 7条 北", "1条 3条 7筒 南"])
        tile = state.players[0].hand[0]
        state = step(state, Action(ActionType.DISCARD, 0, tile.id))

        assert agent.get_action(state, 1) == Action(ActionType.CHOW, 1)
        assert agent.get_action(state, 2) == Action(ActionType.PUNG, 2)
        assert agent.get_action(state, 3) is None

    def test_actions_are_accepted(self):
        """Whatever the agent picks passes validation"""
        agent = HeuristicAgent()
        state = self.make_state(["1万 2万 3万 中 白", "东", "南", "西"])
        new_state = step(state, agent.get_action(state, 0))
        assert new_state.phase == GamePhase.ACTION_WINDOW

    def test_no_win_on_claimed_turn(self):
        """After taking a Pung the agent discards even with a complete hand"""
        agent = HeuristicAgent()
        state = self.make_state(["5万 1筒 1筒 东 东", "4万 6万 9条 北", "5万 5万 7条 7条", "1条 3条 7筒 南"])
        tile = state.players[0].hand[0]
        state = step(state, Action(ActionType.DISCARD, 0, tile.id))
        assert agent.get_action(state, 2) == Action(ActionType.WIN, 2)

        state = step(state, Action(ActionType.PUNG, 2))
        action = agent.get_action(state, 2)
        assert action.action_type == ActionType.DISCARD
        step(state, action)
