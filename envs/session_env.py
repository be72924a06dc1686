"""
Mahjong Session Gymnasium Environment

Exposes a game session to a learning agent. The agent sits in one seat; the
other three seats are played by the heuristic policy with no pacing delays.
"""

from dataclasses import replace
from typing import Any, Dict, List, Optional, Tuple

import gymnasium as gym
from gymnasium import spaces
import numpy as np

from agents.heuristic_agent import HeuristicAgent
from mahjong_engine.config import INSTANT_CONFIG
from mahjong_engine.session import GameSession
from mahjong_engine.state import Action, ActionType, GameState
from mahjong_engine.tiles import NUM_KINDS, count_array
from mahjong_engine.winning import winning_kinds


class MahjongSessionEnv(gym.Env):
    """
    Four-seat Mahjong environment.

    Observation Space:
        A dictionary containing:
        - hand: (34,) int8 - Count of each tile kind in hand
        - melds: (4, 34) int8 - Tiles in each seat's melds
        - discards: (4, 34) int8 - Discard pile counts for each seat
        - last_discard: (34,) int8 - One-hot encoding of the discard open for claims
        - valid_actions: (73,) int8 - Binary mask of valid actions
        - game_info: (6,) float32 - [current_turn, phase, wall_remaining,
                                     is_my_turn, can_win, num_waiting_kinds]

    Action Space:
        Discrete(73):
        - 0-33: Discard tile kind 0-33
        - 34-67: Concealed kong of tile kind 0-33
        - 68: Win
        - 69: Kong the last discard
        - 70: Pung the last discard
        - 71: Chow the last discard
        - 72: Pass
    """

    metadata = {"render_modes": ["human", "ansi"], "render_fps": 1}

    ACTION_DISCARD_START = 0
    ACTION_CONCEALED_KONG_START = 34
    ACTION_WIN = 68
    ACTION_KONG = 69
    ACTION_PUNG = 70
    ACTION_CHOW = 71
    ACTION_PASS = 72
    NUM_ACTIONS = 73

    MAX_EPISODE_STEPS = 1000

    _SINGLE_ACTIONS = {
        ActionType.WIN: ACTION_WIN,
        ActionType.KONG: ACTION_KONG,
        ActionType.PUNG: ACTION_PUNG,
        ActionType.CHOW: ACTION_CHOW,
        ActionType.PASS: ACTION_PASS,
    }

    def __init__(
        self,
        player_idx: int = 0,
        seed: Optional[int] = None,
        render_mode: Optional[str] = None,
    ):
        """
        Args:
            player_idx: Seat played by the agent (0-3); seat 0 deals
            seed: Seed for the first shuffle
            render_mode: Rendering mode ("human" or "ansi")
        """
        super().__init__()

        self.player_idx = player_idx
        self.render_mode = render_mode

        names = list(INSTANT_CONFIG.player_names)
        names[player_idx] = "Agent"
        self.config = replace(
            INSTANT_CONFIG,
            name="Env",
            player_names=tuple(names),
            human_seat=player_idx,
            seed=seed,
        )
        self.session = GameSession(HeuristicAgent(), self.config)

        self.observation_space = spaces.Dict({
            "hand": spaces.Box(low=0, high=4, shape=(NUM_KINDS,), dtype=np.int8),
            "melds": spaces.Box(low=0, high=4, shape=(4, NUM_KINDS), dtype=np.int8),
            "discards": spaces.Box(low=0, high=4, shape=(4, NUM_KINDS), dtype=np.int8),
            "last_discard": spaces.Box(low=0, high=1, shape=(NUM_KINDS,), dtype=np.int8),
            "valid_actions": spaces.Box(low=0, high=1, shape=(self.NUM_ACTIONS,), dtype=np.int8),
            "game_info": spaces.Box(low=0, high=200, shape=(6,), dtype=np.float32),
        })
        self.action_space = spaces.Discrete(self.NUM_ACTIONS)

        self._episode_reward = 0.0
        self._episode_length = 0

    @property
    def state(self) -> GameState:
        return self.session.state

    def reset(
        self,
        seed: Optional[int] = None,
        options: Optional[Dict] = None,
    ) -> Tuple[Dict[str, np.ndarray], Dict]:
        """
        Deal a new game and play the other seats until the agent must act.

        Args:
            seed: Random seed
            options: Additional options (unused)
        """
        super().reset(seed=seed)

        self.session.start_new_session(seed=seed)
        self.session.run_until_idle()

        self._episode_reward = 0.0
        self._episode_length = 0

        return self._get_observation(), self._get_info()

    def step(self, action: int) -> Tuple[Dict[str, np.ndarray], float, bool, bool, Dict]:
        """
        Apply the agent's action, then let the other seats play until the
        agent must act again or the game ends.
        """
        self._episode_length += 1
        reward = 0.0

        valid = self.session.valid_actions(self.player_idx)
        game_action = self._action_to_game_action(int(action), valid)
        if game_action is None:
            # Invalid action - apply penalty and substitute a valid one
            reward -= 1.0
            if not valid:
                return self._finish_step(reward)
            game_action = valid[int(self.np_random.integers(len(valid)))]

        self.session.submit(game_action)
        self.session.run_until_idle()

        if self.state.is_over:
            reward += self._outcome_reward(self.state)
        return self._finish_step(reward)

    def _finish_step(self, reward: float) -> Tuple[Dict[str, np.ndarray], float, bool, bool, Dict]:
        self._episode_reward += reward
        terminated = self.state.is_over
        truncated = not terminated and self._episode_length >= self.MAX_EPISODE_STEPS

        info = self._get_info()
        if terminated or truncated:
            info["episode"] = {
                "r": self._episode_reward,
                "l": self._episode_length,
                "winner": self.state.winner,
            }
        return self._get_observation(), reward, terminated, truncated, info

    def _outcome_reward(self, state: GameState) -> float:
        if state.winner is None:
            return 0.0
        return 1.0 if state.winner == self.player_idx else -1.0

    def _get_observation(self) -> Dict[str, np.ndarray]:
        """Get current observation for the agent."""
        state = self.state
        player = state.players[self.player_idx]

        melds = np.zeros((4, NUM_KINDS), dtype=np.int8)
        discards = np.zeros((4, NUM_KINDS), dtype=np.int8)
        for p in state.players:
            for meld in p.melds:
                for tile in meld.tiles:
                    melds[p.seat, tile.tile_index] += 1
            for tile in p.discards:
                discards[p.seat, tile.tile_index] += 1

        last_discard = np.zeros(NUM_KINDS, dtype=np.int8)
        if state.last_discard is not None and not state.is_over:
            last_discard[state.last_discard.tile.tile_index] = 1

        valid_mask = self._get_valid_actions_mask()
        game_info = np.array([
            state.current_turn,
            state.phase.value,
            state.wall_count,
            1 if state.current_turn == self.player_idx else 0,
            valid_mask[self.ACTION_WIN],
            len(winning_kinds(player.hand, player.melds)),
        ], dtype=np.float32)

        return {
            "hand": count_array(player.hand),
            "melds": melds,
            "discards": discards,
            "last_discard": last_discard,
            "valid_actions": valid_mask,
            "game_info": game_info,
        }

    def _get_valid_actions_mask(self) -> np.ndarray:
        """Get binary mask of valid actions."""
        mask = np.zeros(self.NUM_ACTIONS, dtype=np.int8)
        for action in self.session.valid_actions(self.player_idx):
            mask[self._game_action_to_idx(action)] = 1
        return mask

    def _tile_index_of(self, tile_id: int) -> int:
        return self.state.players[self.player_idx].find_tile(tile_id).tile_index

    def _game_action_to_idx(self, action: Action) -> int:
        """Convert game Action to action index."""
        if action.action_type == ActionType.DISCARD:
            return self.ACTION_DISCARD_START + self._tile_index_of(action.tile_id)
        if action.action_type == ActionType.CONCEALED_KONG:
            return self.ACTION_CONCEALED_KONG_START + self._tile_index_of(action.tile_id)
        return self._SINGLE_ACTIONS[action.action_type]

    def _action_to_game_action(self, action_idx: int, valid: List[Action]) -> Optional[Action]:
        """Find the valid game Action for an action index, if there is one."""
        for candidate in valid:
            if self._game_action_to_idx(candidate) == action_idx:
                return candidate
        return None

    def _get_info(self) -> Dict[str, Any]:
        """Get additional info about the environment state."""
        state = self.state
        return {
            "phase": state.phase.name,
            "current_turn": state.current_turn,
            "wall_remaining": state.wall_count,
            "winner": state.winner,
        }

    def render(self) -> Optional[str]:
        """Render the environment."""
        if self.render_mode == "human":
            print(self._render_ansi())
        elif self.render_mode == "ansi":
            return self._render_ansi()
        return None

    def _render_ansi(self) -> str:
        """Render as text."""
        state = self.state
        lines = []
        lines.append(f"=== Mahjong - Draw {state.turn_count} ===")
        lines.append(f"Phase: {state.phase.name}")
        lines.append(f"Current Seat: {state.current_turn}")
        lines.append(f"Wall Remaining: {state.wall_count}")

        if state.last_discard is not None:
            lines.append(f"Last Discard: {state.last_discard.tile.name} (P{state.last_discard.seat})")

        lines.append("")
        lines.append(f"--- Your Seat (Player {self.player_idx}) ---")
        lines.append(str(state.players[self.player_idx]))

        if state.logs:
            lines.append("")
            lines.append("--- Recent Events ---")
            for message in state.logs[:5]:
                lines.append(f"  {message}")

        return "\n".join(lines)

    def close(self):
        """Clean up resources."""
        pass


# Register the environment
def register_envs():
    """Register the Mahjong environment with Gymnasium."""
    gym.register(
        id="TableMahjong-v0",
        entry_point="envs.session_env:MahjongSessionEnv",
        max_episode_steps=MahjongSessionEnv.MAX_EPISODE_STEPS,
    )
