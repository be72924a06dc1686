"""
Game Session Controller

Owns the single live ``GameState`` and is the only way commands reach the
state machine. Paced transitions (AI turns, AI claim responses, the draw
after an unclaimed discard) are timed commands on a virtual clock; when one
fires it goes through the same ``step`` validation as human input, and is
dropped if the state has moved on.
"""

import heapq
import logging
import random
from typing import Callable, Dict, List, Optional, Set, Tuple

from .config import DEFAULT_CONFIG, SessionConfig
from .errors import InvalidCommand, StaleAction
from .game import new_game, next_seat, step, valid_actions
from .state import CLAIM_PRIORITY, Action, ActionType, GamePhase, GameState

logger = logging.getLogger(__name__)

# Order of scheduled commands that fall due together; lower fires first
_FIRE_ORDER = {action_type: rank for rank, action_type in enumerate(CLAIM_PRIORITY)}
_FIRE_ORDER[ActionType.PASS] = len(CLAIM_PRIORITY)


class GameSession:
    """
    One table, one live game at a time.

    Attributes:
        config: Seating and pacing
        agent: Policy used for AI seats; needs ``get_action(state, seat)``
            and ``claim_action(seat, actions)``
        clock: Virtual time in seconds since the session object was created
        dropped_actions: Scheduled commands that expired before they fired
    """

    def __init__(self, agent, config: Optional[SessionConfig] = None):
        self.agent = agent
        self.config = config or DEFAULT_CONFIG
        self.rng = random.Random(self.config.seed)
        self.clock = 0.0
        self.dropped_actions: List[Action] = []

        self._state: Optional[GameState] = None
        self._timers: List[Tuple[float, int, int, int, Action]] = []
        self._sequence = 0
        # Bumped by every committed transition except a pass
        self._epoch = 0
        self._scheduled_seats: Set[int] = set()

    # --- Queries ---

    @property
    def state(self) -> Optional[GameState]:
        """Current snapshot, or None before the first session starts"""
        return self._state

    @property
    def pending_claims(self) -> Dict[int, Tuple[ActionType, ...]]:
        if self._state is None:
            return {}
        return self._state.claims

    @property
    def is_idle(self) -> bool:
        """True when nothing is scheduled: the game is over or waiting on the human"""
        return not self._timers

    def valid_actions(self, seat: int) -> List[Action]:
        if self._state is None or self._state.is_over:
            return []
        return valid_actions(self._state, seat)

    # --- Commands ---

    def start_new_session(self, seed: Optional[int] = None) -> GameState:
        """
        Reshuffle, reseat and deal a new game, discarding the current one.

        Args:
            seed: Reseed the shuffle before dealing
        """
        if seed is not None:
            self.rng.seed(seed)
        self._timers = []
        self._state = new_game(self.config, self.rng)
        logger.info(f"New session started, {self._state.wall_count} tiles in the wall")
        self._commit(self._state, None)
        return self._state

    def load(self, state: GameState) -> GameState:
        """Resume from a saved snapshot; anything scheduled is dropped."""
        self._timers = []
        self._commit(state, None)
        return self._state

    def discard(self, seat: int, tile_id: int) -> GameState:
        return self.submit(Action(ActionType.DISCARD, seat, tile_id))

    def claim(self, seat: int, action_type: ActionType) -> GameState:
        """Claim the last discard with WIN, KONG, PUNG or CHOW"""
        if action_type not in CLAIM_PRIORITY:
            raise InvalidCommand(f"{action_type.name} is not a claim")
        return self.submit(Action(action_type, seat))

    def pass_claim(self, seat: int) -> GameState:
        return self.submit(Action(ActionType.PASS, seat))

    def declare_self_draw_win(self, seat: int) -> GameState:
        if self._state is not None and self._state.phase != GamePhase.PLAYING:
            raise InvalidCommand("A self-draw win can only be declared on your own turn")
        return self.submit(Action(ActionType.WIN, seat))

    def declare_concealed_kong(self, seat: int, tile_id: int) -> GameState:
        return self.submit(Action(ActionType.CONCEALED_KONG, seat, tile_id))

    def submit(self, action: Action) -> GameState:
        """
        Apply a player command immediately.

        Raises:
            InvalidCommand: if the command is not allowed right now;
                the session state is unchanged
        """
        if self._state is None:
            raise InvalidCommand("No session in progress")
        if action.action_type == ActionType.DRAW:
            raise InvalidCommand("Draws are issued by the session, not by players")
        self._commit(step(self._state, action), action)
        return self._state

    # --- Scheduling ---

    def advance(self, seconds: float) -> GameState:
        """Move the clock forward, firing every command that falls due."""
        target = self.clock + seconds
        while self._timers and self._timers[0][0] <= target:
            self._fire_next()
        self.clock = target
        return self._state

    def run_until_idle(
        self,
        sleep: Optional[Callable[[float], None]] = None,
        max_steps: int = 10000,
    ) -> GameState:
        """
        Fire scheduled commands in time order until none are left.

        Args:
            sleep: Called with the wait before each command, for real-time pacing
            max_steps: Upper bound on commands fired
        """
        steps = 0
        while self._timers and steps < max_steps:
            due = self._timers[0][0]
            if sleep is not None and due > self.clock:
                sleep(due - self.clock)
            self._fire_next()
            steps += 1
        return self._state

    def _schedule(self, delay: float, action: Action) -> None:
        order = _FIRE_ORDER.get(action.action_type, 0)
        heapq.heappush(self._timers, (self.clock + delay, order, self._sequence, self._epoch, action))
        self._sequence += 1

    def _fire_next(self) -> None:
        due, _, _, epoch, action = heapq.heappop(self._timers)
        self.clock = max(self.clock, due)
        try:
            self._apply_scheduled(epoch, action)
        except StaleAction as e:
            self.dropped_actions.append(action)
            logger.debug(f"Dropped {e}")

    def _apply_scheduled(self, epoch: int, action: Action) -> None:
        if epoch != self._epoch:
            raise StaleAction(f"{action}: scheduled before the last transition")
        try:
            new_state = step(self._state, action)
        except InvalidCommand as e:
            # Let the seat be asked again after the next pass
            self._scheduled_seats.discard(action.seat)
            raise StaleAction(f"{action}: {e}") from e
        self._commit(new_state, action)

    def _commit(self, state: GameState, action: Optional[Action]) -> None:
        self._state = state
        if action is None or action.action_type != ActionType.PASS:
            self._epoch += 1
            self._scheduled_seats = set()
        self._schedule_followups()

    def _schedule_followups(self) -> None:
        state = self._state

        if state.phase == GamePhase.PLAYING:
            player = state.players[state.current_turn]
            if player.is_ai and player.seat not in self._scheduled_seats:
                self._scheduled_seats.add(player.seat)
                self._schedule(self.config.ai_turn_delay, self.agent.get_action(state, player.seat))

        elif state.phase == GamePhase.ACTION_WINDOW:
            if not state.pending_claims:
                self._schedule(self.config.auto_advance_delay,
                               Action(ActionType.DRAW, next_seat(state.last_discard.seat)))
                return
            for claim in state.pending_claims:
                if state.players[claim.seat].is_ai and claim.seat not in self._scheduled_seats:
                    self._scheduled_seats.add(claim.seat)
                    self._schedule(self.config.ai_response_delay,
                                   self.agent.claim_action(claim.seat, claim.actions))

    def __repr__(self) -> str:
        return f"GameSession({self.config.name}, state={self._state!r})"
