#!/usr/bin/env python3
"""
Self-play simulation for the Mahjong engine.

Plays complete games with the heuristic policy in every seat, using the
session controller with no pacing delays, and reports how they ended.

Usage:
    python simulate.py --games 100 --seed 7
"""

import argparse
import logging
import sys
from collections import Counter
from dataclasses import replace
from pathlib import Path
from typing import Dict, Optional

sys.path.insert(0, str(Path(__file__).parent))

from agents.heuristic_agent import HeuristicAgent
from mahjong_engine.config import INSTANT_CONFIG
from mahjong_engine.session import GameSession
from mahjong_engine.state import GameState, WinType

logger = logging.getLogger(__name__)


def play_game(session: GameSession, seed: Optional[int] = None) -> GameState:
    """Deal a new game and run it to the end."""
    session.start_new_session(seed=seed)
    state = session.run_until_idle()
    if not state.is_over:
        raise RuntimeError(f"Game stalled in phase {state.phase.name}")
    return state


def run_games(num_games: int, seed: Optional[int] = None) -> Dict[str, Counter]:
    """
    Play ``num_games`` games in one session.

    Returns:
        Counters of wins per seat and of how each game ended
    """
    session = GameSession(HeuristicAgent(), replace(INSTANT_CONFIG, seed=seed))
    wins_by_seat: Counter = Counter()
    outcomes: Counter = Counter()
    total_draws = 0

    for game_num in range(1, num_games + 1):
        state = play_game(session)
        total_draws += state.turn_count

        if state.winner is None:
            outcomes["draw"] += 1
            logger.info(f"Game {game_num}: draw after {state.turn_count} wall draws")
        else:
            wins_by_seat[state.winner] += 1
            outcomes[state.win_type.name.lower()] += 1
            logger.info(f"Game {game_num}: seat {state.winner} won by {state.win_type.name} "
                        f"({state.wall_count} tiles left)")
        logger.debug(f"Final log: {state.logs[:3]}")

    outcomes["wall_draws"] = total_draws
    return {"wins_by_seat": wins_by_seat, "outcomes": outcomes}


def print_summary(results: Dict[str, Counter], num_games: int):
    wins_by_seat = results["wins_by_seat"]
    outcomes = results["outcomes"]

    print("\n" + "=" * 40)
    print(f"SIMULATION RESULTS ({num_games} games)")
    print("=" * 40)
    for seat in range(4):
        wins = wins_by_seat[seat]
        print(f"  Seat {seat}: {wins:4d} wins ({wins / num_games:.1%})")
    print(f"  Self-draw wins: {outcomes[WinType.SELF_DRAW.name.lower()]}")
    print(f"  Discard wins:   {outcomes[WinType.DISCARD.name.lower()]}")
    print(f"  Draws:          {outcomes['draw']}")
    print(f"  Avg wall draws: {outcomes['wall_draws'] / num_games:.1f}")


def main():
    parser = argparse.ArgumentParser(description="Simulate Mahjong games between heuristic AI seats")
    parser.add_argument("--games", type=int, default=10,
                        help="Number of games to play")
    parser.add_argument("--seed", type=int, default=None,
                        help="Seed for the shuffle")
    parser.add_argument("--log-level", type=str, default="WARNING",
                        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
                        help="Logging level")

    args = parser.parse_args()

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    if args.games < 1:
        logger.error(f"Number of games must be positive, got {args.games}")
        sys.exit(1)

    results = run_games(args.games, args.seed)
    print_summary(results, args.games)


if __name__ == "__main__":
    main()
