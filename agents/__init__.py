"""
Mahjong Agents
"""

from .heuristic_agent import HeuristicAgent, choose_claim, choose_discard

__all__ = [
    "HeuristicAgent",
    "choose_claim",
    "choose_discard",
]
