"""
Mahjong Gymnasium Environments
"""

from .session_env import MahjongSessionEnv, register_envs

__all__ = ["MahjongSessionEnv", "register_envs"]
