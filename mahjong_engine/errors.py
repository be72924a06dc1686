"""
Engine exceptions.
"""


class MahjongEngineError(Exception):
    """Base class for all engine errors"""


class InvalidCommand(MahjongEngineError):
    """
    A command whose preconditions do not hold for the current state
    (wrong phase, wrong seat, tile not in hand, action not offered).
    The state it was applied to is left untouched.
    """


class StaleAction(InvalidCommand):
    """A scheduled command whose preconditions expired before it fired."""


class WallExhausted(MahjongEngineError):
    """A draw was attempted on an empty wall."""
