"""
Session Configuration

Seating and pacing options for a game session. Delays are in seconds and
only affect when scheduled commands fire, never what they do.
"""

from dataclasses import dataclass
from typing import Optional, Tuple


@dataclass
class SessionConfig:
    """
    Configuration for one game session.

    Seat order is fixed: seat 0 is the dealer and play moves 0 -> 1 -> 2 -> 3.
    """

    name: str = "Default"

    player_names: Tuple[str, str, str, str] = ("You", "AI East", "AI South", "AI West")

    # Seat controlled by the human; None lets the AI play every seat
    human_seat: Optional[int] = 0

    starting_score: int = 100

    # Pause after a discard nobody can claim, before the next seat draws
    auto_advance_delay: float = 0.5

    # Pause before an AI seat acts on its own turn
    ai_turn_delay: float = 1.5

    # Pause before an AI seat answers a claim window
    ai_response_delay: float = 1.0

    # Seed for the shuffle; None draws from system entropy
    seed: Optional[int] = None

    def __post_init__(self):
        if len(self.player_names) != 4:
            raise ValueError(f"Expected 4 player names, got {len(self.player_names)}")
        if self.human_seat is not None and not 0 <= self.human_seat <= 3:
            raise ValueError(f"Human seat must be 0-3 or None, got {self.human_seat}")
        for delay in (self.auto_advance_delay, self.ai_turn_delay, self.ai_response_delay):
            if delay < 0:
                raise ValueError(f"Delays must be non-negative, got {delay}")

    def is_ai(self, seat: int) -> bool:
        return seat != self.human_seat

    def __repr__(self) -> str:
        return f"SessionConfig({self.name})"


# Interactive pacing, one human at seat 0
DEFAULT_CONFIG = SessionConfig()

# No pauses, every seat played by the AI
INSTANT_CONFIG = SessionConfig(
    name="Instant",
    player_names=("AI Dealer", "AI East", "AI South", "AI West"),
    human_seat=None,
    auto_advance_delay=0.0,
    ai_turn_delay=0.0,
    ai_response_delay=0.0,
)
