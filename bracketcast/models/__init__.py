"""Core data models."""

from .game import AWAY, HOME, LOCATIONS, NEUTRAL, GameResult, MalformedGameError
from .team import Team

__all__ = [
    "AWAY",
    "HOME",
    "LOCATIONS",
    "NEUTRAL",
    "GameResult",
    "MalformedGameError",
    "Team",
]
