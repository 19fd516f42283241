"""Season ratings: efficiency, RPI and schedule strength."""

from .calculator import RatingCalculator, RatingSnapshot, filter_games
from .efficiency import TeamSplit, estimate_possessions, team_splits
from .rpi import RPIComponents, calculate_rpi

__all__ = [
    "RPIComponents",
    "RatingCalculator",
    "RatingSnapshot",
    "TeamSplit",
    "calculate_rpi",
    "estimate_possessions",
    "filter_games",
    "team_splits",
]
