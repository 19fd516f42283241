"""League file loading and validation."""

from .loader import DataLoader, League, LeagueValidationError
from .validators import validate_games_payload, validate_league_payload, validate_teams_payload

__all__ = [
    "DataLoader",
    "League",
    "LeagueValidationError",
    "validate_games_payload",
    "validate_league_payload",
    "validate_teams_payload",
]
