"""Completed-game model consumed by the rating engine."""

from dataclasses import dataclass
from datetime import date
from typing import Optional


HOME = "home"
AWAY = "away"
NEUTRAL = "neutral"
LOCATIONS = (HOME, AWAY, NEUTRAL)


class MalformedGameError(ValueError):
    """Raised when a game record cannot enter the engine (missing/tied score, bad location)."""


def _score(value) -> Optional[int]:
    if value is None or value == "":
        return None
    try:
        return int(value)
    except (TypeError, ValueError) as exc:
        raise MalformedGameError(f"Invalid score value: {value!r}") from exc


@dataclass
class GameResult:
    """One directed record per team per completed game."""

    team_id: str
    opponent_id: Optional[str]
    team_score: int
    opponent_score: int
    location: str = NEUTRAL
    is_conference: bool = False
    season: str = ""
    eligible: bool = True
    game_id: str = ""
    game_date: Optional[date] = None
    is_postseason: bool = False
    is_national_tournament: bool = False

    # Box-score totals for the possession estimate (0 when unavailable)
    fga: float = 0.0
    oreb: float = 0.0
    turnovers: float = 0.0
    fta: float = 0.0
    opp_fga: float = 0.0
    opp_oreb: float = 0.0
    opp_turnovers: float = 0.0
    opp_fta: float = 0.0

    def __post_init__(self):
        """Reject records that are not a completed game with a single winner."""
        if not self.team_id:
            raise MalformedGameError("Game record is missing team_id")

        if self.team_score is None or self.opponent_score is None:
            raise MalformedGameError(
                f"Game {self.game_id or '?'} for {self.team_id} is missing a final score"
            )

        if self.team_score == self.opponent_score:
            raise MalformedGameError(
                f"Game {self.game_id or '?'} for {self.team_id} has no winner "
                f"({self.team_score}-{self.opponent_score})"
            )

        if self.location not in LOCATIONS:
            raise MalformedGameError(f"Invalid location: {self.location}")

        if self.opponent_id == "":
            self.opponent_id = None

    @property
    def is_win(self) -> bool:
        return self.team_score > self.opponent_score

    @property
    def has_box_score(self) -> bool:
        return self.fga > 0 and self.opp_fga > 0

    def to_dict(self) -> dict:
        """Convert game to dictionary."""
        return {
            "game_id": self.game_id,
            "team_id": self.team_id,
            "opponent_id": self.opponent_id,
            "team_score": self.team_score,
            "opponent_score": self.opponent_score,
            "location": self.location,
            "is_conference": self.is_conference,
            "season": self.season,
            "eligible": self.eligible,
            "game_date": self.game_date.isoformat() if self.game_date else None,
            "is_postseason": self.is_postseason,
            "is_national_tournament": self.is_national_tournament,
            "fga": self.fga,
            "oreb": self.oreb,
            "turnovers": self.turnovers,
            "fta": self.fta,
            "opp_fga": self.opp_fga,
            "opp_oreb": self.opp_oreb,
            "opp_turnovers": self.opp_turnovers,
            "opp_fta": self.opp_fta,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "GameResult":
        """Create game from dictionary."""
        game_date = data.get("game_date")
        if isinstance(game_date, str):
            game_date = date.fromisoformat(game_date[:10])

        opponent_id = data.get("opponent_id")
        return cls(
            team_id=str(data["team_id"]) if data.get("team_id") is not None else "",
            opponent_id=str(opponent_id) if opponent_id is not None else None,
            team_score=_score(data.get("team_score")),
            opponent_score=_score(data.get("opponent_score")),
            location=data.get("location", NEUTRAL),
            is_conference=bool(data.get("is_conference", False)),
            season=str(data.get("season", "")),
            eligible=bool(data.get("eligible", True)),
            game_id=str(data.get("game_id", "")),
            game_date=game_date,
            is_postseason=bool(data.get("is_postseason", False)),
            is_national_tournament=bool(data.get("is_national_tournament", False)),
            fga=float(data.get("fga") or 0.0),
            oreb=float(data.get("oreb") or 0.0),
            turnovers=float(data.get("turnovers") or 0.0),
            fta=float(data.get("fta") or 0.0),
            opp_fga=float(data.get("opp_fga") or 0.0),
            opp_oreb=float(data.get("opp_oreb") or 0.0),
            opp_turnovers=float(data.get("opp_turnovers") or 0.0),
            opp_fta=float(data.get("opp_fta") or 0.0),
        )
