"""Data loader for league files."""

import json
import logging
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import List, Optional

import numpy as np
import pandas as pd

from ..config import EngineConfig
from ..models.game import AWAY, HOME, NEUTRAL, GameResult
from ..models.team import Team
from .validators import validate_league_payload

logger = logging.getLogger(__name__)


class LeagueValidationError(ValueError):
    """Raised when a league file fails schema validation."""

    def __init__(self, errors: List[str]):
        self.errors = errors
        preview = "; ".join(errors[:5])
        more = f" (+{len(errors) - 5} more)" if len(errors) > 5 else ""
        super().__init__(f"Invalid league payload: {preview}{more}")


@dataclass
class League:
    """One season of teams and directed game records."""

    season: str
    teams: List[Team] = field(default_factory=list)
    games: List[GameResult] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "season": self.season,
            "teams": [t.to_dict() for t in self.teams],
            "games": [g.to_dict() for g in self.games],
        }

    @classmethod
    def from_dict(cls, data: dict) -> "League":
        season = str(data.get("season", ""))
        games = []
        for row in data.get("games", []):
            if season and not row.get("season"):
                row = dict(row, season=season)
            games.append(GameResult.from_dict(row))
        return cls(
            season=season,
            teams=[Team.from_dict(t) for t in data.get("teams", [])],
            games=games,
        )


class DataLoader:
    """Loads and saves league data as JSON."""

    @staticmethod
    def load_league_from_json(file_path: str, strict: bool = True) -> League:
        """
        Load a league file.

        Args:
            file_path: Path to JSON file with ``season``, ``teams`` and ``games``
            strict: Raise LeagueValidationError on schema problems instead of
                logging them

        Returns:
            League object
        """
        with open(file_path, "r") as f:
            data = json.load(f)

        errors = validate_league_payload(data)
        if errors:
            if strict:
                raise LeagueValidationError(errors)
            for err in errors:
                logger.warning("League file %s: %s", file_path, err)

        league = League.from_dict(data)
        logger.info(
            "Loaded %s: %d teams, %d game records (season %s)",
            file_path,
            len(league.teams),
            len(league.games),
            league.season or "?",
        )
        return league

    @staticmethod
    def save_league_to_json(league: League, file_path: str) -> None:
        with open(file_path, "w") as f:
            json.dump(league.to_dict(), f, indent=2)

    @staticmethod
    def load_config_from_json(file_path: str) -> EngineConfig:
        """Load an EngineConfig from a (possibly partial) JSON object."""
        with open(file_path, "r") as f:
            data = json.load(f)
        return EngineConfig.from_dict(data)

    @staticmethod
    def save_report_to_json(report: dict, file_path: str) -> None:
        with open(file_path, "w") as f:
            json.dump(report, f, indent=2)

    @staticmethod
    def save_rankings_to_csv(rankings: pd.DataFrame, file_path: str) -> None:
        rankings.to_csv(file_path, index=False)

    @staticmethod
    def create_sample_data(
        output_path: Optional[str] = None,
        num_teams: int = 32,
        seed: int = 2026,
        season: str = "2025-26",
    ) -> League:
        """
        Create a synthetic league for demos and smoke tests.

        Teams are split into conferences of eight with a full conference round
        robin, a handful of non-conference games, one game each against a
        non-member opponent, and a four-team neutral-site conference
        tournament at the end of the season.

        Args:
            output_path: Optional path to save the league JSON
            num_teams: Number of member teams
            seed: RNG seed
            season: Season label

        Returns:
            League object
        """
        if num_teams < 2:
            raise ValueError("num_teams must be at least 2")

        rng = np.random.default_rng(seed)
        teams = []
        strength = {}
        for i in range(num_teams):
            team_id = f"T{i + 1:03d}"
            teams.append(
                Team(
                    team_id=team_id,
                    name=f"Sample College {i + 1}",
                    conference=f"Conference {i // 8 + 1}",
                    latitude=round(float(rng.uniform(30.0, 47.0)), 4),
                    longitude=round(float(rng.uniform(-120.0, -75.0)), 4),
                )
            )
            strength[team_id] = float(rng.normal(0.0, 8.0))

        games: List[GameResult] = []
        start = date(2025, 11, 1)
        game_no = 0

        def play(home: Team, away: Team, day: int, location: str, is_conf: bool, postseason: bool = False):
            nonlocal game_no
            game_no += 1
            hca = 3.5 if location == HOME else 0.0
            poss = float(rng.normal(70.0, 4.0))
            margin = strength[home.team_id] - strength[away.team_id] + hca + float(rng.normal(0.0, 10.0))
            base = poss * 1.02
            home_pts = int(round(base + margin / 2))
            away_pts = int(round(base - margin / 2))
            if home_pts == away_pts:
                home_pts += 1 if margin >= 0 else -1

            def box():
                tov = float(rng.integers(8, 17))
                oreb = float(rng.integers(5, 15))
                fta = float(rng.integers(10, 28))
                fga = round(poss - tov + oreb - 0.475 * fta)
                return fga, oreb, tov, fta

            hb, ab = box(), box()
            game_id = f"G{game_no:05d}"
            game_date = start + timedelta(days=day)
            away_location = AWAY if location == HOME else NEUTRAL
            for team, opp, pts, opp_pts, loc, mine, theirs in (
                (home, away, home_pts, away_pts, location, hb, ab),
                (away, home, away_pts, home_pts, away_location, ab, hb),
            ):
                games.append(
                    GameResult(
                        team_id=team.team_id,
                        opponent_id=opp.team_id,
                        team_score=pts,
                        opponent_score=opp_pts,
                        location=loc,
                        is_conference=is_conf,
                        season=season,
                        game_id=game_id,
                        game_date=game_date,
                        is_postseason=postseason,
                        fga=mine[0], oreb=mine[1], turnovers=mine[2], fta=mine[3],
                        opp_fga=theirs[0], opp_oreb=theirs[1], opp_turnovers=theirs[2], opp_fta=theirs[3],
                    )
                )
            return home if home_pts > away_pts else away

        # Non-conference: each team hosts two random opponents from other conferences
        day = 0
        for team in teams:
            others = [t for t in teams if t.conference != team.conference] or [t for t in teams if t is not team]
            for idx in rng.choice(len(others), size=min(2, len(others)), replace=False):
                play(team, others[int(idx)], day, HOME, False)
                day = (day + 1) % 40

        # Non-member opponents count only toward the total record
        for i, team in enumerate(teams):
            game_no += 1
            won = bool(rng.random() < 0.8)
            games.append(
                GameResult(
                    team_id=team.team_id,
                    opponent_id=None,
                    team_score=78 if won else 65,
                    opponent_score=65 if won else 78,
                    location=HOME,
                    season=season,
                    eligible=False,
                    game_id=f"G{game_no:05d}",
                    game_date=start + timedelta(days=i % 40),
                )
            )

        # Conference round robin
        conferences = {}
        for team in teams:
            conferences.setdefault(team.conference, []).append(team)
        for members in conferences.values():
            day = 45
            for a in range(len(members)):
                for b in range(a + 1, len(members)):
                    home, away = (members[a], members[b]) if (a + b) % 2 == 0 else (members[b], members[a])
                    play(home, away, day, HOME, True)
                    day += 2

        # Conference tournaments: top four by strength, semis then final
        tourney_day = 120
        for members in conferences.values():
            if len(members) < 4:
                continue
            top = sorted(members, key=lambda t: -strength[t.team_id])[:4]
            w1 = play(top[0], top[3], tourney_day, NEUTRAL, True, postseason=True)
            w2 = play(top[1], top[2], tourney_day, NEUTRAL, True, postseason=True)
            play(w1, w2, tourney_day + 1, NEUTRAL, True, postseason=True)

        league = League(season=season, teams=teams, games=games)
        if output_path:
            DataLoader.save_league_to_json(league, output_path)
        return league
