"""End-to-end projection: ratings, champions, composite ranking and pods."""

from __future__ import annotations

import logging
import multiprocessing
from concurrent.futures import ProcessPoolExecutor, as_completed
from dataclasses import dataclass, field
from datetime import date
from typing import Dict, List, Optional, Sequence, Tuple

from .bracket.pods import BracketProjection, PodAssembler
from .config import EngineConfig
from .data.loader import League
from .ranking.champions import find_conference_champions
from .ranking.composite import CompositeRanker, RankingEntry, rankings_frame
from .ratings.calculator import RatingCalculator, RatingSnapshot, filter_games

logger = logging.getLogger(__name__)


class DataRequirementError(ValueError):
    """Raised when a league cannot support a projection run."""


@dataclass
class ProjectionReport:
    """Everything one run produces. Built only after every phase completes."""

    season: str
    as_of: Optional[date]
    snapshots: Dict[str, Optional[RatingSnapshot]]
    champions: Dict[str, str]
    rankings: List[RankingEntry]
    bracket: BracketProjection
    config: EngineConfig = field(default_factory=EngineConfig)

    def rankings_frame(self):
        return rankings_frame(self.rankings)

    def to_dict(self) -> dict:
        return {
            "season": self.season,
            "as_of": self.as_of.isoformat() if self.as_of else None,
            "config": self.config.to_dict(),
            "ratings": {
                tid: snap.to_dict() if snap is not None else None
                for tid, snap in self.snapshots.items()
            },
            "conference_champions": dict(self.champions),
            "rankings": [e.to_dict() for e in self.rankings],
            "bracket": self.bracket.to_dict(),
        }


class ProjectionPipeline:
    """Runs the whole engine for one league/season."""

    def __init__(self, config: Optional[EngineConfig] = None):
        self.config = config or EngineConfig()
        self.calculator = RatingCalculator(self.config)
        self.ranker = CompositeRanker(
            quadrant_weights=self.config.quadrant_weights,
            field_size=self.config.field_size,
        )
        self.assembler = PodAssembler(
            pod_count=self.config.pod_count,
            pod_capacity=self.config.pod_capacity,
            earth_radius_miles=self.config.earth_radius_miles,
        )

    def run(self, league: League, as_of: Optional[date] = None) -> ProjectionReport:
        """Compute ratings, rankings and the projected bracket for ``league``."""
        if not league.teams:
            raise DataRequirementError("League has no teams")
        if not league.games:
            raise DataRequirementError("League has no completed games")

        season = league.season or None
        games = filter_games(league.games, season=season, as_of=as_of)

        snapshots = self.calculator.calculate(league.teams, games)
        rated = sum(1 for s in snapshots.values() if s is not None)
        if rated == 0:
            raise DataRequirementError(
                f"No team has an eligible game in season {league.season or '?'}"
                + (f" as of {as_of.isoformat()}" if as_of else "")
            )

        team_conferences = {t.team_id: t.conference for t in league.teams if t.eligible}
        champions = find_conference_champions(games, team_conferences)

        rankings = self.ranker.rank(league.teams, snapshots, games, champions.values())

        by_id = {t.team_id: t for t in league.teams}
        field_teams = [by_id[e.team_id] for e in rankings[: self.config.field_size]]
        bracket = self.assembler.assemble(field_teams, pr={e.team_id: e.pr for e in rankings})

        logger.info(
            "Projection complete for season %s: %d rated, %d champions, %d pods",
            league.season or "?",
            rated,
            len(champions),
            len(bracket.pods),
        )
        return ProjectionReport(
            season=league.season,
            as_of=as_of,
            snapshots=snapshots,
            champions=champions,
            rankings=rankings,
            bracket=bracket,
            config=self.config,
        )


def _run_job(league: League, as_of: Optional[date], config: EngineConfig) -> ProjectionReport:
    return ProjectionPipeline(config).run(league, as_of=as_of)


def run_projections_parallel(
    jobs: Sequence[Tuple[League, Optional[date]]],
    config: Optional[EngineConfig] = None,
    max_workers: Optional[int] = None,
) -> List[ProjectionReport]:
    """
    Run independent league/season projections across worker processes.

    Runs share no state, so each job is a pure function of its inputs.
    Results come back in job order.
    """
    config = config or EngineConfig()
    n_workers = max_workers or multiprocessing.cpu_count()
    results: List[Optional[ProjectionReport]] = [None] * len(jobs)

    if n_workers > 1 and len(jobs) > 1:
        try:
            with ProcessPoolExecutor(max_workers=n_workers) as executor:
                futures = {
                    executor.submit(_run_job, league, as_of, config): idx
                    for idx, (league, as_of) in enumerate(jobs)
                }
                for future in as_completed(futures):
                    results[futures[future]] = future.result()
            return results
        except (RuntimeError, OSError) as exc:
            logger.warning("Process pool unavailable (%s); running projections sequentially", exc)

    return [_run_job(league, as_of, config) for league, as_of in jobs]
