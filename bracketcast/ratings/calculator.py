"""
Season rating calculator.

Turns the completed-game ledger for one season into one RatingSnapshot per
team. Every quantity here depends on the whole population (OWP needs every
opponent's record, adjusted ratings need every opponent's adjusted rating),
so snapshots are always recomputed wholesale and only returned once every
phase has finished.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import asdict, dataclass
from datetime import date
from typing import Dict, Iterable, List, Optional, Sequence

from ..config import EngineConfig
from ..models.game import GameResult
from ..models.team import Team
from .adjusted import adjust_ratings, adjust_ratings_until_converged, schedule_strength
from .efficiency import raw_efficiency, team_splits, TeamSplit
from .rpi import calculate_rpi, eligible_games

logger = logging.getLogger(__name__)


@dataclass
class RatingSnapshot:
    """Ratings for one team at one point in the season."""

    team_id: str
    games_played: int
    wins: int
    losses: int
    total_wins: int
    total_losses: int
    points_per_game: float
    points_allowed_per_game: float

    raw_offensive_rating: Optional[float]
    raw_defensive_rating: Optional[float]
    adjusted_offensive_rating: Optional[float]
    adjusted_defensive_rating: Optional[float]
    pace: Optional[float]

    win_pct: float
    rpi: float
    owp: float
    oowp: float
    sos: float
    osos: float
    dsos: float

    @property
    def raw_net_rating(self) -> Optional[float]:
        if self.raw_offensive_rating is None or self.raw_defensive_rating is None:
            return None
        return self.raw_offensive_rating - self.raw_defensive_rating

    @property
    def adjusted_net_rating(self) -> Optional[float]:
        if self.adjusted_offensive_rating is None or self.adjusted_defensive_rating is None:
            return None
        return self.adjusted_offensive_rating - self.adjusted_defensive_rating

    @property
    def nsos(self) -> float:
        return self.osos - self.dsos

    @property
    def total_win_pct(self) -> float:
        total = self.total_wins + self.total_losses
        return self.total_wins / total if total else 0.0

    def to_dict(self) -> dict:
        out = asdict(self)
        out["raw_net_rating"] = self.raw_net_rating
        out["adjusted_net_rating"] = self.adjusted_net_rating
        out["nsos"] = self.nsos
        out["total_win_pct"] = self.total_win_pct
        return out


def filter_games(
    games: Iterable[GameResult],
    season: Optional[str] = None,
    as_of: Optional[date] = None,
) -> List[GameResult]:
    """Restrict a ledger to one season and (optionally) games on or before ``as_of``.

    Undated games are dropped when ``as_of`` is given, since they cannot be
    placed before or after the cutoff.
    """
    selected = []
    undated = 0
    for g in games:
        if season is not None and g.season and g.season != season:
            continue
        if as_of is not None:
            if g.game_date is None:
                undated += 1
                continue
            if g.game_date > as_of:
                continue
        selected.append(g)

    if undated:
        logger.warning("Dropped %d undated games from as-of %s truncation", undated, as_of)
    return selected


class RatingCalculator:
    """Batch computation of RatingSnapshots for a whole season."""

    def __init__(self, config: Optional[EngineConfig] = None):
        self.config = config or EngineConfig()

    def calculate(
        self,
        teams: Sequence[Team],
        games: Iterable[GameResult],
        season: Optional[str] = None,
        as_of: Optional[date] = None,
    ) -> Dict[str, Optional[RatingSnapshot]]:
        """
        Compute snapshots for every team.

        Args:
            teams: Season team list; only ``eligible`` teams form the ranked
                population.
            games: Directed game records (one per team per game).
            season: Optional season label to filter on.
            as_of: Optional cutoff date (inclusive).

        Returns:
            Mapping of team id to snapshot, or None for teams with no
            eligible games (and for ineligible teams).
        """
        cfg = self.config
        team_ids = {t.team_id for t in teams}
        eligible_ids = {t.team_id for t in teams if t.eligible}

        games_by_team: Dict[str, List[GameResult]] = defaultdict(list)
        unknown = 0
        for g in filter_games(games, season=season, as_of=as_of):
            if g.team_id not in team_ids:
                unknown += 1
                continue
            games_by_team[g.team_id].append(g)
        if unknown:
            logger.warning("Skipped %d game records for teams outside the team list", unknown)

        counted: Dict[str, List[GameResult]] = {}
        for tid in sorted(eligible_ids):
            team_games = eligible_games(games_by_team.get(tid, []), eligible_ids)
            if team_games:
                counted[tid] = team_games

        # --- Phase 1: raw efficiency ---
        raw = {tid: raw_efficiency(g, cfg.ft_coefficient) for tid, g in counted.items()}
        raw_off = {}
        raw_def = {}
        for tid, eff in raw.items():
            if eff.offensive_rating is not None and eff.defensive_rating is not None:
                raw_off[tid] = eff.offensive_rating
                raw_def[tid] = eff.defensive_rating

        # --- Phase 2: RPI ---
        rpi = calculate_rpi(
            counted,
            eligible_ids,
            win_pct_weight=cfg.rpi_win_pct_weight,
            owp_weight=cfg.rpi_owp_weight,
            oowp_weight=cfg.rpi_oowp_weight,
            sos_owp_weight=cfg.sos_owp_weight,
            sos_oowp_weight=cfg.sos_oowp_weight,
        )

        # --- Phase 3: adjusted efficiency ---
        if cfg.relaxation_mode == "converge":
            adj_off, adj_def, rounds_run = adjust_ratings_until_converged(
                counted,
                raw_off,
                raw_def,
                damping=cfg.damping_factor,
                home_court_advantage=cfg.home_court_advantage,
                tolerance=cfg.convergence_tolerance,
                max_rounds=cfg.max_convergence_rounds,
            )
        else:
            adj_off, adj_def = adjust_ratings(
                counted,
                raw_off,
                raw_def,
                rounds=cfg.relaxation_rounds,
                damping=cfg.damping_factor,
                home_court_advantage=cfg.home_court_advantage,
            )
            rounds_run = cfg.relaxation_rounds
        sos = schedule_strength(counted, adj_off, adj_def)

        # --- Phase 4: assemble ---
        snapshots: Dict[str, Optional[RatingSnapshot]] = {}
        for team in teams:
            tid = team.team_id
            if tid not in counted:
                snapshots[tid] = None
                continue

            eff = raw[tid]
            components = rpi[tid]
            # non-member games count here; national tournament games do not
            all_games = [g for g in games_by_team[tid] if not g.is_national_tournament]
            total_wins = sum(1 for g in all_games if g.is_win)

            snapshots[tid] = RatingSnapshot(
                team_id=tid,
                games_played=eff.games_played,
                wins=components.wins,
                losses=components.losses,
                total_wins=total_wins,
                total_losses=len(all_games) - total_wins,
                points_per_game=eff.points_per_game,
                points_allowed_per_game=eff.points_allowed_per_game,
                raw_offensive_rating=raw_off.get(tid),
                raw_defensive_rating=raw_def.get(tid),
                adjusted_offensive_rating=adj_off.get(tid),
                adjusted_defensive_rating=adj_def.get(tid),
                pace=eff.pace if eff.pace > 0 else None,
                win_pct=components.win_pct,
                rpi=components.rpi,
                owp=components.owp,
                oowp=components.oowp,
                sos=components.sos,
                osos=sos[tid].osos,
                dsos=sos[tid].dsos,
            )

        logger.info(
            "Rated %d of %d teams (%d with efficiency ratings, %d relaxation rounds)",
            len(counted),
            len(teams),
            len(raw_off),
            rounds_run,
        )
        return snapshots

    def splits(
        self,
        team_id: str,
        games: Iterable[GameResult],
        season: Optional[str] = None,
        as_of: Optional[date] = None,
    ) -> List[TeamSplit]:
        """Split summaries over all of one team's games."""
        team_games = [g for g in filter_games(games, season=season, as_of=as_of) if g.team_id == team_id]
        return team_splits(team_games, self.config.split_ft_coefficient)
