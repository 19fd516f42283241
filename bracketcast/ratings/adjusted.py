"""
Opponent-adjusted offensive/defensive efficiency.

Starting from raw ratings, each round averages every team's opponents'
*current* adjusted ratings (with a symmetric home-court shift) and moves the
raw rating toward what an average schedule would have produced:

    newAdjO = rawO + alpha * (leagueAvgD - avgOppD)
    newAdjD = rawD - alpha * (avgOppO - leagueAvgO)

League averages are taken from the previous round's adjusted values. A team
with no resolvable opponent keeps its raw ratings every round.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, Mapping, Optional, Sequence, Tuple

import numpy as np

from ..models.game import AWAY, HOME, GameResult

logger = logging.getLogger(__name__)


@dataclass
class ScheduleStrength:
    osos: float
    dsos: float

    @property
    def nsos(self) -> float:
        return self.osos - self.dsos


def _league_means(adj_off: Mapping[str, float], adj_def: Mapping[str, float]) -> Tuple[float, float]:
    return float(np.mean(list(adj_off.values()))), float(np.mean(list(adj_def.values())))


def _opponent_averages(
    games: Sequence[GameResult],
    adj_off: Mapping[str, float],
    adj_def: Mapping[str, float],
    half_hca: float,
) -> Optional[Tuple[float, float]]:
    """Mean opponent (ORtg, DRtg) with the location shift applied, or None."""
    opp_off = []
    opp_def = []
    for g in games:
        if g.opponent_id not in adj_off:
            continue

        o = adj_off[g.opponent_id]
        d = adj_def[g.opponent_id]
        if g.location == HOME:
            o -= half_hca
            d += half_hca
        elif g.location == AWAY:
            o += half_hca
            d -= half_hca

        opp_off.append(o)
        opp_def.append(d)

    if not opp_off:
        return None
    return float(np.mean(opp_off)), float(np.mean(opp_def))


def _relaxation_round(
    games_by_team: Mapping[str, Sequence[GameResult]],
    raw_off: Mapping[str, float],
    raw_def: Mapping[str, float],
    adj_off: Mapping[str, float],
    adj_def: Mapping[str, float],
    damping: float,
    half_hca: float,
) -> Tuple[Dict[str, float], Dict[str, float]]:
    league_off, league_def = _league_means(adj_off, adj_def)

    next_off: Dict[str, float] = {}
    next_def: Dict[str, float] = {}
    for tid in raw_off:
        averages = _opponent_averages(games_by_team.get(tid, ()), adj_off, adj_def, half_hca)
        if averages is None:
            next_off[tid] = raw_off[tid]
            next_def[tid] = raw_def[tid]
            continue

        avg_opp_off, avg_opp_def = averages
        next_off[tid] = raw_off[tid] + damping * (league_def - avg_opp_def)
        next_def[tid] = raw_def[tid] - damping * (avg_opp_off - league_off)

    return next_off, next_def


def adjust_ratings(
    games_by_team: Mapping[str, Sequence[GameResult]],
    raw_off: Mapping[str, float],
    raw_def: Mapping[str, float],
    rounds: int = 5,
    damping: float = 0.4,
    home_court_advantage: float = 3.5,
) -> Tuple[Dict[str, float], Dict[str, float]]:
    """
    Fixed-round relaxation.

    Args:
        games_by_team: Eligible games per team; opponents absent from
            ``raw_off`` are ignored.
        raw_off, raw_def: Raw ratings for every team with a positive
            possession estimate.
        rounds: Number of relaxation rounds.
        damping: Fraction of the schedule gap credited per round (alpha).
        home_court_advantage: Total shift; half is applied each way.

    Returns:
        (adjusted_offense, adjusted_defense) keyed by team id.
    """
    adj_off = dict(raw_off)
    adj_def = dict(raw_def)
    if not adj_off:
        return adj_off, adj_def

    half_hca = home_court_advantage / 2.0
    for _round in range(rounds):
        adj_off, adj_def = _relaxation_round(
            games_by_team, raw_off, raw_def, adj_off, adj_def, damping, half_hca
        )

    return adj_off, adj_def


def adjust_ratings_until_converged(
    games_by_team: Mapping[str, Sequence[GameResult]],
    raw_off: Mapping[str, float],
    raw_def: Mapping[str, float],
    damping: float = 0.4,
    home_court_advantage: float = 3.5,
    tolerance: float = 1e-6,
    max_rounds: int = 200,
) -> Tuple[Dict[str, float], Dict[str, float], int]:
    """Repeat relaxation rounds until the largest change drops below ``tolerance``.

    Returns the adjusted maps and the number of rounds actually run.
    """
    adj_off = dict(raw_off)
    adj_def = dict(raw_def)
    if not adj_off:
        return adj_off, adj_def, 0

    half_hca = home_court_advantage / 2.0
    rounds_run = 0
    while rounds_run < max_rounds:
        next_off, next_def = _relaxation_round(
            games_by_team, raw_off, raw_def, adj_off, adj_def, damping, half_hca
        )
        rounds_run += 1

        delta = max(
            max(abs(next_off[t] - adj_off[t]) for t in adj_off),
            max(abs(next_def[t] - adj_def[t]) for t in adj_def),
        )
        adj_off, adj_def = next_off, next_def
        if delta < tolerance:
            break
    else:
        logger.warning("Adjusted ratings did not converge within %d rounds", max_rounds)

    logger.debug("Adjusted ratings settled after %d rounds", rounds_run)
    return adj_off, adj_def, rounds_run


def schedule_strength(
    games_by_team: Mapping[str, Sequence[GameResult]],
    adj_off: Mapping[str, float],
    adj_def: Mapping[str, float],
) -> Dict[str, ScheduleStrength]:
    """OSOS/DSOS from final adjusted ratings; league average when no opponent resolves."""
    if adj_off:
        league_off, league_def = _league_means(adj_off, adj_def)
    else:
        league_off = league_def = 0.0

    results: Dict[str, ScheduleStrength] = {}
    for tid, games in games_by_team.items():
        opp_off = [adj_off[g.opponent_id] for g in games if g.opponent_id in adj_off]
        opp_def = [adj_def[g.opponent_id] for g in games if g.opponent_id in adj_def]
        results[tid] = ScheduleStrength(
            osos=float(np.mean(opp_off)) if opp_off else league_off,
            dsos=float(np.mean(opp_def)) if opp_def else league_def,
        )
    return results
