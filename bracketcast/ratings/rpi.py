"""
Rating Percentage Index and schedule strength.

RPI   = 0.30 * WinPct + 0.50 * OWP + 0.20 * OOWP
SOS   = 0.67 * OWP + 0.33 * OOWP

OWP adds every faced opponent's full record once per game played against
them, then removes this team's own head-to-head results exactly once.
Averaging per-opponent adjusted percentages instead double-counts repeated
matchups.

OOWP is the plain average of faced opponents' OWP, one entry per game.

Only games whose opponent is inside the eligible population count; games
against anyone else are invisible here rather than scored as 0-0.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, Iterable, List, Mapping, Sequence

from ..models.game import GameResult

logger = logging.getLogger(__name__)


@dataclass
class EligibleRecord:
    wins: int
    losses: int
    games: List[GameResult]

    @property
    def games_played(self) -> int:
        return self.wins + self.losses

    @property
    def win_pct(self) -> float:
        return self.wins / self.games_played if self.games_played else 0.0


@dataclass
class RPIComponents:
    wins: int
    losses: int
    win_pct: float
    owp: float
    oowp: float
    rpi: float
    sos: float


def eligible_games(games: Iterable[GameResult], eligible_ids: Iterable[str]) -> List[GameResult]:
    """Games flagged eligible whose opponent resolves to the ranked population."""
    ids = set(eligible_ids)
    return [g for g in games if g.eligible and g.opponent_id is not None and g.opponent_id in ids]


def eligible_records(
    games_by_team: Mapping[str, Sequence[GameResult]],
    eligible_ids: Iterable[str],
) -> Dict[str, EligibleRecord]:
    ids = set(eligible_ids)
    records: Dict[str, EligibleRecord] = {}
    for team_id, games in games_by_team.items():
        if team_id not in ids:
            continue
        counted = eligible_games(games, ids)
        if not counted:
            continue
        wins = sum(1 for g in counted if g.is_win)
        records[team_id] = EligibleRecord(wins=wins, losses=len(counted) - wins, games=counted)
    return records


def opponents_win_pct(records: Mapping[str, EligibleRecord]) -> Dict[str, float]:
    """OWP for every team with an eligible record (aggregate, then subtract once)."""
    owp: Dict[str, float] = {}
    for team_id, record in records.items():
        opp_wins = 0
        opp_losses = 0
        wins_against_us = 0
        losses_against_us = 0

        for game in record.games:
            opp_record = records.get(game.opponent_id)
            if opp_record is None:
                continue

            opp_wins += opp_record.wins
            opp_losses += opp_record.losses

            if game.is_win:
                losses_against_us += 1
            else:
                wins_against_us += 1

        adjusted_wins = opp_wins - wins_against_us
        adjusted_losses = opp_losses - losses_against_us
        adjusted_total = adjusted_wins + adjusted_losses
        owp[team_id] = adjusted_wins / adjusted_total if adjusted_total > 0 else 0.0
    return owp


def opponents_opponents_win_pct(
    records: Mapping[str, EligibleRecord],
    owp: Mapping[str, float],
) -> Dict[str, float]:
    """OOWP; requires OWP for the whole population first."""
    oowp: Dict[str, float] = {}
    for team_id, record in records.items():
        values = [owp[g.opponent_id] for g in record.games if g.opponent_id in owp]
        oowp[team_id] = sum(values) / len(values) if values else 0.0
    return oowp


def calculate_rpi(
    games_by_team: Mapping[str, Sequence[GameResult]],
    eligible_ids: Iterable[str],
    win_pct_weight: float = 0.30,
    owp_weight: float = 0.50,
    oowp_weight: float = 0.20,
    sos_owp_weight: float = 0.67,
    sos_oowp_weight: float = 0.33,
) -> Dict[str, RPIComponents]:
    """Batch RPI over the whole population. Teams without eligible games are absent."""
    records = eligible_records(games_by_team, eligible_ids)
    owp = opponents_win_pct(records)
    oowp = opponents_opponents_win_pct(records, owp)

    results: Dict[str, RPIComponents] = {}
    for team_id, record in records.items():
        win_pct = record.win_pct
        results[team_id] = RPIComponents(
            wins=record.wins,
            losses=record.losses,
            win_pct=win_pct,
            owp=owp[team_id],
            oowp=oowp[team_id],
            rpi=win_pct_weight * win_pct + owp_weight * owp[team_id] + oowp_weight * oowp[team_id],
            sos=sos_owp_weight * owp[team_id] + sos_oowp_weight * oowp[team_id],
        )

    logger.debug("RPI computed for %d of %d teams", len(results), len(games_by_team))
    return results
