"""
Composite ranking.

PCR (primary criteria ranking) averages three independent ordinal ranks:
overall win percentage (non-member games included), RPI, and quadrant win
points (QWP). The averages are then re-ranked into 1..N.

PR (projected rank) starts from PCR and guarantees automatic qualifiers a
field slot: conference champions outside the field, best PCR first, swap
ranks one-to-one with the worst-PCR non-champions inside it.

Every ranking breaks exact ties by input order.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Mapping, Optional, Sequence

import numpy as np
import pandas as pd
from scipy import stats as scipy_stats

from ..models.game import GameResult
from ..models.team import Team
from ..ratings.calculator import RatingSnapshot
from .quadrant import QuadrantRecord, build_quadrant_records, rpi_ranks

logger = logging.getLogger(__name__)

DEFAULT_QUADRANT_WEIGHTS = {1: 4.0, 2: 2.0, 3: 1.0, 4: 0.5}


def quality_win_points(record: QuadrantRecord, weights: Optional[Mapping[int, float]] = None) -> float:
    """QWP = 4*Q1W + 2*Q2W + 1*Q3W + 0.5*Q4W. Losses never subtract."""
    weights = weights or DEFAULT_QUADRANT_WEIGHTS
    return float(sum(weights[q] * record.wins(q) for q in (1, 2, 3, 4)))


def ordinal_rank_desc(values: Sequence[Optional[float]]) -> np.ndarray:
    """1-based ranks, highest value first, None as 0, ties by position."""
    arr = np.array([v if v is not None else 0.0 for v in values], dtype=float)
    return scipy_stats.rankdata(-arr, method="ordinal").astype(int)


def ordinal_rank_asc(values: Sequence[float]) -> np.ndarray:
    return scipy_stats.rankdata(np.asarray(values, dtype=float), method="ordinal").astype(int)


def apply_champion_swaps(
    pcr: Mapping[str, int],
    champions: Iterable[str],
    field_size: int = 64,
) -> Dict[str, int]:
    """Swap PR slots so champions outside the field replace the weakest non-champions inside it."""
    champion_set = set(champions)
    outside = sorted((tid for tid in pcr if tid in champion_set and pcr[tid] > field_size), key=lambda t: pcr[t])
    inside = sorted(
        (tid for tid in pcr if tid not in champion_set and pcr[tid] <= field_size),
        key=lambda t: pcr[t],
        reverse=True,
    )

    pr = dict(pcr)
    for champion_in, bumped in zip(outside, inside):
        pr[champion_in] = pcr[bumped]
        pr[bumped] = pcr[champion_in]
        logger.debug("PR swap: champion %s (PCR %d) <-> %s (PCR %d)", champion_in, pcr[champion_in], bumped, pcr[bumped])

    if len(outside) > len(inside):
        logger.warning("%d champions could not be placed inside the field", len(outside) - len(inside))
    return pr


@dataclass
class RankingEntry:
    """One team's row in the composite ranking."""

    team_id: str
    name: str
    conference: str
    wins: int
    losses: int
    total_wins: int
    total_losses: int
    total_win_pct: float
    rpi: float
    rpi_rank: Optional[int]
    sos: float
    sos_rank: int
    adjusted_net_rating: Optional[float]
    qwp: float
    quadrants: QuadrantRecord = field(default_factory=QuadrantRecord)
    win_pct_rank: int = 0
    rpi_value_rank: int = 0
    qwp_rank: int = 0
    pcr_avg: float = 0.0
    pcr: int = 0
    pr: int = 0
    is_conference_champion: bool = False

    @property
    def record(self) -> str:
        return f"{self.total_wins}-{self.total_losses}"

    def to_dict(self) -> dict:
        out = {k: v for k, v in self.__dict__.items() if k != "quadrants"}
        out.update(self.quadrants.to_dict())
        return out


class CompositeRanker:
    """Builds PCR/PR rankings from a snapshot population."""

    def __init__(
        self,
        quadrant_weights: Optional[Mapping[int, float]] = None,
        field_size: int = 64,
    ):
        self.quadrant_weights = dict(quadrant_weights or DEFAULT_QUADRANT_WEIGHTS)
        self.field_size = field_size

    def rank(
        self,
        teams: Sequence[Team],
        snapshots: Mapping[str, Optional[RatingSnapshot]],
        games: Iterable[GameResult],
        champions: Iterable[str] = (),
    ) -> List[RankingEntry]:
        """
        Rank every team with a snapshot.

        Args:
            teams: Team metadata; its order is the tie-break order.
            snapshots: Output of ``RatingCalculator.calculate``.
            games: Game records used for quadrant tallies.
            champions: Team ids of conference champions.

        Returns:
            Ranking entries sorted by PR.
        """
        rated = [t for t in teams if snapshots.get(t.team_id) is not None]
        if not rated:
            return []

        champion_set = set(champions)
        ranks = rpi_ranks({t.team_id: snapshots[t.team_id].rpi for t in rated})
        quadrant_records = build_quadrant_records(games, ranks)

        sos_order = sorted(rated, key=lambda t: -snapshots[t.team_id].sos)
        sos_ranks = {t.team_id: idx for idx, t in enumerate(sos_order, start=1)}

        entries = []
        for t in rated:
            snap = snapshots[t.team_id]
            record = quadrant_records[t.team_id]
            entries.append(
                RankingEntry(
                    team_id=t.team_id,
                    name=t.name,
                    conference=t.conference,
                    wins=snap.wins,
                    losses=snap.losses,
                    total_wins=snap.total_wins,
                    total_losses=snap.total_losses,
                    total_win_pct=snap.total_win_pct,
                    rpi=snap.rpi,
                    rpi_rank=ranks[t.team_id],
                    sos=snap.sos,
                    sos_rank=sos_ranks[t.team_id],
                    adjusted_net_rating=snap.adjusted_net_rating,
                    qwp=quality_win_points(record, self.quadrant_weights),
                    quadrants=record,
                    is_conference_champion=t.team_id in champion_set,
                )
            )

        win_pct_ranks = ordinal_rank_desc([e.total_win_pct for e in entries])
        rpi_value_ranks = ordinal_rank_desc([e.rpi for e in entries])
        qwp_ranks = ordinal_rank_desc([e.qwp for e in entries])
        averages = (win_pct_ranks + rpi_value_ranks + qwp_ranks) / 3.0
        pcr_ranks = ordinal_rank_asc(averages)

        for i, entry in enumerate(entries):
            entry.win_pct_rank = int(win_pct_ranks[i])
            entry.rpi_value_rank = int(rpi_value_ranks[i])
            entry.qwp_rank = int(qwp_ranks[i])
            entry.pcr_avg = float(averages[i])
            entry.pcr = int(pcr_ranks[i])

        pr = apply_champion_swaps({e.team_id: e.pcr for e in entries}, champion_set, self.field_size)
        for entry in entries:
            entry.pr = pr[entry.team_id]

        entries.sort(key=lambda e: e.pr)
        logger.info(
            "Ranked %d teams (%d conference champions)",
            len(entries),
            sum(1 for e in entries if e.is_conference_champion),
        )
        return entries


def rankings_frame(entries: Sequence[RankingEntry]) -> pd.DataFrame:
    """Rankings as a DataFrame ordered by PR."""
    if not entries:
        return pd.DataFrame(columns=["pr", "pcr", "team_id", "name", "conference"])

    df = pd.DataFrame([e.to_dict() for e in entries])
    leading = ["pr", "pcr", "team_id", "name", "conference"]
    df = df[leading + [c for c in df.columns if c not in leading]]
    return df.sort_values("pr").reset_index(drop=True)
