"""
Win-quality tiers.

Each game is placed in Quadrant 1-4 from the opponent's RPI rank and the
game location. Upper bound of Q1/Q2/Q3 per location; anything beyond is Q4:

    |Location| Q1    | Q2     | Q3      | Q4   |
    |--------|-------|--------|---------|------|
    | Home   | 1-45  | 46-90  | 91-135  | 136+ |
    | Neutral| 1-55  | 56-105 | 106-150 | 151+ |
    | Away   | 1-65  | 66-120 | 121-165 | 166+ |
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from typing import Dict, Iterable, Mapping, Optional, Tuple

from ..models.game import HOME, NEUTRAL, GameResult

logger = logging.getLogger(__name__)


QUADRANT_BANDS: Dict[str, Tuple[int, int, int]] = {
    "home": (45, 90, 135),
    "neutral": (55, 105, 150),
    "away": (65, 120, 165),
}


def get_quadrant(opponent_rpi_rank: Optional[int], location: str) -> int:
    """Quadrant for one game. Unranked opponents are Q4; unknown locations use the away bands."""
    if not opponent_rpi_rank:
        return 4

    if location == HOME:
        bands = QUADRANT_BANDS["home"]
    elif location == NEUTRAL:
        bands = QUADRANT_BANDS["neutral"]
    else:
        bands = QUADRANT_BANDS["away"]

    for quadrant, upper in enumerate(bands, start=1):
        if opponent_rpi_rank <= upper:
            return quadrant
    return 4


def rpi_ranks(rpi_values: Mapping[str, Optional[float]]) -> Dict[str, Optional[int]]:
    """
    1-based RPI rank, best first.

    Ties keep the mapping's iteration order. Teams whose RPI is None get no
    rank (and therefore make every game against them Q4).
    """
    ranked = [tid for tid, value in rpi_values.items() if value is not None]
    ranked.sort(key=lambda tid: -rpi_values[tid])

    ranks: Dict[str, Optional[int]] = {tid: None for tid in rpi_values}
    for idx, tid in enumerate(ranked, start=1):
        ranks[tid] = idx
    return ranks


@dataclass
class QuadrantRecord:
    q1_wins: int = 0
    q1_losses: int = 0
    q2_wins: int = 0
    q2_losses: int = 0
    q3_wins: int = 0
    q3_losses: int = 0
    q4_wins: int = 0
    q4_losses: int = 0
    conf_wins: int = 0
    conf_losses: int = 0

    def add(self, quadrant: int, won: bool, is_conference: bool = False) -> None:
        key = f"q{quadrant}_{'wins' if won else 'losses'}"
        setattr(self, key, getattr(self, key) + 1)
        if is_conference:
            if won:
                self.conf_wins += 1
            else:
                self.conf_losses += 1

    def wins(self, quadrant: int) -> int:
        return getattr(self, f"q{quadrant}_wins")

    def losses(self, quadrant: int) -> int:
        return getattr(self, f"q{quadrant}_losses")

    @property
    def total_games(self) -> int:
        return sum(self.wins(q) + self.losses(q) for q in (1, 2, 3, 4))

    def to_dict(self) -> dict:
        return asdict(self)


def build_quadrant_records(
    games: Iterable[GameResult],
    ranks: Mapping[str, Optional[int]],
) -> Dict[str, QuadrantRecord]:
    """
    Tally quadrant records for every ranked-population team.

    Only eligible games outside the national tournament count. Teams in
    ``ranks`` with no such game get an all-zero record.
    """
    records = {tid: QuadrantRecord() for tid in ranks}
    for g in games:
        if not g.eligible or g.is_national_tournament:
            continue
        record = records.get(g.team_id)
        if record is None:
            continue
        opp_rank = ranks.get(g.opponent_id) if g.opponent_id is not None else None
        record.add(get_quadrant(opp_rank, g.location), g.is_win, g.is_conference)
    return records
