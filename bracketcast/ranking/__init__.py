"""Quadrants, conference champions and composite rankings."""

from .champions import find_conference_champions
from .composite import CompositeRanker, RankingEntry, quality_win_points, rankings_frame
from .quadrant import QuadrantRecord, build_quadrant_records, get_quadrant, rpi_ranks

__all__ = [
    "CompositeRanker",
    "QuadrantRecord",
    "RankingEntry",
    "build_quadrant_records",
    "find_conference_champions",
    "get_quadrant",
    "quality_win_points",
    "rankings_frame",
    "rpi_ranks",
]
