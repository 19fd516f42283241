"""
Travel distance between campuses for pod placement.

Great-circle (haversine) distance in whole miles. A team without coordinates
is treated as infinitely far from every host so it only lands on a pod when
fill balance or conference separation decides it.
"""

from __future__ import annotations

import math
from typing import Optional

from ..models.team import Team

EARTH_RADIUS_MILES = 3959.0


def haversine_miles(
    lat1: float,
    lon1: float,
    lat2: float,
    lon2: float,
    radius: float = EARTH_RADIUS_MILES,
) -> float:
    """
    Compute great-circle distance between two points on Earth in miles.

    Args:
        lat1, lon1: Point 1 coordinates (degrees)
        lat2, lon2: Point 2 coordinates (degrees)
        radius: Sphere radius in miles

    Returns:
        Distance in miles (unrounded)
    """
    lat1_r, lat2_r = math.radians(lat1), math.radians(lat2)
    dlat = math.radians(lat2 - lat1)
    dlon = math.radians(lon2 - lon1)

    a = math.sin(dlat / 2) ** 2 + math.cos(lat1_r) * math.cos(lat2_r) * math.sin(dlon / 2) ** 2
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))

    return radius * c


def team_distance(
    team: Team,
    other: Team,
    radius: float = EARTH_RADIUS_MILES,
) -> float:
    """Rounded miles between two campuses, or ``math.inf`` when either lacks coordinates."""
    if not team.has_coordinates or not other.has_coordinates:
        return math.inf
    miles = haversine_miles(team.latitude, team.longitude, other.latitude, other.longitude, radius)
    # half-up, not banker's rounding
    return float(math.floor(miles + 0.5))


def format_distance(miles: float) -> Optional[int]:
    """JSON-friendly distance: None for unknown, whole miles otherwise."""
    if math.isinf(miles):
        return None
    return int(miles)
