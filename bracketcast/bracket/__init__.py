"""Seed tiers, pods and travel distance."""

from .pods import BracketProjection, HostOption, Pod, PodAssembler, PodSlot, closest_hosts
from .travel_distance import haversine_miles, team_distance

__all__ = [
    "BracketProjection",
    "HostOption",
    "Pod",
    "PodAssembler",
    "PodSlot",
    "closest_hosts",
    "haversine_miles",
    "team_distance",
]
