"""
Pod assembly for the projected national tournament field.

The field (teams ordered by PR, at most ``pod_count * (pod_capacity + 1)``)
is cut into seed tiers of ``pod_count`` consecutive teams. Tier-1 teams host
one pod each. Tiers 2, 3 and 4 are then placed one team at a time, in order;
each team goes to the pod that ranks first by:

1. fewest visitors so far (pods are capped at ``pod_capacity`` visitors)
2. no conference shared with the host or any team already placed
3. shortest travel distance to the host
4. pod order

Because every decision depends on the pods as left by the previous one, the
assembly is written as an explicit fold over the ordered placement list.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field, replace
from functools import reduce
from typing import Dict, List, Optional, Sequence, Tuple

from ..models.team import Team
from .travel_distance import EARTH_RADIUS_MILES, format_distance, team_distance

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PodSlot:
    team: Team
    seed: int
    distance: float
    pr: Optional[int] = None

    def to_dict(self) -> dict:
        return {
            "seed": self.seed,
            "team_id": self.team.team_id,
            "name": self.team.name,
            "conference": self.team.conference,
            "pr": self.pr,
            "distance": format_distance(self.distance),
        }


@dataclass(frozen=True)
class Pod:
    pod_number: int
    host: PodSlot
    visitors: Tuple[PodSlot, ...] = ()

    @property
    def teams(self) -> List[PodSlot]:
        return [self.host] + list(self.visitors)

    def has_conference_conflict(self, team: Team) -> bool:
        return any(slot.team.shares_conference(team) for slot in self.teams)

    def with_visitor(self, slot: PodSlot) -> "Pod":
        visitors = tuple(sorted(self.visitors + (slot,), key=lambda s: s.seed))
        return replace(self, visitors=visitors)

    def to_dict(self) -> dict:
        return {
            "pod_number": self.pod_number,
            "host": self.host.to_dict(),
            "teams": [v.to_dict() for v in self.visitors],
        }


@dataclass(frozen=True)
class HostOption:
    team_id: str
    name: str
    conference: str
    distance: float
    has_conference_conflict: bool

    def to_dict(self) -> dict:
        return {
            "team_id": self.team_id,
            "name": self.name,
            "conference": self.conference,
            "distance": format_distance(self.distance),
            "has_conference_conflict": self.has_conference_conflict,
        }


@dataclass
class BracketProjection:
    """Seed tiers, pods and per-team host alternates for one projection."""

    tiers: List[List[Team]]
    pods: List[Pod]
    closest_hosts: Dict[str, List[HostOption]] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "tiers": [
                [{"seed": i + 1, "team_id": t.team_id, "name": t.name, "conference": t.conference}
                 for i, t in enumerate(tier)]
                for tier in self.tiers
            ],
            "pods": [p.to_dict() for p in self.pods],
            "closest_hosts": {
                tid: [h.to_dict() for h in options] for tid, options in self.closest_hosts.items()
            },
        }


def closest_hosts(
    team: Team,
    hosts: Sequence[Team],
    radius: float = EARTH_RADIUS_MILES,
) -> List[HostOption]:
    """Every host ordered by raw distance; same-conference hosts are flagged as unlikely."""
    options = [
        HostOption(
            team_id=h.team_id,
            name=h.name,
            conference=h.conference,
            distance=team_distance(team, h, radius),
            has_conference_conflict=h.shares_conference(team),
        )
        for h in hosts
    ]
    # stable: equal distances keep host order
    options.sort(key=lambda o: o.distance)
    return options


class PodAssembler:
    """Greedy, order-sensitive pod placement."""

    def __init__(
        self,
        pod_count: int = 16,
        pod_capacity: int = 3,
        earth_radius_miles: float = EARTH_RADIUS_MILES,
    ):
        self.pod_count = pod_count
        self.pod_capacity = pod_capacity
        self.earth_radius_miles = earth_radius_miles

    @property
    def field_size(self) -> int:
        return self.pod_count * (self.pod_capacity + 1)

    def seed_tiers(self, ordered: Sequence[Team]) -> List[List[Team]]:
        field_teams = list(ordered[: self.field_size])
        return [
            field_teams[i: i + self.pod_count]
            for i in range(0, len(field_teams), self.pod_count)
        ]

    def _choose_pod(self, pods: Sequence[Pod], team: Team) -> Tuple[int, float]:
        candidates = []
        for idx, pod in enumerate(pods):
            if len(pod.visitors) >= self.pod_capacity:
                continue
            distance = team_distance(team, pod.host.team, self.earth_radius_miles)
            key = (len(pod.visitors), pod.has_conference_conflict(team), distance, idx)
            candidates.append((key, distance))

        if not candidates:
            raise ValueError(f"No pod has room for team {team.team_id}")
        key, distance = min(candidates, key=lambda c: c[0])
        return key[3], distance

    def _place(self, pods: Tuple[Pod, ...], placement: Tuple[Team, int, Optional[int]]) -> Tuple[Pod, ...]:
        team, seed, pr = placement
        idx, distance = self._choose_pod(pods, team)
        logger.debug("Seed %d %s -> pod %d (%s mi)", seed, team.team_id, idx + 1, distance)
        return pods[:idx] + (pods[idx].with_visitor(PodSlot(team, seed, distance, pr)),) + pods[idx + 1:]

    def assemble(
        self,
        ordered: Sequence[Team],
        pr: Optional[Dict[str, int]] = None,
    ) -> BracketProjection:
        """
        Build pods from teams already ordered by PR.

        Args:
            ordered: Teams, best first. Anything beyond the field size is ignored.
            pr: Optional PR lookup carried onto each slot for display.

        Returns:
            BracketProjection with one pod per tier-1 team.
        """
        pr = pr or {}
        tiers = self.seed_tiers(ordered)
        if not tiers:
            return BracketProjection(tiers=[], pods=[])

        hosts = tiers[0]
        initial = tuple(
            Pod(pod_number=i + 1, host=PodSlot(h, 1, 0.0, pr.get(h.team_id)))
            for i, h in enumerate(hosts)
        )
        placements = [
            (team, seed, pr.get(team.team_id))
            for seed, tier in enumerate(tiers[1:], start=2)
            for team in tier
        ]
        pods = reduce(self._place, placements, initial)

        alternates = {
            t.team_id: closest_hosts(t, hosts, self.earth_radius_miles)
            for tier in tiers[1:]
            for t in tier
        }

        unknown = sum(1 for tier in tiers for t in tier if not t.has_coordinates)
        if unknown:
            logger.warning("%d field teams have no coordinates; their travel is unknown", unknown)
        logger.info(
            "Assembled %d pods from %d teams",
            len(pods),
            sum(len(tier) for tier in tiers),
        )
        return BracketProjection(tiers=tiers, pods=list(pods), closest_hosts=alternates)


def total_travel(projection: BracketProjection) -> float:
    """Sum of visitor travel; ``math.inf`` when any visitor's distance is unknown."""
    return math.fsum(slot.distance for pod in projection.pods for slot in pod.visitors)


def pod_of(projection: BracketProjection, team_id: str) -> Optional[Pod]:
    for pod in projection.pods:
        if any(slot.team.team_id == team_id for slot in pod.teams):
            return pod
    return None
