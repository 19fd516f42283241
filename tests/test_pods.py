"""Tests for travel distance and pod assembly."""

import math

import pytest

from bracketcast.bracket.pods import PodAssembler, closest_hosts, pod_of, total_travel
from bracketcast.bracket.travel_distance import haversine_miles, team_distance
from bracketcast.models.team import Team


def _team(team_id, lat=None, lon=None, conference=""):
    return Team(team_id=team_id, conference=conference, latitude=lat, longitude=lon)


@pytest.fixture
def full_field():
    """64 teams on a grid, each in its own conference."""
    teams = []
    for i in range(64):
        teams.append(_team(f"T{i + 1:02d}", 30.0 + (i % 8) * 2.0, -120.0 + (i // 8) * 5.0, conference=f"C{i}"))
    return teams


# ---------------------------------------------------------------------------
# Distance
# ---------------------------------------------------------------------------


def test_haversine_one_degree_on_equator():
    assert haversine_miles(0.0, 0.0, 0.0, 1.0) == pytest.approx(3959.0 * math.pi / 180.0)


def test_team_distance_rounded_to_whole_miles():
    a = _team("A", 0.0, 0.0)
    b = _team("B", 0.0, 1.0)
    assert team_distance(a, b) == 69.0
    assert team_distance(a, a) == 0.0


def test_missing_coordinates_infinite():
    assert math.isinf(team_distance(_team("A"), _team("B", 40.0, -90.0)))


# ---------------------------------------------------------------------------
# Pods
# ---------------------------------------------------------------------------


class TestPodAssembler:
    def test_full_field_shapes(self, full_field):
        projection = PodAssembler().assemble(full_field)

        assert len(projection.tiers) == 4
        assert all(len(tier) == 16 for tier in projection.tiers)
        assert len(projection.pods) == 16

        placed = [slot.team.team_id for pod in projection.pods for slot in pod.teams]
        assert sorted(placed) == sorted(t.team_id for t in full_field)
        for pod in projection.pods:
            assert len(pod.teams) <= 4
            assert len(pod.visitors) == 3
            assert pod.host.distance == 0.0
            assert pod.host.seed == 1
            assert [s.seed for s in pod.visitors] == [2, 3, 4]

    def test_hosts_are_tier_one_in_order(self, full_field):
        projection = PodAssembler().assemble(full_field)
        assert [p.host.team.team_id for p in projection.pods] == [t.team_id for t in full_field[:16]]
        assert [p.pod_number for p in projection.pods] == list(range(1, 17))

    def test_extra_teams_ignored(self, full_field):
        extra = full_field + [_team("LATE", 40.0, -90.0)]
        projection = PodAssembler().assemble(extra)
        assert pod_of(projection, "LATE") is None

    def test_fill_balance_beats_distance(self):
        hosts = [_team("H1", 40.0, -100.0, "X"), _team("H2", 40.0, -80.0, "Y")]
        near_h1 = [_team("N1", 40.0, -100.2, "P"), _team("N2", 40.0, -100.1, "Q")]
        projection = PodAssembler(pod_count=2, pod_capacity=3).assemble(hosts + near_h1)

        assert pod_of(projection, "N1").host.team.team_id == "H1"
        # N2 is nearer to H1 too, but H2 has fewer visitors
        assert pod_of(projection, "N2").host.team.team_id == "H2"

    def test_conference_conflict_beats_distance(self):
        hosts = [_team("H1", 40.0, -100.0, "X"), _team("H2", 40.0, -80.0, "Y")]
        rival = _team("R", 40.0, -100.1, "X")
        projection = PodAssembler(pod_count=2, pod_capacity=3).assemble(hosts + [rival, _team("Z", 40.0, -81.0, "Z")])
        assert pod_of(projection, "R").host.team.team_id == "H2"

    def test_conflict_with_placed_visitor(self):
        hosts = [_team("H1", 40.0, -100.0, "X"), _team("H2", 40.0, -80.0, "Y")]
        tier2 = [_team("A", 40.0, -100.1, "P"), _team("B", 40.0, -80.1, "Q")]
        # tier 3: same conference as A, nearest to H1
        tier3 = [_team("C", 40.0, -100.1, "P"), _team("D", 40.0, -99.0, "S")]
        projection = PodAssembler(pod_count=2, pod_capacity=3).assemble(hosts + tier2 + tier3)
        assert pod_of(projection, "A").host.team.team_id == "H1"
        assert pod_of(projection, "C").host.team.team_id == "H2"
        assert pod_of(projection, "D").host.team.team_id == "H1"

    def test_missing_coordinates_fall_back_to_pod_order(self):
        hosts = [_team("H1", 40.0, -100.0, "X"), _team("H2", 40.0, -80.0, "Y")]
        lost = _team("L", conference="Z")
        projection = PodAssembler(pod_count=2, pod_capacity=3).assemble(hosts + [lost])
        slot = pod_of(projection, "L").visitors[0]
        assert pod_of(projection, "L").pod_number == 1
        assert math.isinf(slot.distance)
        assert slot.to_dict()["distance"] is None

    def test_small_field_has_hosts_only(self):
        teams = [_team(f"T{i}", 35.0 + i, -90.0) for i in range(4)]
        projection = PodAssembler().assemble(teams)
        assert len(projection.pods) == 4
        assert all(not p.visitors for p in projection.pods)
        assert projection.closest_hosts == {}

    def test_empty_field(self):
        projection = PodAssembler().assemble([])
        assert projection.pods == []
        assert projection.to_dict()["pods"] == []

    def test_deterministic(self, full_field):
        first = PodAssembler().assemble(full_field).to_dict()
        second = PodAssembler().assemble(full_field).to_dict()
        assert first == second

    def test_total_travel_sums_visitors(self, full_field):
        projection = PodAssembler().assemble(full_field)
        expected = sum(s.distance for p in projection.pods for s in p.visitors)
        assert total_travel(projection) == pytest.approx(expected)
        assert total_travel(projection) > 0


class TestClosestHosts:
    def test_ordered_by_distance_with_conflict_flag(self):
        hosts = [
            _team("FAR", 45.0, -70.0, "A"),
            _team("NEAR", 40.0, -100.5, "B"),
            _team("MID", 40.0, -95.0, "C"),
        ]
        team = _team("T", 40.0, -100.0, "B")
        options = closest_hosts(team, hosts)
        assert [o.team_id for o in options] == ["NEAR", "MID", "FAR"]
        assert options[0].has_conference_conflict
        assert not options[1].has_conference_conflict

    def test_projection_lists_every_host_for_non_hosts(self, full_field):
        projection = PodAssembler().assemble(full_field)
        assert len(projection.closest_hosts) == 48
        assert all(len(opts) == 16 for opts in projection.closest_hosts.values())
        assert full_field[0].team_id not in projection.closest_hosts
