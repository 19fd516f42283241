"""Tests for possessions, RPI/OWP/OOWP, adjusted efficiency and the rating calculator."""

from datetime import date

import pytest

from bracketcast.config import EngineConfig
from bracketcast.models.game import AWAY, HOME, NEUTRAL, GameResult
from bracketcast.models.team import Team
from bracketcast.ratings.adjusted import (
    adjust_ratings,
    adjust_ratings_until_converged,
    schedule_strength,
)
from bracketcast.ratings.calculator import RatingCalculator, filter_games
from bracketcast.ratings.efficiency import (
    estimate_possessions,
    raw_efficiency,
    split_summary,
    team_splits,
)
from bracketcast.ratings.rpi import calculate_rpi


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

BOX = dict(fga=60, oreb=10, turnovers=12, fta=20, opp_fga=60, opp_oreb=10, opp_turnovers=12, opp_fta=20)
MIRROR = {HOME: AWAY, AWAY: HOME, NEUTRAL: NEUTRAL}


def _pair(a, b, a_score, b_score, location=NEUTRAL, game_date=None, box=True, **kwargs):
    """Both directed records for one game between member teams."""
    extra = BOX if box else {}
    return [
        GameResult(team_id=a, opponent_id=b, team_score=a_score, opponent_score=b_score,
                   location=location, game_date=game_date, **extra, **kwargs),
        GameResult(team_id=b, opponent_id=a, team_score=b_score, opponent_score=a_score,
                   location=MIRROR[location], game_date=game_date, **extra, **kwargs),
    ]


def _by_team(games):
    out = {}
    for g in games:
        out.setdefault(g.team_id, []).append(g)
    return out


@pytest.fixture
def repeated_matchup_games():
    """A beats B twice, B beats C, C beats A."""
    games = []
    games += _pair("A", "B", 70, 60)
    games += _pair("A", "B", 75, 70)
    games += _pair("B", "C", 68, 66)
    games += _pair("C", "A", 80, 79)
    return games


# ---------------------------------------------------------------------------
# Possessions and raw efficiency
# ---------------------------------------------------------------------------


def test_possession_estimate_uses_coefficient():
    assert estimate_possessions(60, 10, 12, 20) == pytest.approx(71.5)
    assert estimate_possessions(60, 10, 12, 20, ft_coefficient=0.44) == pytest.approx(70.8)


def test_raw_efficiency_per_game_averages():
    games = _pair("A", "B", 80, 70)[:1]
    eff = raw_efficiency(games)
    assert eff.games_played == 1
    assert eff.possessions == pytest.approx(71.5)
    assert eff.offensive_rating == pytest.approx(100 * 80 / 71.5)
    assert eff.defensive_rating == pytest.approx(100 * 70 / 71.5)
    assert eff.net_rating == pytest.approx(100 * 10 / 71.5)


def test_raw_efficiency_without_box_score_is_null():
    games = _pair("A", "B", 80, 70, box=False)[:1]
    eff = raw_efficiency(games)
    assert eff.offensive_rating is None
    assert eff.defensive_rating is None
    assert eff.net_rating is None


def test_raw_efficiency_no_games():
    assert raw_efficiency([]) is None


# ---------------------------------------------------------------------------
# Team splits
# ---------------------------------------------------------------------------


class TestTeamSplits:
    def _season(self):
        games = []
        for day in range(1, 7):
            won = day % 3 != 0
            loc = HOME if day % 2 else AWAY
            games.append(
                GameResult(
                    team_id="A",
                    opponent_id=f"O{day}",
                    team_score=80 if won else 60,
                    opponent_score=70,
                    location=loc,
                    is_conference=day > 3,
                    game_date=date(2026, 1, day),
                    **BOX,
                )
            )
        return games

    def test_split_names_and_counts(self):
        splits = {s.split_name: s for s in team_splits(self._season())}
        assert list(splits) == ["Overall", "Conference", "Last 5", "Last 10", "Home", "Away", "In Wins", "In Losses"]
        assert splits["Overall"].games_played == 6
        assert (splits["Overall"].wins, splits["Overall"].losses) == (4, 2)
        assert splits["Conference"].games_played == 3
        assert splits["Last 5"].games_played == 5
        assert splits["Last 10"].games_played == 6
        assert splits["Home"].games_played == 3
        assert splits["In Wins"].losses == 0
        assert splits["In Losses"].wins == 0

    def test_last_five_takes_most_recent(self):
        games = list(reversed(self._season()))
        last5 = {s.split_name: s for s in team_splits(games)}["Last 5"]
        # Jan 1 (a win) is the only game excluded
        assert (last5.wins, last5.losses) == (3, 2)

    def test_splits_use_totals_and_044(self):
        summary = split_summary("Overall", self._season())
        poss = 6 * estimate_possessions(60, 10, 12, 20, ft_coefficient=0.44)
        points = 4 * 80 + 2 * 60
        assert summary.offensive_rating == pytest.approx(100 * points / poss)
        assert summary.points_per_game == pytest.approx(points / 6)

    def test_empty_subsets_omitted(self):
        games = [g for g in self._season() if g.location == HOME]
        names = [s.split_name for s in team_splits(games)]
        assert "Away" not in names
        assert "Home" in names


# ---------------------------------------------------------------------------
# RPI
# ---------------------------------------------------------------------------


class TestRPI:
    def test_hand_computed_owp_with_repeated_matchup(self, repeated_matchup_games):
        rpi = calculate_rpi(_by_team(repeated_matchup_games), {"A", "B", "C"})

        # OWP subtracts the head-to-head results once after aggregating
        assert rpi["A"].owp == pytest.approx(2 / 5)
        assert rpi["B"].owp == pytest.approx(3 / 5)
        assert rpi["C"].owp == pytest.approx(2 / 4)

    def test_hand_computed_oowp_and_rpi(self, repeated_matchup_games):
        rpi = calculate_rpi(_by_team(repeated_matchup_games), {"A", "B", "C"})

        assert rpi["A"].oowp == pytest.approx((0.6 + 0.6 + 0.5) / 3)
        assert rpi["B"].oowp == pytest.approx((0.4 + 0.4 + 0.5) / 3)
        assert rpi["C"].oowp == pytest.approx((0.6 + 0.4) / 2)

        assert rpi["A"].rpi == pytest.approx(0.3 * (2 / 3) + 0.5 * 0.4 + 0.2 * (1.7 / 3))
        assert rpi["B"].rpi == pytest.approx(0.3 * (1 / 3) + 0.5 * 0.6 + 0.2 * (1.3 / 3))
        assert rpi["C"].rpi == pytest.approx(0.5)
        assert rpi["A"].sos == pytest.approx(0.67 * 0.4 + 0.33 * (1.7 / 3))

    def test_non_member_games_are_invisible(self, repeated_matchup_games):
        games = list(repeated_matchup_games)
        games.append(GameResult(team_id="A", opponent_id=None, team_score=90, opponent_score=50, eligible=False))
        games += _pair("A", "OUTSIDER", 50, 90)
        rpi = calculate_rpi(_by_team(games), {"A", "B", "C"})
        assert (rpi["A"].wins, rpi["A"].losses) == (2, 1)
        assert rpi["A"].owp == pytest.approx(2 / 5)

    def test_team_without_eligible_games_absent(self, repeated_matchup_games):
        games = list(repeated_matchup_games)
        games.append(GameResult(team_id="D", opponent_id=None, team_score=90, opponent_score=50))
        rpi = calculate_rpi(_by_team(games), {"A", "B", "C", "D"})
        assert "D" not in rpi

    def test_zero_adjusted_opponent_total(self):
        # Only opponent's only game is against us: OWP is 0, not a division error
        rpi = calculate_rpi(_by_team(_pair("A", "B", 70, 60)), {"A", "B"})
        assert rpi["A"].owp == 0.0
        assert rpi["B"].owp == 0.0


# ---------------------------------------------------------------------------
# Adjusted efficiency
# ---------------------------------------------------------------------------


class TestAdjustedRatings:
    RAW_OFF = {"A": 110.0, "B": 100.0}
    RAW_DEF = {"A": 100.0, "B": 110.0}

    def test_single_neutral_round(self):
        games = _by_team(_pair("A", "B", 70, 60))
        adj_off, adj_def = adjust_ratings(games, self.RAW_OFF, self.RAW_DEF, rounds=1)
        assert adj_off["A"] == pytest.approx(108.0)
        assert adj_def["A"] == pytest.approx(102.0)
        assert adj_off["B"] == pytest.approx(102.0)
        assert adj_def["B"] == pytest.approx(108.0)

    def test_home_court_shift(self):
        games = _by_team(_pair("A", "B", 70, 60, location=HOME))
        adj_off, adj_def = adjust_ratings(games, self.RAW_OFF, self.RAW_DEF, rounds=1)
        assert adj_off["A"] == pytest.approx(107.3)
        assert adj_def["A"] == pytest.approx(102.7)
        assert adj_off["B"] == pytest.approx(102.7)
        assert adj_def["B"] == pytest.approx(107.3)

    def test_no_resolvable_opponents_keeps_raw(self):
        games = _by_team(_pair("A", "B", 70, 60) + _pair("C", "GHOST", 70, 60))
        raw_off = dict(self.RAW_OFF, C=95.0)
        raw_def = dict(self.RAW_DEF, C=105.0)
        adj_off, adj_def = adjust_ratings(games, raw_off, raw_def)
        assert adj_off["C"] == 95.0
        assert adj_def["C"] == 105.0

    def test_zero_rounds_is_raw(self):
        games = _by_team(_pair("A", "B", 70, 60))
        adj_off, adj_def = adjust_ratings(games, self.RAW_OFF, self.RAW_DEF, rounds=0)
        assert adj_off == self.RAW_OFF
        assert adj_def == self.RAW_DEF

    def test_converge_mode_reaches_fixed_point(self):
        games = _by_team(_pair("A", "B", 70, 60))
        adj_off, adj_def, rounds = adjust_ratings_until_converged(
            games, self.RAW_OFF, self.RAW_DEF, tolerance=1e-10
        )
        assert 5 < rounds < 200
        assert adj_off["A"] == pytest.approx(105 + 5 / 1.4, abs=1e-6)
        assert adj_def["B"] == pytest.approx(105 + 5 / 1.4, abs=1e-6)

    def test_schedule_strength(self):
        games = _by_team(_pair("A", "B", 70, 60) + _pair("C", "GHOST", 70, 60))
        adj_off = {"A": 108.0, "B": 102.0}
        adj_def = {"A": 102.0, "B": 108.0}
        sos = schedule_strength(games, adj_off, adj_def)
        assert sos["A"].osos == pytest.approx(102.0)
        assert sos["A"].dsos == pytest.approx(108.0)
        assert sos["A"].nsos == pytest.approx(-6.0)
        # No resolvable opponent: league average
        assert sos["C"].osos == pytest.approx(105.0)
        assert sos["C"].dsos == pytest.approx(105.0)


# ---------------------------------------------------------------------------
# RatingCalculator
# ---------------------------------------------------------------------------


class TestRatingCalculator:
    @pytest.fixture
    def league(self, repeated_matchup_games):
        teams = [Team(team_id=t) for t in ("A", "B", "C", "D")]
        games = list(repeated_matchup_games)
        games.append(GameResult(team_id="A", opponent_id=None, team_score=90, opponent_score=50, eligible=False))
        return teams, games

    def test_wins_plus_losses_equals_eligible_games(self, league):
        teams, games = league
        snapshots = RatingCalculator().calculate(teams, games)
        for tid in ("A", "B", "C"):
            snap = snapshots[tid]
            eligible = [g for g in games if g.team_id == tid and g.eligible and g.opponent_id]
            assert snap.wins + snap.losses == len(eligible) == snap.games_played

    def test_total_record_includes_non_member_games(self, league):
        teams, games = league
        snap = RatingCalculator().calculate(teams, games)["A"]
        assert (snap.wins, snap.losses) == (2, 1)
        assert (snap.total_wins, snap.total_losses) == (3, 1)
        assert snap.total_win_pct == pytest.approx(0.75)

    def test_total_record_excludes_national_tournament(self, league):
        teams, games = league
        before = RatingCalculator().calculate(teams, games)["A"]
        games = games + _pair("B", "A", 70, 60, is_postseason=True, is_national_tournament=True)
        after = RatingCalculator().calculate(teams, games)["A"]
        assert (after.total_wins, after.total_losses) == (before.total_wins, before.total_losses)
        assert after.total_wins + after.total_losses == 4

    def test_zero_eligible_games_is_null_snapshot(self, league):
        teams, games = league
        snapshots = RatingCalculator().calculate(teams, games)
        assert snapshots["D"] is None

    def test_ineligible_team_is_null_snapshot(self, repeated_matchup_games):
        teams = [Team(team_id="A"), Team(team_id="B"), Team(team_id="C", eligible=False)]
        snapshots = RatingCalculator().calculate(teams, repeated_matchup_games)
        assert snapshots["C"] is None
        # C's games no longer count for A and B
        assert (snapshots["A"].wins, snapshots["A"].losses) == (2, 0)

    def test_snapshot_carries_rpi_components(self, league):
        teams, games = league
        snap = RatingCalculator().calculate(teams, games)["A"]
        assert snap.owp == pytest.approx(0.4)
        assert snap.rpi == pytest.approx(0.3 * (2 / 3) + 0.5 * 0.4 + 0.2 * (1.7 / 3))
        assert snap.pace == pytest.approx(71.5)
        assert snap.adjusted_net_rating is not None
        assert snap.nsos == pytest.approx(snap.osos - snap.dsos)

    def test_null_ratings_without_box_scores(self):
        teams = [Team(team_id="A"), Team(team_id="B")]
        games = _pair("A", "B", 70, 60, box=False)
        snap = RatingCalculator().calculate(teams, games)["A"]
        assert snap.raw_offensive_rating is None
        assert snap.adjusted_offensive_rating is None
        assert snap.rpi == pytest.approx(0.3)

    def test_as_of_truncation(self):
        teams = [Team(team_id="A"), Team(team_id="B")]
        games = _pair("A", "B", 70, 60, game_date=date(2026, 1, 1)) + _pair("B", "A", 70, 60, game_date=date(2026, 2, 1))
        snap = RatingCalculator().calculate(teams, games, as_of=date(2026, 1, 15))["A"]
        assert (snap.wins, snap.losses) == (1, 0)

    def test_season_filter(self):
        games = _pair("A", "B", 70, 60, season="2024-25") + _pair("A", "B", 60, 70, season="2025-26")
        assert len(filter_games(games, season="2025-26")) == 2

    def test_converge_mode_runs(self, league):
        teams, games = league
        fixed = RatingCalculator().calculate(teams, games)
        converged = RatingCalculator(EngineConfig(relaxation_mode="converge")).calculate(teams, games)
        # RPI does not depend on the relaxation mode
        assert converged["A"].rpi == pytest.approx(fixed["A"].rpi)

    def test_identical_input_identical_output(self, league):
        teams, games = league
        first = RatingCalculator().calculate(teams, games)
        second = RatingCalculator().calculate(teams, games)
        assert {k: v.to_dict() if v else None for k, v in first.items()} == {
            k: v.to_dict() if v else None for k, v in second.items()
        }
