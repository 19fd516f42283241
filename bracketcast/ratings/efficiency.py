"""Possession estimate, raw efficiency and per-team split summaries."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence

from ..models.game import AWAY, HOME, GameResult


SEASON_FT_COEFFICIENT = 0.475
SPLIT_FT_COEFFICIENT = 0.44


def estimate_possessions(
    fga: float,
    oreb: float,
    turnovers: float,
    fta: float,
    ft_coefficient: float = SEASON_FT_COEFFICIENT,
) -> float:
    """Possessions = FGA - OREB + TO + k * FTA."""
    return fga - oreb + turnovers + ft_coefficient * fta


@dataclass
class RawEfficiency:
    """Per-game box-score summary for one team's eligible games."""

    games_played: int
    points_per_game: float
    points_allowed_per_game: float
    possessions: float
    opp_possessions: float
    offensive_rating: Optional[float]
    defensive_rating: Optional[float]

    @property
    def net_rating(self) -> Optional[float]:
        if self.offensive_rating is None or self.defensive_rating is None:
            return None
        return self.offensive_rating - self.defensive_rating

    @property
    def pace(self) -> float:
        return self.possessions


def raw_efficiency(
    games: Sequence[GameResult],
    ft_coefficient: float = SEASON_FT_COEFFICIENT,
) -> Optional[RawEfficiency]:
    """
    Points per 100 possessions from per-game averages.

    Offensive/defensive ratings are None when the box scores do not yield a
    positive possession estimate, so the team never enters a league average
    as a zero.
    """
    n = len(games)
    if n == 0:
        return None

    ppg = sum(g.team_score for g in games) / n
    opp_ppg = sum(g.opponent_score for g in games) / n

    poss = estimate_possessions(
        sum(g.fga for g in games) / n,
        sum(g.oreb for g in games) / n,
        sum(g.turnovers for g in games) / n,
        sum(g.fta for g in games) / n,
        ft_coefficient,
    )
    opp_poss = estimate_possessions(
        sum(g.opp_fga for g in games) / n,
        sum(g.opp_oreb for g in games) / n,
        sum(g.opp_turnovers for g in games) / n,
        sum(g.opp_fta for g in games) / n,
        ft_coefficient,
    )

    return RawEfficiency(
        games_played=n,
        points_per_game=ppg,
        points_allowed_per_game=opp_ppg,
        possessions=poss,
        opp_possessions=opp_poss,
        offensive_rating=100.0 * ppg / poss if poss > 0 else None,
        defensive_rating=100.0 * opp_ppg / opp_poss if opp_poss > 0 else None,
    )


@dataclass
class TeamSplit:
    """Record and efficiency over a subset of a team's games."""

    split_name: str
    games_played: int
    wins: int
    losses: int
    points_per_game: float
    points_allowed_per_game: float
    offensive_rating: Optional[float]
    defensive_rating: Optional[float]
    net_rating: Optional[float]

    @property
    def win_pct(self) -> float:
        return self.wins / self.games_played if self.games_played else 0.0

    def to_dict(self) -> dict:
        out = dict(self.__dict__)
        out["win_pct"] = self.win_pct
        return out


def split_summary(
    split_name: str,
    games: Sequence[GameResult],
    ft_coefficient: float = SPLIT_FT_COEFFICIENT,
) -> Optional[TeamSplit]:
    """Summarize a subset of games; possessions here are season totals, not averages."""
    if not games:
        return None

    n = len(games)
    wins = sum(1 for g in games if g.is_win)
    points = sum(g.team_score for g in games)
    opp_points = sum(g.opponent_score for g in games)

    poss = estimate_possessions(
        sum(g.fga for g in games),
        sum(g.oreb for g in games),
        sum(g.turnovers for g in games),
        sum(g.fta for g in games),
        ft_coefficient,
    )
    opp_poss = estimate_possessions(
        sum(g.opp_fga for g in games),
        sum(g.opp_oreb for g in games),
        sum(g.opp_turnovers for g in games),
        sum(g.opp_fta for g in games),
        ft_coefficient,
    )

    ortg = 100.0 * points / poss if poss > 0 else None
    drtg = 100.0 * opp_points / opp_poss if opp_poss > 0 else None
    net = ortg - drtg if ortg is not None and drtg is not None else None

    return TeamSplit(
        split_name=split_name,
        games_played=n,
        wins=wins,
        losses=n - wins,
        points_per_game=points / n,
        points_allowed_per_game=opp_points / n,
        offensive_rating=ortg,
        defensive_rating=drtg,
        net_rating=net,
    )


def team_splits(
    games: Sequence[GameResult],
    ft_coefficient: float = SPLIT_FT_COEFFICIENT,
) -> List[TeamSplit]:
    """
    Overall / Conference / Last 5 / Last 10 / Home / Away / In Wins / In Losses.

    "Last N" uses game dates when every game carries one, otherwise input
    order (most recent last). Empty subsets are omitted.
    """
    if all(g.game_date is not None for g in games):
        ordered = sorted(games, key=lambda g: g.game_date)
    else:
        ordered = list(games)
    recent_first = list(reversed(ordered))

    subsets: Dict[str, List[GameResult]] = {
        "Overall": ordered,
        "Conference": [g for g in ordered if g.is_conference],
        "Last 5": recent_first[:5],
        "Last 10": recent_first[:10],
        "Home": [g for g in ordered if g.location == HOME],
        "Away": [g for g in ordered if g.location == AWAY],
        "In Wins": [g for g in ordered if g.is_win],
        "In Losses": [g for g in ordered if not g.is_win],
    }

    splits = []
    for name, subset in subsets.items():
        summary = split_summary(name, subset, ft_coefficient)
        if summary is not None:
            splits.append(summary)
    return splits
