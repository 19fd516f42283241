"""
Conference tournament champion detection.

A conference's postseason is located by its busiest date (the most distinct
teams in action, earliest on ties). The tournament is then taken to be the
dates from one day before that peak through ten days after it, trimmed to the
unbroken run around the peak in which consecutive game dates are at most
four days apart. A qualifier played weeks earlier, or a stray game after the
tournament ended, falls outside that run.

The champion is the winner on the last date of the run that had at least two
teams playing.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from datetime import date, timedelta
from typing import Dict, Iterable, List, Mapping, Optional, Set

from ..models.game import GameResult

logger = logging.getLogger(__name__)

WINDOW_BEFORE_PEAK = timedelta(days=1)
WINDOW_AFTER_PEAK = timedelta(days=10)
MAX_GAP_DAYS = 4
MIN_TEAMS_ON_FINAL_DATE = 2


def _tournament_dates(teams_by_date: Mapping[date, Set[str]]) -> List[date]:
    """Dates of the continuous main tournament, in order."""
    peak = min(teams_by_date, key=lambda d: (-len(teams_by_date[d]), d))
    window = sorted(
        d for d in teams_by_date
        if peak - WINDOW_BEFORE_PEAK <= d <= peak + WINDOW_AFTER_PEAK
    )

    idx = window.index(peak)
    start = idx
    while start > 0 and (window[start] - window[start - 1]).days <= MAX_GAP_DAYS:
        start -= 1
    end = idx
    while end < len(window) - 1 and (window[end + 1] - window[end]).days <= MAX_GAP_DAYS:
        end += 1
    return window[start:end + 1]


def _conference_champion(games: List[GameResult]) -> Optional[str]:
    teams_by_date: Dict[date, Set[str]] = defaultdict(set)
    for g in games:
        teams_by_date[g.game_date].add(g.team_id)

    run = _tournament_dates(teams_by_date)
    final_dates = [d for d in run if len(teams_by_date[d]) >= MIN_TEAMS_ON_FINAL_DATE]
    if not final_dates:
        return None
    champ_date = final_dates[-1]

    winners = [g.team_id for g in games if g.game_date == champ_date and g.is_win]
    if not winners:
        return None
    return winners[-1]


def find_conference_champions(
    games: Iterable[GameResult],
    team_conferences: Mapping[str, str],
) -> Dict[str, str]:
    """
    Identify each conference's tournament champion.

    Args:
        games: Game records; only postseason games outside the national
            tournament with a date are considered.
        team_conferences: Team id to conference label. Teams without a
            conference are ignored.

    Returns:
        Conference label to champion team id. Conferences with no postseason
        games are absent.
    """
    by_conference: Dict[str, List[GameResult]] = defaultdict(list)
    undated = 0
    for g in games:
        if not g.is_postseason or g.is_national_tournament:
            continue
        conference = team_conferences.get(g.team_id)
        if not conference:
            continue
        if g.game_date is None:
            undated += 1
            continue
        by_conference[conference].append(g)

    if undated:
        logger.warning("Ignored %d undated postseason games in champion detection", undated)

    champions: Dict[str, str] = {}
    for conference in sorted(by_conference):
        champion = _conference_champion(by_conference[conference])
        if champion is None:
            logger.debug("No champion found for conference %s", conference)
            continue
        champions[conference] = champion

    logger.info("Detected %d conference champions", len(champions))
    return champions
