"""Schema validators for league files."""

from __future__ import annotations

from datetime import date
from typing import Dict, List, Optional, Set

from ..models.game import LOCATIONS


def _to_int(value) -> Optional[int]:
    if value is None or value == "":
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _to_float(value) -> Optional[float]:
    if value is None:
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def validate_teams_payload(payload: Dict) -> List[str]:
    errors: List[str] = []
    teams = payload.get("teams")
    if not isinstance(teams, list) or not teams:
        return ["league payload must include non-empty 'teams' list"]

    seen: Set[str] = set()
    for idx, row in enumerate(teams):
        if not isinstance(row, dict):
            errors.append(f"teams[{idx}] must be an object")
            continue
        if not row.get("team_id"):
            errors.append(f"teams[{idx}] missing fields: team_id")
            continue

        team_id = str(row["team_id"])
        if team_id in seen:
            errors.append(f"teams[{idx}] duplicate team_id '{team_id}'")
        seen.add(team_id)

        lat = row.get("latitude")
        lon = row.get("longitude")
        if (lat is None) != (lon is None):
            errors.append(f"teams[{idx}] must set both latitude and longitude or neither")
            continue
        if lat is not None:
            lat_f, lon_f = _to_float(lat), _to_float(lon)
            if lat_f is None or not -90.0 <= lat_f <= 90.0:
                errors.append(f"teams[{idx}] invalid latitude {lat!r}")
            if lon_f is None or not -180.0 <= lon_f <= 180.0:
                errors.append(f"teams[{idx}] invalid longitude {lon!r}")
    return errors


def validate_games_payload(payload: Dict, team_ids: Optional[Set[str]] = None) -> List[str]:
    """Reject games the engine cannot trust: missing or tied scores, bad locations, unknown teams."""
    errors: List[str] = []
    games = payload.get("games")
    if not isinstance(games, list):
        return ["league payload must include a 'games' list"]

    for idx, row in enumerate(games):
        if not isinstance(row, dict):
            errors.append(f"games[{idx}] must be an object")
            continue

        if not row.get("team_id"):
            errors.append(f"games[{idx}] missing fields: team_id")
            continue
        if team_ids is not None and str(row["team_id"]) not in team_ids:
            errors.append(f"games[{idx}] references unknown team '{row['team_id']}'")

        team_score = _to_int(row.get("team_score"))
        opponent_score = _to_int(row.get("opponent_score"))
        if team_score is None or opponent_score is None:
            errors.append(f"games[{idx}] missing/invalid final score")
        elif team_score == opponent_score:
            errors.append(f"games[{idx}] tied score {team_score}-{opponent_score}")

        location = row.get("location", "neutral")
        if location not in LOCATIONS:
            errors.append(f"games[{idx}] invalid location '{location}'")

        game_date = row.get("game_date")
        if game_date:
            try:
                date.fromisoformat(str(game_date)[:10])
            except ValueError:
                errors.append(f"games[{idx}] invalid game_date '{game_date}'")
    return errors


def validate_league_payload(payload: Dict) -> List[str]:
    if not isinstance(payload, dict):
        return ["league payload must be an object"]
    errors = validate_teams_payload(payload)
    team_ids = {
        str(t["team_id"]) for t in payload.get("teams") or [] if isinstance(t, dict) and t.get("team_id")
    }
    errors.extend(validate_games_payload(payload, team_ids or None))
    return errors
