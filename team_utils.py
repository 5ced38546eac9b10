from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Optional

from config import ALL_TEAM_IDS, TEAM_DIRECTORY
from draft.types import Team, norm_team_id

logger = logging.getLogger(__name__)
_WARN_COUNTS: Dict[str, int] = {}


def _warn_limited(code: str, msg: str, *args, limit: int = 5) -> None:
    """Log a warning, but cap repeats per code."""
    n = _WARN_COUNTS.get(code, 0)
    if n < limit:
        logger.warning("%s " + msg, code, *args)
    _WARN_COUNTS[code] = n + 1


def get_all_teams(team_ids: Optional[Iterable[str]] = None) -> List[Team]:
    """Team directory entries, in directory order unless ids are given."""
    ids = ALL_TEAM_IDS if team_ids is None else [norm_team_id(t) for t in team_ids]
    out: List[Team] = []
    for tid in ids:
        team = get_team(tid)
        if team is not None:
            out.append(team)
    return out


def get_team(team_id: str) -> Optional[Team]:
    tid = norm_team_id(team_id)
    row = TEAM_DIRECTORY.get(tid)
    if row is None:
        return None
    abbreviation, name, full_name = row
    return Team(team_id=tid, abbreviation=abbreviation, name=name, full_name=full_name)


def find_team(text: str) -> Optional[Team]:
    """Look a team up by id, abbreviation, nickname or full name."""
    needle = str(text or "").strip().lower()
    if not needle:
        return None
    direct = get_team(needle)
    if direct is not None:
        return direct
    for team in get_all_teams():
        if needle in team.aliases():
            return team
    return None


def teams_by_id(teams: Iterable[Team]) -> Dict[str, Team]:
    return {t.team_id: t for t in teams}
