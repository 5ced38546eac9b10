from __future__ import annotations

"""Draft standings utilities (pure, plus one file loader).

Builds TeamRecord snapshots from the shapes the upstream standings feed
publishes, and ranks teams from worst to best for the projected draft order.

Accepted snapshot shapes:
  {"records": [{"teamId": "BOS", "wins": 45, "losses": 37, "ties": 0}, ...]}
  {"records": {"BOS": "45-37", "LAL": {"wins": 40, "losses": 42}}}
  {"games": [{"home_team_id", "away_team_id", "home_score", "away_score", "status"}, ...]}

Tie handling:
  Teams with an identical win fraction are ordered by fewer wins, then
  alphabetically by full name. The alphabetical step is a deterministic
  placeholder for the real tiebreak drawing, which is not simulated here.
"""

import json
import logging
from fractions import Fraction
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from trades.errors import STANDINGS_INVALID, TradeError

from .types import Team, TeamId, TeamRecord, norm_team_id

logger = logging.getLogger(__name__)


def parse_record_string(team_id: str, record: str) -> TeamRecord:
    """'45-37' or '10-6-1' -> TeamRecord."""
    parts = [p.strip() for p in str(record or "").split("-")]
    try:
        nums = [int(p) for p in parts if p != ""]
    except ValueError:
        raise TradeError(STANDINGS_INVALID, "Record must look like W-L or W-L-T", {"team_id": team_id, "record": record})
    if len(nums) not in (2, 3):
        raise TradeError(STANDINGS_INVALID, "Record must look like W-L or W-L-T", {"team_id": team_id, "record": record})
    ties = nums[2] if len(nums) == 3 else 0
    return TeamRecord(team_id=team_id, wins=nums[0], losses=nums[1], ties=ties)


def _record_from_row(team_id: str, row: Any) -> TeamRecord:
    if isinstance(row, TeamRecord):
        return row
    if isinstance(row, str):
        return parse_record_string(team_id, row)
    if isinstance(row, Mapping):
        return TeamRecord(
            team_id=team_id,
            wins=row.get("wins", 0),
            losses=row.get("losses", 0),
            ties=row.get("ties", 0),
        )
    raise TradeError(STANDINGS_INVALID, "Unsupported record row", {"team_id": team_id, "row": row})


def records_from_rows(rows: Any) -> Dict[TeamId, TeamRecord]:
    """Normalize a list of record rows or a team -> record mapping."""
    out: Dict[TeamId, TeamRecord] = {}
    if isinstance(rows, Mapping):
        for k, row in rows.items():
            tid = norm_team_id(k)
            if tid:
                out[tid] = _record_from_row(tid, row)
        return out
    if isinstance(rows, (list, tuple)):
        for row in rows:
            if isinstance(row, TeamRecord):
                out[row.team_id] = row
                continue
            if not isinstance(row, Mapping):
                raise TradeError(STANDINGS_INVALID, "Record rows must be objects", {"row": row})
            tid = norm_team_id(row.get("teamId", row.get("team_id")))
            if not tid:
                raise TradeError(STANDINGS_INVALID, "Record row missing teamId", {"row": row})
            out[tid] = _record_from_row(tid, row)
        return out
    raise TradeError(STANDINGS_INVALID, "records must be a list or an object", {"type": type(rows).__name__})


def compute_team_records_from_games(
    games: Iterable[Mapping[str, Any]],
    *,
    team_ids: Optional[Sequence[TeamId]] = None,
) -> Dict[TeamId, TeamRecord]:
    """Compute W/L/T from final games. Non-final or unscored rows are skipped."""
    acc: Dict[str, Dict[str, int]] = {
        norm_team_id(t): {"wins": 0, "losses": 0, "ties": 0} for t in (team_ids or [])
    }

    for g in games or []:
        if not isinstance(g, Mapping):
            continue
        if str(g.get("status") or "final").lower() != "final":
            continue

        hid = norm_team_id(g.get("home_team_id"))
        aid = norm_team_id(g.get("away_team_id"))
        hs = g.get("home_score")
        a_s = g.get("away_score")
        if not hid or not aid or hs is None or a_s is None:
            continue
        try:
            hs_i = int(hs)
            as_i = int(a_s)
        except (TypeError, ValueError):
            continue

        for tid in (hid, aid):
            if tid not in acc:
                acc[tid] = {"wins": 0, "losses": 0, "ties": 0}

        if hs_i > as_i:
            acc[hid]["wins"] += 1
            acc[aid]["losses"] += 1
        elif as_i > hs_i:
            acc[aid]["wins"] += 1
            acc[hid]["losses"] += 1
        else:
            acc[hid]["ties"] += 1
            acc[aid]["ties"] += 1

    return {tid: TeamRecord(team_id=tid, **row) for tid, row in acc.items()}


def records_from_snapshot(snapshot: Any) -> Dict[TeamId, TeamRecord]:
    if not isinstance(snapshot, Mapping):
        raise TradeError(STANDINGS_INVALID, "Standings snapshot must be an object", {})
    if "records" in snapshot:
        return records_from_rows(snapshot.get("records"))
    games = snapshot.get("games")
    if isinstance(games, list):
        return compute_team_records_from_games(games)
    raise TradeError(STANDINGS_INVALID, "Standings snapshot needs 'records' or 'games'", {"keys": sorted(snapshot)})


def load_standings_snapshot(path: str) -> Dict[TeamId, TeamRecord]:
    """Read a standings snapshot file.

    Raises:
        TradeError(STANDINGS_INVALID): missing, unreadable or malformed file.
    """
    try:
        with open(path, "r", encoding="utf-8") as f:
            snapshot = json.load(f)
    except (OSError, ValueError) as exc:
        raise TradeError(
            STANDINGS_INVALID,
            "Standings snapshot could not be read",
            {"path": str(path), "error": str(exc)},
        ) from exc
    return records_from_snapshot(snapshot)


def group_teams_by_win_fraction(
    records: Mapping[TeamId, TeamRecord],
    *,
    include_teams: Optional[Iterable[TeamId]] = None,
) -> List[Tuple[Fraction, List[TeamId]]]:
    """Group teams into tie groups by exact win fraction (worst -> best).

    Teams in `include_teams` without a record are treated as 0-0.
    """
    team_ids = list(records.keys()) if include_teams is None else [norm_team_id(t) for t in include_teams]

    buckets: Dict[Fraction, List[TeamId]] = {}
    for tid in team_ids:
        rec = records.get(norm_team_id(tid)) or TeamRecord(team_id=tid, wins=0, losses=0)
        buckets.setdefault(rec.win_fraction, []).append(rec.team_id)

    groups = sorted(buckets.items(), key=lambda kv: kv[0])
    for _, ids in groups:
        ids.sort()  # deterministic baseline
    return groups


def rank_teams_worst_to_best(
    records: Mapping[TeamId, TeamRecord],
    *,
    teams: Optional[Sequence[Team]] = None,
) -> List[TeamId]:
    """Return team ids sorted from worst -> best by win fraction.

    Within a tie group: fewer wins first, then full name (placeholder for a
    tiebreak drawing).
    """
    by_id = {t.team_id: t for t in (teams or [])}
    include = list(by_id.keys()) if teams is not None else None
    groups = group_teams_by_win_fraction(records, include_teams=include)

    out: List[TeamId] = []
    for _, ids in groups:
        if len(ids) > 1:
            logger.debug("DRAFT_STANDINGS_TIE_GROUP teams=%s", ",".join(ids))

        def _key(tid: str) -> Tuple[int, str]:
            rec = records.get(tid)
            wins = rec.wins if rec is not None else 0
            team = by_id.get(tid)
            return (wins, (team.full_name if team is not None else tid).lower())

        out.extend(sorted(ids, key=_key))
    return out
