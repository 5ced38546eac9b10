from __future__ import annotations

"""Trade ledger loading.

Each team publishes one JSON document:

    {
      "teamId": "BOS",
      "incomingPicks": [
        {"year": 2026, "round": 1, "pick": "1st", "from": "Own", "protections": ""},
        {"year": 2026, "round": 2, "pick": "2nd", "from": "via SAS",
         "protections": "Protected 31-45", "complexProtectionKey": null,
         "protectionRule": {"type": "RANGE", "start": 1, "end": 15}}
      ],
      "outgoingPicks": [...]
    }

Entries are validated one by one. A malformed entry raises
TradeError(LEDGER_ENTRY_INVALID) from `pick_record_from_dict`; the document
loaders log and skip it so one bad row never hides a team's whole ledger.
"""

import json
import logging
import os
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from draft.types import PickRecord, TeamId, TeamLedger, norm_team_id
from team_utils import _warn_limited

from .errors import LEDGER_ENTRY_INVALID, PROTECTION_INVALID, TradeError
from .protection import protection_rules_from_payload

logger = logging.getLogger(__name__)

Ledger = Dict[TeamId, TeamLedger]


def _coerce_int(raw: Any, *, field_name: str, entry: Any) -> int:
    if isinstance(raw, bool):
        raise TradeError(LEDGER_ENTRY_INVALID, f"Ledger {field_name} must be an integer", {"entry": entry})
    try:
        return int(raw)
    except (TypeError, ValueError):
        raise TradeError(LEDGER_ENTRY_INVALID, f"Ledger {field_name} must be an integer", {"entry": entry})


def pick_record_from_dict(raw: Any, *, holder_team: str) -> PickRecord:
    """Validate one ledger entry.

    Raises:
        TradeError(LEDGER_ENTRY_INVALID): if `raw` is not a usable entry.
    """
    if not isinstance(raw, Mapping):
        raise TradeError(LEDGER_ENTRY_INVALID, "Ledger entry must be an object", {"entry": raw})

    year = _coerce_int(raw.get("year"), field_name="year", entry=raw)
    round_no = _coerce_int(raw.get("round"), field_name="round", entry=raw)
    if round_no < 1:
        raise TradeError(LEDGER_ENTRY_INVALID, "Ledger round out of range", {"entry": raw})

    origin = raw.get("from", raw.get("origin", "Own"))
    protections = raw.get("protections", "")
    if not isinstance(origin, str) or not isinstance(protections or "", str):
        raise TradeError(LEDGER_ENTRY_INVALID, "Ledger from/protections must be strings", {"entry": raw})

    rules = None
    override = raw.get("protectionRule", raw.get("protection_rules"))
    if override is not None:
        try:
            rules = protection_rules_from_payload(override)
        except TradeError as exc:
            if exc.code != PROTECTION_INVALID:
                raise
            raise TradeError(
                LEDGER_ENTRY_INVALID,
                "Ledger protectionRule is invalid",
                {"entry": raw, "protection_error": exc.to_dict()},
            ) from exc

    complex_key = raw.get("complexProtectionKey", raw.get("complex_key"))
    if complex_key is not None and not isinstance(complex_key, str):
        raise TradeError(LEDGER_ENTRY_INVALID, "Ledger complexProtectionKey must be a string", {"entry": raw})

    return PickRecord(
        year=year,
        round=round_no,
        holder_team=holder_team,
        origin=origin or "Own",
        protections=protections or "",
        pick_label=str(raw.get("pick") or ""),
        protection_rules=rules,
        complex_key=complex_key or None,
    )


def _records_from_list(items: Any, *, holder_team: str, side: str) -> Tuple[PickRecord, ...]:
    if items is None:
        return ()
    if not isinstance(items, list):
        _warn_limited("LEDGER_SIDE_NOT_LIST", "team=%s side=%s", holder_team, side)
        return ()
    out: List[PickRecord] = []
    for i, item in enumerate(items):
        try:
            out.append(pick_record_from_dict(item, holder_team=holder_team))
        except TradeError as exc:
            _warn_limited(
                "LEDGER_ENTRY_SKIPPED",
                "team=%s side=%s index=%s reason=%s",
                holder_team,
                side,
                i,
                exc.message,
            )
    return tuple(out)


def team_ledger_from_dict(raw: Any, *, team_id: Optional[str] = None) -> TeamLedger:
    if not isinstance(raw, Mapping):
        raise TradeError(LEDGER_ENTRY_INVALID, "Team ledger must be an object", {"team_id": team_id})
    tid = norm_team_id(team_id or raw.get("teamId") or raw.get("team_id"))
    if not tid:
        raise TradeError(LEDGER_ENTRY_INVALID, "Team ledger missing teamId", {})
    return TeamLedger(
        team_id=tid,
        incoming=_records_from_list(raw.get("incomingPicks", raw.get("incoming")), holder_team=tid, side="incoming"),
        outgoing=_records_from_list(raw.get("outgoingPicks", raw.get("outgoing")), holder_team=tid, side="outgoing"),
    )


def ledger_from_payload(raw: Any) -> Ledger:
    """{team_id: team document} or [team document, ...] -> Ledger."""
    out: Ledger = {}
    if isinstance(raw, Mapping):
        for k, doc in raw.items():
            team_ledger = team_ledger_from_dict(doc, team_id=k)
            out[team_ledger.team_id] = team_ledger
        return out
    if isinstance(raw, list):
        for doc in raw:
            team_ledger = team_ledger_from_dict(doc)
            out[team_ledger.team_id] = team_ledger
        return out
    raise TradeError(LEDGER_ENTRY_INVALID, "Ledger must be an object or a list", {"type": type(raw).__name__})


def load_team_ledger(ledger_dir: str, team_id: str) -> Optional[TeamLedger]:
    """Read `{ledger_dir}/{TEAM}.json`. Missing or unreadable files return None."""
    tid = norm_team_id(team_id)
    path = os.path.join(str(ledger_dir), f"{tid}.json")
    if not os.path.exists(path):
        return None
    try:
        with open(path, "r", encoding="utf-8") as f:
            doc = json.load(f)
        return team_ledger_from_dict(doc, team_id=tid)
    except (OSError, ValueError, TradeError):
        logger.warning("LEDGER_FILE_UNREADABLE path=%s", path, exc_info=True)
        return None


def load_ledger(ledger_dir: str, team_ids: Iterable[str]) -> Ledger:
    out: Ledger = {}
    for tid in team_ids:
        team_ledger = load_team_ledger(ledger_dir, tid)
        if team_ledger is not None:
            out[team_ledger.team_id] = team_ledger
    logger.debug("LEDGER_LOADED dir=%s teams=%d", ledger_dir, len(out))
    return out


def get_team_draft_assets(team_ledger: Optional[TeamLedger], year: int) -> Dict[str, List[PickRecord]]:
    """A team's incoming and outgoing ledger entries for one draft year."""
    if team_ledger is None:
        return {"incoming": [], "outgoing": []}
    return {
        "incoming": [p for p in team_ledger.incoming if p.year == int(year)],
        "outgoing": [p for p in team_ledger.outgoing if p.year == int(year)],
    }
