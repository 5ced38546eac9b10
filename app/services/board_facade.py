from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from fastapi.responses import JSONResponse

import config
from draft.board import build_draft_board_report
from draft.cache import BoardCache, snapshot_fingerprint
from draft.standings import load_standings_snapshot
from draft.types import DraftBoard, PickRecord, Team, TeamLedger, TeamRecord
from team_utils import get_team
from trades.errors import TEAM_UNKNOWN, TradeError
from trades.ledger import load_ledger
from trades.protection import describe_protection

logger = logging.getLogger(__name__)

# Process-wide; boards are keyed by (year, fingerprint of every input).
_BOARD_CACHE = BoardCache(config.BOARD_CACHE_TTL_SEC, max_entries=config.BOARD_CACHE_MAX_ENTRIES)


def get_board_cache() -> BoardCache:
    return _BOARD_CACHE


def _trade_error_response(error: TradeError) -> JSONResponse:
    payload = {"ok": False, "error": error.to_dict()}
    return JSONResponse(status_code=400, content=payload)


def resolve_teams(team_ids: Optional[Iterable[str]]) -> Optional[List[Team]]:
    """Team ids -> Team objects. None keeps the full directory.

    Raises:
        TradeError(TEAM_UNKNOWN): an id is not in the team directory.
    """
    if team_ids is None:
        return None
    out: List[Team] = []
    for raw in team_ids:
        team = get_team(raw)
        if team is None:
            raise TradeError(TEAM_UNKNOWN, "Unknown team id", {"team_id": raw})
        out.append(team)
    return out


def load_configured_inputs() -> Tuple[Dict[str, TeamRecord], Dict[str, TeamLedger]]:
    """Standings snapshot + ledger directory from config (read per call)."""
    records = load_standings_snapshot(config.STANDINGS_PATH)
    ledger = load_ledger(config.LEDGER_DIR, config.ALL_TEAM_IDS)
    return records, ledger


def get_board(
    year: int,
    records: Mapping[str, TeamRecord],
    ledger: Mapping[str, TeamLedger],
    *,
    teams: Optional[Sequence[Team]] = None,
    rounds: int = config.DRAFT_ROUNDS,
    current_year: Optional[int] = None,
) -> DraftBoard:
    effective_year = config.CURRENT_DRAFT_YEAR if current_year is None else int(current_year)
    fingerprint = snapshot_fingerprint(
        records,
        ledger,
        extra={
            "rounds": int(rounds),
            "current_year": effective_year,
            "teams": None if teams is None else [t.team_id for t in teams],
        },
    )

    def _build() -> DraftBoard:
        return build_draft_board_report(
            year,
            ledger,
            records,
            teams=teams,
            rounds=rounds,
            current_year=effective_year,
        )

    return _BOARD_CACHE.get_or_build(int(year), fingerprint, _build)


def get_configured_board(year: int, *, rounds: int = config.DRAFT_ROUNDS) -> DraftBoard:
    records, ledger = load_configured_inputs()
    logger.debug("DRAFT_BOARD_INPUTS_LOADED year=%s records=%d ledgers=%d", year, len(records), len(ledger))
    return get_board(year, records, ledger, rounds=rounds)


def pick_record_payload(record: PickRecord) -> Dict[str, Any]:
    out = record.to_dict()
    out["protection_summary"] = describe_protection(record.protections) if record.protections else ""
    return out
