from __future__ import annotations

from typing import Any, Dict

from fastapi import APIRouter, HTTPException, Query

import config
from draft.board import get_team_picks_for_year
from draft.standings import records_from_snapshot
from team_utils import find_team
from trades.conveyance import evaluate_protection, simulate_conveyance
from trades.errors import TradeError
from trades.ledger import get_team_draft_assets, ledger_from_payload, load_ledger, load_team_ledger
from trades.protection import (
    has_protection_text,
    is_complex_protection,
    parse_protection,
    protection_rules_from_payload,
    summarize_protection,
)
from app.schemas.draft import DraftBoardRequest, ProtectionEvaluateRequest
from app.services.board_facade import (
    _trade_error_response,
    get_board,
    get_configured_board,
    pick_record_payload,
    resolve_teams,
)

router = APIRouter()


def _known_team_or_404(team_id: str):
    team = find_team(team_id)
    if team is None:
        raise HTTPException(status_code=404, detail=f"Unknown team: {team_id}")
    return team


@router.get("/api/draft/board/{year}")
async def api_draft_board(year: int, rounds: int = Query(config.DRAFT_ROUNDS, ge=1, le=4)):
    """Projected board from the configured standings snapshot and ledger directory."""
    try:
        board = get_configured_board(year, rounds=rounds)
    except TradeError as exc:
        return _trade_error_response(exc)
    return {"ok": True, "board": board.to_dict()}


@router.post("/api/draft/board")
async def api_draft_board_from_snapshot(req: DraftBoardRequest):
    try:
        records = records_from_snapshot(req.standings)
        if req.ledger is None:
            ledger = load_ledger(config.LEDGER_DIR, config.ALL_TEAM_IDS)
        else:
            ledger = ledger_from_payload(req.ledger)
        teams = resolve_teams(req.team_ids)
        board = get_board(
            req.year,
            records,
            ledger,
            teams=teams,
            rounds=req.rounds,
            current_year=req.current_year,
        )
    except TradeError as exc:
        return _trade_error_response(exc)
    return {"ok": True, "board": board.to_dict()}


@router.get("/api/draft/board/{year}/teams/{team_id}")
async def api_draft_board_team(year: int, team_id: str):
    team = _known_team_or_404(team_id)
    try:
        board = get_configured_board(year)
    except TradeError as exc:
        return _trade_error_response(exc)
    picks = get_team_picks_for_year(board, team.team_id)
    return {
        "ok": True,
        "year": board.year,
        "team": team.to_dict(),
        "picks": [p.to_dict() for p in picks],
    }


@router.get("/api/draft/teams/{team_id}/assets/{year}")
async def api_draft_team_assets(team_id: str, year: int):
    team = _known_team_or_404(team_id)
    assets = get_team_draft_assets(load_team_ledger(config.LEDGER_DIR, team.team_id), year)
    return {
        "ok": True,
        "year": int(year),
        "team": team.to_dict(),
        "incoming": [pick_record_payload(p) for p in assets["incoming"]],
        "outgoing": [pick_record_payload(p) for p in assets["outgoing"]],
    }


@router.post("/api/draft/protection/evaluate")
async def api_draft_protection_evaluate(req: ProtectionEvaluateRequest):
    """Parse a protection text (or manual rules) and optionally evaluate it.

    - year + position          -> single-year evaluation
    - positions_by_year        -> multi-year conveyance walk
    """
    try:
        if req.rules is not None:
            rules = list(protection_rules_from_payload(req.rules))
        else:
            rules = parse_protection(req.text)
    except TradeError as exc:
        return _trade_error_response(exc)

    out: Dict[str, Any] = {
        "ok": True,
        "text": req.text,
        "has_protection": has_protection_text(req.text) or req.rules is not None,
        "is_complex": is_complex_protection(req.text),
        "rules": [r.to_dict() for r in rules],
        "summary": summarize_protection(rules),
        "evaluation": None,
        "simulation": None,
    }
    if req.year is not None:
        out["evaluation"] = evaluate_protection(rules, req.position, req.year).to_dict()
    if req.positions_by_year:
        out["simulation"] = simulate_conveyance(rules, req.positions_by_year).to_dict()
    return out
