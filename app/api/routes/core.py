from __future__ import annotations

from fastapi import APIRouter

import config
from team_utils import get_all_teams
from app.services.board_facade import get_board_cache

router = APIRouter()


@router.get("/api/health")
async def api_health():
    return {
        "ok": True,
        "current_draft_year": config.CURRENT_DRAFT_YEAR,
        "draft_rounds": config.DRAFT_ROUNDS,
        "cached_boards": len(get_board_cache()),
    }


@router.get("/api/teams")
async def api_teams():
    return [t.to_dict() for t in get_all_teams()]
