from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from config import DRAFT_ROUNDS


class DraftBoardRequest(BaseModel):
    # standings: {"records": [...]} | {"records": {"BOS": "45-37"}} | {"games": [...]}
    # ledger: {TEAM: team document} | [team document, ...]; None => configured ledger dir
    year: int
    standings: Dict[str, Any]
    ledger: Optional[Any] = None
    team_ids: Optional[List[str]] = None
    rounds: int = Field(DRAFT_ROUNDS, ge=1, le=4)
    current_year: Optional[int] = None


class ProtectionEvaluateRequest(BaseModel):
    text: str = ""
    # Manual override, same shape as a ledger entry's protectionRule.
    rules: Optional[Any] = None
    year: Optional[int] = None
    position: Optional[int] = None
    positions_by_year: Dict[int, int] = Field(default_factory=dict)
