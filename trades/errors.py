from __future__ import annotations

"""Error codes and non-fatal diagnostics for the pick ledger.

Two channels:
- `TradeError` is raised at input boundaries (ledger files, standings
  snapshots, manual protection overrides). API layers turn it into a 400.
- `Diagnostic` is recorded (never raised) by the ownership engine, which
  must always resolve every slot.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional


# Boundary errors
PROTECTION_INVALID = "PROTECTION_INVALID"
LEDGER_ENTRY_INVALID = "LEDGER_ENTRY_INVALID"
STANDINGS_INVALID = "STANDINGS_INVALID"
TEAM_UNKNOWN = "TEAM_UNKNOWN"

# Engine diagnostics
LEDGER_MATCH_MISSING = "LEDGER_MATCH_MISSING"
HEURISTIC_MATCH = "HEURISTIC_MATCH"
COMPLEX_CASE_UNKNOWN = "COMPLEX_CASE_UNKNOWN"


class TradeError(Exception):
    def __init__(self, code: str, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        return {"code": self.code, "message": self.message, "details": dict(self.details)}


@dataclass(frozen=True, slots=True)
class Diagnostic:
    """A recoverable condition worth surfacing for manual audit."""

    code: str
    message: str
    details: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {"code": self.code, "message": self.message, "details": dict(self.details)}
