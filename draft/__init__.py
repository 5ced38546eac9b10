"""Draft board package.

Modules:
  - types      : core domain dataclasses (TeamRecord, PickRecord, ResolvedPick, DraftBoard, ...)
  - standings  : standings snapshots -> records -> worst-to-best ranking (pure)
  - order      : projected per-round order and positions (pure)
  - ownership  : per-slot owner resolution against the trade ledger (pure)
  - board      : full board assembly for one draft year (pure)
  - cache      : caller-owned TTL cache for built boards
"""

from __future__ import annotations

from .types import DraftBoard, PickRecord, ResolvedPick, TeamLedger, TeamRecord

__all__ = [
    "DraftBoard",
    "PickRecord",
    "ResolvedPick",
    "TeamLedger",
    "TeamRecord",
]
