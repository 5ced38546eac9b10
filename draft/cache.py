from __future__ import annotations

"""Caller-owned cache for built draft boards.

The engine itself is stateless. The web layer keeps one BoardCache and asks it
for a board keyed by (year, snapshot fingerprint); a fingerprint changes
whenever the standings records or the ledger change, so stale boards are
never served for new inputs. Entries also expire after `ttl_sec`.
"""

import hashlib
import json
import logging
import threading
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Mapping, Optional, Tuple

from .types import DraftBoard, TeamId, TeamLedger, TeamRecord

logger = logging.getLogger(__name__)

# Bumped when board semantics change so older fingerprints never match.
BOARD_GENERATOR_VERSION = "draft.board.v1"

CacheKey = Tuple[int, str]


def stable_json_dumps(obj: Any) -> str:
    """Deterministic JSON dumps used for hashing."""
    return json.dumps(
        obj,
        ensure_ascii=False,
        separators=(",", ":"),
        sort_keys=True,
        default=str,
    )


def _sha1_hex(text: str) -> str:
    return hashlib.sha1(text.encode("utf-8")).hexdigest()


def snapshot_fingerprint(
    records: Mapping[TeamId, TeamRecord],
    ledger: Mapping[TeamId, TeamLedger],
    *,
    extra: Optional[Mapping[str, Any]] = None,
) -> str:
    """Hash of everything a board depends on (records + ledger + extra)."""
    payload = {
        "v": BOARD_GENERATOR_VERSION,
        "records": {tid: [rec.wins, rec.losses, rec.ties] for tid, rec in records.items()},
        "ledger": {tid: tl.to_dict() for tid, tl in ledger.items()},
        "extra": dict(extra or {}),
    }
    return _sha1_hex(stable_json_dumps(payload))


@dataclass
class _Entry:
    board: DraftBoard
    stored_at: float


class BoardCache:
    """TTL cache of DraftBoard objects. Thread-safe; the clock is injectable for tests.

    Expired entries are pruned on every put, and at most `max_entries` boards are
    kept (oldest stored first out).
    """

    def __init__(
        self,
        ttl_sec: float,
        *,
        max_entries: int = 64,
        clock: Optional[Callable[[], float]] = None,
    ) -> None:
        self.ttl_sec = float(ttl_sec)
        self.max_entries = max(1, int(max_entries))
        self._clock = clock or time.monotonic
        self._entries: Dict[CacheKey, _Entry] = {}
        self._lock = threading.Lock()

    def get(self, year: int, fingerprint: str) -> Optional[DraftBoard]:
        key = (int(year), str(fingerprint))
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if self._clock() - entry.stored_at >= self.ttl_sec:
                del self._entries[key]
                logger.debug("DRAFT_BOARD_CACHE_EXPIRED year=%s fp=%s", key[0], key[1][:12])
                return None
            return entry.board

    def _prune_locked(self, now: float) -> int:
        expired = [k for k, e in self._entries.items() if now - e.stored_at >= self.ttl_sec]
        for k in expired:
            del self._entries[k]
        evicted = 0
        while len(self._entries) > self.max_entries:
            oldest = min(self._entries, key=lambda k: self._entries[k].stored_at)
            del self._entries[oldest]
            evicted += 1
        return len(expired) + evicted

    def put(self, year: int, fingerprint: str, board: DraftBoard) -> None:
        with self._lock:
            now = self._clock()
            key = (int(year), str(fingerprint))
            self._entries.pop(key, None)
            self._entries[key] = _Entry(board=board, stored_at=now)
            dropped = self._prune_locked(now)
        if dropped:
            logger.debug("DRAFT_BOARD_CACHE_PRUNED dropped=%s kept=%s", dropped, len(self))

    def get_or_build(self, year: int, fingerprint: str, build: Callable[[], DraftBoard]) -> DraftBoard:
        """Return the cached board, building (outside the lock) on a miss."""
        hit = self.get(year, fingerprint)
        if hit is not None:
            logger.debug("DRAFT_BOARD_CACHE_HIT year=%s fp=%s", year, fingerprint[:12])
            return hit
        board = build()
        self.put(year, fingerprint, board)
        return board

    def invalidate(self, year: Optional[int] = None) -> int:
        """Drop one year's boards (or all). Returns how many entries were removed."""
        with self._lock:
            if year is None:
                n = len(self._entries)
                self._entries.clear()
                return n
            keys = [k for k in self._entries if k[0] == int(year)]
            for k in keys:
                del self._entries[k]
            return len(keys)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
