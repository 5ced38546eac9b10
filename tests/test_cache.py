from __future__ import annotations

from draft.board import build_draft_board_report
from draft.cache import BoardCache, snapshot_fingerprint


class FakeClock:
    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now


def _board(small_teams, records, ledger):
    return build_draft_board_report(2026, ledger, records, teams=small_teams, rounds=1)


def test_fingerprint_tracks_inputs(make_records, make_ledger):
    records = make_records({"AAA": (1, 0)})
    ledger = make_ledger({"BBB": [(2026, 1, "via AAA")]})
    fp = snapshot_fingerprint(records, ledger)
    assert fp == snapshot_fingerprint(make_records({"AAA": (1, 0)}), make_ledger({"BBB": [(2026, 1, "via AAA")]}))
    assert fp != snapshot_fingerprint(make_records({"AAA": (1, 1)}), ledger)
    assert fp != snapshot_fingerprint(records, make_ledger({"BBB": [(2026, 1, "via AAA", "Top-3 protected")]}))
    assert fp != snapshot_fingerprint(records, ledger, extra={"rounds": 1})


def test_get_or_build_hits_until_ttl(small_teams, make_records):
    clock = FakeClock()
    cache = BoardCache(60, clock=clock)
    records = make_records({"AAA": (1, 0)})
    calls = []

    def build():
        calls.append(1)
        return _board(small_teams, records, {})

    first = cache.get_or_build(2026, "fp", build)
    clock.now += 59
    assert cache.get_or_build(2026, "fp", build) is first
    assert len(calls) == 1

    clock.now += 1
    assert cache.get(2026, "fp") is None
    cache.get_or_build(2026, "fp", build)
    assert len(calls) == 2


def test_keys_are_year_and_fingerprint(small_teams, make_records):
    cache = BoardCache(60, clock=FakeClock())
    board = _board(small_teams, make_records({}), {})
    cache.put(2026, "a", board)
    assert cache.get(2026, "a") is board
    assert cache.get(2026, "b") is None
    assert cache.get(2027, "a") is None


def test_invalidate(small_teams, make_records):
    cache = BoardCache(60, clock=FakeClock())
    board = _board(small_teams, make_records({}), {})
    cache.put(2026, "a", board)
    cache.put(2026, "b", board)
    cache.put(2027, "a", board)
    assert cache.invalidate(2026) == 2
    assert len(cache) == 1
    assert cache.invalidate() == 1
    assert len(cache) == 0


def test_put_prunes_expired_entries(small_teams, make_records):
    clock = FakeClock()
    cache = BoardCache(10, clock=clock)
    board = _board(small_teams, make_records({}), {})
    for i in range(100):
        cache.put(2026, f"fp-{i}", board)
        clock.now += 100
    assert len(cache) == 1
    assert cache.get(2026, "fp-99") is None
    cache.put(2026, "fresh", board)
    assert len(cache) == 1
    assert cache.get(2026, "fresh") is board


def test_max_entries_evicts_oldest(small_teams, make_records):
    clock = FakeClock()
    cache = BoardCache(3600, max_entries=2, clock=clock)
    board = _board(small_teams, make_records({}), {})
    cache.put(2026, "a", board)
    clock.now += 1
    cache.put(2026, "b", board)
    clock.now += 1
    cache.put(2026, "c", board)
    assert len(cache) == 2
    assert cache.get(2026, "a") is None
    assert cache.get(2026, "b") is board
    assert cache.get(2026, "c") is board

    # Re-storing a key refreshes its age.
    clock.now += 1
    cache.put(2026, "b", board)
    clock.now += 1
    cache.put(2026, "d", board)
    assert cache.get(2026, "c") is None
    assert cache.get(2026, "b") is board
