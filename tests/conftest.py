from __future__ import annotations

from typing import Dict, Iterable, List, Tuple

import pytest

from draft.types import PickRecord, Team, TeamLedger, TeamRecord


SMALL_TEAMS: List[Tuple[str, str, str]] = [
    ("AAA", "Aces", "Alpha Aces"),
    ("BBB", "Bears", "Beta Bears"),
    ("CCC", "Comets", "Gamma Comets"),
    ("DDD", "Dragons", "Delta Dragons"),
]


@pytest.fixture
def small_teams() -> List[Team]:
    return [Team(team_id=t, abbreviation=t, name=n, full_name=f) for t, n, f in SMALL_TEAMS]


@pytest.fixture
def make_records():
    """{"AAA": (w, l) | (w, l, t)} -> {team_id: TeamRecord}"""

    def _make(rows: Dict[str, tuple]) -> Dict[str, TeamRecord]:
        out: Dict[str, TeamRecord] = {}
        for tid, row in rows.items():
            wins, losses = row[0], row[1]
            ties = row[2] if len(row) > 2 else 0
            out[tid] = TeamRecord(team_id=tid, wins=wins, losses=losses, ties=ties)
        return out

    return _make


@pytest.fixture
def make_ledger():
    """{holder: [(year, round, from, protections), ...]} -> Ledger"""

    def _make(rows: Dict[str, Iterable[tuple]]) -> Dict[str, TeamLedger]:
        out: Dict[str, TeamLedger] = {}
        for holder, picks in rows.items():
            incoming = []
            for row in picks:
                year, round_no, origin = row[0], row[1], row[2]
                protections = row[3] if len(row) > 3 else ""
                complex_key = row[4] if len(row) > 4 else None
                incoming.append(
                    PickRecord(
                        year=year,
                        round=round_no,
                        holder_team=holder,
                        origin=origin,
                        protections=protections,
                        complex_key=complex_key,
                    )
                )
            out[holder] = TeamLedger(team_id=holder, incoming=tuple(incoming))
        return out

    return _make


@pytest.fixture
def positions_small() -> Dict[str, int]:
    return {"AAA": 1, "BBB": 2, "CCC": 3, "DDD": 4}
