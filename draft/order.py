from __future__ import annotations

"""Projected draft order construction (pure).

Responsibilities:
  - From team records -> worst-to-best ranking for a given draft_year.
  - Every round uses the same ranking; slots are 1..N per round.
  - pick_id -> slot mapping for every (round, original team).

Note:
  This module ONLY outputs the "original order" (original team per slot).
  Who actually owns each slot is resolved by draft.ownership. There is no
  lottery here: projections use standings order as-is.
"""

from typing import Dict, Mapping, Optional, Sequence

from .standings import rank_teams_worst_to_best
from .types import ProjectedOrder, Team, TeamId, TeamRecord, make_pick_id


def compute_projected_order(
    *,
    draft_year: int,
    records: Mapping[TeamId, TeamRecord],
    teams: Optional[Sequence[Team]] = None,
    rounds: int = 2,
) -> ProjectedOrder:
    """Compute a ProjectedOrder from records.

    When `teams` is given, exactly those teams are ranked (missing records
    count as 0-0); otherwise every team with a record is ranked.
    """
    draft_year_i = int(draft_year)
    rounds_i = max(1, int(rounds))

    rank = tuple(rank_teams_worst_to_best(records, teams=teams))
    positions: Dict[TeamId, int] = {tid: slot for slot, tid in enumerate(rank, start=1)}

    pick_order_by_pick_id: Dict[str, int] = {}
    for round_no in range(1, rounds_i + 1):
        for slot, original_team in enumerate(rank, start=1):
            pick_order_by_pick_id[make_pick_id(draft_year_i, round_no, original_team)] = int(slot)

    return ProjectedOrder(
        draft_year=draft_year_i,
        records={tid: rec for tid, rec in records.items() if tid in positions},
        rank_worst_to_best=rank,
        rounds=rounds_i,
        positions=positions,
        pick_order_by_pick_id=pick_order_by_pick_id,
    )
