from __future__ import annotations

"""Draft board assembly (pure).

standings records + trade ledger -> projected order -> one ResolvedPick per
(round, slot), each owner resolved by draft.ownership.

Output contract:
  - exactly rounds * len(teams) picks
  - sorted by (round, slot); slot is 1..N per round, overall_no is cumulative
  - every pick has an owning team (fallback: the original team)
"""

import logging
from collections import Counter
from typing import List, Mapping, Optional, Sequence, Tuple, Union

from config import DRAFT_ROUNDS
from team_utils import get_all_teams, teams_by_id
from trades.errors import HEURISTIC_MATCH, LEDGER_MATCH_MISSING, Diagnostic
from trades.protection import describe_protection

from .order import compute_projected_order
from .ownership import is_own_origin, resolve_owner
from .types import (
    DraftBoard,
    OwnerResolution,
    ResolvedPick,
    Team,
    TeamId,
    TeamLedger,
    TeamRecord,
    make_pick_id,
    norm_team_id,
)

logger = logging.getLogger(__name__)


def _provenance(res: OwnerResolution, original_abbr: str) -> Tuple[str, bool]:
    """(origin text, is_swap_rights) for a resolved slot."""
    # A reclaimed pick is back home; the foreign entry only explains why.
    rec = res.record if res.source != "protection_reclaim" else None
    is_swap = bool(rec is not None and rec.is_swap_rights)

    if res.transferred:
        if rec is not None and not is_own_origin(rec.origin):
            return rec.origin, is_swap
        return f"via {original_abbr}", is_swap
    if is_swap:
        return rec.origin, True
    return "Own", False


def _resolved_pick(
    res: OwnerResolution,
    *,
    slot: int,
    overall_no: int,
    position: Optional[int],
    teams: Mapping[TeamId, Team],
) -> ResolvedPick:
    original = teams.get(res.original_team)
    origin, is_swap = _provenance(res, original.abbreviation if original is not None else res.original_team)
    protections = res.record.protections if res.record is not None else ""

    owner = teams.get(res.owning_team)
    attrs = {
        "source": res.source,
        "projected_position": position,
        "owning_team_name": owner.full_name if owner is not None else res.owning_team,
        "original_team_name": original.full_name if original is not None else res.original_team,
        "protection_summary": describe_protection(protections) if protections else "",
        "conveyance": None if res.conveyance is None else res.conveyance.to_dict(),
        "candidates": [c.to_dict() for c in res.candidates],
    }
    return ResolvedPick(
        year=res.year,
        round=res.round,
        slot=slot,
        overall_no=overall_no,
        pick_id=make_pick_id(res.year, res.round, res.original_team),
        owning_team=res.owning_team,
        original_team=res.original_team,
        origin=origin,
        protections=protections,
        is_traded=res.transferred,
        is_swap_rights=is_swap,
        attrs=attrs,
    )


def build_draft_board_report(
    year: int,
    ledger: Mapping[TeamId, TeamLedger],
    records: Mapping[TeamId, TeamRecord],
    *,
    teams: Optional[Sequence[Team]] = None,
    rounds: int = DRAFT_ROUNDS,
    current_year: Optional[int] = None,
) -> DraftBoard:
    """Resolve every slot of one draft year.

    Args:
        year: draft year to project.
        ledger: team_id -> TeamLedger. Teams without a ledger have no entries.
        records: team_id -> TeamRecord. Teams without a record count as 0-0.
        teams: teams on the board (default: the full team directory).
        rounds: number of rounds.
        current_year: year in which complex-case keys are honoured
            (default: config.CURRENT_DRAFT_YEAR).
    """
    year_i = int(year)
    team_list = list(teams) if teams is not None else get_all_teams()
    by_id = teams_by_id(team_list)

    order = compute_projected_order(draft_year=year_i, records=records, teams=team_list, rounds=rounds)

    picks: List[ResolvedPick] = []
    diagnostics: List[Diagnostic] = []
    sources: Counter = Counter()
    overall_no = 0
    for round_no in range(1, order.rounds + 1):
        for slot, original_team in enumerate(order.slot_to_original_team(round_no), start=1):
            overall_no += 1
            res = resolve_owner(
                original_team,
                round_no,
                year_i,
                ledger,
                order.positions,
                teams=by_id,
                current_year=current_year,
            )
            sources[res.source] += 1
            diagnostics.extend(res.diagnostics)
            picks.append(
                _resolved_pick(
                    res,
                    slot=slot,
                    overall_no=overall_no,
                    position=order.positions.get(original_team),
                    teams=by_id,
                )
            )

    codes = Counter(d.code for d in diagnostics)
    traded = sum(1 for p in picks if p.is_traded)
    logger.info(
        "DRAFT_BOARD_BUILT year=%s rounds=%s picks=%s traded=%s missing=%s heuristic=%s",
        year_i,
        order.rounds,
        len(picks),
        traded,
        codes.get(LEDGER_MATCH_MISSING, 0),
        codes.get(HEURISTIC_MATCH, 0),
    )

    return DraftBoard(
        year=year_i,
        rounds=order.rounds,
        order_worst_to_best=order.rank_worst_to_best,
        positions=dict(order.positions),
        picks=tuple(picks),
        diagnostics=tuple(diagnostics),
        meta={
            "team_count": len(order.rank_worst_to_best),
            "traded_count": traded,
            "sources": dict(sources),
            "diagnostic_counts": dict(codes),
            "records": {tid: rec.to_dict() for tid, rec in order.records.items()},
        },
    )


def build_draft_board(
    year: int,
    ledger: Mapping[TeamId, TeamLedger],
    records: Mapping[TeamId, TeamRecord],
    *,
    teams: Optional[Sequence[Team]] = None,
    rounds: int = DRAFT_ROUNDS,
    current_year: Optional[int] = None,
) -> List[ResolvedPick]:
    report = build_draft_board_report(
        year,
        ledger,
        records,
        teams=teams,
        rounds=rounds,
        current_year=current_year,
    )
    return list(report.picks)


def get_team_picks_for_year(
    board: Union[DraftBoard, Sequence[ResolvedPick]],
    team_id: str,
) -> List[ResolvedPick]:
    """Slots a team currently owns, in board order."""
    if isinstance(board, DraftBoard):
        return list(board.picks_for_team(team_id))
    tid = norm_team_id(team_id)
    return [p for p in board if p.owning_team == tid]
