from __future__ import annotations

"""Pick ownership resolution (pure).

Answers one question per slot: who holds (year, round, original team) right
now, given the trade ledger and the projected position of every team.

Resolution order:
  1) The original team's own ledger entry ("Own ...").
     - complex-case key (current draft year only) -> registry resolver
     - otherwise its protection text describes when the pick stays home:
       blocked -> stays; conveys -> the pick left, continue with 2)
       an own entry without protection text simply stays home
  2) Every other team's incoming entries for (year, round) that name the
     original team, scored by specificity (see `score_origin_match`).
     Entries from earlier drafts whose protection rolls into `year` compete
     as "rolled" candidates.
  3) The winning entry's own protection is evaluated with the original
     team's projected position; a block sends the pick back home.
  4) Nothing matched -> the original team keeps it (data-completeness warning).

Specificity matching is a best-effort heuristic, not a proof: every candidate
is returned with the resolution so losing matches can be reviewed.
"""

import logging
import re
from typing import List, Mapping, Optional, Tuple

from config import CURRENT_DRAFT_YEAR
from team_utils import _warn_limited, get_team
from trades.complex_cases import resolve_complex_case
from trades.conveyance import evaluate_protection, roll_forward_target
from trades.errors import COMPLEX_CASE_UNKNOWN, HEURISTIC_MATCH, LEDGER_MATCH_MISSING, Diagnostic
from trades.protection import ProtectionRule, has_protection_text, parse_protection

from .types import (
    MatchKind,
    OwnerResolution,
    OwnershipCandidate,
    PickRecord,
    Team,
    TeamId,
    TeamLedger,
    norm_team_id,
)

logger = logging.getLogger(__name__)

VIA_SPECIFICITY = 100
EXACT_SPECIFICITY = 90
ROLLED_SPECIFICITY = 80

_OWN_RE = re.compile(r"\bown\b", re.IGNORECASE)
_VIA_RE = re.compile(r"^via\s+(.+?)\s*$", re.IGNORECASE)
_MULTI_SPLIT_RE = re.compile(r",|/|\bor\b|\band\b", re.IGNORECASE)


def is_own_origin(origin: str) -> bool:
    return bool(_OWN_RE.search(str(origin or "")))


def _is_multi_team(lower: str) -> bool:
    return "," in lower or "/" in lower or " or " in lower or " and " in lower


def score_origin_match(origin: str, team: Team) -> Optional[Tuple[int, MatchKind]]:
    """Score how specifically `origin` refers to `team`. None = no reference.

    - "via TEAM"                      -> 100
    - "TEAM" alone                    -> 90
    - "A or B", "A, B", "A and B"     -> max(1, 50 - 10 * mentions), +15 if TEAM is named first
    """
    lower = str(origin or "").strip().lower()
    if not lower:
        return None
    aliases = team.aliases()

    m = _VIA_RE.match(lower)
    if m is not None and m.group(1) in aliases:
        return VIA_SPECIFICITY, "via"

    if _is_multi_team(lower):
        alias_re = re.compile(r"\b(?:" + "|".join(re.escape(a) for a in aliases) + r")\b")
        phrases = [p.strip() for p in _MULTI_SPLIT_RE.split(lower)]
        phrases = [p for p in phrases if p]
        index = next((i for i, p in enumerate(phrases) if alias_re.search(p)), None)
        if index is None:
            return None
        specificity = max(1, 50 - len(phrases) * 10) + (15 if index == 0 else 0)
        return specificity, "multi"

    if lower in aliases:
        return EXACT_SPECIFICITY, "exact"
    return None


def rules_for_record(record: PickRecord) -> Optional[List[ProtectionRule]]:
    """Manual override first, then parsed text. None when the entry has no protection."""
    if record.protection_rules:
        return list(record.protection_rules)
    if has_protection_text(record.protections):
        return parse_protection(record.protections)
    return None


def _team_for(team_id: str, teams: Optional[Mapping[TeamId, Team]]) -> Team:
    team = (teams or {}).get(team_id) or get_team(team_id)
    if team is None:
        return Team(team_id=team_id, abbreviation=team_id, name=team_id, full_name=team_id)
    return team


def _find_own_record(team_ledger: Optional[TeamLedger], year: int, round_no: int) -> Optional[PickRecord]:
    if team_ledger is None:
        return None
    for rec in team_ledger.incoming:
        if rec.year == year and rec.round == round_no and is_own_origin(rec.origin):
            return rec
    return None


def collect_candidates(
    team: Team,
    round_no: int,
    year: int,
    ledger: Mapping[TeamId, TeamLedger],
    position: Optional[int],
) -> List[OwnershipCandidate]:
    """All ledger entries held by other teams that refer to `team`'s pick, best first.

    Sorting is stable, so equal scores keep ledger iteration order.
    """
    found: List[OwnershipCandidate] = []
    for holder, team_ledger in ledger.items():
        holder_id = norm_team_id(holder)
        if holder_id == team.team_id:
            continue
        for rec in team_ledger.incoming:
            if rec.round != round_no or rec.year > year:
                continue
            scored = score_origin_match(rec.origin, team)
            if scored is None:
                continue
            specificity, kind = scored
            if rec.year < year:
                rules = rules_for_record(rec)
                if rules is None or roll_forward_target(rules, rec.year, year, position) is None:
                    continue
                specificity, kind = ROLLED_SPECIFICITY, "rolled"
            found.append(OwnershipCandidate(holder_team=holder_id, record=rec, specificity=specificity, kind=kind))
    return sorted(found, key=lambda c: -c.specificity)


def resolve_owner(
    original_team: str,
    round_no: int,
    year: int,
    ledger: Mapping[TeamId, TeamLedger],
    positions: Mapping[TeamId, int],
    *,
    teams: Optional[Mapping[TeamId, Team]] = None,
    current_year: Optional[int] = None,
) -> OwnerResolution:
    """Resolve the current owner of one pick. Never raises, never leaves it unowned."""
    tid = norm_team_id(original_team)
    year_i = int(year)
    round_i = int(round_no)
    target_year = int(CURRENT_DRAFT_YEAR if current_year is None else current_year)
    team = _team_for(tid, teams)
    position = positions.get(tid)
    diagnostics: List[Diagnostic] = []

    def _done(owner: str, source: str, **kw) -> OwnerResolution:
        return OwnerResolution(
            year=year_i,
            round=round_i,
            original_team=tid,
            owning_team=norm_team_id(owner),
            source=source,  # type: ignore[arg-type]
            diagnostics=tuple(diagnostics),
            **kw,
        )

    # 1) Own entry
    own = _find_own_record(ledger.get(tid), year_i, round_i)
    if own is not None:
        if own.complex_key and year_i == target_year:
            owner = resolve_complex_case(own.complex_key, tid, positions)
            if owner is not None:
                return _done(owner, "complex_case" if owner != tid else "own", record=own)
            diagnostics.append(
                Diagnostic(
                    COMPLEX_CASE_UNKNOWN,
                    "Complex protection key is not registered; using generic evaluation",
                    {"key": own.complex_key, "team": tid, "year": year_i, "round": round_i},
                )
            )
            _warn_limited("DRAFT_COMPLEX_CASE_UNKNOWN", "key=%s team=%s", own.complex_key, tid)

        rules = rules_for_record(own)
        if rules is None:
            return _done(tid, "own", record=own)
        own_conveyance = evaluate_protection(rules, position, year_i)
        if not own_conveyance.conveys:
            return _done(tid, "own_protection", record=own, conveyance=own_conveyance)

    # 2) Ledger search
    candidates = collect_candidates(team, round_i, year_i, ledger, position)
    if candidates:
        best = candidates[0]
        if best.kind == "multi" or len(candidates) > 1:
            diagnostics.append(
                Diagnostic(
                    HEURISTIC_MATCH,
                    "Owner chosen by specificity heuristic",
                    {
                        "team": tid,
                        "year": year_i,
                        "round": round_i,
                        "winner": best.holder_team,
                        "candidates": [c.to_dict() for c in candidates],
                    },
                )
            )
            logger.info(
                "DRAFT_HEURISTIC_MATCH year=%s round=%s team=%s winner=%s candidates=%d",
                year_i,
                round_i,
                tid,
                best.holder_team,
                len(candidates),
            )

        # 3) Protection attached to the winning entry
        rules = rules_for_record(best.record)
        if rules is not None:
            conveyance = evaluate_protection(rules, position, year_i)
            if not conveyance.conveys:
                return _done(
                    tid,
                    "protection_reclaim",
                    record=best.record,
                    conveyance=conveyance,
                    candidates=tuple(candidates),
                )
            return _done(
                best.holder_team,
                "ledger_match",
                record=best.record,
                conveyance=conveyance,
                candidates=tuple(candidates),
            )
        return _done(best.holder_team, "ledger_match", record=best.record, candidates=tuple(candidates))

    # 4) Nothing references this pick
    diagnostics.append(
        Diagnostic(
            LEDGER_MATCH_MISSING,
            "No ledger entry found for pick; original team assumed to keep it",
            {"team": tid, "year": year_i, "round": round_i, "own_entry_conveyed": own is not None},
        )
    )
    _warn_limited("DRAFT_LEDGER_MATCH_MISSING", "year=%s round=%s team=%s", year_i, round_i, tid)
    return _done(tid, "fallback", record=own)
