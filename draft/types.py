from __future__ import annotations

"""Draft board domain types.

This module is deliberately dependency-light so it can be imported by:
- draft.standings (records -> worst-to-best ranking)
- draft.order     (projected positions per round)
- draft.ownership (per-slot owner resolution)
- draft.board     (board assembly)
- trades.ledger   (ledger file loading)

Conventions:
- team_id is the upper-case team abbreviation (e.g. 'LAL')
- pick_id uses the format "{year}_R{round}_{TEAM}" (e.g. "2026_R1_LAL")
- slot is per-round 1..N (NOT overall). overall_no is derived.
"""

from dataclasses import dataclass, field
from fractions import Fraction
from typing import Any, Dict, Literal, Optional, Tuple

from trades.conveyance import ConveyanceResult
from trades.errors import Diagnostic
from trades.protection import ProtectionRule


TeamId = str
PickId = str
RoundNo = int
SlotNo = int


def norm_team_id(v: Any) -> str:
    """Normalize team id into canonical form used across the project."""
    return str(v or "").strip().upper()


def make_pick_id(year: int, round_no: int, original_team: str) -> str:
    """Create a deterministic pick_id for a given original team and round."""
    tid = norm_team_id(original_team)
    return f"{int(year)}_R{int(round_no)}_{tid}"


@dataclass(frozen=True, slots=True)
class Team:
    team_id: TeamId
    abbreviation: str
    name: str
    full_name: str

    def __post_init__(self) -> None:
        object.__setattr__(self, "team_id", norm_team_id(self.team_id))

    def aliases(self) -> Tuple[str, ...]:
        """Lower-cased names a ledger description may use for this team."""
        out = []
        for v in (self.abbreviation, self.name, self.full_name):
            s = str(v or "").strip().lower()
            if s and s not in out:
                out.append(s)
        return tuple(out)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "team_id": self.team_id,
            "abbreviation": self.abbreviation,
            "name": self.name,
            "full_name": self.full_name,
        }


@dataclass(frozen=True, slots=True)
class TeamRecord:
    """Standings snapshot used for the projected draft order.

    Ties count as games played, so a tie lowers win_fraction.
    """

    team_id: TeamId
    wins: int
    losses: int
    ties: int = 0

    def __post_init__(self) -> None:
        object.__setattr__(self, "team_id", norm_team_id(self.team_id))

        def _to_int(x: Any, default: int = 0) -> int:
            try:
                if x is None:
                    return default
                if isinstance(x, bool):
                    return default
                return int(x)
            except Exception:
                return default

        object.__setattr__(self, "wins", max(0, _to_int(self.wins)))
        object.__setattr__(self, "losses", max(0, _to_int(self.losses)))
        object.__setattr__(self, "ties", max(0, _to_int(self.ties)))

    @property
    def games_played(self) -> int:
        return int(self.wins + self.losses + self.ties)

    @property
    def win_fraction(self) -> Fraction:
        # Ranking fraction: ties count as games played but not in the denominator.
        decided = int(self.wins + self.losses)
        if decided <= 0:
            return Fraction(0, 1)
        return Fraction(int(self.wins), decided)

    @property
    def win_pct(self) -> float:
        return float(self.win_fraction)

    @property
    def record_str(self) -> str:
        base = f"{self.wins}-{self.losses}"
        return f"{base}-{self.ties}" if self.ties else base

    def to_dict(self) -> Dict[str, Any]:
        return {
            "team_id": self.team_id,
            "wins": int(self.wins),
            "losses": int(self.losses),
            "ties": int(self.ties),
            "games_played": int(self.games_played),
            "win_pct": float(self.win_pct),
            "record": self.record_str,
        }


@dataclass(frozen=True, slots=True)
class ProjectedOrder:
    """Projected draft order for a draft year, derived from current standings.

    Every round uses the same worst -> best order. positions maps each team to
    its projected slot (1..N) and is what protection rules are evaluated with.
    """

    draft_year: int
    records: Dict[TeamId, TeamRecord]
    rank_worst_to_best: Tuple[TeamId, ...]
    rounds: int
    positions: Dict[TeamId, int]
    pick_order_by_pick_id: Dict[PickId, int]

    def slot_to_original_team(self, round_no: int) -> Tuple[TeamId, ...]:
        if round_no < 1 or round_no > self.rounds:
            return ()
        return self.rank_worst_to_best

    def to_dict(self) -> Dict[str, Any]:
        return {
            "draft_year": int(self.draft_year),
            "records": {tid: rec.to_dict() for tid, rec in self.records.items()},
            "rank_worst_to_best": list(self.rank_worst_to_best),
            "rounds": int(self.rounds),
            "positions": dict(self.positions),
            "pick_order_by_pick_id": dict(self.pick_order_by_pick_id),
        }


@dataclass(frozen=True, slots=True)
class PickRecord:
    """One ledger entry, listed by `holder_team` as incoming (or outgoing).

    origin is free text as published upstream: "Own", "via BOS",
    "LAC or HOU (more favorable)", "Own (swap rights with MIL)", ...
    protection_rules, when set, overrides parsing of `protections`.
    """

    year: int
    round: RoundNo
    holder_team: TeamId
    origin: str = "Own"
    protections: str = ""
    pick_label: str = ""
    protection_rules: Optional[Tuple[ProtectionRule, ...]] = None
    complex_key: Optional[str] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "year", int(self.year))
        object.__setattr__(self, "round", int(self.round))
        object.__setattr__(self, "holder_team", norm_team_id(self.holder_team))
        object.__setattr__(self, "origin", str(self.origin or "").strip())
        object.__setattr__(self, "protections", str(self.protections or "").strip())
        if self.protection_rules is not None:
            object.__setattr__(self, "protection_rules", tuple(self.protection_rules))

    @property
    def is_swap_rights(self) -> bool:
        return "swap" in self.origin.lower()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "year": int(self.year),
            "round": int(self.round),
            "holder_team": self.holder_team,
            "from": self.origin,
            "protections": self.protections,
            "pick": self.pick_label,
            "protection_rules": None
            if self.protection_rules is None
            else [r.to_dict() for r in self.protection_rules],
            "complex_key": self.complex_key,
        }


@dataclass(frozen=True, slots=True)
class TeamLedger:
    team_id: TeamId
    incoming: Tuple[PickRecord, ...] = ()
    outgoing: Tuple[PickRecord, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "team_id", norm_team_id(self.team_id))
        object.__setattr__(self, "incoming", tuple(self.incoming))
        object.__setattr__(self, "outgoing", tuple(self.outgoing))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "team_id": self.team_id,
            "incoming": [p.to_dict() for p in self.incoming],
            "outgoing": [p.to_dict() for p in self.outgoing],
        }


MatchKind = Literal["via", "exact", "multi", "rolled"]

ResolutionSource = Literal[
    "own",
    "complex_case",
    "own_protection",
    "ledger_match",
    "protection_reclaim",
    "fallback",
]


@dataclass(frozen=True, slots=True)
class OwnershipCandidate:
    holder_team: TeamId
    record: PickRecord
    specificity: int
    kind: MatchKind

    def to_dict(self) -> Dict[str, Any]:
        return {
            "holder_team": self.holder_team,
            "from": self.record.origin,
            "year": int(self.record.year),
            "specificity": int(self.specificity),
            "kind": self.kind,
        }


@dataclass(frozen=True, slots=True)
class OwnerResolution:
    """Who owns one (year, round, original team) pick, and why."""

    year: int
    round: RoundNo
    original_team: TeamId
    owning_team: TeamId
    source: ResolutionSource
    record: Optional[PickRecord] = None
    conveyance: Optional[ConveyanceResult] = None
    candidates: Tuple[OwnershipCandidate, ...] = ()
    diagnostics: Tuple[Diagnostic, ...] = ()

    @property
    def transferred(self) -> bool:
        return self.owning_team != self.original_team

    def to_dict(self) -> Dict[str, Any]:
        return {
            "year": int(self.year),
            "round": int(self.round),
            "original_team": self.original_team,
            "owning_team": self.owning_team,
            "source": self.source,
            "record": None if self.record is None else self.record.to_dict(),
            "conveyance": None if self.conveyance is None else self.conveyance.to_dict(),
            "candidates": [c.to_dict() for c in self.candidates],
            "diagnostics": [d.to_dict() for d in self.diagnostics],
        }


@dataclass(frozen=True, slots=True)
class ResolvedPick:
    """A single board slot."""

    year: int
    round: RoundNo
    slot: SlotNo
    overall_no: int
    pick_id: PickId
    owning_team: TeamId
    original_team: TeamId
    origin: str
    protections: str = ""
    is_traded: bool = False
    is_swap_rights: bool = False
    attrs: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "year": int(self.year),
            "round": int(self.round),
            "slot": int(self.slot),
            "overall_no": int(self.overall_no),
            "pick_id": str(self.pick_id),
            "owning_team": self.owning_team,
            "original_team": self.original_team,
            "from": self.origin,
            "protections": self.protections,
            "is_traded": bool(self.is_traded),
            "is_swap_rights": bool(self.is_swap_rights),
            "attrs": dict(self.attrs),
        }


@dataclass(frozen=True, slots=True)
class DraftBoard:
    """Full resolved board for one draft year (never persisted)."""

    year: int
    rounds: int
    order_worst_to_best: Tuple[TeamId, ...]
    positions: Dict[TeamId, int]
    picks: Tuple[ResolvedPick, ...]
    diagnostics: Tuple[Diagnostic, ...] = ()
    meta: Dict[str, Any] = field(default_factory=dict)

    def picks_for_team(self, team_id: str) -> Tuple[ResolvedPick, ...]:
        tid = norm_team_id(team_id)
        return tuple(p for p in self.picks if p.owning_team == tid)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "year": int(self.year),
            "rounds": int(self.rounds),
            "order_worst_to_best": list(self.order_worst_to_best),
            "positions": dict(self.positions),
            "picks": [p.to_dict() for p in self.picks],
            "diagnostics": [d.to_dict() for d in self.diagnostics],
            "meta": dict(self.meta) if isinstance(self.meta, dict) else {},
        }
