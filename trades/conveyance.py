from __future__ import annotations

"""Protection evaluation (pure).

Given parsed protection rules and a projected draft position, decide whether a
pick conveys in a given draft year, and if not, where the obligation goes next.

Fail-open policy
----------------
Nothing in this module raises. Empty rule lists, malformed rules (missing
bounds, start > end) and non-numeric positions all evaluate to "conveys".
A board that shows an edge case slightly wrong is acceptable; a board with a
missing pick is not.

Roll-forward
------------
- TOP_N protected picks roll to the next year-scoped rule after the current
  year, or to year + 1 when no later rule exists.
- RANGE protected picks do not roll. The rule's own fallback text (if any) is
  reported as the alternative outcome.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Sequence, Union

from .protection import INVERSE_RANGE, RANGE, TOP_N, UNPROTECTED, ProtectionRule, parse_protection

# Guards the roll chain walk against rule lists that never advance.
_MAX_ROLL_STEPS = 25


@dataclass(frozen=True, slots=True)
class ConveyanceResult:
    conveys: bool
    year: int
    position: Optional[int]
    rule: Optional[ProtectionRule] = None
    next_year: Optional[int] = None
    protected_range: Optional[str] = None
    fallback: Optional[str] = None
    explanation: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "conveys": bool(self.conveys),
            "year": int(self.year),
            "position": self.position,
            "rule": None if self.rule is None else self.rule.to_dict(),
            "next_year": self.next_year,
            "protected_range": self.protected_range,
            "fallback": self.fallback,
            "explanation": self.explanation,
        }


@dataclass(frozen=True, slots=True)
class ConveyanceSimulation:
    """Outcome of walking a rule list across several draft years."""

    resolved: bool
    conveys_in_year: Optional[int]
    position: Optional[int]
    explanation: str
    steps: List[ConveyanceResult] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "resolved": bool(self.resolved),
            "conveys_in_year": self.conveys_in_year,
            "position": self.position,
            "explanation": self.explanation,
            "steps": [s.to_dict() for s in self.steps],
        }


def select_rule(rules: Sequence[ProtectionRule], year: int) -> Optional[ProtectionRule]:
    """Rule scoped to `year`, else the first year-agnostic rule, else the last rule."""
    if not rules:
        return None
    for rule in rules:
        if rule.year == year:
            return rule
    for rule in rules:
        if rule.year is None:
            return rule
    return rules[-1]


def _next_year_rule(rules: Sequence[ProtectionRule], year: int) -> Optional[ProtectionRule]:
    future = sorted((r for r in rules if r.year is not None and r.year > year), key=lambda r: int(r.year))
    return future[0] if future else None


def _coerce_position(position: Any) -> Optional[int]:
    if position is None or isinstance(position, bool):
        return None
    try:
        return int(position)
    except (TypeError, ValueError):
        return None


def _conveys_by_default(year: int, position: Optional[int], rule: Optional[ProtectionRule], why: str) -> ConveyanceResult:
    return ConveyanceResult(conveys=True, year=int(year), position=position, rule=rule, explanation=why)


def evaluate_protection(rules: Sequence[ProtectionRule], position: Any, year: int) -> ConveyanceResult:
    """Decide whether a pick at projected `position` conveys in draft `year`."""
    pos = _coerce_position(position)
    rule = select_rule(rules, year)

    if rule is None:
        return _conveys_by_default(year, pos, None, "No protection rules found, pick conveys")
    if pos is None:
        return _conveys_by_default(year, pos, rule, "No projected position, pick conveys")

    if rule.kind == UNPROTECTED:
        return ConveyanceResult(
            conveys=True,
            year=int(year),
            position=pos,
            rule=rule,
            fallback=rule.fallback,
            explanation=f"Pick {pos} conveys (unprotected)",
        )

    if rule.kind == TOP_N:
        if rule.end is None or rule.end < 1:
            return _conveys_by_default(year, pos, rule, "Malformed top-N protection, pick conveys")
        protected_range = f"1-{rule.end}"
        if pos <= rule.end:
            nxt = _next_year_rule(rules, year)
            next_year = nxt.year if nxt is not None else int(year) + 1
            return ConveyanceResult(
                conveys=False,
                year=int(year),
                position=pos,
                rule=rule,
                next_year=next_year,
                protected_range=protected_range,
                fallback=(nxt.fallback if nxt is not None else None) or f"Rolls to {next_year}",
                explanation=f"Pick {pos} is protected (Top-{rule.end}). Will roll to {next_year}.",
            )
        return ConveyanceResult(
            conveys=True,
            year=int(year),
            position=pos,
            rule=rule,
            protected_range=protected_range,
            explanation=f"Pick {pos} conveys (outside Top-{rule.end} protection)",
        )

    if rule.kind in (RANGE, INVERSE_RANGE):
        if rule.start is None or rule.end is None or rule.start > rule.end:
            return _conveys_by_default(year, pos, rule, "Malformed range protection, pick conveys")
        span = f"{rule.start}-{rule.end}"
        inside = rule.start <= pos <= rule.end

        if rule.kind == INVERSE_RANGE:
            if inside:
                return ConveyanceResult(
                    conveys=True,
                    year=int(year),
                    position=pos,
                    rule=rule,
                    protected_range=span,
                    explanation=f"Pick {pos} conveys (condition {span} met)",
                )
            return ConveyanceResult(
                conveys=False,
                year=int(year),
                position=pos,
                rule=rule,
                protected_range=span,
                fallback=rule.fallback,
                explanation=f"Pick {pos} does not convey (only conveys within {span})",
            )

        if inside:
            return ConveyanceResult(
                conveys=False,
                year=int(year),
                position=pos,
                rule=rule,
                protected_range=span,
                fallback=rule.fallback,
                explanation=f"Pick {pos} is protected (picks {span} protected)",
            )
        return ConveyanceResult(
            conveys=True,
            year=int(year),
            position=pos,
            rule=rule,
            protected_range=span,
            explanation=f"Pick {pos} conveys (outside {span} protection)",
        )

    return _conveys_by_default(year, pos, rule, "Pick conveys")


def evaluate_protection_text(text: Optional[str], position: Any, year: int) -> ConveyanceResult:
    return evaluate_protection(parse_protection(text), position, year)


def simulate_conveyance(
    rules: Union[Sequence[ProtectionRule], str, None],
    positions_by_year: Mapping[int, Any],
) -> ConveyanceSimulation:
    """Find the first supplied year in which the pick conveys.

    Years are walked in ascending order. A block without a roll target ends
    the walk: the obligation is extinguished (or replaced by its fallback).
    """
    rule_list = parse_protection(rules) if rules is None or isinstance(rules, str) else list(rules)
    steps: List[ConveyanceResult] = []

    for year in sorted(int(y) for y in positions_by_year.keys()):
        result = evaluate_protection(rule_list, positions_by_year.get(year), year)
        steps.append(result)
        if result.conveys:
            return ConveyanceSimulation(
                resolved=True,
                conveys_in_year=year,
                position=result.position,
                explanation=result.explanation,
                steps=steps,
            )
        if result.next_year is None:
            outcome = f"; {result.fallback}" if result.fallback else ""
            return ConveyanceSimulation(
                resolved=False,
                conveys_in_year=None,
                position=None,
                explanation=f"Pick does not convey in {year} and does not roll forward{outcome}",
                steps=steps,
            )

    return ConveyanceSimulation(
        resolved=False,
        conveys_in_year=None,
        position=None,
        explanation="Never resolved within supplied years",
        steps=steps,
    )


def roll_forward_target(
    rules: Sequence[ProtectionRule],
    start_year: int,
    target_year: int,
    position: Any,
) -> Optional[ConveyanceResult]:
    """Walk a roll chain from `start_year` using one projected position.

    Returns the blocking result whose roll lands exactly on `target_year`, or
    None when the pick conveys earlier, is extinguished, or skips the target.
    """
    year = int(start_year)
    for _ in range(_MAX_ROLL_STEPS):
        if year >= int(target_year):
            return None
        result = evaluate_protection(rules, position, year)
        if result.conveys or result.next_year is None:
            return None
        if result.next_year == int(target_year):
            return result
        if result.next_year <= year:
            return None
        year = int(result.next_year)
    return None
