from __future__ import annotations

"""Hand-written resolvers for pick arrangements the generic grammar cannot express.

A ledger entry opts in by carrying `complexProtectionKey`. The resolver is
called with the original team and the projected position of every team, and
returns the team that actually owns the pick.

Contract for every resolver:
- total: any team id and any (possibly partial) position map is accepted
- returns `original_team` whenever its specific condition does not hold

The registry is only consulted for the current draft year; other years use
the generic protection path.
"""

import logging
from typing import Callable, Dict, Mapping, Optional, Sequence

logger = logging.getLogger(__name__)

ComplexResolver = Callable[[str, Mapping[str, int]], str]

COMPLEX_CASES: Dict[str, ComplexResolver] = {}


def register_complex_case(key: str) -> Callable[[ComplexResolver], ComplexResolver]:
    def _decorator(fn: ComplexResolver) -> ComplexResolver:
        COMPLEX_CASES[str(key)] = fn
        return fn

    return _decorator


def get_complex_case(key: Optional[str]) -> Optional[ComplexResolver]:
    if not key:
        return None
    return COMPLEX_CASES.get(str(key))


def resolve_complex_case(key: Optional[str], original_team: str, positions: Mapping[str, int]) -> Optional[str]:
    """Run the resolver for `key`. Returns None when the key is not registered."""
    fn = get_complex_case(key)
    if fn is None:
        return None
    try:
        owner = fn(str(original_team), positions)
    except Exception:
        # Resolvers are required to be total; a broken one must not sink the board.
        logger.warning("COMPLEX_CASE_RESOLVER_FAILED key=%s team=%s", key, original_team, exc_info=True)
        return str(original_team)
    return str(owner or original_team)


def _position(positions: Mapping[str, int], team: str) -> Optional[int]:
    pos = positions.get(team)
    if pos is None or isinstance(pos, bool):
        return None
    try:
        return int(pos)
    except (TypeError, ValueError):
        return None


# =============================================================================
# Factories for the recurring irregular shapes
# =============================================================================

def more_favorable_of(teams: Sequence[str], *, favorable_to: str, other_to: Optional[str] = None) -> ComplexResolver:
    """`favorable_to` receives the better (lower) of the listed teams' picks.

    The other pick goes to `other_to` when given, otherwise it stays with its
    original team. Ties go to the first listed team.
    """
    group = tuple(teams)

    def _resolve(original_team: str, positions: Mapping[str, int]) -> str:
        if original_team not in group:
            return original_team
        ranked = []
        for i, t in enumerate(group):
            pos = _position(positions, t)
            if pos is None:
                return original_team
            ranked.append((pos, i, t))
        best_team = min(ranked)[2]
        if original_team == best_team:
            return favorable_to
        return other_to or original_team

    return _resolve


def redirect_if_bottom(
    *,
    holder: str,
    trigger_team: str,
    bottom_n: int,
    redirect_to: str,
    for_team: Optional[str] = None,
) -> ComplexResolver:
    """`holder` receives the pick unless `trigger_team` is projected 1..bottom_n,
    in which case `redirect_to` receives it instead."""

    def _resolve(original_team: str, positions: Mapping[str, int]) -> str:
        if for_team is not None and original_team != for_team:
            return original_team
        trigger_pos = _position(positions, trigger_team)
        if trigger_pos is None:
            return original_team
        return redirect_to if trigger_pos <= int(bottom_n) else holder

    return _resolve


def conveys_outside_top(n: int, *, holder: str) -> ComplexResolver:
    """Plain top-N protection expressed as a resolver (original team keeps 1..n)."""

    def _resolve(original_team: str, positions: Mapping[str, int]) -> str:
        pos = _position(positions, original_team)
        if pos is None or pos <= int(n):
            return original_team
        return holder

    return _resolve


# =============================================================================
# Registered arrangements
# =============================================================================

COMPLEX_CASES.update(
    {
        # ATL holds the more favorable of NOP's and MIL's firsts; the other belongs to NOP.
        "atl_more_favorable_nop_mil_2026_r1": more_favorable_of(("NOP", "MIL"), favorable_to="ATL", other_to="NOP"),
        # OKC holds the more favorable of LAC's and HOU's firsts; HOU keeps the other.
        "okc_more_favorable_lac_hou_2026_r1": more_favorable_of(("LAC", "HOU"), favorable_to="OKC", other_to="HOU"),
        # UTA receives MIN's first unless MIN lands in the bottom 5, then DET receives it.
        "min_to_uta_unless_bottom5_det_2026_r1": redirect_if_bottom(
            holder="UTA", trigger_team="MIN", bottom_n=5, redirect_to="DET", for_team="MIN"
        ),
    }
)


@register_complex_case("wsh_top8_to_nyk_2026_r1")
def _was_top8_to_nyk(original_team: str, positions: Mapping[str, int]) -> str:
    if original_team != "WAS":
        return original_team
    return conveys_outside_top(8, holder="NYK")(original_team, positions)
