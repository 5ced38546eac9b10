from __future__ import annotations

import pytest

from trades.complex_cases import (
    COMPLEX_CASES,
    conveys_outside_top,
    get_complex_case,
    more_favorable_of,
    redirect_if_bottom,
    register_complex_case,
    resolve_complex_case,
)


def test_unknown_key_returns_none():
    assert resolve_complex_case("no_such_key", "NOP", {"NOP": 1}) is None
    assert resolve_complex_case(None, "NOP", {"NOP": 1}) is None
    assert get_complex_case("") is None


def test_more_favorable_of():
    fn = more_favorable_of(("NOP", "MIL"), favorable_to="ATL", other_to="NOP")
    positions = {"NOP": 4, "MIL": 21}
    assert fn("NOP", positions) == "ATL"
    assert fn("MIL", positions) == "NOP"
    # Flip the standings.
    positions = {"NOP": 25, "MIL": 3}
    assert fn("MIL", positions) == "ATL"
    assert fn("NOP", positions) == "NOP"


def test_more_favorable_of_is_total():
    fn = more_favorable_of(("LAC", "HOU"), favorable_to="OKC")
    assert fn("BOS", {"LAC": 1, "HOU": 2}) == "BOS"
    assert fn("LAC", {"LAC": 1}) == "LAC"
    assert fn("HOU", {"LAC": 1, "HOU": 2}) == "HOU"


def test_redirect_if_bottom():
    fn = redirect_if_bottom(holder="UTA", trigger_team="MIN", bottom_n=5, redirect_to="DET", for_team="MIN")
    assert fn("MIN", {"MIN": 22}) == "UTA"
    assert fn("MIN", {"MIN": 5}) == "DET"
    assert fn("MIN", {}) == "MIN"
    assert fn("BOS", {"MIN": 2}) == "BOS"


def test_conveys_outside_top():
    fn = conveys_outside_top(8, holder="NYK")
    assert fn("WAS", {"WAS": 8}) == "WAS"
    assert fn("WAS", {"WAS": 9}) == "NYK"
    assert fn("WAS", {}) == "WAS"


@pytest.mark.parametrize(
    "position,owner",
    [(1, "WAS"), (8, "WAS"), (9, "NYK"), (30, "NYK")],
)
def test_registered_washington_case(position, owner):
    assert resolve_complex_case("wsh_top8_to_nyk_2026_r1", "WAS", {"WAS": position}) == owner


def test_registered_keys_present():
    for key in (
        "atl_more_favorable_nop_mil_2026_r1",
        "okc_more_favorable_lac_hou_2026_r1",
        "min_to_uta_unless_bottom5_det_2026_r1",
        "wsh_top8_to_nyk_2026_r1",
    ):
        assert key in COMPLEX_CASES


def test_failing_resolver_keeps_original_team(caplog):
    key = "test_resolver_that_raises"

    @register_complex_case(key)
    def _broken(original_team, positions):
        raise RuntimeError("boom")

    try:
        assert resolve_complex_case(key, "BOS", {"BOS": 1}) == "BOS"
        assert "COMPLEX_CASE_RESOLVER_FAILED" in caplog.text
    finally:
        COMPLEX_CASES.pop(key, None)
