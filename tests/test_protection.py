from __future__ import annotations

import pytest

from trades.errors import PROTECTION_INVALID, TradeError
from trades.protection import (
    INVERSE_RANGE,
    RANGE,
    TOP_N,
    UNPROTECTED,
    ProtectionRule,
    describe_protection,
    has_protection_text,
    is_complex_protection,
    parse_protection,
    protection_rule_from_dict,
    protection_rules_from_payload,
    summarize_protection,
    tokenize_protection,
)


def test_tokenizer_kinds():
    kinds = [t.kind for t in tokenize_protection("Top-10 protected (2026); Protected 1-14")]
    assert kinds == ["TOP", "WORD", "YEAR", "SEP", "WORD", "RANGE"]


def test_tokenizer_marks_parenthesized_year():
    tokens = tokenize_protection("Top-5 protected (2027)")
    year = [t for t in tokens if t.kind == "YEAR"][0]
    assert year.a == 2027
    assert year.paren is True


@pytest.mark.parametrize("text", [None, "", "   ", "No protections", "none", "NO PROTECTION"])
def test_empty_text_is_single_unprotected_rule(text):
    assert parse_protection(text) == [ProtectionRule.unprotected()]
    assert has_protection_text(text) is False


def test_plain_unprotected_keeps_year():
    assert parse_protection("Unprotected (2028)") == [ProtectionRule.unprotected(year=2028)]


def test_top_n():
    assert parse_protection("Top-10 protected") == [ProtectionRule.top(10)]
    assert parse_protection("top 4 protected (2026)") == [ProtectionRule.top(4, year=2026)]


def test_multi_year_top_n_schedule():
    rules = parse_protection("Top-10 protected (2026), Top-8 protected (2027), unprotected (2028)")
    assert [(r.kind, r.end, r.year) for r in rules] == [
        (TOP_N, 10, 2026),
        (TOP_N, 8, 2027),
        (UNPROTECTED, None, 2028),
    ]


def test_unprotected_clause_does_not_swallow_other_clauses():
    rules = parse_protection("Top-10 protected (2026), unprotected (2027)")
    assert [r.kind for r in rules] == [TOP_N, UNPROTECTED]


def test_range_protection():
    rule = parse_protection("Protected 1-14")[0]
    assert (rule.kind, rule.start, rule.end, rule.year) == (RANGE, 1, 14, None)


def test_inverse_conditional():
    for text in ("Conveys only if 1-4", "Only if NOP picks 1-4 (2026)"):
        rule = parse_protection(text)[0]
        assert rule.kind == INVERSE_RANGE
        assert (rule.start, rule.end) == (1, 4)
    assert parse_protection("Only if NOP picks 1-4 (2026)")[0].year == 2026


def test_only_followed_by_protected_range_is_plain_range():
    rule = parse_protection("Only protected 1-4")[0]
    assert rule.kind == RANGE


def test_becomes_fallback():
    rules = parse_protection("Protected 1-14; if not conveyed by 2028, becomes 2028 2nd")
    assert rules[0].kind == RANGE
    fallback = rules[-1]
    assert fallback.kind == UNPROTECTED
    assert fallback.year == 2028
    assert fallback.fallback == "2028 2nd"


def test_converts_to_fallback_strips_trailing_year():
    rules = parse_protection("Top-5 protected; converts to two 2nds (2029)")
    assert rules[-1].fallback == "two 2nds"
    assert rules[-1].year == 2029


def test_unrecognized_text_fails_open():
    assert parse_protection("Subject to league approval") == [ProtectionRule.unprotected()]


def test_summary_formats():
    assert summarize_protection(parse_protection("Top-10 protected (2026), unprotected (2027)")) == (
        "Top-10 protected (2026), Unprotected (2027)"
    )
    assert describe_protection("Protected 1-14") == "Protected 1-14"
    assert describe_protection("Conveys only if 1-4") == "Conveys only if 1-4"
    assert describe_protection("") == "Unprotected"
    assert summarize_protection([]) == "Unprotected"


def test_summary_shows_fallback_on_protected_rules():
    top = protection_rule_from_dict({"type": "TOP_N", "n": 5, "year": 2026, "fallback": "two 2nds"})
    rng = protection_rule_from_dict({"type": "RANGE", "start": 1, "end": 14, "fallback": "2028 2nd"})
    assert summarize_protection([top]) == "Top-5 protected (2026); becomes two 2nds"
    assert summarize_protection([rng]) == "Protected 1-14; becomes 2028 2nd"
    # The protection itself still parses back from the summary.
    assert parse_protection(summarize_protection([top]))[0] == ProtectionRule.top(5, year=2026)


@pytest.mark.parametrize(
    "text",
    [
        "Top-10 protected (2026), Top-8 protected (2027), unprotected (2028)",
        "Protected 1-14",
        "Conveys only if 1-4 (2026)",
        "Unprotected",
    ],
)
def test_summary_reparses_to_same_rules(text):
    rules = parse_protection(text)
    assert parse_protection(summarize_protection(rules)) == rules


def test_complex_flag():
    assert is_complex_protection("LAC or HOU (more favorable)")
    assert is_complex_protection("Swap rights with MIL")
    assert is_complex_protection("Top-4 (2026), Top-4 (2027), Top-4 (2028)")
    assert not is_complex_protection("Top-10 protected (2026), unprotected (2027)")


def test_rule_from_dict_canonical_and_legacy():
    assert protection_rule_from_dict({"type": "TOP_N", "n": 8, "year": 2026}) == ProtectionRule.top(8, year=2026)
    assert protection_rule_from_dict({"rule": "INVERSE_CONDITIONAL", "protectedStart": 1, "protectedEnd": 4, "year": 0}) == (
        ProtectionRule.inverse_range(1, 4)
    )
    assert protection_rule_from_dict({"type": "range", "range": {"min": 15, "max": 30}}) == ProtectionRule.range(15, 30)


@pytest.mark.parametrize(
    "raw",
    [
        "Top-5",
        {},
        {"type": "LOTTERY"},
        {"type": "RANGE", "start": 10, "end": 5},
        {"type": "TOP_N", "n": True},
        {"type": "TOP_N", "n": 2.5},
        {"type": "RANGE", "start": 0, "end": 4},
    ],
)
def test_rule_from_dict_rejects_invalid(raw):
    with pytest.raises(TradeError) as exc_info:
        protection_rule_from_dict(raw)
    assert exc_info.value.code == PROTECTION_INVALID


def test_rules_from_payload_accepts_single_or_list():
    assert len(protection_rules_from_payload({"type": "UNPROTECTED"})) == 1
    assert len(protection_rules_from_payload([{"type": "TOP", "n": 4}, {"type": "UNPROTECTED", "year": 2027}])) == 2
    with pytest.raises(TradeError):
        protection_rules_from_payload([])
