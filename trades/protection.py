from __future__ import annotations

"""Pick protection language: tokenizer, parser and canonical rule schema.

This module is the SSOT (single source of truth) for protection rules used by:
- the conveyance evaluator (trades.conveyance)
- the ownership resolver (draft.ownership)
- manual overrides carried in ledger files (trades.ledger)

Free-text protections are a small, ambiguous language:

    "Top-10 protected (2026), Top-8 protected (2027), unprotected (2028)"
    "Protected 1-14; if not conveyed by 2028, becomes 2028 2nd"
    "Protected 15-30"
    "Only if NOP picks 1-4"

Parsing is two passes. `tokenize_protection` turns text into typed tokens,
then each separator-delimited segment is matched against token patterns and
yields zero or one `ProtectionRule`. Anything the parser does not understand
degrades to an unprotected rule: ambiguous text must never block conveyance.

Canonical dict form (manual overrides):

    {
        "type": "TOP_N" | "RANGE" | "INVERSE_RANGE" | "UNPROTECTED",
        "start": int, "end": int,   # TOP_N accepts "n" instead
        "year": int | None,
        "fallback": str | None,
    }
"""

import math
import re
from dataclasses import dataclass
from typing import Any, Dict, List, Literal, Optional, Sequence, Tuple

from .errors import PROTECTION_INVALID, TradeError


ProtectionKind = Literal["UNPROTECTED", "TOP_N", "RANGE", "INVERSE_RANGE"]

UNPROTECTED: ProtectionKind = "UNPROTECTED"
TOP_N: ProtectionKind = "TOP_N"
RANGE: ProtectionKind = "RANGE"
INVERSE_RANGE: ProtectionKind = "INVERSE_RANGE"

_KIND_ALIASES: Dict[str, ProtectionKind] = {
    "UNPROTECTED": UNPROTECTED,
    "TOP_N": TOP_N,
    "TOP": TOP_N,
    "RANGE": RANGE,
    "INVERSE_RANGE": INVERSE_RANGE,
    "INVERSE_CONDITIONAL": INVERSE_RANGE,
}

_NO_PROTECTION_TEXTS = {"", "no protections", "no protection", "none"}


@dataclass(frozen=True, slots=True)
class ProtectionRule:
    """One parsed protection clause.

    TOP_N covers positions 1..end. RANGE and INVERSE_RANGE cover start..end.
    `year=None` means the rule is not scoped to a specific draft.
    """

    kind: ProtectionKind
    start: Optional[int] = None
    end: Optional[int] = None
    year: Optional[int] = None
    fallback: Optional[str] = None

    @classmethod
    def unprotected(cls, year: Optional[int] = None, fallback: Optional[str] = None) -> "ProtectionRule":
        return cls(UNPROTECTED, year=year, fallback=fallback)

    @classmethod
    def top(cls, n: int, year: Optional[int] = None) -> "ProtectionRule":
        return cls(TOP_N, start=1, end=int(n), year=year)

    @classmethod
    def range(cls, start: int, end: int, year: Optional[int] = None) -> "ProtectionRule":
        return cls(RANGE, start=int(start), end=int(end), year=year)

    @classmethod
    def inverse_range(cls, start: int, end: int, year: Optional[int] = None) -> "ProtectionRule":
        return cls(INVERSE_RANGE, start=int(start), end=int(end), year=year)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.kind,
            "start": self.start,
            "end": self.end,
            "year": self.year,
            "fallback": self.fallback,
        }


# =============================================================================
# Tokenizer
# =============================================================================

@dataclass(frozen=True, slots=True)
class Token:
    kind: str  # TOP | YEAR | RANGE | NUMBER | SEP | WORD
    value: str
    start: int
    end: int
    a: Optional[int] = None
    b: Optional[int] = None
    paren: bool = False


_TOKEN_RE = re.compile(
    r"""
      (?P<TOP>\btop[-\s]*(?P<top_n>\d+))
    | \((?P<PYEAR>(?:19|20)\d{2})\)
    | (?P<YEAR>\b20\d{2}\b)
    | (?P<RANGE>\b(?P<range_a>\d+)\s*[-–]\s*(?P<range_b>\d+)\b)
    | (?P<NUMBER>\d+)
    | (?P<SEP>;|,|\bthen\b|\bif\s+not\s+conveyed\b)
    | (?P<WORD>[a-z][a-z0-9']*)
    """,
    re.IGNORECASE | re.VERBOSE,
)


def tokenize_protection(text: str) -> List[Token]:
    """Split protection text into typed tokens; other characters are skipped."""
    tokens: List[Token] = []
    for m in _TOKEN_RE.finditer(text or ""):
        raw = m.group(0)
        if m.group("TOP") is not None:
            tokens.append(Token("TOP", raw.lower(), m.start(), m.end(), a=int(m.group("top_n"))))
        elif m.group("PYEAR") is not None:
            year = int(m.group("PYEAR"))
            tokens.append(Token("YEAR", str(year), m.start(), m.end(), a=year, paren=True))
        elif m.group("YEAR") is not None:
            tokens.append(Token("YEAR", raw, m.start(), m.end(), a=int(raw)))
        elif m.group("RANGE") is not None:
            tokens.append(
                Token("RANGE", raw, m.start(), m.end(), a=int(m.group("range_a")), b=int(m.group("range_b")))
            )
        elif m.group("NUMBER") is not None:
            tokens.append(Token("NUMBER", raw, m.start(), m.end(), a=int(raw)))
        elif m.group("SEP") is not None:
            tokens.append(Token("SEP", raw.lower(), m.start(), m.end()))
        else:
            tokens.append(Token("WORD", raw.lower(), m.start(), m.end()))
    return tokens


# =============================================================================
# Parser
# =============================================================================

def _segment_year(tokens: Sequence[Token]) -> Optional[int]:
    years = [t for t in tokens if t.kind == "YEAR"]
    for t in years:
        if t.paren:
            return t.a
    return years[0].a if years else None


def _split_segments(tokens: Sequence[Token], text_len: int) -> List[Tuple[List[Token], int]]:
    """Group tokens between separators. Returns (tokens, segment_end_offset)."""
    segments: List[Tuple[List[Token], int]] = []
    current: List[Token] = []
    for tok in tokens:
        if tok.kind == "SEP":
            if current:
                segments.append((current, tok.start))
            current = []
            continue
        current.append(tok)
    if current:
        segments.append((current, text_len))
    return segments


def _fallback_text(text: str, start: int, end: int) -> Optional[str]:
    raw = text[start:end]
    raw = raw.split(".", 1)[0]
    raw = re.sub(r"\s*\((?:19|20)\d{2}\)\s*$", "", raw).strip()
    return raw or None


def _parse_segment(tokens: Sequence[Token], text: str, seg_end: int) -> Optional[ProtectionRule]:
    year = _segment_year(tokens)
    words = [t.value for t in tokens if t.kind == "WORD"]

    # "conveys only if 1-4" / "only if NOP picks 1-4"
    if "only" in words:
        only_at = next(i for i, t in enumerate(tokens) if t.kind == "WORD" and t.value == "only")
        for i in range(only_at + 1, len(tokens)):
            tok = tokens[i]
            if tok.kind != "RANGE":
                continue
            prev = tokens[i - 1]
            if prev.kind == "WORD" and prev.value == "protected":
                break
            return ProtectionRule.inverse_range(tok.a, tok.b, year=year)

    for i, tok in enumerate(tokens):
        nxt = tokens[i + 1] if i + 1 < len(tokens) else None
        if tok.kind == "TOP" and nxt is not None and nxt.kind == "WORD" and nxt.value == "protected":
            return ProtectionRule.top(tok.a, year=year)
        if tok.kind == "WORD" and tok.value == "protected" and nxt is not None and nxt.kind == "RANGE":
            return ProtectionRule.range(nxt.a, nxt.b, year=year)

    if "unprotected" in words:
        return ProtectionRule.unprotected(year=year)

    for i, tok in enumerate(tokens):
        if tok.kind != "WORD":
            continue
        keyword_end: Optional[int] = None
        if tok.value in ("becomes", "become"):
            keyword_end = tok.end
        elif tok.value in ("converts", "convert"):
            nxt = tokens[i + 1] if i + 1 < len(tokens) else None
            if nxt is not None and nxt.kind == "WORD" and nxt.value == "to":
                keyword_end = nxt.end
        if keyword_end is None:
            continue
        fallback = _fallback_text(text, keyword_end, seg_end)
        if fallback:
            return ProtectionRule.unprotected(year=year, fallback=fallback)
        return None

    return None


def _is_plain_unprotected(tokens: Sequence[Token]) -> bool:
    """True when "unprotected" is the only protection term and nothing is conditional."""
    words = {t.value for t in tokens if t.kind == "WORD"}
    if "unprotected" not in words:
        return False
    if words & {"if", "only", "protected", "becomes", "become", "converts", "convert"}:
        return False
    return not any(t.kind == "TOP" or (t.kind == "SEP" and t.value == "then") for t in tokens)


def parse_protection(text: Optional[str]) -> List[ProtectionRule]:
    """Parse a free-text protection description into an ordered rule list.

    Never raises and never returns an empty list.
    """
    raw = str(text or "")
    if raw.strip().lower() in _NO_PROTECTION_TEXTS:
        return [ProtectionRule.unprotected()]

    tokens = tokenize_protection(raw)
    if _is_plain_unprotected(tokens):
        return [ProtectionRule.unprotected(year=_segment_year(tokens))]

    rules: List[ProtectionRule] = []
    for seg_tokens, seg_end in _split_segments(tokens, len(raw)):
        rule = _parse_segment(seg_tokens, raw, seg_end)
        if rule is not None:
            rules.append(rule)

    if not rules:
        return [ProtectionRule.unprotected()]
    return rules


def has_protection_text(text: Optional[str]) -> bool:
    return str(text or "").strip().lower() not in _NO_PROTECTION_TEXTS


# =============================================================================
# Display helpers
# =============================================================================

def _summarize_rule(rule: ProtectionRule) -> str:
    ys = f" ({rule.year})" if rule.year else ""
    # Manual overrides can attach a fallback to a protected rule.
    fb = f"; becomes {rule.fallback}" if rule.fallback else ""
    if rule.kind == TOP_N and rule.end is not None:
        return f"Top-{rule.end} protected{ys}{fb}"
    if rule.kind == RANGE and rule.start is not None and rule.end is not None:
        return f"Protected {rule.start}-{rule.end}{ys}{fb}"
    if rule.kind == INVERSE_RANGE and rule.start is not None and rule.end is not None:
        return f"Conveys only if {rule.start}-{rule.end}{ys}"
    if rule.kind == UNPROTECTED:
        if rule.fallback:
            return f"Becomes {rule.fallback}{ys}"
        return f"Unprotected{ys}"
    return "Protected"


def summarize_protection(rules: Sequence[ProtectionRule]) -> str:
    """One-line human readable summary of a rule list."""
    if not rules:
        return "Unprotected"
    return ", ".join(_summarize_rule(r) for r in rules)


def describe_protection(text: Optional[str]) -> str:
    return summarize_protection(parse_protection(text))


def is_complex_protection(text: Optional[str]) -> bool:
    """Heuristic flag for descriptions the generic grammar likely misreads."""
    lower = str(text or "").lower()
    if "swap" in lower or "more favorable" in lower or "complex" in lower:
        return True
    if re.search(r"\bor\b", lower):
        return True
    return len(set(re.findall(r"\b(?:19|20)\d{2}\b", lower))) > 2


# =============================================================================
# Canonical dict form
# =============================================================================

def _coerce_position(raw: Any, *, field_name: str, raw_rule: Any) -> int:
    # Reject bool explicitly (bool is a subclass of int).
    if isinstance(raw, bool):
        raise TradeError(PROTECTION_INVALID, f"Protection {field_name} must be an integer", {"raw": raw_rule})
    # Avoid silently truncating non-integer floats.
    if isinstance(raw, float) and (not math.isfinite(raw) or not raw.is_integer()):
        raise TradeError(PROTECTION_INVALID, f"Protection {field_name} must be an integer", {"raw": raw_rule})
    try:
        value = int(raw)
    except (TypeError, ValueError):
        raise TradeError(PROTECTION_INVALID, f"Protection {field_name} must be an integer", {"raw": raw_rule})
    if value < 1:
        raise TradeError(PROTECTION_INVALID, f"Protection {field_name} out of range", {"raw": raw_rule})
    return value


def protection_rule_from_dict(raw: Any) -> ProtectionRule:
    """Validate a manual override dict into a ProtectionRule.

    Accepts the canonical form plus the legacy camelCase shape
    (`protectedStart` / `protectedEnd` / `range: {min, max}`, year 0 = any).

    Raises:
        TradeError(PROTECTION_INVALID): if `raw` is invalid.
    """
    if not isinstance(raw, dict):
        raise TradeError(PROTECTION_INVALID, "Protection must be an object", {"raw": raw})

    kind_raw = raw.get("type", raw.get("rule"))
    if not isinstance(kind_raw, str) or not kind_raw.strip():
        raise TradeError(PROTECTION_INVALID, "Protection type is required", {"raw": raw})
    kind = _KIND_ALIASES.get(kind_raw.strip().upper())
    if kind is None:
        raise TradeError(PROTECTION_INVALID, "Unsupported protection type", {"raw": raw})

    year_raw = raw.get("year")
    year: Optional[int] = None
    if year_raw not in (None, "", 0):
        year = _coerce_position(year_raw, field_name="year", raw_rule=raw)

    fallback = raw.get("fallback")
    if fallback is not None and not isinstance(fallback, str):
        raise TradeError(PROTECTION_INVALID, "Protection fallback must be a string", {"raw": raw})
    fallback = (fallback or "").strip() or None

    if kind == UNPROTECTED:
        return ProtectionRule.unprotected(year=year, fallback=fallback)

    span = raw.get("range") if isinstance(raw.get("range"), dict) else {}
    start_raw = raw.get("start", raw.get("protectedStart", span.get("min")))
    end_raw = raw.get("end", raw.get("protectedEnd", span.get("max")))

    if kind == TOP_N:
        n_raw = raw.get("n", end_raw)
        n = _coerce_position(n_raw, field_name="n", raw_rule=raw)
        return ProtectionRule(TOP_N, start=1, end=n, year=year, fallback=fallback)

    start = _coerce_position(start_raw, field_name="start", raw_rule=raw)
    end = _coerce_position(end_raw, field_name="end", raw_rule=raw)
    if start > end:
        raise TradeError(PROTECTION_INVALID, "Protection start must not exceed end", {"raw": raw})
    return ProtectionRule(kind, start=start, end=end, year=year, fallback=fallback)


def protection_rules_from_payload(raw: Any) -> Tuple[ProtectionRule, ...]:
    """Accept a single rule dict or a list of them."""
    items = raw if isinstance(raw, list) else [raw]
    if not items:
        raise TradeError(PROTECTION_INVALID, "Protection rule list must not be empty", {"raw": raw})
    return tuple(protection_rule_from_dict(item) for item in items)
