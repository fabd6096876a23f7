"""
Score calculation for questionnaire answers.

Answers carry response codes on an ordinal 1..5 scale (higher is better).
"dont_know", "not_applicable" and "not_answered" are recorded but do not
count towards the score, neither in the numerator nor in the maximum.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Any

MIN_RESPONSE_VALUE = 1
MAX_RESPONSE_VALUE = 5

DONT_KNOW = "dont_know"
NOT_APPLICABLE = "not_applicable"
NOT_ANSWERED = "not_answered"
NON_SCORING_CODES = frozenset({DONT_KNOW, NOT_APPLICABLE, NOT_ANSWERED})

RESPONSE_CODES = tuple(str(v) for v in range(MIN_RESPONSE_VALUE, MAX_RESPONSE_VALUE + 1)) + (
    DONT_KNOW,
    NOT_APPLICABLE,
    NOT_ANSWERED,
)

# Lower bound (inclusive) of each maturity band, highest first
MATURITY_BANDS: tuple[tuple[int, str], ...] = (
    (85, "advanced"),
    (65, "solid"),
    (35, "basic"),
    (0, "urgent"),
)


@dataclass(frozen=True, slots=True)
class ScoreResult:
    total_answered: int
    scored_answers: int
    raw_score: int
    max_possible: int
    percentage: int


def response_value(code: str) -> int | None:
    """Numeric value of a scorable response code, ``None`` otherwise."""
    text = str(code).strip()
    # ASCII only: str.isdigit() also accepts superscripts that int() rejects
    if text in NON_SCORING_CODES or not (text.isascii() and text.isdigit()):
        return None
    value = int(text)
    if MIN_RESPONSE_VALUE <= value <= MAX_RESPONSE_VALUE:
        return value
    return None


def calculate_score(answers: Mapping[str, str]) -> ScoreResult:
    """Compute the percentage score of an answer set. Pure and deterministic."""
    values = [response_value(code) for code in answers.values()]
    scored = [v for v in values if v is not None]

    raw_score = sum(scored)
    max_possible = len(scored) * MAX_RESPONSE_VALUE
    percentage = _round_percentage(raw_score, max_possible)

    return ScoreResult(
        total_answered=len(answers),
        scored_answers=len(scored),
        raw_score=raw_score,
        max_possible=max_possible,
        percentage=percentage,
    )


def _round_percentage(raw_score: int, max_possible: int) -> int:
    if max_possible <= 0:
        return 0
    ratio = Decimal(raw_score) * 100 / Decimal(max_possible)
    # Half-up, unlike round() which uses banker's rounding
    percentage = int(ratio.quantize(Decimal("1"), rounding=ROUND_HALF_UP))
    return max(0, min(100, percentage))


def maturity_band(score: int) -> str:
    for lower_bound, band in MATURITY_BANDS:
        if score >= lower_bound:
            return band
    return MATURITY_BANDS[-1][1]


def response_distribution(answers: Mapping[str, str]) -> list[dict[str, Any]]:
    """Count and share of each response code, in scale order."""
    counts = Counter(str(code) for code in answers.values())
    total = sum(counts.values())
    ordered = [code for code in RESPONSE_CODES if code in counts]
    ordered += sorted(code for code in counts if code not in RESPONSE_CODES)

    return [
        {
            "code": code,
            "count": counts[code],
            "percentage": round(counts[code] / total * 100, 2) if total else 0.0,
        }
        for code in ordered
    ]


def category_breakdown(detailed_answers: Iterable[Mapping[str, Any]]) -> list[dict[str, Any]]:
    """Per-category count of each response code for answered questions."""
    breakdown: dict[str, Counter[str]] = {}
    for item in detailed_answers:
        value = item.get("answer_value")
        if value is None:
            continue
        category = str(item.get("category") or "Uncategorised")
        breakdown.setdefault(category, Counter())[str(value)] += 1

    return [
        {"category": category, "breakdown": dict(counts)}
        for category, counts in sorted(breakdown.items())
    ]
