# screening/utils/risk.py

"""
Deterministic risk aggregation.

The formula is reproduced exactly for audit purposes. It is additive and
only clamped at the end, so many low-severity hits can reach the same level
as one severe hit. That is a policy choice kept for compatibility.
"""

from typing import Iterable

from screening.models.outputs import (
    CanonicalRecord,
    Category,
    Credibility,
    Relevance,
    RiskAssessment,
    RiskLevel,
)

RELEVANCE_POINTS = {
    Relevance.HIGH: 25,
    Relevance.MEDIUM: 10,
}
DEFAULT_RELEVANCE_POINTS = 3

SEVERE_CATEGORIES = {Category.SANCTIONS_EVASION, Category.MONEY_LAUNDERING}
SERIOUS_CATEGORIES = {Category.FINANCIAL_CRIME, Category.FRAUD, Category.CORRUPTION}
SEVERE_CATEGORY_POINTS = 15
SERIOUS_CATEGORY_POINTS = 10
HIGH_CREDIBILITY_POINTS = 5

MAX_SCORE = 100

# (threshold, level), checked top-down
LEVEL_THRESHOLDS = (
    (70, RiskLevel.CRITICAL),
    (40, RiskLevel.HIGH),
    (15, RiskLevel.MEDIUM),
)


def _relevance_of(record: CanonicalRecord) -> Relevance:
    try:
        return Relevance(record.relevance)
    except ValueError:
        return Relevance.LOW


def _category_of(record: CanonicalRecord) -> Category:
    try:
        return Category(record.category)
    except ValueError:
        return Category.OTHER


def score_to_level(score: int) -> RiskLevel:
    for threshold, level in LEVEL_THRESHOLDS:
        if score >= threshold:
            return level
    return RiskLevel.LOW


def assess_risk(records: Iterable[CanonicalRecord]) -> RiskAssessment:
    """
    Map a final record set to a bounded score, severity histogram and level.

    Total: an empty input gives score 0 and level LOW.
    """
    severity_counts = {Relevance.HIGH.value: 0, Relevance.MEDIUM.value: 0, Relevance.LOW.value: 0}
    score = 0

    for record in records:
        relevance = _relevance_of(record)
        severity_counts[relevance.value] += 1
        score += RELEVANCE_POINTS.get(relevance, DEFAULT_RELEVANCE_POINTS)

        category = _category_of(record)
        if category in SEVERE_CATEGORIES:
            score += SEVERE_CATEGORY_POINTS
        elif category in SERIOUS_CATEGORIES:
            score += SERIOUS_CATEGORY_POINTS

        if record.source_credibility == Credibility.HIGH:
            score += HIGH_CREDIBILITY_POINTS

    score = max(0, min(score, MAX_SCORE))
    return RiskAssessment(
        score=score,
        level=score_to_level(score),
        severity_counts=severity_counts,
    )


def count_categories(records: Iterable[CanonicalRecord]) -> dict[str, int]:
    """Per-category record counts, every category present."""
    counts = {category.value: 0 for category in Category}
    for record in records:
        counts[_category_of(record).value] += 1
    return counts


def has_findings(records: Iterable[CanonicalRecord]) -> bool:
    """True when any record is HIGH relevance or carries a non-OTHER category."""
    return any(
        _relevance_of(r) == Relevance.HIGH or _category_of(r) != Category.OTHER
        for r in records
    )
