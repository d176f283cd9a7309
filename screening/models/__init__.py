# screening/models/__init__.py

"""
Data models for the adverse media aggregation service.

Defines Pydantic models for inputs, canonical records, source outcomes,
risk assessments, screening results and retrieval matches.
"""

from .inputs import Findings, ScreeningQuery, SearchTermSet, SubjectType
from .outputs import (
    AdverseMediaSummary,
    CanonicalRecord,
    CaseStudyMatch,
    Category,
    Credibility,
    FanOutResult,
    IndexMatch,
    IndexResult,
    MergedMatch,
    Relevance,
    RiskAssessment,
    RiskLevel,
    ScreeningResult,
    SourceOutcome,
    SourceStatus,
    SourceSummary,
)

__all__ = [
    "Findings",
    "ScreeningQuery",
    "SearchTermSet",
    "SubjectType",
    "AdverseMediaSummary",
    "CanonicalRecord",
    "CaseStudyMatch",
    "Category",
    "Credibility",
    "FanOutResult",
    "IndexMatch",
    "IndexResult",
    "MergedMatch",
    "Relevance",
    "RiskAssessment",
    "RiskLevel",
    "ScreeningResult",
    "SourceOutcome",
    "SourceStatus",
    "SourceSummary",
]
