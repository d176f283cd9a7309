# screening/models/outputs.py

"""
Pydantic models for intermediate and final system outputs.

Everything here is request-scoped: created during one screening or one
retrieval call and discarded once the caller has consumed it. Wire-facing
models serialize with camelCase aliases to keep the JSON contract of the
HTTP endpoints.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from screening.models.inputs import SubjectType


class Category(str, Enum):
    FINANCIAL_CRIME = "FINANCIAL_CRIME"
    CORRUPTION = "CORRUPTION"
    FRAUD = "FRAUD"
    SANCTIONS_EVASION = "SANCTIONS_EVASION"
    MONEY_LAUNDERING = "MONEY_LAUNDERING"
    OTHER = "OTHER"


class Relevance(str, Enum):
    HIGH = "HIGH"
    MEDIUM = "MEDIUM"
    LOW = "LOW"


class Credibility(str, Enum):
    HIGH = "HIGH"
    MEDIUM = "MEDIUM"
    LOW = "LOW"


class RiskLevel(str, Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    CRITICAL = "CRITICAL"


class SourceStatus(str, Enum):
    OK = "OK"
    FAILED = "FAILED"
    NOT_CONFIGURED = "NOT_CONFIGURED"


class CamelModel(BaseModel):
    """Base for models that cross the HTTP boundary."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# =============================================================================
# Source records
# =============================================================================


class CanonicalRecord(CamelModel):
    """The single normalized shape every source record is mapped into."""

    headline: str = Field(default="", description="Article or page headline.")
    source_name: str = Field(default="", description="Publisher name or domain.")
    source_credibility: Credibility = Field(default=Credibility.MEDIUM)
    published_date: str = Field(default="", description="YYYY-MM-DD, or empty.")
    summary: str = Field(default="")
    url: str = Field(default="")
    category: Category = Field(default=Category.OTHER)
    relevance: Relevance = Field(default=Relevance.MEDIUM)
    origin_source: str = Field(
        default="", description="Adapter that produced the record (provenance tag)."
    )


class SourceOutcome(BaseModel):
    """Result of one Source Adapter invocation, success or failure."""

    source_name: str
    status: SourceStatus = SourceStatus.OK
    records: list[CanonicalRecord] = Field(default_factory=list)
    error: Optional[str] = None

    @classmethod
    def failed(cls, source_name: str, error: str) -> "SourceOutcome":
        return cls(source_name=source_name, status=SourceStatus.FAILED, error=error)

    @classmethod
    def not_configured(cls, source_name: str) -> "SourceOutcome":
        return cls(source_name=source_name, status=SourceStatus.NOT_CONFIGURED)


class FanOutResult(BaseModel):
    """Everything collected by one fan-out over the active sources."""

    search_terms: list[str]
    outcomes: list[SourceOutcome]
    combined_records: list[CanonicalRecord]


# =============================================================================
# Risk
# =============================================================================


class RiskAssessment(CamelModel):
    """Deterministic risk summary of a final record set."""

    score: int = Field(ge=0, le=100)
    level: RiskLevel
    severity_counts: dict[str, int]


# =============================================================================
# Screening result (HTTP response of the screening endpoint)
# =============================================================================


class AdverseMediaSummary(CamelModel):
    status: str = Field(description="FINDINGS or CLEAR.")
    total_articles: int
    categories: dict[str, int]
    articles: list[CanonicalRecord]


class SourceSummary(CamelModel):
    count: int = 0
    error: Optional[str] = None
    status: SourceStatus = SourceStatus.OK


class ScreeningResult(CamelModel):
    """Complete result of one adverse media screening."""

    subject: str
    subject_type: SubjectType = Field(alias="type")
    screening_date: datetime
    adverse_media: AdverseMediaSummary
    risk_score: int
    risk_level: RiskLevel
    severity_counts: dict[str, int]
    sources_searched: dict[str, SourceSummary]
    suggested_search_terms: list[str]

    def to_response(self) -> dict[str, Any]:
        """JSON-ready camelCase dict for the HTTP response."""
        return self.model_dump(mode="json", by_alias=True)


# =============================================================================
# Retrieval
# =============================================================================


class IndexMatch(BaseModel):
    """One similarity match returned by a vector index namespace."""

    id: str
    score: float
    metadata: dict[str, Any] = Field(default_factory=dict)


class MergedMatch(CamelModel):
    """A match after cross-namespace merging; namespace kept for attribution."""

    id: str
    score: float
    namespace: str
    metadata: dict[str, Any] = Field(default_factory=dict)


class CaseStudyMatch(CamelModel):
    """An enforcement precedent relevant to a findings summary."""

    case_name: Optional[str] = None
    year: Optional[Any] = None
    entity: Optional[str] = None
    penalty: Optional[Any] = None
    regulators: Optional[Any] = None
    typologies: Optional[Any] = None
    relevance: float
    lesson: Optional[str] = None
    what_happened: Optional[str] = None


class IndexResult(CamelModel):
    success: bool
    id: str
    chunks: int = 1
