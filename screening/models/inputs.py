# screening/models/inputs.py

"""
Pydantic models for system inputs.

Defines the screening query submitted by the analyst, the search-term set
derived from it, and the findings summary used for precedent lookups.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class SubjectType(str, Enum):
    """Kind of subject being screened."""

    INDIVIDUAL = "INDIVIDUAL"
    ENTITY = "ENTITY"


class ScreeningQuery(BaseModel):
    """Input for one adverse media screening.

    Field aliases match the JSON body of the screening endpoint
    (``name``, ``type``, ``country``, ``additionalTerms``).
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    subject: str = Field(alias="name", description="Name of the person or entity screened.")
    subject_type: SubjectType = Field(
        default=SubjectType.INDIVIDUAL,
        alias="type",
        description="INDIVIDUAL or ENTITY.",
    )
    jurisdiction_hint: Optional[str] = Field(
        default=None,
        alias="country",
        description="Optional jurisdiction used for an extra sanctions search term.",
    )
    extra_terms: tuple[str, ...] = Field(
        default=(),
        alias="additionalTerms",
        description="Analyst supplied terms combined with the subject.",
    )

    @field_validator("subject")
    @classmethod
    def validate_subject(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Name is required")
        return v

    @field_validator("subject_type", mode="before")
    @classmethod
    def normalize_subject_type(cls, v):
        if v is None:
            return SubjectType.INDIVIDUAL
        if isinstance(v, str):
            return v.strip().upper() or SubjectType.INDIVIDUAL
        return v

    @field_validator("jurisdiction_hint")
    @classmethod
    def blank_jurisdiction_is_none(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        return v.strip() or None

    @field_validator("extra_terms", mode="before")
    @classmethod
    def clean_extra_terms(cls, v):
        if v is None:
            return ()
        if isinstance(v, str):
            v = [v]
        if not isinstance(v, (list, tuple)):
            raise ValueError("additionalTerms must be a list of strings")
        return tuple(t.strip() for t in v if isinstance(t, str) and t.strip())


class SearchTermSet(BaseModel):
    """Ordered query-string variants shared by every source of one screening."""

    model_config = ConfigDict(frozen=True)

    subject: str
    terms: tuple[str, ...]

    def for_source(self, limit: int) -> tuple[str, ...]:
        """First ``limit`` terms; later terms are for other sources' benefit."""
        return self.terms[:limit]

    @property
    def primary(self) -> str:
        return self.terms[0]


class Findings(BaseModel):
    """Structured findings summary used to look up precedent case studies."""

    model_config = ConfigDict(populate_by_name=True)

    indicators: list[str] = Field(default_factory=list)
    typologies: list[str] = Field(default_factory=list)
    jurisdictions: list[str] = Field(default_factory=list)
    entity_type: Optional[str] = Field(default=None, alias="entityType")
    risk_score: Optional[int] = Field(default=None, alias="riskScore")
