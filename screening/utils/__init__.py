# screening/utils/__init__.py

"""
Utility package for the adverse media aggregation service.

Contains standalone, reusable helper modules:
- logger: Centralized logging configuration (structlog).
- validators: Source credibility and date normalization.
- search_terms: Query-string variants derived from a screening query.
- dedup: Headline-key deduplication.
- risk: Deterministic risk scoring.
- chunking: Overlapping text chunks for embedding.
"""

from .chunking import chunk_text
from .dedup import dedup_key, deduplicate
from .logger import configure_logging, get_logger
from .risk import assess_risk, count_categories, has_findings
from .search_terms import build_search_terms
from .validators import assess_source_credibility, normalize_date

# Public API for the utilities package
__all__ = [
    "assess_risk",
    "assess_source_credibility",
    "build_search_terms",
    "chunk_text",
    "configure_logging",
    "count_categories",
    "dedup_key",
    "deduplicate",
    "get_logger",
    "has_findings",
    "normalize_date",
]
