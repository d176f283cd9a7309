# screening/utils/validators.py

"""
Normalization helpers shared by the source adapters.

Publisher credibility tiering and date normalization: every source
reports dates in its own format, every canonical record carries
``YYYY-MM-DD`` or an empty string.
"""

import re
from datetime import date
from typing import Optional

from dateutil import parser as date_parser

from screening.models.outputs import Credibility
from screening.utils.logger import get_logger

logger = get_logger("Validators")


HIGH_CREDIBILITY_MARKERS = (
    "reuters", "associated press", "ap news", "bbc", "financial times", "ft.com",
    "wall street journal", "wsj", "new york times", "nytimes", "bloomberg",
    "washington post", "the guardian", "sec.gov", "justice.gov", "treasury.gov",
    "fincen.gov", "ofac", "economist", "politico",
)

LOW_CREDIBILITY_MARKERS = (
    "blog", "wordpress", "medium.com", "substack", "reddit", "twitter", "x.com",
)

_GDELT_SEENDATE = re.compile(r"^(\d{4})(\d{2})(\d{2})")


def assess_source_credibility(source: Optional[str]) -> Credibility:
    """
    Coarse trust tier of a publisher name or domain.

    High-credibility markers win over low ones; anything unknown is MEDIUM.
    """
    s = (source or "").lower()
    if any(marker in s for marker in HIGH_CREDIBILITY_MARKERS):
        return Credibility.HIGH
    if any(marker in s for marker in LOW_CREDIBILITY_MARKERS):
        return Credibility.LOW
    return Credibility.MEDIUM


def parse_date(date_str: Optional[str]) -> Optional[date]:
    """Parse ISO-8601 or RFC-822 style dates; None when unparseable."""
    if not date_str:
        return None
    try:
        return date_parser.parse(date_str).date()
    except (ValueError, OverflowError):
        logger.debug(f"Failed to parse date string: {date_str}")
        return None


def normalize_date(date_str: Optional[str]) -> str:
    """``YYYY-MM-DD`` or empty string."""
    parsed = parse_date(date_str)
    return parsed.isoformat() if parsed else ""


def normalize_gdelt_date(seendate: Optional[str]) -> str:
    """Compact GDELT ``seendate`` or Wayback timestamp (``20240131T120000Z``) to ``2024-01-31``."""
    if not seendate:
        return ""
    match = _GDELT_SEENDATE.match(seendate)
    if not match:
        return ""
    return "-".join(match.groups())
