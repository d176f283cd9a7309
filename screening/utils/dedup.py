# screening/utils/dedup.py

"""
Headline-based deduplication of canonical records.

The key is content derived but the winner is position derived: when two
records collapse to the same key the one seen first is kept, so the result
is deterministic for a fixed source order.
"""

import re
from typing import Iterable

from screening.models.outputs import CanonicalRecord

DEFAULT_KEY_LENGTH = 80

_NON_ALNUM = re.compile(r"[^a-z0-9]")


def dedup_key(headline: str, length: int = DEFAULT_KEY_LENGTH) -> str:
    """Lowercased headline, ASCII alphanumerics only, truncated to ``length``."""
    return _NON_ALNUM.sub("", (headline or "").lower())[:length]


def deduplicate(
    records: Iterable[CanonicalRecord],
    key_length: int = DEFAULT_KEY_LENGTH,
) -> list[CanonicalRecord]:
    """
    Collapse near-duplicate records, first occurrence wins.

    Records whose key is empty (no usable headline) are dropped as noise.
    Output keeps first-seen order.
    """
    seen: dict[str, CanonicalRecord] = {}
    for record in records:
        key = dedup_key(record.headline, key_length)
        if not key:
            continue
        if key not in seen:
            seen[key] = record
    return list(seen.values())
