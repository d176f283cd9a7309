# screening/sources/google_news.py

"""Google News RSS adapter (free, no credential)."""

from datetime import date
from typing import Any

import feedparser

from screening.models.inputs import SearchTermSet
from screening.models.outputs import CanonicalRecord
from screening.sources.base import SourceAdapter, SourceFetchError
from screening.utils.validators import assess_source_credibility, normalize_date

GOOGLE_NEWS_RSS = "https://news.google.com/rss/search"


def _entry_date(entry: Any) -> str:
    parsed = entry.get("published_parsed") or entry.get("updated_parsed")
    if parsed:
        return date(*parsed[:3]).isoformat()
    return normalize_date(entry.get("published", ""))


def parse_feed_items(xml: str) -> list[dict[str, str]]:
    """
    Parse RSS items into flat dicts of strings.

    Missing optional tags become empty strings; only a feed that is both
    malformed and empty is treated as a failure.
    """
    feed = feedparser.parse(xml)
    if feed.bozo and not feed.entries:
        raise ValueError(f"Feed parse error: {feed.get('bozo_exception')}")

    items = []
    for entry in feed.entries:
        source = entry.get("source") or {}
        items.append({
            "title": (entry.get("title") or "").strip(),
            "link": (entry.get("link") or "").strip(),
            "date": _entry_date(entry),
            "description": (entry.get("summary") or "").strip(),
            "source": (source.get("title") or "").strip(),
        })
    return items


class GoogleNewsAdapter(SourceAdapter):
    name = "Google News"

    def _fetch_term(self, term: str) -> list[CanonicalRecord]:
        response = self._get(
            GOOGLE_NEWS_RSS,
            params={"q": term, "hl": "en-US", "gl": "US", "ceid": "US:en"},
        )
        if not response.text:
            raise SourceFetchError(self.name, "Received empty feed.")

        return [
            CanonicalRecord(
                headline=item["title"],
                source_name=item["source"] or self.name,
                source_credibility=assess_source_credibility(item["source"]),
                published_date=item["date"],
                summary=item["description"] or item["title"],
                url=item["link"],
                origin_source=self.name,
            )
            for item in parse_feed_items(response.text)
        ]

    def _fetch_records(self, search_terms: SearchTermSet) -> list[CanonicalRecord]:
        terms = search_terms.for_source(self.settings.max_terms_per_source)
        return self._fetch_each_term(terms, self._fetch_term)
