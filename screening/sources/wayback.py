# screening/sources/wayback.py

"""
Wayback Machine CDX adapter.

Looks for archived captures mentioning the subject on a short list of news
and regulator domains. A capture only says that a page existed, so records
carry LOW relevance until enrichment says otherwise.
"""

from typing import Any, Sequence

from screening.models.inputs import SearchTermSet
from screening.models.outputs import CanonicalRecord, Relevance
from screening.sources.base import SourceAdapter
from screening.utils.validators import assess_source_credibility, normalize_gdelt_date

WAYBACK_CDX_API = "https://web.archive.org/cdx/search/cdx"

WAYBACK_DOMAINS = ("reuters.com", "bbc.co.uk", "justice.gov", "sec.gov", "ft.com")


class WaybackAdapter(SourceAdapter):
    """Historical web captures; no credential, one call per domain."""

    name = "Wayback Machine"
    captures_per_domain = 5

    def __init__(self, settings, domains: Sequence[str] = WAYBACK_DOMAINS):
        super().__init__(settings)
        self.timeout = settings.wayback_timeout
        self.domains = tuple(domains)

    def _fetch_records(self, search_terms: SearchTermSet) -> list[CanonicalRecord]:
        return self._fetch_each_term(
            self.domains,
            lambda domain: self._fetch_domain(domain, search_terms.subject),
        )

    def _fetch_domain(self, domain: str, subject: str) -> list[CanonicalRecord]:
        payload = self._get_json(
            WAYBACK_CDX_API,
            params={
                "url": f"{domain}/*",
                "output": "json",
                "limit": self.captures_per_domain,
                "filter": "statuscode:200",
                "fl": "original,timestamp,mimetype",
                "matchType": "domain",
                "collapse": "urlkey",
                "query": subject,
            },
        )
        records = []
        for row in parse_cdx_rows(payload):
            original, timestamp, mimetype = (row + ["", "", ""])[:3]
            # skip PDFs, images and other non-page captures
            if not original or (mimetype and "html" not in mimetype):
                continue
            records.append(self._to_record(domain, original, timestamp))
        return records

    def _to_record(self, domain: str, original: str, timestamp: str) -> CanonicalRecord:
        return CanonicalRecord(
            headline=f"Archived page from {domain}",
            source_name=domain,
            source_credibility=assess_source_credibility(domain),
            published_date=normalize_gdelt_date(timestamp),
            summary=f"Wayback Machine capture: {original}",
            url=f"https://web.archive.org/web/{timestamp}/{original}",
            relevance=Relevance.LOW,
            origin_source=self.name,
        )


def parse_cdx_rows(payload: Any) -> list[list[str]]:
    """
    Data rows of a CDX ``output=json`` reply.

    The reply is a list of rows whose first row holds the field names. An
    empty reply means no captures.
    """
    if payload is None or payload == []:
        return []
    if not isinstance(payload, list):
        raise ValueError("Malformed CDX payload")
    return [
        [str(cell) for cell in row]
        for row in payload[1:]
        if isinstance(row, list)
    ]
