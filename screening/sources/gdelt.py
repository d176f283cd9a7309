# screening/sources/gdelt.py

"""
GDELT DOC 2.0 adapters.

Two sources share the GDELT article-list API: the general news search over
the first search terms, and the government/official-domain search that
restricts results to an allow-list of regulator domains.
"""

from typing import Sequence

from screening.models.inputs import SearchTermSet
from screening.models.outputs import CanonicalRecord, Credibility, Relevance
from screening.models.schemas import GdeltResponse
from screening.sources.base import SourceAdapter
from screening.utils.validators import assess_source_credibility, normalize_gdelt_date

GDELT_DOC_API = "https://api.gdeltproject.org/api/v2/doc/doc"

GOVERNMENT_DOMAINS = ("sec.gov", "justice.gov", "treasury.gov", "fincen.gov")


class GdeltAdapter(SourceAdapter):
    """Free global news search; no credential."""

    name = "GDELT"
    timespan = "2y"
    max_records = 10

    def _query(self, query: str) -> GdeltResponse:
        payload = self._get_json(
            GDELT_DOC_API,
            params={
                "query": query,
                "mode": "ArtList",
                "maxrecords": self.max_records,
                "format": "json",
                "timespan": self.timespan,
            },
        )
        # GDELT answers {} when nothing matched
        return GdeltResponse.model_validate(payload or {})

    def _fetch_term(self, term: str) -> list[CanonicalRecord]:
        response = self._query(term)
        records = []
        for article in response.articles:
            publisher = article.domain or "Unknown"
            records.append(
                CanonicalRecord(
                    headline=article.title or "",
                    source_name=publisher,
                    source_credibility=assess_source_credibility(article.domain),
                    published_date=normalize_gdelt_date(article.seendate),
                    summary=article.title or "",
                    url=article.url or "",
                    origin_source=self.name,
                )
            )
        return records

    def _fetch_records(self, search_terms: SearchTermSet) -> list[CanonicalRecord]:
        terms = search_terms.for_source(self.settings.max_terms_per_source)
        return self._fetch_each_term(terms, self._fetch_term)


class GovernmentDomainAdapter(GdeltAdapter):
    """
    Regulator-published material.

    Every match is force-assigned HIGH credibility and HIGH relevance
    regardless of its content: results come only from the allow-listed
    official domains.
    """

    name = "Government"
    timespan = "5y"

    def __init__(self, settings, domains: Sequence[str] = GOVERNMENT_DOMAINS):
        super().__init__(settings)
        self.domains = tuple(domains)

    def build_query(self, subject: str) -> str:
        domain_filter = " OR ".join(f"domain:{d}" for d in self.domains)
        return f'"{subject}" ({domain_filter})'

    def _fetch_records(self, search_terms: SearchTermSet) -> list[CanonicalRecord]:
        response = self._query(self.build_query(search_terms.subject))
        return [
            CanonicalRecord(
                headline=article.title or "",
                source_name=article.domain or "Government",
                source_credibility=Credibility.HIGH,
                published_date=normalize_gdelt_date(article.seendate),
                summary=article.title or "",
                url=article.url or "",
                relevance=Relevance.HIGH,
                origin_source=self.name,
            )
            for article in response.articles
        ]
