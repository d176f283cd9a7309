# screening/sources/news_apis.py

"""
Credential-gated news search adapters.

Both only run when their key is configured and both query the primary
search term alone, so an optional source adds at most one call per
screening.
"""

from screening.models.inputs import SearchTermSet
from screening.models.outputs import CanonicalRecord
from screening.models.schemas import BingNewsResponse, NewsApiResponse
from screening.sources.base import SourceAdapter, SourceFetchError
from screening.utils.validators import assess_source_credibility, normalize_date

NEWS_API_URL = "https://newsapi.org/v2/everything"
BING_NEWS_URL = "https://api.bing.microsoft.com/v7.0/news/search"


class NewsApiAdapter(SourceAdapter):
    name = "NewsAPI"
    requires_credential = True
    page_size = 20

    def is_configured(self) -> bool:
        return bool(self.settings.news_api_key)

    def _fetch_records(self, search_terms: SearchTermSet) -> list[CanonicalRecord]:
        payload = self._get_json(
            NEWS_API_URL,
            params={
                "q": search_terms.primary,
                "sortBy": "relevancy",
                "pageSize": self.page_size,
            },
            headers={"X-Api-Key": self.settings.news_api_key},
        )
        response = NewsApiResponse.model_validate(payload)
        if response.status and response.status != "ok":
            raise SourceFetchError(self.name, f"Provider status {response.status}")

        records = []
        for article in response.articles:
            publisher = (article.source.name if article.source else None) or "Unknown"
            records.append(
                CanonicalRecord(
                    headline=article.title or "",
                    source_name=publisher,
                    source_credibility=assess_source_credibility(publisher),
                    published_date=normalize_date(article.published_at),
                    summary=article.description or "",
                    url=article.url or "",
                    origin_source=self.name,
                )
            )
        return records


class BingNewsAdapter(SourceAdapter):
    name = "Bing News"
    requires_credential = True
    count = 20

    def is_configured(self) -> bool:
        return bool(self.settings.bing_news_api_key)

    def _fetch_records(self, search_terms: SearchTermSet) -> list[CanonicalRecord]:
        payload = self._get_json(
            BING_NEWS_URL,
            params={"q": search_terms.primary, "count": self.count, "mkt": "en-US"},
            headers={"Ocp-Apim-Subscription-Key": self.settings.bing_news_api_key},
        )
        response = BingNewsResponse.model_validate(payload)

        records = []
        for article in response.value:
            publisher = (article.provider[0].name if article.provider else None) or "Unknown"
            records.append(
                CanonicalRecord(
                    headline=article.name or "",
                    source_name=publisher,
                    source_credibility=assess_source_credibility(publisher),
                    published_date=normalize_date(article.date_published),
                    summary=article.description or "",
                    url=article.url or "",
                    origin_source=self.name,
                )
            )
        return records
