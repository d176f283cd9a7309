# screening/models/schemas.py

"""
Wire schemas for external payloads.

Each provider's JSON response is validated here at the adapter boundary so
no unvalidated external shape leaks into the canonical model. Fields are
optional and unknown keys are ignored: providers add fields freely, and a
missing field becomes an empty string during normalization.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class _Lenient(BaseModel):
    model_config = ConfigDict(extra="ignore")


# -----------------------------------------------------------------------------
# GDELT DOC 2.0 API (mode=ArtList, format=json)
# -----------------------------------------------------------------------------


class GdeltArticle(_Lenient):
    url: Optional[str] = None
    title: Optional[str] = None
    seendate: Optional[str] = None
    domain: Optional[str] = None
    language: Optional[str] = None
    sourcecountry: Optional[str] = None


class GdeltResponse(_Lenient):
    articles: list[GdeltArticle] = Field(default_factory=list)


# -----------------------------------------------------------------------------
# NewsAPI.org /v2/everything
# -----------------------------------------------------------------------------


class NewsApiSource(_Lenient):
    id: Optional[str] = None
    name: Optional[str] = None


class NewsApiArticle(_Lenient):
    source: Optional[NewsApiSource] = None
    title: Optional[str] = None
    description: Optional[str] = None
    url: Optional[str] = None
    published_at: Optional[str] = Field(default=None, alias="publishedAt")


class NewsApiResponse(_Lenient):
    status: Optional[str] = None
    articles: list[NewsApiArticle] = Field(default_factory=list)


# -----------------------------------------------------------------------------
# Bing News Search v7
# -----------------------------------------------------------------------------


class BingProvider(_Lenient):
    name: Optional[str] = None


class BingNewsArticle(_Lenient):
    name: Optional[str] = None
    url: Optional[str] = None
    description: Optional[str] = None
    date_published: Optional[str] = Field(default=None, alias="datePublished")
    provider: list[BingProvider] = Field(default_factory=list)


class BingNewsResponse(_Lenient):
    value: list[BingNewsArticle] = Field(default_factory=list)


# -----------------------------------------------------------------------------
# MediaCloud search API
# -----------------------------------------------------------------------------


class MediaCloudStory(_Lenient):
    title: Optional[str] = None
    headline: Optional[str] = None
    media_name: Optional[str] = None
    source: Optional[str] = None
    publish_date: Optional[str] = None
    snippet: Optional[str] = None
    url: Optional[str] = None
    stories_id: Optional[str | int] = None


class MediaCloudResponse(_Lenient):
    """The story list has appeared under three different keys."""

    results: list[MediaCloudStory] = Field(default_factory=list)
    articles: list[MediaCloudStory] = Field(default_factory=list)
    stories: list[MediaCloudStory] = Field(default_factory=list)

    @property
    def items(self) -> list[MediaCloudStory]:
        return self.results or self.articles or self.stories


# -----------------------------------------------------------------------------
# Enrichment reply
# -----------------------------------------------------------------------------


class ClassificationPatch(_Lenient):
    """One element of the enrichment reply, applied back by position."""

    index: int
    category: Optional[str] = None
    relevance: Optional[str] = None
    summary: Optional[str] = None
