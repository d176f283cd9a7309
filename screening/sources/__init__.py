# screening/sources/__init__.py

"""
Source Adapters.

Each adapter wraps one external provider behind ``fetch(search_terms)``.
``build_default_adapters`` returns them in invocation order, which is also
the tiebreak order for deduplication.
"""

from config.settings import Settings

from .base import SourceAdapter, SourceFetchError
from .gdelt import GdeltAdapter, GovernmentDomainAdapter
from .google_news import GoogleNewsAdapter
from .mediacloud import MediaCloudAdapter
from .news_apis import BingNewsAdapter, NewsApiAdapter
from .wayback import WaybackAdapter


def build_default_adapters(settings: Settings) -> list[SourceAdapter]:
    """Baseline sources first, then optional ones, then the official-domain and archive searches."""
    return [
        GdeltAdapter(settings),
        GoogleNewsAdapter(settings),
        NewsApiAdapter(settings),
        BingNewsAdapter(settings),
        GovernmentDomainAdapter(settings),
        WaybackAdapter(settings),
        MediaCloudAdapter(settings),
    ]


__all__ = [
    "SourceAdapter",
    "SourceFetchError",
    "GdeltAdapter",
    "GovernmentDomainAdapter",
    "GoogleNewsAdapter",
    "NewsApiAdapter",
    "BingNewsAdapter",
    "WaybackAdapter",
    "MediaCloudAdapter",
    "build_default_adapters",
]
