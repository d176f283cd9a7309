import pytest

import requests

from screening.models.inputs import ScreeningQuery
from screening.models.outputs import Credibility, Relevance, SourceStatus
from screening.sources import (
    BingNewsAdapter,
    GdeltAdapter,
    GoogleNewsAdapter,
    GovernmentDomainAdapter,
    MediaCloudAdapter,
    NewsApiAdapter,
    WaybackAdapter,
    build_default_adapters,
)
from screening.sources.google_news import parse_feed_items
from screening.tests.conftest import mock_response
from screening.utils.search_terms import build_search_terms


RSS_FEED = """<?xml version="1.0" encoding="UTF-8"?>
<rss version="2.0">
  <channel>
    <title>Search results</title>
    <item>
      <title>Acme Corp charged with money laundering</title>
      <link>https://news.example/acme-charged</link>
      <pubDate>Tue, 05 Mar 2024 10:00:00 GMT</pubDate>
      <description>Prosecutors allege a laundering scheme.</description>
      <source url="https://www.reuters.com">Reuters</source>
    </item>
    <item>
      <title>Acme Corp opens new office</title>
    </item>
  </channel>
</rss>"""


# --- Fixtures ---


@pytest.fixture
def acme_terms():
    return build_search_terms(ScreeningQuery(name="Acme Corp", type="ENTITY"))


@pytest.fixture
def mock_get(mocker):
    return mocker.patch("screening.sources.base.requests.get")


# --- GDELT ---


@pytest.mark.asyncio
async def test_gdelt_maps_articles(settings, acme_terms, mock_get):
    mock_get.return_value = mock_response({
        "articles": [
            {
                "url": "https://www.reuters.com/acme",
                "title": "Acme Corp under investigation",
                "seendate": "20240131T120000Z",
                "domain": "reuters.com",
            }
        ]
    })

    outcome = await GdeltAdapter(settings).fetch(acme_terms)

    assert outcome.status == SourceStatus.OK
    assert outcome.error is None
    # one article per term, first three terms
    assert mock_get.call_count == 3
    record = outcome.records[0]
    assert record.headline == "Acme Corp under investigation"
    assert record.source_name == "reuters.com"
    assert record.source_credibility == Credibility.HIGH
    assert record.published_date == "2024-01-31"
    assert record.origin_source == "GDELT"

    params = mock_get.call_args_list[0].kwargs["params"]
    assert params["query"] == '"Acme Corp"'
    assert params["timespan"] == "2y"
    assert mock_get.call_args_list[0].kwargs["timeout"] == settings.source_timeout


@pytest.mark.asyncio
async def test_gdelt_empty_payload_is_zero_records(settings, acme_terms, mock_get):
    mock_get.return_value = mock_response({})

    outcome = await GdeltAdapter(settings).fetch(acme_terms)

    assert outcome.status == SourceStatus.OK
    assert outcome.records == []


@pytest.mark.asyncio
async def test_timeout_becomes_failed_outcome(settings, acme_terms, mock_get):
    mock_get.side_effect = requests.Timeout("read timed out")

    outcome = await GdeltAdapter(settings).fetch(acme_terms)

    assert outcome.status == SourceStatus.FAILED
    assert outcome.records == []
    assert outcome.error.startswith("Timeout")


@pytest.mark.asyncio
async def test_partial_term_failure_keeps_answered_terms(settings, acme_terms, mock_get):
    good = mock_response({"articles": [{"title": "Acme Corp fined", "domain": "ft.com"}]})
    mock_get.side_effect = [good, requests.ConnectionError("reset"), good]

    outcome = await GdeltAdapter(settings).fetch(acme_terms)

    assert outcome.status == SourceStatus.OK
    assert len(outcome.records) == 2


@pytest.mark.asyncio
async def test_non_2xx_is_captured(settings, acme_terms, mock_get):
    mock_get.return_value = mock_response(status_code=503)

    outcome = await GdeltAdapter(settings).fetch(acme_terms)

    assert outcome.status == SourceStatus.FAILED
    assert outcome.error == "HTTP 503"


@pytest.mark.asyncio
async def test_malformed_payload_is_captured(settings, acme_terms, mock_get):
    mock_get.return_value = mock_response({"articles": "not-a-list"})

    outcome = await GdeltAdapter(settings).fetch(acme_terms)

    assert outcome.status == SourceStatus.FAILED
    assert "ValidationError" in outcome.error


# --- Government domains ---


@pytest.mark.asyncio
async def test_government_records_forced_high(settings, acme_terms, mock_get):
    """Allow-listed official domains: HIGH credibility and relevance whatever the headline."""
    mock_get.return_value = mock_response({
        "articles": [
            {"title": "Quarterly newsletter", "domain": "sec.gov", "seendate": "20230101T000000Z"},
        ]
    })

    outcome = await GovernmentDomainAdapter(settings).fetch(acme_terms)

    assert mock_get.call_count == 1
    params = mock_get.call_args.kwargs["params"]
    assert params["query"] == '"Acme Corp" (domain:sec.gov OR domain:justice.gov OR domain:treasury.gov OR domain:fincen.gov)'
    assert params["timespan"] == "5y"

    record = outcome.records[0]
    assert record.source_credibility == Credibility.HIGH
    assert record.relevance == Relevance.HIGH
    assert record.source_name == "sec.gov"
    assert record.origin_source == "Government"


# --- Google News ---


def test_parse_feed_tolerates_missing_tags():
    items = parse_feed_items(RSS_FEED)

    assert items[0] == {
        "title": "Acme Corp charged with money laundering",
        "link": "https://news.example/acme-charged",
        "date": "2024-03-05",
        "description": "Prosecutors allege a laundering scheme.",
        "source": "Reuters",
    }
    assert items[1]["title"] == "Acme Corp opens new office"
    assert items[1]["link"] == ""
    assert items[1]["date"] == ""
    assert items[1]["source"] == ""


@pytest.mark.asyncio
async def test_google_news_maps_items(settings, acme_terms, mock_get):
    mock_get.return_value = mock_response(text=RSS_FEED)

    outcome = await GoogleNewsAdapter(settings).fetch(acme_terms)

    assert outcome.status == SourceStatus.OK
    # two items per term, three terms, no dedup at this stage
    assert len(outcome.records) == 6
    first, second = outcome.records[:2]
    assert first.source_name == "Reuters"
    assert first.source_credibility == Credibility.HIGH
    assert second.source_name == "Google News"
    assert second.summary == "Acme Corp opens new office"


@pytest.mark.asyncio
async def test_google_news_empty_body_fails(settings, acme_terms, mock_get):
    mock_get.return_value = mock_response(text="")

    outcome = await GoogleNewsAdapter(settings).fetch(acme_terms)

    assert outcome.status == SourceStatus.FAILED
    assert outcome.error == "Received empty feed."


# --- Credential-gated sources ---


def test_optional_sources_need_credentials(settings):
    assert NewsApiAdapter(settings).is_configured() is False
    assert BingNewsAdapter(settings).is_configured() is False

    keyed = settings.model_copy(update={"news_api_key": "k1", "bing_news_api_key": "k2"})
    assert NewsApiAdapter(keyed).is_configured() is True
    assert BingNewsAdapter(keyed).is_configured() is True


def test_default_adapter_order(settings):
    names = [a.name for a in build_default_adapters(settings)]
    assert names == [
        "GDELT",
        "Google News",
        "NewsAPI",
        "Bing News",
        "Government",
        "Wayback Machine",
        "MediaCloud",
    ]


@pytest.mark.asyncio
async def test_newsapi_uses_primary_term_and_key(settings, acme_terms, mock_get):
    keyed = settings.model_copy(update={"news_api_key": "secret"})
    mock_get.return_value = mock_response({
        "status": "ok",
        "articles": [
            {
                "source": {"id": None, "name": "Bloomberg"},
                "title": "Acme Corp settles bribery inquiry",
                "description": "Settlement reached.",
                "url": "https://bloomberg.com/acme",
                "publishedAt": "2024-02-10T08:00:00Z",
            }
        ],
    })

    outcome = await NewsApiAdapter(keyed).fetch(acme_terms)

    kwargs = mock_get.call_args.kwargs
    assert kwargs["params"]["q"] == '"Acme Corp"'
    assert kwargs["headers"]["X-Api-Key"] == "secret"
    record = outcome.records[0]
    assert record.source_name == "Bloomberg"
    assert record.published_date == "2024-02-10"
    assert record.summary == "Settlement reached."


@pytest.mark.asyncio
async def test_newsapi_error_status_fails(settings, acme_terms, mock_get):
    keyed = settings.model_copy(update={"news_api_key": "secret"})
    mock_get.return_value = mock_response({"status": "error", "code": "rateLimited"})

    outcome = await NewsApiAdapter(keyed).fetch(acme_terms)

    assert outcome.status == SourceStatus.FAILED
    assert outcome.error == "Provider status error"


@pytest.mark.asyncio
async def test_bing_maps_provider(settings, acme_terms, mock_get):
    keyed = settings.model_copy(update={"bing_news_api_key": "secret"})
    mock_get.return_value = mock_response({
        "value": [
            {
                "name": "Acme Corp faces sanctions",
                "url": "https://example.org/acme",
                "description": "Sanctions imposed.",
                "datePublished": "2024-04-01T00:00:00.0000000Z",
                "provider": [{"name": "Example Daily"}],
            }
        ]
    })

    outcome = await BingNewsAdapter(keyed).fetch(acme_terms)

    assert mock_get.call_args.kwargs["headers"]["Ocp-Apim-Subscription-Key"] == "secret"
    record = outcome.records[0]
    assert record.headline == "Acme Corp faces sanctions"
    assert record.source_name == "Example Daily"
    assert record.published_date == "2024-04-01"
    assert record.origin_source == "Bing News"


# --- Archive sources ---


CDX_ROWS = [
    ["original", "timestamp", "mimetype"],
    ["https://www.reuters.com/acme-inquiry", "20230415093000", "text/html"],
    ["https://www.reuters.com/acme-filing.pdf", "20230416000000", "application/pdf"],
]


@pytest.mark.asyncio
async def test_wayback_maps_captures_per_domain(settings, acme_terms, mock_get):
    mock_get.return_value = mock_response(CDX_ROWS)

    outcome = await WaybackAdapter(settings, domains=("reuters.com", "sec.gov")).fetch(acme_terms)

    assert outcome.status == SourceStatus.OK
    assert mock_get.call_count == 2
    # the PDF capture is skipped on each domain
    assert len(outcome.records) == 2
    record = outcome.records[0]
    assert record.headline == "Archived page from reuters.com"
    assert record.source_credibility == Credibility.HIGH
    assert record.relevance == Relevance.LOW
    assert record.published_date == "2023-04-15"
    assert record.url == "https://web.archive.org/web/20230415093000/https://www.reuters.com/acme-inquiry"
    assert record.origin_source == "Wayback Machine"

    call = mock_get.call_args_list[0]
    assert call.kwargs["params"]["url"] == "reuters.com/*"
    assert call.kwargs["params"]["query"] == "Acme Corp"
    assert call.kwargs["timeout"] == settings.wayback_timeout


@pytest.mark.asyncio
async def test_wayback_skips_failed_domains(settings, acme_terms, mock_get):
    mock_get.side_effect = [requests.Timeout("slow"), mock_response([])]

    outcome = await WaybackAdapter(settings, domains=("reuters.com", "sec.gov")).fetch(acme_terms)

    assert outcome.status == SourceStatus.OK
    assert outcome.records == []


@pytest.mark.asyncio
async def test_wayback_fails_when_every_domain_fails(settings, acme_terms, mock_get):
    mock_get.return_value = mock_response({"error": "unexpected"})

    outcome = await WaybackAdapter(settings).fetch(acme_terms)

    assert outcome.status == SourceStatus.FAILED
    assert "Malformed CDX payload" in outcome.error


@pytest.mark.asyncio
async def test_mediacloud_maps_stories(settings, acme_terms, mock_get):
    mock_get.return_value = mock_response({
        "results": [
            {
                "title": "Acme Corp named in bribery case",
                "media_name": "bbc.co.uk",
                "publish_date": "2024-02-20 14:00:00",
                "url": "https://www.bbc.co.uk/news/acme",
            },
            {"headline": "Acme Corp supplier audit", "stories_id": 991},
        ]
    })

    outcome = await MediaCloudAdapter(settings).fetch(acme_terms)

    assert outcome.status == SourceStatus.OK
    first, second = outcome.records
    assert first.source_name == "bbc.co.uk"
    assert first.source_credibility == Credibility.HIGH
    assert first.published_date == "2024-02-20"
    assert first.summary == "Acme Corp named in bribery case"
    assert second.source_name == "MediaCloud"
    assert second.url == "https://search.mediacloud.org/stories/991"
    assert second.published_date == ""

    call = mock_get.call_args
    assert call.kwargs["params"] == {"q": '"Acme Corp"', "limit": 10}
    assert call.kwargs["timeout"] == settings.mediacloud_timeout


@pytest.mark.asyncio
async def test_mediacloud_http_error_fails(settings, acme_terms, mock_get):
    mock_get.return_value = mock_response(status_code=429)

    outcome = await MediaCloudAdapter(settings).fetch(acme_terms)

    assert outcome.status == SourceStatus.FAILED
    assert outcome.error == "HTTP 429"


def test_archive_sources_need_no_credentials(settings):
    assert WaybackAdapter(settings).is_configured() is True
    assert MediaCloudAdapter(settings).is_configured() is True
