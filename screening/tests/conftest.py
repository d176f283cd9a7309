from unittest.mock import MagicMock

import pytest
import requests
from langchain_core.embeddings import Embeddings

from config.settings import Settings
from screening.models.inputs import SearchTermSet
from screening.models.outputs import CanonicalRecord, Category, Credibility, Relevance
from screening.retrieval import VectorIndex
from screening.sources.base import SourceAdapter


# --- Fixtures and Helpers ---


@pytest.fixture
def settings() -> Settings:
    """Settings isolated from the environment: no credentials, defaults only."""
    return Settings(
        _env_file=None,
        groq_api_key=None,
        openai_api_key=None,
        anthropic_api_key=None,
        news_api_key=None,
        bing_news_api_key=None,
        pinecone_api_key=None,
        log_format="text",
    )


def make_record(
    headline: str = "Acme Corp fined for sanctions breach",
    source_name: str = "example.com",
    category: Category = Category.OTHER,
    relevance: Relevance = Relevance.MEDIUM,
    credibility: Credibility = Credibility.MEDIUM,
    origin: str = "Stub",
) -> CanonicalRecord:
    return CanonicalRecord(
        headline=headline,
        source_name=source_name,
        source_credibility=credibility,
        published_date="2024-01-31",
        summary=headline,
        url=f"https://{source_name}/{abs(hash(headline))}",
        category=category,
        relevance=relevance,
        origin_source=origin,
    )


class StubAdapter(SourceAdapter):
    """In-memory source: returns fixed records, or raises ``error``."""

    def __init__(self, settings, name, records=None, error=None, configured=True):
        super().__init__(settings)
        self.name = name
        self.records = list(records or [])
        self.error = error
        self.configured = configured
        self.calls: list[SearchTermSet] = []

    def is_configured(self) -> bool:
        return self.configured

    def _fetch_records(self, search_terms):
        self.calls.append(search_terms)
        if self.error is not None:
            raise self.error
        return list(self.records)


def mock_response(json_data=None, text="", status_code=200):
    """A requests.Response stand-in for patched ``requests.get``."""
    response = MagicMock(spec=requests.Response)
    response.status_code = status_code
    response.text = text
    response.json.return_value = json_data
    if status_code >= 400:
        http_error = requests.HTTPError(f"{status_code} Error", response=response)
        response.raise_for_status.side_effect = http_error
    else:
        response.raise_for_status.return_value = None
    return response


class InMemoryIndex(VectorIndex):
    """
    Canned query matches per namespace plus a real id store for writes.

    Queries against a namespace in ``blocked`` wait on that event, which lets
    tests hold a namespace open past the retrieval timeout.
    """

    def __init__(self, matches=None, failing=(), blocked=None):
        self.matches = matches or {}
        self.failing = set(failing)
        self.blocked = blocked or {}
        self.stored: dict[str, dict[str, dict]] = {}
        self.queries = []
        self.upserts = []
        self.deletes = []

    def query(self, vector, namespace, top_k, filter=None):
        self.queries.append({"namespace": namespace, "top_k": top_k, "filter": filter, "vector": list(vector)})
        if namespace in self.blocked:
            self.blocked[namespace].wait(timeout=2)
        if namespace in self.failing:
            raise ConnectionError(f"{namespace} unavailable")
        return list(self.matches.get(namespace, []))[:top_k]

    def upsert(self, namespace, vectors):
        self.upserts.append((namespace, list(vectors)))
        for vector in vectors:
            self.stored.setdefault(namespace, {})[vector["id"]] = vector

    def delete(self, namespace, ids):
        self.deletes.append((namespace, list(ids)))
        for id in ids:
            self.stored.get(namespace, {}).pop(id, None)

    def list_ids(self, namespace, prefix):
        return sorted(i for i in self.stored.get(namespace, {}) if i.startswith(prefix))

    def ids(self, namespace):
        return sorted(self.stored.get(namespace, {}))


class CountingEmbeddings(Embeddings):
    """Deterministic 8-dimensional vectors derived from the text."""

    def __init__(self):
        self.query_calls = 0

    def _vector(self, text):
        return [((hash(text) >> shift) % 1000) / 1000 for shift in range(0, 64, 8)]

    def embed_documents(self, texts):
        return [self._vector(t) for t in texts]

    def embed_query(self, text):
        self.query_calls += 1
        return self._vector(text)