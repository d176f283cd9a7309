import pytest
from fastapi.testclient import TestClient

from screening.api.server import app, get_retrieval_service, get_workflow
from screening.graph.workflow import AdverseMediaWorkflow
from screening.models.outputs import IndexResult, MergedMatch
from screening.nodes.classification import RelevanceClassifier
from screening.retrieval import RetrievalService
from screening.tests.conftest import CountingEmbeddings, InMemoryIndex, StubAdapter, make_record


# --- Fixtures ---


@pytest.fixture
def stub_adapters(settings):
    return [
        StubAdapter(settings, "GDELT", [make_record(headline="Jane Doe named in fraud suit")]),
        StubAdapter(settings, "Google News", []),
    ]


@pytest.fixture
def client(settings, stub_adapters):
    workflow = AdverseMediaWorkflow(
        settings,
        adapters=stub_adapters,
        classifier=RelevanceClassifier(None, settings),
    )
    app.dependency_overrides[get_workflow] = lambda: workflow
    app.dependency_overrides[get_retrieval_service] = lambda: None
    yield TestClient(app, raise_server_exceptions=False)
    app.dependency_overrides.clear()


@pytest.fixture
def retrieval_stub(mocker, settings):
    service = mocker.MagicMock()
    service.settings = settings
    service.search = mocker.AsyncMock(return_value=[
        MergedMatch(id="m1", score=0.91, namespace="prior_screenings", metadata={"text": "Jane Doe"}),
    ])
    service.index = mocker.AsyncMock(return_value=IndexResult(success=True, id="note-1"))
    service.delete = mocker.AsyncMock(return_value=None)
    service.find_relevant_cases = mocker.AsyncMock(return_value=[])
    app.dependency_overrides[get_retrieval_service] = lambda: service
    return service


@pytest.fixture
def memory_index(settings):
    index = InMemoryIndex()
    service = RetrievalService(index, CountingEmbeddings(), settings)
    app.dependency_overrides[get_retrieval_service] = lambda: service
    return index


# --- Screening endpoint ---


def test_screening_returns_structured_result(client):
    response = client.post("/api/screening/adverse-media", json={"name": "Jane Doe", "type": "INDIVIDUAL"})

    assert response.status_code == 200
    body = response.json()
    assert body["subject"] == "Jane Doe"
    assert body["adverseMedia"]["totalArticles"] == 1
    assert body["adverseMedia"]["articles"][0]["sourceCredibility"] == "MEDIUM"
    assert set(body["sourcesSearched"]) == {"GDELT", "Google News"}
    assert "riskScore" in body and "severityCounts" in body


@pytest.mark.parametrize("payload", [{}, {"name": ""}, {"name": "   "}, {"name": None}, {"type": "ENTITY"}])
def test_missing_name_is_rejected_before_any_source(client, stub_adapters, payload):
    response = client.post("/api/screening/adverse-media", json=payload)

    assert response.status_code == 400
    assert response.json() == {"error": "Name is required"}
    assert all(adapter.calls == [] for adapter in stub_adapters)


def test_invalid_body_is_rejected(client):
    response = client.post(
        "/api/screening/adverse-media",
        content=b"{not json",
        headers={"Content-Type": "application/json"},
    )
    assert response.status_code == 400
    assert "error" in response.json()

    response = client.post("/api/screening/adverse-media", json={"name": "Jane Doe", "type": "COMPANY"})
    assert response.status_code == 400


@pytest.mark.parametrize("terms", [5, True, {"term": "fraud"}])
def test_malformed_additional_terms_is_400(client, stub_adapters, terms):
    response = client.post("/api/screening/adverse-media", json={"name": "Jane Doe", "additionalTerms": terms})

    assert response.status_code == 400
    assert "additionalTerms must be a list of strings" in response.json()["error"]
    assert all(adapter.calls == [] for adapter in stub_adapters)


def test_non_post_is_405(client):
    response = client.get("/api/screening/adverse-media")

    assert response.status_code == 405
    assert response.json() == {"error": "Method not allowed"}


def test_unexpected_failure_is_500(client, mocker):
    mocker.patch.object(AdverseMediaWorkflow, "build_result", side_effect=RuntimeError("state corrupted"))

    response = client.post("/api/screening/adverse-media", json={"name": "Jane Doe"})

    assert response.status_code == 500
    assert response.json() == {"error": "state corrupted"}


# --- Retrieval endpoint ---


def test_rag_unconfigured_is_503(client):
    response = client.post("/api/rag", json={"action": "search", "query": "x"})

    assert response.status_code == 503
    assert response.json() == {"error": "Pinecone not configured"}


def test_rag_search(client, retrieval_stub):
    response = client.post(
        "/api/rag",
        json={"action": "search", "query": "Jane Doe", "filters": {"workspaceId": "ws-1", "excludeCaseId": "c-2"}},
    )

    assert response.status_code == 200
    assert response.json()["results"][0] == {
        "id": "m1",
        "score": 0.91,
        "namespace": "prior_screenings",
        "metadata": {"text": "Jane Doe"},
    }
    kwargs = retrieval_stub.search.call_args.kwargs
    assert kwargs["workspace_scope"] == "ws-1"
    assert kwargs["exclude_id"] == "c-2"
    assert kwargs["top_k"] == 16


def test_rag_index_and_delete_validate_fields(client, retrieval_stub):
    assert client.post("/api/rag", json={"action": "index", "text": "t"}).status_code == 400
    assert client.post("/api/rag", json={"action": "delete", "namespace": "case_notes"}).status_code == 400

    indexed = client.post("/api/rag", json={"action": "index", "namespace": "case_notes", "text": "t", "id": "note-1"})
    deleted = client.post("/api/rag", json={"action": "delete", "namespace": "case_notes", "id": "note-1"})

    assert indexed.json() == {"success": True, "id": "note-1", "chunks": 1}
    assert deleted.json() == {"success": True}
    retrieval_stub.delete.assert_awaited_once_with("case_notes", "note-1")


def test_rag_index_and_delete_through_service(client, memory_index):
    long_text = "Sentence one. " * 600

    indexed = client.post(
        "/api/rag",
        json={"action": "index", "namespace": "case_notes", "text": long_text, "id": "doc1", "metadata": {"caseId": "c-1"}},
    )

    assert indexed.status_code == 200
    body = indexed.json()
    assert body["success"] is True
    assert body["id"] == "doc1"
    assert body["chunks"] == len(memory_index.ids("case_notes")) > 1
    stored = memory_index.stored["case_notes"]["doc1#chunk-0"]
    assert stored["metadata"]["caseId"] == "c-1"
    assert stored["metadata"]["parentId"] == "doc1"

    deleted = client.post("/api/rag", json={"action": "delete", "namespace": "case_notes", "id": "doc1"})

    assert deleted.json() == {"success": True}
    assert memory_index.ids("case_notes") == []


def test_rag_find_cases(client, retrieval_stub):
    response = client.post(
        "/api/rag",
        json={"action": "findCases", "findings": {"typologies": ["trade-based laundering"], "entityType": "ENTITY"}},
    )

    assert response.status_code == 200
    assert response.json() == {"cases": []}
    findings = retrieval_stub.find_relevant_cases.call_args.args[0]
    assert findings.typologies == ["trade-based laundering"]
    assert findings.entity_type == "ENTITY"


def test_rag_unknown_action(client, retrieval_stub):
    response = client.post("/api/rag", json={"action": "reindex"})

    assert response.status_code == 400
    assert response.json()["error"].startswith("Invalid action")


# --- Health ---


def test_health_lists_sources(client, mocker, settings):
    mocker.patch("screening.api.server.get_settings", return_value=settings)

    body = client.get("/api/health").json()

    assert body["status"] == "ok"
    assert body["sources"]["GDELT"] is True
    assert body["sources"]["NewsAPI"] is False
    assert body["sources"]["Wayback Machine"] is True
    assert body["sources"]["MediaCloud"] is True
    assert body["vectorIndex"] is False
