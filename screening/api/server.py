"""
FastAPI server for the adverse media aggregation service.

This provides REST API endpoints for:
- Running an adverse media screening for a person or entity
- Searching, indexing and deleting stored context in the vector index
- Getting service status

Usage:
    uvicorn screening.api.server:app --port 8000
"""

import json
from functools import lru_cache
from typing import Any, Dict, Optional

from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field, ValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from config.settings import get_settings
from screening.graph.workflow import AdverseMediaWorkflow
from screening.models.inputs import Findings, ScreeningQuery
from screening.retrieval import RetrievalService, build_retrieval_service
from screening.sources import build_default_adapters
from screening.utils.logger import get_logger

logger = get_logger("API")

RAG_ACTIONS = ("search", "index", "delete", "findCases")


# App setup
app = FastAPI(
    title="Adverse Media Screening API",
    description="Multi-source adverse media aggregation and retrieval for compliance screening",
    version="1.0.0",
)


# =============================================================================
# Dependencies
# =============================================================================


@lru_cache()
def get_workflow() -> AdverseMediaWorkflow:
    return AdverseMediaWorkflow(get_settings())


@lru_cache()
def get_retrieval_service() -> Optional[RetrievalService]:
    return build_retrieval_service(get_settings())


# =============================================================================
# Error responses: every failure is a JSON body of the form {"error": "..."}
# =============================================================================


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    detail = "Method not allowed" if exc.status_code == 405 else exc.detail
    return JSONResponse(status_code=exc.status_code, content={"error": detail})


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(status_code=400, content={"error": "Invalid request body"})


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled error on {request.url.path}: {exc}", exc_info=exc)
    return JSONResponse(status_code=500, content={"error": str(exc) or exc.__class__.__name__})


async def _read_json_object(request: Request) -> Dict[str, Any]:
    try:
        body = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        raise HTTPException(status_code=400, detail="Invalid JSON body")
    if not isinstance(body, dict):
        raise HTTPException(status_code=400, detail="Request body must be a JSON object")
    return body


def _validation_message(exc: ValidationError) -> str:
    first = exc.errors()[0]
    field = ".".join(str(p) for p in first.get("loc", ()))
    message = first.get("msg", "Invalid value").removeprefix("Value error, ")
    return f"{field}: {message}" if field else message


# =============================================================================
# Screening
# =============================================================================


@app.post("/api/screening/adverse-media")
async def screen_adverse_media(
    request: Request,
    workflow: AdverseMediaWorkflow = Depends(get_workflow),
):
    """Screen one subject across all configured sources."""
    body = await _read_json_object(request)

    name = body.get("name")
    if not isinstance(name, str) or not name.strip():
        raise HTTPException(status_code=400, detail="Name is required")

    try:
        query = ScreeningQuery.model_validate(body)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=_validation_message(e))

    result = await workflow.run_workflow(query)
    return result.to_response()


# =============================================================================
# Retrieval
# =============================================================================


class RagFilters(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    workspace_id: Optional[str] = Field(default=None, alias="workspaceId")
    exclude_case_id: Optional[str] = Field(default=None, alias="excludeCaseId")


class RagRequest(BaseModel):
    model_config = ConfigDict(extra="ignore")

    action: Optional[str] = None
    query: Optional[str] = None
    filters: RagFilters = Field(default_factory=RagFilters)
    namespace: Optional[str] = None
    text: Optional[str] = None
    metadata: Dict[str, Any] = Field(default_factory=dict)
    id: Optional[str] = None
    findings: Findings = Field(default_factory=Findings)


@app.post("/api/rag")
async def rag(
    request: Request,
    service: Optional[RetrievalService] = Depends(get_retrieval_service),
):
    """Search, index, delete or look up case studies in the vector index."""
    if service is None:
        raise HTTPException(status_code=503, detail="Pinecone not configured")

    body = await _read_json_object(request)
    try:
        rag_request = RagRequest.model_validate(body)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=_validation_message(e))

    settings = service.settings
    action = rag_request.action

    if action == "search":
        if not rag_request.query:
            raise HTTPException(status_code=400, detail="query required")
        results = await service.search(
            rag_request.query,
            workspace_scope=rag_request.filters.workspace_id,
            exclude_id=rag_request.filters.exclude_case_id,
            top_k=settings.rag_top_k,
            score_threshold=settings.rag_score_threshold,
        )
        return {"results": [m.model_dump(mode="json", by_alias=True) for m in results]}

    if action == "index":
        if not rag_request.namespace or not rag_request.text:
            raise HTTPException(status_code=400, detail="namespace and text required")
        result = await service.index(
            rag_request.namespace,
            rag_request.text,
            id=rag_request.id,
            metadata=rag_request.metadata,
        )
        return result.model_dump(mode="json", by_alias=True)

    if action == "findCases":
        cases = await service.find_relevant_cases(
            rag_request.findings,
            score_threshold=settings.rag_score_threshold,
        )
        return {"cases": [c.model_dump(mode="json", by_alias=True) for c in cases]}

    if action == "delete":
        if not rag_request.namespace or not rag_request.id:
            raise HTTPException(status_code=400, detail="namespace and id required")
        await service.delete(rag_request.namespace, rag_request.id)
        return {"success": True}

    raise HTTPException(
        status_code=400,
        detail=f"Invalid action. Use: {', '.join(RAG_ACTIONS)}",
    )


# =============================================================================
# Status
# =============================================================================


@app.get("/api/health")
async def health():
    """Configured sources and optional capabilities."""
    settings = get_settings()
    return {
        "status": "ok",
        "sources": {
            adapter.name: adapter.is_configured()
            for adapter in build_default_adapters(settings)
        },
        "enrichment": settings.enrichment_configured,
        "vectorIndex": settings.vector_index_configured,
    }
