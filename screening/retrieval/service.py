# screening/retrieval/service.py

"""
Cross-Namespace Ranker & Merger.

Answers "what stored context is most similar to this text" across several
independently scored corpora. One embedding is computed per query and then
reused against every namespace; per-namespace results are merged under a
single threshold and a global cap. Scores from different namespaces are
compared directly, which holds because every namespace is embedded with the
same model.
"""

import asyncio
import random
import string
import time
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Sequence

from langchain_core.embeddings import Embeddings

from config.settings import NamespaceBudget, Settings
from screening.models.inputs import Findings
from screening.models.outputs import (
    CaseStudyMatch,
    IndexMatch,
    IndexResult,
    MergedMatch,
    ScreeningResult,
)
from screening.retrieval.index import VectorIndex
from screening.utils.chunking import chunk_text
from screening.utils.logger import get_logger

logger = get_logger("RetrievalService")

PRIOR_SCREENINGS_NAMESPACE = "prior_screenings"


def build_filter(
    workspace_scope: Optional[str] = None,
    exclude_id: Optional[str] = None,
) -> Optional[Dict[str, Any]]:
    """Metadata filter applied uniformly to every namespace; None when unscoped."""
    filter: Dict[str, Any] = {}
    if workspace_scope:
        filter["workspaceId"] = {"$eq": workspace_scope}
    if exclude_id:
        filter["caseId"] = {"$ne": exclude_id}
    return filter or None


def merge_matches(
    per_namespace: Sequence[tuple[str, Sequence[IndexMatch]]],
    score_threshold: float,
    top_k: int,
) -> list[MergedMatch]:
    """Threshold, merge and rank matches from several namespaces."""
    merged = [
        MergedMatch(id=m.id, score=m.score, namespace=namespace, metadata=m.metadata)
        for namespace, matches in per_namespace
        for m in matches
        if m.score >= score_threshold
    ]
    # sorted() is stable, so equal scores keep namespace order
    merged = sorted(merged, key=lambda m: m.score, reverse=True)
    return merged[:top_k]


def generate_vector_id(namespace: str) -> str:
    suffix = "".join(random.choices(string.ascii_lowercase + string.digits, k=6))
    return f"{namespace}-{int(time.time() * 1000)}-{suffix}"


def format_screening_for_embedding(result: ScreeningResult) -> str:
    """Render a screening result as a single line of text for embedding."""
    parts = [
        f"Entity: {result.subject}",
        f"Type: {result.subject_type.value}",
        f"Risk: {result.risk_level.value} ({result.risk_score})",
        f"Media: {result.adverse_media.status}, {result.adverse_media.total_articles} articles",
    ]
    headlines = [a.headline for a in result.adverse_media.articles[:5] if a.headline]
    if headlines:
        parts.append("Headlines: " + "; ".join(headlines))
    return " | ".join(parts)


class RetrievalService:
    """
    Similarity search, case-study lookup and indexing over a ``VectorIndex``.

    The index client is blocking, so each namespace query runs in a worker
    thread and all of them run concurrently. Every index and embedding call
    is bounded by ``rag_query_timeout``.
    """

    def __init__(
        self,
        index: VectorIndex,
        embeddings: Embeddings,
        settings: Settings,
        namespaces: Optional[Sequence[NamespaceBudget]] = None,
    ):
        self.vector_index = index
        self.embeddings = embeddings
        self.settings = settings
        self.namespaces = list(namespaces) if namespaces is not None else list(settings.rag_namespaces)
        self.timeout = settings.rag_query_timeout

    async def _call_index(self, method, *args):
        return await asyncio.wait_for(asyncio.to_thread(method, *args), self.timeout)

    async def _embed_query(self, text: str) -> list[float]:
        return await asyncio.wait_for(self.embeddings.aembed_query(text), self.timeout)

    async def _query_namespace(
        self,
        vector: Sequence[float],
        namespace: str,
        top_k: int,
        filter: Optional[Dict[str, Any]],
    ) -> list[IndexMatch]:
        try:
            return await self._call_index(self.vector_index.query, vector, namespace, top_k, filter)
        except Exception as e:
            logger.warning(
                f"Query failed for namespace {namespace}: {e.__class__.__name__}: {e}",
                namespace=namespace,
            )
            return []

    async def search(
        self,
        query_text: str,
        workspace_scope: Optional[str] = None,
        exclude_id: Optional[str] = None,
        top_k: int = 16,
        score_threshold: float = 0.7,
    ) -> list[MergedMatch]:
        """
        Rank stored context across all configured namespaces.

        Args:
            query_text: Free text to search for.
            workspace_scope: Restrict matches to this workspace.
            exclude_id: Exclude matches belonging to this case.
            top_k: Global cap on returned matches.
            score_threshold: Minimum similarity to keep a match.

        Returns:
            Matches sorted by descending score, at most ``top_k`` of them.
            A namespace that fails or times out contributes nothing.

        Raises:
            Exception: Whatever the embedder raised, or ``asyncio.TimeoutError``;
                nothing is queried then.
        """
        vector = await self._embed_query(query_text)
        filter = build_filter(workspace_scope, exclude_id)

        results = await asyncio.gather(
            *(
                self._query_namespace(vector, budget.name, budget.top_k, filter)
                for budget in self.namespaces
            )
        )

        merged = merge_matches(
            [(budget.name, matches) for budget, matches in zip(self.namespaces, results)],
            score_threshold,
            top_k,
        )
        logger.info(
            f"Retrieval returned {len(merged)} matches across {len(self.namespaces)} namespaces",
            raw_matches=sum(len(r) for r in results),
        )
        return merged

    async def find_relevant_cases(
        self,
        findings: Findings,
        top_k: int = 3,
        score_threshold: float = 0.7,
    ) -> list[CaseStudyMatch]:
        """Look up enforcement precedents similar to a findings summary."""
        query_parts = [
            *findings.indicators,
            *findings.typologies,
            *findings.jurisdictions,
            findings.entity_type or "",
        ]
        query_parts = [p for p in query_parts if p]
        if not query_parts:
            return []

        vector = await self._embed_query(" ".join(query_parts))
        matches = await self._query_namespace(
            vector,
            self.settings.case_study_namespace,
            top_k,
            {"category": {"$eq": "enforcement"}},
        )

        return [
            CaseStudyMatch(
                case_name=m.metadata.get("name"),
                year=m.metadata.get("year"),
                entity=m.metadata.get("entity"),
                penalty=m.metadata.get("penalty"),
                regulators=m.metadata.get("regulators"),
                typologies=m.metadata.get("typologies"),
                relevance=m.score,
                lesson=m.metadata.get("lessonForScreening"),
                what_happened=m.metadata.get("whatHappened"),
            )
            for m in matches
            if m.score >= score_threshold
        ]

    async def index(
        self,
        namespace: str,
        text: str,
        id: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> IndexResult:
        """
        Chunk, embed and upsert ``text`` into ``namespace``.

        A single chunk is stored under ``id``; multiple chunks under
        ``id#chunk-N``. All chunks carry ``parentId`` so they can be traced
        back to the source document. Re-indexing an existing ``id`` removes
        chunks the new text no longer produces.
        """
        if not namespace or not text:
            raise ValueError("namespace and text required")

        vector_id = id or generate_vector_id(namespace)
        chunks = chunk_text(text, self.settings.chunk_max_chars, self.settings.chunk_overlap)
        values = await asyncio.wait_for(self.embeddings.aembed_documents(chunks), self.timeout)
        timestamp = datetime.now(timezone.utc).isoformat()

        vectors = []
        for i, (chunk, vector) in enumerate(zip(chunks, values)):
            vectors.append({
                "id": vector_id if len(chunks) == 1 else f"{vector_id}#chunk-{i}",
                "values": list(vector),
                "metadata": {
                    **(metadata or {}),
                    "text": chunk[:1000],
                    "timestamp": timestamp,
                    "parentId": vector_id,
                    "chunkIndex": i,
                },
            })

        await self._call_index(self.vector_index.upsert, namespace, vectors)
        if id:
            kept = {v["id"] for v in vectors}
            stale = [i for i in await self._document_ids(namespace, vector_id) if i not in kept]
            if stale:
                await self._call_index(self.vector_index.delete, namespace, stale)
                logger.info(f"Removed {len(stale)} stale chunk(s) of {vector_id} from {namespace}")

        logger.info(f"Indexed {vector_id} into {namespace} as {len(vectors)} chunk(s)")
        return IndexResult(success=True, id=vector_id, chunks=len(vectors))

    async def _document_ids(self, namespace: str, id: str) -> list[str]:
        """The bare id plus every stored ``id#chunk-N``."""
        chunk_ids = await self._call_index(self.vector_index.list_ids, namespace, f"{id}#chunk-")
        return [id, *chunk_ids]

    async def delete(self, namespace: str, id: str) -> None:
        """Delete a document, including every chunk it was split into."""
        if not namespace or not id:
            raise ValueError("namespace and id required")
        ids = await self._document_ids(namespace, id)
        await self._call_index(self.vector_index.delete, namespace, ids)
        logger.info(f"Deleted {id} from {namespace} ({len(ids)} id(s))")

    async def index_screening(self, result: ScreeningResult, workspace_id: Optional[str] = None) -> IndexResult:
        """Store a completed screening so later searches can surface it."""
        metadata: Dict[str, Any] = {
            "entityName": result.subject,
            "entityType": result.subject_type.value,
            "riskLevel": result.risk_level.value,
            "riskScore": result.risk_score,
        }
        if workspace_id:
            metadata["workspaceId"] = workspace_id
        return await self.index(
            PRIOR_SCREENINGS_NAMESPACE,
            format_screening_for_embedding(result),
            metadata=metadata,
        )
