# screening/retrieval/index.py

"""
Vector index access.

``VectorIndex`` is the narrow interface the retrieval service depends on;
``PineconeIndex`` implements it over a single Pinecone index whose
namespaces partition the corpora (prior screenings, regulatory documents,
enforcement actions, case studies, case notes).
"""

import threading
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional, Sequence

from pinecone import Pinecone

from config.settings import Settings
from screening.models.outputs import IndexMatch
from screening.utils.logger import get_logger

logger = get_logger("VectorIndex")


class VectorIndex(ABC):
    """Namespaced similarity search over stored vectors."""

    @abstractmethod
    def query(
        self,
        vector: Sequence[float],
        namespace: str,
        top_k: int,
        filter: Optional[Dict[str, Any]] = None,
    ) -> list[IndexMatch]:
        """Return up to ``top_k`` matches from ``namespace``, best first."""

    @abstractmethod
    def upsert(self, namespace: str, vectors: Sequence[Dict[str, Any]]) -> None:
        """Insert or replace ``{"id", "values", "metadata"}`` entries."""

    @abstractmethod
    def delete(self, namespace: str, ids: Sequence[str]) -> None:
        """Remove the given entries from ``namespace``; unknown ids are ignored."""

    @abstractmethod
    def list_ids(self, namespace: str, prefix: str) -> list[str]:
        """Ids in ``namespace`` starting with ``prefix``."""


class PineconeClientHolder:
    """
    Lazily constructs the Pinecone client once, safe under concurrent first use.

    Shared by the index and the embedder so both use one client.
    """

    def __init__(self, api_key: Optional[str]):
        self._api_key = api_key
        self._client: Optional[Pinecone] = None
        self._lock = threading.Lock()

    @property
    def client(self) -> Pinecone:
        if self._client is None:
            with self._lock:
                if self._client is None:
                    if not self._api_key:
                        raise ValueError("PINECONE_API_KEY not configured")
                    logger.info("Initializing Pinecone client")
                    self._client = Pinecone(api_key=self._api_key)
        return self._client


class PineconeIndex(VectorIndex):
    """``VectorIndex`` over one Pinecone index, opened on first use."""

    def __init__(self, holder: PineconeClientHolder, index_name: str):
        self.holder = holder
        self.index_name = index_name
        self._index = None
        self._lock = threading.Lock()

    @classmethod
    def from_settings(cls, settings: Settings, holder: Optional[PineconeClientHolder] = None) -> "PineconeIndex":
        holder = holder or PineconeClientHolder(settings.pinecone_api_key)
        return cls(holder, settings.pinecone_index_name)

    def _ensure_index(self):
        if self._index is None:
            with self._lock:
                if self._index is None:
                    logger.info(f"Opening Pinecone index '{self.index_name}'")
                    self._index = self.holder.client.Index(self.index_name)
        return self._index

    def query(
        self,
        vector: Sequence[float],
        namespace: str,
        top_k: int,
        filter: Optional[Dict[str, Any]] = None,
    ) -> list[IndexMatch]:
        kwargs: Dict[str, Any] = {
            "vector": list(vector),
            "top_k": top_k,
            "namespace": namespace,
            "include_metadata": True,
        }
        if filter:
            kwargs["filter"] = filter

        response = self._ensure_index().query(**kwargs)
        return [
            IndexMatch(id=m.id, score=m.score or 0.0, metadata=dict(m.metadata or {}))
            for m in (response.matches or [])
        ]

    def upsert(self, namespace: str, vectors: Sequence[Dict[str, Any]]) -> None:
        self._ensure_index().upsert(vectors=list(vectors), namespace=namespace)

    def delete(self, namespace: str, ids: Sequence[str]) -> None:
        self._ensure_index().delete(ids=list(ids), namespace=namespace)

    def list_ids(self, namespace: str, prefix: str) -> list[str]:
        # list() pages through ids lazily
        ids: list[str] = []
        for page in self._ensure_index().list(prefix=prefix, namespace=namespace):
            ids.extend(page)
        return ids
