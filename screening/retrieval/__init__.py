# screening/retrieval/__init__.py

from typing import Optional

from config.settings import Settings

from .embeddings import PineconeEmbeddings
from .index import PineconeClientHolder, PineconeIndex, VectorIndex
from .service import (
    RetrievalService,
    build_filter,
    format_screening_for_embedding,
    merge_matches,
)


def build_retrieval_service(settings: Settings) -> Optional[RetrievalService]:
    """Pinecone-backed service, or None when no API key is configured."""
    if not settings.vector_index_configured:
        return None
    holder = PineconeClientHolder(settings.pinecone_api_key)
    return RetrievalService(
        index=PineconeIndex.from_settings(settings, holder),
        embeddings=PineconeEmbeddings(holder, settings.embedding_model),
        settings=settings,
    )


__all__ = [
    "VectorIndex",
    "PineconeIndex",
    "PineconeClientHolder",
    "PineconeEmbeddings",
    "RetrievalService",
    "build_filter",
    "build_retrieval_service",
    "format_screening_for_embedding",
    "merge_matches",
]
