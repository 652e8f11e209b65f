"""Embedding services."""

from .service import (
    EMBEDDING_DIM,
    Embedding,
    EmbeddingBackend,
    EmbeddingConfig,
    HashEmbeddingBackend,
    LangChainEmbeddingBackend,
    cosine_similarity,
)

__all__ = [
    "EMBEDDING_DIM",
    "Embedding",
    "EmbeddingBackend",
    "EmbeddingConfig",
    "HashEmbeddingBackend",
    "LangChainEmbeddingBackend",
    "cosine_similarity",
]
