"""Embedding backends for docindex."""

from __future__ import annotations

import hashlib
import logging
import math
import re
from dataclasses import dataclass
from typing import List, Protocol, Sequence, Tuple

from langchain_core.embeddings import Embeddings as LangChainEmbeddings

from docindex.models import DocumentChunk

LOGGER = logging.getLogger(__name__)

EMBEDDING_DIM = 128

_WHITESPACE = re.compile(r"\s+")


@dataclass(frozen=True)
class EmbeddingConfig:
    """Configuration for embedding backends."""

    dim: int = EMBEDDING_DIM
    normalize: bool = True


@dataclass(frozen=True)
class Embedding:
    """Vector representation of a document chunk."""

    chunk: DocumentChunk
    vector: Tuple[float, ...]


class EmbeddingBackend(Protocol):
    """Protocol describing embedding behaviour."""

    def embed_chunks(self, chunks: Sequence[DocumentChunk]) -> Sequence[Embedding]:
        """Return embeddings for the provided chunks, in chunk order."""

    def embed_query(self, text: str) -> List[float]:
        """Return embedding vector for a query string."""


def normalize_text(text: str) -> str:
    return _WHITESPACE.sub(" ", text.lower()).strip()


def normalize_vector(vector: Sequence[float]) -> List[float]:
    """Scale ``vector`` to unit L2 norm; the zero vector is returned unchanged."""

    magnitude = math.sqrt(sum(value * value for value in vector))
    if magnitude == 0:
        return list(vector)
    return [value / magnitude for value in vector]


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    if len(a) != len(b):
        return 0.0
    dot = 0.0
    magnitude_a = 0.0
    magnitude_b = 0.0
    for x, y in zip(a, b):
        dot += x * y
        magnitude_a += x * x
        magnitude_b += y * y
    if magnitude_a == 0 or magnitude_b == 0:
        return 0.0
    return dot / (math.sqrt(magnitude_a) * math.sqrt(magnitude_b))


class HashEmbeddingBackend(LangChainEmbeddings):
    """Deterministic stand-in for an embedding model.

    Each text is lowercased and whitespace-collapsed, hashed with SHA-256, and
    every output dimension takes one digest byte ``b`` (cycling through the
    32-byte digest) as ``b / 128 - 1``. Only exact or near-exact recurrence of
    text produces similar vectors; there is no semantic generalisation.

    The class implements LangChain's ``Embeddings`` interface, so a real model
    client can be passed wherever this backend is used.
    """

    def __init__(self, config: EmbeddingConfig | None = None) -> None:
        self._config = config or EmbeddingConfig()

    @property
    def dim(self) -> int:
        return self._config.dim

    def _hash_to_vector(self, text: str) -> List[float]:
        digest = hashlib.sha256(normalize_text(text).encode("utf-8")).digest()
        vector = [digest[i % len(digest)] / 128.0 - 1.0 for i in range(self._config.dim)]
        if self._config.normalize:
            vector = normalize_vector(vector)
        return vector

    def embed_documents(self, texts: List[str]) -> List[List[float]]:
        return [self._hash_to_vector(text) for text in texts]

    def embed_query(self, text: str) -> List[float]:
        return self._hash_to_vector(text)

    def embed_chunks(self, chunks: Sequence[DocumentChunk]) -> Sequence[Embedding]:
        vectors = self.embed_documents([chunk.content for chunk in chunks])
        return [Embedding(chunk=chunk, vector=tuple(vector)) for chunk, vector in zip(chunks, vectors)]


class LangChainEmbeddingBackend:
    """Adapter exposing any LangChain ``Embeddings`` client as an EmbeddingBackend."""

    def __init__(self, client: LangChainEmbeddings, config: EmbeddingConfig | None = None) -> None:
        self._client = client
        self._config = config or EmbeddingConfig()

    def embed_chunks(self, chunks: Sequence[DocumentChunk]) -> Sequence[Embedding]:
        if not chunks:
            return []
        vectors = self._client.embed_documents([chunk.content for chunk in chunks])
        if len(vectors) != len(chunks):
            LOGGER.error("Embedding client returned %d vectors for %d chunks", len(vectors), len(chunks))
            raise ValueError("Mismatch between number of chunks and embedding vectors")
        if vectors and len(vectors[0]) != self._config.dim:
            LOGGER.warning(
                "Embedding dim mismatch: configured=%d, actual=%d",
                self._config.dim,
                len(vectors[0]),
            )
        return [Embedding(chunk=chunk, vector=tuple(self._normalize(vector))) for chunk, vector in zip(chunks, vectors)]

    def embed_query(self, text: str) -> List[float]:
        return self._normalize(self._client.embed_query(text))

    def _normalize(self, vector: Sequence[float]) -> List[float]:
        if not self._config.normalize:
            return list(vector)
        return normalize_vector(vector)
