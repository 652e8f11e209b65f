"""Document processor orchestrating ingestion, storage and search."""

from __future__ import annotations

import time
from pathlib import Path
from typing import List, Sequence

from docindex.config import Settings, get_settings
from docindex.embeddings.service import EmbeddingBackend, EmbeddingConfig, HashEmbeddingBackend
from docindex.ingestion.service import DocumentIngestor, FileDocumentIngestor, IngestionConfig
from docindex.metrics.observability import PipelineMetrics, correlation_scope, get_logger
from docindex.models import (
    Document,
    DocumentEntity,
    DocumentMatch,
    DocumentSection,
    DocumentSummary,
    TOCEntry,
)
from docindex.search.service import SearchConfig, SearchEngine, Searcher
from docindex.storage.locking import ReadWriteLock
from docindex.storage.store import DocumentNotFoundError, FileDocumentStore


class ProcessorClosedError(RuntimeError):
    """Raised when a closed DocumentProcessor is used."""


class DocumentProcessor:
    """Entry point for ingesting, reading, deleting and searching documents.

    The processor owns the store, its reader/writer lock, the embedder and
    the search engine; nothing is shared through module-level state. Writes
    (ingest, update, delete) hold the exclusive lock for their whole
    duration, searches hold the shared lock.

    Every public operation accepts ``correlation_id``, which is bound into
    the logging context while the call runs.
    """

    def __init__(
        self,
        documents_dir: str | Path,
        vector_store_dir: str | Path,
        *,
        embedder: EmbeddingBackend | None = None,
        ingestor: DocumentIngestor | None = None,
        search_config: SearchConfig | None = None,
        default_search_limit: int = 10,
    ) -> None:
        self._lock = ReadWriteLock()
        self._store = FileDocumentStore(documents_dir, vector_store_dir, lock=self._lock)
        self._embedder = embedder or HashEmbeddingBackend()
        self._ingestor = ingestor or FileDocumentIngestor()
        self._search_engine: Searcher = SearchEngine(self._store, self._embedder, search_config)
        self._default_search_limit = default_search_limit
        self._closed = False
        self._logger = get_logger("processor")

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> "DocumentProcessor":
        """Build a processor from settings.

        Logging is left to the caller, e.g.
        ``configure_logging(getattr(logging, settings.log_level))``.
        """

        settings = settings or get_settings()
        return cls(
            settings.resolved_documents_dir,
            settings.resolved_vector_store_dir,
            embedder=HashEmbeddingBackend(EmbeddingConfig(dim=settings.embedding_dim)),
            ingestor=FileDocumentIngestor(
                IngestionConfig(
                    summary_max_length=settings.summary_max_length,
                    topic_min_frequency=settings.topic_min_frequency,
                ),
            ),
            default_search_limit=settings.default_search_limit,
        )

    @property
    def store(self) -> FileDocumentStore:
        return self._store

    @property
    def embedder(self) -> EmbeddingBackend:
        return self._embedder

    @property
    def closed(self) -> bool:
        return self._closed

    def ingest(self, path: str | Path, *, correlation_id: str | None = None) -> Document:
        """Read, analyse, chunk, embed and store the file at ``path``.

        Re-ingesting identical bytes rewrites the same record.
        """

        self._ensure_open()
        with correlation_scope(correlation_id):
            start = time.perf_counter()
            with self._lock.write_locked():
                document = self._ingestor.build(Path(path))
                embeddings = self._embedder.embed_chunks(document.chunks)
                self._store.put(document)
                self._store.put_embeddings(document.id, [embedding.vector for embedding in embeddings])
            duration = time.perf_counter() - start
            PipelineMetrics.observe_ingestion(duration, len(document.chunks))
            self._logger.info(
                "ingestion.complete",
                path=str(path),
                document_id=document.id,
                chunk_count=len(document.chunks),
                duration_seconds=duration,
            )
            return document

    def update(self, document_id: str, path: str | Path, *, correlation_id: str | None = None) -> Document:
        """Replace ``document_id`` with the current content of ``path``.

        Changed content gets a new ID; the old record is then deleted.
        """

        self._ensure_open()
        with correlation_scope(correlation_id), self._lock.write_locked():
            if not self._store.exists(document_id):
                raise DocumentNotFoundError(document_id)
            document = self.ingest(path)
            if document.id != document_id:
                self._store.delete(document_id)
            self._logger.info("document.updated", previous_id=document_id, document_id=document.id)
            return document

    def get(self, document_id: str, *, correlation_id: str | None = None) -> Document:
        self._ensure_open()
        with correlation_scope(correlation_id):
            return self._store.get(document_id)

    def list_documents(self, *, correlation_id: str | None = None) -> List[Document]:
        self._ensure_open()
        with correlation_scope(correlation_id):
            return self._store.list()

    def list_metadata(self, *, correlation_id: str | None = None) -> List[DocumentSummary]:
        return [
            DocumentSummary(id=document.id, metadata=document.metadata)
            for document in self.list_documents(correlation_id=correlation_id)
        ]

    def delete(self, document_id: str, *, correlation_id: str | None = None) -> None:
        self._ensure_open()
        with correlation_scope(correlation_id):
            self._store.delete(document_id)
            self._logger.info("document.deleted", document_id=document_id)

    def search(
        self,
        query: str,
        limit: int | None = None,
        topics: Sequence[str] | None = None,
        *,
        correlation_id: str | None = None,
    ) -> List[DocumentMatch]:
        """Rank stored chunks against ``query``; ``limit`` <= 0 means unlimited."""

        self._ensure_open()
        effective_limit = self._default_search_limit if limit is None else limit
        with correlation_scope(correlation_id):
            return self._search_engine.search(query, effective_limit, topics)

    def get_sections(self, document_id: str, *, correlation_id: str | None = None) -> Sequence[DocumentSection]:
        analysis = self.get(document_id, correlation_id=correlation_id).analysis
        return analysis.sections if analysis else ()

    def get_table_of_contents(self, document_id: str, *, correlation_id: str | None = None) -> Sequence[TOCEntry]:
        analysis = self.get(document_id, correlation_id=correlation_id).analysis
        return analysis.table_of_contents if analysis else ()

    def get_entities(self, document_id: str, *, correlation_id: str | None = None) -> Sequence[DocumentEntity]:
        analysis = self.get(document_id, correlation_id=correlation_id).analysis
        return analysis.entities if analysis else ()

    def close(self) -> None:
        self._closed = True

    def __enter__(self) -> "DocumentProcessor":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def _ensure_open(self) -> None:
        if self._closed:
            raise ProcessorClosedError("DocumentProcessor has been closed")
