"""File-backed document and embedding persistence."""

from __future__ import annotations

import json
import re
from pathlib import Path
from typing import List, Protocol, Sequence

from docindex.metrics.observability import PipelineMetrics, get_logger
from docindex.models import Document
from docindex.storage.locking import ReadWriteLock
from docindex.storage.serialization import dumps_document, loads_document

DOCUMENT_SUFFIX = ".json"
EMBEDDINGS_SUFFIX = ".embeddings"

_SAFE_ID = re.compile(r"[A-Za-z0-9_-]+")


class StoreError(RuntimeError):
    """Raised when the store cannot read or write its files."""


class DocumentNotFoundError(StoreError, LookupError):
    """Raised when no record exists for a document ID."""

    def __init__(self, document_id: str, message: str | None = None) -> None:
        super().__init__(message or f"document not found: {document_id}")
        self.document_id = document_id


class EmbeddingsNotFoundError(DocumentNotFoundError):
    """Raised when a document has no stored embeddings."""

    def __init__(self, document_id: str) -> None:
        super().__init__(document_id, f"embeddings not found for document: {document_id}")


class DocumentStore(Protocol):
    """Protocol for document persistence backends."""

    @property
    def lock(self) -> ReadWriteLock:
        """Lock serialising writers against readers of this store."""

    def put(self, document: Document) -> None:
        """Persist (or overwrite) the record for ``document``."""

    def get(self, document_id: str) -> Document:
        """Return the stored document or raise DocumentNotFoundError."""

    def list(self) -> Sequence[Document]:
        """Return every readable stored document."""

    def delete(self, document_id: str) -> None:
        """Remove a document and its embeddings."""

    def put_embeddings(self, document_id: str, vectors: Sequence[Sequence[float]]) -> None:
        """Persist the chunk-ordered embedding matrix for a document."""

    def get_embeddings(self, document_id: str) -> List[List[float]]:
        """Return the embedding matrix or raise EmbeddingsNotFoundError."""


class FileDocumentStore:
    """Stores one JSON record and one embeddings file per document ID.

    Mutating operations hold the exclusive side of the lock, reads the shared
    side. Pass an existing lock to share it with an owning component.
    """

    def __init__(
        self,
        documents_dir: str | Path,
        vector_store_dir: str | Path,
        *,
        lock: ReadWriteLock | None = None,
    ) -> None:
        self._documents_dir = Path(documents_dir)
        self._vector_store_dir = Path(vector_store_dir)
        self._lock = lock or ReadWriteLock()
        self._logger = get_logger("store")
        try:
            self._documents_dir.mkdir(parents=True, exist_ok=True)
            self._vector_store_dir.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise StoreError(f"Failed to create storage directories: {exc}") from exc

    @property
    def lock(self) -> ReadWriteLock:
        return self._lock

    @property
    def documents_dir(self) -> Path:
        return self._documents_dir

    @property
    def vector_store_dir(self) -> Path:
        return self._vector_store_dir

    def put(self, document: Document) -> None:
        path = self._document_path(document.id)
        payload = dumps_document(document)
        with self._lock.write_locked():
            try:
                path.write_text(payload, encoding="utf-8")
            except OSError as exc:
                raise StoreError(f"Failed to save document {document.id}: {exc}") from exc

    def get(self, document_id: str) -> Document:
        path = self._document_path(document_id)
        with self._lock.read_locked():
            if not path.is_file():
                raise DocumentNotFoundError(document_id)
            try:
                payload = path.read_text(encoding="utf-8")
            except OSError as exc:
                raise StoreError(f"Failed to read document {document_id}: {exc}") from exc
        try:
            return loads_document(payload)
        except (KeyError, TypeError, ValueError, AttributeError) as exc:
            raise StoreError(f"Failed to parse document {document_id}: {exc}") from exc

    def exists(self, document_id: str) -> bool:
        if not _SAFE_ID.fullmatch(document_id):
            return False
        with self._lock.read_locked():
            return (self._documents_dir / f"{document_id}{DOCUMENT_SUFFIX}").is_file()

    def list(self) -> List[Document]:
        documents: List[Document] = []
        skipped = 0
        with self._lock.read_locked():
            try:
                paths = sorted(
                    path for path in self._documents_dir.iterdir() if path.suffix == DOCUMENT_SUFFIX
                )
            except OSError as exc:
                raise StoreError(f"Failed to list documents: {exc}") from exc
            for path in paths:
                try:
                    documents.append(loads_document(path.read_text(encoding="utf-8")))
                except (OSError, KeyError, TypeError, ValueError, AttributeError) as exc:
                    skipped += 1
                    self._logger.warning("store.record_skipped", path=str(path), error=str(exc))
        PipelineMetrics.observe_listing(len(documents), skipped)
        return documents

    def delete(self, document_id: str) -> None:
        path = self._document_path(document_id)
        embeddings_path = self._embeddings_path(document_id)
        with self._lock.write_locked():
            if not path.is_file():
                raise DocumentNotFoundError(document_id)
            try:
                path.unlink()
            except OSError as exc:
                raise StoreError(f"Failed to delete document {document_id}: {exc}") from exc
            try:
                embeddings_path.unlink(missing_ok=True)
            except OSError as exc:
                # The document record is gone; stale embeddings are harmless
                self._logger.warning(
                    "store.embeddings_delete_failed",
                    document_id=document_id,
                    error=str(exc),
                )
        PipelineMetrics.observe_deletion()

    def put_embeddings(self, document_id: str, vectors: Sequence[Sequence[float]]) -> None:
        path = self._embeddings_path(document_id)
        payload = json.dumps([list(vector) for vector in vectors])
        with self._lock.write_locked():
            try:
                path.write_text(payload, encoding="utf-8")
            except OSError as exc:
                raise StoreError(f"Failed to save embeddings for {document_id}: {exc}") from exc

    def get_embeddings(self, document_id: str) -> List[List[float]]:
        path = self._embeddings_path(document_id)
        with self._lock.read_locked():
            if not path.is_file():
                raise EmbeddingsNotFoundError(document_id)
            try:
                payload = path.read_text(encoding="utf-8")
            except OSError as exc:
                raise StoreError(f"Failed to read embeddings for {document_id}: {exc}") from exc
        try:
            loaded = json.loads(payload)
        except json.JSONDecodeError as exc:
            raise StoreError(f"Failed to parse embeddings for {document_id}: {exc}") from exc
        if not isinstance(loaded, list) or not all(isinstance(row, list) for row in loaded):
            raise StoreError(f"Embeddings for {document_id} are not a list of vectors")
        try:
            return [[float(value) for value in row] for row in loaded]
        except (TypeError, ValueError) as exc:
            raise StoreError(f"Embeddings for {document_id} contain non-numeric values") from exc

    def _document_path(self, document_id: str) -> Path:
        if not _SAFE_ID.fullmatch(document_id):
            raise DocumentNotFoundError(document_id)
        return self._documents_dir / f"{document_id}{DOCUMENT_SUFFIX}"

    def _embeddings_path(self, document_id: str) -> Path:
        if not _SAFE_ID.fullmatch(document_id):
            raise EmbeddingsNotFoundError(document_id)
        return self._vector_store_dir / f"{document_id}{EMBEDDINGS_SUFFIX}"
