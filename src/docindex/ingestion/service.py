"""Document ingestion service for docindex."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from docindex.ingestion.analysis import (
    DEFAULT_SUMMARY_LENGTH,
    DEFAULT_TOPIC_MIN_FREQUENCY,
    analyze_document,
    extract_metadata,
)
from docindex.ingestion.chunking import generate_chunks
from docindex.ingestion.hashing import generate_document_id
from docindex.metrics.observability import get_logger
from docindex.models import Document


class IngestionError(RuntimeError):
    """Raised when a source file cannot be read for ingestion."""


@dataclass(frozen=True)
class IngestionConfig:
    """Configuration for document ingestion."""

    encoding: str = "utf-8"
    summary_max_length: int = DEFAULT_SUMMARY_LENGTH
    topic_min_frequency: int = DEFAULT_TOPIC_MIN_FREQUENCY


class DocumentIngestor(Protocol):
    """Protocol for ingestion implementations."""

    def build(self, path: Path) -> Document:
        """Read ``path`` and return the analysed, chunked document."""


class FileDocumentIngestor:
    """Turns a file on disk into a content-addressed Document.

    The file is read once: the raw bytes give the document ID, the decoded
    text feeds metadata, analysis and chunking. Undecodable bytes are
    replaced rather than rejected.
    """

    _logger = get_logger("ingestion")

    def __init__(self, config: IngestionConfig | None = None) -> None:
        self._config = config or IngestionConfig()

    def build(self, path: Path) -> Document:
        path = Path(path).resolve()
        try:
            stat = path.stat()
            content = path.read_bytes()
        except OSError as exc:
            raise IngestionError(f"Failed to read {path}: {exc}") from exc

        document_id = generate_document_id(content)
        text = content.decode(self._config.encoding, errors="replace")
        metadata = extract_metadata(path, stat, text, max_summary_length=self._config.summary_max_length)
        analysis = analyze_document(document_id, text, topic_min_frequency=self._config.topic_min_frequency)
        chunks = generate_chunks(document_id, text)

        self._logger.debug(
            "ingestion.document_built",
            path=str(path),
            document_id=document_id,
            chunk_count=len(chunks),
            section_count=len(analysis.sections),
            topic_count=len(analysis.topics),
        )
        return Document(
            id=document_id,
            metadata=metadata,
            analysis=analysis,
            chunks=tuple(chunks),
            path=str(path),
        )


def build_document(path: Path, *, config: IngestionConfig | None = None) -> Document:
    """Convenience helper for tests and ad-hoc ingestion."""

    return FileDocumentIngestor(config=config).build(path)
