"""Document ingestion pipeline."""

from .analysis import AnalysisError, analyze_document, extract_metadata
from .chunking import CHUNK_OVERLAP, CHUNK_SIZE, generate_chunks
from .hashing import generate_document_id
from .service import (
    DocumentIngestor,
    FileDocumentIngestor,
    IngestionConfig,
    IngestionError,
    build_document,
)

__all__ = [
    "AnalysisError",
    "CHUNK_OVERLAP",
    "CHUNK_SIZE",
    "DocumentIngestor",
    "FileDocumentIngestor",
    "IngestionConfig",
    "IngestionError",
    "analyze_document",
    "build_document",
    "extract_metadata",
    "generate_chunks",
    "generate_document_id",
]
