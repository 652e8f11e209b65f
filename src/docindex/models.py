"""Shared domain models used across the docindex pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Sequence


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class DocumentMetadata:
    """File-level metadata captured when a document is ingested."""

    filename: str
    filetype: str
    filesize: int
    original_path: str
    upload_date: datetime = field(default_factory=_utcnow)
    last_modified_date: datetime = field(default_factory=_utcnow)
    word_count: int = 0
    page_count: int = 0
    content_summary: str = ""
    tags: Sequence[str] = field(default_factory=tuple)


@dataclass(frozen=True)
class DocumentSection:
    """Heading-delimited span of a document."""

    index: int
    heading: str
    heading_level: int
    content: str
    start_position: int
    length: int


@dataclass(frozen=True)
class TOCEntry:
    title: str
    level: int
    position: int


@dataclass(frozen=True)
class DocumentEntity:
    """Entity matched in the text; ``type`` is one of email, url or date."""

    type: str
    value: str
    position: int


@dataclass(frozen=True)
class DocumentTopic:
    name: str
    weight: float = 0.0
    keywords: Sequence[str] = field(default_factory=tuple)


@dataclass(frozen=True)
class DocumentAnalysis:
    """Structural summary of a document, owned by exactly one Document."""

    document_id: str
    sections: Sequence[DocumentSection] = field(default_factory=tuple)
    table_of_contents: Sequence[TOCEntry] = field(default_factory=tuple)
    entities: Sequence[DocumentEntity] = field(default_factory=tuple)
    topics: Sequence[DocumentTopic] = field(default_factory=tuple)
    analyzed_at: datetime = field(default_factory=_utcnow)
    word_count: int = 0
    page_count: int = 0


@dataclass(frozen=True)
class DocumentChunk:
    """Overlapping window of document text, the unit of retrieval."""

    id: str
    document_id: str
    index: int
    start_position: int
    length: int
    content: str

    @property
    def end_position(self) -> int:
        return self.start_position + self.length


@dataclass(frozen=True)
class Document:
    """Processed document keyed by the hash of its raw bytes."""

    id: str
    metadata: DocumentMetadata
    analysis: DocumentAnalysis | None
    chunks: Sequence[DocumentChunk]
    path: str


@dataclass(frozen=True)
class DocumentSummary:
    """Lightweight listing entry: a document ID with its metadata."""

    id: str
    metadata: DocumentMetadata


@dataclass(frozen=True)
class SearchResultMetadata:
    """Decomposed sub-scores attached to a search match."""

    file_type: str
    semantic_score: float
    keyword_score: float
    title_score: float
    topic_score: float
    topic_list: Sequence[str] = field(default_factory=tuple)


@dataclass(frozen=True)
class DocumentMatch:
    """Chunk returned by the search engine together with its combined score."""

    document_id: str
    chunk_id: str
    chunk_index: int
    content: str
    raw_content: str
    similarity: float
    document_name: str
    metadata: SearchResultMetadata
