"""JSON record conversion for stored documents."""

from __future__ import annotations

import json
from dataclasses import asdict
from datetime import datetime
from typing import Any, Dict, Mapping

from docindex.models import (
    Document,
    DocumentAnalysis,
    DocumentChunk,
    DocumentEntity,
    DocumentMetadata,
    DocumentSection,
    DocumentTopic,
    TOCEntry,
)


def _json_default(value: object) -> object:
    if isinstance(value, datetime):
        return value.isoformat()
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def document_to_record(document: Document) -> Dict[str, Any]:
    return asdict(document)


def dumps_document(document: Document) -> str:
    return json.dumps(document_to_record(document), default=_json_default)


def _parse_datetime(value: object) -> datetime:
    if isinstance(value, datetime):
        return value
    if not isinstance(value, str):
        raise TypeError(f"expected an ISO-8601 string, got {type(value).__name__}")
    return datetime.fromisoformat(value)


def _str(record: Mapping[str, Any], key: str, default: str | None = None) -> str:
    value = record[key] if default is None else record.get(key, default)
    if not isinstance(value, str):
        raise TypeError(f"field {key!r} must be a string, got {type(value).__name__}")
    return value


def _int(record: Mapping[str, Any], key: str, default: int | None = None) -> int:
    value = record[key] if default is None else record.get(key, default)
    # bool is an int subclass but never a valid count or offset
    if not isinstance(value, int) or isinstance(value, bool):
        raise TypeError(f"field {key!r} must be an integer, got {type(value).__name__}")
    return value


def _float(record: Mapping[str, Any], key: str, default: float) -> float:
    value = record.get(key, default)
    if not isinstance(value, (int, float)) or isinstance(value, bool):
        raise TypeError(f"field {key!r} must be a number, got {type(value).__name__}")
    return float(value)


def _strings(record: Mapping[str, Any], key: str) -> tuple[str, ...]:
    values = record.get(key) or []
    if not isinstance(values, list) or not all(isinstance(value, str) for value in values):
        raise TypeError(f"field {key!r} must be a list of strings")
    return tuple(values)


def _records(record: Mapping[str, Any], key: str) -> list[Mapping[str, Any]]:
    values = record.get(key) or []
    if not isinstance(values, list) or not all(isinstance(value, dict) for value in values):
        raise TypeError(f"field {key!r} must be a list of objects")
    return values


def metadata_from_record(record: Mapping[str, Any]) -> DocumentMetadata:
    return DocumentMetadata(
        filename=_str(record, "filename"),
        filetype=_str(record, "filetype", ""),
        filesize=_int(record, "filesize", 0),
        original_path=_str(record, "original_path", ""),
        upload_date=_parse_datetime(record["upload_date"]),
        last_modified_date=_parse_datetime(record["last_modified_date"]),
        word_count=_int(record, "word_count", 0),
        page_count=_int(record, "page_count", 0),
        content_summary=_str(record, "content_summary", ""),
        tags=_strings(record, "tags"),
    )


def section_from_record(record: Mapping[str, Any]) -> DocumentSection:
    return DocumentSection(
        index=_int(record, "index"),
        heading=_str(record, "heading"),
        heading_level=_int(record, "heading_level"),
        content=_str(record, "content"),
        start_position=_int(record, "start_position"),
        length=_int(record, "length"),
    )


def chunk_from_record(record: Mapping[str, Any]) -> DocumentChunk:
    return DocumentChunk(
        id=_str(record, "id"),
        document_id=_str(record, "document_id"),
        index=_int(record, "index"),
        start_position=_int(record, "start_position"),
        length=_int(record, "length"),
        content=_str(record, "content"),
    )


def analysis_from_record(record: Mapping[str, Any]) -> DocumentAnalysis:
    return DocumentAnalysis(
        document_id=_str(record, "document_id"),
        sections=tuple(section_from_record(section) for section in _records(record, "sections")),
        table_of_contents=tuple(
            TOCEntry(title=_str(entry, "title"), level=_int(entry, "level"), position=_int(entry, "position"))
            for entry in _records(record, "table_of_contents")
        ),
        entities=tuple(
            DocumentEntity(type=_str(entity, "type"), value=_str(entity, "value"), position=_int(entity, "position"))
            for entity in _records(record, "entities")
        ),
        topics=tuple(
            DocumentTopic(
                name=_str(topic, "name"),
                weight=_float(topic, "weight", 0.0),
                keywords=_strings(topic, "keywords"),
            )
            for topic in _records(record, "topics")
        ),
        analyzed_at=_parse_datetime(record["analyzed_at"]),
        word_count=_int(record, "word_count", 0),
        page_count=_int(record, "page_count", 0),
    )


def document_from_record(record: Mapping[str, Any]) -> Document:
    """Rebuild a Document from its stored record.

    Every field is type-checked, so a record that loads as JSON but carries
    a wrongly typed value is rejected here instead of failing later during
    scoring. Raises ``KeyError``, ``TypeError`` or ``ValueError`` when the
    record is malformed.
    """

    analysis = record.get("analysis")
    if analysis is not None and not isinstance(analysis, dict):
        raise TypeError("field 'analysis' must be an object or null")
    metadata = record["metadata"]
    if not isinstance(metadata, dict):
        raise TypeError("field 'metadata' must be an object")
    return Document(
        id=_str(record, "id"),
        metadata=metadata_from_record(metadata),
        analysis=analysis_from_record(analysis) if analysis else None,
        chunks=tuple(chunk_from_record(chunk) for chunk in _records(record, "chunks")),
        path=_str(record, "path", ""),
    )


def loads_document(payload: str | bytes) -> Document:
    record = json.loads(payload)
    if not isinstance(record, dict):
        raise ValueError("Document record must be a JSON object")
    return document_from_record(record)
