from __future__ import annotations

import logging
from pathlib import Path

import pytest

from docindex.config import get_settings
from docindex.ingestion.service import IngestionError
from docindex.services.processor import DocumentProcessor, ProcessorClosedError
from docindex.storage.store import DocumentNotFoundError

MARKDOWN = """# Overview
Contact ops@example.com for access.

## Schedule
Release planned for 2024-03-01, notes at https://example.com/notes.
"""


def test_ingest_then_get_round_trip(processor, write_file):
    document = processor.ingest(write_file("guide.md", MARKDOWN))

    stored = processor.get(document.id)

    assert stored == document
    assert stored.metadata.filename == "guide.md"
    assert stored.metadata.filetype == "Markdown Document"
    assert "".join(chunk.content for chunk in stored.chunks) == MARKDOWN


def test_identical_content_gets_identical_id(processor, write_file):
    first = processor.ingest(write_file("one.txt", "same bytes"))
    second = processor.ingest(write_file("two.txt", "same bytes"))

    assert first.id == second.id
    assert len(processor.list_documents()) == 1
    assert processor.get(first.id).metadata.filename == "two.txt"


def test_delete_removes_document_everywhere(processor, write_file):
    document = processor.ingest(write_file("gone.txt", "short lived"))

    processor.delete(document.id)

    with pytest.raises(DocumentNotFoundError):
        processor.get(document.id)
    assert processor.list_documents() == []
    assert not (processor.store.vector_store_dir / f"{document.id}.embeddings").exists()
    with pytest.raises(DocumentNotFoundError):
        processor.delete(document.id)


def test_update_replaces_changed_content(processor, write_file):
    path = write_file("draft.txt", "first version")
    original = processor.ingest(path)
    path.write_text("second version", encoding="utf-8")

    updated = processor.update(original.id, path, correlation_id="req-1")

    assert updated.id != original.id
    assert [doc.id for doc in processor.list_documents()] == [updated.id]
    with pytest.raises(DocumentNotFoundError):
        processor.get(original.id)


def test_update_with_same_content_keeps_id(processor, write_file):
    path = write_file("stable.txt", "unchanged")
    original = processor.ingest(path)

    assert processor.update(original.id, path).id == original.id
    assert processor.get(original.id).id == original.id


def test_update_unknown_document_raises(processor, write_file):
    with pytest.raises(DocumentNotFoundError):
        processor.update("0123456789abcdef", write_file("new.txt", "content"))
    assert processor.list_documents() == []


def test_ingest_missing_file_raises(processor, tmp_path: Path):
    with pytest.raises(IngestionError):
        processor.ingest(tmp_path / "missing.txt")


def test_list_metadata_pairs_ids_with_metadata(processor, write_file):
    document = processor.ingest(write_file("meta.txt", "some words here"))

    summaries = processor.list_metadata()

    assert len(summaries) == 1
    assert summaries[0].id == document.id
    assert summaries[0].metadata == document.metadata


def test_analysis_accessors(processor, write_file):
    document = processor.ingest(write_file("guide.md", MARKDOWN), correlation_id="req-2")

    sections = processor.get_sections(document.id)
    toc = processor.get_table_of_contents(document.id)
    entities = processor.get_entities(document.id)

    assert [section.heading for section in sections] == ["Overview", "Schedule"]
    assert [(entry.title, entry.level) for entry in toc] == [("Overview", 1), ("Schedule", 2)]
    assert [(entity.type, entity.value) for entity in entities] == [
        ("email", "ops@example.com"),
        ("url", "https://example.com/notes."),
        ("date", "2024-03-01"),
    ]
    with pytest.raises(DocumentNotFoundError):
        processor.get_sections("0123456789abcdef")


def test_closed_processor_rejects_calls(tmp_path: Path):
    processor = DocumentProcessor(tmp_path / "docs", tmp_path / "vectors")
    processor.close()

    assert processor.closed
    with pytest.raises(ProcessorClosedError):
        processor.list_documents()
    with pytest.raises(ProcessorClosedError):
        processor.search("anything")


def test_from_settings_uses_configured_directories(tmp_path: Path):
    settings = get_settings({"environment": "test", "data_dir": tmp_path, "log_level": "WARNING"})

    with DocumentProcessor.from_settings(settings) as processor:
        assert processor.store.documents_dir == tmp_path / "docs"
        assert processor.store.vector_store_dir == tmp_path / "vector_store"
        assert processor.list_documents() == []


def test_from_settings_leaves_logging_configuration_alone(tmp_path: Path):
    root = logging.getLogger()
    level, handlers = root.level, list(root.handlers)
    settings = get_settings({"environment": "test", "data_dir": tmp_path, "log_level": "DEBUG"})

    with DocumentProcessor.from_settings(settings):
        pass

    assert root.level == level
    assert root.handlers == handlers
