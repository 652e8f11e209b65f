"""Tests for metadata extraction and structural analysis."""

from __future__ import annotations

from pathlib import Path

from docindex.ingestion.analysis import (
    analyze_document,
    determine_file_type,
    estimate_pages,
    extract_entities,
    extract_sections,
    extract_topics,
    generate_summary,
    generate_table_of_contents,
    split_sentences,
)
from docindex.ingestion.service import FileDocumentIngestor, IngestionConfig


def test_file_type_labels():
    assert determine_file_type(".txt") == "Text Document"
    assert determine_file_type(".md") == "Markdown Document"
    assert determine_file_type(".PDF") == "PDF Document"
    assert determine_file_type(".xyz") == "Unknown Document Type"
    assert determine_file_type("") == "Unknown Document Type"


def test_page_estimate_rounds_up():
    assert estimate_pages(0) == 0
    assert estimate_pages(250) == 1
    assert estimate_pages(251) == 2


def test_sentences_keep_abbreviations_intact():
    text = "Dr. Smith arrived. He left!   Why? Yes."
    assert split_sentences(text) == ["Dr. Smith arrived.", "He left!", "Why?", "Yes."]


def test_summary_uses_whole_sentences_within_max_length():
    assert generate_summary("One two three. Four five six.", max_length=20) == "One two three."
    assert generate_summary("One two three. Four five six.") == "One two three. Four five six."


def test_summary_truncates_overlong_first_sentence():
    summary = generate_summary("a" * 300 + ".", max_length=200)
    assert summary == "a" * 200


def test_summary_of_empty_text_is_empty():
    assert generate_summary("") == ""
    assert generate_summary("...") == ""


def test_sections_start_at_headings_and_align_with_toc():
    text = "Intro line\n# Title\nBody one.\n## Sub\nBody two.\n"
    sections = extract_sections(text)

    assert [(s.heading, s.heading_level) for s in sections] == [("Title", 1), ("Sub", 2)]
    assert [s.content for s in sections] == ["Body one.", "Body two."]
    assert sections[0].start_position == text.index("# Title")
    assert sections[1].start_position == text.index("## Sub")
    assert sections[0].start_position + sections[0].length == sections[1].start_position
    assert sections[1].start_position + sections[1].length == len(text)

    toc = generate_table_of_contents(sections)
    assert [(entry.title, entry.level, entry.position) for entry in toc] == [
        ("Title", 1, sections[0].start_position),
        ("Sub", 2, sections[1].start_position),
    ]


def test_text_without_headings_is_one_section():
    sections = extract_sections("just some text")
    assert len(sections) == 1
    assert sections[0].heading == ""
    assert sections[0].heading_level == 0
    assert sections[0].content == "just some text"


def test_entities_report_type_value_and_position():
    text = "Mail bob@example.com or see https://example.org/page on 2024-01-15 and 3/4/2024."
    entities = extract_entities(text)

    assert [(e.type, e.value) for e in entities] == [
        ("email", "bob@example.com"),
        ("url", "https://example.org/page"),
        ("date", "2024-01-15"),
        ("date", "3/4/2024"),
    ]
    for entity in entities:
        assert text[entity.position : entity.position + len(entity.value)] == entity.value


def test_topics_need_minimum_frequency_and_skip_stop_words():
    text = "apple apple apple banana banana banana banana cherry cherry the the the the"
    topics = extract_topics(text)

    assert [topic.name for topic in topics] == ["banana", "apple"]
    assert topics[0].weight == 4 / 13
    assert topics[0].keywords == ("banana",)


def test_topic_ties_keep_first_seen_order_and_are_capped():
    assert [t.name for t in extract_topics("alpha beta alpha beta alpha beta")] == ["alpha", "beta"]
    words = [f"word{letter}" for letter in "abcdefghijkl"]
    topics = extract_topics(" ".join(words * 3))
    assert [t.name for t in topics] == words[:10]


def test_topic_threshold_is_configurable():
    assert [t.name for t in extract_topics("kiwi kiwi melon", min_frequency=2)] == ["kiwi"]


def test_analyze_document_counts_words_and_pages():
    analysis = analyze_document("doc", "# Heading\nsome body text here")
    assert analysis.document_id == "doc"
    assert analysis.word_count == 6
    assert analysis.page_count == 1
    assert analysis.table_of_contents[0].title == "Heading"


def test_ingestor_builds_metadata_from_file(tmp_path: Path):
    path = tmp_path / "notes.md"
    path.write_text("# Notes\nFirst sentence here. Second one follows.", encoding="utf-8")

    document = FileDocumentIngestor(IngestionConfig(summary_max_length=30)).build(path)

    meta = document.metadata
    assert meta.filename == "notes.md"
    assert meta.filetype == "Markdown Document"
    assert meta.filesize == path.stat().st_size
    assert meta.original_path == str(path.resolve())
    assert meta.word_count == 8
    assert meta.page_count == 1
    assert meta.content_summary == "# Notes First sentence here."
    assert document.analysis is not None
    assert document.chunks[0].content == path.read_text(encoding="utf-8")
