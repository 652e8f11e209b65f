"""Metadata extraction and structural analysis of document text."""

from __future__ import annotations

import math
import os
import re
from collections import Counter
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Mapping, Sequence

from docindex.models import (
    DocumentAnalysis,
    DocumentEntity,
    DocumentMetadata,
    DocumentSection,
    DocumentTopic,
    TOCEntry,
)

WORDS_PER_PAGE = 250
DEFAULT_SUMMARY_LENGTH = 200
DEFAULT_TOPIC_MIN_FREQUENCY = 3
MAX_TOPICS = 10

_FILE_TYPES: Mapping[str, str] = {
    ".pdf": "PDF Document",
    ".docx": "Word Document",
    ".doc": "Word Document",
    ".xlsx": "Excel Spreadsheet",
    ".xls": "Excel Spreadsheet",
    ".pptx": "PowerPoint Presentation",
    ".ppt": "PowerPoint Presentation",
    ".txt": "Text Document",
    ".md": "Markdown Document",
    ".json": "JSON Document",
    ".html": "HTML Document",
    ".htm": "HTML Document",
}
UNKNOWN_FILE_TYPE = "Unknown Document Type"

_ABBREVIATIONS = re.compile(r"\b(?:Mrs\.|Mr\.|Dr\.|etc\.|i\.e\.|e\.g\.)")
_DOT_PLACEHOLDER = "\x00"
_SENTENCE = re.compile(r"[^.!?]+[.!?]*")

_HEADING = re.compile(r"^(#{1,6})[ \t]+(.+?)[ \t]*$", re.MULTILINE)

_EMAIL = re.compile(r"\b[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}\b")
_URL = re.compile(r"https?://[^\s]+")
_DATE = re.compile(r"\b\d{4}-\d{2}-\d{2}\b|\b\d{1,2}/\d{1,2}/\d{2,4}\b")
_ENTITY_PATTERNS: Sequence[tuple[str, re.Pattern[str]]] = (
    ("email", _EMAIL),
    ("url", _URL),
    ("date", _DATE),
)

_TOPIC_STRIP = ".,;:!?\"'()[]{}"
STOP_WORDS = frozenset(
    {
        "the", "and", "a", "to", "of", "in", "is", "it", "that", "for",
        "on", "with", "as", "this", "by", "be", "or", "not", "an", "are",
        "was", "were", "from", "at", "have", "has", "had", "but", "what", "when",
        "why", "how", "all", "if", "you", "his", "her", "they", "we", "she",
        "he", "my", "their", "your", "its",
    },
)


class AnalysisError(RuntimeError):
    """Raised when structural analysis of a document fails unexpectedly."""


def determine_file_type(suffix: str) -> str:
    return _FILE_TYPES.get(suffix.lower(), UNKNOWN_FILE_TYPE)


def count_words(text: str) -> int:
    return len(text.split())


def estimate_pages(word_count: int) -> int:
    return math.ceil(word_count / WORDS_PER_PAGE)


def split_sentences(text: str) -> List[str]:
    """Split text on ``.``, ``!`` and ``?`` while keeping common abbreviations intact."""

    guarded = _ABBREVIATIONS.sub(lambda m: m.group(0).replace(".", _DOT_PLACEHOLDER), text)
    sentences: List[str] = []
    for match in _SENTENCE.finditer(guarded):
        sentence = " ".join(match.group(0).split())
        if not sentence.strip(".!?"):
            continue
        sentences.append(sentence.replace(_DOT_PLACEHOLDER, "."))
    return sentences


def generate_summary(text: str, max_length: int = DEFAULT_SUMMARY_LENGTH) -> str:
    """Build a summary from whole leading sentences that fit in ``max_length`` characters."""

    sentences = split_sentences(text)
    if not sentences:
        return ""
    parts: List[str] = []
    used = 0
    for sentence in sentences:
        needed = len(sentence) + (1 if parts else 0)
        if used + needed > max_length:
            break
        parts.append(sentence)
        used += needed
    if not parts:
        # First sentence alone is longer than max_length
        return sentences[0][:max_length].rstrip()
    return " ".join(parts)[:max_length]


def extract_metadata(
    path: Path,
    stat: os.stat_result,
    text: str,
    *,
    max_summary_length: int = DEFAULT_SUMMARY_LENGTH,
) -> DocumentMetadata:
    word_count = count_words(text)
    return DocumentMetadata(
        filename=path.name,
        filetype=determine_file_type(path.suffix),
        filesize=stat.st_size,
        original_path=str(path),
        upload_date=datetime.now(timezone.utc),
        last_modified_date=datetime.fromtimestamp(stat.st_mtime, tz=timezone.utc),
        word_count=word_count,
        page_count=estimate_pages(word_count),
        content_summary=generate_summary(text, max_summary_length),
    )


def extract_sections(text: str) -> List[DocumentSection]:
    """Split text into sections at Markdown headings.

    A section spans from its heading line to the next heading (or the end of
    the text). Text without headings becomes one untitled level-0 section.
    """

    matches = list(_HEADING.finditer(text))
    if not matches:
        return [
            DocumentSection(
                index=0,
                heading="",
                heading_level=0,
                content=text,
                start_position=0,
                length=len(text),
            ),
        ]

    sections: List[DocumentSection] = []
    for index, match in enumerate(matches):
        start = match.start()
        end = matches[index + 1].start() if index + 1 < len(matches) else len(text)
        sections.append(
            DocumentSection(
                index=index,
                heading=match.group(2).strip(),
                heading_level=len(match.group(1)),
                content=text[match.end() : end].strip(),
                start_position=start,
                length=end - start,
            ),
        )
    return sections


def generate_table_of_contents(sections: Sequence[DocumentSection]) -> List[TOCEntry]:
    return [
        TOCEntry(title=section.heading, level=section.heading_level, position=section.start_position)
        for section in sections
    ]


def extract_entities(text: str) -> List[DocumentEntity]:
    entities: List[DocumentEntity] = []
    for entity_type, pattern in _ENTITY_PATTERNS:
        for match in pattern.finditer(text):
            entities.append(DocumentEntity(type=entity_type, value=match.group(0), position=match.start()))
    return entities


def extract_topics(
    text: str,
    *,
    min_frequency: int = DEFAULT_TOPIC_MIN_FREQUENCY,
    max_topics: int = MAX_TOPICS,
) -> List[DocumentTopic]:
    """Rank frequent non-stop-words as topics.

    Words need at least ``min_frequency`` occurrences. Ties keep the order in
    which the words first appear.
    """

    tokens = text.split()
    counts: Counter[str] = Counter()
    for token in tokens:
        word = token.strip(_TOPIC_STRIP).lower()
        if len(word) <= 2 or word in STOP_WORDS:
            continue
        counts[word] += 1

    # Counter preserves first-seen order and sorted() is stable
    frequent = [(word, count) for word, count in counts.items() if count >= min_frequency]
    frequent = sorted(frequent, key=lambda pair: pair[1], reverse=True)[:max_topics]
    total = len(tokens) or 1
    return [DocumentTopic(name=word, weight=count / total, keywords=(word,)) for word, count in frequent]


def analyze_document(
    document_id: str,
    text: str,
    *,
    topic_min_frequency: int = DEFAULT_TOPIC_MIN_FREQUENCY,
) -> DocumentAnalysis:
    try:
        sections = extract_sections(text)
        word_count = count_words(text)
        return DocumentAnalysis(
            document_id=document_id,
            sections=tuple(sections),
            table_of_contents=tuple(generate_table_of_contents(sections)),
            entities=tuple(extract_entities(text)),
            topics=tuple(extract_topics(text, min_frequency=topic_min_frequency)),
            analyzed_at=datetime.now(timezone.utc),
            word_count=word_count,
            page_count=estimate_pages(word_count),
        )
    except Exception as exc:  # pragma: no cover - regex extraction does not fail on str input
        raise AnalysisError(f"Failed to analyze document {document_id}: {exc}") from exc
