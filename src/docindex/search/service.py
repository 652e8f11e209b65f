"""Multi-signal ranked search over stored document chunks."""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Iterable, List, Protocol, Sequence

from docindex.embeddings.service import EmbeddingBackend, cosine_similarity
from docindex.metrics.observability import PipelineMetrics, get_logger
from docindex.models import Document, DocumentChunk, DocumentMatch, DocumentTopic, SearchResultMetadata
from docindex.storage.store import DocumentStore, StoreError


@dataclass(frozen=True)
class SearchConfig:
    """Weights and thresholds used to score chunks against a query."""

    semantic_weight: float = 0.6
    phrase_match_score: float = 0.3
    word_match_weight: float = 0.2
    min_keyword_length: int = 3
    title_match_score: float = 0.2
    topic_match_score: float = 0.15
    threshold: float = 0.4
    long_query_threshold: float = 0.3
    long_query_words: int = 3
    diversify_above: int = 5
    max_topic_list: int = 5
    preview_before: int = 100
    preview_after: int = 150
    preview_fallback: int = 200


class Searcher(Protocol):
    """Rank stored chunks against a query."""

    def search(
        self,
        query: str,
        limit: int = 10,
        topics: Sequence[str] | None = None,
    ) -> List[DocumentMatch]:
        """Return matches ordered by combined score."""


class SearchEngine:
    """Scores every chunk of every candidate document and ranks the matches.

    The combined score of a chunk is::

        semantic_weight * cosine(query, chunk) + keyword + title + topic

    where the title and topic scores are computed once per document and
    added to each of its chunks. Chunks above the threshold are sorted by
    score, diversified across documents, and truncated to ``limit``.
    """

    def __init__(
        self,
        store: DocumentStore,
        embedder: EmbeddingBackend,
        config: SearchConfig | None = None,
    ) -> None:
        self._store = store
        self._embedder = embedder
        self._config = config or SearchConfig()
        self._logger = get_logger("search")

    @property
    def config(self) -> SearchConfig:
        return self._config

    def search(
        self,
        query: str,
        limit: int = 10,
        topics: Sequence[str] | None = None,
    ) -> List[DocumentMatch]:
        start = time.perf_counter()
        with self._store.lock.read_locked():
            documents = filter_by_topics(self._store.list(), topics)
            matches = self._rank(query, documents) if query.strip() else []
            if len(matches) > self._config.diversify_above:
                matches = diversify_results(matches)
            if limit > 0:
                matches = matches[:limit]

        duration = time.perf_counter() - start
        PipelineMetrics.observe_search(duration, len(matches), (match.similarity for match in matches))
        self._logger.info(
            "search.complete",
            query=query,
            candidate_documents=len(documents),
            match_count=len(matches),
            limit=limit,
            topics=list(topics or ()),
            duration_seconds=duration,
        )
        return matches

    def _rank(self, query: str, documents: Sequence[Document]) -> List[DocumentMatch]:
        query_lower = query.strip().lower()
        query_words = query_lower.split()
        query_vector = self._embedder.embed_query(query)
        threshold = (
            self._config.long_query_threshold
            if len(query_words) > self._config.long_query_words
            else self._config.threshold
        )

        matches: List[DocumentMatch] = []
        for document in documents:
            try:
                embeddings = self._store.get_embeddings(document.id)
            except StoreError as exc:
                self._logger.warning("search.embeddings_unavailable", document_id=document.id, error=str(exc))
                continue

            title_score = self.title_score(document, query_words)
            topic_score = self.topic_score(document, query_words)
            topic_list = [topic.name for topic in document_topics(document)[: self._config.max_topic_list]]

            # zip() drops chunks that have no stored embedding
            for chunk, vector in zip(document.chunks, embeddings):
                semantic_score = cosine_similarity(query_vector, vector)
                keyword_score = self.keyword_score(chunk, query_lower, query_words)
                combined = (
                    semantic_score * self._config.semantic_weight
                    + keyword_score
                    + title_score
                    + topic_score
                )
                if combined <= threshold:
                    continue
                matches.append(
                    DocumentMatch(
                        document_id=document.id,
                        chunk_id=chunk.id,
                        chunk_index=chunk.index,
                        content=generate_match_preview(chunk.content, query_lower, query_words, self._config),
                        raw_content=chunk.content,
                        similarity=combined,
                        document_name=document.metadata.filename,
                        metadata=SearchResultMetadata(
                            file_type=document.metadata.filetype,
                            semantic_score=semantic_score,
                            keyword_score=keyword_score,
                            title_score=title_score,
                            topic_score=topic_score,
                            topic_list=tuple(topic_list),
                        ),
                    ),
                )

        # list.sort is stable, also with reverse=True
        matches.sort(key=lambda match: match.similarity, reverse=True)
        return matches

    def title_score(self, document: Document, query_words: Sequence[str]) -> float:
        title = document.metadata.filename.lower()
        if not title:
            return 0.0
        matched = sum(1 for word in query_words if word in title)
        return matched * self._config.title_match_score

    def topic_score(self, document: Document, query_words: Sequence[str]) -> float:
        score = 0.0
        for topic in document_topics(document):
            name = topic.name.lower()
            if any(word in name or name in word for word in query_words):
                score += self._config.topic_match_score
        return score

    def keyword_score(self, chunk: DocumentChunk, query_lower: str, query_words: Sequence[str]) -> float:
        if not chunk.content or not query_words:
            return 0.0
        content = chunk.content.lower()
        if query_lower in content:
            return self._config.phrase_match_score
        matched = sum(
            1 for word in query_words if len(word) >= self._config.min_keyword_length and word in content
        )
        return matched / len(query_words) * self._config.word_match_weight


def document_topics(document: Document) -> Sequence[DocumentTopic]:
    if document.analysis is None:
        return ()
    return document.analysis.topics


def filter_by_topics(documents: Iterable[Document], topics: Sequence[str] | None) -> List[Document]:
    """Keep documents with at least one topic named in ``topics`` (case-insensitive).

    Documents without analysis never pass an active filter. An empty or
    missing filter keeps everything.
    """

    wanted = {topic.lower() for topic in topics or ()}
    if not wanted:
        return list(documents)
    return [
        document
        for document in documents
        if any(topic.name.lower() in wanted for topic in document_topics(document))
    ]


def diversify_results(matches: Sequence[DocumentMatch]) -> List[DocumentMatch]:
    """Reorder matches so the leading results span as many documents as possible.

    The first pass takes the best match of each document in score order, the
    second appends everything else in its original order. The output is a
    permutation of the input.
    """

    if len(matches) <= 1:
        return list(matches)
    seen_documents: set[str] = set()
    taken: set[int] = set()
    result: List[DocumentMatch] = []
    for position, match in enumerate(matches):
        if match.document_id in seen_documents:
            continue
        seen_documents.add(match.document_id)
        taken.add(position)
        result.append(match)
    result.extend(match for position, match in enumerate(matches) if position not in taken)
    return result


def generate_match_preview(
    content: str,
    query_lower: str,
    query_words: Sequence[str],
    config: SearchConfig | None = None,
) -> str:
    """Return a snippet of ``content`` around the first occurrence of the query."""

    config = config or SearchConfig()
    if not content:
        return ""
    content_lower = content.lower()
    position = content_lower.find(query_lower) if query_lower else -1
    if position == -1:
        for word in query_words:
            if len(word) >= config.min_keyword_length:
                position = content_lower.find(word)
                if position != -1:
                    break

    if position == -1:
        if len(content) <= config.preview_fallback:
            return content
        return content[: config.preview_fallback] + "..."

    start = max(position - config.preview_before, 0)
    end = min(position + config.preview_after, len(content))
    prefix = "..." if start > 0 else ""
    suffix = "..." if end < len(content) else ""
    return f"{prefix}{content[start:end]}{suffix}"
