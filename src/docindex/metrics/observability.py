"""Observability helpers for docindex."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Iterable, Iterator

import structlog
from prometheus_client import Counter, Gauge, Histogram

_logger_configured = False
_correlation_id_var: ContextVar[str] = ContextVar("correlation_id", default="-")


def configure_logging(level: int = logging.INFO) -> None:
    global _logger_configured  # noqa: PLW0603 - module-level guard
    if _logger_configured:
        return
    logging.basicConfig(level=level, format="%(message)s")
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
    _logger_configured = True


def bind_correlation_id(correlation_id: str) -> None:
    structlog.contextvars.bind_contextvars(correlation_id=correlation_id)
    _correlation_id_var.set(correlation_id)


def clear_correlation_id() -> None:
    structlog.contextvars.clear_contextvars()
    _correlation_id_var.set("-")


def get_correlation_id() -> str:
    return _correlation_id_var.get()


@contextmanager
def correlation_scope(correlation_id: str | None) -> Iterator[None]:
    """Bind ``correlation_id`` for the duration of the block, if one is given."""

    if correlation_id is None:
        yield
        return
    previous = get_correlation_id()
    bind_correlation_id(correlation_id)
    try:
        yield
    finally:
        if previous == "-":
            clear_correlation_id()
        else:
            bind_correlation_id(previous)


def get_logger(name: str = "docindex") -> structlog.BoundLogger:
    configure_logging()
    return structlog.get_logger(name)


def _clamp_score(score: float) -> float:
    if score < 0.0:
        return 0.0
    if score > 2.0:
        return 2.0
    return score


class PipelineMetrics:
    """Prometheus metrics for ingestion, search and store maintenance."""

    ingestion_latency = Histogram(
        "docindex_ingestion_duration_seconds",
        "Time spent ingesting a single document.",
        buckets=(0.005, 0.01, 0.05, 0.1, 0.5, 1.0, 5.0),
    )
    ingestion_chunks = Histogram(
        "docindex_ingestion_chunk_count",
        "Chunks produced per ingested document.",
        buckets=(0, 1, 5, 10, 20, 40, 80, 160),
    )
    search_latency = Histogram(
        "docindex_search_duration_seconds",
        "Time spent scoring and ranking a search query.",
        buckets=(0.001, 0.005, 0.01, 0.05, 0.1, 0.5, 1.0),
    )
    search_match_count = Histogram(
        "docindex_search_match_count",
        "Number of matches returned by a search.",
        buckets=(0, 1, 2, 3, 5, 8, 13, 21),
    )
    match_score = Histogram(
        "docindex_search_match_score",
        "Combined similarity score of returned matches.",
        buckets=(0.3, 0.4, 0.5, 0.7, 1.0, 1.5, 2.0),
    )
    deletions = Counter(
        "docindex_documents_deleted_total",
        "Documents removed from the store.",
    )
    skipped_records = Counter(
        "docindex_store_skipped_records_total",
        "Stored records that could not be read while listing.",
    )
    stored_documents = Gauge(
        "docindex_stored_documents",
        "Documents visible in the store at the last listing.",
    )

    @classmethod
    def observe_ingestion(cls, duration_seconds: float, chunk_count: int) -> None:
        cls.ingestion_latency.observe(duration_seconds)
        cls.ingestion_chunks.observe(chunk_count)

    @classmethod
    def observe_search(
        cls,
        duration_seconds: float,
        match_count: int,
        scores: Iterable[float],
    ) -> None:
        cls.search_latency.observe(duration_seconds)
        cls.search_match_count.observe(match_count)
        for score in scores:
            cls.match_score.observe(_clamp_score(score))

    @classmethod
    def observe_deletion(cls) -> None:
        cls.deletions.inc()

    @classmethod
    def observe_listing(cls, document_count: int, skipped: int) -> None:
        cls.stored_documents.set(document_count)
        if skipped:
            cls.skipped_records.inc(skipped)


__all__ = [
    "PipelineMetrics",
    "bind_correlation_id",
    "clear_correlation_id",
    "configure_logging",
    "correlation_scope",
    "get_correlation_id",
    "get_logger",
]
