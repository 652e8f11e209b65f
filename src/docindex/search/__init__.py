"""Ranked document search."""

from .service import (
    SearchConfig,
    SearchEngine,
    Searcher,
    diversify_results,
    filter_by_topics,
    generate_match_preview,
)

__all__ = [
    "SearchConfig",
    "SearchEngine",
    "Searcher",
    "diversify_results",
    "filter_by_topics",
    "generate_match_preview",
]
