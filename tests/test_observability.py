from __future__ import annotations

from prometheus_client import REGISTRY

from docindex.metrics.observability import (
    PipelineMetrics,
    clear_correlation_id,
    correlation_scope,
    get_correlation_id,
)


def _sample(name: str) -> float:
    return REGISTRY.get_sample_value(name) or 0.0


def test_correlation_scope_binds_and_restores():
    clear_correlation_id()
    with correlation_scope("outer"):
        assert get_correlation_id() == "outer"
        with correlation_scope("inner"):
            assert get_correlation_id() == "inner"
        assert get_correlation_id() == "outer"
        with correlation_scope(None):
            assert get_correlation_id() == "outer"
    assert get_correlation_id() == "-"


def test_deletion_and_skip_counters_increment():
    deleted = _sample("docindex_documents_deleted_total")
    skipped = _sample("docindex_store_skipped_records_total")

    PipelineMetrics.observe_deletion()
    PipelineMetrics.observe_listing(document_count=4, skipped=2)

    assert _sample("docindex_documents_deleted_total") == deleted + 1
    assert _sample("docindex_store_skipped_records_total") == skipped + 2
    assert _sample("docindex_stored_documents") == 4


def test_search_observation_records_scores():
    before = _sample("docindex_search_match_score_count")
    PipelineMetrics.observe_search(0.01, 2, [0.5, 3.0])
    assert _sample("docindex_search_match_score_count") == before + 2
