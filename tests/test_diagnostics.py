from __future__ import annotations

from pathlib import Path

import pytest

from docindex.embeddings.service import EmbeddingConfig, HashEmbeddingBackend
from docindex.services.diagnostics import (
    DiagnosticRegistry,
    EmbeddingDiagnostic,
    StorageDiagnostic,
    build_default_registry,
)


def test_default_registry_passes_on_healthy_processor(processor):
    registry = build_default_registry(processor)

    results = registry.run_all()

    assert registry.names() == ["storage", "embeddings", "search"]
    assert all(result.passed for result in results.values()), results


def test_storage_diagnostic_reports_and_fixes_missing_dirs(tmp_path: Path):
    diagnostic = StorageDiagnostic(tmp_path / "docs", tmp_path / "vectors")

    result = diagnostic.run()
    assert not result.passed
    assert result.fix_available

    fix = diagnostic.fix()
    assert fix.success
    assert (tmp_path / "docs").is_dir()
    assert diagnostic.run().passed


def test_embedding_diagnostic_detects_dimension_mismatch():
    diagnostic = EmbeddingDiagnostic(HashEmbeddingBackend(EmbeddingConfig(dim=64)), dim=128)
    result = diagnostic.run()
    assert result.status == "failed"
    assert "128" in result.message


def test_registry_rejects_unknown_names(tmp_path: Path):
    registry = DiagnosticRegistry()
    registry.register("storage", StorageDiagnostic(tmp_path, tmp_path))

    assert registry.run("storage").passed
    with pytest.raises(KeyError):
        registry.run("missing")
    with pytest.raises(KeyError):
        registry.fix("missing")
