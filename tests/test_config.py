from __future__ import annotations

from pathlib import Path

from docindex.config import get_settings


def test_defaults_embedding_dim_and_search_limit():
    settings = get_settings({"environment": "test"})
    assert settings.embedding_dim == 128
    assert settings.default_search_limit == 10
    assert settings.topic_min_frequency == 3
    assert settings.is_test


def test_storage_dirs_default_under_data_dir(tmp_path: Path):
    settings = get_settings({"data_dir": tmp_path})
    assert settings.resolved_documents_dir == tmp_path / "docs"
    assert settings.resolved_vector_store_dir == tmp_path / "vector_store"


def test_explicit_storage_dirs_win(tmp_path: Path):
    settings = get_settings({"documents_dir": tmp_path / "d", "vector_store_dir": tmp_path / "v"})
    assert settings.resolved_documents_dir == tmp_path / "d"
    assert settings.resolved_vector_store_dir == tmp_path / "v"


def test_settings_read_from_environment(monkeypatch):
    monkeypatch.setenv("DOCINDEX_DEFAULT_SEARCH_LIMIT", "3")
    settings = get_settings({"environment": "test"})
    assert settings.default_search_limit == 3
