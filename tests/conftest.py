from __future__ import annotations

from pathlib import Path
from typing import Callable

import pytest

from docindex import DocumentProcessor


@pytest.fixture()
def processor(tmp_path: Path):
    with DocumentProcessor(tmp_path / "docs", tmp_path / "vector_store") as proc:
        yield proc


@pytest.fixture()
def write_file(tmp_path: Path) -> Callable[[str, str], Path]:
    source_dir = tmp_path / "sources"
    source_dir.mkdir()

    def _write(name: str, content: str) -> Path:
        path = source_dir / name
        path.write_text(content, encoding="utf-8")
        return path

    return _write
