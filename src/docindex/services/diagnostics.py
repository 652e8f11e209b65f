"""Self-checks for a docindex installation, keyed by component name."""

from __future__ import annotations

import math
import tempfile
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Literal, Mapping, Protocol, Sequence

from docindex.embeddings.service import EMBEDDING_DIM, EmbeddingBackend
from docindex.ingestion.service import IngestionError
from docindex.metrics.observability import get_logger
from docindex.services.processor import DocumentProcessor
from docindex.storage.store import StoreError

_PROBE_FILENAME = "diagnostic_probe.txt"
_PROBE_TEXT = (
    "Diagnostic probe text for docindex. "
    "The diagnostic probe verifies that indexing and search work. "
    "A diagnostic probe run ends here."
)
_PROBE_QUERY = "diagnostic probe"


@dataclass(frozen=True)
class DiagnosticResult:
    name: str
    status: Literal["passed", "failed"]
    message: str
    duration_seconds: float = 0.0
    fix_available: bool = False

    @property
    def passed(self) -> bool:
        return self.status == "passed"


@dataclass(frozen=True)
class FixResult:
    name: str
    success: bool
    actions: Sequence[str] = field(default_factory=tuple)


class Diagnostic(Protocol):
    """A check that can report on, and possibly repair, one component."""

    def run(self) -> DiagnosticResult:
        """Run the check."""

    def fix(self) -> FixResult:
        """Attempt to repair what ``run`` reports as broken."""


class StorageDiagnostic:
    """Verifies the document and vector directories exist and are writable."""

    name = "storage"

    def __init__(self, documents_dir: Path, vector_store_dir: Path) -> None:
        self._directories = {"documents": Path(documents_dir), "vector store": Path(vector_store_dir)}

    def run(self) -> DiagnosticResult:
        start = time.perf_counter()
        problems: List[str] = []
        for label, directory in self._directories.items():
            if not directory.is_dir():
                problems.append(f"{label} directory does not exist: {directory}")
                continue
            try:
                _check_writable(directory)
            except OSError as exc:
                problems.append(f"{label} directory is not writable: {exc}")
        duration = time.perf_counter() - start
        if problems:
            return DiagnosticResult(self.name, "failed", "; ".join(problems), duration, fix_available=True)
        return DiagnosticResult(self.name, "passed", "Storage directories are ready", duration)

    def fix(self) -> FixResult:
        actions: List[str] = []
        success = True
        for label, directory in self._directories.items():
            if directory.is_dir():
                actions.append(f"{label} directory already exists: {directory}")
            else:
                try:
                    directory.mkdir(parents=True, exist_ok=True)
                    actions.append(f"Created {label} directory: {directory}")
                except OSError as exc:
                    success = False
                    actions.append(f"Failed to create {label} directory: {exc}")
                    continue
            try:
                _check_writable(directory)
                actions.append(f"{label} directory has correct permissions")
            except OSError as exc:
                success = False
                actions.append(f"Warning: {label} directory permission issue: {exc}")
        return FixResult(self.name, success, tuple(actions))


class EmbeddingDiagnostic:
    """Verifies the embedder is deterministic, has the expected size and unit norm."""

    name = "embeddings"

    def __init__(self, embedder: EmbeddingBackend, dim: int = EMBEDDING_DIM) -> None:
        self._embedder = embedder
        self._dim = dim

    def run(self) -> DiagnosticResult:
        start = time.perf_counter()
        first = self._embedder.embed_query(_PROBE_TEXT)
        second = self._embedder.embed_query(_PROBE_TEXT)
        norm = math.sqrt(sum(value * value for value in first))
        problems: List[str] = []
        if list(first) != list(second):
            problems.append("embedding is not deterministic")
        if len(first) != self._dim:
            problems.append(f"expected {self._dim} dimensions, got {len(first)}")
        if not math.isclose(norm, 1.0, rel_tol=1e-9, abs_tol=1e-9):
            problems.append(f"expected unit norm, got {norm:.6f}")
        duration = time.perf_counter() - start
        if problems:
            return DiagnosticResult(self.name, "failed", "; ".join(problems), duration)
        return DiagnosticResult(self.name, "passed", "Embedding backend is consistent", duration)

    def fix(self) -> FixResult:
        return FixResult(self.name, False, ("No automatic fix for the embedding backend",))


class SearchDiagnostic:
    """Indexes a probe document in a scratch processor and searches for it."""

    name = "search"

    def __init__(self, embedder: EmbeddingBackend) -> None:
        self._embedder = embedder

    def run(self) -> DiagnosticResult:
        start = time.perf_counter()
        try:
            with tempfile.TemporaryDirectory(prefix="docindex-diagnostic-") as scratch:
                root = Path(scratch)
                probe = root / _PROBE_FILENAME
                probe.write_text(_PROBE_TEXT, encoding="utf-8")
                with DocumentProcessor(root / "docs", root / "vector_store", embedder=self._embedder) as processor:
                    document = processor.ingest(probe)
                    matches = processor.search(_PROBE_QUERY, limit=5)
        except (OSError, IngestionError, StoreError) as exc:
            return DiagnosticResult(self.name, "failed", f"Probe ingestion failed: {exc}", time.perf_counter() - start)
        duration = time.perf_counter() - start
        if not any(match.document_id == document.id for match in matches):
            return DiagnosticResult(self.name, "failed", "Probe document was not found by search", duration)
        return DiagnosticResult(self.name, "passed", "Probe document indexed and found", duration)

    def fix(self) -> FixResult:
        return FixResult(self.name, False, ("No automatic fix for search",))


def _check_writable(directory: Path) -> None:
    probe = directory / ".docindex-write-test"
    probe.write_text("test", encoding="utf-8")
    try:
        probe.read_text(encoding="utf-8")
    finally:
        probe.unlink()


class DiagnosticRegistry:
    """Maps component names to diagnostics; built explicitly by the caller."""

    def __init__(self, diagnostics: Mapping[str, Diagnostic] | None = None) -> None:
        self._diagnostics: Dict[str, Diagnostic] = dict(diagnostics or {})
        self._logger = get_logger("diagnostics")

    def register(self, name: str, diagnostic: Diagnostic) -> None:
        self._diagnostics[name] = diagnostic

    def names(self) -> List[str]:
        return list(self._diagnostics)

    def get(self, name: str) -> Diagnostic:
        try:
            return self._diagnostics[name]
        except KeyError:
            raise KeyError(f"unknown diagnostic: {name}") from None

    def run(self, name: str) -> DiagnosticResult:
        result = self.get(name).run()
        self._logger.info(
            "diagnostic.run",
            diagnostic=name,
            status=result.status,
            message=result.message,
            duration_seconds=result.duration_seconds,
        )
        return result

    def fix(self, name: str) -> FixResult:
        result = self.get(name).fix()
        self._logger.info("diagnostic.fix", diagnostic=name, success=result.success, actions=list(result.actions))
        return result

    def run_all(self) -> Dict[str, DiagnosticResult]:
        return {name: self.run(name) for name in self._diagnostics}


def build_default_registry(processor: DocumentProcessor) -> DiagnosticRegistry:
    return DiagnosticRegistry(
        {
            StorageDiagnostic.name: StorageDiagnostic(
                processor.store.documents_dir,
                processor.store.vector_store_dir,
            ),
            EmbeddingDiagnostic.name: EmbeddingDiagnostic(processor.embedder),
            SearchDiagnostic.name: SearchDiagnostic(processor.embedder),
        },
    )
