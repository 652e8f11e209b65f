"""Service layer orchestrations for docindex."""

from .diagnostics import (
    Diagnostic,
    DiagnosticRegistry,
    DiagnosticResult,
    EmbeddingDiagnostic,
    FixResult,
    SearchDiagnostic,
    StorageDiagnostic,
    build_default_registry,
)
from .processor import DocumentProcessor, ProcessorClosedError

__all__ = [
    "Diagnostic",
    "DiagnosticRegistry",
    "DiagnosticResult",
    "DocumentProcessor",
    "EmbeddingDiagnostic",
    "FixResult",
    "ProcessorClosedError",
    "SearchDiagnostic",
    "StorageDiagnostic",
    "build_default_registry",
]
