"""docindex: content-addressed document indexing with multi-signal search."""

from importlib import metadata

from docindex.config import Settings, get_settings
from docindex.services.processor import DocumentProcessor, ProcessorClosedError


def __getattr__(name: str) -> str:
    if name == "__version__":
        try:
            return metadata.version("docindex")
        except metadata.PackageNotFoundError:  # pragma: no cover - running from a source checkout
            return "0.0.0"
    raise AttributeError(name)


__all__ = [
    "DocumentProcessor",
    "ProcessorClosedError",
    "Settings",
    "__version__",
    "get_settings",
]
