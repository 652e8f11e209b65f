"""Document persistence."""

from .locking import ReadWriteLock
from .store import (
    DocumentNotFoundError,
    DocumentStore,
    EmbeddingsNotFoundError,
    FileDocumentStore,
    StoreError,
)

__all__ = [
    "DocumentNotFoundError",
    "DocumentStore",
    "EmbeddingsNotFoundError",
    "FileDocumentStore",
    "ReadWriteLock",
    "StoreError",
]
