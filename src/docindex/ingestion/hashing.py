"""Content-addressed document identifiers."""

from __future__ import annotations

import hashlib

DOCUMENT_ID_LENGTH = 16


def generate_document_id(content: bytes) -> str:
    """Return the truncated SHA-256 hex digest of ``content``.

    Identical bytes always map to the same ID, so re-ingesting an unchanged
    file overwrites its own record instead of creating a duplicate.
    """

    return hashlib.sha256(content).hexdigest()[:DOCUMENT_ID_LENGTH]
