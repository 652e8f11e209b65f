from __future__ import annotations

import hashlib

from docindex.ingestion.hashing import DOCUMENT_ID_LENGTH, generate_document_id


def test_document_id_is_truncated_sha256():
    content = b"hello world"
    assert generate_document_id(content) == hashlib.sha256(content).hexdigest()[:16]
    assert len(generate_document_id(content)) == DOCUMENT_ID_LENGTH


def test_document_id_depends_only_on_bytes():
    assert generate_document_id(b"same") == generate_document_id(b"same")
    assert generate_document_id(b"same") != generate_document_id(b"same ")


def test_empty_content_has_an_id():
    assert generate_document_id(b"") == "e3b0c44298fc1c14"
