"""Fixed-window text chunking with overlap."""

from __future__ import annotations

from typing import List

from docindex.models import DocumentChunk

CHUNK_SIZE = 1000
CHUNK_OVERLAP = 200

if not 0 <= CHUNK_OVERLAP < CHUNK_SIZE:  # pragma: no cover - guards the constants above
    raise ValueError("CHUNK_OVERLAP must be smaller than CHUNK_SIZE")

CHUNK_STRIDE = CHUNK_SIZE - CHUNK_OVERLAP


def chunk_id(document_id: str, index: int) -> str:
    return f"{document_id}-chunk-{index}"


def generate_chunks(document_id: str, text: str) -> List[DocumentChunk]:
    """Split ``text`` into windows of CHUNK_SIZE characters every CHUNK_STRIDE.

    The last window is truncated to the end of the text. Empty text yields
    no chunks.
    """

    chunks: List[DocumentChunk] = []
    text_length = len(text)
    start = 0
    while start < text_length:
        end = min(start + CHUNK_SIZE, text_length)
        index = len(chunks)
        chunks.append(
            DocumentChunk(
                id=chunk_id(document_id, index),
                document_id=document_id,
                index=index,
                start_position=start,
                length=end - start,
                content=text[start:end],
            ),
        )
        if end >= text_length:
            break
        start += CHUNK_STRIDE
    return chunks
