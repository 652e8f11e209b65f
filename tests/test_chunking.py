from __future__ import annotations

from docindex.ingestion.chunking import CHUNK_OVERLAP, CHUNK_SIZE, generate_chunks


def _text(length: int) -> str:
    return "".join(chr(ord("a") + i % 26) for i in range(length))


def test_empty_text_has_no_chunks():
    assert generate_chunks("doc", "") == []


def test_short_text_is_one_chunk():
    chunks = generate_chunks("doc", "hello")
    assert len(chunks) == 1
    assert chunks[0].id == "doc-chunk-0"
    assert chunks[0].content == "hello"
    assert chunks[0].start_position == 0
    assert chunks[0].length == 5


def test_exact_chunk_size_is_one_chunk():
    assert len(generate_chunks("doc", _text(CHUNK_SIZE))) == 1


def test_chunks_overlap_and_cover_text():
    text = _text(2500)
    chunks = generate_chunks("doc", text)

    assert [chunk.start_position for chunk in chunks] == [0, 800, 1600]
    assert [chunk.length for chunk in chunks] == [1000, 1000, 900]
    assert chunks[-1].end_position == len(text)
    for previous, current in zip(chunks, chunks[1:]):
        assert previous.end_position - current.start_position == CHUNK_OVERLAP
        assert text[current.start_position : previous.end_position] == previous.content[-CHUNK_OVERLAP:]
    for chunk in chunks:
        assert chunk.content == text[chunk.start_position : chunk.end_position]
        assert chunk.document_id == "doc"


def test_chunk_ids_follow_index():
    chunks = generate_chunks("abc123", _text(1900))
    assert [chunk.index for chunk in chunks] == [0, 1, 2]
    assert [chunk.id for chunk in chunks] == ["abc123-chunk-0", "abc123-chunk-1", "abc123-chunk-2"]
