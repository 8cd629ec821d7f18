"""Unit tests for the recursive, offset-preserving chunker."""

from __future__ import annotations

import pytest
from langchain_core.documents import Document

from resume_rag.exceptions import ConfigurationError
from resume_rag.ingestion.chunker import ChunkSequence, chunk_documents, split_text

RESUME = (
    "Jane Doe\nSenior Backend Engineer\n\n"
    "Summary. Candidate has 5 years of Python experience building APIs. "
    "She led a team of four engineers! Did she ship on time? Always.\n\n"
    "Skills\nPython, FastAPI, PostgreSQL, Kubernetes, Terraform.\n"
    "Experience\nAcme Corp (2019-2024): designed ingestion pipelines and "
    "vector search services handling millions of requests per day.\n\n"
    "Education\nBSc Computer Science, University of Somewhere."
)

SAMPLES = [
    RESUME,
    "x" * 1000,
    "word " * 300,
    "Línea uno.\nLínea dos — con acentos.\n\nPárrafo nuevo. ¿Pregunta? Sí!",
    "a\n\n\n\nb\n\n\n\nc" * 20,
]


def _reconstruct(chunks, overlap: int) -> str:
    if not chunks:
        return ""
    return chunks[0].text + "".join(c.text[overlap:] for c in chunks[1:])


# ── Parameter validation ───────────────────────────────────────────────


@pytest.mark.parametrize(("size", "overlap"), [(10, 10), (10, 20), (0, 0), (10, -1)])
def test_invalid_parameters_raise_immediately(size: int, overlap: int) -> None:
    """Bad parameters fail at call time, before any iteration."""
    with pytest.raises(ConfigurationError):
        split_text("some text", size, overlap)


def test_empty_text_yields_empty_sequence() -> None:
    assert list(split_text("", 100, 10)) == []


# ── Core properties ────────────────────────────────────────────────────


@pytest.mark.parametrize("text", SAMPLES)
@pytest.mark.parametrize(("size", "overlap"), [(50, 10), (120, 0), (200, 40), (37, 36)])
def test_chunks_respect_size_and_reconstruct_text(text: str, size: int, overlap: int) -> None:
    chunks = list(split_text(text, size, overlap))

    assert chunks
    assert all(len(c.text) <= size for c in chunks)
    assert _reconstruct(chunks, overlap) == text


@pytest.mark.parametrize("text", SAMPLES)
def test_offsets_point_back_into_source(text: str) -> None:
    chunks = list(split_text(text, 80, 16))
    for chunk in chunks:
        assert 0 <= chunk.start_offset < chunk.end_offset <= len(text)
        assert text[chunk.start_offset : chunk.end_offset] == chunk.text
    starts = [c.start_offset for c in chunks]
    assert starts == sorted(starts)
    assert len(set(starts)) == len(starts)


def test_scenario_fifty_ten_on_120_chars() -> None:
    """chunk_size=50 / overlap=10 on 120 chars: ordered starts, 10-char overlaps."""
    text = ("The quick brown fox jumps over the lazy dog. " * 3)[:120]
    assert len(text) == 120

    chunks = list(split_text(text, 50, 10))

    assert len(chunks) >= 3
    for prev, nxt in zip(chunks, chunks[1:]):
        assert nxt.start_offset >= prev.start_offset
        assert prev.end_offset - nxt.start_offset == 10
        assert prev.text[-10:] == nxt.text[:10]


def test_short_text_is_single_chunk() -> None:
    chunks = list(split_text("Candidate has 5 years of Python experience.", 1000, 200))
    assert len(chunks) == 1
    assert chunks[0].start_offset == 0
    assert chunks[0].end_offset == 43


# ── Separator priority ─────────────────────────────────────────────────


def test_prefers_paragraph_boundaries() -> None:
    text = "A" * 30 + "\n\n" + "B" * 30
    chunks = list(split_text(text, 40, 0))
    assert [c.text for c in chunks] == ["A" * 30 + "\n\n", "B" * 30]


def test_prefers_sentence_boundaries_over_words() -> None:
    text = "First sentence here. Second sentence here. Third one."
    chunks = list(split_text(text, 25, 0))
    assert [c.text for c in chunks] == [
        "First sentence here. ",
        "Second sentence here. ",
        "Third one.",
    ]


def test_falls_back_to_characters_without_separators() -> None:
    chunks = list(split_text("z" * 95, 30, 5))
    assert all(len(c.text) <= 30 for c in chunks)
    assert _reconstruct(chunks, 5) == "z" * 95


# ── Sequence behaviour ─────────────────────────────────────────────────


def test_sequence_is_lazy_and_restartable() -> None:
    seq = split_text(RESUME, 60, 12)
    assert isinstance(seq, ChunkSequence)

    first = next(iter(seq))
    assert first.start_offset == 0
    assert list(seq) == list(seq)


def test_metadata_is_attached_to_every_chunk() -> None:
    meta = {"source": "resume.txt", "source_kind": "txt"}
    chunks = list(split_text(RESUME, 60, 12, metadata=meta))
    assert all(c.source_metadata == meta for c in chunks)


def test_chunks_are_immutable() -> None:
    chunk = next(iter(split_text("hello world", 50, 0)))
    with pytest.raises(Exception):
        chunk.text = "changed"  # type: ignore[misc]


# ── LangChain Document adapter ─────────────────────────────────────────


def test_chunk_documents_splits_long_text() -> None:
    """A document longer than chunk_size should be split."""
    long_text = "word " * 500  # ~2500 chars
    docs = [Document(page_content=long_text, metadata={"source": "test"})]
    chunks = chunk_documents(docs, chunk_size=256, chunk_overlap=32)
    assert len(chunks) > 1
    assert [c.metadata["chunk_index"] for c in chunks] == list(range(len(chunks)))


def test_chunk_documents_preserves_metadata() -> None:
    """Metadata from the source document should be preserved in chunks."""
    docs = [Document(page_content="Short text.", metadata={"source": "test.md"})]
    chunks = chunk_documents(docs, chunk_size=256, chunk_overlap=0)
    assert all(c.metadata.get("source") == "test.md" for c in chunks)
    assert chunks[0].metadata["start_index"] == 0


def test_chunk_documents_empty_input() -> None:
    """An empty list should return an empty list."""
    assert chunk_documents([]) == []
