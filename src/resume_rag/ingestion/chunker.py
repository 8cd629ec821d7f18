"""Recursive, offset-preserving text chunking.

The splitter walks a prioritized list of separators (paragraph, line,
sentence end, word boundary, single character) the same way LangChain's
``RecursiveCharacterTextSplitter`` does, but it works on ``(start, end)``
spans instead of strings.  Separators stay attached to the piece before
them, so the pieces tile the source exactly and every chunk can be traced
back to its offsets.

Merging then packs pieces into chunks of at most ``chunk_size`` characters.
Each chunk after the first starts exactly ``chunk_overlap`` characters
before the end of the previous one, so::

    chunks[0].text + "".join(c.text[chunk_overlap:] for c in chunks[1:]) == text
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Iterator, Sequence
from typing import TYPE_CHECKING, Any

from resume_rag.exceptions import ConfigurationError
from resume_rag.retrieval.models import Chunk

if TYPE_CHECKING:
    from langchain_core.documents import Document

# Regex separators in priority order; "" means "split between characters".
DEFAULT_SEPARATORS: tuple[str, ...] = (
    r"\n\n",
    r"\n",
    r"(?<=[.!?])\s+",
    r"\s+",
    "",
)

Span = tuple[int, int]


def validate_chunk_params(chunk_size: int, chunk_overlap: int) -> None:
    """Raise :class:`ConfigurationError` unless ``0 <= overlap < size``."""
    if chunk_size <= 0:
        raise ConfigurationError(
            f"chunk_size ({chunk_size}) must be positive",
            {"chunk_size": chunk_size},
        )
    if chunk_overlap < 0:
        raise ConfigurationError(
            f"chunk_overlap ({chunk_overlap}) must not be negative",
            {"chunk_overlap": chunk_overlap},
        )
    if chunk_overlap >= chunk_size:
        raise ConfigurationError(
            f"chunk_overlap ({chunk_overlap}) must be < chunk_size ({chunk_size})",
            {"chunk_size": chunk_size, "chunk_overlap": chunk_overlap},
        )


class ChunkSequence(Iterable[Chunk]):
    """Lazy, finite and restartable sequence of chunks for one document.

    Nothing is computed until iteration starts, and every ``iter()`` call
    re-runs the split from the beginning.
    """

    def __init__(
        self,
        text: str,
        chunk_size: int,
        chunk_overlap: int,
        metadata: dict[str, Any] | None = None,
        separators: Sequence[str] = DEFAULT_SEPARATORS,
    ) -> None:
        validate_chunk_params(chunk_size, chunk_overlap)
        self.text = text
        self.chunk_size = chunk_size
        self.chunk_overlap = chunk_overlap
        self.metadata = dict(metadata or {})
        self.separators = tuple(separators)

    def __iter__(self) -> Iterator[Chunk]:
        if not self.text:
            return
        # Pieces leave room for the overlap prefix of the next chunk.
        limit = self.chunk_size - self.chunk_overlap
        spans = _split_spans(self.text, 0, len(self.text), self.separators, limit)
        for start, end in _merge_spans(spans, self.chunk_size, self.chunk_overlap):
            yield Chunk(
                text=self.text[start:end],
                start_offset=start,
                end_offset=end,
                source_metadata=self.metadata,
            )

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(chars={len(self.text)}, "
            f"chunk_size={self.chunk_size}, chunk_overlap={self.chunk_overlap})"
        )


def split_text(
    text: str,
    chunk_size: int,
    chunk_overlap: int,
    metadata: dict[str, Any] | None = None,
) -> ChunkSequence:
    """Split *text* into overlapping chunks.

    Parameters
    ----------
    text:
        Plain document text.  Empty text yields an empty sequence.
    chunk_size:
        Maximum number of characters per chunk.
    chunk_overlap:
        Exact number of characters shared by consecutive chunks.
    metadata:
        Copied into every chunk's ``source_metadata``.

    Raises
    ------
    ConfigurationError
        Immediately, when ``chunk_overlap >= chunk_size``.
    """
    return ChunkSequence(text, chunk_size, chunk_overlap, metadata)


def chunk_documents(
    documents: list[Document],
    chunk_size: int = 1000,
    chunk_overlap: int = 200,
) -> list[Document]:
    """Split LangChain *documents* into smaller chunk documents.

    Each output document keeps its parent's metadata and gains
    ``start_index`` and ``chunk_index``.
    """
    from langchain_core.documents import Document

    validate_chunk_params(chunk_size, chunk_overlap)
    out: list[Document] = []
    for doc in documents:
        for idx, chunk in enumerate(split_text(doc.page_content, chunk_size, chunk_overlap)):
            out.append(
                Document(
                    page_content=chunk.text,
                    metadata={**doc.metadata, "start_index": chunk.start_offset, "chunk_index": idx},
                )
            )
    return out


# ── Internals ─────────────────────────────────────────────────────────


def _split_spans(
    text: str,
    start: int,
    end: int,
    separators: Sequence[str],
    limit: int,
) -> Iterator[Span]:
    """Yield contiguous spans covering ``text[start:end]``, each <= *limit*."""
    if end - start <= limit:
        yield (start, end)
        return

    for i, sep in enumerate(separators):
        if sep == "":
            break
        cuts = [
            m.end()
            for m in re.finditer(sep, text[start:end])
            if 0 < m.end() < end - start
        ]
        if not cuts:
            continue
        bounds = [start, *(start + c for c in cuts), end]
        remaining = separators[i + 1 :]
        for lo, hi in zip(bounds, bounds[1:]):
            if hi - lo <= limit:
                yield (lo, hi)
            else:
                yield from _split_spans(text, lo, hi, remaining, limit)
        return

    # Character level: fixed windows.
    for lo in range(start, end, limit):
        yield (lo, min(lo + limit, end))


def _merge_spans(spans: Iterable[Span], chunk_size: int, chunk_overlap: int) -> Iterator[Span]:
    """Greedily pack adjacent spans into overlapping chunk spans."""
    chunk_start = 0
    chunk_end = 0
    for _, piece_end in spans:
        if piece_end - chunk_start <= chunk_size:
            chunk_end = piece_end
            continue
        yield (chunk_start, chunk_end)
        chunk_start = chunk_end - chunk_overlap
        chunk_end = piece_end
    if chunk_end > chunk_start:
        yield (chunk_start, chunk_end)
