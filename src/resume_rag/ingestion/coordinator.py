"""Ingestion coordinator — chunk, embed and index one document at a time.

Pipeline for a single document::

    text ─► normalise ─► split_text ─► EmbeddingProvider.embed_batch ─► index.append

Embedding happens with no index lock held; the finished records are then
handed to the index in **one** ``append`` call so a concurrent query sees
either none or all of the document's chunks.
"""

from __future__ import annotations

import logging
import re
import unicodedata
from collections.abc import Iterable, Sequence
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field

from resume_rag.config import settings
from resume_rag.exceptions import EmptyDocumentError, RagError
from resume_rag.ingestion.chunker import split_text, validate_chunk_params
from resume_rag.ingestion.embedder import EmbeddingProvider
from resume_rag.ingestion.loader import extract_text
from resume_rag.retrieval.base import VectorIndexBase

logger = logging.getLogger(__name__)


class IngestionResult(BaseModel):
    """Statistics for one ingested document."""

    chunks_count: int
    ingested: bool = True
    message: str = ""


class FileIngestionOutcome(BaseModel):
    """Per-file entry of a batch ingestion."""

    file: str
    chunks: int = 0
    error: str | None = None


class BatchIngestionResult(BaseModel):
    """Aggregate of :meth:`IngestionCoordinator.ingest_many`."""

    total_chunks: int = 0
    results: list[FileIngestionOutcome] = Field(default_factory=list)

    @property
    def failed(self) -> list[FileIngestionOutcome]:
        return [r for r in self.results if r.error is not None]


def _normalise(text: str) -> str:
    """Unicode NFC, unify line endings, strip control chars."""
    text = unicodedata.normalize("NFC", text)
    text = text.replace("\r\n", "\n").replace("\r", "\n")
    text = re.sub(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]", "", text)  # ctrl chars
    return text.strip()


class IngestionCoordinator:
    """Orchestrates chunking, embedding and index insertion.

    Parameters
    ----------
    index:
        The shared vector index that receives the records.
    embedder:
        Provider used for chunk embeddings.
    chunk_size, chunk_overlap:
        Defaults applied when :meth:`ingest` is called without overrides.
    """

    def __init__(
        self,
        index: VectorIndexBase,
        embedder: EmbeddingProvider,
        *,
        chunk_size: int | None = None,
        chunk_overlap: int | None = None,
    ) -> None:
        self.chunk_size = chunk_size if chunk_size is not None else settings.chunk_size
        self.chunk_overlap = chunk_overlap if chunk_overlap is not None else settings.chunk_overlap
        validate_chunk_params(self.chunk_size, self.chunk_overlap)
        self._index = index
        self._embedder = embedder

    @property
    def index(self) -> VectorIndexBase:
        return self._index

    def ingest(
        self,
        document_text: str,
        source_metadata: dict[str, Any] | None = None,
        chunk_size: int | None = None,
        chunk_overlap: int | None = None,
    ) -> IngestionResult:
        """Chunk, embed and index *document_text*.

        Chunk offsets refer to the normalised text (NFC, ``\\n`` line
        endings, no control characters, stripped).

        Raises
        ------
        EmptyDocumentError
            When the text is empty or whitespace only.
        ConfigurationError
            When the chunk parameters are invalid.
        EmbeddingProviderError
            When embedding fails; nothing is appended in that case.
        """
        if not document_text or not document_text.strip():
            raise EmptyDocumentError("Document text is empty", {"metadata": source_metadata or {}})

        size = chunk_size if chunk_size is not None else self.chunk_size
        overlap = chunk_overlap if chunk_overlap is not None else self.chunk_overlap
        text = _normalise(document_text)

        chunks = [c for c in split_text(text, size, overlap, source_metadata) if c.text.strip()]
        if not chunks:
            logger.warning(
                "Document produced no chunks after normalisation; nothing ingested (metadata=%s)",
                source_metadata,
            )
            return IngestionResult(
                chunks_count=0,
                ingested=False,
                message="Document contained no indexable text after normalisation",
            )
        logger.info("Created %d chunks (chunk_size=%d, chunk_overlap=%d)", len(chunks), size, overlap)

        vectors = self._embedder.embed_batch([c.text for c in chunks])
        self._index.append(list(zip(vectors, chunks)))

        return IngestionResult(
            chunks_count=len(chunks),
            message=f"Successfully ingested {len(chunks)} chunks",
        )

    def ingest_file(
        self,
        path: str | Path,
        metadata: dict[str, Any] | None = None,
        *,
        original_name: str | None = None,
    ) -> IngestionResult:
        """Extract the text of *path* and :meth:`ingest` it."""
        path = Path(path)
        name = original_name or path.name
        logger.info("Starting ingestion for: %s", name)

        extracted = extract_text(path, original_name=original_name)
        result = self.ingest(extracted.text, {**extracted.metadata, **(metadata or {})})
        if result.ingested:
            result.message = f"Successfully ingested {result.chunks_count} chunks from {name}"
        return result

    def ingest_many(
        self,
        paths: Iterable[str | Path],
        metadata: dict[str, Any] | None = None,
        *,
        names: Sequence[str] | None = None,
    ) -> BatchIngestionResult:
        """Ingest several files; one failing file never aborts the others.

        *names* optionally gives the user-facing name of each path (e.g. the
        original upload name of a temporary file).
        """
        batch = BatchIngestionResult()
        for i, path in enumerate(paths):
            original = names[i] if names is not None else None
            name = original or Path(path).name
            try:
                result = self.ingest_file(path, metadata, original_name=original)
            except Exception as exc:
                logger.exception("Error ingesting %s", name)
                message = exc.message if isinstance(exc, RagError) else str(exc)
                batch.results.append(FileIngestionOutcome(file=name, error=message))
                continue
            batch.results.append(FileIngestionOutcome(file=name, chunks=result.chunks_count))
            batch.total_chunks += result.chunks_count

        logger.info(
            "Batch ingestion finished: %d file(s), %d failed, %d total chunks, index records=%d",
            len(batch.results), len(batch.failed), batch.total_chunks, len(self._index),
        )
        return batch
