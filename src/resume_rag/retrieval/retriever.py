"""Semantic retriever — query embedding plus top-k lookup.

This is the read path shared by the chat orchestrator and any other
caller (evaluation scripts, notebooks, tests)::

    from resume_rag.retrieval.retriever import SemanticRetriever

    retriever = SemanticRetriever(index, embedder)
    for hit in retriever.search("What Python experience does the candidate have?", k=3):
        print(hit.score, hit.chunk.text[:80])
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import TYPE_CHECKING

from resume_rag.retrieval.base import VectorIndexBase
from resume_rag.retrieval.models import ScoredChunk

if TYPE_CHECKING:
    from resume_rag.ingestion.embedder import EmbeddingProvider

logger = logging.getLogger(__name__)


class SemanticRetriever:
    """High-level retriever over any :class:`VectorIndexBase`.

    Parameters
    ----------
    index:
        The vector index to search.
    embedder:
        Provider used to embed query text.
    default_k:
        Default number of results returned by :meth:`search`.
    score_threshold:
        Minimum similarity score; results below this are discarded.
        ``None`` keeps every hit.
    """

    def __init__(
        self,
        index: VectorIndexBase,
        embedder: EmbeddingProvider,
        *,
        default_k: int = 4,
        score_threshold: float | None = None,
    ) -> None:
        self._index = index
        self._embedder = embedder
        self.default_k = default_k
        self.score_threshold = score_threshold

    @property
    def index(self) -> VectorIndexBase:
        return self._index

    def search(self, query: str, *, k: int | None = None) -> list[ScoredChunk]:
        """Embed *query* and return the top-*k* chunks.

        The embedding call happens before the index is touched, so no
        index state is held while the provider is working.
        """
        embedding = self._embedder.embed(query)
        return self.search_by_embedding(embedding, k=k)

    def search_by_embedding(self, embedding: Sequence[float], *, k: int | None = None) -> list[ScoredChunk]:
        """Same as :meth:`search` but accepts a pre-computed embedding."""
        k = k if k is not None else self.default_k
        hits = self._index.query(embedding, k)
        if self.score_threshold is not None:
            kept = [h for h in hits if h.score >= self.score_threshold]
            if len(kept) < len(hits):
                logger.debug(
                    "Dropped %d hit(s) below score threshold %.3f",
                    len(hits) - len(kept), self.score_threshold,
                )
            hits = kept
        return hits
