"""Embedding provider — one seam in front of any LangChain embeddings backend."""

from __future__ import annotations

import logging
import time
from collections.abc import Sequence
from typing import TYPE_CHECKING

from resume_rag.config import settings
from resume_rag.exceptions import EmbeddingProviderError

if TYPE_CHECKING:
    from langchain_core.embeddings import Embeddings

logger = logging.getLogger(__name__)


def get_embedding_function() -> Embeddings:
    """Return the configured LangChain embeddings backend.

    ``openai`` uses ``OpenAIEmbeddings`` (honouring ``llm_base_url`` for
    OpenAI-compatible servers); ``huggingface`` runs a local
    sentence-transformer through ``HuggingFaceEmbeddings``.
    """
    if settings.embedding_backend == "huggingface":
        from langchain_huggingface import HuggingFaceEmbeddings

        logger.info("Using HuggingFace embeddings: %s", settings.hf_embedding_model)
        return HuggingFaceEmbeddings(model_name=settings.hf_embedding_model)

    from langchain_openai import OpenAIEmbeddings

    kwargs: dict = {"model": settings.embedding_model}
    if settings.llm_base_url:
        kwargs["base_url"] = settings.llm_base_url
        kwargs["api_key"] = settings.openai_api_key or "EMPTY"
    else:
        kwargs["api_key"] = settings.openai_api_key
    logger.info("Using OpenAI embeddings: %s", settings.embedding_model)
    return OpenAIEmbeddings(**kwargs)


class EmbeddingProvider:
    """Maps text to fixed-length vectors for both chunks and queries.

    Parameters
    ----------
    backend:
        Any LangChain ``Embeddings`` implementation.  When *None*, the
        backend from :func:`get_embedding_function` is used.
    batch_size:
        Number of texts sent per ``embed_documents`` call.
    """

    def __init__(self, backend: Embeddings | None = None, *, batch_size: int | None = None) -> None:
        self._backend = backend if backend is not None else get_embedding_function()
        self.batch_size = batch_size or settings.embedding_batch_size

    @property
    def backend_name(self) -> str:
        return type(self._backend).__name__

    def embed(self, text: str) -> list[float]:
        """Embed a single query string."""
        try:
            vector = self._backend.embed_query(text)
        except Exception as exc:
            logger.exception("Query embedding failed (%s)", self.backend_name)
            raise EmbeddingProviderError(
                f"Embedding provider failed: {exc}",
                {"backend": self.backend_name},
            ) from exc
        if not vector:
            raise EmbeddingProviderError("Embedding provider returned an empty vector")
        return list(vector)

    def embed_batch(self, texts: Sequence[str]) -> list[list[float]]:
        """Embed *texts* in batches, preserving order.

        Raises
        ------
        EmbeddingProviderError
            When the backend fails or returns a different number of vectors
            than texts it was given.
        """
        vectors: list[list[float]] = []
        if not texts:
            return vectors

        t0 = time.monotonic()
        for start in range(0, len(texts), self.batch_size):
            batch = list(texts[start : start + self.batch_size])
            try:
                result = self._backend.embed_documents(batch)
            except Exception as exc:
                logger.exception(
                    "Batch embedding failed at offset %d (%s)", start, self.backend_name
                )
                raise EmbeddingProviderError(
                    f"Embedding provider failed: {exc}",
                    {"backend": self.backend_name, "batch_start": start},
                ) from exc
            if len(result) != len(batch):
                raise EmbeddingProviderError(
                    f"Embedding provider returned {len(result)} vectors for {len(batch)} texts",
                    {"backend": self.backend_name, "batch_start": start},
                )
            vectors.extend(list(v) for v in result)
            logger.debug("  embedded %d / %d", len(vectors), len(texts))

        logger.info(
            "Embedded %d texts (dim=%d) in %.2fs",
            len(vectors), len(vectors[0]), time.monotonic() - t0,
        )
        return vectors
