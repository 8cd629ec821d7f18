"""Shared pytest configuration and fixtures.

Everything here runs without network access: embeddings come from a
deterministic bag-of-words fake and generation from a recording stub.
"""

from __future__ import annotations

import re
import time
import zlib
from collections.abc import Sequence

import pytest
from langchain_core.embeddings import Embeddings

from resume_rag.chat.orchestrator import RagChatOrchestrator
from resume_rag.ingestion.coordinator import IngestionCoordinator
from resume_rag.ingestion.embedder import EmbeddingProvider
from resume_rag.retrieval.models import ConversationTurn
from resume_rag.retrieval.vector_index import InMemoryVectorIndex

_STOPWORDS = {"a", "an", "the", "of", "is", "in", "to", "and", "what", "does", "do", "have", "has"}


def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers."""
    config.addinivalue_line("markers", "integration: marks tests requiring external services")


# ── Fakes ──────────────────────────────────────────────────────────────


class KeywordEmbeddings(Embeddings):
    """Hashes content words into a fixed-size count vector.

    Texts sharing words get a high cosine similarity, which is enough to
    make retrieval assertions meaningful without a real model.
    """

    def __init__(self, dim: int = 256, delay: float = 0.0) -> None:
        self.dim = dim
        self.delay = delay
        self.document_calls: list[list[str]] = []

    def _vector(self, text: str) -> list[float]:
        vec = [0.0] * self.dim
        for token in re.findall(r"[a-z0-9]+", text.lower()):
            if token in _STOPWORDS:
                continue
            vec[zlib.crc32(token.encode()) % self.dim] += 1.0
        return vec

    def embed_documents(self, texts: list[str]) -> list[list[float]]:
        self.document_calls.append(list(texts))
        if self.delay:
            time.sleep(self.delay)
        return [self._vector(t) for t in texts]

    def embed_query(self, text: str) -> list[float]:
        return self._vector(text)


class RecordingGenerator:
    """Stands in for :class:`GenerationProvider`; remembers every prompt."""

    def __init__(self, answer: str = "The candidate is a strong match.") -> None:
        self.answer = answer
        self.prompts: list[list[ConversationTurn]] = []
        self.temperatures: list[float | None] = []

    def generate(self, turns: Sequence[ConversationTurn], *, temperature: float | None = None) -> str:
        self.prompts.append(list(turns))
        self.temperatures.append(temperature)
        return self.answer


# ── Fixtures ───────────────────────────────────────────────────────────


@pytest.fixture()
def keyword_embeddings() -> KeywordEmbeddings:
    return KeywordEmbeddings()


@pytest.fixture()
def embedder(keyword_embeddings: KeywordEmbeddings) -> EmbeddingProvider:
    return EmbeddingProvider(keyword_embeddings, batch_size=16)


@pytest.fixture()
def index() -> InMemoryVectorIndex:
    return InMemoryVectorIndex()


@pytest.fixture()
def generator() -> RecordingGenerator:
    return RecordingGenerator()


@pytest.fixture()
def coordinator(index: InMemoryVectorIndex, embedder: EmbeddingProvider) -> IngestionCoordinator:
    return IngestionCoordinator(index, embedder, chunk_size=1000, chunk_overlap=200)


@pytest.fixture()
def orchestrator(
    index: InMemoryVectorIndex,
    embedder: EmbeddingProvider,
    generator: RecordingGenerator,
) -> RagChatOrchestrator:
    return RagChatOrchestrator(
        index,
        embedder,
        generator,  # type: ignore[arg-type]
        default_top_k=4,
        max_context_chars=12000,
        system_prompt="Screen the resume.",
    )
