"""Process-wide service wiring for the HTTP layer.

The vector index is the only shared mutable state; it and the services
around it are built lazily, exactly once per process, and handed to
routes through ``Depends`` so tests can swap them with
``app.dependency_overrides``.
"""

from __future__ import annotations

import logging
import threading

from resume_rag.chat.llm import GenerationProvider
from resume_rag.chat.orchestrator import GeneralChatService, RagChatOrchestrator
from resume_rag.ingestion.coordinator import IngestionCoordinator
from resume_rag.ingestion.embedder import EmbeddingProvider
from resume_rag.retrieval.vector_index import InMemoryVectorIndex

logger = logging.getLogger(__name__)


class ServiceContainer:
    """Lazily constructs and owns the singleton services."""

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._index: InMemoryVectorIndex | None = None
        self._embedder: EmbeddingProvider | None = None
        self._generator: GenerationProvider | None = None
        self._coordinator: IngestionCoordinator | None = None
        self._orchestrator: RagChatOrchestrator | None = None
        self._general_chat: GeneralChatService | None = None

    @property
    def index(self) -> InMemoryVectorIndex:
        with self._lock:
            if self._index is None:
                logger.info("Creating process-wide InMemoryVectorIndex")
                self._index = InMemoryVectorIndex()
            return self._index

    @property
    def embedder(self) -> EmbeddingProvider:
        with self._lock:
            if self._embedder is None:
                self._embedder = EmbeddingProvider()
            return self._embedder

    @property
    def generator(self) -> GenerationProvider:
        with self._lock:
            if self._generator is None:
                self._generator = GenerationProvider()
            return self._generator

    @property
    def coordinator(self) -> IngestionCoordinator:
        with self._lock:
            if self._coordinator is None:
                self._coordinator = IngestionCoordinator(self.index, self.embedder)
            return self._coordinator

    @property
    def orchestrator(self) -> RagChatOrchestrator:
        with self._lock:
            if self._orchestrator is None:
                self._orchestrator = RagChatOrchestrator(self.index, self.embedder, self.generator)
            return self._orchestrator

    @property
    def general_chat(self) -> GeneralChatService:
        with self._lock:
            if self._general_chat is None:
                self._general_chat = GeneralChatService(self.generator)
            return self._general_chat


container = ServiceContainer()


def get_vector_index() -> InMemoryVectorIndex:
    return container.index


def get_ingestion_coordinator() -> IngestionCoordinator:
    return container.coordinator


def get_chat_orchestrator() -> RagChatOrchestrator:
    return container.orchestrator


def get_general_chat_service() -> GeneralChatService:
    return container.general_chat
