"""Retrieval-augmented chat orchestrator.

Stage contract
--------------
* Accepts the full :class:`ChatState` dict.
* Returns a *partial* dict with **only the keys that changed**.
* Raises a typed :mod:`resume_rag.exceptions` error on failure; nothing
  is retried here.

Only ``embed_query`` and ``generate`` call external collaborators, and
neither runs while the index lock is held (reads never take it).
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any

from resume_rag.chat.graph import build_graph
from resume_rag.chat.llm import GenerationProvider
from resume_rag.chat.prompts import build_chat_prompt, build_rag_prompt, select_context
from resume_rag.chat.state import ChatAnswer, ChatState, create_initial_state
from resume_rag.config import settings
from resume_rag.exceptions import NoCorpusError
from resume_rag.ingestion.embedder import EmbeddingProvider
from resume_rag.retrieval.base import VectorIndexBase
from resume_rag.retrieval.models import ConversationTurn, SourceCitation
from resume_rag.retrieval.retriever import SemanticRetriever

logger = logging.getLogger(__name__)


class RagChatOrchestrator:
    """Answers questions from the ingested corpus only.

    Parameters
    ----------
    index:
        Shared vector index populated by the ingestion coordinator.
    embedder:
        Provider used to embed the question.
    generator:
        Provider that turns the assembled prompt into an answer.
    default_top_k:
        Number of chunks retrieved when the caller does not say.
    max_context_chars:
        Cap on the concatenated context; see :func:`select_context`.
    system_prompt:
        Default system instruction, overridable per request.
    """

    def __init__(
        self,
        index: VectorIndexBase,
        embedder: EmbeddingProvider,
        generator: GenerationProvider,
        *,
        default_top_k: int | None = None,
        max_context_chars: int | None = None,
        system_prompt: str | None = None,
    ) -> None:
        self._index = index
        self._embedder = embedder
        self._generator = generator
        self.default_top_k = default_top_k or settings.retrieval_top_k
        self._retriever = SemanticRetriever(index, embedder, default_k=self.default_top_k)
        self.max_context_chars = max_context_chars or settings.max_context_chars
        self.system_prompt = system_prompt or settings.system_prompt
        self._graph = build_graph(self)

    # -- public API -----------------------------------------------------------

    def chat(
        self,
        question: str,
        history: Sequence[ConversationTurn] = (),
        top_k: int | None = None,
        *,
        system_prompt: str | None = None,
        temperature: float | None = None,
    ) -> ChatAnswer:
        """Run the pipeline once and return the answer with its sources.

        Raises
        ------
        NoCorpusError
            When nothing has been ingested yet.
        EmbeddingProviderError, GenerationProviderError
            When a collaborator fails.
        """
        logger.info("Chat request: %.200r", question)
        state = create_initial_state(
            question,
            history=list(history),
            top_k=top_k if top_k is not None else self.default_top_k,
            system_prompt=system_prompt or self.system_prompt,
            temperature=temperature,
        )
        result = self._graph.invoke(state)
        return ChatAnswer(
            answer=result["answer"],
            sources=[SourceCitation.from_scored(h) for h in result["context_hits"]],
        )

    # -- stages ---------------------------------------------------------------

    def check_corpus(self, state: ChatState) -> dict[str, Any]:
        """Fail fast instead of answering from general knowledge."""
        if not self._index.initialized:
            logger.error("No documents ingested yet!")
            raise NoCorpusError()
        return {"question": state["question"].strip()}

    def embed_query(self, state: ChatState) -> dict[str, Any]:
        return {"query_embedding": self._embedder.embed(state["question"])}

    def retrieve(self, state: ChatState) -> dict[str, Any]:
        hits = self._retriever.search_by_embedding(state["query_embedding"], k=state["top_k"])
        logger.info("Retrieved %d chunk(s) with k=%d", len(hits), state["top_k"])
        for idx, hit in enumerate(hits, 1):
            logger.debug("  Doc %d [%.3f]: %.100s", idx, hit.score, hit.chunk.text)
        return {"hits": hits}

    def build_prompt(self, state: ChatState) -> dict[str, Any]:
        context, used = select_context(state["hits"], self.max_context_chars)
        prompt = build_rag_prompt(
            state["question"],
            context,
            system_prompt=state["system_prompt"],
            history=state["history"],
        )
        return {"context": context, "context_hits": used, "prompt": prompt}

    def generate(self, state: ChatState) -> dict[str, Any]:
        return {"answer": self._generator.generate(state["prompt"], temperature=state["temperature"])}


class GeneralChatService:
    """Plain chat without retrieval (no corpus required)."""

    def __init__(self, generator: GenerationProvider) -> None:
        self._generator = generator

    def chat(
        self,
        message: str,
        history: Sequence[ConversationTurn] = (),
        *,
        system_prompt: str | None = None,
        temperature: float | None = None,
    ) -> str:
        prompt = build_chat_prompt(message, history=history, system_prompt=system_prompt)
        return self._generator.generate(prompt, temperature=temperature)
