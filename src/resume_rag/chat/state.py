"""Chat pipeline state — shared across all graph nodes.

Each field is written by exactly one node; the docstring names it so new
stages can be slotted in without guessing what is already available.
"""

from __future__ import annotations

from typing import Any, TypedDict

from pydantic import BaseModel, Field

from resume_rag.retrieval.models import ConversationTurn, ScoredChunk, SourceCitation


class ChatState(TypedDict):
    """Typed state flowing through the retrieval-augmented chat graph.

    Attributes
    ----------
    question:
        The user's current natural-language question (input).
    history:
        Prior conversation turns supplied by the caller (input).
    top_k:
        Number of chunks to retrieve (input).
    system_prompt:
        System instruction for this request (input).
    temperature:
        Sampling temperature override, or ``None`` for the model default (input).
    query_embedding:
        Vector for ``question`` (``embed_query``).
    hits:
        Retrieved chunks in descending-score order (``retrieve``).
    context:
        Bounded context block (``build_prompt``).
    context_hits:
        The subset of ``hits`` that fit in ``context`` (``build_prompt``).
    prompt:
        Fully assembled prompt turns (``build_prompt``).
    answer:
        Generated answer text (``generate``).
    """

    question: str
    history: list[ConversationTurn]
    top_k: int
    system_prompt: str
    temperature: float | None
    query_embedding: list[float]
    hits: list[ScoredChunk]
    context: str
    context_hits: list[ScoredChunk]
    prompt: list[ConversationTurn]
    answer: str


def create_initial_state(
    question: str,
    *,
    history: list[ConversationTurn] | None = None,
    top_k: int,
    system_prompt: str,
    temperature: float | None = None,
) -> dict[str, Any]:
    """Build the initial state dict for ``graph.invoke()``."""
    return {
        "question": question,
        "history": list(history or []),
        "top_k": top_k,
        "system_prompt": system_prompt,
        "temperature": temperature,
        "query_embedding": [],
        "hits": [],
        "context": "",
        "context_hits": [],
        "prompt": [],
        "answer": "",
    }


class ChatAnswer(BaseModel):
    """Result of one chat request."""

    answer: str
    sources: list[SourceCitation] = Field(default_factory=list)
