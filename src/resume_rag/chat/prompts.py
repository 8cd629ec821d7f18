"""Prompt assembly for retrieval-augmented and plain chat.

The system instruction is configuration (``settings.system_prompt``, or
a per-request override); nothing here is specific to resume screening.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from resume_rag.retrieval.models import ConversationTurn, ScoredChunk

logger = logging.getLogger(__name__)

CONTEXT_SEPARATOR = "\n\n"


def select_context(
    hits: Sequence[ScoredChunk],
    max_chars: int,
) -> tuple[str, list[ScoredChunk]]:
    """Join retrieved chunk texts into a bounded context string.

    *hits* must already be in descending-score order.  Chunks are taken
    from the top until the next one would push the context past
    *max_chars*, so the lowest-scoring chunks are the ones dropped.  The
    best chunk is always kept even when it alone exceeds the cap.

    Returns
    -------
    tuple[str, list[ScoredChunk]]
        The context string and the hits it contains.
    """
    used: list[ScoredChunk] = []
    length = 0
    for hit in hits:
        extra = len(hit.chunk.text) + (len(CONTEXT_SEPARATOR) if used else 0)
        if used and length + extra > max_chars:
            break
        used.append(hit)
        length += extra

    if len(used) < len(hits):
        logger.info(
            "Context capped at %d chars: kept %d of %d chunk(s)",
            max_chars, len(used), len(hits),
        )
    return CONTEXT_SEPARATOR.join(h.chunk.text for h in used), used


def build_rag_prompt(
    question: str,
    context: str,
    *,
    system_prompt: str,
    history: Sequence[ConversationTurn] = (),
) -> list[ConversationTurn]:
    """Assemble the prompt for a retrieval-augmented generation call.

    Order: system instruction, conversation history, then a single user
    turn carrying the context block and the current question.
    """
    user_msg = (
        f"Context:\n{context}\n\n"
        f"Question: {question}\n\n"
        "Answer using only the context above."
    )
    return [
        ConversationTurn(role="system", content=system_prompt),
        *history,
        ConversationTurn(role="user", content=user_msg),
    ]


def build_chat_prompt(
    message: str,
    *,
    history: Sequence[ConversationTurn] = (),
    system_prompt: str | None = None,
) -> list[ConversationTurn]:
    """Prompt for plain chat without retrieval."""
    turns: list[ConversationTurn] = []
    if system_prompt:
        turns.append(ConversationTurn(role="system", content=system_prompt))
    turns.extend(history)
    turns.append(ConversationTurn(role="user", content=message))
    return turns
