"""
Chat — retrieval-augmented answering over the ingested corpus.

The pipeline is a LangGraph state machine of explicit, typed stages
(check corpus → embed query → retrieve → build prompt → generate) that
can be exercised locally with fake embedding and chat models.

Public API
----------
- :class:`RagChatOrchestrator` — answer a question with cited sources.
- :class:`GeneralChatService` — plain chat without retrieval.
- :class:`GenerationProvider` — wrapper around a LangChain chat model.
- :class:`ChatAnswer`, :class:`ChatState` — result and state types.
"""

from resume_rag.chat.llm import GenerationProvider, get_llm
from resume_rag.chat.orchestrator import GeneralChatService, RagChatOrchestrator
from resume_rag.chat.state import ChatAnswer, ChatState

__all__ = [
    "ChatAnswer",
    "ChatState",
    "GeneralChatService",
    "GenerationProvider",
    "RagChatOrchestrator",
    "get_llm",
]
