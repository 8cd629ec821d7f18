"""LangGraph graph definition — the retrieval-augmented chat pipeline.

This module wires the stages of :class:`~resume_rag.chat.orchestrator.RagChatOrchestrator`
into a compiled :class:`StateGraph`.  The flow is strictly sequential;
each stage raises a typed error instead of passing a failure flag along,
so ``graph.invoke()`` either returns a complete state or raises.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from langgraph.graph import END, StateGraph

from resume_rag.chat.state import ChatState

if TYPE_CHECKING:
    from resume_rag.chat.orchestrator import RagChatOrchestrator


def build_graph(pipeline: RagChatOrchestrator):
    """Construct and return the compiled chat graph.

    Graph topology::

        ┌──────────────┐
        │ check_corpus │   ← NoCorpusError before any ingestion
        └──────┬───────┘
               ▼
        ┌──────────────┐
        │ embed_query  │   ← EmbeddingProviderError
        └──────┬───────┘
               ▼
        ┌──────────────┐
        │   retrieve   │   ← top-k cosine search
        └──────┬───────┘
               ▼
        ┌──────────────┐
        │ build_prompt │   ← bounded context + history + question
        └──────┬───────┘
               ▼
        ┌──────────────┐
        │   generate   │   ← GenerationProviderError
        └──────┬───────┘
               ▼
            [ END ]
    """
    workflow = StateGraph(ChatState)

    # -- Nodes ---------------------------------------------------------------
    workflow.add_node("check_corpus", pipeline.check_corpus)
    workflow.add_node("embed_query", pipeline.embed_query)
    workflow.add_node("retrieve", pipeline.retrieve)
    workflow.add_node("build_prompt", pipeline.build_prompt)
    workflow.add_node("generate", pipeline.generate)

    # -- Edges ---------------------------------------------------------------
    workflow.set_entry_point("check_corpus")
    workflow.add_edge("check_corpus", "embed_query")
    workflow.add_edge("embed_query", "retrieve")
    workflow.add_edge("retrieve", "build_prompt")
    workflow.add_edge("build_prompt", "generate")
    workflow.add_edge("generate", END)

    return workflow.compile()
