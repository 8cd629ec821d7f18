"""
Retrieval — vector index, similarity search and result models.

The index sits behind a small abstract interface so that the ingestion
and chat layers never need to know which store backs retrieval.

Public surface
--------------
- :class:`InMemoryVectorIndex` — default append-only, lock-guarded index.
- :class:`VectorIndexBase` — abstract backend (subclass for ANN stores).
- :class:`SemanticRetriever` — query embedding + top-k lookup.
- :class:`Chunk`, :class:`IndexRecord`, :class:`ScoredChunk` — data models.
- :func:`cosine_similarity` — the scoring function used by the index.
"""

from resume_rag.retrieval.base import VectorIndexBase
from resume_rag.retrieval.models import (
    Chunk,
    ConversationTurn,
    IndexRecord,
    RetrievalResult,
    ScoredChunk,
    SourceCitation,
)
from resume_rag.retrieval.retriever import SemanticRetriever
from resume_rag.retrieval.vector_index import InMemoryVectorIndex, cosine_similarity

__all__ = [
    "Chunk",
    "ConversationTurn",
    "InMemoryVectorIndex",
    "IndexRecord",
    "RetrievalResult",
    "ScoredChunk",
    "SemanticRetriever",
    "SourceCitation",
    "VectorIndexBase",
    "cosine_similarity",
]
