"""Abstract base class for vector-index backends.

Adding a new backend (FAISS, an approximate-nearest-neighbour service …)
only requires subclassing :class:`VectorIndexBase` and implementing the
abstract methods.  The ingestion and chat layers are backend-agnostic.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence
from typing import Any

from resume_rag.retrieval.models import Chunk, IndexRecord, ScoredChunk


class VectorIndexBase(ABC):
    """Backend-agnostic, append-only vector index interface.

    Parameters
    ----------
    name:
        Logical name of the index, surfaced in status output.
    """

    def __init__(self, name: str = "default") -> None:
        self.name = name

    # -- required overrides ---------------------------------------------------

    @abstractmethod
    def append(self, records: Sequence[tuple[Sequence[float], Chunk]]) -> list[IndexRecord]:
        """Store ``(vector, chunk)`` pairs as one atomically visible unit.

        Returns the stored records with their assigned identifiers.
        """
        ...

    @abstractmethod
    def query(self, query_vector: Sequence[float], k: int) -> list[ScoredChunk]:
        """Return up to *k* chunks ordered by descending similarity.

        Raises
        ------
        NotInitializedError
            When nothing has been appended yet.
        """
        ...

    @property
    @abstractmethod
    def initialized(self) -> bool:
        """``True`` once the first record has been appended."""
        ...

    @abstractmethod
    def __len__(self) -> int: ...

    # -- optional overrides ---------------------------------------------------

    def delete(self, ids: list[int]) -> None:
        """Delete records by id.  Not supported unless a backend overrides it."""
        raise NotImplementedError(f"{type(self).__name__} does not support delete")

    def status(self) -> dict[str, Any]:
        """Operational summary used by the debug endpoint."""
        return {
            "initialized": self.initialized,
            "type": type(self).__name__,
            "records": len(self),
        }
