"""In-memory, append-only vector index with exact cosine search.

Concurrency model
-----------------
All state lives in one immutable :class:`_Snapshot` (records, matrix,
norms).  Writers build the next snapshot while holding ``_write_lock`` and
publish it with a single attribute assignment; readers grab the current
reference once and never lock.  A query therefore observes either the
state before an append or the state after it, never a partial batch, and
concurrent appends cannot lose records.

Search is a linear scan (O(n·d)) which is fine for a single-process
corpus; an approximate-nearest-neighbour backend can replace it behind
:class:`~resume_rag.retrieval.base.VectorIndexBase`.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

import numpy as np

from resume_rag.exceptions import NotInitializedError, VectorDimensionError
from resume_rag.retrieval.base import VectorIndexBase
from resume_rag.retrieval.models import Chunk, IndexRecord, ScoredChunk

logger = logging.getLogger(__name__)


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """Cosine of the angle between *a* and *b*; ``0.0`` if either has zero norm."""
    va = np.asarray(a, dtype=np.float64)
    vb = np.asarray(b, dtype=np.float64)
    if va.shape != vb.shape:
        raise VectorDimensionError(va.shape[-1], vb.shape[-1])
    denom = float(np.linalg.norm(va) * np.linalg.norm(vb))
    if denom == 0.0:
        return 0.0
    return float(np.clip(np.dot(va, vb) / denom, -1.0, 1.0))


@dataclass(frozen=True)
class _Snapshot:
    records: tuple[IndexRecord, ...]
    matrix: np.ndarray
    norms: np.ndarray

    @property
    def dimension(self) -> int | None:
        return self.matrix.shape[1] if self.records else None


_EMPTY = _Snapshot(records=(), matrix=np.empty((0, 0)), norms=np.empty(0))


class InMemoryVectorIndex(VectorIndexBase):
    """Process-local vector index.

    Records are append-only and identifiers are assigned monotonically
    starting at 0; they are never reused.  There is no teardown; the index
    lives as long as the process.
    """

    def __init__(self, name: str = "default") -> None:
        super().__init__(name)
        self._write_lock = threading.Lock()
        self._snapshot: _Snapshot = _EMPTY
        self._next_id = 0

    # -- VectorIndexBase overrides --------------------------------------------

    @property
    def initialized(self) -> bool:
        return bool(self._snapshot.records)

    @property
    def dimension(self) -> int | None:
        return self._snapshot.dimension

    def __len__(self) -> int:
        return len(self._snapshot.records)

    def append(self, records: Sequence[tuple[Sequence[float], Chunk]]) -> list[IndexRecord]:
        if not records:
            return []

        vectors = [np.asarray(vec, dtype=np.float64) for vec, _ in records]
        dim = vectors[0].shape[0] if vectors[0].ndim == 1 else 0
        if dim == 0:
            raise VectorDimensionError(1, 0)
        for vec in vectors:
            if vec.ndim != 1 or vec.shape[0] != dim:
                raise VectorDimensionError(dim, vec.shape[-1] if vec.ndim else 0)
        batch = np.vstack(vectors)

        with self._write_lock:
            current = self._snapshot
            if current.dimension is not None and current.dimension != dim:
                raise VectorDimensionError(current.dimension, dim)

            first_id = self._next_id
            new_records = tuple(
                IndexRecord(id=first_id + i, vector=tuple(vec.tolist()), chunk=chunk)
                for i, (vec, (_, chunk)) in enumerate(zip(vectors, records))
            )
            if current.records:
                matrix = np.vstack([current.matrix, batch])
                norms = np.concatenate([current.norms, np.linalg.norm(batch, axis=1)])
            else:
                matrix = batch
                norms = np.linalg.norm(batch, axis=1)

            self._snapshot = _Snapshot(
                records=current.records + new_records,
                matrix=matrix,
                norms=norms,
            )
            self._next_id = first_id + len(new_records)
            total = len(self._snapshot.records)

        logger.info(
            "Appended %d record(s) (ids %d-%d); index now holds %d",
            len(new_records), first_id, first_id + len(new_records) - 1, total,
        )
        return list(new_records)

    def query(self, query_vector: Sequence[float], k: int) -> list[ScoredChunk]:
        if k < 1:
            raise ValueError(f"k must be >= 1, got {k}")

        snap = self._snapshot
        if not snap.records:
            raise NotInitializedError("Vector index is empty; ingest documents before querying.")

        q = np.asarray(query_vector, dtype=np.float64)
        if q.ndim != 1 or q.shape[0] != snap.dimension:
            raise VectorDimensionError(snap.dimension, q.shape[-1] if q.ndim else 0)

        scores = self._cosine_scores(snap, q)
        # Stable sort keeps insertion order among equal scores.
        order = np.argsort(-scores, kind="stable")[:k]

        hits = [
            ScoredChunk(
                chunk=snap.records[i].chunk,
                score=float(scores[i]),
                record_id=snap.records[i].id,
            )
            for i in order
        ]
        logger.debug("Query returned %d of %d record(s)", len(hits), len(snap.records))
        return hits

    def status(self) -> dict[str, Any]:
        snap = self._snapshot
        return {
            "initialized": bool(snap.records),
            "type": type(self).__name__,
            "records": len(snap.records),
            "dimension": snap.dimension,
        }

    # -- internals ------------------------------------------------------------

    @staticmethod
    def _cosine_scores(snap: _Snapshot, q: np.ndarray) -> np.ndarray:
        q_norm = float(np.linalg.norm(q))
        if q_norm == 0.0:
            return np.zeros(len(snap.records))
        dots = snap.matrix @ q
        denom = snap.norms * q_norm
        scores = np.divide(dots, denom, out=np.zeros_like(dots), where=denom > 0)
        return np.clip(scores, -1.0, 1.0)
