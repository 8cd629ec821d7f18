"""Domain models for chunks, index records, retrieval results and chat turns."""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator


class Chunk(BaseModel):
    """A bounded contiguous slice of a document's text.

    Attributes
    ----------
    text:
        The chunk content, exactly ``source[start_offset:end_offset]``.
    start_offset:
        Character offset of the first character in the source text.
    end_offset:
        Character offset one past the last character.
    source_metadata:
        Metadata inherited from the source document (file name, kind, …).
    """

    model_config = ConfigDict(frozen=True)

    text: str
    start_offset: int = Field(ge=0)
    end_offset: int = Field(ge=0)
    source_metadata: dict[str, Any] = Field(default_factory=dict)

    @model_validator(mode="after")
    def _check_offsets(self) -> Chunk:
        if self.end_offset - self.start_offset != len(self.text):
            raise ValueError(
                f"offsets [{self.start_offset}, {self.end_offset}) do not match "
                f"text length {len(self.text)}"
            )
        return self

    def __len__(self) -> int:
        return len(self.text)


class IndexRecord(BaseModel):
    """A stored ``(vector, chunk)`` pair owned by the vector index."""

    model_config = ConfigDict(frozen=True)

    id: int
    vector: tuple[float, ...]
    chunk: Chunk


class ScoredChunk(BaseModel):
    """A single retrieved chunk together with its cosine similarity."""

    model_config = ConfigDict(frozen=True)

    chunk: Chunk
    score: float
    record_id: int | None = None

    def __str__(self) -> str:  # noqa: D105
        return f"[{self.score:.3f}] {self.chunk.text[:120]}…"


# Ordered by descending score, length <= k.
RetrievalResult = list[ScoredChunk]


class ConversationTurn(BaseModel):
    """One message of a conversation history."""

    role: Literal["user", "assistant", "system"]
    content: str


class SourceCitation(BaseModel):
    """Caller-facing source entry returned alongside a chat answer."""

    text: str
    metadata: dict[str, Any] = Field(default_factory=dict)
    score: float | None = None

    @classmethod
    def from_scored(cls, hit: ScoredChunk) -> SourceCitation:
        return cls(text=hit.chunk.text, metadata=dict(hit.chunk.source_metadata), score=hit.score)
