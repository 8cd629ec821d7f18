"""Exception hierarchy for the ingestion and retrieval pipeline.

Every error carries an HTTP-equivalent ``status_code`` so the serving
layer can map it without knowing each subclass.  The core never retries;
retry policy belongs to callers.
"""

from __future__ import annotations

from typing import Any


class RagError(Exception):
    """Base exception for all pipeline errors."""

    status_code: int = 500

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


# ── Client-input errors ───────────────────────────────────────────────


class ConfigurationError(RagError):
    """Raised for invalid chunking parameters."""

    status_code = 400


class EmptyDocumentError(RagError):
    """Raised when a document has no text to ingest."""

    status_code = 400


class UnsupportedFileTypeError(RagError):
    """Raised when no extractor exists for a file extension."""

    status_code = 415

    def __init__(self, extension: str, details: dict[str, Any] | None = None) -> None:
        details = details or {}
        details["extension"] = extension
        super().__init__(f"Unsupported file type: {extension or '<none>'}", details)
        self.extension = extension


class DocumentExtractionError(RagError):
    """Raised when a supported file cannot be read or decoded."""

    status_code = 400


# ── Lifecycle errors ──────────────────────────────────────────────────


class NotInitializedError(RagError):
    """Raised when the vector index is queried before anything was appended."""

    status_code = 409


class NoCorpusError(NotInitializedError):
    """Raised when chat is attempted before any document was ingested."""

    def __init__(
        self,
        message: str = "No documents ingested yet. Please upload documents first.",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, details)


class VectorDimensionError(RagError):
    """Raised when a vector's length differs from the index dimension."""

    def __init__(self, expected: int, actual: int) -> None:
        super().__init__(
            f"Vector dimension mismatch: expected {expected}, got {actual}",
            {"expected": expected, "actual": actual},
        )


# ── Collaborator failures ─────────────────────────────────────────────


class EmbeddingProviderError(RagError):
    """Raised when the embedding backend fails or returns bad output."""

    status_code = 502


class GenerationProviderError(RagError):
    """Raised when the generation backend fails."""

    status_code = 502
