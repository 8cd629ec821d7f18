"""Unit tests for the embedding provider seam."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from resume_rag.config import settings
from resume_rag.exceptions import EmbeddingProviderError
from resume_rag.ingestion.embedder import EmbeddingProvider, get_embedding_function


def _backend(dim: int = 3) -> MagicMock:
    backend = MagicMock()
    backend.embed_documents.side_effect = lambda texts: [[float(len(t))] * dim for t in texts]
    backend.embed_query.side_effect = lambda text: [float(len(text))] * dim
    return backend


def test_embed_batch_splits_into_batches_and_keeps_order() -> None:
    backend = _backend()
    provider = EmbeddingProvider(backend, batch_size=2)

    vectors = provider.embed_batch(["a", "bb", "ccc", "dddd", "eeeee"])

    assert backend.embed_documents.call_count == 3
    assert [v[0] for v in vectors] == [1.0, 2.0, 3.0, 4.0, 5.0]


def test_embed_batch_empty_input_skips_backend() -> None:
    backend = _backend()
    assert EmbeddingProvider(backend).embed_batch([]) == []
    backend.embed_documents.assert_not_called()


def test_backend_failure_is_wrapped() -> None:
    backend = MagicMock()
    backend.embed_documents.side_effect = RuntimeError("quota exceeded")
    provider = EmbeddingProvider(backend, batch_size=4)

    with pytest.raises(EmbeddingProviderError, match="quota exceeded") as excinfo:
        provider.embed_batch(["one", "two"])
    assert isinstance(excinfo.value.__cause__, RuntimeError)
    assert excinfo.value.status_code == 502


def test_short_batch_is_an_error_not_a_silent_drop() -> None:
    backend = MagicMock()
    backend.embed_documents.side_effect = lambda texts: [[1.0, 0.0]] * (len(texts) - 1)
    provider = EmbeddingProvider(backend, batch_size=8)

    with pytest.raises(EmbeddingProviderError, match="returned 2 vectors for 3 texts"):
        provider.embed_batch(["a", "b", "c"])


def test_embed_query() -> None:
    provider = EmbeddingProvider(_backend(dim=4))
    assert provider.embed("abc") == [3.0, 3.0, 3.0, 3.0]


def test_embed_query_failure_is_wrapped() -> None:
    backend = MagicMock()
    backend.embed_query.side_effect = ConnectionError("boom")
    with pytest.raises(EmbeddingProviderError):
        EmbeddingProvider(backend).embed("question")


def test_empty_query_vector_rejected() -> None:
    backend = MagicMock()
    backend.embed_query.return_value = []
    with pytest.raises(EmbeddingProviderError, match="empty vector"):
        EmbeddingProvider(backend).embed("question")


def test_default_batch_size_comes_from_settings() -> None:
    assert EmbeddingProvider(_backend()).batch_size == settings.embedding_batch_size


def test_get_embedding_function_openai(monkeypatch: pytest.MonkeyPatch) -> None:
    from langchain_openai import OpenAIEmbeddings

    monkeypatch.setattr(settings, "embedding_backend", "openai")
    monkeypatch.setattr(settings, "openai_api_key", "sk-test")
    monkeypatch.setattr(settings, "llm_base_url", "")

    backend = get_embedding_function()
    assert isinstance(backend, OpenAIEmbeddings)
    assert backend.model == settings.embedding_model
