"""LLM initialisation and the generation seam — single place to swap providers.

Supports two modes:

1. **OpenAI cloud** (default) — set ``OPENAI_API_KEY``.
2. **OpenAI-compatible server** — set ``LLM_BASE_URL`` (vLLM, Ollama's
   ``/v1`` endpoint, …).  ``ChatOpenAI`` works unchanged against it.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import TYPE_CHECKING

from langchain_core.messages import AIMessage, BaseMessage, HumanMessage, SystemMessage
from langchain_openai import ChatOpenAI

from resume_rag.config import settings
from resume_rag.exceptions import GenerationProviderError
from resume_rag.retrieval.models import ConversationTurn

if TYPE_CHECKING:
    from langchain_core.language_models import BaseChatModel

logger = logging.getLogger(__name__)


def get_llm() -> ChatOpenAI:
    """Return the configured chat model.

    When ``settings.llm_base_url`` is set the client is pointed at that
    OpenAI-compatible endpoint instead of the OpenAI cloud API.  A dummy
    API key (``"EMPTY"``) is used because local servers usually do not
    require authentication.
    """
    kwargs: dict = {
        "model": settings.llm_model_name,
        "temperature": settings.llm_temperature,
    }

    if settings.llm_base_url:
        logger.info("Using OpenAI-compatible endpoint: %s", settings.llm_base_url)
        kwargs["base_url"] = settings.llm_base_url
        # LangChain requires a non-empty key even when the server ignores it.
        kwargs["api_key"] = settings.openai_api_key or "EMPTY"
    else:
        kwargs["api_key"] = settings.openai_api_key

    return ChatOpenAI(**kwargs)


def to_langchain_messages(turns: Sequence[ConversationTurn]) -> list[BaseMessage]:
    """Map conversation turns onto LangChain message objects."""
    messages: list[BaseMessage] = []
    for turn in turns:
        if turn.role == "user":
            messages.append(HumanMessage(content=turn.content))
        elif turn.role == "assistant":
            messages.append(AIMessage(content=turn.content))
        else:
            messages.append(SystemMessage(content=turn.content))
    return messages


def _content_to_text(content: str | list) -> str:
    """Flatten a chat-model ``content`` payload to plain text."""
    if isinstance(content, str):
        return content
    parts: list[str] = []
    for part in content:
        if isinstance(part, str):
            parts.append(part)
        elif isinstance(part, dict) and part.get("type") == "text":
            parts.append(part.get("text", ""))
    return "".join(parts)


class GenerationProvider:
    """Turns an assembled prompt into answer text.

    Parameters
    ----------
    model:
        Any LangChain chat model.  When *None*, :func:`get_llm` is used.
    """

    def __init__(self, model: BaseChatModel | None = None) -> None:
        self._model = model if model is not None else get_llm()

    @property
    def model_name(self) -> str:
        return getattr(self._model, "model_name", None) or type(self._model).__name__

    def generate(self, turns: Sequence[ConversationTurn], *, temperature: float | None = None) -> str:
        """Invoke the chat model once and return its text output verbatim.

        *temperature* overrides the configured sampling temperature for
        this call only.

        Raises
        ------
        GenerationProviderError
            On any transport, quota or model failure.
        """
        messages = to_langchain_messages(turns)
        model = self._model if temperature is None else self._model.bind(temperature=temperature)
        try:
            response = model.invoke(messages)
        except Exception as exc:
            logger.exception("Generation failed (%s)", self.model_name)
            raise GenerationProviderError(
                f"Generation provider failed: {exc}",
                {"model": self.model_name},
            ) from exc
        answer = _content_to_text(response.content)
        logger.info("Generated answer (%d characters)", len(answer))
        return answer
