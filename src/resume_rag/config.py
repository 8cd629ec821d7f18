"""Shared configuration loaded from environment / .env file."""

from __future__ import annotations

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings

DEFAULT_SYSTEM_PROMPT = """\
You are a helpful AI assistant designed for resume filtering.
Your job is to look at the provided resume and the job description and then
highlight the following:
1. Match Score (0-100%)
2. Strengths - What makes this candidate a good fit
3. Gaps - What skills or experience are missing
4. Key Insights - Overall assessment

Use the context provided to give specific, detailed answers. If the context
doesn't contain relevant information, say so.
"""


class Settings(BaseSettings):
    """Application-wide settings, populated from env vars or .env file."""

    # LLM
    openai_api_key: str = Field(default="", description="OpenAI API key (or dummy value for a local server)")
    llm_model_name: str = Field(default="gpt-4o-mini", description="Chat model identifier")
    llm_base_url: str = Field(
        default="",
        description=(
            "Base URL for an OpenAI-compatible chat API. Leave empty to use "
            "OpenAI cloud."
        ),
    )
    llm_temperature: float = 0.7

    # Embedding
    embedding_backend: Literal["openai", "huggingface"] = "openai"
    embedding_model: str = "text-embedding-3-small"
    hf_embedding_model: str = "sentence-transformers/all-MiniLM-L6-v2"
    embedding_batch_size: int = Field(default=64, gt=0)

    # Chunking
    chunk_size: int = Field(default=1000, gt=0)
    chunk_overlap: int = Field(default=200, ge=0)

    # Retrieval / prompting
    retrieval_top_k: int = Field(default=4, gt=0)
    max_context_chars: int = Field(
        default=12000,
        gt=0,
        description="Upper bound on the concatenated context; lowest-scoring chunks are dropped first.",
    )
    system_prompt: str = DEFAULT_SYSTEM_PROMPT

    # Serving
    cors_origins: list[str] = Field(
        default_factory=lambda: ["*"],
        description="Origins allowed to call the API from a browser (JSON list in env).",
    )

    # Logging
    log_level: str = "INFO"

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


# Import `settings` wherever needed.
settings = Settings()
