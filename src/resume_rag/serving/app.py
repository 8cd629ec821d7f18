"""FastAPI application exposing ingestion and retrieval-augmented chat.

Routes are plain ``def`` functions, so FastAPI runs them in its worker
thread pool and concurrent uploads / chats really do contend for the
vector index write lock.
"""

from __future__ import annotations

import logging
import os
import shutil
import tempfile
from pathlib import Path
from typing import Any

from fastapi import Depends, FastAPI, File, Request, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from resume_rag.chat.orchestrator import GeneralChatService, RagChatOrchestrator
from resume_rag.config import settings
from resume_rag.exceptions import RagError
from resume_rag.ingestion.coordinator import IngestionCoordinator
from resume_rag.log_config import configure_logging
from resume_rag.retrieval.base import VectorIndexBase
from resume_rag.retrieval.models import ConversationTurn, SourceCitation
from resume_rag.serving.dependencies import (
    get_chat_orchestrator,
    get_general_chat_service,
    get_ingestion_coordinator,
    get_vector_index,
)

configure_logging()
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Resume RAG API",
    version="0.1.0",
    description="Upload documents and ask questions answered only from their content.",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ── Request / Response schemas ────────────────────────────────────────
class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class UploadResponse(_CamelModel):
    """Outcome of a single-file upload."""

    success: bool = True
    ingested: bool = True
    chunks_count: int
    message: str


class FileResult(_CamelModel):
    file: str
    chunks: int
    error: str | None = None


class BatchUploadResponse(_CamelModel):
    """Per-file outcome of a multi-file upload."""

    success: bool = True
    total_chunks: int
    results: list[FileResult]


class ChatRequest(_CamelModel):
    """Incoming question from the user."""

    message: str | None = None
    history: list[ConversationTurn] = Field(default_factory=list)
    top_k: int | None = Field(default=None, ge=1)
    system_prompt: str | None = None
    temperature: float | None = Field(default=None, ge=0.0, le=2.0)


class RagChatResponse(_CamelModel):
    """Answer grounded in the ingested documents."""

    success: bool = True
    answer: str
    sources: list[SourceCitation] = Field(default_factory=list)


class ChatResponse(_CamelModel):
    success: bool = True
    answer: str


class VectorStoreStatus(_CamelModel):
    initialized: bool
    type: str
    records: int
    message: str


# ── Error handling ────────────────────────────────────────────────────
def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "error": message})


@app.exception_handler(RagError)
async def rag_error_handler(request: Request, exc: RagError) -> JSONResponse:
    """Render every pipeline error as ``{success: false, error}``."""
    log = logger.error if exc.status_code >= 500 else logger.warning
    log("%s %s failed: %s", request.method, request.url.path, exc)
    return _error(exc.status_code, exc.message)


@app.exception_handler(Exception)
async def unexpected_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("%s %s failed unexpectedly", request.method, request.url.path)
    return _error(500, str(exc) or "Internal server error")


# ── Routes ────────────────────────────────────────────────────────────
@app.get("/health")
def health() -> dict[str, str]:
    """Liveness probe."""
    return {"status": "ok"}


@app.get("/api/debug/vectorstore", response_model=VectorStoreStatus)
def vectorstore_status(index: VectorIndexBase = Depends(get_vector_index)) -> VectorStoreStatus:
    """Report whether any documents have been ingested."""
    status = index.status()
    return VectorStoreStatus(
        initialized=status["initialized"],
        type=status["type"],
        records=status["records"],
        message=(
            "Vector store is initialized and ready"
            if status["initialized"]
            else "Vector store not initialized - please upload documents first"
        ),
    )


@app.post("/api/upload", response_model=UploadResponse)
def upload(
    file: UploadFile | None = File(default=None),
    coordinator: IngestionCoordinator = Depends(get_ingestion_coordinator),
) -> Any:
    """Ingest one uploaded file (PDF, DOCX, TXT or CSV)."""
    if file is None or not file.filename:
        return _error(400, "No file uploaded")

    logger.info("File received: %s (%s bytes)", file.filename, file.size)
    tmp_path = _save_upload(file)
    try:
        result = coordinator.ingest_file(tmp_path, original_name=file.filename)
    finally:
        os.unlink(tmp_path)

    return UploadResponse(
        ingested=result.ingested,
        chunks_count=result.chunks_count,
        message=result.message,
    )


@app.post("/api/upload/batch", response_model=BatchUploadResponse)
def upload_batch(
    files: list[UploadFile] = File(...),
    coordinator: IngestionCoordinator = Depends(get_ingestion_coordinator),
) -> BatchUploadResponse:
    """Ingest several files; failures are reported per file."""
    names = [f.filename or f"upload-{i}" for i, f in enumerate(files)]
    paths: list[Path] = []
    try:
        for f in files:
            paths.append(_save_upload(f))
        batch = coordinator.ingest_many(paths, names=names)
    finally:
        for path in paths:
            os.unlink(path)

    return BatchUploadResponse(
        total_chunks=batch.total_chunks,
        results=[FileResult(file=r.file, chunks=r.chunks, error=r.error) for r in batch.results],
    )


@app.post("/api/chat/rag", response_model=RagChatResponse)
def chat_rag(
    request: ChatRequest,
    orchestrator: RagChatOrchestrator = Depends(get_chat_orchestrator),
) -> Any:
    """Answer a question from the ingested documents only."""
    if not request.message or not request.message.strip():
        return _error(400, "Message required")

    result = orchestrator.chat(
        request.message,
        request.history,
        request.top_k,
        system_prompt=request.system_prompt,
        temperature=request.temperature,
    )
    return RagChatResponse(answer=result.answer, sources=result.sources)


@app.post("/api/chat", response_model=ChatResponse)
def chat(
    request: ChatRequest,
    service: GeneralChatService = Depends(get_general_chat_service),
) -> Any:
    """Plain chat with the model, without document retrieval."""
    if not request.message or not request.message.strip():
        return _error(400, "Message required")

    answer = service.chat(
        request.message,
        request.history,
        system_prompt=request.system_prompt,
        temperature=request.temperature,
    )
    return ChatResponse(answer=answer)


# ── Helpers ───────────────────────────────────────────────────────────
def _save_upload(file: UploadFile) -> Path:
    """Copy an upload to a temporary file that keeps its extension."""
    suffix = Path(file.filename or "").suffix.lower()
    with tempfile.NamedTemporaryFile(delete=False, suffix=suffix) as tmp:
        shutil.copyfileobj(file.file, tmp)
    return Path(tmp.name)


def main() -> None:
    """Run the API with uvicorn (``resume-rag-serve``)."""
    import uvicorn

    uvicorn.run(app, host=os.environ.get("HOST", "0.0.0.0"), port=int(os.environ.get("PORT", "3000")))


if __name__ == "__main__":
    main()
