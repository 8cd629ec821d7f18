"""Document text extraction — thin wrappers around LangChain document loaders."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Any

from langchain_community.document_loaders import (
    CSVLoader,
    Docx2txtLoader,
    PyPDFLoader,
    TextLoader,
)

from resume_rag.exceptions import DocumentExtractionError, UnsupportedFileTypeError

if TYPE_CHECKING:
    from langchain_core.documents import Document

logger = logging.getLogger(__name__)

_LOADERS: dict[str, Any] = {
    ".pdf": PyPDFLoader,
    ".docx": Docx2txtLoader,
    ".txt": lambda path: TextLoader(path, autodetect_encoding=True),
    ".csv": CSVLoader,
}

SUPPORTED_EXTENSIONS: tuple[str, ...] = tuple(_LOADERS)


@dataclass
class ExtractedDocument:
    """Plain text of one file plus the metadata attached to its chunks."""

    text: str
    metadata: dict[str, Any] = field(default_factory=dict)


def is_supported(path: str | Path) -> bool:
    return Path(path).suffix.lower() in _LOADERS


def load_document(path: str | Path) -> list[Document]:
    """Load *path* with the loader registered for its extension.

    Raises
    ------
    UnsupportedFileTypeError
        For anything other than PDF, DOCX, TXT or CSV.
    DocumentExtractionError
        When the loader cannot read or decode the file.
    """
    ext = Path(path).suffix.lower()
    loader_cls = _LOADERS.get(ext)
    if loader_cls is None:
        raise UnsupportedFileTypeError(ext, {"path": str(path)})

    try:
        docs = loader_cls(str(path)).load()
    except Exception as exc:
        logger.exception("Failed to extract text from %s", Path(path).name)
        raise DocumentExtractionError(
            f"Could not extract text from {Path(path).name}",
            {"path": str(path), "reason": str(exc)},
        ) from exc
    logger.info(
        "Loaded %d document(s) from %s, total content length: %d chars",
        len(docs), Path(path).name, sum(len(d.page_content) for d in docs),
    )
    return docs


def extract_text(path: str | Path, original_name: str | None = None) -> ExtractedDocument:
    """Extract the plain text of *path* as a single document.

    Pages (PDF) and rows (CSV) are joined with a blank line.  The
    extension decides the loader, so *path* must carry the real suffix
    even when *original_name* is the user-facing file name.
    """
    path = Path(path)
    docs = load_document(path)
    text = "\n\n".join(d.page_content for d in docs if d.page_content)
    metadata = {
        "source": original_name or path.name,
        "source_kind": path.suffix.lower().lstrip("."),
    }
    if original_name:
        metadata["original_name"] = original_name
    return ExtractedDocument(text=text, metadata=metadata)
