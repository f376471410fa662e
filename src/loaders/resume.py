from __future__ import annotations

"""Dispatch uploaded résumé files to the matching loader."""

from pathlib import Path

from src.loaders.docx import DocxLoaderError, load_docx_bytes
from src.loaders.pdf import PDFLoaderError, load_pdf_bytes
from src.loaders.text import load_text_bytes
from src.rag.types import Document


class ResumeLoaderError(RuntimeError):
    """Raised when a résumé upload cannot be turned into text."""
    pass


_CONTENT_TYPE_SUFFIXES = {
    "application/pdf": ".pdf",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document": ".docx",
    "text/plain": ".txt",
    "text/markdown": ".md",
}
SUPPORTED_SUFFIXES = {".pdf", ".docx", ".txt", ".text", ".md"}


def resolve_suffix(filename: str | None, content_type: str | None) -> str:
    """Pick a loader suffix from the filename, falling back to the content type."""
    suffix = Path(filename or "").suffix.lower()
    if suffix:
        return suffix
    media_type = (content_type or "").split(";", 1)[0].strip().lower()
    return _CONTENT_TYPE_SUFFIXES.get(media_type, "")


def load_resume_bytes(
    data: bytes,
    candidate_id: str,
    filename: str | None,
    content_type: str | None = None,
) -> Document:
    """Extract résumé text from an uploaded file."""
    suffix = resolve_suffix(filename, content_type)
    if suffix not in SUPPORTED_SUFFIXES:
        raise ResumeLoaderError(f"Unsupported file type: {suffix or 'unknown'}")
    source = filename or f"resume{suffix}"
    doc_id = f"resume-{candidate_id}"
    try:
        if suffix == ".pdf":
            document = load_pdf_bytes(data, doc_id=doc_id, source=source)
        elif suffix == ".docx":
            document = load_docx_bytes(data, doc_id=doc_id, source=source)
        else:
            document = load_text_bytes(data, doc_id=doc_id, source=source)
    except (PDFLoaderError, DocxLoaderError) as exc:
        raise ResumeLoaderError(str(exc)) from exc
    if not document.content.strip():
        raise ResumeLoaderError("No text could be extracted from the resume")
    document.metadata["candidate_id"] = candidate_id
    document.metadata["source_type"] = suffix.lstrip(".")
    return document
