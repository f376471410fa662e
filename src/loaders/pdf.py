from __future__ import annotations

"""PDF résumé text extraction and cleanup."""

import re

from src.rag.types import Document


class PDFLoaderError(RuntimeError):
    """Raised when PDF loading fails."""
    pass


_HYPHEN_BREAK_RE = re.compile(r"(\w)-\n(\w)")
_INLINE_SPACE_RE = re.compile(r"[ \t\f\v]+")
_BLANK_LINES_RE = re.compile(r"\n{3,}")


def clean_pdf_text(text: str) -> str:
    """Join hyphenated line breaks and collapse runs of whitespace."""
    if not text:
        return ""
    cleaned = text.replace("\r\n", "\n").replace("\r", "\n")
    cleaned = _HYPHEN_BREAK_RE.sub(r"\1\2", cleaned)
    lines = [_INLINE_SPACE_RE.sub(" ", line).strip() for line in cleaned.split("\n")]
    return _BLANK_LINES_RE.sub("\n\n", "\n".join(lines)).strip()


def load_pdf_bytes(data: bytes, doc_id: str, source: str) -> Document:
    """Load a PDF from bytes and return a Document."""
    try:
        import fitz
    except ImportError as exc:
        raise PDFLoaderError("PyMuPDF is required to load PDF files") from exc

    try:
        reader = fitz.open(stream=data, filetype="pdf")
    except Exception as exc:
        raise PDFLoaderError(f"Unreadable PDF: {type(exc).__name__}") from exc
    try:
        text_parts = [page.get_text() or "" for page in reader]
        page_count = reader.page_count
    finally:
        reader.close()
    content = clean_pdf_text("\n".join(text_parts))
    return Document(
        doc_id=doc_id,
        content=content,
        metadata={"source": source, "page_count": page_count},
    )
