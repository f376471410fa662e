from __future__ import annotations

"""DOCX résumé loader."""

from io import BytesIO

from src.rag.types import Document


class DocxLoaderError(RuntimeError):
    """Raised when DOCX loading fails."""
    pass


def load_docx_bytes(data: bytes, doc_id: str, source: str) -> Document:
    """Load a DOCX file from bytes into a Document."""
    try:
        from docx import Document as DocxDocument
    except ImportError as exc:
        raise DocxLoaderError("python-docx is required to load DOCX files") from exc

    try:
        doc = DocxDocument(BytesIO(data))
    except Exception as exc:
        raise DocxLoaderError(f"Unreadable DOCX: {type(exc).__name__}") from exc
    parts = [paragraph.text.strip() for paragraph in doc.paragraphs if paragraph.text.strip()]

    # Résumés often lay out skills and dates in tables.
    for table in doc.tables:
        for row in table.rows:
            cells = [cell.text.strip() for cell in row.cells if cell.text.strip()]
            if cells:
                parts.append(" | ".join(cells))

    return Document(doc_id=doc_id, content="\n".join(parts).strip(), metadata={"source": source})
