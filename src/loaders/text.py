from __future__ import annotations

"""Plain text résumé loader."""

from src.rag.types import Document


def load_text_bytes(data: bytes, doc_id: str, source: str) -> Document:
    """Decode plain text bytes into a Document, normalizing line endings."""
    content = data.decode("utf-8", errors="ignore").replace("\r\n", "\n")
    return Document(doc_id=doc_id, content=content.strip(), metadata={"source": source})
