from __future__ import annotations

"""Core data types for documents, chunks and retrieval."""

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class Document:
    """Loaded résumé text with metadata."""
    doc_id: str
    content: str
    metadata: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class Chunk:
    """Contiguous slice of a document used as a retrieval unit."""
    content: str
    metadata: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class EmbeddedChunk:
    """Chunk paired with its embedding vector."""
    chunk: Chunk
    vector: list[float]


@dataclass(frozen=True)
class SearchResult:
    """Search result with cosine similarity score."""
    chunk: Chunk
    score: float
