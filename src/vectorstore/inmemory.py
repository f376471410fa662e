from __future__ import annotations

"""In-memory vector index over embedded résumé chunks."""

import math
from dataclasses import dataclass
from typing import Iterable

from src.rag.types import Chunk, EmbeddedChunk, SearchResult


class VectorIndexError(RuntimeError):
    """Raised when index contents or queries are inconsistent."""
    pass


class EmptyIndexError(VectorIndexError):
    """Raised when an index is built without entries."""
    pass


@dataclass(frozen=True)
class VectorIndexEntry:
    """Embedded chunk and its insertion position."""
    position: int
    chunk: Chunk
    vector: tuple[float, ...]
    norm: float


class VectorIndex:
    """Read-only cosine similarity index built from embedded chunks.

    Entries are fixed at build time. ``search`` on an empty index is never
    possible because ``build`` refuses to create one.
    """

    def __init__(self, entries: list[VectorIndexEntry], dimension: int) -> None:
        self._entries = tuple(entries)
        self.dimension = dimension

    @classmethod
    def build(cls, entries: Iterable[EmbeddedChunk]) -> "VectorIndex":
        """Build an index, validating that all vectors share one dimension."""
        indexed: list[VectorIndexEntry] = []
        dimension: int | None = None
        for position, entry in enumerate(entries):
            vector = tuple(float(value) for value in entry.vector)
            if dimension is None:
                dimension = len(vector)
            elif len(vector) != dimension:
                raise VectorIndexError(
                    f"Vector dimension mismatch at entry {position}: "
                    f"expected {dimension}, got {len(vector)}"
                )
            indexed.append(
                VectorIndexEntry(
                    position=position,
                    chunk=entry.chunk,
                    vector=vector,
                    norm=_norm(vector),
                )
            )
        if dimension is None:
            raise EmptyIndexError("Cannot build a vector index from zero entries")
        return cls(indexed, dimension)

    def __len__(self) -> int:
        return len(self._entries)

    def search(self, query_vector: list[float], k: int) -> list[SearchResult]:
        """Return the top-k chunks by descending cosine similarity."""
        if len(query_vector) != self.dimension:
            raise VectorIndexError(
                f"Query dimension mismatch: expected {self.dimension}, got {len(query_vector)}"
            )
        if k <= 0:
            return []
        query_norm = _norm(query_vector)
        scored = [
            SearchResult(
                chunk=entry.chunk,
                score=self._cosine_similarity(query_vector, query_norm, entry),
            )
            for entry in self._entries
        ]
        # sorted() is stable, so equal scores keep insertion order.
        scored.sort(key=lambda item: item.score, reverse=True)
        return scored[: min(k, len(scored))]

    def _cosine_similarity(
        self, query: list[float], query_norm: float, entry: VectorIndexEntry
    ) -> float:
        """Compute cosine similarity between the query and an entry."""
        if query_norm == 0.0 or entry.norm == 0.0:
            return 0.0
        dot = sum(x * y for x, y in zip(query, entry.vector))
        return dot / (query_norm * entry.norm)

    def stats(self) -> dict[str, int | str]:
        """Return basic stats for the index."""
        return {
            "backend": "memory",
            "entry_count": len(self._entries),
            "embedding_dimension": self.dimension,
        }


def _norm(vector: Iterable[float]) -> float:
    return math.sqrt(sum(value * value for value in vector))
