from __future__ import annotations

"""Fixed-size character chunking with overlap."""

from src.rag.types import Chunk

DEFAULT_CHUNK_SIZE = 1000
DEFAULT_CHUNK_OVERLAP = 20


class ConfigError(ValueError):
    """Raised when chunking parameters are invalid."""
    pass


def validate_chunking(chunk_size: int, overlap: int) -> None:
    """Reject chunk sizes and overlaps that cannot make progress."""
    if chunk_size <= 0:
        raise ConfigError(f"chunk_size must be greater than zero, got {chunk_size}")
    if overlap < 0 or overlap >= chunk_size:
        raise ConfigError(
            f"overlap must satisfy 0 <= overlap < chunk_size, got {overlap} for {chunk_size}"
        )


def chunk_spans(length: int, chunk_size: int, overlap: int) -> list[tuple[int, int]]:
    """Return (start, end) offsets covering a text of the given length."""
    validate_chunking(chunk_size, overlap)
    if length <= chunk_size:
        return [(0, length)]
    spans: list[tuple[int, int]] = []
    start = 0
    while True:
        end = min(length, start + chunk_size)
        spans.append((start, end))
        if end >= length:
            break
        start = end - overlap
    return spans


def split_text(text: str, chunk_size: int, overlap: int) -> list[Chunk]:
    """Split text into overlapping chunks without dropping any characters."""
    spans = chunk_spans(len(text), chunk_size, overlap)
    total = len(spans)
    return [
        Chunk(
            content=text[start:end],
            metadata={"chunk_index": idx, "chunk_count": total, "start": start, "end": end},
        )
        for idx, (start, end) in enumerate(spans, start=1)
    ]

