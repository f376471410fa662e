from __future__ import annotations

"""Bounded cache of built vector indexes keyed by document content."""

import hashlib
import logging
import threading
from collections import OrderedDict
from dataclasses import dataclass

from src.vectorstore.inmemory import VectorIndex

logger = logging.getLogger(__name__)


def content_hash(text: str) -> str:
    """Hash document text so a changed résumé never reuses an old index."""
    return hashlib.sha256(text.encode("utf-8")).hexdigest()


@dataclass(frozen=True)
class IndexKey:
    """Identity of a built index."""
    content_hash: str
    chunk_size: int
    chunk_overlap: int
    embedder: str


class IndexCache:
    """Thread-safe LRU of vector indexes.

    Two concurrent misses for the same key may both build; the later one
    wins. Indexes are read-only so either copy is valid.
    """

    def __init__(self, max_entries: int = 64) -> None:
        if max_entries <= 0:
            raise ValueError("max_entries must be greater than zero")
        self.max_entries = max_entries
        self._entries: OrderedDict[IndexKey, VectorIndex] = OrderedDict()
        self._lock = threading.Lock()

    def get(self, key: IndexKey) -> VectorIndex | None:
        with self._lock:
            index = self._entries.get(key)
            if index is not None:
                self._entries.move_to_end(key)
        logger.debug(
            "index_cache_hit" if index is not None else "index_cache_miss",
            extra={"content_hash": key.content_hash[:12]},
        )
        return index

    def put(self, key: IndexKey, index: VectorIndex) -> None:
        with self._lock:
            self._entries[key] = index
            self._entries.move_to_end(key)
            while len(self._entries) > self.max_entries:
                evicted, _ = self._entries.popitem(last=False)
                logger.debug(
                    "index_cache_evicted", extra={"content_hash": evicted.content_hash[:12]}
                )

    def discard(self, digest: str) -> int:
        """Drop every index built from the document with the given hash."""
        with self._lock:
            stale = [key for key in self._entries if key.content_hash == digest]
            for key in stale:
                del self._entries[key]
        return len(stale)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
