from __future__ import annotations

import logging
from dataclasses import dataclass

from src.rag.embeddings import Embedder
from src.rag.types import Chunk
from src.vectorstore.inmemory import VectorIndex

logger = logging.getLogger(__name__)


@dataclass
class Retriever:
    """Embed a question and return the closest chunks from an index."""
    embedder: Embedder

    def retrieve(self, index: VectorIndex, question: str, k: int) -> list[Chunk]:
        query_vector = self.embedder.embed_query(question)
        results = index.search(query_vector, k)
        logger.info(
            "retrieval_complete",
            extra={
                "results": len(results),
                "top_score": results[0].score if results else None,
                "query_length": len(question),
            },
        )
        return [result.chunk for result in results]
