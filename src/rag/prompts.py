from __future__ import annotations

"""Prompt template for grounded résumé answers."""

from typing import Sequence

from src.rag.types import Chunk

ANSWER_TEMPLATE = (
    "Answer the question based only on the following context:\n"
    "{context}\n"
    "\n"
    "Question: {question}"
)
CONTEXT_SEPARATOR = "\n"


def format_context(chunks: Sequence[Chunk]) -> str:
    """Join chunk contents in retrieval order."""
    return CONTEXT_SEPARATOR.join(chunk.content for chunk in chunks)


def build_prompt(chunks: Sequence[Chunk], question: str) -> str:
    """Substitute context and question into the answer template."""
    # str.replace keeps braces inside résumé text from being read as fields.
    context = format_context(chunks)
    return ANSWER_TEMPLATE.replace("{question}", question).replace("{context}", context, 1)
