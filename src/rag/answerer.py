from __future__ import annotations

"""Offline extractive answer generator."""

import re
from dataclasses import dataclass

from src.rag.prompts import ANSWER_TEMPLATE

_TOKEN_RE = re.compile(r"[a-z0-9]+")
_CONTEXT_PREFIX = ANSWER_TEMPLATE.split("{context}", 1)[0]
_QUESTION_MARKER = "\n\nQuestion: "

NO_ANSWER = "Unfortunately, the provided context does not contain an answer to this question."


def split_prompt(prompt: str) -> tuple[str, str]:
    """Recover (context, question) from a prompt built by build_prompt."""
    body = prompt[len(_CONTEXT_PREFIX):] if prompt.startswith(_CONTEXT_PREFIX) else prompt
    marker = body.rfind(_QUESTION_MARKER)
    if marker < 0:
        return body, ""
    return body[:marker], body[marker + len(_QUESTION_MARKER):]


@dataclass(frozen=True)
class ExtractiveGenerator:
    """Return the context line that best overlaps the question."""
    max_chars: int = 480

    async def generate(self, prompt: str) -> str:
        """Generate an extractive answer from the prompt's context."""
        context, question = split_prompt(prompt)
        wanted = set(_TOKEN_RE.findall(question.lower()))
        best_line = ""
        best_overlap = 0
        for line in context.splitlines():
            text = line.strip()
            if not text:
                continue
            overlap = len(wanted.intersection(_TOKEN_RE.findall(text.lower())))
            if overlap > best_overlap:
                best_line, best_overlap = text, overlap
        if not best_line:
            return NO_ANSWER
        return f"Based on the provided context: {self._truncate(best_line)}"

    def _truncate(self, text: str) -> str:
        """Trim text to the character limit without cutting words."""
        if len(text) <= self.max_chars:
            return text
        return text[: self.max_chars].rsplit(" ", 1)[0] + "..."
