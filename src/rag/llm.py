from __future__ import annotations

"""Language-model answer generators."""

from dataclasses import dataclass, field
import logging
from typing import Any, Protocol

import httpx

from src.rag.answerer import ExtractiveGenerator


class GenerationServiceError(RuntimeError):
    """Raised when LLM requests fail or responses are invalid."""
    pass


logger = logging.getLogger(__name__)

ANTHROPIC_API_VERSION = "2023-06-01"


class AnswerGenerator(Protocol):
    """Protocol for answer generation backends."""

    async def generate(self, prompt: str) -> str:
        """Return the model's answer to a fully assembled prompt."""
        raise NotImplementedError


async def _post_json(
    url: str,
    payload: dict[str, Any],
    *,
    headers: dict[str, str] | None,
    timeout: float,
    provider: str,
    model: str,
) -> dict[str, Any]:
    """POST a JSON payload and return the decoded JSON object."""
    try:
        async with httpx.AsyncClient(timeout=timeout) as client:
            response = await client.post(url, json=payload, headers=headers)
            response.raise_for_status()
            data = response.json()
    except httpx.HTTPError as exc:
        logger.error(
            "llm_request_failed",
            extra={"provider": provider, "model": model, "detail": type(exc).__name__},
        )
        raise GenerationServiceError(str(exc)) from exc
    except ValueError as exc:
        raise GenerationServiceError(f"Invalid {provider} response: not JSON") from exc
    if not isinstance(data, dict):
        raise GenerationServiceError(f"Invalid {provider} response")
    return data


@dataclass(frozen=True)
class AnthropicGenerator:
    """Answer generator backed by the Anthropic Messages API."""
    api_key: str = field(repr=False)
    model: str
    temperature: float
    max_tokens: int
    timeout: float
    base_url: str = "https://api.anthropic.com"

    async def generate(self, prompt: str) -> str:
        """Generate an answer using Anthropic messages."""
        payload = {
            "model": self.model,
            "max_tokens": self.max_tokens,
            "temperature": self.temperature,
            "messages": [{"role": "user", "content": prompt}],
        }
        headers = {
            "x-api-key": self.api_key,
            "anthropic-version": ANTHROPIC_API_VERSION,
        }
        data = await _post_json(
            f"{self.base_url}/v1/messages",
            payload,
            headers=headers,
            timeout=self.timeout,
            provider="anthropic",
            model=self.model,
        )
        blocks = data.get("content")
        if not isinstance(blocks, list):
            raise GenerationServiceError("Invalid Anthropic response content")
        texts = [
            block["text"]
            for block in blocks
            if isinstance(block, dict)
            and block.get("type") == "text"
            and isinstance(block.get("text"), str)
        ]
        if not texts:
            raise GenerationServiceError("Anthropic response has no text content")
        return "".join(texts)


@dataclass(frozen=True)
class OpenAIGenerator:
    """Answer generator backed by OpenAI chat completions."""
    api_key: str = field(repr=False)
    base_url: str
    model: str
    temperature: float
    max_tokens: int
    timeout: float

    async def generate(self, prompt: str) -> str:
        """Generate an answer using OpenAI chat completions."""
        payload = {
            "model": self.model,
            "messages": [{"role": "user", "content": prompt}],
            "temperature": self.temperature,
            "max_tokens": self.max_tokens,
        }
        headers = {"Authorization": f"Bearer {self.api_key}"}
        data = await _post_json(
            f"{self.base_url}/chat/completions",
            payload,
            headers=headers,
            timeout=self.timeout,
            provider="openai",
            model=self.model,
        )
        choices = data.get("choices") or []
        if not choices:
            raise GenerationServiceError("Invalid OpenAI response")
        message = choices[0].get("message") or {}
        content = message.get("content")
        if not isinstance(content, str):
            raise GenerationServiceError("Invalid OpenAI response content")
        return content


@dataclass(frozen=True)
class OllamaGenerator:
    """Answer generator backed by the Ollama chat API."""
    base_url: str
    model: str
    temperature: float
    max_tokens: int
    timeout: float

    async def generate(self, prompt: str) -> str:
        """Generate an answer using Ollama."""
        payload = {
            "model": self.model,
            "messages": [{"role": "user", "content": prompt}],
            "stream": False,
            "options": {
                "temperature": self.temperature,
                "num_predict": self.max_tokens,
            },
        }
        data = await _post_json(
            f"{self.base_url}/api/chat",
            payload,
            headers=None,
            timeout=self.timeout,
            provider="ollama",
            model=self.model,
        )
        message = data.get("message") or {}
        content = message.get("content")
        if not isinstance(content, str):
            raise GenerationServiceError("Invalid Ollama response")
        return content


def build_generator(
    provider: str,
    *,
    anthropic_api_key: str | None,
    anthropic_model: str,
    anthropic_base_url: str,
    openai_api_key: str | None,
    openai_base_url: str,
    openai_model: str | None,
    ollama_base_url: str,
    ollama_model: str,
    temperature: float,
    max_tokens: int,
    timeout: float,
) -> AnswerGenerator:
    """Factory for answer generators based on provider."""
    normalized = provider.strip().lower()
    if normalized in {"", "extractive"}:
        return ExtractiveGenerator()
    if normalized in {"anthropic", "claude"}:
        if not anthropic_api_key:
            raise GenerationServiceError("ANTHROPIC_API_KEY is required for Anthropic provider")
        return AnthropicGenerator(
            api_key=anthropic_api_key,
            model=anthropic_model,
            temperature=temperature,
            max_tokens=max_tokens,
            timeout=timeout,
            base_url=anthropic_base_url.rstrip("/"),
        )
    if normalized == "openai":
        if not openai_api_key:
            raise GenerationServiceError("OPENAI_API_KEY is required for OpenAI provider")
        if not openai_model:
            raise GenerationServiceError("OPENAI_CHAT_MODEL is required for OpenAI provider")
        return OpenAIGenerator(
            api_key=openai_api_key,
            base_url=openai_base_url.rstrip("/"),
            model=openai_model,
            temperature=temperature,
            max_tokens=max_tokens,
            timeout=timeout,
        )
    if normalized == "ollama":
        return OllamaGenerator(
            base_url=ollama_base_url.rstrip("/"),
            model=ollama_model,
            temperature=temperature,
            max_tokens=max_tokens,
            timeout=timeout,
        )
    raise GenerationServiceError(f"Unsupported LLM provider: {provider}")
