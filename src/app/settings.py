from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass

from dotenv import load_dotenv

load_dotenv()

logger = logging.getLogger(__name__)

_TRUTHY = {"1", "true", "yes"}


@dataclass(frozen=True)
class Settings:
    chunk_size: int = int(os.getenv("RAG_CHUNK_SIZE", "1000"))
    chunk_overlap: int = int(os.getenv("RAG_CHUNK_OVERLAP", "20"))
    top_k: int = int(os.getenv("RAG_TOP_K", "4"))
    index_cache_size: int = int(os.getenv("RAG_INDEX_CACHE_SIZE", "64"))
    embedding_provider: str = os.getenv("EMBEDDING_PROVIDER", "hash")
    embedding_dimension: int = int(os.getenv("EMBEDDING_DIMENSION", "256"))
    embedding_timeout: float = float(os.getenv("EMBEDDING_TIMEOUT", "30"))
    cohere_api_key: str | None = os.getenv("COHERE_API_KEY")
    cohere_embedding_model: str = os.getenv("COHERE_EMBEDDING_MODEL", "embed-english-v3.0")
    cohere_base_url: str = os.getenv("COHERE_BASE_URL", "https://api.cohere.com")
    openai_api_key: str | None = os.getenv("OPENAI_API_KEY")
    openai_embedding_model: str | None = os.getenv("OPENAI_EMBEDDING_MODEL")
    openai_base_url: str = os.getenv("OPENAI_BASE_URL", "https://api.openai.com/v1")
    openai_chat_model: str | None = os.getenv("OPENAI_CHAT_MODEL")
    llm_provider_raw: str = os.getenv("RAG_LLM_PROVIDER", "extractive")
    anthropic_api_key: str | None = os.getenv("ANTHROPIC_API_KEY")
    anthropic_model: str = os.getenv("ANTHROPIC_MODEL", "claude-3-5-haiku-latest")
    anthropic_base_url: str = os.getenv("ANTHROPIC_BASE_URL", "https://api.anthropic.com")
    ollama_base_url: str = os.getenv("OLLAMA_BASE_URL", "http://localhost:11434")
    ollama_model: str = os.getenv("OLLAMA_MODEL", "llama3.1")
    llm_temperature: float = float(os.getenv("LLM_TEMPERATURE", "0.1"))
    llm_max_tokens: int = int(os.getenv("LLM_MAX_TOKENS", "512"))
    llm_timeout: float = float(os.getenv("LLM_TIMEOUT", "60"))
    shortlist_min_accuracy: float = float(os.getenv("RAG_SHORTLIST_MIN_ACCURACY", "60"))
    shortlist_decline_marker: str = os.getenv("RAG_SHORTLIST_DECLINE_MARKER", "Unfortunately")
    database_uri_raw: str = os.getenv("RAG_DATABASE_URI", "sqlite:///./resume_qa.db")
    api_key_map_raw: str = os.getenv("RAG_API_KEY_MAP", "")
    allow_anonymous_raw: str = os.getenv("RAG_ALLOW_ANONYMOUS", "false")
    file_max_bytes: int = int(os.getenv("RAG_FILE_MAX_BYTES", "10485760"))
    metrics_enabled: bool = os.getenv("RAG_METRICS_ENABLED", "true").lower() in _TRUTHY
    log_level_raw: str = os.getenv("RAG_LOG_LEVEL", "INFO")

    @property
    def llm_provider(self) -> str:
        return os.getenv("RAG_LLM_PROVIDER", self.llm_provider_raw)

    @property
    def database_uri(self) -> str:
        return os.getenv("RAG_DATABASE_URI", self.database_uri_raw)

    @property
    def allow_anonymous(self) -> bool:
        return os.getenv("RAG_ALLOW_ANONYMOUS", self.allow_anonymous_raw).lower() in _TRUTHY

    @property
    def log_level(self) -> str:
        return os.getenv("RAG_LOG_LEVEL", self.log_level_raw)

    @property
    def api_key_map(self) -> dict[str, dict[str, str]]:
        """Map API keys to the candidate identity and role they grant.

        Accepts ``{"key": "candidate-id"}`` or
        ``{"key": {"candidate_id": "...", "role": "recruiter"}}``.
        """
        raw = os.getenv("RAG_API_KEY_MAP", self.api_key_map_raw).strip()
        if not raw:
            return {}
        try:
            data = json.loads(raw)
        except json.JSONDecodeError:
            logger.warning("api_key_map_invalid_json")
            return {}
        if not isinstance(data, dict):
            return {}
        result: dict[str, dict[str, str]] = {}
        for key, value in data.items():
            if not isinstance(key, str):
                continue
            if isinstance(value, str):
                result[key] = {"candidate_id": value, "role": "candidate"}
                continue
            if not isinstance(value, dict):
                continue
            candidate_id = value.get("candidate_id")
            role = value.get("role")
            entry = {"role": role.lower() if isinstance(role, str) else "candidate"}
            if isinstance(candidate_id, str) and candidate_id:
                entry["candidate_id"] = candidate_id
            result[key] = entry
        return result


settings = Settings()
