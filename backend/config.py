"""
Component Builder configuration — all environment variables in one place.

Read from environment at runtime. Never hardcode secrets.
"""

from __future__ import annotations

import os


def _flag(name: str, default: str = "false") -> bool:
    return os.environ.get(name, default).lower() in ("1", "true", "yes")


class Settings:
    """Application settings from environment variables."""

    # Application
    ENVIRONMENT: str = os.environ.get("ENVIRONMENT", "development")
    LOG_LEVEL: str = os.environ.get("LOG_LEVEL", "INFO")

    # AI Providers
    ANTHROPIC_API_KEY: str = os.environ.get("ANTHROPIC_API_KEY", "")
    OPENAI_API_KEY: str = os.environ.get("OPENAI_API_KEY", "")

    # Mock LLM (tests / offline development)
    USE_MOCK_LLM: bool = _flag("USE_MOCK_LLM")
    MOCK_LLM_PROFILE: str = os.environ.get("MOCK_LLM_PROFILE", "instant")

    # Generation defaults
    GENERATION_MODEL: str = os.environ.get("GENERATION_MODEL", "claude-sonnet-4-20250514")
    GENERATION_TEMPERATURE: float = float(os.environ.get("GENERATION_TEMPERATURE", "0.7"))
    GENERATION_MAX_TOKENS: int = int(os.environ.get("GENERATION_MAX_TOKENS", "4096"))
    CHAT_MAX_TOKENS: int = int(os.environ.get("CHAT_MAX_TOKENS", "2000"))
    GENERATION_MAX_RETRIES: int = int(os.environ.get("GENERATION_MAX_RETRIES", "2"))

    # Rate Limits
    GENERATION_RATE_LIMIT_PER_MINUTE: int = int(os.environ.get("GENERATION_RATE_LIMIT_PER_MINUTE", "20"))

    # Preview
    PREVIEW_REACT_VERSION: str = os.environ.get("PREVIEW_REACT_VERSION", "18")
    PREVIEW_MAX_TARGETS: int = int(os.environ.get("PREVIEW_MAX_TARGETS", "64"))

    @property
    def llm_configured(self) -> bool:
        return bool(self.ANTHROPIC_API_KEY or self.OPENAI_API_KEY)


# Singleton instance
settings = Settings()
