"""AI provider abstraction over Anthropic and OpenAI models, with retry on transient failures."""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import AsyncIterator
from typing import Any

import anthropic
import openai

from backend.config import settings

logger = logging.getLogger(__name__)

# Transient error types that warrant a retry
_RETRYABLE_ANTHROPIC = (
    anthropic.RateLimitError,
    anthropic.APIConnectionError,
    anthropic.InternalServerError,
)
_RETRYABLE_OPENAI = (
    openai.RateLimitError,
    openai.APIConnectionError,
    openai.InternalServerError,
)

OPENAI_MODEL_PREFIXES = ("gpt-", "o1", "o3", "o4")


def is_openai_model(model: str) -> bool:
    return model.startswith(OPENAI_MODEL_PREFIXES)


class AIProvider:
    """Unified interface for AI providers (Anthropic, OpenAI)."""

    def __init__(self, anthropic_api_key: str | None = None, openai_api_key: str | None = None) -> None:
        """Keys default to settings; clients are created on first use."""
        self._anthropic_api_key = anthropic_api_key if anthropic_api_key is not None else settings.ANTHROPIC_API_KEY
        self._openai_api_key = openai_api_key if openai_api_key is not None else settings.OPENAI_API_KEY
        self._anthropic_client: anthropic.AsyncAnthropic | None = None
        self._openai_client: openai.AsyncOpenAI | None = None

    @property
    def anthropic_client(self) -> anthropic.AsyncAnthropic:
        if self._anthropic_client is None:
            self._anthropic_client = anthropic.AsyncAnthropic(api_key=self._anthropic_api_key)
        return self._anthropic_client

    @property
    def openai_client(self) -> openai.AsyncOpenAI:
        if self._openai_client is None:
            self._openai_client = openai.AsyncOpenAI(api_key=self._openai_api_key)
        return self._openai_client

    def has_key_for(self, model: str) -> bool:
        return bool(self._openai_api_key if is_openai_model(model) else self._anthropic_api_key)

    async def complete(
        self,
        model: str,
        system: str,
        messages: list[dict[str, Any]],
        max_tokens: int = 4096,
        temperature: float = 0.7,
        max_retries: int = 1,
    ) -> dict[str, Any]:
        """Route to call_gpt for OpenAI model names, call_claude otherwise."""
        if is_openai_model(model):
            return await self.call_gpt(model, system, messages, max_tokens, temperature, max_retries)
        return await self.call_claude(model, system, messages, max_tokens, temperature, max_retries)

    async def call_claude(
        self,
        model: str,
        system: str,
        messages: list[dict[str, Any]],
        max_tokens: int = 4096,
        temperature: float = 0.7,
        max_retries: int = 1,
    ) -> dict[str, Any]:
        """
        Call Claude API with streaming and timing telemetry.

        Args:
            model: Model name (e.g., "claude-sonnet-4-20250514")
            system: System prompt
            messages: List of message dicts with "role" and "content"
            max_tokens: Maximum tokens to generate
            temperature: Sampling temperature
            max_retries: Number of retries on transient failures (default 1)

        Returns:
            Dict with:
            - content: Generated text
            - usage: Token counts (input_tokens, output_tokens)
            - timing: Timing telemetry (ttft_ms, total_ms)

        Raises:
            anthropic.APIError: If all retries exhausted
        """
        last_error: Exception | None = None

        for attempt in range(max_retries + 1):
            try:
                request_sent_at = time.perf_counter()
                first_token_at: float | None = None
                content_text = ""
                input_tokens = 0
                output_tokens = 0

                async with self.anthropic_client.messages.stream(
                    model=model,
                    system=system,
                    messages=messages,
                    max_tokens=max_tokens,
                    temperature=temperature,
                ) as stream:
                    async for event in stream:
                        if event.type == "content_block_delta":
                            if first_token_at is None:
                                first_token_at = time.perf_counter()
                            if hasattr(event.delta, "text"):
                                content_text += event.delta.text
                        elif event.type == "message_delta":
                            if hasattr(event.usage, "output_tokens"):
                                output_tokens = event.usage.output_tokens
                        elif event.type == "message_start":
                            if hasattr(event.message, "usage"):
                                input_tokens = event.message.usage.input_tokens

                last_token_at = time.perf_counter()

                total_ms = int((last_token_at - request_sent_at) * 1000)
                ttft_ms = int((first_token_at - request_sent_at) * 1000) if first_token_at else total_ms
                logger.info("Claude %s generation: TTFT=%dms total=%dms", model, ttft_ms, total_ms)

                return {
                    "content": content_text,
                    "usage": {
                        "input_tokens": input_tokens,
                        "output_tokens": output_tokens,
                    },
                    "timing": {
                        "ttft_ms": ttft_ms,
                        "total_ms": total_ms,
                    },
                }
            except _RETRYABLE_ANTHROPIC as e:
                last_error = e
                if attempt < max_retries:
                    wait_time = 2**attempt  # Exponential backoff: 1s, 2s, 4s...
                    logger.warning("Claude API error (attempt %d), retrying in %ds: %s", attempt + 1, wait_time, e)
                    await asyncio.sleep(wait_time)
                else:
                    logger.warning("Claude API error, retries exhausted: %s", e)

        # All retries failed
        raise last_error  # type: ignore[misc]

    async def call_gpt(
        self,
        model: str,
        system: str,
        messages: list[dict[str, Any]],
        max_tokens: int = 4096,
        temperature: float = 0.7,
        max_retries: int = 1,
    ) -> dict[str, Any]:
        """
        Call OpenAI GPT API with retry on transient failures.

        Args:
            model: Model name (e.g., "gpt-4o", "gpt-4o-mini")
            system: System prompt
            messages: List of message dicts with "role" and "content"
            max_tokens: Maximum tokens to generate
            temperature: Sampling temperature
            max_retries: Number of retries on transient failures (default 1)

        Returns:
            Dict with "content" (text) and "usage" (token counts)

        Raises:
            openai.APIError: If all retries exhausted
        """
        # Prepend system message
        full_messages = [{"role": "system", "content": system}] + messages
        last_error: Exception | None = None

        for attempt in range(max_retries + 1):
            try:
                response = await self.openai_client.chat.completions.create(
                    model=model,
                    messages=full_messages,
                    max_tokens=max_tokens,
                    temperature=temperature,
                )

                return {
                    "content": response.choices[0].message.content or "",
                    "usage": {
                        "input_tokens": response.usage.prompt_tokens,
                        "output_tokens": response.usage.completion_tokens,
                    },
                }
            except _RETRYABLE_OPENAI as e:
                last_error = e
                if attempt < max_retries:
                    wait_time = 2**attempt
                    logger.warning("OpenAI API error (attempt %d), retrying in %ds: %s", attempt + 1, wait_time, e)
                    await asyncio.sleep(wait_time)
                else:
                    logger.warning("OpenAI API error, retries exhausted: %s", e)

        raise last_error  # type: ignore[misc]

    async def stream_gpt(
        self,
        model: str,
        system: str,
        messages: list[dict[str, Any]],
        max_tokens: int = 4096,
        temperature: float = 0.7,
    ) -> AsyncIterator[str]:
        """Stream text deltas from OpenAI chat completions. No retries once streaming."""
        full_messages = [{"role": "system", "content": system}] + messages
        stream = await self.openai_client.chat.completions.create(
            model=model,
            messages=full_messages,
            max_tokens=max_tokens,
            temperature=temperature,
            stream=True,
        )
        async for chunk in stream:
            if chunk.choices and chunk.choices[0].delta.content:
                yield chunk.choices[0].delta.content


# Singleton instance
ai_provider = AIProvider()
