"""
Component generation.

Turns a prompt into React/TypeScript component source through the
configured model. Provider failures never reach the caller: they are
logged and the deterministic fallback component is served instead.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from typing import Any

import anthropic
import httpx
import openai

from backend.config import settings
from backend.services.ai_provider import ai_provider, is_openai_model
from backend.services.anthropic_client import AnthropicClient
from backend.services.llm_provider import get_llm
from backend.services.prompt_builder import (
    build_chat_messages,
    build_generation_messages,
    build_system_blocks,
    build_system_prompt,
)
from engine.kernel.code_blocks import clean_generated_code
from engine.kernel.fallback import fallback_component
from engine.kernel.mock_llm import MockLLM, last_user_text

logger = logging.getLogger(__name__)

# Network, quota and API errors from any provider
PROVIDER_ERRORS: tuple[type[Exception], ...] = (anthropic.APIError, openai.APIError, httpx.HTTPError)


async def generate_component(
    prompt: str,
    model: str | None = None,
    temperature: float | None = None,
    max_tokens: int | None = None,
) -> str:
    """
    Generate component source for a prompt.

    Args:
        prompt: Natural-language description of the component
        model: Model name; "gpt-*" names route to OpenAI
        temperature: Sampling temperature
        max_tokens: Maximum tokens to generate

    Returns:
        Cleaned component source. The fallback component when the provider
        is unreachable, out of quota or not configured.
    """
    model = model or settings.GENERATION_MODEL
    temperature = settings.GENERATION_TEMPERATURE if temperature is None else temperature
    max_tokens = max_tokens or settings.GENERATION_MAX_TOKENS

    if settings.USE_MOCK_LLM:
        llm = MockLLM(profile=settings.MOCK_LLM_PROFILE)
        chunks = [chunk async for chunk in llm.stream([{"role": "user", "content": prompt}])]
        return clean_generated_code("".join(chunks))

    if not ai_provider.has_key_for(model):
        logger.warning("No API key configured for %s, serving fallback component", model)
        return fallback_component(prompt)

    try:
        result = await ai_provider.complete(
            model,
            build_system_prompt(),
            build_generation_messages(prompt),
            max_tokens=max_tokens,
            temperature=temperature,
            max_retries=settings.GENERATION_MAX_RETRIES,
        )
    except PROVIDER_ERRORS as e:
        logger.warning("Generation failed on %s, serving fallback component: %s", model, e)
        return fallback_component(prompt)

    content = result["content"]
    if not content.strip():
        logger.warning("Empty generation from %s, serving fallback component", model)
        return fallback_component(prompt)

    logger.info("Generated component with %s (%s)", model, result["usage"])
    return clean_generated_code(content)


async def stream_component(
    messages: list[dict[str, Any]],
    model: str | None = None,
    temperature: float | None = None,
    max_tokens: int | None = None,
) -> AsyncIterator[str]:
    """
    Stream component source for a chat conversation.

    A failure before the first fragment streams the fallback component for
    the last user message instead. A failure after it ends the stream.

    Yields:
        Text fragments as they arrive
    """
    model = model or settings.GENERATION_MODEL
    temperature = settings.GENERATION_TEMPERATURE if temperature is None else temperature
    max_tokens = max_tokens or settings.CHAT_MAX_TOKENS
    request = last_user_text(messages)

    emitted = False
    try:
        async for chunk in _open_stream(messages, model, temperature, max_tokens):
            emitted = True
            yield chunk
    except PROVIDER_ERRORS as e:
        if emitted:
            logger.warning("Chat stream from %s interrupted: %s", model, e)
            return
        logger.warning("Chat stream from %s failed, streaming fallback component: %s", model, e)
        yield fallback_component(request)


def _open_stream(
    messages: list[dict[str, Any]],
    model: str,
    temperature: float,
    max_tokens: int,
) -> AsyncIterator[str]:
    if settings.USE_MOCK_LLM:
        return MockLLM(profile=settings.MOCK_LLM_PROFILE).stream(messages)

    prompt_messages = build_chat_messages(messages)
    if is_openai_model(model):
        if not ai_provider.has_key_for(model):
            return _fallback_stream(messages, model)
        return ai_provider.stream_gpt(model, build_system_prompt(), prompt_messages, max_tokens, temperature)

    llm = get_llm()
    if isinstance(llm, MockLLM):
        logger.warning("No Anthropic API key configured, streaming fallback component")
        return llm.stream(messages)
    return _anthropic_stream(llm, prompt_messages, model, max_tokens, temperature)


async def _anthropic_stream(
    llm: AnthropicClient,
    prompt_messages: list[dict[str, Any]],
    model: str,
    max_tokens: int,
    temperature: float,
) -> AsyncIterator[str]:
    async for chunk in llm.stream(
        prompt_messages,
        system=build_system_blocks(),
        model=model,
        max_tokens=max_tokens,
        temperature=temperature,
    ):
        yield chunk
    logger.info("Chat stream from %s finished (%s)", model, await llm.get_usage_stats())


async def _fallback_stream(messages: list[dict[str, Any]], model: str) -> AsyncIterator[str]:
    logger.warning("No API key configured for %s, streaming fallback component", model)
    yield fallback_component(last_user_text(messages))
