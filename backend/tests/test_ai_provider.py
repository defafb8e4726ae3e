"""Tests for AIProvider — model routing and retry on transient failures."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock, patch

import anthropic
import httpx
import openai
import pytest

from backend.services.ai_provider import AIProvider, is_openai_model

_REQUEST = httpx.Request("POST", "https://api.example.com/v1/chat/completions")


def _completion(text: str) -> MagicMock:
    response = MagicMock()
    response.choices[0].message.content = text
    response.usage.prompt_tokens = 12
    response.usage.completion_tokens = 34
    return response


@pytest.fixture
def provider() -> AIProvider:
    return AIProvider(anthropic_api_key="a-key", openai_api_key="o-key")


def test_is_openai_model():
    assert is_openai_model("gpt-4o")
    assert is_openai_model("o3-mini")
    assert not is_openai_model("claude-sonnet-4-20250514")


def test_has_key_for():
    provider = AIProvider(anthropic_api_key="a-key", openai_api_key="")
    assert provider.has_key_for("claude-sonnet-4-20250514")
    assert not provider.has_key_for("gpt-4o")


def test_clients_are_created_lazily(provider):
    assert provider._anthropic_client is None
    assert provider._openai_client is None
    assert provider.openai_client is provider.openai_client


async def test_complete_routes_gpt_models(provider):
    with patch.object(provider, "call_gpt", new=AsyncMock(return_value={"content": "x"})) as gpt, patch.object(
        provider, "call_claude", new=AsyncMock(return_value={"content": "y"})
    ) as claude:
        assert (await provider.complete("gpt-4o", "sys", []))["content"] == "x"
        assert (await provider.complete("claude-sonnet-4-20250514", "sys", []))["content"] == "y"
    gpt.assert_awaited_once()
    claude.assert_awaited_once()


async def test_call_gpt_prepends_system(provider):
    create = AsyncMock(return_value=_completion("export default 1;"))
    with patch.object(provider.openai_client.chat.completions, "create", new=create):
        result = await provider.call_gpt("gpt-4o", "be terse", [{"role": "user", "content": "hi"}])

    assert result == {"content": "export default 1;", "usage": {"input_tokens": 12, "output_tokens": 34}}
    messages = create.call_args.kwargs["messages"]
    assert messages[0] == {"role": "system", "content": "be terse"}
    assert messages[1] == {"role": "user", "content": "hi"}


async def test_call_gpt_retries_transient_errors(provider):
    create = AsyncMock(side_effect=[openai.APIConnectionError(request=_REQUEST), _completion("ok")])
    with patch.object(provider.openai_client.chat.completions, "create", new=create), patch(
        "backend.services.ai_provider.asyncio.sleep", new=AsyncMock()
    ) as sleep:
        result = await provider.call_gpt("gpt-4o", "sys", [], max_retries=1)

    assert result["content"] == "ok"
    assert create.await_count == 2
    sleep.assert_awaited_once_with(1)


async def test_call_gpt_raises_when_retries_exhausted(provider):
    create = AsyncMock(side_effect=openai.APIConnectionError(request=_REQUEST))
    with patch.object(provider.openai_client.chat.completions, "create", new=create), patch(
        "backend.services.ai_provider.asyncio.sleep", new=AsyncMock()
    ):
        with pytest.raises(openai.APIConnectionError):
            await provider.call_gpt("gpt-4o", "sys", [], max_retries=2)
    assert create.await_count == 3


async def test_call_claude_does_not_retry_client_errors(provider):
    error = anthropic.BadRequestError(
        "bad request",
        response=httpx.Response(400, request=_REQUEST),
        body=None,
    )
    stream = MagicMock(side_effect=error)
    with patch.object(provider.anthropic_client.messages, "stream", new=stream):
        with pytest.raises(anthropic.BadRequestError):
            await provider.call_claude("claude-sonnet-4-20250514", "sys", [], max_retries=3)
    assert stream.call_count == 1
