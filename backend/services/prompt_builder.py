"""
Prompt builder for component generation.

Assembles the system preamble and user messages from the prompt files in
backend/prompts. The preamble is marked with cache_control for token
efficiency.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

PROMPTS_DIR = Path(__file__).parent.parent / "prompts"

# Cache loaded prompts in memory (they don't change at runtime)
_cache: dict[str, str] = {}


def _load(name: str) -> str:
    """Load and cache a prompt file."""
    if name not in _cache:
        path = PROMPTS_DIR / f"{name}.md"
        _cache[name] = path.read_text().strip()
    return _cache[name]


def build_system_prompt() -> str:
    return _load("system_preamble")


def build_system_blocks() -> list[dict[str, Any]]:
    """
    Build the system prompt as content blocks for Anthropic API.

    A single cached block: the preamble is identical for every request.
    """
    return [
        {
            "type": "text",
            "text": build_system_prompt(),
            "cache_control": {"type": "ephemeral"},
        }
    ]


def build_generation_prompt(description: str) -> str:
    """Wrap a one-shot component description in the generation requirements."""
    return _load("generate").replace("{{description}}", description.strip())


def build_generation_messages(description: str) -> list[dict[str, Any]]:
    return [{"role": "user", "content": build_generation_prompt(description)}]


def build_chat_messages(conversation: list[dict[str, Any]], tail_size: int = 10) -> list[dict[str, Any]]:
    """
    Build messages array for a chat turn.

    Keeps the recent conversation tail and wraps the last user message in
    the chat guidelines. Roles other than user/assistant are dropped.

    Args:
        conversation: Chat history, oldest first
        tail_size: Number of recent turns to include

    Returns:
        Messages array formatted for Anthropic API
    """
    turns = [t for t in conversation if t.get("role") in ("user", "assistant")]
    tail = turns[-tail_size:]

    messages: list[dict[str, Any]] = [{"role": t["role"], "content": str(t.get("content", ""))} for t in tail]
    # The API requires the conversation to open with a user turn
    while messages and messages[0]["role"] != "user":
        messages.pop(0)

    for msg in reversed(messages):
        if msg["role"] == "user":
            msg["content"] = _load("chat").replace("{{request}}", msg["content"])
            break

    return messages
