"""
Mock LLM for deterministic testing and UX timing simulation.

Streams either a golden reply file or the fallback component for the
prompt, line by line with configurable delays. Exposes the same stream()
signature as AnthropicClient so it can stand in for it.
"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator
from pathlib import Path
from typing import Any

from engine.kernel.fallback import fallback_component

GOLDEN_DIR = Path(__file__).parent / "tests" / "fixtures" / "golden"

DELAY_PROFILES: dict[str, dict[str, int]] = {
    "instant": {"think_ms": 0, "per_line_ms": 0},
    "realistic": {"think_ms": 800, "per_line_ms": 40},
    "slow": {"think_ms": 3000, "per_line_ms": 200},
}


class MockLLM:
    """Streams golden replies (or the fallback component) line by line."""

    def __init__(self, golden_dir: Path = GOLDEN_DIR, profile: str = "instant", scenario: str | None = None):
        if profile not in DELAY_PROFILES:
            raise ValueError(f"Unknown delay profile: {profile!r}. Valid profiles: {list(DELAY_PROFILES)}")
        self.golden_dir = golden_dir
        self.profile = profile
        self.scenario = scenario

    async def stream(
        self,
        messages: list[dict[str, Any]],
        system: str | list[dict[str, Any]] | None = None,
        model: str | None = None,
        max_tokens: int | None = None,
        temperature: float | None = None,
        **kwargs: Any,
    ) -> AsyncIterator[str]:
        """
        Stream a reply line by line, newline included.

        With a scenario set, the golden file `<scenario>.txt` is streamed;
        otherwise the fallback component for the last user message.

        Raises:
            FileNotFoundError: If the scenario's golden file does not exist
        """
        delays = DELAY_PROFILES[self.profile]
        text = self.reply_for(messages)
        lines = text.splitlines(keepends=True)

        # Think time before first line
        if delays["think_ms"] > 0:
            await asyncio.sleep(delays["think_ms"] / 1000)

        for i, line in enumerate(lines):
            yield line

            # Per-line delay after each line except the last
            if i < len(lines) - 1 and delays["per_line_ms"] > 0:
                await asyncio.sleep(delays["per_line_ms"] / 1000)

    def reply_for(self, messages: list[dict[str, Any]]) -> str:
        """The full text stream() would produce."""
        if self.scenario:
            path = self.golden_dir / f"{self.scenario}.txt"
            if not path.exists():
                raise FileNotFoundError(f"Golden file not found: {path}")
            return path.read_text()
        return fallback_component(last_user_text(messages))

    def list_scenarios(self) -> list[str]:
        """Return names of all available golden reply scenarios."""
        return sorted(p.stem for p in self.golden_dir.glob("*.txt"))


def last_user_text(messages: list[dict[str, Any]]) -> str:
    """Text of the most recent user message; content blocks are joined with spaces."""
    for message in reversed(messages):
        if message.get("role") == "user":
            content = message.get("content", "")
            if isinstance(content, list):
                return " ".join(block.get("text", "") for block in content if isinstance(block, dict))
            return str(content)
    return ""
