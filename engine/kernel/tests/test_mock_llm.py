"""Tests for MockLLM — deterministic streaming with configurable delays."""

from __future__ import annotations

import time
from pathlib import Path

import pytest

from engine.kernel.fallback import fallback_component
from engine.kernel.mock_llm import MockLLM, last_user_text

GOLDEN_DIR = Path(__file__).parent / "fixtures" / "golden"

# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def mock_llm() -> MockLLM:
    """MockLLM pointed at the real golden directory, streaming counter_card."""
    return MockLLM(golden_dir=GOLDEN_DIR, scenario="counter_card")


@pytest.fixture
def mock_llm_tmp(tmp_path: Path) -> MockLLM:
    """MockLLM pointed at a temporary directory for custom fixtures."""
    return MockLLM(golden_dir=tmp_path, scenario="custom")


async def _collect(llm: MockLLM, messages: list[dict]) -> list[str]:
    return [chunk async for chunk in llm.stream(messages)]


# ---------------------------------------------------------------------------
# Golden replies
# ---------------------------------------------------------------------------


async def test_streams_golden_file_lines(mock_llm: MockLLM) -> None:
    """Every line of the golden file is yielded, newlines kept."""
    lines = await _collect(mock_llm, [{"role": "user", "content": "a counter"}])

    expected = (GOLDEN_DIR / "counter_card.txt").read_text()
    assert "".join(lines) == expected
    assert len(lines) == len(expected.splitlines())


async def test_missing_golden_file_raises(tmp_path: Path) -> None:
    """FileNotFoundError raised when scenario golden file does not exist."""
    llm = MockLLM(golden_dir=tmp_path, scenario="no_such_scenario")
    with pytest.raises(FileNotFoundError, match="no_such_scenario"):
        await _collect(llm, [])


async def test_custom_golden_file(mock_llm_tmp: MockLLM, tmp_path: Path) -> None:
    (tmp_path / "custom.txt").write_text("line one\nline two")
    assert await _collect(mock_llm_tmp, []) == ["line one\n", "line two"]


def test_list_scenarios() -> None:
    scenarios = MockLLM(golden_dir=GOLDEN_DIR).list_scenarios()
    assert {"counter_card", "multi_file", "broken_syntax"} <= set(scenarios)


# ---------------------------------------------------------------------------
# Fallback replies
# ---------------------------------------------------------------------------


async def test_without_scenario_streams_fallback_for_last_user_message() -> None:
    llm = MockLLM()
    messages = [
        {"role": "user", "content": "first request"},
        {"role": "assistant", "content": "..."},
        {"role": "user", "content": "pricing table"},
    ]
    text = "".join(await _collect(llm, messages))
    assert text == fallback_component("pricing table")


def test_reply_for_reads_content_blocks() -> None:
    llm = MockLLM()
    messages = [{"role": "user", "content": [{"type": "text", "text": "login form"}]}]
    assert llm.reply_for(messages) == fallback_component("login form")


# ---------------------------------------------------------------------------
# Delay profiles
# ---------------------------------------------------------------------------


async def test_instant_profile_no_delay(mock_llm: MockLLM) -> None:
    """Instant profile completes in under 200ms (no sleep calls)."""
    start = time.perf_counter()
    await _collect(mock_llm, [])
    elapsed_ms = (time.perf_counter() - start) * 1000
    # Allow 200ms for slow CI runners; the key is no asyncio.sleep()
    assert elapsed_ms < 200, f"Instant profile took {elapsed_ms:.1f}ms — should be near zero"


async def test_realistic_profile_timing(tmp_path: Path) -> None:
    """
    realistic profile: ~800ms think time + ~40ms per line.
    With a one-line reply: total ≈ 800ms (no per-line delay after last line).
    Expect at least 640ms (80% margin for CI scheduling variance).
    """
    (tmp_path / "one_line.txt").write_text("export default () => null;")
    llm = MockLLM(golden_dir=tmp_path, profile="realistic", scenario="one_line")

    start = time.perf_counter()
    await _collect(llm, [])
    elapsed_ms = (time.perf_counter() - start) * 1000

    assert elapsed_ms >= 640, f"realistic only took {elapsed_ms:.1f}ms — expected ≥640ms"


def test_unknown_profile_rejected() -> None:
    with pytest.raises(ValueError, match="Unknown delay profile"):
        MockLLM(profile="warp")


def test_last_user_text() -> None:
    messages = [{"role": "user", "content": "one"}, {"role": "assistant", "content": "two"}]
    assert last_user_text(messages) == "one"
    assert last_user_text([]) == ""


def test_last_user_text_joins_content_blocks() -> None:
    messages = [{"role": "user", "content": [{"type": "text", "text": "a dark"}, {"type": "text", "text": "navbar"}]}]
    assert last_user_text(messages) == "a dark navbar"
