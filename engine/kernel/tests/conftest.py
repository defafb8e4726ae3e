"""
Engine kernel test configuration.

Golden replies live in fixtures/golden as raw LLM output (prose + fenced code).
"""

from collections.abc import Callable
from pathlib import Path

import pytest

GOLDEN_DIR = Path(__file__).parent / "fixtures" / "golden"


@pytest.fixture
def golden() -> Callable[[str], str]:
    """Read a golden reply by scenario name."""

    def _read(name: str) -> str:
        return (GOLDEN_DIR / f"{name}.txt").read_text()

    return _read
