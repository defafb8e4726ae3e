"""
Fenced code-block handling for LLM output.

extract_code_block() pulls the first fenced block out of a chat reply;
clean_generated_code() normalizes a completion that is supposed to be
nothing but component source.
"""

from __future__ import annotations

import re

_FENCED_BLOCK_RE = re.compile(r"```(?:jsx?|tsx?|javascript|typescript)?[ \t]*\n([\s\S]*?)```")
_FENCE_OPEN_RE = re.compile(r"```(?:jsx|tsx|javascript|typescript|js|ts)?[ \t]*\n")
_FENCE_CLOSE_RE = re.compile(r"```\s*$")

REACT_IMPORT = 'import React from "react";'


def extract_code_block(text: str) -> str:
    """Inner text of the first fenced code block, trimmed; otherwise text unchanged."""
    m = _FENCED_BLOCK_RE.search(text)
    if m and m.group(1).strip():
        return m.group(1).strip()
    return text


def clean_generated_code(code: str) -> str:
    """
    Strip markdown fences and make sure React is imported.

    Returns the trimmed source.
    """
    cleaned = _FENCE_OPEN_RE.sub("", code)
    cleaned = _FENCE_CLOSE_RE.sub("", cleaned)
    if "import React" not in cleaned:
        cleaned = f"{REACT_IMPORT}\n{cleaned}"
    return cleaned.strip()
