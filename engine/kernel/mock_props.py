"""
Component Builder Kernel — Mock Property Sets

Synthesizes example prop values for the preview from a StructuralSummary.
The type → value policy is fixed so the same summary always produces the
same mock set.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable
from typing import Any

from engine.kernel.types import StructuralSummary

logger = logging.getLogger(__name__)

FUNCTION_MARKER = "$fn"

_NULLABLE_RE = re.compile(r"\s*\|\s*(?:null|undefined)\b|\b(?:null|undefined)\s*\|\s*")
_ARRAY_RE = re.compile(r"^(?:.+\[\]|(?:Readonly)?Array<.+>|\[.*\])$", re.DOTALL)
_FUNCTION_RE = re.compile(r"=>|^Function$|^\(.*\)\s*:")
_OBJECT_RE = re.compile(r"^(?:\{.*\}|Record<.+>|object|Object)$", re.DOTALL)
_STRING_LITERAL_RE = re.compile(r"""^(['"])(.*)\1$""")


def coarse_type(ts_type: str) -> str:
    """
    Reduce verbatim TypeScript type text to a coarse label.

    Labels: string, number, boolean, array, object, function, union, any.
    `union` means a union of string literals. Nullable wrappers are ignored.
    """
    cleaned = _strip_nullable(ts_type)

    if cleaned in ("string", "number", "boolean", "array", "object", "function"):
        return cleaned
    if _FUNCTION_RE.search(cleaned):
        return "function"
    if _ARRAY_RE.match(cleaned):
        return "array"
    if _OBJECT_RE.match(cleaned):
        return "object"
    if _string_union(cleaned):
        return "union"
    return "any"


def mock_value(name: str, ts_type: str) -> Any:
    """
    Example value for one prop.

    A union of string literals gets its first literal instead of the
    "Mock <name>" string, so the component receives a value it accepts.
    """
    kind = coarse_type(ts_type)
    if kind == "string":
        return f"Sample {name}"
    if kind == "number":
        return 42
    if kind == "boolean":
        return True
    if kind == "array":
        return ["Item 1", "Item 2", "Item 3"]
    if kind == "object":
        return {"id": 1, "name": "Sample Object"}
    if kind == "function":
        return _noop(name)
    if kind == "union":
        return _string_union(_strip_nullable(ts_type))[0]
    return f"Mock {name}"


def build_mock_props(summary: StructuralSummary) -> dict[str, Any]:
    """Build the MockPropertySet for a summary's props."""
    return {name: mock_value(name, ts_type) for name, ts_type in summary.props.items()}


def to_preview_payload(mock_props: dict[str, Any]) -> dict[str, Any]:
    """
    JSON-safe form of a mock set.

    Callables become {"$fn": name} markers; the preview document revives
    them as no-op functions.
    """
    return {key: _encode(key, value) for key, value in mock_props.items()}


def _encode(key: str, value: Any) -> Any:
    if callable(value):
        return {FUNCTION_MARKER: getattr(value, "mock_name", key)}
    if isinstance(value, dict):
        return {k: _encode(k, v) for k, v in value.items()}
    if isinstance(value, list | tuple):
        return [_encode(key, v) for v in value]
    return value


def _noop(name: str) -> Callable[..., None]:
    def handler(*args: Any, **kwargs: Any) -> None:
        logger.debug("%s called", name)

    handler.mock_name = name  # type: ignore[attr-defined]
    return handler


def _strip_nullable(ts_type: str) -> str:
    cleaned = _NULLABLE_RE.sub("", ts_type or "").strip()
    if cleaned.startswith("|"):
        # leading pipe of a multi-line union
        cleaned = cleaned[1:].strip()
    if cleaned.startswith("(") and cleaned.endswith(")") and "=>" not in cleaned:
        cleaned = cleaned[1:-1].strip()
    return cleaned


def _string_union(ts_type: str) -> list[str]:
    """Members of a union made only of string literals, else []."""
    if "|" not in ts_type:
        return []
    values = []
    for member in ts_type.split("|"):
        m = _STRING_LITERAL_RE.match(member.strip())
        if not m:
            return []
        values.append(m.group(2))
    return values
