"""
Component Builder Kernel — Shared Types

Data classes passed between the structural extractor, the preview renderer,
the file splitter and the HTTP layer. These are the contracts that bind the
kernel together.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any, Literal

DEFAULT_COMPONENT_NAME = "GeneratedComponent"
DEFAULT_DESCRIPTION = "React component generated from a natural-language prompt."

PreviewStatus = Literal["mounted", "error"]
PreviewErrorKind = Literal["compile", "export", "runtime"]


# ---------------------------------------------------------------------------
# Structural summary
# ---------------------------------------------------------------------------


@dataclass
class StructuralSummary:
    """
    Best-effort description of a generated component's declared interface.

    props and state map a name to its type label. dependencies keeps the
    first-appearance order with duplicates removed. error is set when the
    analysis failed and this is the default summary standing in for it.
    """

    name: str = DEFAULT_COMPONENT_NAME
    props: dict[str, str] = field(default_factory=dict)
    state: dict[str, str] = field(default_factory=dict)
    dependencies: list[str] = field(default_factory=list)
    description: str = DEFAULT_DESCRIPTION
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "props": dict(self.props),
            "state": dict(self.state),
            "dependencies": list(self.dependencies),
            "description": self.description,
            "error": self.error,
        }


# ---------------------------------------------------------------------------
# Files
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class SourceFile:
    """One named file carved out of a generated blob."""

    name: str
    content: str

    @property
    def size(self) -> int:
        return len(self.content.encode("utf-8"))


# ---------------------------------------------------------------------------
# Preview
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class PreviewError:
    """A failure captured while preparing or mounting a preview."""

    kind: PreviewErrorKind
    message: str
    line: int | None = None  # 1-based
    column: int | None = None  # 1-based

    def to_dict(self) -> dict[str, Any]:
        return {"kind": self.kind, "message": self.message, "line": self.line, "column": self.column}


@dataclass(frozen=True)
class PreparedModule:
    """
    Generated source rewritten into a module body that only needs the
    injected React binding and an exports record.
    """

    code: str
    exports: tuple[str, ...]  # export names in source order; "default" included
    react_bindings: tuple[str, ...]  # names bound from the React parameter


@dataclass
class RenderedPreviewHandle:
    """The single live preview mounted at a target."""

    handle_id: str
    target: str
    status: PreviewStatus
    document: str
    source_digest: str
    error: PreviewError | None = None
    exports: tuple[str, ...] = ()
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    torn_down: bool = False

    @property
    def mounted(self) -> bool:
        return self.status == "mounted" and not self.torn_down

    def to_dict(self) -> dict[str, Any]:
        return {
            "handle_id": self.handle_id,
            "target": self.target,
            "status": self.status,
            "source_digest": self.source_digest,
            "error": self.error.to_dict() if self.error else None,
            "exports": list(self.exports),
            "created_at": self.created_at.isoformat(),
        }
