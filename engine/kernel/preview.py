"""
Component Builder Kernel — Dynamic Preview Renderer

Compiles generated component source into an isolated preview module and
mounts it at a target (one live RenderedPreviewHandle per target).

render() never raises. Every failure (syntax errors, unresolvable
imports, missing exports, anything unexpected on the host side) becomes a
handle in the "error" state whose document is the error panel. Failures
inside the browser are caught by the document itself (see react_preview).

Each call tears the old handle down before building the new one and
re-runs the whole pipeline; nothing is cached between renders. The
registry is only touched synchronously, so callers on one event loop
never observe two live handles for a target.
"""

from __future__ import annotations

import hashlib
import logging
import uuid
from collections import OrderedDict
from typing import Any

from engine.kernel.mock_props import to_preview_payload
from engine.kernel.react_preview import DEFAULT_REACT_VERSION, render_error_document, render_preview_document
from engine.kernel.tsx_parser import ModuleError, prepare_module
from engine.kernel.types import PreparedModule, PreviewError, RenderedPreviewHandle

logger = logging.getLogger(__name__)

NO_EXPORT_MESSAGE = "No component was exported from the code"
DEFAULT_MAX_TARGETS = 64


class PreviewRenderer:
    """
    Owns the mounted preview handles, keyed by target id.

    At most `max_targets` handles stay mounted; rendering into a new target
    past that tears down the least recently rendered one.
    """

    def __init__(self, react_version: str = DEFAULT_REACT_VERSION, max_targets: int = DEFAULT_MAX_TARGETS) -> None:
        if max_targets < 1:
            raise ValueError(f"max_targets must be at least 1, got {max_targets}")
        self.react_version = react_version
        self.max_targets = max_targets
        self._mounted: OrderedDict[str, RenderedPreviewHandle] = OrderedDict()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def render(self, source: str, mock_props: dict[str, Any] | None, target: str) -> None:
        """
        Mount `source` at `target` with `mock_props`, replacing whatever
        was there. Failures are mounted as error handles, never raised.
        """
        self.unmount(target)

        digest = _digest(source)
        try:
            handle = self._build(source, mock_props or {}, target, digest)
        except Exception as e:
            logger.exception("Preview render failed for target %s", target)
            handle = self._error_handle(PreviewError("runtime", f"{type(e).__name__}: {e}"), target, digest)

        self._mounted[target] = handle
        while len(self._mounted) > self.max_targets:
            oldest = next(iter(self._mounted))
            logger.info("Evicting preview at %s (limit %d)", oldest, self.max_targets)
            self.unmount(oldest)
        if handle.error:
            logger.info("Preview %s at %s failed (%s): %s", handle.handle_id, target, handle.error.kind, handle.error.message)
        else:
            logger.info("Preview %s mounted at %s", handle.handle_id, target)

    def mounted(self, target: str) -> RenderedPreviewHandle | None:
        """The live handle at `target`, if any."""
        return self._mounted.get(target)

    def unmount(self, target: str) -> bool:
        """Tear down the handle at `target`. Returns False if nothing was mounted."""
        handle = self._mounted.pop(target, None)
        if handle is None:
            return False
        handle.torn_down = True
        logger.debug("Preview %s at %s torn down", handle.handle_id, target)
        return True

    def targets(self) -> list[str]:
        return sorted(self._mounted)

    def clear(self) -> None:
        for target in list(self._mounted):
            self.unmount(target)

    # ------------------------------------------------------------------
    # Pipeline
    # ------------------------------------------------------------------

    def _build(self, source: str, mock_props: dict[str, Any], target: str, digest: str) -> RenderedPreviewHandle:
        if not isinstance(source, str) or not source.strip():
            return self._error_handle(PreviewError("compile", "No source code to preview"), target, digest)

        try:
            module = prepare_module(source)
        except ModuleError as e:
            return self._error_handle(PreviewError(e.kind, e.message, e.line, e.column), target, digest)  # type: ignore[arg-type]

        if not _has_component_export(module):
            return self._error_handle(PreviewError("export", NO_EXPORT_MESSAGE), target, digest)

        document = render_preview_document(
            module,
            to_preview_payload(mock_props),
            target,
            react_version=self.react_version,
        )
        return RenderedPreviewHandle(
            handle_id=uuid.uuid4().hex,
            target=target,
            status="mounted",
            document=document,
            source_digest=digest,
            exports=module.exports,
        )

    def _error_handle(self, error: PreviewError, target: str, digest: str) -> RenderedPreviewHandle:
        return RenderedPreviewHandle(
            handle_id=uuid.uuid4().hex,
            target=target,
            status="error",
            document=render_error_document(error, target),
            source_digest=digest,
            error=error,
        )


def _has_component_export(module: PreparedModule) -> bool:
    """
    A default export, or a sole named export standing in for it.

    Whether the sole export is actually callable is only known once the
    module runs; the document checks that again.
    """
    return "default" in module.exports or len(module.exports) == 1


def _digest(source: Any) -> str:
    text = source if isinstance(source, str) else repr(source)
    return hashlib.sha256(text.encode("utf-8")).hexdigest()[:16]
