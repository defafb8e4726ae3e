"""Tests for the dynamic preview renderer — handles, error containment and documents."""

from __future__ import annotations

import json
import re
from unittest.mock import patch

import pytest

from engine.kernel import preview as preview_mod
from engine.kernel.preview import NO_EXPORT_MESSAGE, PreviewRenderer

VALID = """import React, { useState } from "react";

interface CounterProps {
  label: string;
  onChange?: (value: number) => void;
}

export default function Counter({ label, onChange }: CounterProps) {
  const [count, setCount] = useState(0);
  return <button onClick={() => { setCount(count + 1); onChange?.(count + 1); }}>{label}: {count}</button>;
}
"""

THROWS = """export default function Exploding() {
  throw new Error("kaboom during render");
}
"""


@pytest.fixture
def renderer() -> PreviewRenderer:
    return PreviewRenderer()


def _module_source(document: str) -> str:
    m = re.search(r"const MODULE_SOURCE = (.*);\n", document)
    assert m, "module source not embedded"
    return json.loads(m.group(1))


# ---------------------------------------------------------------------------
# Mounting
# ---------------------------------------------------------------------------


def test_valid_source_mounts(renderer):
    renderer.render(VALID, {"label": "Clicks"}, "main")
    handle = renderer.mounted("main")

    assert handle is not None
    assert handle.status == "mounted"
    assert handle.mounted
    assert handle.error is None
    assert handle.exports == ("default",)
    assert 'data-status="loading"' in handle.document


def test_document_embeds_prepared_module_and_props(renderer):
    renderer.render(VALID, {"label": "Clicks"}, "main")
    document = renderer.mounted("main").document

    source = _module_source(document)
    assert "import" not in source
    assert "const { useState } = React;" in source
    assert "exports.default = Counter;" in source
    assert 'const MOCK_PROPS = {"label": "Clicks"};' in document
    assert 'const PREVIEW_TARGET = "main";' in document


def test_react_injected_without_explicit_import(renderer):
    renderer.render("export default function Bare() { return <p>bare</p>; }", {}, "main")
    handle = renderer.mounted("main")
    assert handle.status == "mounted"
    assert "new Function('React', 'exports', compiled)(React, exportsRecord)" in handle.document


def test_function_props_sent_as_markers(renderer):
    renderer.render(VALID, {"label": "x", "onChange": lambda value: None}, "main")
    assert '"onChange": {"$fn": "onChange"}' in renderer.mounted("main").document


def test_sole_named_export_accepted(renderer):
    renderer.render("export const Only = () => <div />;", {}, "main")
    handle = renderer.mounted("main")
    assert handle.status == "mounted"
    assert handle.exports == ("Only",)


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------


def test_invalid_source_shows_compile_error_and_mounts_nothing(renderer):
    renderer.render("export default function Broken( {\n  return <div>;\n", {}, "main")
    handle = renderer.mounted("main")

    assert handle.status == "error"
    assert not handle.mounted
    assert handle.error.kind == "compile"
    assert handle.error.message.startswith("SyntaxError")
    assert 'class="preview-error"' in handle.document
    assert "Compile Error" in handle.document
    assert "MODULE_SOURCE" not in handle.document


def test_unresolvable_import_is_compile_error(renderer):
    source = 'import { motion } from "framer-motion";\nexport default function A() { return null; }'
    renderer.render(source, {}, "main")
    handle = renderer.mounted("main")
    assert handle.error.kind == "compile"
    assert "framer-motion" in handle.error.message


def test_missing_export_is_export_error(renderer):
    renderer.render("function Hidden() { return null; }", {}, "main")
    handle = renderer.mounted("main")
    assert handle.status == "error"
    assert handle.error.kind == "export"
    assert handle.error.message == NO_EXPORT_MESSAGE
    assert "Export Error" in handle.document


def test_two_named_exports_without_default_is_export_error(renderer):
    renderer.render("export const A = () => null;\nexport const B = () => null;", {}, "main")
    assert renderer.mounted("main").error.kind == "export"


def test_empty_source_is_compile_error(renderer):
    renderer.render("   ", {}, "main")
    assert renderer.mounted("main").error.kind == "compile"


def test_component_that_throws_gets_contained(renderer):
    """Render-time exceptions happen in the browser; the document must catch and report them."""
    renderer.render(THROWS, {}, "main")
    handle = renderer.mounted("main")

    # Host side it is a valid module
    assert handle.status == "mounted"
    document = handle.document
    # ErrorBoundary wraps the component and routes failures to the error panel
    assert "class ErrorBoundary extends React.Component" in document
    assert "componentDidCatch(error)" in document
    assert "React.createElement(ErrorBoundary, null" in document
    assert "showError('runtime'" in document
    assert "window.addEventListener('error'" in document
    assert "type: 'preview-error'" in document


def test_unexpected_host_failure_becomes_runtime_error(renderer):
    with patch.object(preview_mod, "prepare_module", side_effect=RuntimeError("parser exploded")):
        renderer.render(VALID, {}, "main")
    handle = renderer.mounted("main")
    assert handle.status == "error"
    assert handle.error.kind == "runtime"
    assert "parser exploded" in handle.error.message


def test_error_message_is_html_escaped(renderer):
    renderer.render('import x from "<script>alert(1)</script>";\nexport default 1;', {}, "main")
    document = renderer.mounted("main").document
    assert "<script>alert(1)</script>" not in document.split("<script>\nif")[0]
    assert "&lt;script&gt;" in document


# ---------------------------------------------------------------------------
# Lifecycle
# ---------------------------------------------------------------------------


def test_identical_renders_are_idempotent(renderer):
    renderer.render(VALID, {"label": "Same"}, "main")
    first = renderer.mounted("main")
    renderer.render(VALID, {"label": "Same"}, "main")
    second = renderer.mounted("main")

    assert second.document == first.document
    assert second.source_digest == first.source_digest
    assert renderer.targets() == ["main"]
    assert first.torn_down
    assert second.mounted


def test_rerender_replaces_previous_handle(renderer):
    renderer.render(VALID, {"label": "One"}, "main")
    old = renderer.mounted("main")
    renderer.render("not valid (", {}, "main")

    assert old.torn_down
    assert renderer.mounted("main").status == "error"
    assert renderer.targets() == ["main"]


def test_targets_are_independent(renderer):
    renderer.render(VALID, {"label": "a"}, "left")
    renderer.render("function X() {}", {}, "right")
    assert renderer.targets() == ["left", "right"]
    assert renderer.mounted("left").status == "mounted"
    assert renderer.mounted("right").status == "error"


def test_unmount(renderer):
    renderer.render(VALID, {}, "main")
    handle = renderer.mounted("main")

    assert renderer.unmount("main") is True
    assert handle.torn_down
    assert renderer.mounted("main") is None
    assert renderer.unmount("main") is False


def test_clear(renderer):
    renderer.render(VALID, {}, "a")
    renderer.render(VALID, {}, "b")
    renderer.clear()
    assert renderer.targets() == []


def test_target_count_is_capped_oldest_evicted():
    renderer = PreviewRenderer(max_targets=3)
    for i in range(10):
        renderer.render(VALID, {}, f"t{i}")
    assert renderer.targets() == ["t7", "t8", "t9"]
    assert renderer.mounted("t0") is None


def test_rerender_refreshes_target_before_eviction():
    renderer = PreviewRenderer(max_targets=2)
    renderer.render(VALID, {}, "a")
    renderer.render(VALID, {}, "b")
    first_b = renderer.mounted("b")
    renderer.render(VALID, {"label": "again"}, "a")
    renderer.render(VALID, {}, "c")

    assert renderer.targets() == ["a", "c"]
    assert first_b.torn_down


def test_max_targets_must_be_positive():
    with pytest.raises(ValueError):
        PreviewRenderer(max_targets=0)


def test_none_props_treated_as_empty(renderer):
    renderer.render(VALID, None, "main")
    assert "const MOCK_PROPS = {};" in renderer.mounted("main").document
