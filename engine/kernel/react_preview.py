"""
Component Builder Kernel — React Preview Documents

Generates self-contained HTML pages that mount a prepared component module.

React, ReactDOM, Babel standalone and Tailwind are loaded via CDN; Babel
strips TypeScript and JSX client-side. The module body then runs through

    new Function("React", "exports", code)(React, exportsRecord)

so generated code sees the React binding and an empty exports record and
nothing from the host page. Everything that can go wrong in the browser
(Babel errors, evaluation errors, missing exports, render and lifecycle
errors caught by the ErrorBoundary, uncaught async errors) lands in one
error panel and is posted to the parent window.

Pages are mustache templates rendered with chevron. Documents are
deterministic: identical inputs produce identical bytes.
"""

from __future__ import annotations

import json
from typing import Any

import chevron

from engine.kernel.types import PreparedModule, PreviewError

DEFAULT_REACT_VERSION = "18"
BABEL_VERSION = "7"

ERROR_TITLES = {
    "compile": "Compile Error",
    "export": "Export Error",
    "runtime": "Preview Error",
}

PREVIEW_TEMPLATE = """<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="UTF-8">
<meta name="viewport" content="width=device-width, initial-scale=1">
<title>{{title}}</title>
<script crossorigin src="https://unpkg.com/react@{{react_version}}/umd/react.development.js"></script>
<script crossorigin src="https://unpkg.com/react-dom@{{react_version}}/umd/react-dom.development.js"></script>
<script crossorigin src="https://unpkg.com/@babel/standalone@{{babel_version}}/babel.min.js"></script>
<script src="https://cdn.tailwindcss.com"></script>
<style>
{{{css}}}
</style>
</head>
<body>
<div id="root" data-status="loading"></div>
<script>
const MODULE_SOURCE = {{{module_json}}};
const MOCK_PROPS = {{{props_json}}};
const PREVIEW_TARGET = {{{target_json}}};

{{{runtime}}}
</script>
</body>
</html>"""

ERROR_TEMPLATE = """<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="UTF-8">
<meta name="viewport" content="width=device-width, initial-scale=1">
<title>{{title}}</title>
<style>
{{{css}}}
</style>
</head>
<body>
<div id="root" data-status="error">
<div class="preview-error" data-kind="{{kind}}">
<h3 class="preview-error__title">{{heading}}</h3>
<pre class="preview-error__message">{{message}}</pre>
</div>
</div>
<script>
if (window.parent && window.parent !== window) { window.parent.postMessage({{{event_json}}}, "*"); }
</script>
</body>
</html>"""


def render_preview_document(
    module: PreparedModule,
    props_payload: dict[str, Any],
    target: str,
    title: str | None = None,
    react_version: str = DEFAULT_REACT_VERSION,
) -> str:
    """
    Render a complete HTML page that mounts the module's component.

    Args:
        module: Prepared module body (imports/exports already rewritten)
        props_payload: JSON-safe mock props (see mock_props.to_preview_payload)
        target: Preview target id, echoed in postMessage events
        title: Optional page title
        react_version: React major version loaded from the CDN

    Returns:
        Complete HTML string
    """
    return chevron.render(
        PREVIEW_TEMPLATE,
        {
            "title": title or "Component Preview",
            "react_version": react_version,
            "babel_version": BABEL_VERSION,
            "css": PREVIEW_CSS,
            "module_json": _script_json(module.code),
            "props_json": _script_json(props_payload),
            "target_json": _script_json(target),
            "runtime": PREVIEW_RUNTIME,
        },
    )


def render_error_document(error: PreviewError, target: str, title: str | None = None) -> str:
    """
    Render a static page showing a preview error.

    Used when the failure is known before anything reaches the browser
    (syntax errors, unresolvable imports, missing exports).
    """
    event = {"type": "preview-error", "target": target, "kind": error.kind, "message": error.message}
    return chevron.render(
        ERROR_TEMPLATE,
        {
            "title": title or "Component Preview",
            "css": PREVIEW_CSS,
            "kind": error.kind,
            "heading": ERROR_TITLES.get(error.kind, "Preview Error"),
            "message": error.message,
            "event_json": _script_json(event),
        },
    )


def _script_json(value: Any) -> str:
    """JSON for embedding inside a <script> element."""
    return (
        json.dumps(value, ensure_ascii=False, sort_keys=True)
        .replace("</", "<\\/")
        .replace("\u2028", "\\u2028")
        .replace("\u2029", "\\u2029")
    )


# ─────────────────────────────────────────────────────────────────────────────
# CSS
# ─────────────────────────────────────────────────────────────────────────────

PREVIEW_CSS = """
*, *::before, *::after { box-sizing: border-box; }

html, body {
  margin: 0;
  padding: 0;
  min-height: 100%;
  font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', sans-serif;
  -webkit-font-smoothing: antialiased;
}

.preview-frame {
  width: 100%;
  padding: 24px;
}

.preview-error {
  margin: 24px;
  padding: 16px;
  border-radius: 6px;
  border: 1px solid rgba(239, 68, 68, 0.2);
  background: rgba(239, 68, 68, 0.1);
  color: #ef4444;
}

.preview-error__title {
  margin: 0 0 8px;
  font-size: 14px;
  font-weight: 500;
}

.preview-error__message {
  margin: 0;
  font-size: 12px;
  overflow: auto;
  white-space: pre-wrap;
}
"""


# ─────────────────────────────────────────────────────────────────────────────
# Browser runtime (plain ES2017, runs before Babel is involved)
# ─────────────────────────────────────────────────────────────────────────────

PREVIEW_RUNTIME = """
(function () {
  const rootEl = document.getElementById('root');
  const TITLES = { compile: 'Compile Error', export: 'Export Error', runtime: 'Preview Error' };
  let reactRoot = null;
  let failed = false;

  function notify(payload) {
    payload.target = PREVIEW_TARGET;
    if (window.parent && window.parent !== window) {
      window.parent.postMessage(payload, '*');
    }
  }

  function showError(kind, message) {
    if (failed) return;
    failed = true;
    if (reactRoot) {
      try { reactRoot.unmount(); } catch (ignored) { /* already torn down */ }
      reactRoot = null;
    }
    rootEl.textContent = '';
    const panel = document.createElement('div');
    panel.className = 'preview-error';
    panel.setAttribute('data-kind', kind);
    const heading = document.createElement('h3');
    heading.className = 'preview-error__title';
    heading.textContent = TITLES[kind] || TITLES.runtime;
    const pre = document.createElement('pre');
    pre.className = 'preview-error__message';
    pre.textContent = message || 'Unknown error rendering component';
    panel.appendChild(heading);
    panel.appendChild(pre);
    rootEl.appendChild(panel);
    rootEl.setAttribute('data-status', 'error');
    notify({ type: 'preview-error', kind: kind, message: pre.textContent });
  }

  function messageOf(err) {
    return err && err.message ? err.message : String(err);
  }

  function revive(value) {
    if (Array.isArray(value)) return value.map(revive);
    if (value && typeof value === 'object') {
      if (typeof value.$fn === 'string' && Object.keys(value).length === 1) {
        const name = value.$fn;
        return function () { console.log(name + ' called'); };
      }
      const out = {};
      Object.keys(value).forEach(function (key) { out[key] = revive(value[key]); });
      return out;
    }
    return value;
  }

  class ErrorBoundary extends React.Component {
    constructor(props) {
      super(props);
      this.state = { hasError: false };
    }
    static getDerivedStateFromError() {
      return { hasError: true };
    }
    componentDidCatch(error) {
      setTimeout(function () { showError('runtime', messageOf(error)); }, 0);
    }
    render() {
      return this.state.hasError ? null : this.props.children;
    }
  }

  window.addEventListener('error', function (event) {
    showError('runtime', messageOf(event.error || event.message));
  });
  window.addEventListener('unhandledrejection', function (event) {
    showError('runtime', messageOf(event.reason));
  });

  let compiled;
  try {
    compiled = Babel.transform(MODULE_SOURCE, {
      presets: ['react', 'typescript'],
      filename: 'GeneratedComponent.tsx',
    }).code;
  } catch (err) {
    showError('compile', messageOf(err));
    return;
  }
  if (!compiled) {
    showError('compile', 'Code transformation failed');
    return;
  }

  const exportsRecord = {};
  try {
    new Function('React', 'exports', compiled)(React, exportsRecord);
  } catch (err) {
    showError('runtime', messageOf(err));
    return;
  }

  let Component = exportsRecord.default;
  if (!Component) {
    const names = Object.keys(exportsRecord);
    if (names.length === 1 && typeof exportsRecord[names[0]] === 'function') {
      Component = exportsRecord[names[0]];
    }
  }
  const renderable = typeof Component === 'function' || (Component && typeof Component === 'object' && Component.$$typeof);
  if (!renderable) {
    showError('export', 'No component was exported from the code');
    return;
  }

  try {
    reactRoot = ReactDOM.createRoot(rootEl);
    reactRoot.render(
      React.createElement(React.StrictMode, null,
        React.createElement(ErrorBoundary, null,
          React.createElement('div', { className: 'preview-frame' },
            React.createElement(Component, revive(MOCK_PROPS))
          )
        )
      )
    );
    rootEl.setAttribute('data-status', 'mounted');
    notify({ type: 'preview-mounted' });
  } catch (err) {
    showError('runtime', messageOf(err));
  }
})();
"""
