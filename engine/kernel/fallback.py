"""
Deterministic placeholder component.

Built from the prompt text alone (no network). Served whenever the
language model is unreachable, out of quota or not configured.
"""

from __future__ import annotations

import re

from engine.kernel.types import DEFAULT_COMPONENT_NAME

_NON_ALNUM_RE = re.compile(r"[^a-zA-Z0-9]")


def fallback_component_name(description: str) -> str:
    """PascalCase identifier from the description words."""
    name = "".join(word[:1].upper() + word[1:].lower() for word in description.split(" "))
    name = _NON_ALNUM_RE.sub("", name)
    if not name or name[0].isdigit():
        name = DEFAULT_COMPONENT_NAME + name
    return name


def fallback_component(description: str) -> str:
    """Render the placeholder component source for a description."""
    name = fallback_component_name(description)
    # JSX text: only entities need escaping
    quoted = (
        description.replace("&", "&amp;")
        .replace("<", "&lt;")
        .replace(">", "&gt;")
        .replace("{", "&#123;")
        .replace("}", "&#125;")
    )

    return f"""import React from "react";

interface {name}Props {{
  title?: string;
  description?: string;
  theme?: "light" | "dark";
}}

export default function {name}({{
  title = "Component Title",
  description = "This is a description of the component.",
  theme = "light"
}}: {name}Props) {{
  return (
    <div className={{`p-6 rounded-lg shadow-md ${{theme === "dark" ? "bg-gray-800 text-white" : "bg-white text-gray-800"}}`}}>
      <h2 className="text-xl font-bold mb-2">{{title}}</h2>
      <p className="text-sm opacity-80">{{description}}</p>
      <div className="mt-4">
        <p className="text-xs opacity-60">This is a fallback component generated based on: "{quoted}"</p>
      </div>
    </div>
  );
}}"""
