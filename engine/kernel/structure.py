"""
Component Builder Kernel — Structural Extractor

Derives a best-effort StructuralSummary (name, props, state, dependencies)
from generated React/TypeScript source text.

This is pattern matching, not parsing. The documented patterns are the
whole contract:
  name          first capitalized identifier after function/class/const/let/var
  props         first `interface XProps {}` / `type XProps = {}` body, then the
                first destructured parameter list typed `XProps` ("any" for
                names the interface did not declare)
  state         `const [x, setX] = useState<T>(init)`; T, else a literal guess
  dependencies  `import ... from "module"`: non-relative modules and named
                imports except React

analyze() never raises. Any failure yields the default summary with its
error field set; partial results are thrown away.
"""

from __future__ import annotations

import logging
import re

from engine.kernel.types import StructuralSummary

logger = logging.getLogger(__name__)

ANALYSIS_ERROR_MESSAGE = (
    "Could not analyze component structure. The component might be complex or have syntax issues."
)

# ---------------------------------------------------------------------------
# Patterns
# ---------------------------------------------------------------------------

_NAME_RE = re.compile(r"\b(?:function|class|const|let|var)\s+([A-Z][a-zA-Z0-9]*)")
_PROPS_DECL_RE = re.compile(r"\b(?:interface\s+\w*Props\b[^{;]{0,200}|type\s+\w*Props\s*=\s*)\{")
_MEMBER_RE = re.compile(r"^(?:readonly\s+)?(\w+)(\?)?\s*:\s*(.+)$", re.DOTALL)

_DESTRUCTURE_OPEN_RE = re.compile(r"\(\s*\{")
_TYPED_PARAM_RE = re.compile(r"\s*:\s*(?:[\w$]+\.)*\w*Props\b")
_FC_PREFIX_RE = re.compile(r"FC<\s*\w*Props\s*>\s*=\s*(?:async\s*)?$")
_IDENT_RE = re.compile(r"^([A-Za-z_$][\w$]*)")

_STATE_RE = re.compile(r"\b(?:const|let)\s+\[\s*(\w+)\s*,\s*\w+\s*\]\s*=\s*(?:React\s*\.\s*)?useState\b")

_IMPORT_RE = re.compile(r"""\bimport\s+(?:type\s+)?([\w$*\s{},]{1,500}?)\s+from\s+['"]([^'"]+)['"]""")
_NAMED_RE = re.compile(r"\{([^}]*)\}")

_NUMBER_RE = re.compile(r"^[-+]?(?:(?:\d[\d_]*(?:\.\d*)?|\.\d+)(?:[eE][-+]?\d+)?n?|0[xXbBoO][0-9a-fA-F_]+)$")
_STRING_RE = re.compile(r"""^(?:'(?:[^'\\]|\\.)*'|"(?:[^"\\]|\\.)*"|`[^`$]*`)$""", re.DOTALL)

_FRAMEWORK_ROOT = "React"
_QUOTES = "'\"`"


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def analyze(source: str) -> StructuralSummary:
    """
    Analyze generated component source.

    Returns a fresh StructuralSummary. On any unexpected failure the
    default summary is returned with `error` describing the problem.
    """
    try:
        if not isinstance(source, str):
            raise TypeError(f"source must be str, got {type(source).__name__}")

        summary = StructuralSummary()
        name = detect_name(source)
        if name:
            summary.name = name
        summary.props = detect_props(source)
        summary.state = detect_state(source)
        summary.dependencies = detect_dependencies(source)
        return summary
    except Exception:
        logger.exception("Structural analysis failed")
        return StructuralSummary(error=ANALYSIS_ERROR_MESSAGE)


def detect_name(source: str) -> str | None:
    m = _NAME_RE.search(source)
    return m.group(1) if m else None


def detect_props(source: str) -> dict[str, str]:
    """Props from the first XProps declaration, topped up from the destructured signature."""
    props = _interface_props(source)
    for name in _destructured_props(source):
        if name not in props:
            props[name] = "any"
    return props


def detect_state(source: str) -> dict[str, str]:
    """
    State variables declared through useState.

    A repeated variable name keeps the last declaration's type.
    """
    state: dict[str, str] = {}
    pairs: dict[int, int] | None = None
    angle_pairs: dict[int, int] | None = None
    for m in _STATE_RE.finditer(source):
        pos = _skip_ws(source, m.end())
        type_param = None
        if pos < len(source) and source[pos] == "<":
            if angle_pairs is None:
                angle_pairs = _bracket_pairs(source, m.start(), angle=True)
            close = angle_pairs.get(pos, -1)
            if close < 0:
                continue
            type_param = source[pos + 1 : close].strip()
            pos = _skip_ws(source, close + 1)
        if pos >= len(source) or source[pos] != "(":
            continue
        if pairs is None:
            pairs = _bracket_pairs(source, m.start())
        close = pairs.get(pos, -1)
        state[m.group(1)] = type_param or _initial_type(source, pos + 1, close, pairs)
    return state


def _initial_type(source: str, start: int, close: int, pairs: dict[int, int]) -> str:
    """literal_type of source[start:close], reusing the bracket pairs for array/object literals."""
    if close < 0:
        return "any"
    first = _skip_ws(source, start)
    if first < close and source[first] in "[{":
        end = pairs.get(first, -1)
        if end < 0 or source[end + 1 : close].strip():
            return "any"
        return "array" if source[first] == "[" else "object"
    return literal_type(source[start:close])


def detect_dependencies(source: str) -> list[str]:
    """Imported modules and named imports, deduplicated in first-seen order."""
    deps: list[str] = []
    for m in _IMPORT_RE.finditer(source):
        clause, module = m.group(1), m.group(2)
        if not module.startswith("."):
            deps.append(module)
        named = _NAMED_RE.search(clause)
        if not named:
            continue
        for item in named.group(1).split(","):
            ident = item.strip()
            if ident.startswith("type "):
                ident = ident[5:].strip()
            ident = ident.split(" as ")[0].strip()
            if ident and ident != _FRAMEWORK_ROOT:
                deps.append(ident)
    return list(dict.fromkeys(deps))


def literal_type(expr: str) -> str:
    """
    Guess a type from a literal initializer without evaluating it.

    Only numeric, string, boolean, array and object literals are
    recognized; everything else is "any".
    """
    expr = expr.strip()
    if not expr:
        return "any"
    if _NUMBER_RE.match(expr):
        return "number"
    if _STRING_RE.match(expr):
        return "string"
    if expr in ("true", "false"):
        return "boolean"
    if expr.startswith("[") and _scan_group(expr, 0) == len(expr) - 1:
        return "array"
    if expr.startswith("{") and _scan_group(expr, 0) == len(expr) - 1:
        return "object"
    return "any"


# ---------------------------------------------------------------------------
# Props passes
# ---------------------------------------------------------------------------


def _interface_props(source: str) -> dict[str, str]:
    m = _PROPS_DECL_RE.search(source)
    if not m:
        return {}
    open_at = m.end() - 1
    close = _scan_group(source, open_at, angle=True)
    if close < 0:
        return {}
    body = source[open_at + 1 : close]

    props: dict[str, str] = {}
    for member in _split_members(body):
        fm = _MEMBER_RE.match(member)
        if fm:
            # optional marker (group 2) is not part of the label
            props[fm.group(1)] = fm.group(3).strip()
    return props


def _destructured_props(source: str) -> list[str]:
    pairs: dict[int, int] | None = None
    for m in _DESTRUCTURE_OPEN_RE.finditer(source):
        if pairs is None:
            pairs = _bracket_pairs(source, m.start())
        open_at = m.end() - 1
        close = pairs.get(open_at, -1)
        if close < 0:
            continue
        typed_after = _TYPED_PARAM_RE.match(source, close + 1)
        typed_before = _FC_PREFIX_RE.search(source[max(0, m.start() - 80) : m.start()])
        if not (typed_after or typed_before):
            continue

        names = []
        for part in _split_top_level(source[open_at + 1 : close], ","):
            part = part.strip()
            if not part or part.startswith("..."):
                continue
            im = _IDENT_RE.match(part)
            if im:
                names.append(im.group(1))
        return names
    return []


def _split_members(body: str) -> list[str]:
    """
    Split an object-type body into members.

    Separators are `;` and `,` at depth zero, and newlines that do not
    continue a type (a line ending in `:`, `|`, `&` or `=`, or a next line
    starting with `|` or `&`). A continued line is joined with one space.
    Comments between members are dropped.
    """
    members: list[str] = []
    current: list[str] = []
    joining = False
    for i, piece in _iter_top_level(body, angle=True):
        if piece.startswith(("//", "/*")):
            continue
        if piece in (";", ","):
            members.append("".join(current))
            current = []
        elif piece == "\n":
            so_far = "".join(current).rstrip()
            rest = body[i + 1 :].lstrip()
            if so_far and not so_far.endswith((":", "|", "&", "=", "=>")) and not rest.startswith(("|", "&")):
                members.append(so_far)
                current = []
            else:
                current = [so_far, " "] if so_far else []
                joining = True
        elif joining and piece.isspace():
            continue
        else:
            joining = False
            current.append(piece)
    members.append("".join(current))
    return [m.strip() for m in members if m.strip()]


# ---------------------------------------------------------------------------
# Bracket scanning
# ---------------------------------------------------------------------------


def _skip_ws(text: str, pos: int) -> int:
    while pos < len(text) and text[pos].isspace():
        pos += 1
    return pos


def _skip_atom(text: str, pos: int) -> int | None:
    """
    If a string literal or comment starts at pos, return the index of its
    last character; otherwise None. Unterminated atoms run to the end.
    """
    ch = text[pos]
    if ch in _QUOTES:
        i = pos + 1
        while i < len(text):
            if text[i] == "\\":
                i += 2
                continue
            if text[i] == ch:
                return i
            i += 1
        return len(text) - 1
    if text.startswith("//", pos):
        end = text.find("\n", pos)
        return len(text) - 1 if end < 0 else end - 1
    if text.startswith("/*", pos):
        end = text.find("*/", pos + 2)
        return len(text) - 1 if end < 0 else end + 1
    return None


def _scan_group(text: str, start: int, angle: bool = False) -> int:
    """Return the index of the bracket closing text[start], or -1 if unbalanced."""
    opens = "({[<" if angle else "({["
    closes = ")}]>" if angle else ")}]"
    depth = 0
    i = start
    while i < len(text):
        ch = text[i]
        atom_end = _skip_atom(text, i)
        if atom_end is not None:
            i = atom_end
        elif ch == ">" and i > 0 and text[i - 1] == "=":
            pass  # arrow
        elif ch in opens:
            depth += 1
        elif ch in closes:
            depth -= 1
            if depth == 0:
                return i
        i += 1
    return -1


def _bracket_pairs(text: str, start: int = 0, angle: bool = False) -> dict[int, int]:
    """
    Map the index of every balanced opening bracket from `start` on to its
    closing one.

    One pass with a stack. Agrees with _scan_group for every opening
    bracket outside strings and comments.
    """
    opens = "({[<" if angle else "({["
    closes = ")}]>" if angle else ")}]"
    pairs: dict[int, int] = {}
    stack: list[int] = []
    i = start
    while i < len(text):
        ch = text[i]
        atom_end = _skip_atom(text, i)
        if atom_end is not None:
            i = atom_end
        elif ch == ">" and i > 0 and text[i - 1] == "=":
            pass  # arrow
        elif ch in opens:
            stack.append(i)
        elif ch in closes and stack:
            pairs[stack.pop()] = i
        i += 1
    return pairs


def _iter_top_level(text: str, angle: bool = False):
    """
    Yield (index, piece) over text: single characters at depth zero,
    whole bracketed groups, string literals and comments as one piece.
    """
    opens = "({[<" if angle else "({["
    i = 0
    while i < len(text):
        end = _skip_atom(text, i)
        if end is None and text[i] in opens:
            end = _scan_group(text, i, angle=angle)
            if end < 0:
                end = len(text) - 1
        if end is None:
            end = i
        yield i, text[i : end + 1]
        i = end + 1


def _split_top_level(text: str, sep: str) -> list[str]:
    parts: list[str] = []
    current: list[str] = []
    for _, piece in _iter_top_level(text):
        if piece == sep:
            parts.append("".join(current))
            current = []
        else:
            current.append(piece)
    parts.append("".join(current))
    return parts
