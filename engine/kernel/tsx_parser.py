"""
Component Builder Kernel — TSX Module Parser

Uses tree-sitter (TSX grammar) to check generated component source for
syntax errors and to rewrite its import/export statements into a module
body that runs inside an isolated function scope:

    new Function("React", "exports", body)

React imports become bindings of the injected React parameter. Exports
become assignments on the injected exports record. Any other import is
unresolvable in a preview and reported as a ModuleError.

Type annotations and JSX are left for Babel in the preview document.
"""

from __future__ import annotations

from typing import Any

import tree_sitter_typescript as _ts_mod
from tree_sitter import Language, Parser

from engine.kernel.types import PreparedModule

_LANG = Language(_ts_mod.language_tsx())
_PARSER = Parser(_LANG)

REACT_MODULES = frozenset({"react"})

# Declarations that only exist at the type level; Babel drops them.
_TYPE_ONLY_DECLARATIONS = {
    "interface_declaration",
    "type_alias_declaration",
    "ambient_declaration",
    "function_signature",
}


# ---------------------------------------------------------------------------
# Public types
# ---------------------------------------------------------------------------


class ModuleError(Exception):
    """Source cannot be turned into a preview module."""

    def __init__(self, kind: str, message: str, line: int | None = None, column: int | None = None) -> None:
        super().__init__(message)
        self.kind = kind  # "compile" or "export"
        self.message = message
        self.line = line
        self.column = column


class SyntaxIssue:
    """The first syntax error found in a parse tree."""

    __slots__ = ("message", "line", "column")

    def __init__(self, message: str, line: int, column: int) -> None:
        self.message = message
        self.line = line  # 1-based
        self.column = column  # 1-based

    def __repr__(self) -> str:
        return f"SyntaxIssue({self.message!r}, line={self.line}, column={self.column})"


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def parse(source: str) -> Any:
    """Parse TSX source and return the tree-sitter tree."""
    return _PARSER.parse(source.encode("utf-8"))


def find_syntax_error(source: str) -> SyntaxIssue | None:
    """Return the first ERROR or MISSING node as a SyntaxIssue, or None if the source parses cleanly."""
    root = parse(source).root_node
    if not root.has_error:
        return None

    stack = [root]
    while stack:
        node = stack.pop()
        if node.type == "ERROR" or node.is_missing:
            row, col = node.start_point[0], node.start_point[1]
            if node.is_missing:
                message = f"SyntaxError: Missing {node.type!r}"
            else:
                snippet = node.text.decode("utf-8", errors="replace").strip().splitlines()
                token = snippet[0][:40] if snippet else ""
                message = f"SyntaxError: Unexpected token {token!r}" if token else "SyntaxError: Unexpected end of input"
            return SyntaxIssue(f"{message} ({row + 1}:{col + 1})", row + 1, col + 1)
        if node.has_error:
            # children are pushed reversed so the earliest error pops first
            stack.extend(reversed(node.children))

    return SyntaxIssue("SyntaxError: Invalid source", 1, 1)


def prepare_module(source: str) -> PreparedModule:
    """
    Rewrite a component module for the isolated preview scope.

    Raises:
        ModuleError: kind "compile" on syntax errors or unresolvable imports
    """
    issue = find_syntax_error(source)
    if issue:
        raise ModuleError("compile", issue.message, issue.line, issue.column)

    data = source.encode("utf-8")
    root = parse(source).root_node

    edits: list[tuple[int, int, bytes]] = []
    react_bindings: list[str] = []
    exports: list[str] = []
    assignments: list[str] = []

    for node in root.children:
        if node.type == "import_statement":
            replacement = _rewrite_import(node, react_bindings)
            edits.append((node.start_byte, node.end_byte, replacement.encode("utf-8")))
        elif node.type == "export_statement":
            start, end, replacement = _rewrite_export(node, data, exports, assignments)
            edits.append((start, end, replacement))

    for start, end, replacement in sorted(edits, reverse=True):
        data = data[:start] + replacement + data[end:]

    code = data.decode("utf-8").rstrip()
    if assignments:
        code += "\n\n" + "\n".join(assignments)
    return PreparedModule(code=code + "\n", exports=tuple(exports), react_bindings=tuple(react_bindings))


def export_names(source: str) -> list[str]:
    """Names a module exports ("default" included), without rewriting it."""
    return list(prepare_module(source).exports)


# ---------------------------------------------------------------------------
# Imports
# ---------------------------------------------------------------------------


def _rewrite_import(node: Any, react_bindings: list[str]) -> str:
    source_node = node.child_by_field_name("source")
    module = _string_value(source_node) if source_node else ""
    clause = _first_child(node, "import_clause")

    if clause is None:
        # side-effect import (stylesheets and the like); nothing to bind
        return ""
    if _has_token(node, "type"):
        return ""
    if module not in REACT_MODULES:
        row, col = node.start_point[0], node.start_point[1]
        raise ModuleError(
            "compile",
            f"Cannot resolve module {module!r}: previews can only import from 'react'",
            row + 1,
            col + 1,
        )

    lines: list[str] = []
    named: list[str] = []
    for child in clause.children:
        if child.type == "identifier":
            lines.append(_alias_react(child.text.decode("utf-8"), react_bindings))
        elif child.type == "namespace_import":
            ident = _first_child(child, "identifier")
            if ident is not None:
                lines.append(_alias_react(ident.text.decode("utf-8"), react_bindings))
        elif child.type == "named_imports":
            for specifier in child.children:
                if specifier.type != "import_specifier" or _has_token(specifier, "type"):
                    continue
                name = specifier.child_by_field_name("name")
                alias = specifier.child_by_field_name("alias")
                if name is None:
                    continue
                imported = name.text.decode("utf-8")
                local = alias.text.decode("utf-8") if alias is not None else imported
                react_bindings.append(local)
                named.append(imported if local == imported else f"{imported}: {local}")

    if named:
        lines.append(f"const {{ {', '.join(named)} }} = React;")
    return " ".join(line for line in lines if line)


def _alias_react(local: str, react_bindings: list[str]) -> str:
    react_bindings.append(local)
    if local == "React":
        return ""
    return f"const {local} = React;"


# ---------------------------------------------------------------------------
# Exports
# ---------------------------------------------------------------------------


def _rewrite_export(node: Any, data: bytes, exports: list[str], assignments: list[str]) -> tuple[int, int, bytes]:
    """Return (start, end, replacement) for one export statement."""
    is_default = _has_token(node, "default")
    declaration = node.child_by_field_name("declaration")
    value = node.child_by_field_name("value")
    row, col = node.start_point[0], node.start_point[1]

    if _first_child(node, "string") is not None or _has_token(node, "from"):
        raise ModuleError("compile", "Re-exports from other modules cannot be resolved in a preview", row + 1, col + 1)

    if declaration is not None:
        # drop the `export` / `export default` prefix, keep the declaration
        prefix = (node.start_byte, declaration.start_byte, b"")
        if declaration.type in _TYPE_ONLY_DECLARATIONS:
            return prefix
        names = _declared_names(declaration)
        if is_default:
            if names:
                exports.append("default")
                assignments.append(f"exports.default = {names[0]};")
                return prefix
            # anonymous default declaration: keep it as an expression
            text = data[declaration.start_byte : declaration.end_byte].decode("utf-8")
            exports.append("default")
            return node.start_byte, node.end_byte, f"exports.default = ({text});".encode()
        for name in names:
            exports.append(name)
            assignments.append(f"exports.{name} = {name};")
        return prefix

    if is_default and value is not None:
        text = data[value.start_byte : value.end_byte].decode("utf-8")
        exports.append("default")
        return node.start_byte, node.end_byte, f"exports.default = ({text});".encode()

    clause = _first_child(node, "export_clause")
    if clause is not None:
        if _has_token(node, "type"):
            return node.start_byte, node.end_byte, b""
        for specifier in clause.children:
            if specifier.type != "export_specifier" or _has_token(specifier, "type"):
                continue
            name = specifier.child_by_field_name("name")
            alias = specifier.child_by_field_name("alias")
            if name is None:
                continue
            local = name.text.decode("utf-8")
            exported = alias.text.decode("utf-8") if alias is not None else local
            exports.append(exported)
            assignments.append(f"exports.{exported} = {local};")
        return node.start_byte, node.end_byte, b""

    raise ModuleError("compile", "Unsupported export syntax", row + 1, col + 1)


def _declared_names(declaration: Any) -> list[str]:
    name = declaration.child_by_field_name("name")
    if name is not None:
        return [name.text.decode("utf-8")]
    names = []
    for child in declaration.children:
        if child.type == "variable_declarator":
            ident = child.child_by_field_name("name")
            if ident is not None and ident.type == "identifier":
                names.append(ident.text.decode("utf-8"))
    return names


# ---------------------------------------------------------------------------
# Node helpers
# ---------------------------------------------------------------------------


def _first_child(node: Any, node_type: str) -> Any | None:
    for child in node.children:
        if child.type == node_type:
            return child
    return None


def _has_token(node: Any, token: str) -> bool:
    """True if an anonymous keyword child (e.g. `default`, `type`) is present."""
    return any(not child.is_named and child.type == token for child in node.children)


def _string_value(node: Any) -> str:
    text = node.text.decode("utf-8")
    if len(text) >= 2 and text[0] in "'\"" and text[-1] == text[0]:
        return text[1:-1]
    return text
