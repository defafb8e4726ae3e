"""
Component Builder Kernel — File Splitting and Export

A generated blob may carry several files separated by `// File: <path>`
marker lines. Without markers the whole blob is one file named after the
detected component.
"""

from __future__ import annotations

import io
import re
import zipfile

from engine.kernel.structure import detect_name
from engine.kernel.types import DEFAULT_COMPONENT_NAME, SourceFile

FILE_MARKER = "// File:"
DEFAULT_EXTENSION = ".tsx"
DEFAULT_FILENAME = f"{DEFAULT_COMPONENT_NAME}{DEFAULT_EXTENSION}"
MULTI_FILE_EXPORT_NAME = "component-files.txt"
ARCHIVE_NAME = "component-files.zip"

_FILE_RE = re.compile(r"// File: (.+?)(?:\n|\Z)([\s\S]*?)(?=// File: |\Z)")
_FILENAME_NAME_RE = re.compile(r"(?:function|class)\s+([A-Z][a-zA-Z0-9]*)")
_KEYWORD_STRIP_RE = re.compile(r"[^a-zA-Z0-9 ]")


def split_files(code: str) -> list[SourceFile]:
    """
    Partition a blob on `// File:` markers.

    Each file's content runs from the line after its marker to the next
    marker (or end of text) and is trimmed. Text before the first marker
    is not part of any file.
    """
    if FILE_MARKER not in code:
        return [SourceFile(name=fallback_filename(code), content=code)]

    files = [SourceFile(name=m.group(1).strip(), content=m.group(2).strip()) for m in _FILE_RE.finditer(code)]
    if not files:
        # marker present but never followed by a name
        return [SourceFile(name=fallback_filename(code), content=code)]
    return files


def fallback_filename(code: str) -> str:
    """Name for an unmarked blob: <Component>.tsx, else GeneratedComponent.tsx."""
    name = detect_name(code)
    return f"{name}{DEFAULT_EXTENSION}" if name else DEFAULT_FILENAME


def suggest_filename(description: str, code: str) -> str:
    """
    Download name for a single file.

    Tries the component name in the code, then the first two words of the
    description longer than three letters, then the default.
    """
    m = _FILENAME_NAME_RE.search(code)
    if m:
        return f"{m.group(1)}{DEFAULT_EXTENSION}"

    if description:
        words = [w for w in _KEYWORD_STRIP_RE.sub("", description).split(" ") if len(w) > 3]
        keywords = "".join(w[:1].upper() + w[1:].lower() for w in words[:2])
        if keywords:
            return f"{keywords}Component{DEFAULT_EXTENSION}"

    return DEFAULT_FILENAME


def concat_files(files: list[SourceFile]) -> str:
    """Plain-text bundle: each file under a `// File:` header, blank-line separated."""
    return "\n\n".join(f"{FILE_MARKER} {f.name}\n\n{f.content}" for f in files)


def zip_files(files: list[SourceFile]) -> bytes:
    """Deflated zip archive with one entry per file."""
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w", compression=zipfile.ZIP_DEFLATED, compresslevel=6) as archive:
        for f in files:
            archive.writestr(f.name.lstrip("/"), f.content)
    return buffer.getvalue()


def format_file_size(size: int) -> str:
    if size < 1024:
        return f"{size} B"
    if size < 1024 * 1024:
        return f"{size / 1024:.1f} KB"
    return f"{size / (1024 * 1024):.1f} MB"
