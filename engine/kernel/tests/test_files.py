"""Tests for file splitting, filename suggestion and export bundles."""

from __future__ import annotations

import io
import zipfile

from engine.kernel.files import (
    concat_files,
    format_file_size,
    split_files,
    suggest_filename,
    zip_files,
)
from engine.kernel.types import SourceFile

# ---------------------------------------------------------------------------
# split_files
# ---------------------------------------------------------------------------


def test_no_markers_gives_one_file_with_full_input():
    code = "import React from 'react';\n\nexport default function Hero() { return null; }\n"
    files = split_files(code)
    assert files == [SourceFile(name="Hero.tsx", content=code)]


def test_no_markers_and_no_component_name_uses_default():
    files = split_files("const x = 1;")
    assert [f.name for f in files] == ["GeneratedComponent.tsx"]
    assert files[0].content == "const x = 1;"


def test_two_markers_partition_without_overlap():
    code = "// File: a.tsx\nexport const A = 1;\n\n// File: b.tsx\nexport const B = 2;\n"
    files = split_files(code)

    assert [f.name for f in files] == ["a.tsx", "b.tsx"]
    assert files[0].content == "export const A = 1;"
    assert files[1].content == "export const B = 2;"
    assert "B" not in files[0].content
    assert "A" not in files[1].content


def test_text_before_first_marker_ignored():
    files = split_files("Here you go:\n// File: only.tsx\ncontent\n")
    assert files == [SourceFile(name="only.tsx", content="content")]


def test_nested_paths_kept():
    files = split_files("// File: src/components/Card.tsx\nA\n// File: src/index.ts\nB")
    assert [f.name for f in files] == ["src/components/Card.tsx", "src/index.ts"]


def test_marker_at_end_of_text_starts_empty_file():
    files = split_files("// File: a.tsx\nexport const A = 1;\n// File: b.tsx")
    assert files == [
        SourceFile(name="a.tsx", content="export const A = 1;"),
        SourceFile(name="b.tsx", content=""),
    ]


def test_source_file_size_in_bytes():
    assert SourceFile(name="x", content="héllo").size == 6


# ---------------------------------------------------------------------------
# suggest_filename
# ---------------------------------------------------------------------------


def test_suggest_filename_prefers_component_name():
    assert suggest_filename("a login form", "export default function LoginForm() {}") == "LoginForm.tsx"


def test_suggest_filename_from_description_keywords():
    assert suggest_filename("a pricing table with tiers", "const x = 1;") == "PricingTableComponent.tsx"


def test_suggest_filename_default():
    assert suggest_filename("a b c", "") == "GeneratedComponent.tsx"
    assert suggest_filename("", "") == "GeneratedComponent.tsx"


# ---------------------------------------------------------------------------
# Export bundles
# ---------------------------------------------------------------------------


def test_concat_files():
    files = [SourceFile("a.tsx", "A"), SourceFile("b.tsx", "B")]
    assert concat_files(files) == "// File: a.tsx\n\nA\n\n// File: b.tsx\n\nB"


def test_concat_round_trips_through_split():
    files = [SourceFile("a.tsx", "export const A = 1;"), SourceFile("b.tsx", "export const B = 2;")]
    assert split_files(concat_files(files)) == files


def test_zip_files():
    files = [SourceFile("components/Card.tsx", "export default 1;"), SourceFile("index.ts", "export {};")]
    data = zip_files(files)

    with zipfile.ZipFile(io.BytesIO(data)) as archive:
        assert archive.namelist() == ["components/Card.tsx", "index.ts"]
        assert archive.read("components/Card.tsx").decode() == "export default 1;"
        assert all(info.compress_type == zipfile.ZIP_DEFLATED for info in archive.infolist())


def test_format_file_size():
    assert format_file_size(512) == "512 B"
    assert format_file_size(2048) == "2.0 KB"
    assert format_file_size(3 * 1024 * 1024) == "3.0 MB"
