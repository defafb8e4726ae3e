"""
Component Builder Kernel — the pure engine.

Two cores:
  structure  — best-effort structural summary of generated component source
  preview    — compile generated source into an isolated preview document,
               one live handle per target

Supporting pieces:
  mock_props, code_blocks, files, fallback
"""

from engine.kernel.code_blocks import clean_generated_code, extract_code_block
from engine.kernel.fallback import fallback_component
from engine.kernel.files import concat_files, split_files, suggest_filename, zip_files
from engine.kernel.mock_props import build_mock_props, to_preview_payload
from engine.kernel.preview import PreviewRenderer
from engine.kernel.structure import analyze
from engine.kernel.types import PreviewError, RenderedPreviewHandle, SourceFile, StructuralSummary

__all__ = [
    "analyze",
    "build_mock_props",
    "to_preview_payload",
    "PreviewRenderer",
    "extract_code_block",
    "clean_generated_code",
    "split_files",
    "suggest_filename",
    "concat_files",
    "zip_files",
    "fallback_component",
    "StructuralSummary",
    "PreviewError",
    "RenderedPreviewHandle",
    "SourceFile",
]
