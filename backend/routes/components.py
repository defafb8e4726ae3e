"""Component routes — structural analysis, file splitting, full processing and export."""

from __future__ import annotations

import logging

from fastapi import APIRouter
from fastapi.responses import Response

from backend.models.component import (
    AnalyzeResponse,
    CodeRequest,
    DownloadRequest,
    ExportRequest,
    FileResponse,
    FilesResponse,
    ProcessRequest,
    ProcessResponse,
    SummaryResponse,
)
from backend.routes.preview import preview_response, render_into
from engine.kernel.code_blocks import extract_code_block
from engine.kernel.files import (
    ARCHIVE_NAME,
    MULTI_FILE_EXPORT_NAME,
    concat_files,
    split_files,
    suggest_filename,
    zip_files,
)
from engine.kernel.mock_props import build_mock_props, to_preview_payload
from engine.kernel.structure import analyze
from engine.kernel.types import SourceFile, StructuralSummary

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/components", tags=["components"])


def summary_response(summary: StructuralSummary) -> SummaryResponse:
    return SummaryResponse(
        name=summary.name,
        props=summary.props,
        state=summary.state,
        dependencies=summary.dependencies,
        description=summary.description,
        analysis_error=summary.error,
    )


def file_responses(files: list[SourceFile]) -> list[FileResponse]:
    return [FileResponse(name=f.name, content=f.content, size=f.size) for f in files]


def _attachment(content: bytes | str, filename: str, media_type: str) -> Response:
    return Response(
        content=content,
        media_type=media_type,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.post("/analyze")
async def analyze_component(req: CodeRequest) -> AnalyzeResponse:
    """Structural summary plus the mock props a preview would use."""
    summary = analyze(req.code)
    return AnalyzeResponse(
        summary=summary_response(summary),
        mock_props=to_preview_payload(build_mock_props(summary)),
    )


@router.post("/files")
async def component_files(req: CodeRequest) -> FilesResponse:
    return FilesResponse(files=file_responses(split_files(req.code)))


@router.post("/process")
async def process_component(req: ProcessRequest) -> ProcessResponse:
    """
    Run one processing cycle over raw model output.

    Extracts the code block, then analyzes, splits and renders that same
    snapshot into the preview target.
    """
    code = extract_code_block(req.text)
    summary = analyze(code)
    mock_props = build_mock_props(summary)
    handle = render_into(req.target, code, mock_props)
    logger.info("Processed %s into %s (%s)", summary.name, req.target, handle.status)

    return ProcessResponse(
        code=code,
        summary=summary_response(summary),
        mock_props=to_preview_payload(mock_props),
        files=file_responses(split_files(code)),
        preview=preview_response(handle),
    )


@router.post("/download")
async def download_component(req: DownloadRequest) -> Response:
    """Single-file download named after the component or the description."""
    filename = suggest_filename(req.description, req.code)
    return _attachment(req.code, filename, "text/plain; charset=utf-8")


@router.post("/export")
async def export_component(req: ExportRequest) -> Response:
    """
    Multi-file export.

    "zip" builds a deflated archive; "text" concatenates every file under
    its `// File:` header.
    """
    files = split_files(req.code)
    if req.format == "zip":
        return _attachment(zip_files(files), ARCHIVE_NAME, "application/zip")
    return _attachment(concat_files(files), MULTI_FILE_EXPORT_NAME, "text/plain; charset=utf-8")
