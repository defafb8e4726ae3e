"""Preview routes — render generated source into a target and serve the document."""

from __future__ import annotations

from typing import Annotated, Any

from fastapi import APIRouter, HTTPException, Path, status
from fastapi.responses import HTMLResponse, Response

from backend.config import settings
from backend.models.component import PreviewErrorResponse, PreviewRequest, PreviewResponse
from engine.kernel.mock_props import build_mock_props
from engine.kernel.preview import PreviewRenderer
from engine.kernel.structure import analyze
from engine.kernel.types import RenderedPreviewHandle

router = APIRouter(tags=["preview"])

# One renderer per process; handles live in memory only
renderer = PreviewRenderer(
    react_version=settings.PREVIEW_REACT_VERSION,
    max_targets=settings.PREVIEW_MAX_TARGETS,
)

Target = Annotated[str, Path(min_length=1, max_length=64, pattern=r"^[A-Za-z0-9_-]+$")]

# Preview documents pull React, Babel and Tailwind from public CDNs
_PREVIEW_HEADERS = {
    "Cache-Control": "no-store",
    "X-Content-Type-Options": "nosniff",
}


def preview_response(handle: RenderedPreviewHandle) -> PreviewResponse:
    return PreviewResponse(
        target=handle.target,
        handle_id=handle.handle_id,
        status=handle.status,
        preview_url=f"/preview/{handle.target}",
        source_digest=handle.source_digest,
        exports=list(handle.exports),
        error=PreviewErrorResponse(**handle.error.to_dict()) if handle.error else None,
    )


def render_into(target: str, code: str, props: dict[str, Any] | None) -> RenderedPreviewHandle:
    """Render `code` at `target`; mock props are derived from the source when none are given."""
    mock_props = props if props is not None else build_mock_props(analyze(code))
    renderer.render(code, mock_props, target)
    handle = renderer.mounted(target)
    if handle is None:
        raise RuntimeError(f"Renderer left no handle at {target}")
    return handle


@router.post("/api/preview/{target}")
async def create_preview(req: PreviewRequest, target: Target) -> PreviewResponse:
    """
    Render source into a preview target, replacing what was there.

    Always 200: compile and export failures come back as status="error"
    with the error details, and the served document shows the error panel.
    """
    return preview_response(render_into(target, req.code, req.props))


@router.get("/api/preview/{target}")
async def get_preview_status(target: Target) -> PreviewResponse:
    handle = renderer.mounted(target)
    if handle is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="No preview mounted.")
    return preview_response(handle)


@router.get("/preview/{target}", response_class=HTMLResponse)
async def serve_preview(target: Target) -> Response:
    """Serve the document mounted at a target (for an iframe src)."""
    handle = renderer.mounted(target)
    if handle is None:
        return HTMLResponse(
            content="<html><body><h1>404 — No preview mounted</h1></body></html>",
            status_code=404,
        )
    return HTMLResponse(content=handle.document, headers=_PREVIEW_HEADERS)


@router.delete("/preview/{target}", status_code=204)
async def delete_preview(target: Target) -> Response:
    if not renderer.unmount(target):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="No preview mounted.")
    return Response(status_code=204)
