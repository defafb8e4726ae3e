"""Request and response models for component generation, analysis and preview."""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, Field

# Upper bound on any source blob or model output accepted for processing
MAX_SOURCE_LENGTH = 100_000


class GenerateRequest(BaseModel):
    """What the client sends to POST /api/generate."""

    model_config = {"extra": "forbid"}

    prompt: str = Field(min_length=10, max_length=1000)
    model: str | None = None
    temperature: float = Field(default=0.7, ge=0, le=1)
    max_tokens: int | None = Field(default=None, ge=1, le=16000)


class GenerateResponse(BaseModel):
    code: str


class ChatMessage(BaseModel):
    model_config = {"extra": "ignore"}

    role: Literal["user", "assistant", "system"]
    content: str = Field(max_length=MAX_SOURCE_LENGTH)


class ChatRequest(BaseModel):
    """What the client sends to POST /api/chat."""

    model_config = {"extra": "ignore"}

    messages: list[ChatMessage] = Field(min_length=1)
    model: str | None = None
    temperature: float | None = Field(default=None, ge=0, le=1)


class CodeRequest(BaseModel):
    """A generated source blob to analyze or split."""

    model_config = {"extra": "forbid"}

    code: str = Field(max_length=MAX_SOURCE_LENGTH)


class SummaryResponse(BaseModel):
    name: str
    props: dict[str, str]
    state: dict[str, str]
    dependencies: list[str]
    description: str
    analysis_error: str | None = None


class AnalyzeResponse(BaseModel):
    """What the analyze endpoint returns."""

    summary: SummaryResponse
    mock_props: dict[str, Any]


class FileResponse(BaseModel):
    name: str
    content: str
    size: int


class FilesResponse(BaseModel):
    files: list[FileResponse]


class PreviewErrorResponse(BaseModel):
    kind: Literal["compile", "export", "runtime"]
    message: str
    line: int | None = None
    column: int | None = None


class PreviewResponse(BaseModel):
    """Status of the preview mounted at a target."""

    target: str
    handle_id: str
    status: Literal["mounted", "error"]
    preview_url: str
    source_digest: str
    exports: list[str] = Field(default_factory=list)
    error: PreviewErrorResponse | None = None


class PreviewRequest(BaseModel):
    """What the client sends to POST /api/preview/{target}."""

    model_config = {"extra": "forbid"}

    code: str = Field(max_length=MAX_SOURCE_LENGTH)
    props: dict[str, Any] | None = None  # None: derive mock props from the source


class ProcessRequest(BaseModel):
    """Raw model output to run through one full processing cycle."""

    model_config = {"extra": "forbid"}

    text: str = Field(max_length=MAX_SOURCE_LENGTH)
    target: str = Field(default="main", min_length=1, max_length=64, pattern=r"^[A-Za-z0-9_-]+$")


class ProcessResponse(BaseModel):
    code: str
    summary: SummaryResponse
    mock_props: dict[str, Any]
    files: list[FileResponse]
    preview: PreviewResponse


class DownloadRequest(BaseModel):
    model_config = {"extra": "forbid"}

    code: str = Field(min_length=1, max_length=MAX_SOURCE_LENGTH)
    description: str = ""


class ExportRequest(BaseModel):
    model_config = {"extra": "forbid"}

    code: str = Field(min_length=1, max_length=MAX_SOURCE_LENGTH)
    format: Literal["text", "zip"] = "text"
