"""
Pydantic models for Component Builder.

All request and response shapes defined here. No imports from routes or services.
"""

from backend.models.component import (
    AnalyzeResponse,
    ChatRequest,
    CodeRequest,
    ExportRequest,
    GenerateRequest,
    GenerateResponse,
    PreviewRequest,
    PreviewResponse,
    ProcessRequest,
    ProcessResponse,
)

__all__ = [
    # Generation
    "GenerateRequest",
    "GenerateResponse",
    "ChatRequest",
    # Analysis and files
    "CodeRequest",
    "AnalyzeResponse",
    "ExportRequest",
    # Preview
    "PreviewRequest",
    "PreviewResponse",
    "ProcessRequest",
    "ProcessResponse",
]
