"""Generation routes — one-shot component generation and streamed chat."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends
from fastapi.responses import StreamingResponse

from backend.middleware.rate_limit import limit_generation
from backend.models.component import ChatRequest, GenerateRequest, GenerateResponse
from backend.services.generator import generate_component, stream_component

logger = logging.getLogger(__name__)

router = APIRouter(tags=["generate"])


@router.post("/api/generate", dependencies=[Depends(limit_generation)])
async def generate(req: GenerateRequest) -> GenerateResponse:
    """
    Generate component source for a prompt.

    Provider failures are absorbed by the generator (fallback component),
    so this only fails on invalid input (400) or rate limiting (429).
    """
    code = await generate_component(
        req.prompt,
        model=req.model,
        temperature=req.temperature,
        max_tokens=req.max_tokens,
    )
    return GenerateResponse(code=code)


@router.post("/api/chat", dependencies=[Depends(limit_generation)])
async def chat(req: ChatRequest) -> StreamingResponse:
    """
    Stream a component for the latest chat message as plain-text fragments.

    The client concatenates the fragments and runs the result through
    /api/components/process.
    """
    messages = [m.model_dump() for m in req.messages]
    logger.info("Chat request with %d messages", len(messages))
    return StreamingResponse(
        stream_component(messages, model=req.model, temperature=req.temperature),
        media_type="text/plain; charset=utf-8",
        headers={"Cache-Control": "no-store", "X-Content-Type-Options": "nosniff"},
    )
