from __future__ import annotations

import logging
from typing import Dict, Any

from fastapi import APIRouter, Depends, Request
from fastapi.responses import StreamingResponse

from src.ragq.api.dependencies import get_pipeline
from src.ragq.api.errors import to_http_error
from src.ragq.api.schemas.prompt import AnswerResponse, PromptRequest
from src.ragq.api.sse import stream_events
from src.ragq.pipelines.base import BasePipeline

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Prompt"])

PROMPT_FAILED = "Failed to prompt LLM"


@router.post("/prompt", response_model=AnswerResponse)
async def prompt(
        request: PromptRequest,
        pipeline: BasePipeline = Depends(get_pipeline),
) -> Dict[str, Any]:
    """Ask the model directly, without any context."""
    logger.info(f"Question from user: {request.prompt}")
    try:
        answer = await pipeline.prompt_direct(request.prompt, model=request.model)
    except Exception as e:
        raise to_http_error(PROMPT_FAILED, e) from e
    return {"answer": answer}


@router.post("/prompt-with-knowledge", response_model=AnswerResponse)
async def prompt_with_knowledge(
        request: PromptRequest,
        pipeline: BasePipeline = Depends(get_pipeline),
) -> Dict[str, Any]:
    """Ask the model with passages retrieved from the whole collection."""
    logger.info(f"Question from user: {request.prompt}")
    try:
        answer = await pipeline.prompt_with_knowledge_base(request.prompt, model=request.model)
    except Exception as e:
        raise to_http_error(PROMPT_FAILED, e) from e
    return {"answer": answer}


@router.post("/chat")
async def chat(
        request: PromptRequest,
        http_request: Request,
        pipeline: BasePipeline = Depends(get_pipeline),
) -> StreamingResponse:
    """Stream a knowledge-grounded answer as server-sent events."""
    logger.info(f"Question from user: {request.prompt}")
    try:
        stream = await pipeline.chat(request.prompt, model=request.model)
    except Exception as e:
        raise to_http_error(PROMPT_FAILED, e) from e

    return StreamingResponse(
        stream_events(stream, http_request),
        media_type="text/event-stream",
        headers={"Cache-Control": "no-cache", "X-Accel-Buffering": "no"},
    )
