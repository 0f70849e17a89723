from __future__ import annotations

import logging
from typing import Dict, Any

from fastapi import APIRouter, Depends
from fastapi.responses import PlainTextResponse

from src.ragq.api.dependencies import get_llm
from src.ragq.generation.providers.ollama_provider import OllamaProvider
from src.ragq.utils.exceptions import DownstreamUnavailable

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Info"])

GREETING = "ragq 🔥😁👍"
NO_MODELS_MESSAGE = (
    "No local ollama models installed. Go to https://ollama.com/library to install one."
)


@router.get("/", response_class=PlainTextResponse)
async def root() -> str:
    return GREETING


@router.get("/models")
async def list_models(llm: OllamaProvider = Depends(get_llm)) -> Dict[str, Any]:
    """Models installed on the Ollama server, or an explanation when there are none."""
    try:
        models = await llm.list_models()
    except DownstreamUnavailable as e:
        return {"error": f"Failed to list ollama models: {e}"}

    if not models:
        return {"error": NO_MODELS_MESSAGE}
    return {"models": models}
