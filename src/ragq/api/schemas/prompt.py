from __future__ import annotations

from typing import Optional
from pydantic import BaseModel, Field


class PromptRequest(BaseModel):
    """Request body for every prompt endpoint."""
    prompt: str = Field(..., description="Question to ask")
    model: Optional[str] = Field(
        None,
        description="Ollama model name; the configured default is used when omitted"
    )


class AnswerResponse(BaseModel):
    """Complete (non-streamed) answer. Also used for a document's stored content."""
    answer: str
