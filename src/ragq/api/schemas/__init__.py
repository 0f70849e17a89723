from __future__ import annotations

from src.ragq.api.schemas.documents import BulkDocumentsRequest, DocumentIn, InsertResponse
from src.ragq.api.schemas.prompt import AnswerResponse, PromptRequest

__all__ = [
    # Documents
    "DocumentIn",
    "BulkDocumentsRequest",
    "InsertResponse",
    # Prompt
    "PromptRequest",
    "AnswerResponse",
]
