from __future__ import annotations

import logging

from fastapi import HTTPException

from src.ragq.utils.exceptions import DocumentNotFound

logger = logging.getLogger(__name__)


def to_http_error(action: str, error: Exception) -> HTTPException:
    """Map a pipeline/adapter failure to an HTTPException.

    ``DocumentNotFound`` becomes 404; everything else is a 500 whose detail
    starts with ``action`` (e.g. "Failed to prompt LLM: <reason>").
    """
    if isinstance(error, DocumentNotFound):
        logger.info(f"Document not found: {error.document_id}")
        return HTTPException(status_code=404, detail="Document not found")

    logger.error(f"{action}: {type(error).__name__}: {error}")
    message = str(error)
    detail = f"{action}: {message}" if message else action
    return HTTPException(status_code=500, detail=detail)
