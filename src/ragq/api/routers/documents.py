from __future__ import annotations

import logging
from typing import Dict, Any

from fastapi import APIRouter, Depends

from src.ragq.api.dependencies import get_pipeline, get_vector_store
from src.ragq.api.errors import to_http_error
from src.ragq.api.schemas.documents import BulkDocumentsRequest, DocumentIn, InsertResponse
from src.ragq.api.schemas.prompt import AnswerResponse, PromptRequest
from src.ragq.pipelines.base import BasePipeline
from src.ragq.retrieval.vector_stores.qdrant_store import QdrantStore
from src.ragq.utils.exceptions import DocumentNotFound

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/documents", tags=["Documents"])

UPLOADED = "Successfully uploaded documents"


@router.get("")
async def get_documents(vector_store: QdrantStore = Depends(get_vector_store)) -> Dict[str, Any]:
    """Collection metadata (name, status, point count, vector config)."""
    try:
        return await vector_store.get_collection_info()
    except Exception as e:
        raise to_http_error("Failed to get documents", e) from e


@router.get("/{document_id}", response_model=AnswerResponse)
async def get_document(
        document_id: str,
        vector_store: QdrantStore = Depends(get_vector_store),
) -> Dict[str, Any]:
    try:
        document = await vector_store.get_by_id(document_id)
        if document is None or not document.content:
            raise DocumentNotFound(document_id)
    except Exception as e:
        raise to_http_error("Failed to get document", e) from e
    return {"answer": document.content}


@router.post("/{document_id}/prompt", response_model=AnswerResponse)
async def prompt_with_document(
        document_id: str,
        request: PromptRequest,
        pipeline: BasePipeline = Depends(get_pipeline),
) -> Dict[str, Any]:
    logger.info(f"Question from user about {document_id}: {request.prompt}")
    try:
        answer = await pipeline.prompt_with_document(request.prompt, document_id, model=request.model)
    except Exception as e:
        raise to_http_error("Failed to prompt LLM", e) from e
    return {"answer": answer}


@router.post("", response_model=InsertResponse, status_code=201)
async def insert_document(
        request: DocumentIn,
        vector_store: QdrantStore = Depends(get_vector_store),
) -> Dict[str, Any]:
    try:
        ids = await vector_store.upsert([request.to_document()])
    except Exception as e:
        raise to_http_error("Failed to insert document", e) from e
    logger.info(f"Inserted document {ids[0]}")
    return {"msg": UPLOADED, "ids": ids}


@router.post("/bulk", response_model=InsertResponse, status_code=201)
async def insert_documents(
        request: BulkDocumentsRequest,
        vector_store: QdrantStore = Depends(get_vector_store),
) -> Dict[str, Any]:
    try:
        ids = await vector_store.upsert([doc.to_document() for doc in request.documents])
    except Exception as e:
        raise to_http_error("Failed to insert documents", e) from e
    logger.info(f"Inserted {len(ids)} documents")
    return {"msg": UPLOADED, "ids": ids}
