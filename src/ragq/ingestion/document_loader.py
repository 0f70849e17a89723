from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, List

from pydantic import ValidationError

from src.ragq.api.schemas.documents import DocumentIn
from src.ragq.retrieval.vector_stores.qdrant_store import QdrantStore
from src.ragq.utils.types import Document

logger = logging.getLogger(__name__)


def _parse_records(path: Path) -> List[Any]:
    text = path.read_text(encoding="utf-8")
    if path.suffix == ".jsonl":
        return [json.loads(line) for line in text.splitlines() if line.strip()]

    data = json.loads(text)
    if isinstance(data, dict) and "documents" in data:
        data = data["documents"]
    if not isinstance(data, list):
        raise ValueError(f"{path}: expected a list of documents or {{'documents': [...]}}")
    return data


def load_documents(path: Path) -> List[Document]:
    """
    Read documents from a JSON or JSONL file.

    Accepted layouts:
        - JSON list: [{"content": ..., "metadata": {...}}, ...]
        - JSON object: {"documents": [...]} (same body as POST /api/documents/bulk)
        - JSONL: one document object per line
    A plain string record is taken as content with empty metadata.
    """
    records = _parse_records(path)
    documents: List[Document] = []
    for idx, record in enumerate(records):
        if isinstance(record, str):
            record = {"content": record}
        try:
            documents.append(DocumentIn.model_validate(record).to_document())
        except ValidationError as e:
            raise ValueError(f"{path}: invalid document at index {idx}: {e}") from e

    logger.info(f"Loaded {len(documents)} documents from {path}")
    return documents


async def ingest_file(
        path: Path,
        vector_store: QdrantStore,
        batch_size: int = 64,
) -> List[str]:
    """Load documents from ``path`` and upsert them; returns the new ids."""
    documents = load_documents(path)
    if not documents:
        logger.warning(f"No documents found in {path}")
        return []

    await vector_store.ensure_collection()
    ids = await vector_store.upsert(documents, batch_size=batch_size)
    logger.info(f"Ingested {len(ids)} documents into '{vector_store.collection_name}'")
    return ids
