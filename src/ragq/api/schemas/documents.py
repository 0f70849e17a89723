from __future__ import annotations

from typing import Any, Dict, List
from pydantic import BaseModel, Field

from src.ragq.utils.types import Document


class DocumentIn(BaseModel):
    """A document to store."""
    content: str = Field(..., description="Document text", min_length=1)
    metadata: Dict[str, Any] = Field(
        default_factory=dict,
        description="Arbitrary metadata stored next to the content"
    )

    def to_document(self) -> Document:
        return Document(content=self.content, metadata=self.metadata)


class BulkDocumentsRequest(BaseModel):
    documents: List[DocumentIn] = Field(..., min_length=1)


class InsertResponse(BaseModel):
    msg: str
    ids: List[str] = Field(..., description="Ids assigned by the vector store, in input order")
