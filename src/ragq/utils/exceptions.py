"""Error taxonomy shared by the adapters, the pipeline and the API layer."""
from __future__ import annotations


class RagqError(Exception):
    """Base class for all ragq errors."""


class DownstreamUnavailable(RagqError):
    """A downstream endpoint (model server or vector database) failed or is unreachable."""


class ModelUnavailable(DownstreamUnavailable):
    """The Ollama endpoint failed or is unreachable."""


class QdrantConnectionError(DownstreamUnavailable):
    """The Qdrant endpoint failed or is unreachable."""


class DocumentNotFound(RagqError):
    """Requested document id is not present in the collection."""

    def __init__(self, document_id: str):
        self.document_id = document_id
        super().__init__("Document not found")
