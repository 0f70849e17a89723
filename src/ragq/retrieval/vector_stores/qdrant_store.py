from __future__ import annotations

import logging
import uuid
from typing import Any, List, Optional, Sequence

import httpx
from qdrant_client import AsyncQdrantClient
from qdrant_client.http.exceptions import ResponseHandlingException, UnexpectedResponse
from qdrant_client.models import Distance, PointStruct, VectorParams

from src.ragq.generation.providers.ollama_provider import OllamaProvider
from src.ragq.utils.exceptions import QdrantConnectionError
from src.ragq.utils.settings import settings
from src.ragq.utils.types import Document, RetrievedDocument

logger = logging.getLogger(__name__)

QDRANT_ERRORS = (UnexpectedResponse, ResponseHandlingException, httpx.HTTPError, ConnectionError)


MAX_POINT_ID = 2 ** 64 - 1


def _is_unsigned_int(value: str) -> bool:
    return value.isascii() and value.isdigit() and int(value) <= MAX_POINT_ID


def is_point_id(value: str) -> bool:
    """Qdrant accepts UUIDs and unsigned 64-bit integers as point ids."""
    if _is_unsigned_int(value):
        return True
    try:
        uuid.UUID(value)
    except ValueError:
        return False
    return True


def _enum_value(value: Any) -> Any:
    return getattr(value, "value", value)


class QdrantStore:
    """Qdrant vector store adapter. Embeddings come from the model gateway."""

    def __init__(
            self,
            embedder: OllamaProvider,
            url: Optional[str] = None,
            api_key: Optional[str] = None,
            collection_name: Optional[str] = None,
            embedding_dim: Optional[int] = None,
            distance_metric: Optional[str] = None,  # 'cosine' | 'euclidean' | 'dot'
            timeout_s: Optional[int] = None,
            client: Optional[AsyncQdrantClient] = None,
    ):
        self.embedder = embedder
        self.url = url or settings.qdrant.url
        self.api_key = api_key or settings.qdrant.api_key
        self.collection_name = collection_name or settings.qdrant.collection_name
        self.embedding_dim = embedding_dim or settings.qdrant.embedding_dim
        self.distance_metric = self._to_distance(distance_metric or settings.qdrant.distance_metric)
        timeout_s = timeout_s or settings.qdrant.timeout_s

        self.client = client or AsyncQdrantClient(url=self.url, api_key=self.api_key, timeout=timeout_s)

    @staticmethod
    def _to_distance(metric: str) -> Distance:
        m = metric.lower().strip()
        if m in ("cos", "cosine"):
            return Distance.COSINE
        if m in ("l2", "euclid", "euclidean"):
            return Distance.EUCLID
        if m in ("dot", "ip", "inner"):
            return Distance.DOT
        raise ValueError(f"Unknown distance metric: {metric}")

    async def ensure_collection(self) -> None:
        """Create the collection if it is missing; refuse a vector size mismatch."""
        try:
            exists = await self.client.collection_exists(self.collection_name)
            if exists:
                info = await self.client.get_collection(collection_name=self.collection_name)
                size = info.config.params.vectors.size
                if size != self.embedding_dim:
                    raise ValueError(
                        f"Collection '{self.collection_name}' exists with different embedding size "
                        f"({size} != {self.embedding_dim})."
                    )
                logger.info(f"Using existing collection '{self.collection_name}'")
                return

            logger.info("Creating collection '%s'", self.collection_name)
            await self.client.create_collection(
                collection_name=self.collection_name,
                vectors_config=VectorParams(
                    size=self.embedding_dim,
                    distance=self.distance_metric,
                ),
            )
        except QDRANT_ERRORS as e:
            raise QdrantConnectionError(
                f"Cannot reach Qdrant at {self.url}: {e}"
            ) from e

    async def upsert(
            self,
            documents: Sequence[Document],
            embedding_model: Optional[str] = None,
            batch_size: int = 256,
    ) -> List[str]:
        """
        Embed and store documents.
            Args:
                documents: documents to store
                embedding_model: Ollama embedding model override
                batch_size: number of points per upsert call
        Returns: the generated point ids, in input order.
        """
        ids: List[str] = []
        total = len(documents)

        for i in range(0, total, batch_size):
            batch = documents[i:i + batch_size]
            vectors = await self.embedder.embed_many(
                [doc.content for doc in batch], model=embedding_model
            )
            if vectors and len(vectors[0]) != self.embedding_dim:
                raise ValueError(f"Vector dimension mismatch: {len(vectors[0])} != {self.embedding_dim}")

            batch_ids = [str(uuid.uuid4()) for _ in batch]
            points = [
                PointStruct(id=point_id, vector=vec, payload=doc.to_payload())
                for point_id, vec, doc in zip(batch_ids, vectors, batch)
            ]
            try:
                await self.client.upsert(
                    collection_name=self.collection_name,
                    points=points,
                    wait=True,
                )
            except QDRANT_ERRORS as e:
                logger.error(f"Upsert into '{self.collection_name}' failed: {e}")
                raise QdrantConnectionError(str(e)) from e

            ids.extend(batch_ids)
            logger.info("Upserted %d/%d points", min(i + batch_size, total), total)

        return ids

    async def similarity_search(
            self,
            query: str,
            embedding_model: Optional[str] = None,
            k: int = 4,
    ) -> List[RetrievedDocument]:
        """
        Embed the query and return the k closest documents, best first.
        Order is whatever Qdrant returns; nothing is re-ranked here.
        """
        vector = await self.embedder.embed(query, model=embedding_model)
        try:
            response = await self.client.query_points(
                collection_name=self.collection_name,
                query=vector,
                limit=k,
                with_payload=True,
            )
        except QDRANT_ERRORS as e:
            logger.error(f"Search in '{self.collection_name}' failed: {e}")
            raise QdrantConnectionError(str(e)) from e

        logger.debug("Search returned %d hits from collection '%s'", len(response.points), self.collection_name)
        return [
            RetrievedDocument.from_point(hit.id, hit.payload, hit.score)
            for hit in response.points
        ]

    async def get_by_id(self, document_id: str) -> Optional[RetrievedDocument]:
        """Fetch one document; None if the id is unknown or not a valid point id."""
        if not is_point_id(document_id):
            logger.debug("Rejected malformed point id %r", document_id)
            return None

        point_id: Any = int(document_id) if _is_unsigned_int(document_id) else document_id
        try:
            points = await self.client.retrieve(
                collection_name=self.collection_name,
                ids=[point_id],
                with_payload=True,
            )
        except QDRANT_ERRORS as e:
            logger.error(f"Retrieve from '{self.collection_name}' failed: {e}")
            raise QdrantConnectionError(str(e)) from e

        if not points:
            return None
        return RetrievedDocument.from_point(points[0].id, points[0].payload)

    async def count(self) -> int:
        try:
            stats = await self.client.count(collection_name=self.collection_name, exact=True)
        except QDRANT_ERRORS as e:
            raise QdrantConnectionError(str(e)) from e
        return stats.count

    async def get_collection_info(self) -> dict[str, Any]:
        """Get collection information.

        Returns:
            Dictionary with collection info
        """
        try:
            info = await self.client.get_collection(self.collection_name)
        except QDRANT_ERRORS as e:
            raise QdrantConnectionError(str(e)) from e
        return {
            "name": self.collection_name,
            "status": _enum_value(info.status),
            "points_count": info.points_count,
            "indexed_vectors_count": info.indexed_vectors_count,
            "segments_count": info.segments_count,
            "vector_size": info.config.params.vectors.size,
            "distance": _enum_value(info.config.params.vectors.distance),
        }

    async def close(self) -> None:
        await self.client.close()
