from __future__ import annotations

import logging
from dataclasses import dataclass

from fastapi import Depends, Request

from src.ragq.generation.prompts.builder import PromptBuilder
from src.ragq.generation.providers.ollama_provider import OllamaProvider
from src.ragq.pipelines.base import BasePipeline
from src.ragq.pipelines.rag import RAGPipeline
from src.ragq.retrieval.vector_stores.qdrant_store import QdrantStore
from src.ragq.utils.settings import Settings, settings

logger = logging.getLogger(__name__)


@dataclass
class Services:
    """Adapters and pipeline shared by every request."""
    llm: OllamaProvider
    vector_store: QdrantStore
    pipeline: BasePipeline

    async def aclose(self) -> None:
        try:
            await self.vector_store.close()
        finally:
            await self.llm.close()


def build_services(config: Settings = settings) -> Services:
    """Construct the adapters once, at process start."""
    logger.info("Building services...")
    llm = OllamaProvider(
        host=config.llm.ollama_url,
        model_name=config.llm.model_name,
        embedding_model=config.llm.embedding_model,
        temperature=config.llm.temperature,
    )
    vector_store = QdrantStore(
        embedder=llm,
        url=config.qdrant.url,
        api_key=config.qdrant.api_key,
        collection_name=config.qdrant.collection_name,
        embedding_dim=config.qdrant.embedding_dim,
        distance_metric=config.qdrant.distance_metric,
        timeout_s=config.qdrant.timeout_s,
    )
    pipeline = RAGPipeline(
        llm=llm,
        vector_store=vector_store,
        prompt_builder=PromptBuilder(config.llm.prompt_template),
        top_k=config.retrieval.top_k,
        embedding_model=config.llm.embedding_model,
    )
    return Services(llm=llm, vector_store=vector_store, pipeline=pipeline)


# ============================================================================
# Request-scoped accessors
# ============================================================================


def get_services(request: Request) -> Services:
    return request.app.state.services


def get_llm(services: Services = Depends(get_services)) -> OllamaProvider:
    return services.llm


def get_vector_store(services: Services = Depends(get_services)) -> QdrantStore:
    return services.vector_store


def get_pipeline(services: Services = Depends(get_services)) -> BasePipeline:
    return services.pipeline
