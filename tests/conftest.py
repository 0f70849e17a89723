"""Shared pytest fixtures: a fake Ollama gateway and an in-memory Qdrant store."""
from __future__ import annotations

import re
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import pytest
import pytest_asyncio
from fastapi.testclient import TestClient
from qdrant_client import AsyncQdrantClient

# Add project root to path
project_root = Path(__file__).parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

from src.ragq.api.dependencies import Services
from src.ragq.api.main import create_app
from src.ragq.generation.prompts.builder import PromptBuilder
from src.ragq.pipelines.rag import RAGPipeline
from src.ragq.retrieval.vector_stores.qdrant_store import QdrantStore
from src.ragq.utils.exceptions import ModelUnavailable


class FakeLLM:
    """Stands in for OllamaProvider.

    Embeddings are bag-of-words counts over a vocabulary that grows as words
    are seen, so texts sharing words end up close under cosine distance.
    """

    DIM = 32

    def __init__(self, answer: str = "4 😀", chunks: Sequence[str] = ("Hel", "lo", " world")):
        self.answer = answer
        self.chunks = list(chunks)
        self.fail: Optional[str] = None
        self.embed_fail: Optional[str] = None
        self.fail_after: Optional[int] = None
        self.calls: List[Dict[str, Any]] = []
        self.stream_closed = False
        self.closed = False
        self.models = ["llama3:latest", "nomic-embed-text:latest"]
        self.host = "http://fake-ollama"
        self.model_name = "llama3"
        self.embedding_model = "nomic-embed-text"
        self._vocab: Dict[str, int] = {}

    async def generate(self, messages, model=None) -> str:
        self.calls.append({"messages": list(messages), "model": model, "stream": False})
        if self.fail:
            raise ModelUnavailable(self.fail)
        return self.answer

    async def generate_stream(self, messages, model=None):
        self.calls.append({"messages": list(messages), "model": model, "stream": True})
        if self.fail:
            raise ModelUnavailable(self.fail)
        try:
            for idx, chunk in enumerate(self.chunks):
                if self.fail_after is not None and idx >= self.fail_after:
                    raise ModelUnavailable("stream dropped")
                yield chunk
        finally:
            self.stream_closed = True

    def _vector(self, text: str) -> List[float]:
        vec = [0.0] * self.DIM
        vec[-1] = 0.01
        for word in re.findall(r"\w+", text.lower()):
            idx = self._vocab.setdefault(word, len(self._vocab)) % (self.DIM - 1)
            vec[idx] += 1.0
        return vec

    async def embed_many(self, texts, model=None) -> List[List[float]]:
        if self.embed_fail:
            raise ModelUnavailable(self.embed_fail)
        return [self._vector(t) for t in texts]

    async def embed(self, text, model=None) -> List[float]:
        return (await self.embed_many([text], model=model))[0]

    async def list_models(self) -> List[str]:
        if self.fail:
            raise ModelUnavailable(self.fail)
        return list(self.models)

    async def close(self) -> None:
        self.closed = True


@pytest.fixture
def llm() -> FakeLLM:
    return FakeLLM()


@pytest.fixture
def vector_store(llm: FakeLLM) -> QdrantStore:
    return QdrantStore(
        embedder=llm,
        client=AsyncQdrantClient(location=":memory:"),
        collection_name="test_documents",
        embedding_dim=FakeLLM.DIM,
    )


@pytest_asyncio.fixture
async def ready_store(vector_store: QdrantStore) -> QdrantStore:
    await vector_store.ensure_collection()
    yield vector_store
    await vector_store.close()


@pytest.fixture
def pipeline(llm: FakeLLM, vector_store: QdrantStore) -> RAGPipeline:
    return RAGPipeline(
        llm=llm,
        vector_store=vector_store,
        prompt_builder=PromptBuilder("stuff"),
        top_k=2,
        embedding_model="fake-embed",
    )


@pytest.fixture
def client(llm: FakeLLM, vector_store: QdrantStore, pipeline: RAGPipeline):
    services = Services(llm=llm, vector_store=vector_store, pipeline=pipeline)
    with TestClient(create_app(services)) as test_client:
        yield test_client
