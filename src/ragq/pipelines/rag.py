from __future__ import annotations

import logging
import time
from typing import List, Optional

from src.ragq.generation.prompts.builder import PromptBuilder
from src.ragq.generation.providers.ollama_provider import OllamaProvider
from src.ragq.generation.streaming import AnswerStream
from src.ragq.pipelines.base import BasePipeline
from src.ragq.retrieval.vector_stores.qdrant_store import QdrantStore
from src.ragq.utils.exceptions import DocumentNotFound
from src.ragq.utils.settings import settings
from src.ragq.utils.types import RetrievedDocument

logger = logging.getLogger(__name__)


class RAGPipeline(BasePipeline):
    """Decides what context goes into the prompt and hands it to the model gateway.

    Three context modes: none, one explicit document, or the top-k passages
    retrieved from the collection. Failures from either adapter are not
    retried; they propagate as ``DownstreamUnavailable`` or ``DocumentNotFound``.
    """

    def __init__(
            self,
            llm: OllamaProvider,
            vector_store: QdrantStore,
            prompt_builder: Optional[PromptBuilder] = None,
            top_k: Optional[int] = None,
            embedding_model: Optional[str] = None,
    ):
        self.llm = llm
        self.vector_store = vector_store
        self.prompt_builder = prompt_builder or PromptBuilder()
        self.top_k = top_k or settings.retrieval.top_k
        self.embedding_model = embedding_model or settings.llm.embedding_model

        logger.info(f"RAGPipeline initialized with (top_k = {self.top_k}).")

    async def prompt_direct(self, question: str, model: Optional[str] = None) -> str:
        messages = self.prompt_builder.build_direct(question)
        return await self.llm.generate(messages, model=model)

    async def prompt_with_document(
            self,
            question: str,
            document_id: str,
            model: Optional[str] = None,
    ) -> str:
        document = await self.vector_store.get_by_id(document_id)
        if document is None or not document.content:
            raise DocumentNotFound(document_id)

        logger.info(f"Prompting with document {document_id} ({len(document.content)} chars)")
        return await self._generate(question, [document], model)

    async def retrieve(self, question: str) -> List[RetrievedDocument]:
        start = time.time()
        documents = await self.vector_store.similarity_search(
            question,
            embedding_model=self.embedding_model,
            k=self.top_k,
        )
        retrieval_time = (time.time() - start) * 1000
        logger.info(f"Retrieved {len(documents)} documents in {retrieval_time:.2f}ms")
        if not documents:
            logger.warning("Knowledge base returned no documents; prompting without context")
        return documents

    async def prompt_with_knowledge_base(self, question: str, model: Optional[str] = None) -> str:
        documents = await self.retrieve(question)
        return await self._generate(question, documents, model)

    async def chat(self, question: str, model: Optional[str] = None) -> AnswerStream:
        """Retrieve, then open a primed stream.

        The first chunk is fetched before returning, so an unreachable model
        raises here instead of after the caller has started a response.
        """
        documents = await self.retrieve(question)
        messages = self.prompt_builder.build(question, documents)
        stream = AnswerStream(self.llm.generate_stream(messages, model=model))
        return await stream.start()

    async def _generate(
            self,
            question: str,
            documents: List[RetrievedDocument],
            model: Optional[str],
    ) -> str:
        messages = self.prompt_builder.build(question, documents)

        llm_start = time.time()
        answer = await self.llm.generate(messages, model=model)
        llm_time = (time.time() - llm_start) * 1000

        logger.info(f"LLM answered in {llm_time:.2f}ms (context documents: {len(documents)})")
        logger.debug(f"LLM response: {answer}")
        return answer
