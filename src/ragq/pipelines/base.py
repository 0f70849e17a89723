from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional

from src.ragq.generation.streaming import AnswerStream


class BasePipeline(ABC):
    """Abstract base class for RAG pipelines."""

    @abstractmethod
    async def prompt_direct(self, question: str, model: Optional[str] = None) -> str:
        """Answer without any context."""

    @abstractmethod
    async def prompt_with_document(
            self,
            question: str,
            document_id: str,
            model: Optional[str] = None,
    ) -> str:
        """Answer grounded on one stored document."""

    @abstractmethod
    async def prompt_with_knowledge_base(self, question: str, model: Optional[str] = None) -> str:
        """Answer grounded on passages retrieved from the whole collection."""

    @abstractmethod
    async def chat(self, question: str, model: Optional[str] = None) -> AnswerStream:
        """Stream an answer grounded on retrieved passages."""
