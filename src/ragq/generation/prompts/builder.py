from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence

from langchain_core.messages import BaseMessage
from langchain_core.prompts import ChatPromptTemplate

from src.ragq.utils.settings import settings
from src.ragq.utils.types import RetrievedDocument

logger = logging.getLogger(__name__)

DOCUMENT_SEPARATOR = "\n\n"

# langchain message type -> Ollama chat role
_ROLES = {"system": "system", "human": "user", "ai": "assistant"}


@dataclass(frozen=True)
class PromptTemplateSpec:
    """System instruction with and without a context block."""
    name: str
    system_with_context: str
    system_without_context: str
    answer_cue: Optional[str] = "Answer:"


STUFF_TEMPLATE = PromptTemplateSpec(
    name="stuff",
    system_with_context=(
        "You are an assistant for question-answering tasks. Answer the question based on the "
        "context only. If you don't know the answer based on the context, just say that you "
        "don't know and that you will do your research on that. Always add an emoji at the end "
        "of your answer.\n\n"
        "Context: {context}.\n"
        "Question:"
    ),
    system_without_context=(
        "You are an assistant for question-answering tasks. Answer the question based on the "
        "context only. If you don't know the answer based on the context, just say that you "
        "don't know and that you will do your research on that. Always add an emoji at the end "
        "of your answer.\n\n"
        "Question:"
    ),
)

RETRIEVAL_TEMPLATE = PromptTemplateSpec(
    name="retrieval",
    system_with_context=(
        "Answer the user's question using only the context below. If the context does not "
        "contain the answer, say that you don't know.\n\n"
        "<context>\n{context}\n</context>"
    ),
    system_without_context=(
        "Answer the user's question. No context documents were found, so say that you don't "
        "know if you are not sure."
    ),
    answer_cue=None,
)

TEMPLATES: Dict[str, PromptTemplateSpec] = {
    STUFF_TEMPLATE.name: STUFF_TEMPLATE,
    RETRIEVAL_TEMPLATE.name: RETRIEVAL_TEMPLATE,
}


def format_context(documents: Sequence[RetrievedDocument]) -> str:
    """Join passages in the order given, skipping empty ones."""
    return DOCUMENT_SEPARATOR.join(doc.content for doc in documents if doc.content)


def to_ollama_messages(messages: Sequence[BaseMessage]) -> List[Dict[str, str]]:
    return [{"role": _ROLES.get(m.type, "user"), "content": m.content} for m in messages]


class PromptBuilder:
    """Renders questions and optional context into chat messages."""

    def __init__(self, template_name: Optional[str] = None):
        template_name = template_name or settings.llm.prompt_template
        if template_name not in TEMPLATES:
            raise ValueError(
                f"Unknown prompt template: {template_name!r} (available: {sorted(TEMPLATES)})"
            )
        self.template = TEMPLATES[template_name]
        self._with_context = self._compile(self.template.system_with_context)
        self._without_context = self._compile(self.template.system_without_context)
        logger.info(f"PromptBuilder using '{self.template.name}' template")

    def _compile(self, system: str) -> ChatPromptTemplate:
        parts = [("system", system), ("human", "{question}")]
        if self.template.answer_cue:
            parts.append(("ai", self.template.answer_cue))
        return ChatPromptTemplate.from_messages(parts)

    def build(
            self,
            question: str,
            documents: Sequence[RetrievedDocument] = (),
    ) -> List[Dict[str, str]]:
        """Build chat messages for a grounded prompt.

        The context block is left out entirely when there is nothing to put in it.
        """
        context = format_context(documents)
        if context:
            messages = self._with_context.format_messages(context=context, question=question)
        else:
            messages = self._without_context.format_messages(question=question)
        return to_ollama_messages(messages)

    @staticmethod
    def build_direct(question: str) -> List[Dict[str, str]]:
        """The question on its own, no instruction and no context."""
        return [{"role": "user", "content": question}]
