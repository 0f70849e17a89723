from __future__ import annotations

import logging
from typing import Any, AsyncIterator, Dict, List, Optional, Sequence

import httpx
import ollama

from src.ragq.utils.exceptions import ModelUnavailable
from src.ragq.utils.settings import settings

logger = logging.getLogger(__name__)

Message = Dict[str, str]

# Transport and server-side failures raised by the ollama client
OLLAMA_ERRORS = (ollama.ResponseError, httpx.HTTPError, ConnectionError)


class OllamaProvider:
    """Ollama-based model gateway: text generation, streaming, embeddings and model listing."""

    def __init__(
            self,
            host: Optional[str] = None,
            model_name: Optional[str] = None,
            embedding_model: Optional[str] = None,
            temperature: Optional[float] = None,
            client: Optional[ollama.AsyncClient] = None,
    ):
        """
        Initialize Ollama client.

        Args:
            host: Ollama server URL
            model_name: Default chat model (format: model[:tag])
            embedding_model: Default embedding model
            temperature: Sampling temperature, None leaves the model default
            client: Prebuilt async client (mainly for tests)
        """
        self.host = host or settings.llm.ollama_url
        self.model_name = model_name or settings.llm.model_name
        self.embedding_model = embedding_model or settings.llm.embedding_model
        self.temperature = temperature if temperature is not None else settings.llm.temperature
        self.client = client or ollama.AsyncClient(host=self.host)

        logger.info(f"Ollama gateway: host={self.host} model={self.model_name} "
                    f"embeddings={self.embedding_model}")

    def _options(self) -> Optional[Dict[str, Any]]:
        if self.temperature is None:
            return None
        return {"temperature": self.temperature}

    async def generate(self, messages: Sequence[Message], model: Optional[str] = None) -> str:
        """
        Generate a complete answer.

        Args:
            messages: Chat messages [{"role": "user", "content": "..."}]
            model: Model override, defaults to the configured chat model

        Returns:
            Generated text
        """
        model = model or self.model_name
        try:
            response = await self.client.chat(
                model=model,
                messages=list(messages),
                options=self._options(),
            )
        except OLLAMA_ERRORS as e:
            logger.error(f"Ollama generate failed (model={model}): {e}")
            raise ModelUnavailable(str(e)) from e

        generated_text = response["message"]["content"]
        logger.debug(f"Generated {len(generated_text)} chars with {model}")
        return generated_text

    async def generate_stream(
            self,
            messages: Sequence[Message],
            model: Optional[str] = None,
    ) -> AsyncIterator[str]:
        """
        Generate an answer incrementally.

        Closing this generator closes the underlying HTTP stream.

        Yields:
            Generated text chunks
        """
        model = model or self.model_name
        stream = None
        try:
            stream = await self.client.chat(
                model=model,
                messages=list(messages),
                stream=True,
                options=self._options(),
            )
            async for part in stream:
                content = part["message"]["content"]
                if content:
                    yield content
        except OLLAMA_ERRORS as e:
            logger.error(f"Ollama stream failed (model={model}): {e}")
            raise ModelUnavailable(str(e)) from e
        finally:
            aclose = getattr(stream, "aclose", None)
            if aclose is not None:
                await aclose()

    async def embed_many(self, texts: Sequence[str], model: Optional[str] = None) -> List[List[float]]:
        """Embed a batch of texts, one vector per input, in input order."""
        if not texts:
            return []
        model = model or self.embedding_model
        try:
            response = await self.client.embed(model=model, input=list(texts))
        except OLLAMA_ERRORS as e:
            logger.error(f"Ollama embed failed (model={model}): {e}")
            raise ModelUnavailable(str(e)) from e

        embeddings = [list(vec) for vec in response["embeddings"]]
        if len(embeddings) != len(texts):
            raise ModelUnavailable(
                f"Embedding count mismatch: {len(embeddings)} != {len(texts)}"
            )
        return embeddings

    async def embed(self, text: str, model: Optional[str] = None) -> List[float]:
        """Embed a single text."""
        return (await self.embed_many([text], model=model))[0]

    async def list_models(self) -> List[str]:
        """Names of the models installed on the Ollama server."""
        try:
            response = await self.client.list()
        except OLLAMA_ERRORS as e:
            logger.error(f"Ollama list failed: {e}")
            raise ModelUnavailable(str(e)) from e
        return [m.model for m in response.models]

    async def close(self) -> None:
        """Close the HTTP connection pool held by the ollama client."""
        http_client = getattr(self.client, "_client", None)
        if http_client is not None:
            await http_client.aclose()
