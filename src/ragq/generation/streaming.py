from __future__ import annotations

import logging
from typing import AsyncIterator, List

logger = logging.getLogger(__name__)


class AnswerStream:
    """Single-use async stream of answer chunks.

    `start()` pulls the first chunk eagerly so that downstream failures raise
    before the caller commits to a response. `aclose()` tears down the
    underlying model stream and is safe to call more than once.
    """

    def __init__(self, chunks: AsyncIterator[str]):
        self._chunks = chunks
        self._pending: List[str] = []
        self._started = False
        self._exhausted = False
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    async def start(self) -> AnswerStream:
        if self._started:
            return self
        self._started = True
        try:
            first = await self._chunks.__anext__()
        except StopAsyncIteration:
            self._exhausted = True
        except BaseException:
            await self.aclose()
            raise
        else:
            self._pending.append(first)
        return self

    def __aiter__(self) -> AnswerStream:
        return self

    async def __anext__(self) -> str:
        if self._closed:
            raise StopAsyncIteration
        if not self._started:
            await self.start()
        if self._pending:
            return self._pending.pop(0)
        if self._exhausted:
            raise StopAsyncIteration
        try:
            return await self._chunks.__anext__()
        except StopAsyncIteration:
            self._exhausted = True
            raise

    async def aclose(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._pending.clear()
        aclose = getattr(self._chunks, "aclose", None)
        if aclose is not None:
            await aclose()
        logger.debug("Answer stream closed")

    async def collect(self) -> str:
        """Drain the stream into one string, closing it afterwards."""
        parts: List[str] = []
        try:
            async for chunk in self:
                parts.append(chunk)
        finally:
            await self.aclose()
        return "".join(parts)

    async def __aenter__(self) -> AnswerStream:
        return await self.start()

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()
