"""Server-sent events framing for streamed answers."""
from __future__ import annotations

import logging
from typing import AsyncIterator, Optional

from fastapi import Request

from src.ragq.generation.streaming import AnswerStream
from src.ragq.utils.exceptions import DownstreamUnavailable

logger = logging.getLogger(__name__)

DONE = "[DONE]"


def format_event(data: str, event: Optional[str] = None) -> str:
    """One SSE event; every line of ``data`` gets its own ``data:`` field."""
    lines = []
    if event:
        lines.append(f"event: {event}")
    for line in data.replace("\r\n", "\n").replace("\r", "\n").split("\n"):
        lines.append(f"data: {line}")
    return "\n".join(lines) + "\n\n"


async def stream_events(stream: AnswerStream, request: Request) -> AsyncIterator[str]:
    """Forward answer chunks as SSE until the stream ends or the client leaves.

    The answer stream is closed on every exit path, which in turn closes the
    downstream model stream.
    """
    sent = 0
    try:
        async for chunk in stream:
            if await request.is_disconnected():
                logger.info(f"Client disconnected after {sent} chunks; closing answer stream")
                break
            yield format_event(chunk)
            sent += 1
        else:
            yield format_event(DONE, event="end")
            logger.info(f"Streamed {sent} chunks")
    except DownstreamUnavailable as e:
        logger.error(f"Answer stream failed after {sent} chunks: {e}")
        yield format_event(f"Failed to prompt LLM: {e}", event="error")
    finally:
        await stream.aclose()
