"""SSE framing and client-disconnect handling."""
import pytest

from src.ragq.api.sse import format_event, stream_events
from src.ragq.generation.streaming import AnswerStream


class DisconnectingRequest:
    """Reports a disconnect once `connected_checks` polls have passed."""

    def __init__(self, connected_checks: int):
        self.connected_checks = connected_checks
        self.polls = 0

    async def is_disconnected(self) -> bool:
        self.polls += 1
        return self.polls > self.connected_checks


def test_single_line_chunk():
    assert format_event("hello") == "data: hello\n\n"


def test_multi_line_chunk_gets_one_data_field_per_line():
    assert format_event("a\nb") == "data: a\ndata: b\n\n"
    assert format_event("a\r\nb") == "data: a\ndata: b\n\n"
    assert format_event("a\rb") == "data: a\ndata: b\n\n"


def test_bare_newline_chunk_is_preserved():
    # two empty data lines decode to a single "\n"
    assert format_event("\n") == "data: \ndata: \n\n"


def test_named_event():
    assert format_event("[DONE]", event="end") == "event: end\ndata: [DONE]\n\n"


@pytest.mark.asyncio
async def test_client_disconnect_stops_events_and_closes_model_stream(llm):
    stream = await AnswerStream(llm.generate_stream([{"role": "user", "content": "hi"}])).start()

    events = [e async for e in stream_events(stream, DisconnectingRequest(connected_checks=1))]

    assert events == ["data: Hel\n\n"]
    assert stream.closed
    assert llm.stream_closed


@pytest.mark.asyncio
async def test_full_stream_ends_with_done_event(llm):
    stream = await AnswerStream(llm.generate_stream([{"role": "user", "content": "hi"}])).start()

    events = [e async for e in stream_events(stream, DisconnectingRequest(connected_checks=10))]

    assert events[-1] == "event: end\ndata: [DONE]\n\n"
    assert len(events) == 4
    assert llm.stream_closed
