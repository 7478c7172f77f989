"""Tests for uiserve.server.sender response emission rules."""

import pytest

from uiserve.http.response import Response, StreamingResponse
from uiserve.server.sender import send_response, send_streaming_response


@pytest.fixture
def sent() -> list[dict]:
    return []


@pytest.fixture
def send(sent: list[dict]):
    async def send(message: dict) -> None:
        sent.append(message)

    return send


class TestSendResponse:
    @pytest.mark.parametrize("status", [204, 304])
    async def test_no_body_statuses(self, status: int, send, sent: list[dict]) -> None:
        # A stray body must not go out with a no-body status.
        await send_response(Response("unexpected-body").with_status(status), send)

        headers = dict(sent[0]["headers"])
        assert headers[b"content-length"] == b"0"
        assert sent[1]["body"] == b""

    async def test_200_preserves_body(self, send, sent: list[dict]) -> None:
        await send_response(Response("ok"), send)

        assert sent[0] == {
            "type": "http.response.start",
            "status": 200,
            "headers": [
                (b"content-type", b"text/plain; charset=utf-8"),
                (b"content-length", b"2"),
            ],
        }
        assert sent[1] == {"type": "http.response.body", "body": b"ok"}

    async def test_header_names_lowercased(self, send, sent: list[dict]) -> None:
        await send_response(Response().with_header("Cache-Control", "no-store"), send)
        assert (b"cache-control", b"no-store") in sent[0]["headers"]

    async def test_head_length_without_body(self, send, sent: list[dict]) -> None:
        await send_response(Response("hello").without_body(), send)

        assert dict(sent[0]["headers"])[b"content-length"] == b"5"
        assert sent[1]["body"] == b""


class TestSendStreamingResponse:
    async def test_sync_chunks(self, send, sent: list[dict]) -> None:
        response = StreamingResponse(chunks=iter([b"a", b"", b"b"]), content_type="text/plain")
        await send_streaming_response(response, send)

        assert sent[0]["headers"] == [(b"content-type", b"text/plain")]
        bodies = [(m["body"], m["more_body"]) for m in sent[1:]]
        assert bodies == [(b"a", True), (b"b", True), (b"", False)]

    async def test_async_chunks_closed(self, send, sent: list[dict]) -> None:
        closed = False

        async def chunks():
            nonlocal closed
            try:
                yield b"one"
                yield b"two"
            finally:
                closed = True

        await send_streaming_response(StreamingResponse(chunks=chunks()), send)

        assert sent[0]["headers"] == []
        assert [m["body"] for m in sent[1:]] == [b"one", b"two", b""]
        assert closed

    async def test_failure_mid_stream_ends_body(self, send, sent: list[dict]) -> None:
        async def chunks():
            yield b"partial"
            raise ConnectionResetError("upstream went away")

        await send_streaming_response(StreamingResponse(chunks=chunks(), status=200), send)

        assert [m["body"] for m in sent[1:]] == [b"partial", b""]
        assert sent[-1]["more_body"] is False
