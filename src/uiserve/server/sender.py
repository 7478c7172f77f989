"""ASGI response sending: translates uiserve Response types to ASGI messages.

Handles both in-memory single-body responses and streamed (proxied)
responses.
"""

import logging
from collections.abc import AsyncIterator

from uiserve._internal.asgi import Send
from uiserve.http.response import Response, StreamingResponse

logger = logging.getLogger("uiserve.server")


def _body_allowed(status: int) -> bool:
    """Whether an HTTP status code permits a response body."""
    # RFC: 1xx, 204, and 304 responses do not include a message body.
    return not (100 <= status < 200 or status in {204, 304})


def _encode_headers(headers: tuple[tuple[str, str], ...]) -> list[tuple[bytes, bytes]]:
    return [(name.lower().encode("latin-1"), value.encode("latin-1")) for name, value in headers]


async def send_response(response: Response, send: Send) -> None:
    """Translate a Response into ASGI send() calls."""
    raw_headers: list[tuple[bytes, bytes]] = [
        (b"content-type", response.content_type.encode("latin-1")),
    ]
    raw_headers.extend(_encode_headers(response.headers))

    if _body_allowed(response.status):
        body = response.body_bytes
        length = response.content_length if response.content_length is not None else len(body)
    else:
        body = b""
        length = 0

    raw_headers.append((b"content-length", str(length).encode("latin-1")))

    await send(
        {
            "type": "http.response.start",
            "status": response.status,
            "headers": raw_headers,
        }
    )
    await send(
        {
            "type": "http.response.body",
            "body": body,
        }
    )


async def send_streaming_response(response: StreamingResponse, send: Send) -> None:
    """Send a streamed response chunk by chunk.

    Sends headers immediately, then each chunk as an ASGI body
    message with ``more_body=True``. Closes with an empty body.
    A failure mid-stream is logged and the body is cut short; the
    status line has already gone out, so nothing else can be reported.
    """
    raw_headers: list[tuple[bytes, bytes]] = []
    if response.content_type is not None:
        raw_headers.append((b"content-type", response.content_type.encode("latin-1")))
    raw_headers.extend(_encode_headers(response.headers))

    await send(
        {
            "type": "http.response.start",
            "status": response.status,
            "headers": raw_headers,
        }
    )

    try:
        if isinstance(response.chunks, AsyncIterator):
            async for chunk in response.chunks:
                if chunk:
                    await send({"type": "http.response.body", "body": chunk, "more_body": True})
        else:
            for chunk in response.chunks:
                if chunk:
                    await send({"type": "http.response.body", "body": chunk, "more_body": True})
    except Exception:
        logger.exception("error while streaming response body")
    finally:
        aclose = getattr(response.chunks, "aclose", None)
        if aclose is not None:
            await aclose()

    await send({"type": "http.response.body", "body": b"", "more_body": False})
