"""HTTP responses with a chainable ``.with_*()`` API.

Each transformation returns a new object, so a response can pass
through middleware without anyone mutating it in place.
"""

from __future__ import annotations

from collections.abc import AsyncIterator, Iterator, Mapping
from dataclasses import dataclass, replace
from typing import Self


class _Chainable:
    """Status and header transformations shared by both response types."""

    __slots__ = ()

    status: int
    headers: tuple[tuple[str, str], ...]

    def with_status(self, status: int) -> Self:
        return replace(self, status=status)  # type: ignore[type-var]

    def with_header(self, name: str, value: str) -> Self:
        return replace(self, headers=(*self.headers, (name, value)))  # type: ignore[type-var]

    def with_headers(self, headers: Mapping[str, str]) -> Self:
        return replace(self, headers=(*self.headers, *headers.items()))  # type: ignore[type-var]

    def header(self, name: str, default: str | None = None) -> str | None:
        """First value of header *name*, matched case-insensitively."""
        wanted = name.lower()
        return next((value for key, value in self.headers if key.lower() == wanted), default)


@dataclass(frozen=True, slots=True)
class Response(_Chainable):
    """A complete in-memory response.

    ``content_length`` overrides the length computed from the body;
    ``HEAD`` responses use it to advertise a body they do not send.
    """

    body: str | bytes = b""
    status: int = 200
    content_type: str = "text/plain; charset=utf-8"
    headers: tuple[tuple[str, str], ...] = ()
    content_length: int | None = None

    def with_content_type(self, content_type: str) -> Response:
        return replace(self, content_type=content_type)

    def without_body(self) -> Response:
        """Drop the body but keep advertising its length."""
        return replace(self, body=b"", content_length=len(self.body_bytes))

    @property
    def body_bytes(self) -> bytes:
        return self.body.encode("utf-8") if isinstance(self.body, str) else self.body

    @property
    def text(self) -> str:
        return self.body.decode("utf-8") if isinstance(self.body, bytes) else self.body


@dataclass(frozen=True, slots=True)
class StreamingResponse(_Chainable):
    """A response whose body is sent chunk by chunk.

    Used for proxied upstream bodies: the status line and headers go out
    first, then each chunk as it arrives. ``content_type`` is ``None``
    when the upstream sent its own ``Content-Type`` header (or none).
    """

    chunks: Iterator[bytes] | AsyncIterator[bytes]
    status: int = 200
    content_type: str | None = None
    headers: tuple[tuple[str, str], ...] = ()
