"""Single-host reverse proxy.

Forwards every request to one upstream UI server, the way a standard
single-host reverse proxy does: the upstream's scheme and host replace
the request's, the upstream's base path is joined in front of the
request path, and hop-by-hop headers stay on their own hop.

Uses one shared ``httpx.AsyncClient`` per proxy; close it with
``aclose()`` (the ASGI lifespan shutdown does this).
"""

import logging
from collections.abc import AsyncIterator
from urllib.parse import quote

import httpx

from uiserve.http.request import Request
from uiserve.http.response import Response, StreamingResponse

logger = logging.getLogger("uiserve.proxy")

# Headers that describe one connection, not the message (RFC 9110 §7.6.1).
HOP_BY_HOP = frozenset(
    {
        "connection",
        "keep-alive",
        "proxy-connection",
        "proxy-authenticate",
        "proxy-authorization",
        "te",
        "trailer",
        "transfer-encoding",
        "upgrade",
    }
)


def single_joining_slash(a: str, b: str) -> str:
    """Join two URL paths with exactly one slash between them."""
    a_slash = a.endswith("/")
    b_slash = b.startswith("/")
    if a_slash and b_slash:
        return a + b[1:]
    if not a_slash and not b_slash:
        return f"{a}/{b}"
    return a + b


def _escape(raw: bytes) -> str:
    """ASCII form of raw URL bytes; anything outside printable ASCII is %-escaped."""
    return "".join(chr(byte) if 0x20 < byte < 0x7F else f"%{byte:02X}" for byte in raw)


async def _relay(upstream: httpx.Response) -> AsyncIterator[bytes]:
    try:
        async for chunk in upstream.aiter_raw():
            yield chunk
    finally:
        await upstream.aclose()


def _strip_hop_by_hop(pairs: list[tuple[str, str]]) -> list[tuple[str, str]]:
    listed = {
        token.strip().lower()
        for name, value in pairs
        if name.lower() == "connection"
        for token in value.split(",")
    }
    drop = HOP_BY_HOP | listed
    return [(name, value) for name, value in pairs if name.lower() not in drop]


class ReverseProxy:
    """Endpoint forwarding requests to a single upstream.

    Usage::

        proxy = ReverseProxy("http://ui.example.com/app")
        response = await proxy(request)   # -> http://ui.example.com/app/<path>
        await proxy.aclose()

    Upstream failures (refused connections, timeouts) become
    ``502 Bad Gateway``.
    """

    __slots__ = ("_client", "target")

    def __init__(
        self,
        target: httpx.URL | str,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
        timeout: float = 30.0,
    ) -> None:
        self.target = httpx.URL(target)
        self._client = httpx.AsyncClient(
            transport=transport,
            timeout=timeout,
            follow_redirects=False,
        )

    def upstream_url(self, request: Request) -> httpx.URL:
        """Where *request* goes upstream.

        Path and query are forwarded in their wire form: escapes such as
        ``%2F`` survive and query bytes are passed through, not re-decoded.
        """
        target_path, _, target_query = self.target.raw_path.decode("ascii").partition("?")
        request_path = _escape(request.raw_path) if request.raw_path else quote(request.path)
        path = single_joining_slash(target_path or "/", request_path)
        query = "&".join(part for part in (target_query, _escape(request.query_string)) if part)
        raw_path = f"{path}?{query}" if query else path
        return self.target.copy_with(raw_path=raw_path.encode("ascii"))

    def upstream_headers(self, request: Request) -> list[tuple[str, str]]:
        """Request headers as sent upstream.

        Drops hop-by-hop headers and ``Host`` (httpx sets it from the
        target) and appends the client to ``X-Forwarded-For``.
        """
        pairs = [(name, value) for name, value in request.headers.pairs() if name != "host"]
        pairs = _strip_hop_by_hop(pairs)
        if request.client is not None:
            client_ip = request.client[0]
            prior = request.headers.get_list("x-forwarded-for")
            pairs = [(name, value) for name, value in pairs if name != "x-forwarded-for"]
            pairs.append(("x-forwarded-for", ", ".join([*prior, client_ip])))
        return pairs

    async def __call__(self, request: Request) -> Response | StreamingResponse:
        body = await request.body()
        outgoing = self._client.build_request(
            request.method,
            self.upstream_url(request),
            headers=self.upstream_headers(request),
            content=body or None,
        )
        try:
            upstream = await self._client.send(outgoing, stream=True)
        except httpx.HTTPError as exc:
            logger.error("http: proxy error: %s", exc)
            return Response(body=b"", status=502)

        headers = _strip_hop_by_hop(list(upstream.headers.multi_items()))
        # The sender re-frames the body; upstream framing does not apply.
        headers = [(name, value) for name, value in headers if name.lower() != "content-length"]
        return StreamingResponse(
            chunks=_relay(upstream),
            status=upstream.status_code,
            headers=tuple(headers),
        )

    @property
    def is_closed(self) -> bool:
        return self._client.is_closed

    async def aclose(self) -> None:
        await self._client.aclose()
