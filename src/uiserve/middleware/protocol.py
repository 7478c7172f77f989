"""Middleware shape and the ``Next`` alias.

Middleware wraps an endpoint::

    async def mw(request: Request, next: Next) -> AnyResponse: ...

Plain functions and objects with ``__call__`` both qualify; nothing
needs to inherit from ``Middleware``.
"""

from collections.abc import Awaitable, Callable
from typing import Protocol, TypeAlias

from uiserve.http.request import Request
from uiserve.http.response import Response, StreamingResponse

AnyResponse: TypeAlias = Response | StreamingResponse

# Both the rest of the chain and the innermost endpoint
Next: TypeAlias = Callable[[Request], Awaitable[AnyResponse]]
Endpoint: TypeAlias = Callable[[Request], Awaitable[AnyResponse]]


class Middleware(Protocol):
    """Anything that takes a request and the rest of the chain.

    ``next`` returns either a ``Response`` (a file served from memory)
    or a ``StreamingResponse`` (a proxied body); both take
    ``.with_header()`` so a middleware can decorate either one::

        async def no_sniff(request: Request, next: Next) -> AnyResponse:
            response = await next(request)
            return response.with_header("X-Content-Type-Options", "nosniff")
    """

    async def __call__(self, request: Request, next: Next) -> AnyResponse: ...
