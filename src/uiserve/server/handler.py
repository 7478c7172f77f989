"""ASGI handler: translates ASGI scope/messages to uiserve types.

The only component that touches raw ASGI HTTP messages directly.
Converts scope dicts to typed Request objects, runs the middleware
chain around the endpoint, and sends the response back through ASGI
send().
"""

from collections.abc import Sequence

from uiserve._internal.asgi import Receive, Scope, Send
from uiserve.errors import HTTPError
from uiserve.http.request import Request
from uiserve.http.response import StreamingResponse
from uiserve.middleware.protocol import AnyResponse, Endpoint, Middleware, Next
from uiserve.server.errors import handle_http_error, handle_internal_error
from uiserve.server.sender import send_response, send_streaming_response


def compose(endpoint: Endpoint, middleware: Sequence[Middleware] = ()) -> Endpoint:
    """Wrap *middleware* around *endpoint*, first entry outermost."""
    handler: Next = endpoint
    for mw in reversed(middleware):
        outer = handler

        async def make_next(req: Request, _mw: Middleware = mw, _next: Next = outer) -> AnyResponse:
            return await _mw(req, _next)

        handler = make_next
    return handler


async def handle_request(
    scope: Scope,
    receive: Receive,
    send: Send,
    *,
    endpoint: Endpoint,
    middleware: Sequence[Middleware] = (),
) -> None:
    """Process a single HTTP request through the full pipeline."""
    if scope["type"] != "http":
        return

    request = Request.from_asgi(scope, receive)
    handler = compose(endpoint, middleware)

    try:
        response = await handler(request)
    except HTTPError as exc:
        response = handle_http_error(exc, request)
    except Exception as exc:
        response = handle_internal_error(exc, request)

    if isinstance(response, StreamingResponse):
        await send_streaming_response(response, send)
    else:
        await send_response(response, send)
