"""Error handling for the request pipeline.

Maps HTTPError exceptions and unexpected failures to plain-text
responses. There are no user-registered error handlers: the UI shell
does its own error rendering client-side.
"""

import logging

from uiserve.errors import HTTPError
from uiserve.http.request import Request
from uiserve.http.response import Response

logger = logging.getLogger("uiserve.server")


def handle_http_error(exc: HTTPError, request: Request) -> Response:
    """Map an HTTPError to a plain-text response."""
    logger.debug("%d %s %s: %s", exc.status, request.method, request.path, exc.detail)

    resp = Response(body=exc.detail or f"Error {exc.status}", status=exc.status)
    for name, value in exc.headers:
        resp = resp.with_header(name, value)
    return resp


def handle_internal_error(exc: Exception, request: Request) -> Response:
    """Handle unexpected exceptions as 500 errors."""
    logger.exception("500 %s %s", request.method, request.path)
    return Response(body="Internal Server Error", status=500)
