"""Root-prefix middleware for a mounted single-page app.

Makes a configurable mount root behave like the application root:
a request for the bare root lands on the default view, and anything
under a ``/static/`` segment is marked immutable for ten years.
"""

import posixpath

from uiserve.errors import HTTPError
from uiserve.http.request import Request
from uiserve.middleware.protocol import AnyResponse, Next
from uiserve.server.errors import handle_http_error

STATIC_SEGMENT = "/static/"
DEFAULT_VIEW = "alerts"
TEN_YEARS = 10 * 365 * 24 * 60 * 60  # 315360000 seconds
IMMUTABLE_CACHE_CONTROL = f"public, immutable, max-age={TEN_YEARS}"


class RootPrefix:
    """Rewrite the bare mount root and cache static assets forever.

    For every request:

    - If the path equals the mount root exactly, it is rewritten to
      ``root/<default_view>`` before reaching the wrapped handler, so
      the file server never sees the bare root (which would otherwise
      bounce between redirects).
    - If the path contains ``/static/`` anywhere, the response gets
      ``Cache-Control: public, immutable, max-age=315360000``.

    The wrapped handler is always called; this middleware never fails.
    ``HTTPError`` raised further in is rendered here, so a ``/static/``
    404 or 405 carries the same ``Cache-Control`` as a 200.

    Usage::

        handler = RootPrefix("/ui")
        response = await handler(request, file_server)
    """

    __slots__ = ("cache_control", "default_view", "root")

    def __init__(
        self,
        root: str,
        *,
        default_view: str = DEFAULT_VIEW,
        cache_control: str = IMMUTABLE_CACHE_CONTROL,
    ) -> None:
        # An empty root would match nothing; serve from "/" instead.
        self.root = root or "/"
        self.default_view = default_view
        self.cache_control = cache_control

    def rewrite(self, path: str) -> str:
        """The path the wrapped handler will see for *path*."""
        if path == self.root:
            return posixpath.join(self.root, self.default_view)
        return path

    async def __call__(self, request: Request, next: Next) -> AnyResponse:
        path = self.rewrite(request.path)
        if path != request.path:
            request = request.with_path(path)

        try:
            response = await next(request)
        except HTTPError as exc:
            response = handle_http_error(exc, request)

        if STATIC_SEGMENT in request.path:
            response = response.with_header("Cache-Control", self.cache_control)
        return response
