"""Static file serving over any file-system-like object.

``FileServer`` turns an object with ``open(path)`` (such as
``MemoryFS``) into an endpoint. It speaks the parts of HTTP a browser
uses for static assets: content types, ``HEAD``, conditional requests
and single byte ranges. It never redirects and never lists directories.
"""

import logging
import mimetypes
import posixpath
import re
from datetime import datetime
from email.utils import format_datetime, parsedate_to_datetime
from typing import Protocol

from uiserve.errors import FileNotFound, FileSystemError, HTTPError, MethodNotAllowed, NotFound
from uiserve.http.request import Request
from uiserve.http.response import Response
from uiserve.memfs import FileInfo
from uiserve.provenance import EPOCH

logger = logging.getLogger("uiserve.server")

ALLOWED_METHODS = frozenset({"GET", "HEAD"})
NOT_FOUND_BODY = "404 page not found"

_RANGE_RE = re.compile(r"^\s*bytes\s*=\s*(\d*)\s*-\s*(\d*)\s*$")

# Types served as text get an explicit charset, like text/html does.
_CHARSET_TYPES = frozenset({"application/javascript", "application/json", "image/svg+xml"})


class File(Protocol):
    def read(self, size: int = -1) -> bytes: ...

    def read_at(self, offset: int, size: int) -> bytes: ...

    def stat(self) -> FileInfo: ...

    def close(self) -> None: ...


class FileSystem(Protocol):
    def open(self, path: str) -> File: ...


class RangeNotSatisfiable(Exception):  # noqa: N818
    """The requested byte range lies outside the file."""


def clean_path(path: str) -> str:
    """Rooted, normalized form of a request path (no ``..``, no ``//``)."""
    return posixpath.normpath("/" + path.lstrip("/"))


def content_type_for(name: str) -> str:
    """Guess a Content-Type from a file name."""
    content_type, _ = mimetypes.guess_type(name)
    if content_type is None:
        return "application/octet-stream"
    if content_type.startswith("text/") or content_type in _CHARSET_TYPES:
        return f"{content_type}; charset=utf-8"
    return content_type


def parse_range(header: str, size: int) -> tuple[int, int] | None:
    """Parse a single ``Range: bytes=...`` header into ``(start, end)``.

    *end* is inclusive. Returns ``None`` for headers that should be
    ignored (malformed or multi-range) so the full body is served.

    Raises:
        RangeNotSatisfiable: If the range does not overlap the file.
    """
    match = _RANGE_RE.match(header)
    if match is None:
        return None
    first, last = match.groups()
    if not first and not last:
        return None

    if not first:
        # Suffix range: the final N bytes.
        length = int(last)
        if length == 0 or size == 0:
            raise RangeNotSatisfiable
        return max(size - length, 0), size - 1

    start = int(first)
    if start >= size:
        raise RangeNotSatisfiable
    end = size - 1 if not last else min(int(last), size - 1)
    if end < start:
        return None
    return start, end


def _not_modified(request: Request, mod_time: datetime) -> bool:
    header = request.headers.get("if-modified-since")
    if not header:
        return False
    try:
        since = parsedate_to_datetime(header)
    except (TypeError, ValueError):
        return False
    if since.tzinfo is None:
        return False
    return mod_time.replace(microsecond=0) <= since


class FileServer:
    """Endpoint serving files from a ``FileSystem``.

    Usage::

        endpoint = FileServer(MemoryFS("/", assets, build_info))
        response = await endpoint(request)

    ``FileNotFound`` from the file system becomes a ``404``; any other
    file system error is a ``500``.
    """

    __slots__ = ("fs",)

    def __init__(self, fs: FileSystem) -> None:
        self.fs = fs

    async def __call__(self, request: Request) -> Response:
        if request.method not in ALLOWED_METHODS:
            raise MethodNotAllowed(ALLOWED_METHODS)

        path = clean_path(request.path)
        try:
            file = self.fs.open(path)
        except FileNotFound:
            raise NotFound(NOT_FOUND_BODY) from None
        except FileSystemError as exc:
            logger.error("open %s: %s", path, exc)
            raise HTTPError(status=500, detail="500 Internal Server Error") from exc

        try:
            response = self._serve(request, file)
        finally:
            file.close()

        if request.method == "HEAD":
            return response.without_body()
        return response

    def _serve(self, request: Request, file: File) -> Response:
        info = file.stat()
        mod_time = info.mod_time

        headers: list[tuple[str, str]] = [("Accept-Ranges", "bytes")]
        if mod_time != EPOCH:
            headers.append(("Last-Modified", format_datetime(mod_time, usegmt=True)))
            if _not_modified(request, mod_time):
                return Response(status=304, headers=tuple(headers))

        content_type = content_type_for(info.name)

        range_header = request.headers.get("range")
        if range_header:
            try:
                byte_range = parse_range(range_header, info.size)
            except RangeNotSatisfiable:
                return Response(
                    body="invalid range: failed to overlap",
                    status=416,
                    headers=(*headers, ("Content-Range", f"bytes */{info.size}")),
                )
            if byte_range is not None:
                start, end = byte_range
                return Response(
                    body=file.read_at(start, end - start + 1),
                    status=206,
                    content_type=content_type,
                    headers=(*headers, ("Content-Range", f"bytes {start}-{end}/{info.size}")),
                )

        return Response(body=file.read(), content_type=content_type, headers=tuple(headers))
