"""uiserve exception hierarchy.

Shared across the handler factory, the in-memory file system, the file
server and the proxy so every module raises and catches the same types.
"""

from dataclasses import dataclass


class UIServeError(Exception):
    """Base for all uiserve-specific errors."""


class ConfigurationError(UIServeError):
    """Raised when handler or server configuration is invalid.

    Surfaced at construction time, never per request.
    """


class InvalidURL(ConfigurationError):  # noqa: N818 (mirrors the "invalid URL" error kind)
    """The UI target string could not be parsed as a URL."""


@dataclass(frozen=True, slots=True)
class HTTPError(UIServeError):
    """An error that maps directly to an HTTP status code.

    Raised by endpoints or middleware. The ASGI handler catches these
    and turns them into a plain-text response.
    """

    status: int
    detail: str = ""
    headers: tuple[tuple[str, str], ...] = ()

    def __str__(self) -> str:
        if self.detail:
            return f"{self.status}: {self.detail}"
        return str(self.status)


class NotFound(HTTPError):  # noqa: N818 (conventional name in web frameworks)
    """404: nothing to serve for the request path."""

    def __init__(self, detail: str = "Not Found") -> None:
        super().__init__(status=404, detail=detail)


class MethodNotAllowed(HTTPError):  # noqa: N818 (conventional name in web frameworks)
    """405: the endpoint exists but not for this HTTP method.

    Includes an ``Allow`` header listing the valid methods.
    """

    def __init__(self, allowed: frozenset[str], detail: str = "") -> None:
        allow_value = ", ".join(sorted(allowed))
        default_detail = f"Method not allowed. Allowed methods: {allow_value}"
        super().__init__(
            status=405,
            detail=detail or default_detail,
            headers=(("Allow", allow_value),),
        )


class FileSystemError(UIServeError):
    """Base for lookups against a virtual file system."""


class FileNotFound(FileSystemError):  # noqa: N818
    """No file (and no index fallback) exists for a path."""

    def __init__(self, detail: str = "not found") -> None:
        super().__init__(detail)


class NotADirectory(FileSystemError):  # noqa: N818
    """Directory operations are never supported on served files."""

    def __init__(self, detail: str = "not a directory") -> None:
        super().__init__(detail)
