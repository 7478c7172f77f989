"""Middleware: Protocol-based, no inheritance required.

A middleware is any callable matching:
    async def mw(request: Request, next: Next) -> Response

Built-in middleware:
    RootPrefix -- Mount-root landing rewrite and immutable caching of static assets
"""

from uiserve.middleware.protocol import AnyResponse, Endpoint, Middleware, Next
from uiserve.middleware.root import (
    DEFAULT_VIEW,
    IMMUTABLE_CACHE_CONTROL,
    STATIC_SEGMENT,
    TEN_YEARS,
    RootPrefix,
)

__all__ = [
    "DEFAULT_VIEW",
    "IMMUTABLE_CACHE_CONTROL",
    "STATIC_SEGMENT",
    "TEN_YEARS",
    "AnyResponse",
    "Endpoint",
    "Middleware",
    "Next",
    "RootPrefix",
]
