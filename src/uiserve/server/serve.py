"""Serve a UI handler with pounce.

Pounce's ``run()`` takes an import string, but the handler is a live
object built from configuration, so ``pounce.Server`` is used directly
with the ASGI callable.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from uiserve._internal.asgi import ASGIApp


def run_server(app: ASGIApp, host: str, port: int, *, workers: int = 1) -> None:
    """Start a pounce server for *app* and block until it exits.

    Args:
        app: ASGI callable (a ``LocalAssets`` or ``Proxy`` handler).
        host: Bind host address.
        port: Bind port number.
        workers: Worker count. Handlers are immutable apart from the
            once-stamped index, so any count is safe.
    """
    from pounce.config import ServerConfig
    from pounce.server import Server

    config = ServerConfig(host=host, port=port, workers=workers)
    server = Server(config, app)
    server.run()
