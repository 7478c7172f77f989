"""Handler factory: the single public entry point.

``new_handler(url)`` decides, once, where the UI comes from:

- empty string or a bare path (``""``, ``"/ui"``): bundled assets served
  from memory under that mount root → ``LocalAssets``
- absolute URL with a host (``"http://ui.example.com/app"``): every
  request is forwarded there → ``Proxy``

Both variants are ASGI 3.0 applications.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Literal, TypeAlias
from urllib.parse import SplitResult, unquote, urlsplit

import anyio.to_thread
import httpx

from uiserve._internal.asgi import Receive, Scope, Send
from uiserve.assets import AssetTable
from uiserve.config import ServerConfig
from uiserve.errors import InvalidURL
from uiserve.fileserver import FileServer
from uiserve.memfs import MemoryFS
from uiserve.middleware.root import RootPrefix
from uiserve.provenance import BuildInfo, Provenance
from uiserve.proxy import ReverseProxy
from uiserve.server.handler import handle_request

logger = logging.getLogger("uiserve.server")

_CONTROL_CHARS = re.compile(r"[\x00-\x1f\x7f]")
_BAD_ESCAPE = re.compile(r"%(?![0-9A-Fa-f]{2})")


def parse_url(raw: str) -> SplitResult:
    """Parse the UI target, rejecting strings that are not valid URLs.

    Raises:
        InvalidURL: On control characters, malformed percent escapes, a
            missing scheme before ``:``, or an unparseable authority.
    """
    if not isinstance(raw, str):
        msg = f"parse url: expected a string, got {type(raw).__name__}"
        raise InvalidURL(msg)
    if _CONTROL_CHARS.search(raw):
        msg = f"parse url {raw!r}: invalid control character in URL"
        raise InvalidURL(msg)
    if _BAD_ESCAPE.search(raw):
        msg = f"parse url {raw!r}: invalid URL escape"
        raise InvalidURL(msg)
    if raw.startswith(":"):
        msg = f"parse url {raw!r}: missing protocol scheme"
        raise InvalidURL(msg)
    try:
        parts = urlsplit(raw)
        parts.port  # noqa: B018 (validates the port)
    except ValueError as exc:
        msg = f"parse url {raw!r}: {exc}"
        raise InvalidURL(msg) from exc
    return parts


async def _lifespan(
    receive: Receive,
    send: Send,
    *,
    startup: Callable[[], Awaitable[None]],
    shutdown: Callable[[], Awaitable[None]],
) -> None:
    """Run the ASGI lifespan protocol with the given hooks."""
    while True:
        message = await receive()
        if message["type"] == "lifespan.startup":
            try:
                await startup()
            except Exception as exc:
                await send({"type": "lifespan.startup.failed", "message": str(exc)})
                return
            await send({"type": "lifespan.startup.complete"})
        elif message["type"] == "lifespan.shutdown":
            await shutdown()
            await send({"type": "lifespan.shutdown.complete"})
            return


@dataclass(slots=True)
class LocalAssets:
    """Bundled assets served from memory under a mount root.

    The pipeline is ``RootPrefix`` around a ``FileServer`` over a
    ``MemoryFS``.
    """

    fs: MemoryFS
    root_prefix: RootPrefix
    kind: Literal["local"] = field(default="local", init=False)
    file_server: FileServer = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self.file_server = FileServer(self.fs)

    @property
    def root(self) -> str:
        return self.fs.root

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] == "lifespan":
            await _lifespan(receive, send, startup=self._startup, shutdown=self._shutdown)
            return
        await handle_request(
            scope,
            receive,
            send,
            endpoint=self.file_server,
            middleware=(self.root_prefix,),
        )

    async def _startup(self) -> None:
        # Finish stamping off the event loop before the first request.
        await anyio.to_thread.run_sync(self.fs.stamped.get)
        logger.info("serving bundled UI assets at %s (%d files)", self.root, len(self.fs.assets))

    async def _shutdown(self) -> None:
        pass


@dataclass(slots=True)
class Proxy:
    """Every request forwarded to an external UI server.

    The asset table is never consulted.
    """

    target: httpx.URL
    proxy: ReverseProxy
    kind: Literal["proxy"] = field(default="proxy", init=False)

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] == "lifespan":
            await _lifespan(receive, send, startup=self._startup, shutdown=self.proxy.aclose)
            return
        await handle_request(scope, receive, send, endpoint=self.proxy)

    async def _startup(self) -> None:
        logger.info("proxying UI requests to %s", self.target)


Handler: TypeAlias = LocalAssets | Proxy


def new_handler(
    url: str = "",
    *,
    assets: AssetTable | None = None,
    provenance: Provenance | None = None,
    config: ServerConfig | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> Handler:
    """Create the UI handler for *url*.

    Args:
        url: Empty, a bare mount path, or an absolute URL with a host.
        assets: Bundled asset table. Defaults to ``config.assets_dir``
            loaded from disk, or an empty table.
        provenance: Build values stamped into ``index.html``. Defaults
            to ``BuildInfo.from_env()``.
        config: Server configuration (default view, warm-up, proxy timeout).
        transport: httpx transport for the proxy (tests pass a mock).

    Raises:
        InvalidURL: If *url* is not a valid URL.
        ConfigurationError: If assets are loaded from a missing
            ``config.assets_dir``.
    """
    parts = parse_url(url)
    config = config or ServerConfig()

    if not parts.netloc:
        root = unquote(parts.path) or "/"
        if assets is None:
            assets = (
                AssetTable.from_directory(config.assets_dir)
                if config.assets_dir is not None
                else AssetTable()
            )
        fs = MemoryFS(
            root,
            assets,
            provenance if provenance is not None else BuildInfo.from_env(),
            warm=config.warm_index,
        )
        return LocalAssets(fs=fs, root_prefix=RootPrefix(root, default_view=config.default_view))

    try:
        target = httpx.URL(url)
    except httpx.InvalidURL as exc:
        msg = f"parse url {url!r}: {exc}"
        raise InvalidURL(msg) from exc
    return Proxy(
        target=target,
        proxy=ReverseProxy(target, transport=transport, timeout=config.proxy_timeout),
    )
