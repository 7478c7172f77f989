"""uiserve: serve a single-page app from bundled assets or an external UI server.

One entry point decides where the UI comes from::

    from uiserve import new_handler

    app = new_handler("/ui", assets=AssetTable.from_directory("web/build"))
    # ... or forward everything to a dev server:
    app = new_handler("http://localhost:3035")

The result is an ASGI application. Bundled mode serves the asset table
from memory with client-side-routing fallback to ``index.html``, which is
stamped once with the running build's version, commit and build date.
"""

__version__ = "0.1.0"
__all__ = [
    "AssetTable",
    "BuildInfo",
    "ConfigurationError",
    "FileNotFound",
    "Handler",
    "InvalidURL",
    "LocalAssets",
    "MemoryFS",
    "NamedBlob",
    "NotADirectory",
    "Provenance",
    "Proxy",
    "RootPrefix",
    "ServerConfig",
    "UIServeError",
    "new_handler",
]


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import uiserve`` fast (httpx is only loaded when a handler
    is built) while providing a clean top-level API.
    """
    if name in ("Handler", "LocalAssets", "Proxy", "new_handler"):
        from uiserve import handler as _handler

        return getattr(_handler, name)

    if name in ("AssetTable", "NamedBlob"):
        from uiserve import assets as _assets

        return getattr(_assets, name)

    if name in ("BuildInfo", "Provenance"):
        from uiserve import provenance as _provenance

        return getattr(_provenance, name)

    if name == "MemoryFS":
        from uiserve.memfs import MemoryFS

        return MemoryFS

    if name == "RootPrefix":
        from uiserve.middleware.root import RootPrefix

        return RootPrefix

    if name == "ServerConfig":
        from uiserve.config import ServerConfig

        return ServerConfig

    if name in (
        "ConfigurationError",
        "FileNotFound",
        "InvalidURL",
        "NotADirectory",
        "UIServeError",
    ):
        from uiserve import errors as _errors

        return getattr(_errors, name)

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)
