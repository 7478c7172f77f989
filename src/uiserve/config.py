"""Server configuration.

ServerConfig is a frozen dataclass; fields are attributes, not string keys. ``from_env()`` reads the ``UISERVE_*`` variables
a deployment sets; CLI flags override individual fields with ``replace()``.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import TypeVar

from uiserve.errors import ConfigurationError

_TRUE = frozenset({"1", "true", "yes", "on"})
_FALSE = frozenset({"0", "false", "no", "off", ""})

T = TypeVar("T", int, float)


def _parse_bool(name: str, raw: str) -> bool:
    value = raw.strip().lower()
    if value in _TRUE:
        return True
    if value in _FALSE:
        return False
    msg = f"{name} must be a boolean, got {raw!r}"
    raise ConfigurationError(msg)


def _parse_number(name: str, raw: str, kind: type[T]) -> T:
    try:
        return kind(raw)
    except ValueError as exc:
        msg = f"{name} must be {'an integer' if kind is int else 'a number'}, got {raw!r}"
        raise ConfigurationError(msg) from exc


@dataclass(frozen=True, slots=True)
class ServerConfig:
    """Server configuration. Immutable after creation.

    All fields have sensible defaults. Override what you need::

        config = ServerConfig(ui_url="/ui", assets_dir="web/build")
    """

    # Server
    host: str = "127.0.0.1"
    port: int = 8000
    log_level: str = "info"

    # UI source: empty or a bare path serves bundled assets under that
    # mount root; an absolute URL proxies to an external UI server.
    ui_url: str = ""
    assets_dir: str | Path | None = None

    # Landing view for a request to the bare mount root
    default_view: str = "alerts"

    # Stamp the index document on a background thread at startup
    warm_index: bool = True

    # Proxy
    proxy_timeout: float = 30.0

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> ServerConfig:
        """Build a config from ``UISERVE_*`` environment variables.

        Unset variables keep their defaults.

        Raises:
            ConfigurationError: If a numeric or boolean variable does not parse.
        """
        env = os.environ if environ is None else environ
        defaults = cls()
        return cls(
            host=env.get("UISERVE_HOST", defaults.host),
            port=_parse_number("UISERVE_PORT", env["UISERVE_PORT"], int)
            if "UISERVE_PORT" in env
            else defaults.port,
            log_level=env.get("UISERVE_LOG_LEVEL", defaults.log_level),
            ui_url=env.get("UISERVE_UI_URL", defaults.ui_url),
            assets_dir=env.get("UISERVE_ASSETS_DIR") or defaults.assets_dir,
            default_view=env.get("UISERVE_DEFAULT_VIEW", defaults.default_view),
            warm_index=_parse_bool("UISERVE_WARM_INDEX", env["UISERVE_WARM_INDEX"])
            if "UISERVE_WARM_INDEX" in env
            else defaults.warm_index,
            proxy_timeout=_parse_number("UISERVE_PROXY_TIMEOUT", env["UISERVE_PROXY_TIMEOUT"], float)
            if "UISERVE_PROXY_TIMEOUT" in env
            else defaults.proxy_timeout,
        )
