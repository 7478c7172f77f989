"""``uiserve run``: build the handler from configuration and serve it.

Configuration comes from ``UISERVE_*`` environment variables; CLI flags
override individual fields.
"""

import argparse
import logging
import sys
from dataclasses import replace

from uiserve.config import ServerConfig
from uiserve.errors import ConfigurationError

logger = logging.getLogger("uiserve.cli")


def configure_logging(level: str) -> None:
    """Send uiserve logs to stderr at *level*."""
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def resolve_config(args: argparse.Namespace) -> ServerConfig:
    """Environment configuration with CLI flags applied on top."""
    config = ServerConfig.from_env()
    overrides = {
        "ui_url": args.ui_url,
        "assets_dir": args.assets,
        "host": args.host,
        "port": args.port,
        "default_view": args.default_view,
        "log_level": args.log_level,
    }
    return replace(config, **{k: v for k, v in overrides.items() if v is not None})


def run(args: argparse.Namespace) -> None:
    """Start serving the UI.

    Configuration errors (including an invalid ``--ui-url``) are
    reported on stderr with exit status 1.
    """
    from uiserve.handler import new_handler
    from uiserve.server.serve import run_server

    try:
        config = resolve_config(args)
        configure_logging(config.log_level)
        handler = new_handler(config.ui_url, config=config)
    except ConfigurationError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc

    logger.info("starting %s handler on %s:%d", handler.kind, config.host, config.port)
    run_server(handler, config.host, config.port, workers=args.workers)
