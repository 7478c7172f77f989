"""uiserve CLI: serve the UI, inspect build provenance.

Entry point registered as ``uiserve`` in ``pyproject.toml``::

    [project.scripts]
    uiserve = "uiserve.cli:main"
"""

import argparse
import sys


def main(argv: list[str] | None = None) -> None:
    """CLI entry point for the ``uiserve`` command."""
    parser = argparse.ArgumentParser(
        prog="uiserve",
        description="uiserve: serve a single-page app from bundled assets or a UI server.",
    )
    subparsers = parser.add_subparsers(dest="command")

    # -- uiserve run ------------------------------------------------------
    run_parser = subparsers.add_parser("run", help="Serve the UI")
    run_parser.add_argument(
        "--ui-url",
        default=None,
        help="Mount path for bundled assets (e.g. /ui) or URL of an external UI server",
    )
    run_parser.add_argument(
        "--assets",
        default=None,
        help="Directory holding the UI build output",
    )
    run_parser.add_argument("--host", default=None, help="Bind host address")
    run_parser.add_argument("--port", type=int, default=None, help="Bind port number")
    run_parser.add_argument(
        "--default-view",
        default=None,
        help="View served for a request to the bare mount root",
    )
    run_parser.add_argument(
        "--workers",
        type=int,
        default=1,
        help="Worker count",
    )
    run_parser.add_argument(
        "--log-level",
        default=None,
        choices=("debug", "info", "warning", "error"),
        help="Logging level",
    )

    # -- uiserve version --------------------------------------------------
    subparsers.add_parser("version", help="Print build provenance")

    # -- uiserve stamp ----------------------------------------------------
    stamp_parser = subparsers.add_parser(
        "stamp",
        help="Print an index document with build provenance stamped in",
    )
    stamp_parser.add_argument("file", help="Path to index.html")

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    if args.command == "run":
        from uiserve.cli._run import run

        run(args)
    elif args.command == "version":
        from uiserve.cli._info import print_version

        print_version()
    elif args.command == "stamp":
        from uiserve.cli._info import print_stamped

        print_stamped(args.file)
