"""``uiserve version`` and ``uiserve stamp``: build provenance helpers."""

import sys
from pathlib import Path

from uiserve.errors import ConfigurationError
from uiserve.provenance import BuildInfo
from uiserve.stamp import stamp_index


def _build_info() -> BuildInfo:
    try:
        return BuildInfo.from_env()
    except ConfigurationError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc


def print_version() -> None:
    """Print the four provenance values, one per line."""
    info = _build_info()
    print(f"Version:   {info.version()}")
    print(f"GitCommit: {info.commit()} ({info.tree_state()})")
    print(f"BuildDate: {info.build_date_utc}")


def print_stamped(file: str) -> None:
    """Write *file* to stdout with the provenance comment block inserted."""
    path = Path(file)
    if not path.is_file():
        print(f"Error: {file} is not a file", file=sys.stderr)
        raise SystemExit(1)
    sys.stdout.buffer.write(stamp_index(path.read_bytes(), _build_info()))
    sys.stdout.flush()
