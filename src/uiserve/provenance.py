"""Build provenance: which build of the UI is running.

Four read-only values identify a build: the version string, the git
commit, whether the tree was clean, and when it was built. They are
stamped into the served index document.

Values come from the environment at startup, so a container image can
bake them in at build time::

    UISERVE_VERSION=v1.2.3
    UISERVE_GIT_COMMIT=abcd123
    UISERVE_GIT_TREE_STATE=clean
    UISERVE_BUILD_DATE=2024-01-01T00:00:00Z
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Protocol

from uiserve import __version__
from uiserve.errors import ConfigurationError

EPOCH = datetime(1970, 1, 1, tzinfo=UTC)


class Provenance(Protocol):
    """Anything that can describe the running build."""

    def version(self) -> str: ...

    def commit(self) -> str: ...

    def tree_state(self) -> str: ...

    def build_date(self) -> datetime: ...


def format_build_date(value: datetime) -> str:
    """Format *value* as an RFC 3339 UTC timestamp (``...Z``).

    Naive datetimes are taken to already be UTC.
    """
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    return value.astimezone(UTC).strftime("%Y-%m-%dT%H:%M:%SZ")


def parse_build_date(raw: str) -> datetime:
    """Parse an ISO 8601 timestamp or Unix seconds into an aware datetime.

    Raises:
        ConfigurationError: If *raw* is neither.
    """
    raw = raw.strip()
    try:
        return datetime.fromtimestamp(int(raw), tz=UTC)
    except ValueError:
        pass
    try:
        parsed = datetime.fromisoformat(raw)
    except ValueError as exc:
        msg = f"invalid build date {raw!r}: expected ISO 8601 or Unix seconds"
        raise ConfigurationError(msg) from exc
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


@dataclass(frozen=True, slots=True)
class BuildInfo:
    """Immutable provenance values. Satisfies ``Provenance``."""

    git_version: str = "dev"
    git_commit: str = "?"
    git_tree_state: str = "unknown"
    built_at: datetime = EPOCH

    def version(self) -> str:
        return self.git_version

    def commit(self) -> str:
        return self.git_commit

    def tree_state(self) -> str:
        return self.git_tree_state

    def build_date(self) -> datetime:
        return self.built_at

    @property
    def build_date_utc(self) -> str:
        """Build date as ``YYYY-MM-DDTHH:MM:SSZ``."""
        return format_build_date(self.built_at)

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> BuildInfo:
        """Read provenance from ``UISERVE_*`` environment variables.

        Missing values fall back to the package version, an
        unknown commit and tree state, and the Unix epoch.
        """
        env = os.environ if environ is None else environ
        raw_date = env.get("UISERVE_BUILD_DATE", "")
        return cls(
            git_version=env.get("UISERVE_VERSION") or __version__,
            git_commit=env.get("UISERVE_GIT_COMMIT") or "?",
            git_tree_state=env.get("UISERVE_GIT_TREE_STATE") or "unknown",
            built_at=parse_build_date(raw_date) if raw_date else EPOCH,
        )
