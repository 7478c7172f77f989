"""Bundled UI assets.

The build pipeline produces an ordered collection of named byte blobs
(``src/build/index.html``, ``src/build/static/app.js``, ...). This module
holds them behind an immutable mapping keyed by full virtual path.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass
from pathlib import Path

from uiserve.errors import ConfigurationError

BUILD_PREFIX = "src/build"
INDEX_NAME = f"{BUILD_PREFIX}/index.html"


@dataclass(frozen=True, slots=True)
class NamedBlob:
    """One bundled file: a slash-separated virtual path and its bytes."""

    name: str
    data: bytes

    @property
    def size(self) -> int:
        return len(self.data)


class AssetTable(Mapping[str, NamedBlob]):
    """Immutable lookup of bundled blobs by full virtual path.

    Built once from an ordered collection. Names are expected to be
    unique; if one repeats, the last blob wins.
    """

    __slots__ = ("_blobs",)

    def __init__(self, blobs: Iterable[NamedBlob] = ()) -> None:
        table: dict[str, NamedBlob] = {}
        for blob in blobs:
            table[blob.name] = blob
        self._blobs = table

    @classmethod
    def from_mapping(cls, files: Mapping[str, bytes]) -> AssetTable:
        """Build a table from ``{name: data}`` pairs, in mapping order."""
        return cls(NamedBlob(name, data) for name, data in files.items())

    @classmethod
    def from_directory(cls, directory: str | Path, prefix: str = BUILD_PREFIX) -> AssetTable:
        """Load every file under *directory* as ``prefix/<relative path>``.

        Files are read eagerly and in sorted order, so the table is
        fixed once this returns.

        Raises:
            ConfigurationError: If *directory* does not exist or is not
                a directory.
        """
        root = Path(directory)
        if not root.is_dir():
            msg = f"asset directory {str(root)!r} does not exist"
            raise ConfigurationError(msg)

        prefix = prefix.rstrip("/")
        return cls(
            NamedBlob(f"{prefix}/{path.relative_to(root).as_posix()}", path.read_bytes())
            for path in sorted(root.rglob("*"))
            if path.is_file()
        )

    @property
    def has_index(self) -> bool:
        """Whether the app shell document is bundled."""
        return INDEX_NAME in self._blobs

    def __getitem__(self, name: str) -> NamedBlob:
        return self._blobs[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._blobs)

    def __len__(self) -> int:
        return len(self._blobs)

    def __repr__(self) -> str:
        return f"AssetTable({len(self._blobs)} files)"
