"""In-memory virtual file system over the bundled asset table.

Maps request paths onto the flat ``src/build/...`` blob table with the
semantics a static file server expects:

- the mount root is stripped so the same table serves under any prefix,
- ``/index.html`` is the stamped app shell,
- any unknown path falls back to the app shell (client-side routing),
- if there is no app shell at all, every lookup is "not found".

Files are read-only views over immutable bytes; there are no
directories and no listings.
"""

from __future__ import annotations

import io
import posixpath
from dataclasses import dataclass
from datetime import UTC, datetime

from uiserve.assets import BUILD_PREFIX, INDEX_NAME, AssetTable
from uiserve.errors import FileNotFound, NotADirectory
from uiserve.provenance import EPOCH, Provenance
from uiserve.stamp import StampedIndex

INDEX_PATH = "/index.html"
FILE_MODE = 0o644


def normalize_path(path: str, root: str) -> str:
    """Collapse the mount root in *path* to ``/``.

    Replaces the first occurrence of *root* anywhere in *path*, not only
    at the start. With ``root="/ui"`` both ``/ui/app.js`` and
    ``/x/ui/app.js`` lose their ``/ui``; mount roots are expected to be
    real path prefixes. A doubled leading slash left by a root without a
    trailing slash (``/ui`` + ``/app.js``) is collapsed.
    """
    normalized = path.replace(root, "/", 1)
    if normalized.startswith("//"):
        normalized = "/" + normalized.lstrip("/")
    return normalized


@dataclass(frozen=True, slots=True)
class FileInfo:
    """Synthetic stat result for a served file."""

    path: str
    size: int
    mode: int = FILE_MODE
    is_dir: bool = False

    @property
    def name(self) -> str:
        return posixpath.basename(self.path)

    @property
    def immutable(self) -> bool:
        """Assets under a ``/static/`` segment never change."""
        return "/static/" in self.path

    @property
    def mod_time(self) -> datetime:
        # The epoch for static assets; "now" for everything else, so
        # nothing but /static/ looks cacheable by modification time.
        if self.immutable:
            return EPOCH
        return datetime.now(UTC)


class ServedFile:
    """A read-only, seekable view over one blob for one response."""

    __slots__ = ("_data", "_reader", "path")

    def __init__(self, path: str, data: bytes) -> None:
        self.path = path
        self._data = data
        self._reader = io.BytesIO(data)

    @property
    def size(self) -> int:
        return len(self._data)

    def read(self, size: int = -1) -> bytes:
        return self._reader.read(size)

    def seek(self, offset: int, whence: int = io.SEEK_SET) -> int:
        return self._reader.seek(offset, whence)

    def tell(self) -> int:
        return self._reader.tell()

    def read_at(self, offset: int, size: int) -> bytes:
        """Read *size* bytes at *offset* without moving the cursor."""
        if offset < 0:
            msg = "negative offset"
            raise ValueError(msg)
        return self._data[offset : offset + size]

    def readdir(self) -> list[FileInfo]:
        raise NotADirectory()

    def stat(self) -> FileInfo:
        return FileInfo(path=self.path, size=self.size)

    def close(self) -> None:
        # Nothing to release; the bytes belong to the asset table.
        pass

    def __enter__(self) -> ServedFile:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"ServedFile({self.path!r}, {self.size} bytes)"


class MemoryFS:
    """Path-keyed lookup over an ``AssetTable`` with SPA fallback.

    Owns the stamped index cell; one instance per handler, shared by
    all concurrent requests.

    Usage::

        fs = MemoryFS("/ui", assets, build_info)
        with fs.open("/ui/static/app.js") as f:
            body = f.read()
    """

    __slots__ = ("_index", "assets", "root")

    def __init__(
        self,
        root: str,
        assets: AssetTable,
        provenance: Provenance,
        *,
        warm: bool = True,
    ) -> None:
        self.root = root or "/"
        self.assets = assets
        self._index = StampedIndex(self._load_index, provenance)
        if warm:
            self._index.warm()

    @property
    def stamped(self) -> StampedIndex:
        return self._index

    def _load_index(self) -> bytes | None:
        blob = self.assets.get(INDEX_NAME)
        return None if blob is None else blob.data

    def index(self) -> ServedFile:
        """The stamped app shell.

        Raises:
            FileNotFound: If the asset table has no index document.
        """
        data = self._index.get()
        if not data:
            raise FileNotFound()
        return ServedFile(INDEX_NAME, data)

    def open(self, path: str) -> ServedFile:
        """Resolve a request path to a served file.

        Unknown paths resolve to the app shell.

        Raises:
            FileNotFound: Only when there is no app shell to fall back to.
        """
        path = normalize_path(path, self.root)
        if path == INDEX_PATH:
            return self.index()

        blob = self.assets.get(BUILD_PREFIX + path)
        if blob is not None:
            return ServedFile(blob.name, blob.data)

        return self.index()
