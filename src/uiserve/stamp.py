"""Build stamping for the app shell document.

The served ``index.html`` carries an HTML comment block naming the
build, spliced in right before the closing ``</html>`` tag. The stamped
bytes are computed once per handler and then shared by every request.
"""

import logging
import threading
from collections.abc import Callable

from uiserve.provenance import Provenance, format_build_date

logger = logging.getLogger("uiserve.memfs")

CLOSING_TAG = b"</html>"

FOOTER = (
    "\n\n"
    "<!-- Version: {version} -->\n"
    "<!-- GitCommit: {commit} ({tree_state}) -->\n"
    "<!-- BuildDate: {build_date} -->\n"
    "\n"
    "</html>"
)


def stamp_index(data: bytes, provenance: Provenance) -> bytes:
    """Insert the provenance comment block before the first ``</html>``.

    Only the first closing tag is replaced; everything else is left
    byte-for-byte intact. A document without ``</html>`` comes back
    unchanged.
    """
    stamp = FOOTER.format(
        version=provenance.version(),
        commit=provenance.commit(),
        tree_state=provenance.tree_state(),
        build_date=format_build_date(provenance.build_date()),
    ).encode("utf-8")
    return data.replace(CLOSING_TAG, stamp, 1)


class StampedIndex:
    """A once-computed, thread-safe cell holding the stamped index bytes.

    ``get()`` runs the computation exactly once no matter how many
    threads race to call it first; all of them observe the same bytes
    object. A missing document, or a computation that raises, leaves
    the cell permanently empty (``b""``) rather than retrying.

    Usage::

        cell = StampedIndex(lambda: table.get(INDEX_NAME), build_info)
        cell.warm()        # optional: compute on a background thread
        data = cell.get()  # b"" means there is no index to serve
    """

    __slots__ = ("_data", "_done", "_load", "_lock", "_provenance")

    def __init__(self, load: Callable[[], bytes | None], provenance: Provenance) -> None:
        self._load = load
        self._provenance = provenance
        self._lock = threading.Lock()
        self._done = False
        self._data = b""

    @property
    def computed(self) -> bool:
        """Whether the computation has already run."""
        return self._done

    def get(self) -> bytes:
        """The stamped bytes, computing them on first use."""
        if self._done:
            return self._data
        with self._lock:
            if not self._done:
                try:
                    self._data = self._compute()
                except Exception:
                    logger.exception("failed to stamp index document")
                    self._data = b""
                finally:
                    self._done = True
        return self._data

    def warm(self) -> threading.Thread:
        """Start computing on a daemon thread and return it."""
        thread = threading.Thread(target=self.get, name="uiserve-index-warmup", daemon=True)
        thread.start()
        return thread

    def _compute(self) -> bytes:
        data = self._load()
        if data is None:
            logger.warning("index document is not bundled; every lookup will report not found")
            return b""
        stamped = stamp_index(data, self._provenance)
        logger.debug("stamped index document (%d bytes)", len(stamped))
        return stamped
