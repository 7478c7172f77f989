"""Shared fixtures: a small bundled UI and fixed build provenance."""

import threading
import time
from datetime import UTC, datetime

import pytest

from uiserve.assets import AssetTable
from uiserve.provenance import BuildInfo

INDEX_HTML = b"<!doctype html>\n<html>\n<head><title>UI</title></head>\n<body><div id=app></div></body>\n</html>\n"


class CountingProvenance:
    """Provenance that records how many times the stamp was formatted."""

    def __init__(self, info: BuildInfo, *, delay: float = 0.0) -> None:
        self.info = info
        self.delay = delay
        self.calls = 0
        self._lock = threading.Lock()

    def version(self) -> str:
        with self._lock:
            self.calls += 1
        if self.delay:
            time.sleep(self.delay)
        return self.info.version()

    def commit(self) -> str:
        return self.info.commit()

    def tree_state(self) -> str:
        return self.info.tree_state()

    def build_date(self) -> datetime:
        return self.info.build_date()


@pytest.fixture
def build_info() -> BuildInfo:
    return BuildInfo(
        git_version="v1.2.3",
        git_commit="abcd123",
        git_tree_state="clean",
        built_at=datetime(2024, 1, 1, tzinfo=UTC),
    )


@pytest.fixture
def assets() -> AssetTable:
    return AssetTable.from_mapping(
        {
            "src/build/index.html": INDEX_HTML,
            "src/build/static/app.js": b"console.log('app');",
            "src/build/static/app.css": b"body { margin: 0; }",
            "src/build/favicon.ico": b"\x00\x00\x01\x00",
            "src/build/manifest.json": b'{"name": "ui"}',
        }
    )


@pytest.fixture
def assets_without_index(assets: AssetTable) -> AssetTable:
    return AssetTable(blob for name, blob in assets.items() if name != "src/build/index.html")
