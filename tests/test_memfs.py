"""Tests for uiserve.memfs: path lookup, SPA fallback and served-file views."""

import io
from concurrent.futures import ThreadPoolExecutor
from datetime import UTC, datetime, timedelta

import pytest

from conftest import INDEX_HTML, CountingProvenance
from uiserve.assets import AssetTable
from uiserve.errors import FileNotFound, NotADirectory
from uiserve.memfs import FILE_MODE, FileInfo, MemoryFS, ServedFile, normalize_path
from uiserve.provenance import EPOCH, BuildInfo
from uiserve.stamp import stamp_index


@pytest.fixture
def fs(assets: AssetTable, build_info: BuildInfo) -> MemoryFS:
    return MemoryFS("/", assets, build_info, warm=False)


class TestNormalizePath:
    def test_root_slash_is_identity(self) -> None:
        assert normalize_path("/static/app.js", "/") == "/static/app.js"

    def test_strips_mount_root(self) -> None:
        assert normalize_path("/ui/static/app.js", "/ui") == "/static/app.js"

    def test_mount_root_with_trailing_slash(self) -> None:
        assert normalize_path("/ui/static/app.js", "/ui/") == "/static/app.js"

    def test_only_first_occurrence(self) -> None:
        assert normalize_path("/ui/ui/x", "/ui/") == "/ui/x"

    def test_replaces_occurrence_anywhere(self) -> None:
        # Not prefix-only: a mount root appearing mid-path is collapsed too.
        assert normalize_path("/docs/ui/page", "/ui/") == "/docs/page"

    def test_mid_path_root_without_trailing_slash(self) -> None:
        assert normalize_path("/docs/ui/page", "/ui") == "/docs//page"

    def test_path_without_root_unchanged(self) -> None:
        assert normalize_path("/other/app.js", "/ui/") == "/other/app.js"


class TestOpen:
    def test_known_asset(self, fs: MemoryFS) -> None:
        with fs.open("/static/app.js") as f:
            assert f.read() == b"console.log('app');"
            assert f.path == "src/build/static/app.js"

    def test_index_is_stamped(self, fs: MemoryFS, build_info: BuildInfo) -> None:
        with fs.open("/index.html") as f:
            assert f.read() == stamp_index(INDEX_HTML, build_info)

    def test_unknown_path_falls_back_to_index(self, fs: MemoryFS) -> None:
        expected = fs.open("/index.html").read()
        for path in ("/alerts", "/services/123/edit", "/static/missing.js", "/"):
            assert fs.open(path).read() == expected

    def test_fallback_reports_index_name(self, fs: MemoryFS) -> None:
        assert fs.open("/deep/link").stat().name == "index.html"

    def test_mount_root_stripped(self, assets: AssetTable, build_info: BuildInfo) -> None:
        fs = MemoryFS("/ui", assets, build_info, warm=False)
        assert fs.open("/ui/static/app.js").read() == b"console.log('app');"

    def test_mount_root_with_trailing_slash_stripped(self, assets: AssetTable, build_info: BuildInfo) -> None:
        fs = MemoryFS("/ui/", assets, build_info, warm=False)
        assert fs.open("/ui/static/app.css").read() == b"body { margin: 0; }"

    def test_mounted_index_matches_root_index(self, assets: AssetTable, build_info: BuildInfo) -> None:
        fs = MemoryFS("/ui", assets, build_info, warm=False)
        assert fs.open("/ui/index.html").read() == fs.open("/index.html").read()

    def test_empty_root_is_slash(self, assets: AssetTable, build_info: BuildInfo) -> None:
        assert MemoryFS("", assets, build_info, warm=False).root == "/"

    def test_repeated_lookups_identical(self, fs: MemoryFS) -> None:
        first = fs.open("/alerts").read()
        for _ in range(5):
            assert fs.open("/alerts").read() == first


class TestMissingIndex:
    @pytest.mark.parametrize("path", ["/index.html", "/alerts", "/no/such/page"])
    def test_every_fallback_lookup_not_found(
        self, assets_without_index: AssetTable, build_info: BuildInfo, path: str
    ) -> None:
        fs = MemoryFS("/", assets_without_index, build_info, warm=False)
        with pytest.raises(FileNotFound, match="not found"):
            fs.open(path)

    def test_index_not_found(self, assets_without_index: AssetTable, build_info: BuildInfo) -> None:
        fs = MemoryFS("/", assets_without_index, build_info, warm=False)
        with pytest.raises(FileNotFound):
            fs.index()

    def test_empty_table(self, build_info: BuildInfo) -> None:
        fs = MemoryFS("/", AssetTable(), build_info, warm=False)
        with pytest.raises(FileNotFound):
            fs.open("/")


class TestConcurrency:
    def test_concurrent_lookups_stamp_once(self, assets: AssetTable, build_info: BuildInfo) -> None:
        provenance = CountingProvenance(build_info, delay=0.05)
        fs = MemoryFS("/", assets, provenance)

        paths = ["/index.html", "/alerts", "/x/y"] * 20
        with ThreadPoolExecutor(max_workers=24) as pool:
            bodies = list(pool.map(lambda p: fs.open(p).read(), paths))

        assert provenance.calls == 1
        assert len(set(bodies)) == 1

    def test_warm_up_at_construction(self, assets: AssetTable, build_info: BuildInfo) -> None:
        provenance = CountingProvenance(build_info)
        fs = MemoryFS("/", assets, provenance, warm=True)
        fs.open("/index.html")
        assert fs.stamped.computed is True
        assert provenance.calls == 1


class TestServedFile:
    def test_seek_and_tell(self) -> None:
        f = ServedFile("src/build/a.txt", b"0123456789")
        f.seek(4)
        assert f.tell() == 4
        assert f.read(3) == b"456"
        f.seek(-2, io.SEEK_END)
        assert f.read() == b"89"

    def test_read_at_does_not_move_cursor(self) -> None:
        f = ServedFile("src/build/a.txt", b"0123456789")
        assert f.read_at(2, 3) == b"234"
        assert f.tell() == 0

    def test_read_at_negative_offset(self) -> None:
        with pytest.raises(ValueError):
            ServedFile("a", b"abc").read_at(-1, 1)

    def test_readdir_always_fails(self) -> None:
        with pytest.raises(NotADirectory, match="not a directory"):
            ServedFile("src/build/static", b"").readdir()

    def test_stat(self) -> None:
        info = ServedFile("src/build/static/app.js", b"abc").stat()
        assert info.name == "app.js"
        assert info.size == 3
        assert info.mode == FILE_MODE == 0o644
        assert info.is_dir is False

    def test_repr(self) -> None:
        assert repr(ServedFile("src/build/a", b"xy")) == "ServedFile('src/build/a', 2 bytes)"


class TestFileInfoModTime:
    def test_static_assets_use_epoch(self) -> None:
        info = FileInfo(path="src/build/static/app.js", size=0)
        assert info.immutable is True
        assert info.mod_time == EPOCH

    def test_other_files_use_now(self) -> None:
        before = datetime.now(UTC)
        mod_time = FileInfo(path="src/build/index.html", size=0).mod_time
        assert before <= mod_time <= datetime.now(UTC) + timedelta(seconds=1)

    def test_static_must_be_a_segment(self) -> None:
        assert FileInfo(path="src/build/staticky/app.js", size=0).immutable is False
