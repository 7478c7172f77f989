"""Tests for uiserve.provenance: build values and their environment source."""

from datetime import UTC, datetime, timedelta, timezone

import pytest

import uiserve
from uiserve.errors import ConfigurationError
from uiserve.provenance import EPOCH, BuildInfo, format_build_date, parse_build_date


class TestFormatBuildDate:
    def test_utc(self) -> None:
        assert format_build_date(datetime(2024, 1, 1, tzinfo=UTC)) == "2024-01-01T00:00:00Z"

    def test_converts_offset_to_utc(self) -> None:
        tz = timezone(timedelta(hours=2))
        assert format_build_date(datetime(2024, 1, 1, 2, 30, tzinfo=tz)) == "2024-01-01T00:30:00Z"

    def test_naive_is_utc(self) -> None:
        assert format_build_date(datetime(2024, 6, 1, 12)) == "2024-06-01T12:00:00Z"

    def test_drops_fraction(self) -> None:
        value = datetime(2024, 1, 1, 0, 0, 0, 999_999, tzinfo=UTC)
        assert format_build_date(value) == "2024-01-01T00:00:00Z"


class TestParseBuildDate:
    def test_iso_with_z(self) -> None:
        assert parse_build_date("2024-01-01T00:00:00Z") == datetime(2024, 1, 1, tzinfo=UTC)

    def test_unix_seconds(self) -> None:
        assert parse_build_date("1704067200") == datetime(2024, 1, 1, tzinfo=UTC)

    def test_naive_iso_is_utc(self) -> None:
        assert parse_build_date("2024-01-01T00:00:00").tzinfo is UTC

    def test_invalid(self) -> None:
        with pytest.raises(ConfigurationError, match="invalid build date"):
            parse_build_date("yesterday")


class TestBuildInfo:
    def test_accessors(self, build_info: BuildInfo) -> None:
        assert build_info.version() == "v1.2.3"
        assert build_info.commit() == "abcd123"
        assert build_info.tree_state() == "clean"
        assert build_info.build_date() == datetime(2024, 1, 1, tzinfo=UTC)
        assert build_info.build_date_utc == "2024-01-01T00:00:00Z"

    def test_from_env(self) -> None:
        info = BuildInfo.from_env(
            {
                "UISERVE_VERSION": "v2.0.0",
                "UISERVE_GIT_COMMIT": "deadbeef",
                "UISERVE_GIT_TREE_STATE": "dirty",
                "UISERVE_BUILD_DATE": "2024-03-04T05:06:07Z",
            }
        )
        assert info == BuildInfo("v2.0.0", "deadbeef", "dirty", datetime(2024, 3, 4, 5, 6, 7, tzinfo=UTC))

    def test_from_env_defaults(self) -> None:
        info = BuildInfo.from_env({})
        assert info.version() == uiserve.__version__
        assert info.commit() == "?"
        assert info.tree_state() == "unknown"
        assert info.build_date() == EPOCH

    def test_from_env_bad_date(self) -> None:
        with pytest.raises(ConfigurationError):
            BuildInfo.from_env({"UISERVE_BUILD_DATE": "not a date"})

    def test_frozen(self, build_info: BuildInfo) -> None:
        with pytest.raises(AttributeError):
            build_info.git_version = "v9"  # type: ignore[misc]
