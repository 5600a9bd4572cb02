"""
Unit tests for toolchain index loading.

Tests cover:
- Remote fetch
- Fallback to bundled copies on HTTP or decode failure
- Bundled location search order
- Version ordering
"""

from importlib import resources
from unittest.mock import Mock

import pytest
import responses

from picobootstrap.core.exceptions import HttpError, NotFoundError
from picobootstrap.core.http import HTTPClient
from picobootstrap.metadata.toolchains import (
    INDEX_FILENAME,
    IndexProvenance,
    ToolchainIndex,
    ToolchainIndexLoader,
    default_bundled_locations,
    sort_toolchain_versions,
)
from tests.fixtures.releases import INDEX_URL, TOOLCHAIN_INDEX_TEXT


@pytest.fixture
def bundled_copy(tmp_path):
    path = tmp_path / "bundle" / INDEX_FILENAME
    path.parent.mkdir()
    path.write_text("[12_3_Rel1]\nlinux_x64 = https://offline/12.tar.xz\n")
    return path


class TestToolchainIndex:
    """Tests for ToolchainIndex lookups."""

    def test_exact_lookup(self):
        """Test version and platform key must match exactly."""
        index = ToolchainIndex(sections={"14_2_Rel1": {"linux_x64": "u"}})

        assert index.url_for("14_2_Rel1", "linux_x64") == "u"
        assert index.url_for("14_2_rel1", "linux_x64") is None
        assert index.url_for("14_2", "linux_x64") is None
        assert index.url_for("14_2_Rel1", "darwin_arm64") is None

    def test_describe_source(self):
        """Test provenance is named in the source description."""
        remote = ToolchainIndex(provenance=IndexProvenance.REMOTE)
        bundled = ToolchainIndex(provenance=IndexProvenance.BUNDLED_FALLBACK)

        assert remote.describe_source() == "remote supportedToolchains.ini"
        assert "bundled" in bundled.describe_source()
        assert "offline" in bundled.describe_source()
        assert remote.is_remote and not bundled.is_remote


class TestToolchainIndexLoader:
    """Tests for ToolchainIndexLoader.load()."""

    @responses.activate
    def test_remote_success(self, bundled_copy):
        """Test a successful fetch is used and the bundle is not read."""
        responses.add(responses.GET, INDEX_URL, body=TOOLCHAIN_INDEX_TEXT)
        missing = Mock()

        loader = ToolchainIndexLoader(
            HTTPClient(), remote_url=INDEX_URL, bundled_locations=[missing]
        )
        index = loader.load()

        assert index.provenance is IndexProvenance.REMOTE
        assert index.location == INDEX_URL
        assert index.url_for("13_3_Rel1", "linux_x64").endswith("x86_64-arm-none-eabi.tar.xz")
        missing.read_text.assert_not_called()

    @responses.activate
    def test_http_error_falls_back(self, bundled_copy):
        """Test a 503 falls back to the bundled copy after one attempt."""
        responses.add(responses.GET, INDEX_URL, status=503)

        index = ToolchainIndexLoader(
            HTTPClient(), remote_url=INDEX_URL, bundled_locations=[bundled_copy]
        ).load()

        assert index.provenance is IndexProvenance.BUNDLED_FALLBACK
        assert index.location == str(bundled_copy)
        assert index.versions() == ["12_3_Rel1"]
        assert len(responses.calls) == 1

    @responses.activate
    def test_invalid_utf8_falls_back(self, bundled_copy):
        """Test an undecodable body is treated as a failed fetch."""
        responses.add(responses.GET, INDEX_URL, body=b"\xff\xfe[bad]")

        index = ToolchainIndexLoader(
            HTTPClient(), remote_url=INDEX_URL, bundled_locations=[bundled_copy]
        ).load()

        assert index.provenance is IndexProvenance.BUNDLED_FALLBACK

    def test_transport_error_falls_back(self, bundled_copy):
        """Test transport failures fall back too."""
        http = Mock()
        http.get.side_effect = HttpError(INDEX_URL, None, "name resolution failed")

        index = ToolchainIndexLoader(http, bundled_locations=[bundled_copy]).load()

        assert index.provenance is IndexProvenance.BUNDLED_FALLBACK
        http.get.assert_called_once()

    def test_first_readable_location_wins(self, tmp_path, bundled_copy):
        """Test locations are tried in order, skipping missing files."""
        http = Mock()
        http.get.side_effect = HttpError(INDEX_URL, 500)
        second = tmp_path / "second.ini"
        second.write_text("[other]\nlinux_x64 = u\n")

        index = ToolchainIndexLoader(
            http, bundled_locations=[tmp_path / "missing.ini", bundled_copy, second]
        ).load()

        assert index.location == str(bundled_copy)

    def test_all_locations_missing(self, tmp_path):
        """Test the error lists every location that was checked."""
        http = Mock()
        http.get.side_effect = HttpError(INDEX_URL, 500)
        first = tmp_path / "a" / INDEX_FILENAME
        second = tmp_path / "b" / INDEX_FILENAME

        with pytest.raises(NotFoundError) as exc_info:
            ToolchainIndexLoader(http, bundled_locations=[first, second]).load()

        assert str(first) in str(exc_info.value)
        assert str(second) in str(exc_info.value)

    def test_each_load_refetches(self):
        """Test no in-memory caching between loads."""
        http = Mock()
        http.get.return_value = Mock(text=TOOLCHAIN_INDEX_TEXT)
        loader = ToolchainIndexLoader(http, bundled_locations=[])

        loader.load()
        loader.load()

        assert http.get.call_count == 2


class TestBundledLocations:
    """Tests for the offline copy search path."""

    def test_packaged_resource_first_and_present(self):
        """Test the packaged copy is searched first and actually ships."""
        locations = default_bundled_locations()
        packaged = resources.files("picobootstrap.metadata").joinpath("data", INDEX_FILENAME)

        assert str(locations[0]) == str(packaged)
        assert "[14_2_Rel1]" in locations[0].read_text(encoding="utf-8")

    def test_executable_relative_locations(self, tmp_path, monkeypatch):
        """Test executable-relative candidates follow the packaged copy."""
        (tmp_path / "bin" / "pico.resources").mkdir(parents=True)
        exe_dir = (tmp_path / "bin").resolve()
        monkeypatch.setattr("sys.argv", [str(exe_dir / "pico-bootstrap")])

        locations = [str(p) for p in default_bundled_locations()[1:]]

        assert locations == [
            str(exe_dir / INDEX_FILENAME),
            str(exe_dir / "pico.resources" / INDEX_FILENAME),
            str(exe_dir / "Resources" / INDEX_FILENAME),
            str(exe_dir.parent / "Resources" / INDEX_FILENAME),
        ]


class TestSortToolchainVersions:
    """Tests for sort_toolchain_versions()."""

    def test_newest_first(self):
        """Test numeric ordering of release names."""
        versions = ["13_2_Rel1", "14_2_Rel1", "10_3-2021_10", "13_3_Rel1"]

        assert sort_toolchain_versions(versions) == [
            "14_2_Rel1",
            "13_3_Rel1",
            "13_2_Rel1",
            "10_3-2021_10",
        ]

    def test_more_components_wins_tie(self):
        """Test the longer numeric version sorts first on a common prefix."""
        assert sort_toolchain_versions(["13_2", "13_2-2023_10"]) == ["13_2-2023_10", "13_2"]

    def test_numeric_not_lexical(self):
        """Test 9 sorts below 10."""
        assert sort_toolchain_versions(["9_2_Rel1", "10_3_Rel1"]) == ["10_3_Rel1", "9_2_Rel1"]
