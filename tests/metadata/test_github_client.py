"""
Unit tests for the GitHub releases API client.

Uses the responses library to mock api.github.com.
"""

import pytest
import responses

from picobootstrap.core.exceptions import HttpError, NotFoundError, PicoBootstrapError
from picobootstrap.core.http import HTTPClient
from picobootstrap.metadata.github import GitHubClient, Release
from tests.fixtures.releases import (
    GITHUB_API,
    cmake_payload,
    sdk_tools_binaries_payload,
    sdk_tools_releases_payload,
)


@pytest.fixture
def client():
    return GitHubClient(HTTPClient(github_token="ghp_test"))


class TestGetReleaseByTag:
    """Tests for GitHubClient.get_release_by_tag()."""

    @responses.activate
    def test_decodes_release(self, client):
        """Test tag, flags and assets are decoded in listed order."""
        responses.add(
            responses.GET,
            f"{GITHUB_API}/repos/Kitware/CMake/releases/tags/v3.31.5",
            json=cmake_payload(),
        )

        release = client.get_release_by_tag("Kitware", "CMake", "v3.31.5")

        assert isinstance(release, Release)
        assert release.tag == "v3.31.5"
        assert release.is_draft is False
        assert release.assets[0].name == "cmake-3.31.5-SHA-256.txt"
        assert release.assets[0].download_url.startswith(
            "https://github.com/Kitware/CMake/releases/download/v3.31.5/"
        )
        assert release.assets[0].size_bytes == 1024

    @responses.activate
    def test_sends_accept_and_token(self, client):
        """Test GitHub API headers are present."""
        responses.add(
            responses.GET,
            f"{GITHUB_API}/repos/Kitware/CMake/releases/tags/v3.31.5",
            json=cmake_payload(),
        )

        client.get_release_by_tag("Kitware", "CMake", "v3.31.5")

        headers = responses.calls[0].request.headers
        assert headers["Accept"] == "application/vnd.github+json"
        assert headers["Authorization"] == "token ghp_test"

    @responses.activate
    def test_tag_is_url_quoted(self, client):
        """Test '+' in a tag is percent-encoded in the path."""
        responses.add(
            responses.GET,
            f"{GITHUB_API}/repos/owner/repo/releases/tags/v0.12.0%2Bdev",
            json={"tag_name": "v0.12.0+dev", "assets": []},
        )

        release = client.get_release_by_tag("owner", "repo", "v0.12.0+dev")

        assert release.tag == "v0.12.0+dev"
        assert release.assets == ()

    @responses.activate
    def test_404_is_not_found(self, client):
        """Test a missing tag raises NotFoundError naming the repository."""
        responses.add(
            responses.GET,
            f"{GITHUB_API}/repos/Kitware/CMake/releases/tags/v0.0.0",
            json={"message": "Not Found"},
            status=404,
        )

        with pytest.raises(NotFoundError) as exc_info:
            client.get_release_by_tag("Kitware", "CMake", "v0.0.0")

        assert "v0.0.0" in str(exc_info.value)
        assert "Kitware/CMake" in str(exc_info.value)

    @responses.activate
    def test_other_errors_propagate(self, client):
        """Test a rate-limit 403 stays an HttpError."""
        responses.add(
            responses.GET,
            f"{GITHUB_API}/repos/Kitware/CMake/releases/tags/v3.31.5",
            json={"message": "API rate limit exceeded"},
            status=403,
        )

        with pytest.raises(HttpError) as exc_info:
            client.get_release_by_tag("Kitware", "CMake", "v3.31.5")

        assert exc_info.value.status_code == 403

    @responses.activate
    def test_invalid_json(self, client):
        """Test non-JSON bodies raise PicoBootstrapError."""
        responses.add(
            responses.GET,
            f"{GITHUB_API}/repos/Kitware/CMake/releases/tags/v3.31.5",
            body="<html>",
        )

        with pytest.raises(PicoBootstrapError, match="Invalid JSON"):
            client.get_release_by_tag("Kitware", "CMake", "v3.31.5")

    @responses.activate
    def test_malformed_asset(self, client):
        """Test assets missing required fields raise PicoBootstrapError."""
        responses.add(
            responses.GET,
            f"{GITHUB_API}/repos/Kitware/CMake/releases/tags/v3.31.5",
            json={"tag_name": "v3.31.5", "assets": [{"name": "x"}]},
        )

        with pytest.raises(PicoBootstrapError, match="Malformed"):
            client.get_release_by_tag("Kitware", "CMake", "v3.31.5")


class TestListReleases:
    """Tests for GitHubClient.list_releases()."""

    @responses.activate
    def test_lists_releases(self, client):
        """Test list decoding keeps draft flags."""
        responses.add(
            responses.GET,
            f"{GITHUB_API}/repos/raspberrypi/pico-sdk-tools/releases?per_page=50",
            json=sdk_tools_releases_payload(),
        )

        releases = client.list_releases("raspberrypi", "pico-sdk-tools", limit=50)

        assert [r.tag for r in releases] == ["v2.1.1-1", "v2.2.0-0", "v9.9.9-0"]
        assert [r.is_draft for r in releases] == [False, False, True]

    @responses.activate
    def test_limit_is_clamped(self, client):
        """Test per_page never exceeds the API maximum."""
        responses.add(
            responses.GET,
            f"{GITHUB_API}/repos/raspberrypi/picotool/releases?per_page=100",
            json=[],
        )

        assert client.list_releases("raspberrypi", "picotool", limit=500) == []

    @responses.activate
    def test_non_list_payload(self, client):
        """Test an object where an array was expected is rejected."""
        responses.add(
            responses.GET,
            f"{GITHUB_API}/repos/raspberrypi/pico-sdk-tools/releases?per_page=30",
            json=sdk_tools_binaries_payload(),
        )

        with pytest.raises(PicoBootstrapError, match="Expected a JSON array"):
            client.list_releases("raspberrypi", "pico-sdk-tools")


class TestListTags:
    """Tests for GitHubClient.list_tags()."""

    @responses.activate
    def test_returns_names(self, client):
        """Test tag names are returned in API order."""
        responses.add(
            responses.GET,
            f"{GITHUB_API}/repos/raspberrypi/pico-sdk/tags?per_page=5",
            json=[{"name": "2.2.0"}, {"name": "2.1.1"}],
        )

        assert client.list_tags("raspberrypi", "pico-sdk", limit=5) == ["2.2.0", "2.1.1"]

    def test_custom_api_base(self):
        """Test a trailing slash on the API base is tolerated."""
        client = GitHubClient(HTTPClient(), api_base="https://ghe.example.com/api/v3/")

        assert client.api_base == "https://ghe.example.com/api/v3"
