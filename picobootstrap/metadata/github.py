"""
GitHub releases API client and release models.

Only the three read-only endpoints the resolver needs are wrapped:

    GET /repos/{owner}/{repo}/releases
    GET /repos/{owner}/{repo}/releases/tags/{tag}
    GET /repos/{owner}/{repo}/tags
"""

import json
import logging
from dataclasses import dataclass, field
from typing import Any, List, Optional, Tuple
from urllib.parse import quote

from picobootstrap.core.exceptions import HttpError, NotFoundError, PicoBootstrapError
from picobootstrap.core.http import HTTPClient

logger = logging.getLogger(__name__)

GITHUB_API_BASE = "https://api.github.com"


@dataclass(frozen=True)
class ReleaseAsset:
    """One downloadable file attached to a release."""

    name: str
    download_url: str
    size_bytes: Optional[int] = None

    @classmethod
    def from_api(cls, data: dict) -> "ReleaseAsset":
        return cls(
            name=data["name"],
            download_url=data["browser_download_url"],
            size_bytes=data.get("size"),
        )


@dataclass(frozen=True)
class Release:
    """A tagged release and its assets, in the order GitHub lists them."""

    tag: str
    is_prerelease: bool = False
    is_draft: bool = False
    assets: Tuple[ReleaseAsset, ...] = field(default_factory=tuple)

    @classmethod
    def from_api(cls, data: dict) -> "Release":
        return cls(
            tag=data["tag_name"],
            is_prerelease=bool(data.get("prerelease", False)),
            is_draft=bool(data.get("draft", False)),
            assets=tuple(ReleaseAsset.from_api(a) for a in data.get("assets") or []),
        )


class GitHubClient:
    """
    Read-only client for the GitHub releases API.

    Example:
        >>> client = GitHubClient(HTTPClient(github_token="ghp_..."))
        >>> release = client.get_release_by_tag("Kitware", "CMake", "v3.31.5")
        >>> [a.name for a in release.assets][:2]
        ['cmake-3.31.5-linux-aarch64.sh', 'cmake-3.31.5-linux-aarch64.tar.gz']
    """

    ACCEPT_HEADER = {"Accept": "application/vnd.github+json"}

    def __init__(self, http: HTTPClient, api_base: str = GITHUB_API_BASE):
        self.http = http
        self.api_base = api_base.rstrip("/")

    def list_releases(self, owner: str, repo: str, limit: int = 30) -> List[Release]:
        """
        List releases, newest first as returned by the API.

        Args:
            owner: Repository owner
            repo: Repository name
            limit: Maximum number of releases (1-100)

        Returns:
            List of releases

        Raises:
            HttpError: If the request fails
        """
        url = f"{self.api_base}/repos/{owner}/{repo}/releases?per_page={_clamp(limit)}"
        payload = self._get_json(url)
        return [
            _decode(Release.from_api, item, url) for item in _expect_list(payload, url)
        ]

    def get_release_by_tag(self, owner: str, repo: str, tag: str) -> Release:
        """
        Fetch a single release by its tag.

        Raises:
            NotFoundError: If the repository has no release with this tag
            HttpError: If the request fails for another reason
        """
        url = f"{self.api_base}/repos/{owner}/{repo}/releases/tags/{quote(tag, safe='')}"
        try:
            payload = self._get_json(url)
        except HttpError as e:
            if e.status_code == 404:
                raise NotFoundError(f"release tag '{tag}' in {owner}/{repo}") from e
            raise
        if not isinstance(payload, dict):
            raise PicoBootstrapError(f"Unexpected release payload from {url}")
        return _decode(Release.from_api, payload, url)

    def list_tags(self, owner: str, repo: str, limit: int = 30) -> List[str]:
        """List tag names of a repository."""
        url = f"{self.api_base}/repos/{owner}/{repo}/tags?per_page={_clamp(limit)}"
        payload = self._get_json(url)
        return [
            _decode(lambda item: item["name"], item, url)
            for item in _expect_list(payload, url)
        ]

    def _get_json(self, url: str) -> Any:
        response = self.http.get(url, headers=self.ACCEPT_HEADER)
        try:
            return json.loads(response.content)
        except ValueError as e:
            raise PicoBootstrapError(f"Invalid JSON from {url}: {e}") from e


def _clamp(limit: int) -> int:
    return max(1, min(limit, 100))


def _expect_list(payload: Any, url: str) -> list:
    if not isinstance(payload, list):
        raise PicoBootstrapError(f"Expected a JSON array from {url}")
    return payload


def _decode(factory, item: Any, url: str):
    try:
        return factory(item)
    except (KeyError, TypeError) as e:
        raise PicoBootstrapError(f"Malformed release data from {url}: {e}") from e


__all__ = ["GitHubClient", "Release", "ReleaseAsset", "GITHUB_API_BASE"]
