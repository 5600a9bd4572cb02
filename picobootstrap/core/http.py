"""
HTTP access for metadata lookups and artifact downloads.

All network traffic goes through HTTPClient so that the GitHub token, the
user agent and the status-code policy live in one place:
- every request carries a fixed User-Agent
- an optional GitHub token is sent as "Authorization: token <value>"
- any status outside 200-299 raises HttpError with the response body
- transport failures (DNS, TLS, timeouts) raise HttpError without a status
"""

import logging
import os
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Optional

import requests
from requests.exceptions import RequestException

from picobootstrap import __version__
from picobootstrap.core.exceptions import HttpError

logger = logging.getLogger(__name__)

USER_AGENT = f"pico-bootstrap/{__version__}"


@dataclass
class HttpResponse:
    """Raw response returned by HTTPClient.get()."""

    status_code: int
    content: bytes
    headers: Dict[str, str] = field(default_factory=dict)

    @property
    def text(self) -> str:
        """Body decoded as strict UTF-8 (raises UnicodeDecodeError)."""
        return self.content.decode("utf-8")


class HTTPClient:
    """
    Thin wrapper around a requests.Session.

    Example:
        >>> http = HTTPClient(github_token=os.environ.get("GITHUB_TOKEN"))
        >>> response = http.get("https://api.github.com/rate_limit")
        >>> response.status_code
        200
    """

    def __init__(
        self,
        github_token: Optional[str] = None,
        timeout: int = 30,
        session: Optional[requests.Session] = None,
    ):
        """
        Initialize HTTP client.

        Args:
            github_token: Optional token used to raise GitHub API rate limits
            timeout: Per-request timeout in seconds
            session: Pre-configured session (default: new session)
        """
        self.github_token = github_token or None
        self.timeout = timeout
        self.session = session or requests.Session()

    def _headers(self, extra: Optional[Dict[str, str]] = None) -> Dict[str, str]:
        headers = {"User-Agent": USER_AGENT}
        if extra:
            headers.update(extra)
        if self.github_token:
            headers["Authorization"] = f"token {self.github_token}"
        return headers

    def get(self, url: str, headers: Optional[Dict[str, str]] = None) -> HttpResponse:
        """
        Perform a GET request and return the whole body.

        Args:
            url: URL to fetch
            headers: Extra request headers

        Returns:
            HttpResponse with status, body and headers

        Raises:
            HttpError: On transport failure or non-2xx status
        """
        logger.debug(f"GET {url}")
        try:
            response = self.session.get(
                url, headers=self._headers(headers), timeout=self.timeout
            )
        except RequestException as e:
            raise HttpError(url, None, str(e)) from e

        if not 200 <= response.status_code < 300:
            raise HttpError(url, response.status_code, _body_text(response.content))

        return HttpResponse(
            status_code=response.status_code,
            content=response.content,
            headers=dict(response.headers),
        )

    def download(self, url: str, destination: Path, chunk_size: int = 8192) -> Path:
        """
        Stream a URL to a file.

        The body is written to a temporary file next to the destination and
        renamed into place only after the transfer completes.

        Args:
            url: URL to download
            destination: Target file path
            chunk_size: Streaming chunk size in bytes

        Returns:
            Path to the downloaded file

        Raises:
            HttpError: On transport failure or non-2xx status
        """
        destination = Path(destination)
        destination.parent.mkdir(parents=True, exist_ok=True)

        logger.info(f"Downloading {url}")

        temp_fd, temp_path_str = tempfile.mkstemp(
            dir=destination.parent, prefix=f".{destination.name}.", suffix=".part"
        )
        temp_path = Path(temp_path_str)
        downloaded = 0

        try:
            with self.session.get(
                url,
                headers=self._headers(),
                stream=True,
                timeout=self.timeout,
                allow_redirects=True,
            ) as response:
                if not 200 <= response.status_code < 300:
                    raise HttpError(
                        url, response.status_code, _body_text(response.content)
                    )
                with os.fdopen(temp_fd, "wb") as f:
                    temp_fd = None
                    for chunk in response.iter_content(chunk_size=chunk_size):
                        if chunk:
                            f.write(chunk)
                            downloaded += len(chunk)

            temp_path.replace(destination)

        except RequestException as e:
            raise HttpError(url, None, str(e)) from e
        finally:
            if temp_fd is not None:
                os.close(temp_fd)
            temp_path.unlink(missing_ok=True)

        logger.debug(f"Downloaded {downloaded} bytes to {destination}")
        return destination


def _body_text(content: bytes) -> str:
    return content.decode("utf-8", errors="replace")


__all__ = ["HTTPClient", "HttpResponse", "USER_AGENT"]
