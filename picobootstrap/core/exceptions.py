"""
Centralized exception hierarchy for pico-bootstrap.

Every error raised by the resolver, the metadata sources and the installer
derives from PicoBootstrapError so callers can catch a single type.
"""

from typing import List, Optional


# ============================================================================
# Base Exceptions
# ============================================================================


class PicoBootstrapError(Exception):
    """Base exception for all pico-bootstrap errors."""

    pass


# ============================================================================
# Resolution Exceptions
# ============================================================================


class UnsupportedPlatformError(PicoBootstrapError):
    """Raised when the host OS or CPU architecture is not supported."""

    def __init__(self, detail: str):
        self.detail = detail
        super().__init__(f"Unsupported platform: {detail}")


class HttpError(PicoBootstrapError):
    """Raised on a non-2xx response or a transport failure."""

    def __init__(self, url: str, status_code: Optional[int] = None, body: str = ""):
        self.url = url
        self.status_code = status_code
        self.body = body
        status = status_code if status_code is not None else "transport error"
        msg = f"HTTP error: GET {url} -> {status}"
        if body:
            msg += f"\n{body}"
        super().__init__(msg)


class NotFoundError(PicoBootstrapError):
    """Raised when a tag, version key or matching asset cannot be located."""

    def __init__(self, detail: str):
        self.detail = detail
        super().__init__(f"Not found: {detail}")


# ============================================================================
# Process Exceptions
# ============================================================================


class CommandFailedError(PicoBootstrapError):
    """Raised when an external command exits with a non-zero status."""

    def __init__(
        self,
        command: List[str],
        returncode: int,
        stdout: str = "",
        stderr: str = "",
    ):
        self.command = command
        self.returncode = returncode
        self.stdout = stdout
        self.stderr = stderr
        msg = f"Command failed: {' '.join(command)} (exit {returncode})"
        if stderr.strip():
            msg += f"\n{stderr.strip()}"
        if stdout.strip():
            msg += f"\n{stdout.strip()}"
        super().__init__(msg)


# ============================================================================
# Configuration / State Exceptions
# ============================================================================


class ConfigError(PicoBootstrapError):
    """Configuration parsing or validation error."""

    pass


class ManifestError(PicoBootstrapError):
    """Install manifest cannot be read, written or locked."""

    pass


# ============================================================================
# Filesystem Exceptions
# ============================================================================


class ArchiveExtractionError(PicoBootstrapError):
    """Raised when archive extraction fails."""

    pass


class UnsupportedArchiveFormat(ArchiveExtractionError):
    """Raised when archive format is not supported."""

    pass


class InsecureArchiveError(ArchiveExtractionError):
    """Raised when an archive member would escape the destination."""

    pass


__all__ = [
    "PicoBootstrapError",
    "UnsupportedPlatformError",
    "HttpError",
    "NotFoundError",
    "CommandFailedError",
    "ConfigError",
    "ManifestError",
    "ArchiveExtractionError",
    "UnsupportedArchiveFormat",
    "InsecureArchiveError",
]
