"""
Core functionality for pico-bootstrap.

This package contains the foundational modules that other components depend on.
"""

from .exceptions import (
    PicoBootstrapError,
    UnsupportedPlatformError,
    HttpError,
    NotFoundError,
    CommandFailedError,
    ConfigError,
    ManifestError,
    ArchiveExtractionError,
    UnsupportedArchiveFormat,
    InsecureArchiveError,
)

from .platform import (
    OS,
    Arch,
    HostEnvironment,
)

from .http import (
    HTTPClient,
    HttpResponse,
)

__all__ = [
    # Exceptions
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
    # Platform
    "OS",
    "Arch",
    "HostEnvironment",
    # HTTP
    "HTTPClient",
    "HttpResponse",
]
