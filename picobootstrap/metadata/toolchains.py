"""
ARM toolchain index loading.

The cross-toolchain download URLs come from supportedToolchains.ini, the same
file the Raspberry Pi Pico VS Code extension publishes. The loader makes
exactly one remote attempt and, if that fails for any reason, exactly one
pass over the bundled offline copies. The resulting ToolchainIndex records
which of the two supplied the data.
"""

import logging
import re
import sys
from dataclasses import dataclass, field
from enum import Enum
from importlib import resources
from pathlib import Path
from typing import Dict, List, Optional, Sequence

from picobootstrap.core.exceptions import NotFoundError, PicoBootstrapError
from picobootstrap.core.http import HTTPClient
from picobootstrap.metadata.ini import parse_index

logger = logging.getLogger(__name__)

INDEX_FILENAME = "supportedToolchains.ini"

# Must track CURRENT_DATA_VERSION in pico-vscode's sharedConstants.mts
DEFAULT_INDEX_URL = (
    "https://raspberrypi.github.io/pico-vscode/0.18.0/supportedToolchains.ini"
)


class IndexProvenance(str, Enum):
    """Where a ToolchainIndex was loaded from."""

    REMOTE = "remote"
    BUNDLED_FALLBACK = "bundled-fallback"


@dataclass(frozen=True)
class ToolchainIndex:
    """
    Parsed toolchain index: version -> platform key -> download URL.

    Attributes:
        sections: Parsed index sections
        provenance: Remote fetch or bundled fallback
        location: URL or file path the index was read from
    """

    sections: Dict[str, Dict[str, str]] = field(default_factory=dict)
    provenance: IndexProvenance = IndexProvenance.REMOTE
    location: str = ""

    @property
    def is_remote(self) -> bool:
        return self.provenance is IndexProvenance.REMOTE

    def url_for(self, version: str, platform_key: str) -> Optional[str]:
        """
        Exact lookup of a download URL; no fuzzy version matching.

        Args:
            version: Section name, e.g. '14_2_Rel1'
            platform_key: e.g. 'linux_x64', 'darwin_arm64'

        Returns:
            URL, or None if the version or platform key is absent
        """
        return self.sections.get(version, {}).get(platform_key)

    def versions(self) -> List[str]:
        return list(self.sections)

    def describe_source(self) -> str:
        if self.is_remote:
            return f"remote {INDEX_FILENAME}"
        return f"bundled {INDEX_FILENAME} (offline cache)"


def default_bundled_locations() -> list:
    """
    Candidate locations of the offline index copy, in search order.

    1. The resource packaged with picobootstrap
    2. The directory of the running executable, then its *.resources dirs
    3. A Resources directory beside or above the executable's directory
    """
    package_data = resources.files("picobootstrap.metadata").joinpath("data")
    locations: list = [package_data.joinpath(INDEX_FILENAME)]

    if sys.argv and sys.argv[0]:
        exe_dir = Path(sys.argv[0]).resolve().parent
        locations.append(exe_dir / INDEX_FILENAME)
        if exe_dir.is_dir():
            for bundle in sorted(exe_dir.glob("*.resources")):
                locations.append(bundle / INDEX_FILENAME)
        locations.append(exe_dir / "Resources" / INDEX_FILENAME)
        locations.append(exe_dir.parent / "Resources" / INDEX_FILENAME)

    return locations


class ToolchainIndexLoader:
    """
    Load the toolchain index, remote first, bundled copy second.

    Example:
        >>> loader = ToolchainIndexLoader(HTTPClient())
        >>> index = loader.load()
        >>> index.url_for("14_2_Rel1", "linux_x64")
        'https://developer.arm.com/-/media/Files/downloads/gnu/14.2.rel1/...'
    """

    def __init__(
        self,
        http: HTTPClient,
        remote_url: str = DEFAULT_INDEX_URL,
        bundled_locations: Optional[Sequence] = None,
    ):
        """
        Initialize loader.

        Args:
            http: HTTP client used for the remote attempt
            remote_url: URL of the hosted index
            bundled_locations: Offline copies to try (default: default_bundled_locations())
        """
        self.http = http
        self.remote_url = remote_url
        self.bundled_locations = bundled_locations

    def load(self) -> ToolchainIndex:
        """
        Load the index.

        Returns:
            ToolchainIndex with provenance set

        Raises:
            NotFoundError: If the remote attempt failed and no bundled copy is readable
        """
        try:
            content = self.http.get(self.remote_url).text
        except (PicoBootstrapError, UnicodeDecodeError) as e:
            logger.warning(
                f"Failed to fetch remote {INDEX_FILENAME} from {self.remote_url}: {e}"
            )
        else:
            logger.debug(f"Loaded {INDEX_FILENAME} from {self.remote_url}")
            return ToolchainIndex(
                sections=parse_index(content),
                provenance=IndexProvenance.REMOTE,
                location=self.remote_url,
            )

        return self._load_bundled()

    def _load_bundled(self) -> ToolchainIndex:
        locations = self.bundled_locations
        if locations is None:
            locations = default_bundled_locations()

        attempted = []
        for location in locations:
            attempted.append(str(location))
            try:
                content = location.read_text(encoding="utf-8")
            except (OSError, UnicodeDecodeError) as e:
                logger.debug(f"Bundled index not usable at {location}: {e}")
                continue

            logger.info(f"Using bundled {INDEX_FILENAME} from {location}")
            return ToolchainIndex(
                sections=parse_index(content),
                provenance=IndexProvenance.BUNDLED_FALLBACK,
                location=str(location),
            )

        raise NotFoundError(
            f"failed to load bundled {INDEX_FILENAME} (checked: {', '.join(attempted)})"
        )


def sort_toolchain_versions(versions: Sequence[str]) -> List[str]:
    """
    Order toolchain versions newest first.

    Versions look like '14_2_Rel1' or '13_2-2023_10'. Integer components are
    compared pairwise; on a tie the version with more integer components wins,
    then plain string ordering decides.

    Example:
        >>> sort_toolchain_versions(["13_2_Rel1", "14_2_Rel1", "13_3_Rel1"])
        ['14_2_Rel1', '13_3_Rel1', '13_2_Rel1']
    """

    def sort_key(version: str):
        numeric = [int(p) for p in re.split(r"[_-]", version) if p.isdigit()]
        return (numeric, version)

    return sorted(versions, key=sort_key, reverse=True)


__all__ = [
    "DEFAULT_INDEX_URL",
    "INDEX_FILENAME",
    "IndexProvenance",
    "ToolchainIndex",
    "ToolchainIndexLoader",
    "default_bundled_locations",
    "sort_toolchain_versions",
]
