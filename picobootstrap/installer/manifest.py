"""
Record of installed components.

The manifest lives at `<root>/pico-bootstrap-manifest.json` and tracks which
version of each component was installed, where, and from which URL:

    {
      "installed_at": "2025-01-31T12:00:00+00:00",
      "env": {"os": "linux", "arch": "x86_64"},
      "components": {
        "cmake": {
          "version": "3.31.5",
          "relative_path": "cmake/v3.31.5",
          "source_url": "https://github.com/Kitware/CMake/releases/download/..."
        }
      }
    }

Every update is a read-modify-write under a file lock, written atomically.
"""

import json
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, Optional, Union

from filelock import FileLock, Timeout as LockTimeout

from picobootstrap.core.exceptions import ManifestError
from picobootstrap.core.filesystem import atomic_write
from picobootstrap.core.platform import HostEnvironment
from picobootstrap.resolver.models import ComponentId, InstallPlan

logger = logging.getLogger(__name__)

MANIFEST_FILENAME = "pico-bootstrap-manifest.json"
LOCK_FILENAME = ".pico-bootstrap-manifest.lock"


@dataclass
class ManifestEntry:
    """One installed component."""

    version: str
    relative_path: str
    source_url: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "version": self.version,
            "relative_path": self.relative_path,
            "source_url": self.source_url,
        }


@dataclass
class Manifest:
    """
    Contents of the manifest file.

    Attributes:
        installed_at: ISO 8601 timestamp of the last update
        env: Host the components were installed for
        components: Installed components keyed by component id tag
    """

    installed_at: str
    env: HostEnvironment
    components: Dict[str, ManifestEntry] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "installed_at": self.installed_at,
            "env": self.env.to_dict(),
            "components": {k: v.to_dict() for k, v in self.components.items()},
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Manifest":
        return cls(
            installed_at=data["installed_at"],
            env=HostEnvironment.from_dict(data["env"]),
            components={
                key: ManifestEntry(
                    version=entry["version"],
                    relative_path=entry["relative_path"],
                    source_url=entry.get("source_url"),
                )
                for key, entry in data.get("components", {}).items()
            },
        )


def _now() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="seconds")


class InstallManifestStore:
    """
    Reads and updates the install manifest under an install root.

    Example:
        >>> store = InstallManifestStore(Path.home() / ".pico-sdk")
        >>> store.record(plan, ComponentId.CMAKE)
        >>> store.installed_components()["cmake"].relative_path
        'cmake/v3.31.5'
    """

    def __init__(self, root: Union[str, Path], lock_timeout: int = 30):
        """
        Initialize manifest store.

        Args:
            root: Install root directory
            lock_timeout: Seconds to wait for the manifest lock
        """
        self.root = Path(root)
        self.manifest_file = self.root / MANIFEST_FILENAME
        self.lock_file = self.root / LOCK_FILENAME
        self.lock_timeout = lock_timeout

    def load(self) -> Optional[Manifest]:
        """
        Load the manifest.

        Returns:
            Manifest, or None if nothing has been recorded yet

        Raises:
            ManifestError: If the file exists but cannot be parsed
        """
        if not self.manifest_file.exists():
            return None

        try:
            with open(self.manifest_file, "r", encoding="utf-8") as f:
                data = json.load(f)
            return Manifest.from_dict(data)
        except (OSError, ValueError, KeyError, TypeError) as e:
            raise ManifestError(
                f"Invalid install manifest {self.manifest_file}: {e}"
            ) from e

    def installed_components(self) -> Dict[str, ManifestEntry]:
        manifest = self.load()
        return dict(manifest.components) if manifest else {}

    def record(self, plan: InstallPlan, component_id: ComponentId) -> None:
        """
        Record one component of a plan as installed.

        A component absent from the plan (pico-sdk-tools when it was skipped)
        is not recorded.

        Raises:
            ManifestError: If the lock cannot be acquired or the file is invalid
        """
        component = plan.component(component_id)
        if component is None:
            logger.debug(f"{component_id.value} not in plan, not recorded")
            return

        self.root.mkdir(parents=True, exist_ok=True)
        lock = FileLock(str(self.lock_file), timeout=self.lock_timeout)

        try:
            with lock:
                manifest = self.load() or Manifest(installed_at=_now(), env=plan.env)
                manifest.installed_at = _now()
                manifest.env = plan.env
                manifest.components[component_id.value] = ManifestEntry(
                    version=component.version,
                    relative_path=component.install_path,
                    source_url=component.download_url,
                )
                atomic_write(
                    self.manifest_file,
                    json.dumps(manifest.to_dict(), indent=2, sort_keys=True),
                )
        except LockTimeout as e:
            raise ManifestError(
                f"Could not acquire manifest lock after {self.lock_timeout}s. "
                "Another pico-bootstrap process may be running."
            ) from e

        logger.debug(f"Recorded {component_id.value} {component.version} in manifest")


__all__ = [
    "InstallManifestStore",
    "LOCK_FILENAME",
    "MANIFEST_FILENAME",
    "Manifest",
    "ManifestEntry",
]
