"""
Installation of resolved plans and bookkeeping of what got installed.
"""

from picobootstrap.installer.installer import SDK_GIT_URL, Installer
from picobootstrap.installer.manifest import (
    InstallManifestStore,
    Manifest,
    ManifestEntry,
)

__all__ = [
    "InstallManifestStore",
    "Installer",
    "Manifest",
    "ManifestEntry",
    "SDK_GIT_URL",
]
