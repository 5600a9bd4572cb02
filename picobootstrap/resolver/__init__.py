"""
Version and asset resolution.

Turns requested component versions into an immutable InstallPlan of
download URLs and install paths for the current host.
"""

from picobootstrap.resolver.models import (
    ArchiveType,
    ComponentId,
    ComponentPlan,
    InstallPlan,
    InstallRequest,
)
from picobootstrap.resolver.resolver import VersionResolver, directory_probe
from picobootstrap.resolver.selectors import detect_archive_type, select_asset

__all__ = [
    "ArchiveType",
    "ComponentId",
    "ComponentPlan",
    "InstallPlan",
    "InstallRequest",
    "VersionResolver",
    "detect_archive_type",
    "directory_probe",
    "select_asset",
]
