"""
Install plan data model.

The InstallPlan is the contract between resolution and installation: it is
immutable, serializes to canonical JSON, and carries everything needed to
install or to show the user what will be installed.
"""

import json
from dataclasses import asdict, dataclass, fields
from enum import Enum
from typing import Any, Dict, List, Optional

from picobootstrap.core.platform import HostEnvironment


class ComponentId(str, Enum):
    """Installable units, tagged with the name used in paths and manifests."""

    PICO_SDK = "pico-sdk"
    ARM_TOOLCHAIN = "arm-toolchain"
    PICO_SDK_TOOLS = "pico-sdk-tools"
    CMAKE = "cmake"
    NINJA = "ninja"
    PICOTOOL = "picotool"
    OPENOCD = "openocd"


class ArchiveType(str, Enum):
    """Archive formats a download URL can point at."""

    ZIP = "zip"
    TAR_GZ = "tar.gz"
    TAR_XZ = "tar.xz"
    TAR_BZ2 = "tar.bz2"
    PKG = "pkg"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class InstallRequest:
    """
    Versions requested by the caller.

    Version formats are component specific: the ARM toolchain uses the
    underscore form of supportedToolchains.ini ('14_2_Rel1'), the rest are
    dotted ('3.31.5', '2.2.0-a4', '0.12.0+dev').
    """

    sdk_version: str
    toolchain_version: str
    cmake_version: str
    ninja_version: str
    picotool_version: str
    openocd_version: str
    include_sdk_tools: bool = True

    def __post_init__(self):
        """Reject missing versions; there are no implicit defaults."""
        missing = [
            f.name
            for f in fields(self)
            if f.name.endswith("_version")
            and (not isinstance(getattr(self, f.name), str) or not getattr(self, f.name).strip())
        ]
        if missing:
            raise ValueError(f"Missing required version(s): {', '.join(missing)}")

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "InstallRequest":
        return cls(**{f.name: data[f.name] for f in fields(cls) if f.name in data})


@dataclass(frozen=True)
class ComponentPlan:
    """
    Resolved install instructions for one component.

    Attributes:
        id: Component identifier
        version: Requested version string
        install_path: Install directory relative to the install root
        download_url: Archive URL; None for git installs and for components
            already present on disk
        archive_type: Archive format of download_url
        notes: Provenance of the decision, for diagnostics
    """

    id: ComponentId
    version: str
    install_path: str
    download_url: Optional[str] = None
    archive_type: Optional[ArchiveType] = None
    notes: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id.value,
            "version": self.version,
            "install_path": self.install_path,
            "download_url": self.download_url,
            "archive_type": self.archive_type.value if self.archive_type else None,
            "notes": self.notes,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ComponentPlan":
        archive_type = data.get("archive_type")
        return cls(
            id=ComponentId(data["id"]),
            version=data["version"],
            install_path=data["install_path"],
            download_url=data.get("download_url"),
            archive_type=ArchiveType(archive_type) if archive_type else None,
            notes=data.get("notes", ""),
        )


@dataclass(frozen=True)
class InstallPlan:
    """Complete resolution result for one InstallRequest."""

    env: HostEnvironment
    request: InstallRequest
    sdk: ComponentPlan
    toolchain: ComponentPlan
    ninja: ComponentPlan
    cmake: ComponentPlan
    picotool: ComponentPlan
    openocd: ComponentPlan
    sdk_tools: Optional[ComponentPlan] = None

    def components_in_order(self) -> List[ComponentPlan]:
        """Components in display and install order."""
        ordered = [self.sdk, self.toolchain]
        if self.sdk_tools is not None:
            ordered.append(self.sdk_tools)
        ordered.extend([self.ninja, self.cmake, self.picotool, self.openocd])
        return ordered

    def component(self, component_id: ComponentId) -> Optional[ComponentPlan]:
        for plan in self.components_in_order():
            if plan.id is component_id:
                return plan
        return None

    def describe(self) -> str:
        """Human-readable rendering for interactive use."""
        lines = ["Resolved plan:", f"- host: {self.env}"]
        for c in self.components_in_order():
            lines.append(f"  - {c.id.value} {c.version}")
            lines.append(f"    path: {c.install_path}")
            if c.download_url:
                lines.append(f"    url:  {c.download_url}")
            if c.archive_type:
                lines.append(f"    archive: {c.archive_type.value}")
            if c.notes:
                lines.append(f"    note: {c.notes}")
        return "\n".join(lines)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "env": self.env.to_dict(),
            "request": self.request.to_dict(),
            "sdk": self.sdk.to_dict(),
            "toolchain": self.toolchain.to_dict(),
            "sdk_tools": self.sdk_tools.to_dict() if self.sdk_tools else None,
            "ninja": self.ninja.to_dict(),
            "cmake": self.cmake.to_dict(),
            "picotool": self.picotool.to_dict(),
            "openocd": self.openocd.to_dict(),
        }

    def to_json(self) -> str:
        """Canonical JSON: sorted keys, two-space indent."""
        return json.dumps(self.to_dict(), indent=2, sort_keys=True)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "InstallPlan":
        sdk_tools = data.get("sdk_tools")
        return cls(
            env=HostEnvironment.from_dict(data["env"]),
            request=InstallRequest.from_dict(data["request"]),
            sdk=ComponentPlan.from_dict(data["sdk"]),
            toolchain=ComponentPlan.from_dict(data["toolchain"]),
            ninja=ComponentPlan.from_dict(data["ninja"]),
            cmake=ComponentPlan.from_dict(data["cmake"]),
            picotool=ComponentPlan.from_dict(data["picotool"]),
            openocd=ComponentPlan.from_dict(data["openocd"]),
            sdk_tools=ComponentPlan.from_dict(sdk_tools) if sdk_tools else None,
        )

    @classmethod
    def from_json(cls, text: str) -> "InstallPlan":
        return cls.from_dict(json.loads(text))


__all__ = [
    "ArchiveType",
    "ComponentId",
    "ComponentPlan",
    "InstallPlan",
    "InstallRequest",
]
