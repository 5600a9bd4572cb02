"""
Host platform detection for pico-bootstrap.

The resolver only supports two operating systems (macOS, Linux) and two CPU
architectures (x86_64, aarch64). Everything downstream branches on the
(os, arch) pair returned here, so detection fails fast on anything else.

Usage:
    from picobootstrap.core.platform import HostEnvironment

    env = HostEnvironment.detect()
    print(f"Running on {env}")
    print(f"Toolchain index key: {env.platform_key}")
"""

import platform
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from picobootstrap.core.exceptions import UnsupportedPlatformError


class OS(str, Enum):
    """Supported host operating systems."""

    MACOS = "macos"
    LINUX = "linux"


class Arch(str, Enum):
    """Supported host CPU architectures."""

    X86_64 = "x86_64"
    AARCH64 = "aarch64"


# Raw platform.machine() values accepted for each architecture
_ARCH_ALIASES = {
    "x86_64": Arch.X86_64,
    "amd64": Arch.X86_64,
    "x64": Arch.X86_64,
    "aarch64": Arch.AARCH64,
    "arm64": Arch.AARCH64,
}


@dataclass(frozen=True)
class HostEnvironment:
    """
    Immutable (os, arch) pair describing the machine being provisioned.

    Attributes:
        os: Host operating system
        arch: Host CPU architecture
    """

    os: OS
    arch: Arch

    @classmethod
    def detect(
        cls, system: Optional[str] = None, machine: Optional[str] = None
    ) -> "HostEnvironment":
        """
        Detect the running host.

        Args:
            system: Override for platform.system() (used by tests)
            machine: Override for platform.machine() (used by tests)

        Returns:
            HostEnvironment for the host

        Raises:
            UnsupportedPlatformError: If OS or architecture is not supported
        """
        return cls(os=_detect_os(system), arch=_detect_architecture(machine))

    @property
    def platform_key(self) -> str:
        """
        Key used by the toolchain index, e.g. 'darwin_arm64' or 'linux_x64'.

        Example:
            >>> HostEnvironment(OS.LINUX, Arch.X86_64).platform_key
            'linux_x64'
        """
        os_prefix = "darwin" if self.os is OS.MACOS else "linux"
        arch_suffix = "x64" if self.arch is Arch.X86_64 else "arm64"
        return f"{os_prefix}_{arch_suffix}"

    def to_dict(self) -> dict:
        return {"os": self.os.value, "arch": self.arch.value}

    @classmethod
    def from_dict(cls, data: dict) -> "HostEnvironment":
        try:
            return cls(os=OS(data["os"]), arch=Arch(data["arch"]))
        except (KeyError, ValueError) as e:
            raise UnsupportedPlatformError(f"invalid host record {data!r}") from e

    def __str__(self) -> str:
        return f"{self.os.value} / {self.arch.value}"


def _detect_os(system: Optional[str] = None) -> OS:
    """
    Detect operating system.

    Returns:
        Normalized OS

    Raises:
        UnsupportedPlatformError: If OS is not macOS or Linux
    """
    raw = system if system is not None else platform.system()
    name = raw.lower()

    if name == "darwin":
        return OS.MACOS
    elif name == "linux":
        return OS.LINUX
    else:
        raise UnsupportedPlatformError(
            f"operating system '{raw}' (only macOS and Linux are supported)"
        )


def _detect_architecture(machine: Optional[str] = None) -> Arch:
    """
    Detect CPU architecture.

    Returns:
        Normalized architecture

    Raises:
        UnsupportedPlatformError: If the machine string is not a known alias
    """
    raw = machine if machine is not None else platform.machine()
    arch = _ARCH_ALIASES.get(raw.lower())
    if arch is None:
        raise UnsupportedPlatformError(f"CPU architecture '{raw}'")
    return arch


__all__ = ["OS", "Arch", "HostEnvironment"]
