"""
pico-bootstrap: resolve and install the Raspberry Pi Pico SDK toolchain.

Installs the Pico SDK, the ARM cross toolchain, CMake, Ninja, picotool and
OpenOCD into the ~/.pico-sdk layout used by the Pico VS Code extension.
"""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("pico-bootstrap")
except PackageNotFoundError:
    __version__ = "0.1.0"
