"""
Installation of a resolved InstallPlan.

Lays components out under the install root the same way the Pico VS Code
extension does:

    ~/.pico-sdk/
    ├── sdk/2.2.0/                  git clone of raspberrypi/pico-sdk
    ├── toolchain/14_2_Rel1/        arm-none-eabi cross toolchain
    ├── tools/2.2.0/                pico-sdk-tools (optional)
    ├── ninja/v1.12.1/
    ├── cmake/v3.31.5/
    ├── picotool/2.2.0-a4/
    └── openocd/0.12.0+dev/

Archives are downloaded and extracted in a hidden staging directory inside
the root and moved into place only when complete, so an interrupted install
never leaves a half-populated component directory behind.
"""

import logging
import tempfile
from pathlib import Path
from typing import Callable, List, Optional, Union

from picobootstrap.core.exceptions import PicoBootstrapError, UnsupportedArchiveFormat
from picobootstrap.core.filesystem import extract_archive, flatten_single_directory
from picobootstrap.core.http import HTTPClient
from picobootstrap.core.platform import OS, HostEnvironment
from picobootstrap.core.shell import run_command
from picobootstrap.installer.manifest import InstallManifestStore
from picobootstrap.resolver.models import (
    ArchiveType,
    ComponentId,
    ComponentPlan,
    InstallPlan,
)

logger = logging.getLogger(__name__)

SDK_GIT_URL = "https://github.com/raspberrypi/pico-sdk.git"

# Archives that wrap everything in one versioned top-level directory
_FLATTENED = {ComponentId.ARM_TOOLCHAIN, ComponentId.CMAKE}

_EXTRACTABLE = {
    ArchiveType.ZIP,
    ArchiveType.TAR_GZ,
    ArchiveType.TAR_XZ,
    ArchiveType.TAR_BZ2,
}

Runner = Callable[..., str]


class Installer:
    """
    Downloads, extracts and clones the components of an InstallPlan.

    Example:
        >>> installer = Installer(env, HTTPClient(), Path.home() / ".pico-sdk")
        >>> installer.install(plan, InstallManifestStore(installer.root))
    """

    def __init__(
        self,
        env: HostEnvironment,
        http: HTTPClient,
        root: Union[str, Path],
        runner: Runner = run_command,
    ):
        """
        Initialize installer.

        Args:
            env: Host environment the plan was resolved for
            http: HTTP client used for downloads
            root: Install root directory
            runner: Process runner used for git (injectable for tests)
        """
        self.env = env
        self.http = http
        self.root = Path(root).expanduser()
        self.runner = runner

    def install(
        self, plan: InstallPlan, manifest: Optional[InstallManifestStore] = None
    ) -> List[ComponentId]:
        """
        Install every component of a plan in order.

        Components are recorded in the manifest as they complete. A component
        that was already present is recorded only if the manifest does not
        know about it yet.

        Args:
            plan: Resolved plan
            manifest: Optional manifest store to update

        Returns:
            Ids of the components that were actually installed

        Raises:
            PicoBootstrapError: On the first component that fails
        """
        self.root.mkdir(parents=True, exist_ok=True)
        installed: List[ComponentId] = []

        for component in plan.components_in_order():
            did_install = self.install_component(component)
            if did_install:
                installed.append(component.id)

            if manifest is not None and (
                did_install or component.id.value not in manifest.installed_components()
            ):
                manifest.record(plan, component.id)

        logger.info(f"Done. Installed under: {self.root}")
        return installed

    def install_component(self, component: ComponentPlan) -> bool:
        """
        Install one component.

        Returns:
            True if the component was installed, False if it was skipped
        """
        dest = self.destination(component)
        if dest.exists():
            logger.info(f"{component.id.value} already exists at {dest} (skipping)")
            return False

        if component.id is ComponentId.PICO_SDK:
            self._clone_sdk(component, dest)
            return True

        if not component.download_url:
            logger.info(
                f"{component.id.value} has no download URL in plan (skipping)"
            )
            return False

        self._install_archive(component, dest)
        return True

    def destination(self, component: ComponentPlan) -> Path:
        return self.root / component.install_path

    def _clone_sdk(self, component: ComponentPlan, dest: Path) -> None:
        dest.parent.mkdir(parents=True, exist_ok=True)
        logger.info(f"Cloning pico-sdk {component.version} into {dest}")
        self.runner(
            [
                "git",
                "clone",
                "--depth",
                "1",
                "--branch",
                component.version,
                SDK_GIT_URL,
                str(dest),
            ]
        )

    def _install_archive(self, component: ComponentPlan, dest: Path) -> None:
        archive_type = component.archive_type or ArchiveType.UNKNOWN
        if archive_type not in _EXTRACTABLE:
            raise UnsupportedArchiveFormat(
                f"Cannot install {component.id.value} {component.version}: "
                f"unsupported archive type '{archive_type.value}' "
                f"({component.download_url})"
            )

        with tempfile.TemporaryDirectory(
            prefix=f".pico-bootstrap-{component.id.value}-", dir=self.root
        ) as tmp:
            tmp_path = Path(tmp)
            archive = tmp_path / f"{component.id.value}.{archive_type.value}"
            staging = tmp_path / "staging"

            self.http.download(component.download_url, archive)

            logger.info(f"Extracting {component.id.value} into {dest}")
            extract_archive(archive, staging)
            if component.id in _FLATTENED and flatten_single_directory(staging):
                logger.debug(f"Flattened single top-level directory in {staging}")

            dest.parent.mkdir(parents=True, exist_ok=True)
            try:
                staging.rename(dest)
            except OSError as e:
                raise PicoBootstrapError(
                    f"Failed to move {component.id.value} into {dest}: {e}"
                ) from e

        if component.id is ComponentId.CMAKE and self.env.os is OS.MACOS:
            _link_cmake_app_bin(dest)


def _link_cmake_app_bin(dest: Path) -> None:
    """macOS CMake ships as CMake.app; expose its bin directory as <dest>/bin."""
    app_bin = dest / "CMake.app" / "Contents" / "bin"
    bin_dir = dest / "bin"
    if app_bin.is_dir() and not bin_dir.exists():
        bin_dir.symlink_to(Path("CMake.app") / "Contents" / "bin", target_is_directory=True)
        logger.debug(f"Linked {bin_dir} -> {app_bin}")


__all__ = ["Installer", "SDK_GIT_URL"]
