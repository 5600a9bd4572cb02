"""
Version resolution: turn an InstallRequest into an InstallPlan.

The resolver answers "exactly which versions, URLs and paths will be used"
without installing anything, so a UI can show the plan before acting on it.

Components are resolved one after another in a fixed order:

    pico-sdk -> arm-toolchain -> pico-sdk-tools -> ninja -> cmake -> picotool -> openocd

A failure on any required component aborts the whole resolve. The
pico-sdk-tools bundle is best effort and is left out of the plan instead.
"""

import logging
from pathlib import Path
from typing import Callable, Optional, Union

from picobootstrap.core.exceptions import NotFoundError, PicoBootstrapError
from picobootstrap.core.platform import HostEnvironment
from picobootstrap.metadata.github import GitHubClient, Release
from picobootstrap.metadata.toolchains import ToolchainIndex, ToolchainIndexLoader
from picobootstrap.resolver.models import (
    ComponentId,
    ComponentPlan,
    InstallPlan,
    InstallRequest,
)
from picobootstrap.resolver.selectors import (
    CMAKE_REPO,
    NINJA_REPO,
    SDK_TOOLS_REPO,
    choose_sdk_tools_release,
    detect_archive_type,
    release_tag_for,
    select_asset,
)

logger = logging.getLogger(__name__)

# Receives a path relative to the install root, returns True if it exists
InstalledProbe = Callable[[str], bool]

SDK_TOOLS_RELEASE_LIMIT = 50


class VersionResolver:
    """
    Resolve component versions into download URLs and install paths.

    Example:
        >>> http = HTTPClient()
        >>> resolver = VersionResolver(
        ...     HostEnvironment.detect(), GitHubClient(http), ToolchainIndexLoader(http)
        ... )
        >>> plan = resolver.resolve(request)
        >>> print(plan.describe())
    """

    def __init__(
        self,
        env: HostEnvironment,
        github: GitHubClient,
        toolchain_loader: ToolchainIndexLoader,
        installed_probe: Optional[InstalledProbe] = None,
    ):
        """
        Initialize resolver.

        Args:
            env: Host environment to resolve for
            github: Releases API client
            toolchain_loader: Loader for the ARM toolchain index
            installed_probe: When given, components whose install path already
                exists are planned without any network lookup
        """
        self.env = env
        self.github = github
        self.toolchain_loader = toolchain_loader
        self.installed_probe = installed_probe

    def resolve(self, request: InstallRequest) -> InstallPlan:
        """
        Resolve every component of a request.

        Args:
            request: Requested versions

        Returns:
            Complete InstallPlan

        Raises:
            NotFoundError: If a required component has no release, index entry
                or matching asset for this host
            HttpError: If a metadata request for a required component fails
        """
        logger.debug(f"Resolving {request} for {self.env}")

        sdk = self._resolve_sdk(request.sdk_version)
        toolchain = self._resolve_toolchain(request.toolchain_version)
        sdk_tools = None
        if request.include_sdk_tools:
            sdk_tools = self._resolve_sdk_tools(request.sdk_version)
        ninja = self._resolve_ninja(request.ninja_version)
        cmake = self._resolve_cmake(request.cmake_version)
        picotool = self._resolve_sdk_tools_binary(
            ComponentId.PICOTOOL, request.picotool_version
        )
        openocd = self._resolve_sdk_tools_binary(
            ComponentId.OPENOCD, request.openocd_version
        )

        return InstallPlan(
            env=self.env,
            request=request,
            sdk=sdk,
            toolchain=toolchain,
            ninja=ninja,
            cmake=cmake,
            picotool=picotool,
            openocd=openocd,
            sdk_tools=sdk_tools,
        )

    # ------------------------------------------------------------------
    # Components
    # ------------------------------------------------------------------

    def _resolve_sdk(self, version: str) -> ComponentPlan:
        path = f"sdk/{version}"
        installed = self._installed_plan(ComponentId.PICO_SDK, version, path)
        if installed:
            return installed
        return ComponentPlan(
            id=ComponentId.PICO_SDK,
            version=version,
            install_path=path,
            notes=f"Installed via git clone + checkout tag {version}",
        )

    def _resolve_toolchain(self, version: str) -> ComponentPlan:
        path = f"toolchain/{version}"
        installed = self._installed_plan(ComponentId.ARM_TOOLCHAIN, version, path)
        if installed:
            return installed

        index: ToolchainIndex = self.toolchain_loader.load()
        platform_key = self.env.platform_key
        url = index.url_for(version, platform_key)
        if url is None:
            raise NotFoundError(
                f"ARM toolchain version {version} not found for platform "
                f"{platform_key} in supportedToolchains.ini ({index.describe_source()})"
            )

        logger.debug(f"arm-toolchain {version}: {url}")
        return ComponentPlan(
            id=ComponentId.ARM_TOOLCHAIN,
            version=version,
            install_path=path,
            download_url=url,
            archive_type=detect_archive_type(url),
            notes=f"Resolved from {index.describe_source()}, platform {platform_key}",
        )

    def _resolve_sdk_tools(self, sdk_version: str) -> Optional[ComponentPlan]:
        path = f"tools/{sdk_version}"
        installed = self._installed_plan(ComponentId.PICO_SDK_TOOLS, sdk_version, path)
        if installed:
            return installed

        owner, repo = SDK_TOOLS_REPO
        try:
            releases = self.github.list_releases(
                owner, repo, limit=SDK_TOOLS_RELEASE_LIMIT
            )
        except PicoBootstrapError as e:
            logger.warning(f"Skipping pico-sdk-tools: could not list releases: {e}")
            return None

        release = choose_sdk_tools_release(releases, sdk_version)
        if release is None:
            logger.info(f"Skipping pico-sdk-tools: no releases in {owner}/{repo}")
            return None

        asset = select_asset(
            ComponentId.PICO_SDK_TOOLS, release.assets, self.env, sdk_version
        )
        if asset is None:
            logger.info(
                f"Skipping pico-sdk-tools: no asset for SDK {sdk_version} on "
                f"{self.env} in {release.tag}"
            )
            return None

        return ComponentPlan(
            id=ComponentId.PICO_SDK_TOOLS,
            version=sdk_version,
            install_path=path,
            download_url=asset.download_url,
            archive_type=detect_archive_type(asset.name),
            notes=f"Resolved from pico-sdk-tools tag {release.tag}, asset {asset.name}",
        )

    def _resolve_ninja(self, version: str) -> ComponentPlan:
        tag = release_tag_for(ComponentId.NINJA, version)
        return self._resolve_from_release(
            ComponentId.NINJA, version, tag, f"ninja/{tag}", NINJA_REPO, "Ninja"
        )

    def _resolve_cmake(self, version: str) -> ComponentPlan:
        tag = release_tag_for(ComponentId.CMAKE, version)
        return self._resolve_from_release(
            ComponentId.CMAKE, version, tag, f"cmake/{tag}", CMAKE_REPO, "CMake"
        )

    def _resolve_sdk_tools_binary(
        self, component_id: ComponentId, version: str
    ) -> ComponentPlan:
        tag = release_tag_for(component_id, version)
        return self._resolve_from_release(
            component_id,
            version,
            tag,
            f"{component_id.value}/{version}",
            SDK_TOOLS_REPO,
            component_id.value,
        )

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _resolve_from_release(
        self,
        component_id: ComponentId,
        version: str,
        tag: str,
        path: str,
        repository: tuple,
        label: str,
    ) -> ComponentPlan:
        """Look up one release by tag and select the host's asset from it."""
        installed = self._installed_plan(component_id, version, path)
        if installed:
            return installed

        owner, repo = repository
        release = self._get_release(component_id, owner, repo, tag)
        asset = select_asset(component_id, release.assets, self.env, version)
        if asset is None:
            raise NotFoundError(
                f"No matching {label} asset for {self.env.os.value}/"
                f"{self.env.arch.value} in {owner}/{repo} {release.tag}"
            )

        logger.debug(f"{component_id.value} {version}: {asset.name}")
        return ComponentPlan(
            id=component_id,
            version=version,
            install_path=path,
            download_url=asset.download_url,
            archive_type=detect_archive_type(asset.name),
            notes=f"Resolved from {owner}/{repo} {release.tag}, asset {asset.name}",
        )

    def _get_release(
        self, component_id: ComponentId, owner: str, repo: str, tag: str
    ) -> Release:
        try:
            return self.github.get_release_by_tag(owner, repo, tag)
        except NotFoundError as e:
            raise NotFoundError(
                f"{component_id.value} release tag {tag} in {owner}/{repo} "
                f"(host {self.env.os.value}/{self.env.arch.value})"
            ) from e

    def _installed_plan(
        self, component_id: ComponentId, version: str, path: str
    ) -> Optional[ComponentPlan]:
        if self.installed_probe is None or not self.installed_probe(path):
            return None
        logger.info(f"{component_id.value} {version} already installed at {path}")
        return ComponentPlan(
            id=component_id,
            version=version,
            install_path=path,
            notes=f"Already installed at {path}; skipped network resolution",
        )


def directory_probe(root: Union[str, Path]) -> InstalledProbe:
    """Probe that checks for existing directories under an install root."""
    root_path = Path(root)

    def probe(relative_path: str) -> bool:
        return (root_path / relative_path).exists()

    return probe


__all__ = ["InstalledProbe", "VersionResolver", "directory_probe"]
