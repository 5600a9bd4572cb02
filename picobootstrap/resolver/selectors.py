"""
Per-component asset selection.

Every upstream project names its release files differently, so each
component has its own predicate over (asset name, host, version). The
predicates are pure and never touch the network; selection walks a release's
asset list in the order GitHub returns it and the first match wins.

Asset naming seen upstream (examples):

    Kitware/CMake          cmake-3.31.5-linux-x86_64.tar.gz
                           cmake-3.31.5-macos-universal.tar.gz
    ninja-build/ninja      ninja-linux.zip, ninja-linux-aarch64.zip, ninja-mac.zip
    pico-sdk-tools         picotool-2.2.0-a4-x86_64-lin.tar.gz, picotool-2.2.0-a4-mac.zip
                           openocd-0.12.0+dev-aarch64-lin.tar.gz
"""

from typing import Callable, Dict, List, Optional, Sequence

from picobootstrap.core.platform import OS, Arch, HostEnvironment
from picobootstrap.metadata.github import Release, ReleaseAsset
from picobootstrap.resolver.models import ArchiveType, ComponentId

# Upstream repositories
SDK_TOOLS_REPO = ("raspberrypi", "pico-sdk-tools")
CMAKE_REPO = ("Kitware", "CMake")
NINJA_REPO = ("ninja-build", "ninja")

# Public picotool version -> pico-sdk-tools release tag
PICOTOOL_RELEASE_TAGS: Dict[str, str] = {
    "2.0.0": "v2.0.0-5",
    "2.1.0": "v2.1.0-0",
    "2.1.1": "v2.1.1-1",
    "2.2.0": "v2.2.0-0",
    "2.2.0-a4": "v2.2.0-3",
}

# Public OpenOCD version -> pico-sdk-tools release tag
OPENOCD_RELEASE_TAGS: Dict[str, str] = {
    "0.12.0+dev": "v2.2.0-3",
}

# Suffix appended to "v<version>" for versions missing from the tables above
DEFAULT_TAG_SUFFIX = "-0"

_ARCHIVE_SUFFIXES = [
    (".tar.xz", ArchiveType.TAR_XZ),
    (".tar.gz", ArchiveType.TAR_GZ),
    (".tar.bz2", ArchiveType.TAR_BZ2),
    (".pkg", ArchiveType.PKG),
    (".zip", ArchiveType.ZIP),
]

AssetPredicate = Callable[[str, HostEnvironment, str], bool]


def detect_archive_type(url: str) -> ArchiveType:
    """
    Classify a URL or file name by its suffix.

    Example:
        >>> detect_archive_type("https://example.com/cmake-3.31.5-linux-x86_64.TAR.GZ")
        <ArchiveType.TAR_GZ: 'tar.gz'>
    """
    lowered = url.lower()
    for suffix, archive_type in _ARCHIVE_SUFFIXES:
        if lowered.endswith(suffix):
            return archive_type
    return ArchiveType.UNKNOWN


def v_prefixed(version: str) -> str:
    """CMake and Ninja tag their releases 'v<version>'."""
    return version if version.startswith("v") else f"v{version}"


def release_tag_for(component_id: ComponentId, version: str) -> str:
    """
    Map a public version to the upstream release tag.

    Picotool and OpenOCD versions not present in their tables fall back to a
    guessed tag 'v<version>-0'; a wrong guess surfaces later as NotFoundError
    from the release lookup.

    Raises:
        ValueError: For components that are not looked up by release tag
    """
    if component_id in (ComponentId.CMAKE, ComponentId.NINJA):
        return v_prefixed(version)
    if component_id is ComponentId.PICOTOOL:
        return PICOTOOL_RELEASE_TAGS.get(version, f"v{version}{DEFAULT_TAG_SUFFIX}")
    if component_id is ComponentId.OPENOCD:
        return OPENOCD_RELEASE_TAGS.get(version, f"v{version}{DEFAULT_TAG_SUFFIX}")
    raise ValueError(f"{component_id.value} is not resolved by release tag")


def _has_any(name: str, *tokens: str) -> bool:
    return any(token in name for token in tokens)


# ============================================================================
# Predicates
# ============================================================================


def matches_sdk_tools(name: str, env: HostEnvironment, sdk_version: str) -> bool:
    """pico-sdk-tools bundle for a given SDK version."""
    n = name.lower()
    if not n.endswith((".zip", ".tar.gz")):
        return False
    if sdk_version.lower() not in n:
        return False

    if env.os is OS.LINUX:
        if env.arch is Arch.X86_64:
            return "linux" in n and "x86_64" in n
        return "linux" in n and _has_any(n, "aarch64", "arm64")

    if not _has_any(n, "macos", "darwin"):
        return False
    if env.arch is Arch.X86_64:
        return "x86_64" in n
    return _has_any(n, "arm64", "aarch64")


def matches_cmake(name: str, env: HostEnvironment, version: str) -> bool:
    """
    CMake binary distribution.

    macOS releases ship one universal archive, so any macOS archive is
    accepted regardless of host architecture. A 'v' prefix on the version
    is dropped since asset names never carry one.
    """
    n = name.lower()
    bare = version[1:] if version.startswith("v") else version
    if f"cmake-{bare}" not in n:
        return False

    if env.os is OS.LINUX:
        if not n.endswith((".tar.gz", ".tar.xz")):
            return False
        if env.arch is Arch.X86_64:
            return "linux" in n and _has_any(n, "x86_64", "x64")
        return "linux" in n and _has_any(n, "aarch64", "arm64")

    if not n.endswith(".tar.gz"):
        return False
    return "macos" in n and _has_any(n, "universal", "x86_64", "arm64")


def matches_picotool(name: str, env: HostEnvironment, version: str) -> bool:
    """picotool build from pico-sdk-tools ('picotool-<version>-<arch>-lin', '-mac')."""
    return _matches_sdk_tools_binary("picotool", name, env, version, ("mac",))


def matches_openocd(name: str, env: HostEnvironment, version: str) -> bool:
    """OpenOCD build from pico-sdk-tools."""
    return _matches_sdk_tools_binary("openocd", name, env, version, ("mac", "darwin"))


def _matches_sdk_tools_binary(
    prefix: str, name: str, env: HostEnvironment, version: str, mac_tokens: Sequence[str]
) -> bool:
    n = name.lower()
    if not n.endswith((".zip", ".tar.gz")):
        return False
    if not n.startswith(f"{prefix}-{version.lower()}"):
        return False

    if env.os is OS.LINUX:
        arch_token = "x86_64" if env.arch is Arch.X86_64 else "aarch64"
        return arch_token in n and "lin" in n

    # macOS builds are universal binaries
    return _has_any(n, *mac_tokens)


def pick_ninja(assets: Sequence[ReleaseAsset], env: HostEnvironment) -> Optional[ReleaseAsset]:
    """
    Pick the Ninja archive for a host.

    Ninja archives carry no version in their names. Linux releases ship
    'ninja-linux.zip' for every architecture and, from some version on, an
    additional 'ninja-linux-aarch64.zip'; aarch64 hosts take the specific
    archive when the release has one and the generic one otherwise.
    """
    names = [a.name.lower() for a in assets]

    if env.os is OS.MACOS:
        wanted = ["ninja-mac.zip"]
    elif env.arch is Arch.AARCH64 and "ninja-linux-aarch64.zip" in names:
        wanted = ["ninja-linux-aarch64.zip"]
    else:
        wanted = ["ninja-linux.zip"]

    for asset, name in zip(assets, names):
        if name in wanted:
            return asset
    return None


# ============================================================================
# Dispatch
# ============================================================================

_PREDICATES: Dict[ComponentId, AssetPredicate] = {
    ComponentId.PICO_SDK_TOOLS: matches_sdk_tools,
    ComponentId.CMAKE: matches_cmake,
    ComponentId.PICOTOOL: matches_picotool,
    ComponentId.OPENOCD: matches_openocd,
}


def select_asset(
    component_id: ComponentId,
    assets: Sequence[ReleaseAsset],
    env: HostEnvironment,
    version: str,
) -> Optional[ReleaseAsset]:
    """
    Select the asset for a component from a release's asset list.

    Args:
        component_id: Component being resolved
        assets: Release assets in upstream order
        env: Host environment
        version: Requested version (the SDK version for pico-sdk-tools)

    Returns:
        First matching asset, or None when nothing matches

    Raises:
        ValueError: For components that are not distributed as release assets
    """
    if component_id is ComponentId.NINJA:
        return pick_ninja(assets, env)

    predicate = _PREDICATES.get(component_id)
    if predicate is None:
        raise ValueError(f"{component_id.value} is not selected from release assets")

    for asset in assets:
        if predicate(asset.name, env, version):
            return asset
    return None


def choose_sdk_tools_release(releases: Sequence[Release], sdk_version: str) -> Optional[Release]:
    """
    Choose the pico-sdk-tools release for an SDK version.

    Drafts are ignored. Among the rest, sorted by tag descending as plain
    strings, the first tag containing the SDK version wins; otherwise the
    newest tag is used.
    """
    candidates: List[Release] = sorted(
        (r for r in releases if not r.is_draft), key=lambda r: r.tag, reverse=True
    )
    for release in candidates:
        if sdk_version in release.tag:
            return release
    return candidates[0] if candidates else None


__all__ = [
    "CMAKE_REPO",
    "DEFAULT_TAG_SUFFIX",
    "NINJA_REPO",
    "OPENOCD_RELEASE_TAGS",
    "PICOTOOL_RELEASE_TAGS",
    "SDK_TOOLS_REPO",
    "choose_sdk_tools_release",
    "detect_archive_type",
    "matches_cmake",
    "matches_openocd",
    "matches_picotool",
    "matches_sdk_tools",
    "pick_ninja",
    "release_tag_for",
    "select_asset",
    "v_prefixed",
]
