"""
Upstream release metadata.

This module provides:
- A read-only GitHub releases API client
- The supportedToolchains.ini parser and the toolchain index loader
"""

from picobootstrap.metadata.github import GitHubClient, Release, ReleaseAsset
from picobootstrap.metadata.ini import parse_index
from picobootstrap.metadata.toolchains import (
    DEFAULT_INDEX_URL,
    IndexProvenance,
    ToolchainIndex,
    ToolchainIndexLoader,
    sort_toolchain_versions,
)

__all__ = [
    "DEFAULT_INDEX_URL",
    "GitHubClient",
    "IndexProvenance",
    "Release",
    "ReleaseAsset",
    "ToolchainIndex",
    "ToolchainIndexLoader",
    "parse_index",
    "sort_toolchain_versions",
]
