"""
Shared utilities for CLI commands.

Provides common functionality used across multiple CLI commands to
eliminate duplication and ensure consistent behavior.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from picobootstrap.config import (
    BootstrapConfig,
    load_config,
    resolve_github_token,
    resolve_root,
)
from picobootstrap.core.exceptions import ConfigError
from picobootstrap.core.http import HTTPClient
from picobootstrap.metadata.github import GitHubClient
from picobootstrap.metadata.toolchains import DEFAULT_INDEX_URL, ToolchainIndexLoader
from picobootstrap.resolver.models import InstallRequest

logger = logging.getLogger(__name__)

# CLI option -> InstallRequest field
_VERSION_OPTIONS = {
    "sdk": "sdk_version",
    "toolchain": "toolchain_version",
    "cmake": "cmake_version",
    "ninja": "ninja_version",
    "picotool": "picotool_version",
    "openocd": "openocd_version",
}


# ============================================================================
# Configuration Management
# ============================================================================


@dataclass
class CommandContext:
    """Everything a command needs, assembled from CLI options and config."""

    config: BootstrapConfig
    root: Path
    http: HTTPClient
    github: GitHubClient
    toolchain_loader: ToolchainIndexLoader


def load_context(args) -> CommandContext:
    """
    Load configuration and build the network clients for a command.

    Args:
        args: Parsed command-line arguments

    Returns:
        CommandContext

    Raises:
        ConfigError: If the configuration file is invalid
    """
    config = load_config(getattr(args, "config", None))
    token = resolve_github_token(getattr(args, "github_token", None), config)
    if not token:
        logger.debug("No GitHub token configured; API rate limits may apply")

    http = HTTPClient(github_token=token)
    return CommandContext(
        config=config,
        root=resolve_root(getattr(args, "root", None), config),
        http=http,
        github=GitHubClient(http),
        toolchain_loader=ToolchainIndexLoader(
            http, remote_url=config.toolchain_index_url or DEFAULT_INDEX_URL
        ),
    )


def build_request(args, config: BootstrapConfig) -> InstallRequest:
    """
    Build an InstallRequest from CLI options, falling back to config defaults.

    Raises:
        ConfigError: If a component version is given neither on the command
            line nor in the configuration file
    """
    values = {}
    missing = []
    for option, field_name in _VERSION_OPTIONS.items():
        value: Optional[str] = getattr(args, option, None) or getattr(
            config.versions, option
        )
        if not value:
            missing.append(f"--{option}")
        values[field_name] = value

    if missing:
        raise ConfigError(
            f"Missing version(s): {', '.join(missing)}. Pass them on the command "
            "line or set them under 'versions' in pico-bootstrap.yaml"
        )

    include_sdk_tools = getattr(args, "include_sdk_tools", None)
    if include_sdk_tools is None:
        include_sdk_tools = config.include_sdk_tools

    return InstallRequest(include_sdk_tools=include_sdk_tools, **values)


__all__ = ["CommandContext", "build_request", "load_context"]
