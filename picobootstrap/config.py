"""YAML configuration for pico-bootstrap.

This module provides parsing and validation for pico-bootstrap.yaml files:

    version: 1
    root: ~/.pico-sdk
    github_token: null
    toolchain_index_url: null
    include_sdk_tools: true
    prefer_installed: true
    versions:
      sdk: 2.2.0
      toolchain: 14_2_Rel1
      cmake: 3.31.5
      ninja: 1.12.1
      picotool: 2.2.0-a4
      openocd: 0.12.0+dev

Command-line options take precedence over the file. The GitHub token falls
back to the PICO_BOOTSTRAP_GITHUB_TOKEN and GITHUB_TOKEN environment
variables, and the install root defaults to ~/.pico-sdk.
"""

import logging
import os
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Dict, Optional

import yaml

from picobootstrap.core.exceptions import ConfigError

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILENAME = "pico-bootstrap.yaml"
DEFAULT_ROOT = "~/.pico-sdk"
TOKEN_ENV_VARS = ("PICO_BOOTSTRAP_GITHUB_TOKEN", "GITHUB_TOKEN")


@dataclass
class VersionDefaults:
    """Per-component versions used when not given on the command line."""

    sdk: Optional[str] = None
    toolchain: Optional[str] = None
    cmake: Optional[str] = None
    ninja: Optional[str] = None
    picotool: Optional[str] = None
    openocd: Optional[str] = None


@dataclass
class BootstrapConfig:
    """Complete pico-bootstrap configuration."""

    version: int = 1
    root: Optional[str] = None
    github_token: Optional[str] = None
    toolchain_index_url: Optional[str] = None
    include_sdk_tools: bool = True
    prefer_installed: bool = True
    versions: VersionDefaults = field(default_factory=VersionDefaults)
    source: Optional[Path] = None


def parse_config(config_path: Path) -> BootstrapConfig:
    """
    Parse a pico-bootstrap.yaml configuration file.

    Args:
        config_path: Path to the file

    Returns:
        Parsed and validated configuration

    Raises:
        ConfigError: If the file is missing or invalid
    """
    config_path = Path(config_path)
    if not config_path.exists():
        raise ConfigError(f"Configuration file not found: {config_path}")

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML syntax in {config_path}: {e}") from e

    if data is None:
        raise ConfigError(f"Configuration file is empty: {config_path}")

    config = _parse_and_validate(data)
    config.source = config_path
    return config


def load_config(config_path: Optional[Path] = None) -> BootstrapConfig:
    """
    Load configuration for a run.

    An explicitly given path must exist. Without one, ./pico-bootstrap.yaml
    is used if present and built-in defaults otherwise.
    """
    if config_path is not None:
        return parse_config(config_path)

    default_path = Path.cwd() / DEFAULT_CONFIG_FILENAME
    if default_path.exists():
        logger.debug(f"Using configuration file {default_path}")
        return parse_config(default_path)

    return BootstrapConfig()


def _parse_and_validate(data) -> BootstrapConfig:
    """Parse and validate configuration data."""
    if not isinstance(data, dict):
        raise ConfigError("Configuration must be a mapping")

    if "version" not in data:
        raise ConfigError("Missing required field: version")
    if data["version"] != 1:
        raise ConfigError(f"Unsupported version: {data['version']} (expected 1)")

    known = {f.name for f in fields(BootstrapConfig)} - {"source"}
    unknown = sorted(set(data) - known)
    if unknown:
        raise ConfigError(f"Unknown configuration field(s): {', '.join(unknown)}")

    return BootstrapConfig(
        version=1,
        root=_optional_str(data, "root"),
        github_token=_optional_str(data, "github_token"),
        toolchain_index_url=_optional_str(data, "toolchain_index_url"),
        include_sdk_tools=_bool(data, "include_sdk_tools", True),
        prefer_installed=_bool(data, "prefer_installed", True),
        versions=_parse_versions(data.get("versions")),
    )


def _parse_versions(data) -> VersionDefaults:
    if data is None:
        return VersionDefaults()
    if not isinstance(data, dict):
        raise ConfigError("'versions' must be a mapping of component to version")

    allowed = {f.name for f in fields(VersionDefaults)}
    unknown = sorted(set(data) - allowed)
    if unknown:
        raise ConfigError(
            f"Unknown component(s) in 'versions': {', '.join(unknown)} "
            f"(expected: {', '.join(sorted(allowed))})"
        )

    values: Dict[str, Optional[str]] = {}
    for name, value in data.items():
        if value is not None and not isinstance(value, str):
            # YAML reads "ninja: 1.10" as the float 1.1
            raise ConfigError(
                f"versions.{name} must be a string, got {value!r} "
                f"(quote it, e.g. {name}: \"{value}\")"
            )
        values[name] = value
    return VersionDefaults(**values)


def _optional_str(data: dict, key: str) -> Optional[str]:
    value = data.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        raise ConfigError(f"'{key}' must be a string, got {value!r}")
    return value


def _bool(data: dict, key: str, default: bool) -> bool:
    value = data.get(key, default)
    if not isinstance(value, bool):
        raise ConfigError(f"'{key}' must be true or false, got {value!r}")
    return value


# ============================================================================
# Precedence helpers
# ============================================================================


def resolve_root(cli_root: Optional[str], config: BootstrapConfig) -> Path:
    """Install root: command line, then config file, then ~/.pico-sdk."""
    root = cli_root or config.root or DEFAULT_ROOT
    return Path(root).expanduser()


def resolve_github_token(
    cli_token: Optional[str], config: BootstrapConfig
) -> Optional[str]:
    """GitHub token: command line, then config file, then environment."""
    if cli_token:
        return cli_token
    if config.github_token:
        return config.github_token
    for var in TOKEN_ENV_VARS:
        value = os.environ.get(var)
        if value:
            logger.debug(f"Using GitHub token from ${var}")
            return value
    return None


__all__ = [
    "BootstrapConfig",
    "DEFAULT_CONFIG_FILENAME",
    "DEFAULT_ROOT",
    "TOKEN_ENV_VARS",
    "VersionDefaults",
    "load_config",
    "parse_config",
    "resolve_github_token",
    "resolve_root",
]
