"""
Pytest configuration and shared fixtures for pico-bootstrap tests.
"""

import pytest

from picobootstrap.resolver.models import InstallRequest

# Import test fixtures to make them available to all tests
# These imports register the fixtures with pytest's fixture discovery system
# ruff: noqa: F401
from tests.fixtures.releases import (
    any_host,
    fake_github,
    fake_index_loader,
    linux_arm64,
    linux_x64,
    macos_arm64,
    macos_x64,
)


def pytest_addoption(parser):
    """Add custom command line options."""
    parser.addoption(
        "--integration",
        action="store_true",
        default=False,
        help="run integration tests that require network access",
    )


def pytest_collection_modifyitems(config, items):
    """Skip integration tests unless --integration flag is provided."""
    if not config.getoption("--integration"):
        skip_integration = pytest.mark.skip(reason="need --integration option to run")
        for item in items:
            if "integration" in item.keywords:
                item.add_marker(skip_integration)


# ============================================================================
# Shared Test Fixtures
# ============================================================================


@pytest.fixture
def sample_request() -> InstallRequest:
    """The request used throughout the end-to-end scenarios."""
    return InstallRequest(
        sdk_version="2.2.0",
        toolchain_version="14_2_Rel1",
        cmake_version="3.31.5",
        ninja_version="1.12.1",
        picotool_version="2.2.0-a4",
        openocd_version="0.12.0+dev",
        include_sdk_tools=True,
    )


@pytest.fixture(autouse=True)
def _no_github_token(monkeypatch):
    """Keep tokens from the developer's shell out of tests."""
    monkeypatch.delenv("GITHUB_TOKEN", raising=False)
    monkeypatch.delenv("PICO_BOOTSTRAP_GITHUB_TOKEN", raising=False)
