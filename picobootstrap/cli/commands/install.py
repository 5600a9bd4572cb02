"""
Install command implementation.

Resolves the requested versions and installs them under the install root,
recording each component in the install manifest.
"""

import logging

from picobootstrap.cli.utils import build_request, load_context
from picobootstrap.core.platform import HostEnvironment
from picobootstrap.installer.installer import Installer
from picobootstrap.installer.manifest import InstallManifestStore
from picobootstrap.resolver.resolver import VersionResolver, directory_probe

logger = logging.getLogger(__name__)


def run(args) -> int:
    """
    Run the install command.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code (0 for success)
    """
    context = load_context(args)
    request = build_request(args, context.config)
    env = HostEnvironment.detect()

    prefer_installed = context.config.prefer_installed and not args.no_prefer_installed
    probe = directory_probe(context.root) if prefer_installed else None

    logger.info("Resolving versions and download URLs...")
    resolver = VersionResolver(
        env, context.github, context.toolchain_loader, installed_probe=probe
    )
    plan = resolver.resolve(request)
    print(plan.describe())

    logger.info(f"Installing into {context.root}")
    installer = Installer(env, context.http, context.root)
    installed = installer.install(plan, InstallManifestStore(context.root))

    if installed:
        logger.info(f"Installed: {', '.join(c.value for c in installed)}")
    else:
        logger.info("Everything was already installed")

    return 0
