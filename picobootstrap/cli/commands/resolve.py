"""
Resolve command implementation.

Prints the resolved install plan, human-readable first and then as JSON.
"""

import logging

from picobootstrap.cli.utils import build_request, load_context
from picobootstrap.core.platform import HostEnvironment
from picobootstrap.resolver.resolver import VersionResolver, directory_probe

logger = logging.getLogger(__name__)


def run(args) -> int:
    """
    Run the resolve command.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code (0 for success)
    """
    context = load_context(args)
    request = build_request(args, context.config)
    env = HostEnvironment.detect()

    probe = directory_probe(context.root) if args.prefer_installed else None
    resolver = VersionResolver(
        env, context.github, context.toolchain_loader, installed_probe=probe
    )

    plan = resolver.resolve(request)

    if args.json:
        print(plan.to_json())
    else:
        print(plan.describe())
        print("\n---")
        print(plan.to_json())

    return 0
