"""
List command implementation.

Discovers what is available upstream so a UI can offer version choices.
"""

import logging

from picobootstrap.cli.utils import load_context
from picobootstrap.metadata.toolchains import sort_toolchain_versions
from picobootstrap.resolver.selectors import OPENOCD_RELEASE_TAGS, SDK_TOOLS_REPO

logger = logging.getLogger(__name__)


def run(args) -> int:
    """
    Run the list command.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code (0 for success)
    """
    context = load_context(args)
    limit = args.limit

    if args.kind == "sdk-tags":
        items = context.github.list_tags("raspberrypi", "pico-sdk", limit=limit)
    elif args.kind == "picotool-releases":
        releases = context.github.list_releases("raspberrypi", "picotool", limit=limit)
        items = [r.tag for r in releases]
    elif args.kind == "sdk-tools-releases":
        owner, repo = SDK_TOOLS_REPO
        releases = context.github.list_releases(owner, repo, limit=limit)
        items = [r.tag for r in releases]
    elif args.kind == "toolchain-versions":
        index = context.toolchain_loader.load()
        logger.debug(f"Toolchain index from {index.location}")
        items = sort_toolchain_versions(index.versions())
        if limit > 0:
            items = items[:limit]
    else:
        # OpenOCD builds only exist for the versions mapped to a release tag
        items = list(OPENOCD_RELEASE_TAGS)

    for item in items:
        print(item)

    return 0
