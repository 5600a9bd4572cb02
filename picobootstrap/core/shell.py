"""
External process invocation.

Used by the installer for the SDK git clone. Commands are always passed as
argument lists, never through a shell.
"""

import logging
import subprocess
from pathlib import Path
from typing import List, Optional

from picobootstrap.core.exceptions import CommandFailedError

logger = logging.getLogger(__name__)


def run_command(
    command: List[str], cwd: Optional[Path] = None, timeout: Optional[int] = None
) -> str:
    """
    Run an external executable and capture its output.

    Args:
        command: Executable followed by its arguments
        cwd: Working directory
        timeout: Timeout in seconds (None waits forever)

    Returns:
        Captured stdout

    Raises:
        CommandFailedError: If the command is missing, times out or exits non-zero
    """
    logger.debug(f"Running: {' '.join(command)}")

    try:
        result = subprocess.run(
            command,
            cwd=str(cwd) if cwd else None,
            capture_output=True,
            text=True,
            timeout=timeout,
        )
    except FileNotFoundError as e:
        raise CommandFailedError(command, 127, "", str(e)) from e
    except subprocess.TimeoutExpired as e:
        raise CommandFailedError(
            command, -1, "", f"timed out after {timeout}s"
        ) from e

    if result.returncode != 0:
        raise CommandFailedError(
            command, result.returncode, result.stdout, result.stderr
        )

    return result.stdout


__all__ = ["run_command"]
