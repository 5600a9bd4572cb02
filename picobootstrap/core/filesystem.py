"""
File system utilities used by the installer and the manifest store.

This module provides:
- Archive extraction (zip, tar.gz, tar.xz, tar.bz2) with traversal checks
- Flattening of archives that wrap everything in one top-level directory
- Atomic file writes
"""

import sys
import tarfile
import tempfile
import zipfile
from pathlib import Path
from typing import Union

from picobootstrap.core.exceptions import (
    ArchiveExtractionError,
    InsecureArchiveError,
    UnsupportedArchiveFormat,
)


# ============================================================================
# Archive Extraction
# ============================================================================


def _validate_archive_path(path: str, destination: Path) -> None:
    """
    Validate that an archive member path is safe to extract.

    Args:
        path: Member path from archive
        destination: Extraction destination

    Raises:
        InsecureArchiveError: If path attempts directory traversal
    """
    member_path = (destination / path).resolve()

    if not member_path.is_relative_to(destination.resolve()):
        raise InsecureArchiveError(
            f"Archive member '{path}' attempts directory traversal. "
            "This is a security risk and extraction has been blocked."
        )


def extract_archive(
    archive_path: Union[str, Path], destination: Union[str, Path]
) -> None:
    """
    Extract an archive to a destination directory.

    The format is chosen from the file name. All member paths are validated
    before anything is written.

    Supported formats:
    - .zip
    - .tar.gz, .tgz
    - .tar.xz
    - .tar.bz2, .tbz2

    Args:
        archive_path: Path to the archive file
        destination: Directory to extract to

    Raises:
        UnsupportedArchiveFormat: If archive format is not recognized
        ArchiveExtractionError: If extraction fails
        InsecureArchiveError: If archive contains malicious paths
    """
    archive_path = Path(archive_path)
    destination = Path(destination)

    if not archive_path.exists():
        raise ArchiveExtractionError(f"Archive not found: {archive_path}")

    destination.mkdir(parents=True, exist_ok=True)

    archive_name = archive_path.name.lower()

    try:
        if archive_name.endswith(".zip"):
            _extract_zip(archive_path, destination)
        elif archive_name.endswith((".tar.gz", ".tgz")):
            _extract_tar(archive_path, destination, "r:gz")
        elif archive_name.endswith(".tar.xz"):
            _extract_tar(archive_path, destination, "r:xz")
        elif archive_name.endswith((".tar.bz2", ".tbz2")):
            _extract_tar(archive_path, destination, "r:bz2")
        else:
            raise UnsupportedArchiveFormat(
                f"Unsupported archive format: {archive_path.name}. "
                "Supported: .zip, .tar.gz, .tar.xz, .tar.bz2"
            )
    except (InsecureArchiveError, UnsupportedArchiveFormat):
        raise
    except Exception as e:
        raise ArchiveExtractionError(f"Failed to extract {archive_path}: {e}") from e


def _extract_zip(archive_path: Path, destination: Path) -> None:
    """Extract a ZIP archive, restoring Unix permission bits."""
    with zipfile.ZipFile(archive_path, "r") as zf:
        members = zf.infolist()

        for member in members:
            _validate_archive_path(member.filename, destination)

        for member in members:
            extracted = Path(zf.extract(member, destination))
            # zipfile drops the mode stored in the high bits of external_attr
            mode = (member.external_attr >> 16) & 0o777
            if mode and not member.is_dir():
                extracted.chmod(mode)


def _extract_tar(archive_path: Path, destination: Path, mode: str) -> None:
    """Extract a tar archive with specified compression."""
    with tarfile.open(archive_path, mode) as tar:
        for member in tar.getmembers():
            _validate_archive_path(member.name, destination)

        # Extract with filter for security (Python 3.12+)
        if sys.version_info >= (3, 12):
            tar.extractall(destination, filter="data")
        else:
            tar.extractall(destination)


def flatten_single_directory(directory: Union[str, Path]) -> bool:
    """
    Hoist the contents of a lone top-level directory into its parent.

    Toolchain and CMake archives wrap everything in a versioned directory
    (e.g. cmake-3.31.5-linux-x86_64/). Hidden entries are ignored when
    deciding whether the directory is alone.

    Args:
        directory: Directory that received the extracted archive

    Returns:
        True if the directory was flattened
    """
    directory = Path(directory)
    entries = [p for p in directory.iterdir() if not p.name.startswith(".")]
    if len(entries) != 1 or not entries[0].is_dir() or entries[0].is_symlink():
        return False

    child = entries[0]
    # Rename first so a grandchild sharing the child's name cannot collide
    staging = directory / f".flatten-{child.name}"
    child.rename(staging)
    for item in staging.iterdir():
        item.rename(directory / item.name)
    staging.rmdir()
    return True


# ============================================================================
# Safe File Operations
# ============================================================================


def atomic_write(
    file_path: Union[str, Path], content: Union[str, bytes], encoding: str = "utf-8"
) -> None:
    """
    Write file atomically using temp file + rename.

    If the write fails, the original file (if any) remains unchanged.

    Args:
        file_path: Path to write to
        content: Content to write (string or bytes)
        encoding: Text encoding (used only for string content)
    """
    file_path = Path(file_path)
    file_path.parent.mkdir(parents=True, exist_ok=True)

    temp_fd, temp_path_str = tempfile.mkstemp(
        dir=file_path.parent, prefix=f".{file_path.name}.", suffix=".tmp"
    )
    temp_path = Path(temp_path_str)

    try:
        if isinstance(content, str):
            with open(temp_fd, "w", encoding=encoding) as f:
                f.write(content)
        else:
            with open(temp_fd, "wb") as f:
                f.write(content)

        temp_path.replace(file_path)

    except Exception:
        temp_path.unlink(missing_ok=True)
        raise


__all__ = [
    "extract_archive",
    "flatten_single_directory",
    "atomic_write",
]
