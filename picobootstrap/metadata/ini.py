"""
Parser for the sectioned key=value format of supportedToolchains.ini.

    ; comment
    [14_2_Rel1]
    darwin_arm64 = https://.../arm-gnu-toolchain-14.2.rel1-darwin-arm64-arm-none-eabi.tar.xz
    linux_x64 = https://.../arm-gnu-toolchain-14.2.rel1-x86_64-arm-none-eabi.tar.xz

The upstream file is produced loosely, so the parser is lenient: lines
without '=' and key/value lines before the first section header are skipped
rather than reported.
"""

from typing import Dict


def parse_index(content: str) -> Dict[str, Dict[str, str]]:
    """
    Parse index text into {section: {key: value}}.

    Args:
        content: File content

    Returns:
        Mapping of section name to its key/value pairs. A repeated section
        header starts that section over; a repeated key keeps the last value.
    """
    sections: Dict[str, Dict[str, str]] = {}
    current = None

    for line in content.splitlines():
        stripped = line.strip()

        if not stripped or stripped.startswith((";", "#")):
            continue

        if stripped.startswith("[") and stripped.endswith("]"):
            current = stripped[1:-1]
            sections[current] = {}
            continue

        if current is None or "=" not in stripped:
            continue

        key, value = stripped.split("=", 1)
        sections[current][key.strip()] = value.strip()

    return sections


__all__ = ["parse_index"]
