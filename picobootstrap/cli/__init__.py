"""
pico-bootstrap CLI module.

This module provides the command-line interface for pico-bootstrap.
"""

from .parser import CLI, main
from . import utils

__all__ = ["CLI", "main", "utils"]
