"""
Cross-cutting utilities for Book Minion.

Contains:
- parsers: Command and argument parsing
"""

from .parsers import parse_command, parse_position

__all__ = [
    "parse_command",
    "parse_position",
]
