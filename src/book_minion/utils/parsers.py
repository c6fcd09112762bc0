"""
Argument and command parsing utilities.

Cross-cutting utilities for parsing user input and command arguments.
"""

import shlex
from typing import List


def parse_command(user_input: str) -> tuple[str, List[str]]:
    """
    Parse user input into command and arguments.

    Quoted arguments are kept together, so file names with spaces work:
    ``open "Chapter 01.mp3" "Chapter 02.mp3"``. Unbalanced quotes fall back
    to plain whitespace splitting.

    Args:
        user_input: Raw user input string

    Returns:
        Tuple of (command, args) where command is lowercase and args is a list
    """
    try:
        parts = shlex.split(user_input)
    except ValueError:
        parts = user_input.strip().split()
    if not parts:
        return "", []

    command = parts[0].lower()
    args = parts[1:]
    return command, args


def parse_position(value: str, count: int) -> int:
    """
    Parse a 1-based position typed by the user into a 0-based index.

    Raises:
        ValueError: If value isn't a number between 1 and count
    """
    try:
        position = int(value)
    except ValueError:
        raise ValueError(f"'{value}' is not a number") from None
    if not 1 <= position <= count:
        raise ValueError(f"Position must be between 1 and {count}")
    return position - 1


__all__ = ["parse_command", "parse_position"]
