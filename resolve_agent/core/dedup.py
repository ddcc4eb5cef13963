"""Deduplication of exact and structurally-equivalent commands."""

from __future__ import annotations

from typing import Iterable

from resolve_agent.core.models import Command

PLACEHOLDER = "PACKAGE"

_NORMALIZED_FAMILIES = (
    "pip install",
    "python -m pip install",
    "conda install",
    "npm install",
)
_INSTALL_MARKER = "install "


def normalize_command_pattern(command: str) -> str:
    """Replace the package token of an install command with a placeholder.

    The token is whatever follows the first ``"install "`` up to the next
    space. Only whole whitespace-separated tokens equal to it are replaced,
    so a package name that happens to be a substring of another word
    ("in" inside "install") leaves that word alone.
    """
    if not any(family in command for family in _NORMALIZED_FAMILIES):
        return command

    pos = command.find(_INSTALL_MARKER)
    if pos == -1:
        return command
    rest = command[pos + len(_INSTALL_MARKER):]
    token = rest.split(" ", 1)[0].strip()
    if not token:
        return command

    parts = command.split(" ")
    return " ".join(PLACEHOLDER if part == token else part for part in parts)


def deduplicate_commands(commands: Iterable[str]) -> list[str]:
    """Drop exact and structural duplicates, keeping first occurrences."""
    accepted: list[str] = []
    seen_commands: set[str] = set()
    seen_patterns: set[str] = set()

    for text in commands:
        command = Command(text)
        if command.key in seen_commands:
            continue
        pattern = command.pattern
        if pattern in seen_patterns:
            continue
        seen_commands.add(command.key)
        seen_patterns.add(pattern)
        accepted.append(text)

    return accepted
