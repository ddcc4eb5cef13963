"""Command extraction — pull runnable lines out of free-form oracle text."""

from __future__ import annotations

COMMAND_PREFIXES = (
    "cp ",
    "grep ",
    "find ",
    "ps ",
    "mkdir ",
    "npm ",
    "pip ",
    "python -m pip ",
    "conda ",
    "pyenv ",
    "nvm ",
    "brew ",
    "rm -rf ",
    "yarn ",
    "poetry ",
    "pipenv ",
)

_FENCE = "```"


def extract_commands(text: str) -> list[str]:
    """Return trimmed lines of *text* that start with a known command prefix.

    Code fence lines are skipped and the scan continues past them. Order is
    preserved. An empty list means the response held nothing executable.
    """
    commands: list[str] = []
    for line in text.splitlines():
        trimmed = line.strip()
        if trimmed.startswith(_FENCE):
            continue
        if trimmed.startswith(COMMAND_PREFIXES):
            commands.append(trimmed)
    return commands
