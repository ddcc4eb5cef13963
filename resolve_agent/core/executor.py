"""Command executor — runs one shell command with live output."""

from __future__ import annotations

import logging
import subprocess
import sys
from typing import Optional

from rich.console import Console
from rich.markup import escape

from resolve_agent.core.models import ExecutionResult

logger = logging.getLogger(__name__)

PACKAGE_MANAGEMENT_PATTERNS = [
    # install
    "npm install", "yarn install", "pnpm install", "pip install",
    "python -m pip install", "pip3 install", "apt install",
    "apt-get install", "yum install", "dnf install", "brew install",
    "snap install", "flatpak install", "cargo install", "go install",
    "gem install", "composer install", "choco install", "scoop install",
    "winget install", "pacman -s", "zypper install", "nix-env -i",
    "conda install", "poetry install", "pipenv install",
    # update
    "npm update", "yarn upgrade", "pnpm update", "apt update",
    "apt-get update", "yum update", "dnf update", "brew update",
    "snap refresh", "flatpak update", "cargo update", "gem update",
    "composer update", "choco upgrade", "scoop update", "winget upgrade",
    "zypper update", "nix-env -u", "conda update",
    # remove
    "npm uninstall", "npm remove", "yarn remove", "pnpm remove",
    "pip uninstall", "python -m pip uninstall", "pip3 uninstall",
    "apt remove", "apt-get remove", "yum remove", "dnf remove",
    "brew uninstall", "snap remove", "flatpak uninstall",
    "cargo uninstall", "gem uninstall", "composer remove",
    "choco uninstall", "scoop uninstall", "winget uninstall",
    "pacman -r", "zypper remove", "nix-env -e", "conda remove",
]


def is_package_management_command(command: str) -> bool:
    """Check if a command installs, updates or removes packages."""
    cmd = command.lower()
    return any(pat in cmd for pat in PACKAGE_MANAGEMENT_PATTERNS)


def fix_find_exec_command(command: str) -> str:
    """Rewrite ``find ... -exec ... +`` to use ``\\;`` as the terminator.

    The ``+`` terminator does not survive being re-tokenized by ``sh -c``.
    Only a trailing ``+`` is rewritten; one inside a path or argument is
    left alone.
    """
    if not (
        command.lstrip().startswith("find ")
        and "-exec" in command
        and command.rstrip().endswith(" +")
    ):
        return command

    pos = command.rfind(" +")
    if command[pos + 2:].strip():
        return command
    return command[:pos] + r" \;"


class CommandExecutor:
    """Runs commands through ``sh -c``, streaming stdout and capturing stderr."""

    def __init__(
        self,
        console: Optional[Console] = None,
        timeout: Optional[float] = None,
    ):
        self.console = console or Console()
        self.timeout = timeout

    def run(self, command: str) -> ExecutionResult:
        """Execute *command* and return its result.

        A non-zero exit is a normal result. Spawn errors, signals and
        timeouts are reported with exit code -1.
        """
        managed = is_package_management_command(command)
        if managed:
            self.console.print(
                "[bold green]resolve-agent: Executing package management "
                "command[/]"
            )
            self.console.print(
                f"[green]resolve-agent: Command: {escape(command)}[/]"
            )
            self.console.print("[green]resolve-agent: Live output:[/]")

        fixed = fix_find_exec_command(command)
        if fixed != command:
            self.console.print(
                f"[dim]Adjusted command for compatibility: {escape(fixed)}[/]"
            )

        logger.debug("Running: %s (timeout=%s)", fixed, self.timeout)
        try:
            proc = subprocess.run(
                ["sh", "-c", fixed],
                stdin=subprocess.PIPE,
                stderr=subprocess.PIPE,
                text=True,
                timeout=self.timeout,
            )
        except subprocess.TimeoutExpired:
            return ExecutionResult(
                command=command,
                exit_code=-1,
                stderr=f"Command timed out after {self.timeout} seconds",
            )
        except OSError as e:
            return ExecutionResult(
                command=command,
                exit_code=-1,
                stderr=f"Failed to execute command '{command}': {e}",
            )

        stderr = proc.stderr or ""
        if stderr:
            sys.stderr.write(stderr)
            sys.stderr.flush()

        exit_code = proc.returncode if proc.returncode >= 0 else -1
        result = ExecutionResult(
            command=command,
            exit_code=exit_code,
            stdout=proc.stdout or "",
            stderr=stderr,
        )

        if managed:
            if result.success:
                self.console.print(
                    "[bold green]resolve-agent: Command completed "
                    "successfully[/]"
                )
            else:
                self.console.print(
                    f"[bold red]resolve-agent: Command failed with exit "
                    f"code: {exit_code}[/]"
                )
        return result
