"""Post-install verification with read-only package manager queries."""

from __future__ import annotations

import logging
from typing import Optional

from rich.console import Console
from rich.markup import escape

from resolve_agent.core.executor import CommandExecutor
from resolve_agent.core.models import (
    EnvFlavor,
    ExecutionResult,
    PackageKind,
    Target,
)

logger = logging.getLogger(__name__)


def probe_command(target: Target) -> str:
    """Pick the listing command that confirms *target* is installed."""
    if target.kind == PackageKind.NPM:
        tool = "npm list"
    elif target.env == EnvFlavor.CONDA:
        tool = "conda list"
    elif target.file_mode:
        tool = "pip list"
    else:
        tool = "pip show"

    if target.file_mode:
        return tool
    return f"{tool} {target.package_name}"


class VerificationProbe:
    """Confirms an installation independently of the installer's exit code."""

    def __init__(
        self,
        executor: CommandExecutor,
        console: Optional[Console] = None,
    ):
        self.executor = executor
        self.console = console or executor.console

    def verify(self, target: Target) -> ExecutionResult:
        command = probe_command(target)
        self.console.print(
            f"[dim]Verifying installation: {escape(command)}[/]"
        )
        logger.debug("Verification probe for %s: %s", target.spec, command)

        result = self.executor.run(command)
        if result.success:
            self.console.print("[green]Verification successful[/]")
        else:
            self.console.print(
                f"[red]Verification failed (exit code {result.exit_code})[/]"
            )
        return result
