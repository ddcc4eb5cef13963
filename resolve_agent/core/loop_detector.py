"""Loop detector — notices when replanning keeps producing the same failure."""

from __future__ import annotations

import hashlib
from collections import defaultdict
from dataclasses import dataclass

from resolve_agent.core.models import ExecutionResult


@dataclass
class LoopWarning:
    is_loop: bool
    message: str = ""


class LoopDetector:
    """Detects when the same command keeps failing with the same error."""

    def __init__(self, max_repeats: int = 2):
        self.max_repeats = max_repeats
        self._failure_counts: dict[str, int] = defaultdict(int)

    def check(self, result: ExecutionResult) -> LoopWarning:
        """Record *result* and report whether it repeats an earlier failure."""
        if result.success:
            return LoopWarning(is_loop=False)

        key = (
            f"{self._hash_command(result.command)}:"
            f"{self._hash_error(result)}"
        )
        self._failure_counts[key] += 1

        count = self._failure_counts[key]
        if count >= self.max_repeats:
            return LoopWarning(
                is_loop=True,
                message=(
                    f"Command '{result.command}' has failed with the same "
                    f"error {count} times."
                ),
            )
        return LoopWarning(is_loop=False)

    def get_loop_breaker_message(self) -> str:
        """Return text to append to the next replanning prompt."""
        return (
            "IMPORTANT: Your previous suggestions keep failing with the same "
            "error. Do NOT repeat a command that already failed. Consider:\n"
            "- A different version of the package that supports this platform\n"
            "- Uninstalling conflicting packages first\n"
            "- Installing missing build tools or system libraries\n"
            "- Clearing the package manager cache"
        )

    @staticmethod
    def _hash_command(command: str) -> str:
        normalized = " ".join(command.lower().split())
        return hashlib.sha256(normalized.encode()).hexdigest()[:12]

    @staticmethod
    def _hash_error(result: ExecutionResult) -> str:
        error_text = f"{result.exit_code}:{result.stderr.strip()}"
        return hashlib.sha256(error_text.encode()).hexdigest()[:12]
