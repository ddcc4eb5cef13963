"""Core data models for resolve-agent."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterator, Optional

MAX_ATTEMPTS = 15


class PackageKind(Enum):
    NPM = "npm"
    PYTHON = "python"


class EnvFlavor(Enum):
    VENV = "venv"
    CONDA = "conda"


class SessionOutcome(Enum):
    SUCCESS = "success"
    ABORTED = "aborted"
    EXHAUSTED = "exhausted"
    UNRESOLVED = "unresolved"
    ORACLE_FAILED = "oracle_failed"
    EMPTY = "empty"


@dataclass(frozen=True)
class Target:
    kind: PackageKind
    spec: str  # package spec ("requests==2.31.0") or dependency file path
    file_mode: bool = False
    env: EnvFlavor = EnvFlavor.VENV

    @property
    def package_name(self) -> str:
        from resolve_agent.core.targets import extract_package_name

        return extract_package_name(self.spec)

    @property
    def package_manager(self) -> str:
        if self.kind == PackageKind.NPM:
            return "npm"
        if self.env == EnvFlavor.CONDA:
            return "conda"
        return "pip"

    def describe(self) -> str:
        if self.file_mode:
            return f"dependencies from '{self.spec}'"
        return f"package '{self.spec}'"


@dataclass(frozen=True)
class Command:
    """An extracted command and its deduplication identity."""

    text: str

    @property
    def key(self) -> str:
        return self.text.strip().lower()

    @property
    def pattern(self) -> str:
        from resolve_agent.core.dedup import normalize_command_pattern

        return normalize_command_pattern(self.key)


@dataclass
class ExecutionResult:
    command: str
    exit_code: int = 0  # -1 when the process terminated abnormally
    stdout: str = ""
    stderr: str = ""

    @property
    def success(self) -> bool:
        return self.exit_code == 0


@dataclass(frozen=True)
class ErrorRecord:
    command: str
    exit_code: int
    stderr: str = ""

    def format(self) -> str:
        return (
            f"Command '{self.command}' failed with exit code "
            f"{self.exit_code}: {self.stderr}"
        )


class ErrorHistory:
    """Append-only record of failures for one session."""

    def __init__(self) -> None:
        self._records: list[ErrorRecord] = []

    def append(self, record: ErrorRecord) -> None:
        self._records.append(record)

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[ErrorRecord]:
        return iter(list(self._records))

    def __bool__(self) -> bool:
        return bool(self._records)

    def summary(self) -> str:
        return "\n".join(r.format() for r in self._records)

    def lines(self) -> list[str]:
        return [r.format() for r in self._records]


@dataclass
class ResolutionSession:
    target: Target
    batch: list[str] = field(default_factory=list)
    attempt_count: int = 0
    errors: ErrorHistory = field(default_factory=ErrorHistory)
    outcome: Optional[SessionOutcome] = None
    session_id: str = field(default_factory=lambda: str(uuid.uuid4()))

    @property
    def is_terminal(self) -> bool:
        return self.outcome is not None


@dataclass
class SessionResult:
    outcome: SessionOutcome
    session_id: str
    attempts: int
    duration_seconds: float
    errors: list[str] = field(default_factory=list)
    error_message: Optional[str] = None
    verified: bool = False

    @property
    def success(self) -> bool:
        return self.outcome == SessionOutcome.SUCCESS

    @property
    def exit_code(self) -> int:
        if self.outcome in (
            SessionOutcome.SUCCESS,
            SessionOutcome.ABORTED,
            SessionOutcome.EMPTY,
        ):
            return 0
        return 1
