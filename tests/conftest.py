"""Shared test fixtures for resolve-agent tests."""

from __future__ import annotations

import io
from typing import Iterable, Union
from unittest.mock import MagicMock

import pytest
from rich.console import Console

from resolve_agent.core.models import (
    EnvFlavor,
    ExecutionResult,
    PackageKind,
    Target,
)
from resolve_agent.data.store import DataStore


@pytest.fixture
def console() -> Console:
    """Console that writes to an in-memory buffer; read it via ``.file``."""
    return Console(file=io.StringIO(), width=200)


@pytest.fixture
def python_target() -> Target:
    return Target(kind=PackageKind.PYTHON, spec="requests==2.31.0")


@pytest.fixture
def conda_target() -> Target:
    return Target(
        kind=PackageKind.PYTHON, spec="numpy==1.26.0", env=EnvFlavor.CONDA
    )


@pytest.fixture
def npm_target() -> Target:
    return Target(kind=PackageKind.NPM, spec="react@18.2.0")


@pytest.fixture
def requirements_target() -> Target:
    return Target(
        kind=PackageKind.PYTHON, spec="requirements.txt", file_mode=True
    )


@pytest.fixture
def temp_db(tmp_path):
    """DataStore with a temporary SQLite database."""
    db_path = str(tmp_path / "test.db")
    store = DataStore(db_path=db_path)
    yield store
    store.close()


def make_oracle(
    responses: Iterable[Union[str, Exception]] = (),
) -> MagicMock:
    """Oracle double answering ``query`` calls from *responses* in order.

    Exceptions in *responses* are raised instead of returned.
    """
    oracle = MagicMock()
    oracle.query.side_effect = list(responses)
    return oracle


def make_executor(results: dict[str, Union[int, ExecutionResult]]) -> MagicMock:
    """Executor double mapping command text to an exit code or result.

    Commands not in *results* succeed. Every call is recorded on
    ``executor.run``.
    """
    def run(command: str) -> ExecutionResult:
        outcome = results.get(command, 0)
        if isinstance(outcome, ExecutionResult):
            return outcome
        stderr = f"error running {command}" if outcome else ""
        return ExecutionResult(
            command=command, exit_code=outcome, stderr=stderr
        )

    executor = MagicMock()
    executor.run.side_effect = run
    return executor


def make_probe(*exit_codes: int) -> MagicMock:
    """Probe double returning the given exit codes in turn, then success."""
    codes = list(exit_codes)

    def verify(target: Target) -> ExecutionResult:
        code = codes.pop(0) if codes else 0
        return ExecutionResult(
            command=f"pip show {target.package_name}",
            exit_code=code,
            stderr="WARNING: Package(s) not found" if code else "",
        )

    probe = MagicMock()
    probe.verify.side_effect = verify
    return probe
