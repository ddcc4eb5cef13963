"""Resolution loop — executes command batches and replans after failures."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Callable, Optional

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel

from resolve_agent.core.dedup import deduplicate_commands
from resolve_agent.core.exceptions import OracleError
from resolve_agent.core.executor import CommandExecutor
from resolve_agent.core.extractor import extract_commands
from resolve_agent.core.llm import OracleClient, load_system_prompt
from resolve_agent.core.loop_detector import LoopDetector
from resolve_agent.core.models import (
    MAX_ATTEMPTS,
    ErrorRecord,
    ExecutionResult,
    ResolutionSession,
    SessionOutcome,
    SessionResult,
    Target,
)
from resolve_agent.core.prompts import build_replan_prompt
from resolve_agent.core.targets import is_installation_command
from resolve_agent.core.verification import VerificationProbe

logger = logging.getLogger(__name__)

ConfirmCallback = Callable[[str], bool]

_STDERR_EXCERPT = 2000


def parse_confirmation(answer: str) -> bool:
    """Interpret a confirmation answer; only "n"/"no" decline."""
    return answer.strip().lower() not in ("n", "no")


@dataclass
class BatchReport:
    """What happened while one batch was executed."""

    verified: bool = False
    has_failures: bool = False
    install_failed: bool = False
    next_commands: list[str] = field(default_factory=list)
    oracle_error: Optional[str] = None


class ResolutionLoop:
    """Drives confirm → execute → verify → replan until a terminal outcome."""

    def __init__(
        self,
        target: Target,
        oracle: OracleClient,
        system_prompt: Optional[str] = None,
        executor: Optional[CommandExecutor] = None,
        probe: Optional[VerificationProbe] = None,
        console: Optional[Console] = None,
        auto_confirm: bool = False,
        confirm_callback: Optional[ConfirmCallback] = None,
        max_attempts: int = MAX_ATTEMPTS,
    ):
        self.target = target
        self.oracle = oracle
        self.system_prompt = (
            system_prompt if system_prompt is not None else load_system_prompt()
        )
        self.console = console or Console()
        self.executor = executor or CommandExecutor(console=self.console)
        self.probe = probe or VerificationProbe(self.executor, self.console)
        self.max_attempts = min(max_attempts, MAX_ATTEMPTS)
        self.loop_detector = LoopDetector()
        self._loop_breaker: Optional[str] = None

        self.confirm_callback: ConfirmCallback
        if auto_confirm:
            self.confirm_callback = lambda _: True
        else:
            self.confirm_callback = confirm_callback or self._interactive_confirm

    def run(self, initial_response: str) -> SessionResult:
        """Run a session starting from the oracle's first response."""
        start_time = time.time()
        session = ResolutionSession(target=self.target)
        session.batch = deduplicate_commands(extract_commands(initial_response))

        if not session.batch:
            self.console.print(
                "[yellow]No executable commands found in AI response.[/]"
            )
            self.console.print("[bold]AI Response:[/]")
            self.console.print(escape(initial_response))
            session.outcome = SessionOutcome.EMPTY
            return self._finish(session, start_time)

        error_message: Optional[str] = None
        verified = False
        question = "Execute these resolution commands?"
        while session.batch:
            self._display_batch(session.batch, first=session.attempt_count == 0)
            if not self.confirm_callback(question):
                self.console.print("[yellow]Resolution commands not executed.[/]")
                session.outcome = SessionOutcome.ABORTED
                break
            question = "Execute these new resolution commands?"

            session.attempt_count += 1
            logger.info(
                "Attempt %d/%d: %d commands",
                session.attempt_count, self.max_attempts, len(session.batch),
            )
            report = self._execute_batch(session)

            if report.verified:
                verified = True
                session.outcome = SessionOutcome.SUCCESS
                break
            if report.oracle_error is not None:
                session.outcome = SessionOutcome.ORACLE_FAILED
                error_message = report.oracle_error
                break

            session.batch = deduplicate_commands(report.next_commands)
            if not session.batch:
                # Only the batch just run counts; earlier failures were replanned
                if not report.install_failed:
                    session.outcome = SessionOutcome.SUCCESS
                elif session.attempt_count >= self.max_attempts:
                    session.outcome = SessionOutcome.EXHAUSTED
                else:
                    session.outcome = SessionOutcome.UNRESOLVED
                break
            if session.attempt_count >= self.max_attempts:
                session.outcome = SessionOutcome.EXHAUSTED
                break

        if session.outcome == SessionOutcome.EXHAUSTED:
            error_message = (
                f"Failed to install {self.target.describe()} after "
                f"{session.attempt_count} attempts"
            )
        elif session.outcome == SessionOutcome.UNRESOLVED:
            error_message = (
                f"Failed to install {self.target.describe()}: no further "
                f"resolution commands to try"
            )
        return self._finish(session, start_time, error_message, verified)

    def _execute_batch(self, session: ResolutionSession) -> BatchReport:
        report = BatchReport()
        self.console.print(
            f"\n[dim]─── Attempt {session.attempt_count}/{self.max_attempts}: "
            f"executing {len(session.batch)} commands ───[/]"
        )

        for index, command in enumerate(session.batch, 1):
            self.console.print(f"\n[bold cyan]{index}. $ {escape(command)}[/]")
            result = self.executor.run(command)
            installing = is_installation_command(command, self.target)

            if result.success:
                self.console.print("[green]Command completed successfully[/]")
                if not installing:
                    continue
                probe_result = self.probe.verify(self.target)
                if probe_result.success:
                    report.verified = True
                    return report
                self.console.print(
                    "[yellow]Installation command succeeded but "
                    "verification failed[/]"
                )
                session.errors.append(ErrorRecord(
                    command=command,
                    exit_code=probe_result.exit_code,
                    stderr=(
                        f"installation reported success but "
                        f"'{probe_result.command}' could not confirm it: "
                        f"{probe_result.stderr[:_STDERR_EXCERPT]}"
                    ),
                ))
                self._note_repeat(probe_result)
            else:
                self._display_failure(result)
                session.errors.append(ErrorRecord(
                    command=command,
                    exit_code=result.exit_code,
                    stderr=result.stderr[:_STDERR_EXCERPT],
                ))
                self._note_repeat(result)

            report.has_failures = True
            if not installing:
                continue
            report.install_failed = True

            if session.attempt_count >= self.max_attempts:
                logger.info("Attempt budget spent, not replanning")
                continue
            try:
                report.next_commands.extend(self._replan(session))
            except OracleError as e:
                self.console.print(
                    f"[red]Failed to get new resolution commands from AI: "
                    f"{escape(str(e))}[/]"
                )
                report.oracle_error = (
                    f"Failed to get error resolution from AI: {e}"
                )
                return report

        return report

    def _note_repeat(self, result: ExecutionResult) -> None:
        warning = self.loop_detector.check(result)
        if warning.is_loop:
            self.console.print(
                f"[yellow]Loop detected: {escape(warning.message)}[/]"
            )
            self._loop_breaker = self.loop_detector.get_loop_breaker_message()

    def _replan(self, session: ResolutionSession) -> list[str]:
        """Ask the oracle for corrective commands based on the error history."""
        self.console.print(
            "[bold]Analyzing error and requesting new resolution steps...[/]"
        )
        prompt = build_replan_prompt(
            session.target, session.errors, self._loop_breaker
        )
        self._loop_breaker = None
        response = self.oracle.query(self.system_prompt, prompt)
        commands = extract_commands(response)
        logger.debug("Replan produced %d commands", len(commands))
        if not commands:
            self.console.print(
                "[yellow]AI response contained no executable commands.[/]"
            )
        return commands

    def _display_batch(self, batch: list[str], first: bool) -> None:
        if first:
            self.console.print("\n[bold]Suggested commands:[/]")
        else:
            self.console.print(
                f"\n[bold]AI generated {len(batch)} new resolution commands:[/]"
            )
        for i, command in enumerate(batch, 1):
            self.console.print(f"  [cyan]{i}.[/] {escape(command)}")

    def _display_failure(self, result: ExecutionResult) -> None:
        self.console.print(
            f"[red]Command failed with exit code: {result.exit_code}[/]"
        )

    def _finish(
        self,
        session: ResolutionSession,
        start_time: float,
        error_message: Optional[str] = None,
        verified: bool = False,
    ) -> SessionResult:
        result = SessionResult(
            outcome=session.outcome,
            session_id=session.session_id,
            attempts=session.attempt_count,
            duration_seconds=time.time() - start_time,
            errors=session.errors.lines(),
            error_message=error_message,
            verified=verified,
        )
        logger.info(
            "Session %s finished: %s after %d attempts",
            result.session_id, result.outcome.value, result.attempts,
        )
        self._display_final_result(result)
        return result

    def _display_final_result(self, result: SessionResult) -> None:
        """Display the final session result."""
        self.console.print()
        subject = escape(self.target.describe())
        stats = (
            f"Attempts: {result.attempts}\n"
            f"Duration: {result.duration_seconds:.1f}s"
        )

        if result.outcome == SessionOutcome.SUCCESS:
            if result.verified:
                headline = (
                    f"{subject[0].upper() + subject[1:]} successfully "
                    f"installed and verified!"
                )
            else:
                headline = "All resolution commands completed"
            self.console.print(
                Panel(
                    f"[bold green]{headline}[/]\n{stats}",
                    title="Resolution Complete",
                    border_style="green",
                )
            )
        elif result.outcome == SessionOutcome.ABORTED:
            self.console.print(
                Panel(
                    f"[bold yellow]Stopped by user[/]\n{stats}",
                    title="Resolution Aborted",
                    border_style="yellow",
                )
            )
        elif result.outcome == SessionOutcome.EMPTY:
            self.console.print(
                Panel(
                    "[bold yellow]Nothing to execute[/]",
                    title="Resolution Skipped",
                    border_style="yellow",
                )
            )
        else:
            self.console.print(
                Panel(
                    f"[bold red]Resolution failed[/]\n{stats}\n"
                    f"Error: {escape(result.error_message or '')}",
                    title="Resolution Failed",
                    border_style="red",
                )
            )
            if result.errors:
                self.console.print("[bold]Error history:[/]")
                for i, error in enumerate(result.errors, 1):
                    self.console.print(f"  {i}. {escape(error)}")

    def _interactive_confirm(self, message: str) -> bool:
        """Prompt on stdout and read one line; default is yes."""
        try:
            answer = self.console.input(
                f"\n[yellow]{message}[/] {escape('[Y/n]')}: "
            )
        except EOFError:
            return False
        return parse_confirmation(answer)
