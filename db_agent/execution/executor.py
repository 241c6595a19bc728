"""Plan executor: presentation, confirmation, file writes and command execution."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Callable, List, Optional

import click

from ..core.approval import ApprovalManager
from ..core.utils.constants import (
    BACKUP_TIMESTAMP_FORMAT,
    DEFAULT_PREVIEW_CHARS,
    PREVIEW_ELISION,
    RULE_WIDTH,
)
from ..core.utils.logger import get_logger
from ..planning.models import Plan
from .files import FileWriteError, WrittenFile, write_file
from .runner import CommandRunner, ExecutionOutcome

LOGGER = get_logger(__name__)


class ExecutorState(str, Enum):
    PRESENTED = "presented"
    DRY_RUN_EXIT = "dry_run_exit"
    CONFIRMING = "confirming"
    CONFIRMED = "confirmed"
    WRITING_FILES = "writing_files"
    RUNNING_COMMANDS = "running_commands"
    DONE = "done"
    ABORTED = "aborted"


class CommandExecutionError(RuntimeError):
    """Raised when a command fails and nobody is there to decide what happens next."""

    def __init__(self, outcome: ExecutionOutcome) -> None:
        super().__init__(f"Command failed with exit code {outcome.exit_code}: {outcome.command}")
        self.outcome = outcome


@dataclass
class ExecutionOptions:
    yes: bool = False
    dry_run: bool = False
    backup: bool = True
    auto_confirm: bool = False
    preview_chars: int = DEFAULT_PREVIEW_CHARS


@dataclass
class ExecutionReport:
    state: ExecutorState = ExecutorState.PRESENTED
    history: List[ExecutorState] = field(default_factory=list)
    written_files: List[WrittenFile] = field(default_factory=list)
    outcomes: List[ExecutionOutcome] = field(default_factory=list)

    @property
    def failed_commands(self) -> List[ExecutionOutcome]:
        return [outcome for outcome in self.outcomes if not outcome.succeeded]

    @property
    def backups(self) -> List[Path]:
        return [item.backup_path for item in self.written_files if item.backup_path is not None]


class PlanExecutor:
    """Drive one plan through the execution state machine."""

    def __init__(
        self,
        project_root: Path,
        approvals: ApprovalManager,
        runner: CommandRunner,
        options: Optional[ExecutionOptions] = None,
        *,
        echo: Callable[..., None] = click.echo,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self.project_root = Path(project_root)
        self.approvals = approvals
        self.runner = runner
        self.options = options or ExecutionOptions()
        self.echo = echo
        self.clock = clock
        self.report = ExecutionReport()

    def execute(self, plan: Plan) -> ExecutionReport:
        self.report = ExecutionReport()
        self._transition(ExecutorState.PRESENTED)
        self.present(plan)

        if self.options.dry_run:
            self.preview(plan)
            self._transition(ExecutorState.DRY_RUN_EXIT)
            self.echo("\nDry run complete - no changes were made.")
            return self.report

        self._transition(ExecutorState.CONFIRMING)
        if not self.approvals.require(
            "changes", prompt="\nDo you want to proceed with these changes?"
        ):
            self.echo("Operation cancelled by user.")
            self._transition(ExecutorState.ABORTED)
            return self.report
        self._transition(ExecutorState.CONFIRMED)

        self._transition(ExecutorState.WRITING_FILES)
        try:
            self._write_files(plan)
        except FileWriteError:
            self._transition(ExecutorState.ABORTED)
            raise

        if plan.commands_to_run:
            self._transition(ExecutorState.RUNNING_COMMANDS)
            if not self._run_commands(plan.commands_to_run):
                self._transition(ExecutorState.ABORTED)
                return self.report

        self._transition(ExecutorState.DONE)
        self.summarize()
        return self.report

    # ------------------------------------------------------------------
    # Presentation
    # ------------------------------------------------------------------

    def present(self, plan: Plan) -> None:
        rule = "=" * RULE_WIDTH
        self.echo("\n" + rule)
        self.echo("EXECUTION PLAN")
        self.echo(rule)
        self.echo("\nSteps:")
        for index, step in enumerate(plan.steps, start=1):
            self.echo(f"  {index}. {step}")
        if plan.files_to_modify:
            self.echo("\nFiles to modify:")
            for edit in plan.files_to_modify:
                self.echo(f"  - {edit.file_path}")
        if plan.commands_to_run:
            self.echo("\nCommands to run:")
            for command in plan.commands_to_run:
                self.echo(f"  $ {command}")
        self.echo(rule)

    def preview(self, plan: Plan) -> None:
        limit = self.options.preview_chars
        self.echo("\nDry run - previewing file contents:")
        for edit in plan.files_to_modify:
            content = edit.new_content
            shown = content[:limit] + (PREVIEW_ELISION if len(content) > limit else "")
            self.echo()
            self.echo(f"--- {edit.file_path} ---")
            self.echo(shown)
            self.echo(f"--- End of {edit.file_path} ---")

    def summarize(self) -> None:
        self.echo("\n" + "=" * RULE_WIDTH)
        self.echo(f"Files written: {len(self.report.written_files)}")
        for item in self.report.written_files:
            self.echo(f"  - {item.path.relative_to(self.project_root.resolve())}")
        if self.report.backups:
            self.echo(f"Backups created: {len(self.report.backups)}")
        failed_commands = self.report.failed_commands
        if self.report.outcomes:
            self.echo(f"Commands run: {len(self.report.outcomes)} ({len(failed_commands)} failed)")
        if failed_commands:
            names = ", ".join(outcome.command for outcome in failed_commands)
            self.echo(f"Changes applied, but {len(failed_commands)} command(s) failed: {names}. Run them manually.")
        else:
            self.echo("All changes have been applied.")

    # ------------------------------------------------------------------
    # Side effects
    # ------------------------------------------------------------------

    def _write_files(self, plan: Plan) -> None:
        timestamp = self.clock().strftime(BACKUP_TIMESTAMP_FORMAT) if self.options.backup else None
        for edit in plan.files_to_modify:
            try:
                written = write_file(
                    self.project_root, edit.file_path, edit.new_content, backup_timestamp=timestamp
                )
            except FileWriteError as exc:
                LOGGER.error("%s", exc)
                self.echo(f"Error: {exc}", err=True)
                raise
            self.report.written_files.append(written)
            self.echo(f"Updated: {edit.file_path}")
            if written.backup_path is not None:
                LOGGER.info("Backup saved to %s", written.backup_path)

    def _run_commands(self, commands: List[str]) -> bool:
        """Run commands in order; return ``False`` when the operator stops the queue."""
        total = len(commands)
        for index, original in enumerate(commands, start=1):
            command, interactive = self.runner.prepare(original, auto_confirm=self.options.auto_confirm)
            suffix = " (interactive)" if interactive else ""
            self.echo(f"\n[{index}/{total}] Running{suffix}: {command}")
            outcome = self.runner.run(command, interactive=interactive)
            self.report.outcomes.append(outcome)
            if outcome.succeeded:
                continue

            self.echo(f"Command failed with exit code {outcome.exit_code}: {command}", err=True)
            self.echo("You may need to run it manually.", err=True)
            if self.options.yes:
                self._transition(ExecutorState.ABORTED)
                raise CommandExecutionError(outcome)
            if index == total:
                break
            if not self.approvals.require("continue", prompt="Continue with remaining commands?"):
                self.echo("Stopping execution.")
                return False
        return True

    def _transition(self, state: ExecutorState) -> None:
        LOGGER.debug("Executor state: %s -> %s", self.report.state.value, state.value)
        self.report.state = state
        self.report.history.append(state)


__all__ = [
    "CommandExecutionError",
    "ExecutionOptions",
    "ExecutionReport",
    "ExecutorState",
    "PlanExecutor",
]
