"""Shell command classification and execution."""
from __future__ import annotations

import os
import re
import shlex
import subprocess
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, List, Mapping, Optional, Sequence, Tuple

import click

from ..core.utils.logger import get_logger

LOGGER = get_logger(__name__)

# Scaffolding subcommands that prompt the operator and need a real terminal.
INTERACTIVE_COMMANDS: Tuple[str, ...] = (
    "drizzle-kit generate",
    "drizzle-kit push",
    "drizzle-kit migrate",
    "drizzle-kit studio",
)
AUTO_CONFIRM_FLAG = "--yes"
COMMAND_NOT_FOUND_EXIT = 127

_SHELL_CONTROL_TOKENS = {"|", "||", "&&", ";", ";;", "(", ")"}
_SHELL_REDIRECTION_PATTERN = re.compile(r"^\d*(?:>>|>|<<|<<<|<|<>|>&|<&|&>|>\||\|&)")
_ENV_ASSIGNMENT_PATTERN = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*\+?=.*")
_SUBSTITUTION_MARKERS: tuple[str, ...] = ("$(", "${", "`")


@dataclass(frozen=True)
class ExecutionOutcome:
    command: str
    exit_code: int
    interactive: bool

    @property
    def succeeded(self) -> bool:
        return self.exit_code == 0


def _wrap_with_shell(command: str) -> list[str]:
    if os.name == "nt":
        comspec = os.environ.get("COMSPEC", "cmd.exe")
        return [comspec, "/S", "/C", command]

    shell_path = os.environ.get("SHELL")
    if not shell_path:
        return ["/bin/sh", "-c", command]

    shell_name = Path(shell_path).name.lower()
    if shell_name in {"bash", "zsh", "fish", "ksh"}:
        return [shell_path, "-lc", command]
    return [shell_path, "-c", command]


def _contains_shell_controls(tokens: Sequence[str]) -> bool:
    for token in tokens:
        if not token:
            continue
        if token in _SHELL_CONTROL_TOKENS:
            return True
        if _SHELL_REDIRECTION_PATTERN.match(token):
            return True
        if _ENV_ASSIGNMENT_PATTERN.match(token):
            return True
        if any(marker in token for marker in _SUBSTITUTION_MARKERS):
            return True
    return False


def build_argv(command: str) -> list[str]:
    """Split a command line, deferring to the shell when it uses shell syntax."""
    try:
        tokens = shlex.split(command)
    except ValueError:
        return _wrap_with_shell(command)
    if not tokens or _contains_shell_controls(tokens):
        return _wrap_with_shell(command)
    return tokens


class CommandRunner:
    """Run plan commands one at a time in the project root."""

    def __init__(
        self,
        project_root: Path,
        *,
        interactive_commands: Sequence[str] = INTERACTIVE_COMMANDS,
        env: Optional[Mapping[str, str]] = None,
        echo: Callable[..., None] = click.echo,
    ) -> None:
        self.project_root = Path(project_root)
        self.interactive_commands = tuple(interactive_commands)
        self.env = dict(env) if env is not None else None
        self.echo = echo

    def is_interactive(self, command: str) -> bool:
        return any(pattern in command for pattern in self.interactive_commands)

    def prepare(self, command: str, *, auto_confirm: bool) -> Tuple[str, bool]:
        """Return the command to run and whether it needs the operator's terminal."""
        if not self.is_interactive(command):
            return command, False
        if not auto_confirm:
            return command, True
        if AUTO_CONFIRM_FLAG in _safe_tokens(command):
            return command, False
        return f"{command} {AUTO_CONFIRM_FLAG}", False

    def run(self, command: str, *, interactive: bool) -> ExecutionOutcome:
        argv = build_argv(command)
        LOGGER.debug("Running %s (interactive=%s): %s", command, interactive, argv, extra={"command": command})
        try:
            if interactive:
                exit_code = self._run_attached(argv)
            else:
                exit_code = self._run_captured(argv)
        except OSError as exc:
            LOGGER.error("Failed to start command %r: %s", command, exc, extra={"command": command})
            exit_code = COMMAND_NOT_FOUND_EXIT
        return ExecutionOutcome(command=command, exit_code=exit_code, interactive=interactive)

    def _run_attached(self, argv: List[str]) -> int:
        # stdin/stdout/stderr are inherited from the agent process.
        completed = subprocess.run(argv, cwd=str(self.project_root), env=self.env, check=False)
        return completed.returncode

    def _run_captured(self, argv: List[str]) -> int:
        with subprocess.Popen(
            argv,
            cwd=str(self.project_root),
            env=self.env,
            stdin=subprocess.DEVNULL,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            text=True,
            errors="replace",
        ) as process:
            assert process.stdout is not None and process.stderr is not None
            stderr = process.stderr

            def consume_stderr() -> None:
                for line in stderr:
                    self.echo(line, nl=False, err=True)

            stderr_thread = threading.Thread(target=consume_stderr, daemon=True)
            stderr_thread.start()
            for line in process.stdout:
                self.echo(line, nl=False)
            stderr_thread.join()
            return process.wait()


def _safe_tokens(command: str) -> List[str]:
    try:
        return shlex.split(command)
    except ValueError:
        return command.split()


__all__ = [
    "AUTO_CONFIRM_FLAG",
    "CommandRunner",
    "ExecutionOutcome",
    "INTERACTIVE_COMMANDS",
    "build_argv",
]
