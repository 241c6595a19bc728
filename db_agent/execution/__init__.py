"""Applying recovered plans to the target project."""
from .executor import (
    CommandExecutionError,
    ExecutionOptions,
    ExecutionReport,
    ExecutorState,
    PlanExecutor,
)
from .files import FileWriteError, WrittenFile, delete_files, find_backups, write_file
from .runner import AUTO_CONFIRM_FLAG, INTERACTIVE_COMMANDS, CommandRunner, ExecutionOutcome

__all__ = [
    "AUTO_CONFIRM_FLAG",
    "CommandExecutionError",
    "CommandRunner",
    "ExecutionOptions",
    "ExecutionOutcome",
    "ExecutionReport",
    "ExecutorState",
    "FileWriteError",
    "INTERACTIVE_COMMANDS",
    "PlanExecutor",
    "WrittenFile",
    "delete_files",
    "find_backups",
    "write_file",
]
