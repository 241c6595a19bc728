"""File writes, backups and backup discovery inside the project root."""
from __future__ import annotations

import os
import shutil
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Tuple

from ..core.utils.constants import BACKUP_MARKER, DEFAULT_IGNORED_PROJECT_DIRS
from ..core.utils.logger import get_logger

LOGGER = get_logger(__name__)


class FileWriteError(RuntimeError):
    """Raised when a plan file cannot be written."""

    def __init__(self, file_path: str, message: str) -> None:
        super().__init__(f"Failed to write {file_path}: {message}")
        self.file_path = file_path


@dataclass(frozen=True)
class WrittenFile:
    path: Path
    backup_path: Optional[Path] = None


def resolve_inside(project_root: Path, rel_path: str) -> Path:
    """Resolve ``rel_path`` against the root, rejecting anything that escapes it."""
    root = Path(project_root).resolve()
    target = (root / rel_path).resolve()
    if target != root and root not in target.parents:
        raise FileWriteError(rel_path, "path resolves outside the project root")
    if target == root:
        raise FileWriteError(rel_path, "path is the project root")
    return target


def backup_path_for(path: Path, timestamp: str) -> Path:
    return path.with_name(f"{path.name}{BACKUP_MARKER}{timestamp}")


def write_file(
    project_root: Path,
    rel_path: str,
    content: str,
    *,
    backup_timestamp: Optional[str] = None,
) -> WrittenFile:
    """Overwrite one file, creating parents and optionally backing up the old content."""
    target = resolve_inside(project_root, rel_path)
    backup: Optional[Path] = None
    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        if backup_timestamp and target.is_file():
            backup = backup_path_for(target, backup_timestamp)
            shutil.copy2(target, backup)
            LOGGER.debug("Backed up %s to %s", target, backup)
        target.write_text(content, encoding="utf-8")
    except OSError as exc:
        raise FileWriteError(rel_path, str(exc)) from exc
    return WrittenFile(path=target, backup_path=backup)


def find_backups(root: Path) -> List[Path]:
    """Recursively list files following the backup naming convention."""
    backups: List[Path] = []
    for current, dirnames, filenames in os.walk(root):
        dirnames[:] = sorted(name for name in dirnames if name not in DEFAULT_IGNORED_PROJECT_DIRS)
        for name in sorted(filenames):
            if BACKUP_MARKER in name:
                backups.append(Path(current) / name)
    return backups


def delete_files(paths: List[Path]) -> Tuple[List[Path], List[Path]]:
    """Delete each path independently; return (deleted, failed)."""
    deleted: List[Path] = []
    failed: List[Path] = []
    for path in paths:
        try:
            path.unlink()
        except OSError as exc:
            LOGGER.error("Failed to delete %s: %s", path, exc)
            failed.append(path)
            continue
        deleted.append(path)
    return deleted, failed


__all__ = [
    "FileWriteError",
    "WrittenFile",
    "backup_path_for",
    "delete_files",
    "find_backups",
    "resolve_inside",
    "write_file",
]
