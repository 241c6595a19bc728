"""Drop install commands for dependencies the project already declares."""
from __future__ import annotations

import shlex
from pathlib import PurePath
from typing import Iterable, List, Optional, Protocol

from ..core.utils.logger import get_logger

LOGGER = get_logger(__name__)

PACKAGE_MANAGERS = frozenset({"npm", "yarn", "pnpm", "bun"})
INSTALL_VERBS = frozenset({"install", "i", "add"})
TYPES_SCOPE = "@types/"


class DependencyLookup(Protocol):
    def is_dependency_installed(self, name: str) -> bool:
        ...


def _split(command: str) -> List[str]:
    try:
        return shlex.split(command)
    except ValueError:
        return command.split()


def _normalize_package(token: str) -> str:
    if token.startswith(TYPES_SCOPE):
        token = token[len(TYPES_SCOPE):]
    if token.startswith("@"):
        name, _, _ = token[1:].partition("@")
        return f"@{name}"
    return token.partition("@")[0]


def extract_install_candidate(command: str) -> Optional[str]:
    """Return the first package named by an install command, if any.

    Only the first non-flag argument is considered, so multi-package installs
    and flags that take a separate value can be mis-read.
    """
    tokens = _split(command)
    for index, token in enumerate(tokens[:-1]):
        if PurePath(token).name not in PACKAGE_MANAGERS or tokens[index + 1] not in INSTALL_VERBS:
            continue
        for argument in tokens[index + 2 :]:
            if argument.startswith("-"):
                continue
            return _normalize_package(argument) or None
        return None
    return None


def filter_install_commands(commands: Iterable[str], inspector: DependencyLookup) -> List[str]:
    """Keep order; drop an install command if its package (or ``@types/`` variant) is present."""
    kept: List[str] = []
    for command in commands:
        package = extract_install_candidate(command)
        if package and (
            inspector.is_dependency_installed(package)
            or inspector.is_dependency_installed(f"{TYPES_SCOPE}{package}")
        ):
            LOGGER.info("Skipping %s - already installed", package)
            continue
        kept.append(command)
    return kept


__all__ = ["extract_install_candidate", "filter_install_commands"]
