"""Configuration loading utilities for the database agent."""
from __future__ import annotations

import os
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional, Sequence

from dotenv import load_dotenv

from .constants import API_KEY_ENV, DEFAULT_MAX_FILE_CHARS, DEFAULT_PREVIEW_CHARS

CONFIG_FILENAMES: tuple[str, ...] = (".db-agent.toml", "db-agent.toml")
DEFAULT_CONFIG_PATHS = (
    Path.home() / ".config" / "db-agent" / "config.toml",
    Path.home() / ".db-agent.toml",
)
ENV_PREFIX = "DB_AGENT_"

_BOOL_FIELDS = {"include_thoughts", "structured_logging", "audit_approvals"}
_INT_FIELDS = {"max_retries", "max_file_chars", "preview_chars"}
_FLOAT_FIELDS = {"request_timeout"}
_PATH_FIELDS = {"workspace_root", "audit_file"}


def find_config_in_parents(
    start_path: Path, config_name: str | Sequence[str] = CONFIG_FILENAMES
) -> Optional[Path]:
    """Search parent directories starting from ``start_path`` for configuration files."""

    if isinstance(config_name, str):
        candidate_names: tuple[str, ...] = (config_name,)
    else:
        candidate_names = tuple(config_name)

    current = start_path.resolve()
    if current.is_file():
        current = current.parent

    while True:
        for name in candidate_names:
            candidate = current / name
            if candidate.is_file():
                return candidate.resolve()
        if current.parent == current:
            break
        current = current.parent
    return None


@dataclass
class Settings:
    """Process-wide configuration, built once and passed to every component."""

    provider: str = "gemini"
    model: str = "gemini-2.5-pro"
    api_key: Optional[str] = None
    base_url: str = "https://generativelanguage.googleapis.com/v1beta"
    request_timeout: float = 120.0
    max_retries: int = 3
    include_thoughts: bool = True
    workspace_root: Path = Path(".")
    max_file_chars: int = DEFAULT_MAX_FILE_CHARS
    preview_chars: int = DEFAULT_PREVIEW_CHARS
    log_level: str = "INFO"
    structured_logging: bool = False
    audit_approvals: bool = False
    audit_file: Path = Path(".db-agent/approvals.log")

    def resolved_audit_file(self) -> Optional[Path]:
        """Return the approval audit log path, or ``None`` when auditing is off."""
        if not self.audit_approvals:
            return None
        if self.audit_file.is_absolute():
            return self.audit_file
        return self.workspace_root / self.audit_file


def _cast_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        return value.lower() in {"1", "true", "on", "yes", "y"}
    return bool(value)


def _coerce(field: str, value: Any) -> Any:
    if field in _BOOL_FIELDS:
        return _cast_bool(value)
    if field in _INT_FIELDS:
        return int(value)
    if field in _FLOAT_FIELDS:
        return float(value)
    if field in _PATH_FIELDS:
        return Path(value)
    return value


def _load_from_file(path: Path) -> Dict[str, Any]:
    if not path.is_file():
        return {}
    with path.open("rb") as handle:
        data = tomllib.load(handle)
    return {k.replace("-", "_"): v for k, v in data.items()}


def _load_from_env(prefix: str = ENV_PREFIX) -> Dict[str, Any]:
    env: Dict[str, Any] = {}
    for key, value in os.environ.items():
        if not key.startswith(prefix):
            continue
        env[key[len(prefix) :].lower()] = value
    return env


def _search_file_data() -> Dict[str, Any]:
    cwd = Path.cwd()
    search_paths = []
    project_config = find_config_in_parents(cwd)
    if project_config:
        search_paths.append(project_config)
    search_paths.extend(DEFAULT_CONFIG_PATHS)
    for candidate in search_paths:
        data = _load_from_file(candidate)
        if data:
            return data
    return {}


def load_settings(explicit_path: Optional[Path] = None) -> Settings:
    """Load configuration, merging file, ``.env`` and environment sources."""

    file_data = _load_from_file(explicit_path) if explicit_path else _search_file_data()

    workspace_root = Path(file_data.get("workspace_root", os.environ.get(f"{ENV_PREFIX}WORKSPACE_ROOT", ".")))
    if not workspace_root.is_absolute():
        workspace_root = (Path.cwd() / workspace_root).resolve()
    # Variables already present in the environment win over the project's .env
    load_dotenv(workspace_root / ".env", override=False)

    merged: Dict[str, Any] = {**file_data, **_load_from_env()}
    if not merged.get("api_key") and os.environ.get(API_KEY_ENV):
        merged["api_key"] = os.environ[API_KEY_ENV]

    known_fields = set(Settings.__dataclass_fields__)
    init_kwargs = {key: _coerce(key, value) for key, value in merged.items() if key in known_fields}
    settings = Settings(**init_kwargs)
    if not settings.workspace_root.is_absolute():
        settings.workspace_root = (Path.cwd() / settings.workspace_root).resolve()
    return settings


__all__ = ["Settings", "load_settings", "find_config_in_parents", "CONFIG_FILENAMES"]
