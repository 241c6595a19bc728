"""Reader for db-agent.yaml (context rules and command tables).

Only a small subset is understood: the context file universe, the keyword rule
table, the default file set, and the list of interactive commands. If the YAML
file is missing or unusable, callers fall back to the built-in tables.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import yaml

from .logger import get_logger

LOGGER = get_logger(__name__)

AGENT_CONFIG_FILENAME = "db-agent.yaml"


@dataclass
class AgentConfig:
    files: Dict[str, str] = field(default_factory=dict)
    rules: List[Tuple[Tuple[str, ...], Tuple[str, ...]]] = field(default_factory=list)
    default_files: Tuple[str, ...] = ()
    interactive_commands: Tuple[str, ...] = ()


def load_agent_yaml(project_root: Path, path: Path | None = None) -> Optional[AgentConfig]:
    """Load db-agent.yaml into an AgentConfig or return None if unavailable."""
    candidate = path or (project_root / AGENT_CONFIG_FILENAME)
    if not candidate.is_file():
        return None
    try:
        data = yaml.safe_load(candidate.read_text(encoding="utf-8")) or {}
    except (OSError, yaml.YAMLError) as exc:
        LOGGER.warning("Ignoring unreadable %s: %s", candidate, exc)
        return None
    if not isinstance(data, dict):
        return None

    cfg = AgentConfig()
    files = data.get("files")
    if isinstance(files, dict):
        cfg.files = {str(role): str(rel) for role, rel in files.items()}

    for entry in data.get("rules") or []:
        if not isinstance(entry, dict):
            continue
        keywords = _as_strings(entry.get("keywords"))
        roles = _as_strings(entry.get("files"))
        if keywords and roles:
            cfg.rules.append((keywords, roles))

    cfg.default_files = _as_strings(data.get("default_files"))
    cfg.interactive_commands = _as_strings(data.get("interactive_commands"))
    return cfg


def _as_strings(value: Any) -> Tuple[str, ...]:
    if isinstance(value, str):
        return (value,)
    if isinstance(value, list):
        return tuple(str(item) for item in value if item is not None)
    return ()


__all__ = ["AgentConfig", "load_agent_yaml", "AGENT_CONFIG_FILENAME"]
