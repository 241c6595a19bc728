"""CLI package exposing the db-agent command entry points."""
from __future__ import annotations

from .commands import cleanup, cli, main, migrate, run, status
from .utils import get_llm_client
from ..core.utils.config import Settings, load_settings

__all__ = [
    "Settings",
    "cleanup",
    "cli",
    "get_llm_client",
    "load_settings",
    "main",
    "migrate",
    "run",
    "status",
]
