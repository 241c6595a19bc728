"""Shared utilities: configuration, logging and constants."""
from __future__ import annotations

from .agent_config import AgentConfig, load_agent_yaml
from .config import Settings, load_settings
from .logger import configure_logging, get_logger, set_correlation_id

__all__ = [
    "AgentConfig",
    "Settings",
    "configure_logging",
    "get_logger",
    "load_agent_yaml",
    "load_settings",
    "set_correlation_id",
]
