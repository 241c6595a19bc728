"""Core building blocks shared across the agent."""
from __future__ import annotations

from .approval import ApprovalManager, ApprovalPolicy
from .utils import (
    AgentConfig,
    Settings,
    configure_logging,
    get_logger,
    load_agent_yaml,
    load_settings,
    set_correlation_id,
)

__all__ = [
    "AgentConfig",
    "ApprovalManager",
    "ApprovalPolicy",
    "Settings",
    "configure_logging",
    "get_logger",
    "load_agent_yaml",
    "load_settings",
    "set_correlation_id",
]
