"""Public package interface for the database agent."""
from __future__ import annotations

from importlib import metadata as _metadata

try:  # pragma: no cover - fallback when not installed
    __version__ = _metadata.version("db-agent")
except _metadata.PackageNotFoundError:  # pragma: no cover
    __version__ = "0.1.0"

from . import context, core, execution, planning, project, providers
from .agent import DatabaseAgent
from .context import ContextBundle, ContextGatherer, ContextGatheringOptions
from .core import (
    ApprovalManager,
    ApprovalPolicy,
    Settings,
    configure_logging,
    get_logger,
    load_settings,
)
from .execution import (
    CommandExecutionError,
    CommandRunner,
    ExecutionOptions,
    ExecutorState,
    FileWriteError,
    PlanExecutor,
)
from .planning import (
    EmptyResponseError,
    FileEdit,
    MalformedJsonError,
    Plan,
    PlanRecoveryError,
    SchemaInvalidError,
    recover_plan,
)
from .project import PackageManager, ProjectEnvironmentError, ProjectInspector
from .providers.llm import (
    GeminiClient,
    LLMClient,
    LLMConnectionError,
    LLMError,
    LLMRateLimitError,
    LLMResponseError,
    LLMTimeoutError,
    RetryConfig,
    StreamHooks,
    create_client,
)

__all__ = [
    "__version__",
    "ApprovalManager",
    "ApprovalPolicy",
    "CommandExecutionError",
    "CommandRunner",
    "ContextBundle",
    "ContextGatherer",
    "ContextGatheringOptions",
    "DatabaseAgent",
    "EmptyResponseError",
    "ExecutionOptions",
    "ExecutorState",
    "FileEdit",
    "FileWriteError",
    "GeminiClient",
    "LLMClient",
    "LLMConnectionError",
    "LLMError",
    "LLMRateLimitError",
    "LLMResponseError",
    "LLMTimeoutError",
    "MalformedJsonError",
    "PackageManager",
    "Plan",
    "PlanExecutor",
    "PlanRecoveryError",
    "ProjectEnvironmentError",
    "ProjectInspector",
    "RetryConfig",
    "SchemaInvalidError",
    "Settings",
    "StreamHooks",
    "configure_logging",
    "context",
    "core",
    "create_client",
    "execution",
    "get_logger",
    "load_settings",
    "planning",
    "project",
    "providers",
    "recover_plan",
]
