"""Plan recovery, validation and command filtering."""
from .command_filter import extract_install_candidate, filter_install_commands
from .models import FileEdit, Plan
from .recovery import (
    EmptyResponseError,
    MalformedJsonError,
    PlanRecoveryError,
    SchemaInvalidError,
    recover_plan,
)

__all__ = [
    "EmptyResponseError",
    "FileEdit",
    "MalformedJsonError",
    "Plan",
    "PlanRecoveryError",
    "SchemaInvalidError",
    "extract_install_candidate",
    "filter_install_commands",
    "recover_plan",
]
