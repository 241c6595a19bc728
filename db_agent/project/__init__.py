"""Target project inspection."""
from .inspector import (
    DatabaseSetup,
    PackageManager,
    ProjectEnvironmentError,
    ProjectInspector,
    ProjectStatus,
)

__all__ = [
    "DatabaseSetup",
    "PackageManager",
    "ProjectEnvironmentError",
    "ProjectInspector",
    "ProjectStatus",
]
