"""Read-only inspection of the target Next.js project."""
from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Tuple

from ..core.utils.constants import (
    API_KEY_ENV,
    API_ROUTES_DIR,
    BUILD_CONFIG_FILE,
    CONNECTION_FILE,
    DATABASE_DEPENDENCIES,
    DATABASE_URL_ENV,
    FRAMEWORK_DEPENDENCY,
    MANIFEST_FILE,
    MIGRATIONS_DIR,
    REQUIRED_PROJECT_FILES,
    SCHEMA_FILE,
)
from ..core.utils.logger import get_logger

LOGGER = get_logger(__name__)


class ProjectEnvironmentError(RuntimeError):
    """Raised when required project files or variables are missing."""


class PackageManager(str, Enum):
    BUN = "bun"
    YARN = "yarn"
    PNPM = "pnpm"
    NPM = "npm"

    @property
    def runner(self) -> str:
        """Executable used to run a locally installed package binary."""
        return _PACKAGE_RUNNERS[self]


_PACKAGE_RUNNERS = {
    PackageManager.BUN: "bunx",
    PackageManager.YARN: "yarn",
    PackageManager.PNPM: "pnpm",
    PackageManager.NPM: "npx",
}

# Probe order matters: the first lock file found decides.
LOCK_FILES: Tuple[Tuple[PackageManager, Tuple[str, ...]], ...] = (
    (PackageManager.BUN, ("bun.lock", "bun.lockb")),
    (PackageManager.YARN, ("yarn.lock",)),
    (PackageManager.PNPM, ("pnpm-lock.yaml",)),
)


@dataclass(frozen=True)
class DatabaseSetup:
    schema: bool
    connection: bool
    config: bool
    migrations: bool

    @property
    def complete(self) -> bool:
        return self.schema and self.connection and self.config


@dataclass
class ProjectStatus:
    """Snapshot rendered by the ``status`` command."""

    package_manager: PackageManager
    manifest_found: bool
    project_name: Optional[str] = None
    framework_version: Optional[str] = None
    database_dependencies: Dict[str, Optional[str]] = field(default_factory=dict)
    database_setup: Optional[DatabaseSetup] = None
    api_routes: List[str] = field(default_factory=list)
    environment: Dict[str, bool] = field(default_factory=dict)


class ProjectInspector:
    """Observes lock files, the dependency manifest and well-known paths."""

    def __init__(self, project_root: Path) -> None:
        self.project_root = Path(project_root)

    def detect_package_manager(self) -> PackageManager:
        for manager, lock_files in LOCK_FILES:
            if any((self.project_root / name).is_file() for name in lock_files):
                return manager
        return PackageManager.NPM

    def read_manifest(self) -> Optional[Dict[str, Any]]:
        """Return the parsed manifest, or ``None`` when it is missing or malformed."""
        path = self.project_root / MANIFEST_FILE
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            LOGGER.debug("Manifest unavailable at %s: %s", path, exc)
            return None
        return data if isinstance(data, dict) else None

    def installed_dependencies(self) -> Dict[str, str]:
        """Runtime and development dependencies merged into one name -> version map."""
        manifest = self.read_manifest() or {}
        merged: Dict[str, str] = {}
        for section in ("dependencies", "devDependencies"):
            entries = manifest.get(section)
            if isinstance(entries, Mapping):
                merged.update({str(name): str(version) for name, version in entries.items()})
        return merged

    def is_dependency_installed(self, name: str) -> bool:
        # Re-read on every call; install commands may have changed the manifest.
        return name in self.installed_dependencies()

    def validate_project_structure(self) -> bool:
        for rel_path in REQUIRED_PROJECT_FILES:
            if not (self.project_root / rel_path).exists():
                LOGGER.error(
                    "Missing required file: %s. Run this tool from the root of a Next.js project.",
                    rel_path,
                )
                return False
            LOGGER.debug("Found required file: %s", rel_path)

        manifest = self.read_manifest()
        if manifest is None:
            LOGGER.error("Could not read %s", MANIFEST_FILE)
            return False
        dependencies = manifest.get("dependencies")
        if not isinstance(dependencies, Mapping):
            LOGGER.error("%s has no usable 'dependencies' section; not a Next.js project.", MANIFEST_FILE)
            return False
        framework = dependencies.get(FRAMEWORK_DEPENDENCY)
        if not framework:
            LOGGER.error("%s does not declare '%s'; not a Next.js project.", MANIFEST_FILE, FRAMEWORK_DEPENDENCY)
            return False
        LOGGER.info("Next.js project detected: %s", framework)
        return True

    def database_setup(self) -> DatabaseSetup:
        return DatabaseSetup(
            schema=(self.project_root / SCHEMA_FILE).is_file(),
            connection=(self.project_root / CONNECTION_FILE).is_file(),
            config=(self.project_root / BUILD_CONFIG_FILE).is_file(),
            migrations=(self.project_root / MIGRATIONS_DIR).exists(),
        )

    def ensure_environment(self, api_key: Optional[str]) -> PackageManager:
        """Fail before any model call when the project or credentials are unusable."""
        if not self.validate_project_structure():
            raise ProjectEnvironmentError(
                "Project structure is invalid. Run this tool from the root of a Next.js project."
            )
        if not api_key:
            raise ProjectEnvironmentError(
                f"{API_KEY_ENV} is not set. Add it to your .env file or environment."
            )

        package_manager = self.detect_package_manager()
        LOGGER.info("Package manager detected: %s", package_manager.value)
        if not self.database_setup().complete:
            LOGGER.warning("Database setup incomplete - the agent will create the necessary files")
        return package_manager

    def list_api_routes(self) -> List[str]:
        api_dir = self.project_root / API_ROUTES_DIR
        try:
            entries = sorted(api_dir.iterdir(), key=lambda entry: entry.name)
        except OSError:
            return []
        return [f"/api/{entry.name}" for entry in entries if entry.is_dir()]

    def collect_status(self) -> ProjectStatus:
        manifest = self.read_manifest()
        status = ProjectStatus(
            package_manager=self.detect_package_manager(),
            manifest_found=manifest is not None,
            environment={
                API_KEY_ENV: bool(os.environ.get(API_KEY_ENV)),
                DATABASE_URL_ENV: bool(os.environ.get(DATABASE_URL_ENV)),
            },
        )
        if manifest is None:
            return status

        installed = self.installed_dependencies()
        status.project_name = manifest.get("name")
        dependencies = manifest.get("dependencies")
        if isinstance(dependencies, Mapping):
            status.framework_version = dependencies.get(FRAMEWORK_DEPENDENCY)
        status.database_dependencies = {name: installed.get(name) for name in DATABASE_DEPENDENCIES}
        status.database_setup = self.database_setup()
        status.api_routes = self.list_api_routes()
        return status


__all__ = [
    "DatabaseSetup",
    "LOCK_FILES",
    "PackageManager",
    "ProjectEnvironmentError",
    "ProjectInspector",
    "ProjectStatus",
]
