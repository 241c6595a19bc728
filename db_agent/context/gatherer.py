"""Bounded per-query context gathering for the target project."""
from __future__ import annotations

from dataclasses import dataclass, field, replace
from pathlib import Path
from types import MappingProxyType
from typing import Dict, FrozenSet, List, Mapping, Optional, Sequence, Tuple

from ..core.utils.agent_config import AgentConfig
from ..core.utils.constants import (
    BUILD_CONFIG_FILE,
    COMPONENTS_DIR,
    DEFAULT_MAX_FILE_CHARS,
    MAIN_PAGE_FILE,
    SCHEMA_FILE,
    TRUNCATION_MARKER,
)
from ..core.utils.logger import get_logger
from ..project.inspector import PackageManager, ProjectInspector

LOGGER = get_logger(__name__)

FILE_UNIVERSE: Mapping[str, str] = MappingProxyType(
    {
        "main_page": MAIN_PAGE_FILE,
        "layout": "src/app/layout.tsx",
        "sidebar": "src/components/Sidebar.tsx",
        "content_view": "src/components/MainContent.tsx",
        "top_bar": "src/components/TopBar.tsx",
        "player": "src/components/Player.tsx",
        "playlist_card": "src/components/PlaylistCard.tsx",
        "item_card": "src/components/SongCard.tsx",
        "album_card": "src/components/AlbumCard.tsx",
    }
)


@dataclass(frozen=True)
class RelevanceRule:
    """Select ``roles`` when the query contains any of ``keywords`` (case-insensitive)."""

    keywords: Tuple[str, ...]
    roles: Tuple[str, ...]

    def matches(self, query: str) -> bool:
        lowered = query.lower()
        return any(keyword.lower() in lowered for keyword in self.keywords)


# Evaluated top to bottom; the first matching rule wins.
RELEVANCE_RULES: Tuple[RelevanceRule, ...] = (
    RelevanceRule(("playlist",), ("main_page", "sidebar", "playlist_card")),
    RelevanceRule(("recently played", "recent"), ("main_page", "content_view", "item_card", "player")),
    RelevanceRule(("album", "popular", "made for you"), ("main_page", "content_view", "album_card", "playlist_card")),
)
DEFAULT_ROLES: Tuple[str, ...] = ("main_page", "content_view", "sidebar")


@dataclass(frozen=True)
class ContextBundle:
    """Immutable snapshot of project state handed to the model for one query."""

    package_manager: PackageManager
    installed_dependencies: FrozenSet[str]
    project_structure_summary: str
    schema_source: str = ""
    main_page_source: str = ""
    build_config_source: str = ""
    relevant_files: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))
    existing_api_routes: Tuple[str, ...] = ()


@dataclass
class ContextGatheringOptions:
    max_file_chars: int = DEFAULT_MAX_FILE_CHARS
    truncation_marker: str = TRUNCATION_MARKER
    file_universe: Mapping[str, str] = field(default_factory=lambda: FILE_UNIVERSE)
    rules: Sequence[RelevanceRule] = RELEVANCE_RULES
    default_roles: Sequence[str] = DEFAULT_ROLES

    def with_agent_config(self, config: Optional[AgentConfig]) -> "ContextGatheringOptions":
        """Overlay tables from db-agent.yaml on top of these options."""
        if config is None:
            return self
        universe = {**self.file_universe, **config.files}
        rules = [RelevanceRule(keywords, roles) for keywords, roles in config.rules] or list(self.rules)
        return replace(
            self,
            file_universe=MappingProxyType(universe),
            rules=tuple(rules),
            default_roles=config.default_files or self.default_roles,
        )


class ContextGatherer:
    """Build a ContextBundle from inspector data and selectively read sources."""

    def __init__(
        self,
        project_root: Path,
        options: Optional[ContextGatheringOptions] = None,
        *,
        inspector: Optional[ProjectInspector] = None,
    ) -> None:
        self.project_root = Path(project_root)
        self.options = options or ContextGatheringOptions()
        self.inspector = inspector or ProjectInspector(self.project_root)

    def gather(self, query: str) -> ContextBundle:
        LOGGER.info("Gathering project context")
        package_manager = self.inspector.detect_package_manager()
        LOGGER.info("Detected package manager: %s", package_manager.value)

        relevant: Dict[str, str] = {}
        for rel_path in self.select_relevant_paths(query):
            content = self._read_optional(rel_path)
            if content is None:
                LOGGER.debug("Relevant file not present: %s", rel_path)
                continue
            relevant[rel_path] = self._truncate(content)

        return ContextBundle(
            package_manager=package_manager,
            installed_dependencies=frozenset(self.inspector.installed_dependencies()),
            project_structure_summary=summarize_structure(self.project_root),
            schema_source=self._read_optional(SCHEMA_FILE) or "",
            main_page_source=self._read_optional(MAIN_PAGE_FILE) or "",
            build_config_source=self._read_optional(BUILD_CONFIG_FILE) or "",
            relevant_files=MappingProxyType(relevant),
            existing_api_routes=tuple(self.inspector.list_api_routes()),
        )

    def select_relevant_paths(self, query: str) -> List[str]:
        roles: Sequence[str] = self.options.default_roles
        for rule in self.options.rules:
            if rule.matches(query):
                roles = rule.roles
                break

        paths: List[str] = []
        for role in roles:
            rel_path = self.options.file_universe.get(role)
            if rel_path is None:
                LOGGER.warning("Context rule references unknown file role '%s'", role)
                continue
            if rel_path not in paths:
                paths.append(rel_path)
        return paths

    def _read_optional(self, rel_path: str) -> Optional[str]:
        try:
            return (self.project_root / rel_path).read_text(encoding="utf-8", errors="replace")
        except OSError:
            return None

    def _truncate(self, content: str) -> str:
        limit = self.options.max_file_chars
        if len(content) <= limit:
            return content
        return content[:limit] + self.options.truncation_marker


def summarize_structure(project_root: Path) -> str:
    """Return a short indented outline of the app, components and db directories."""
    root = Path(project_root)
    lines: List[str] = ["src/", "  app/"]
    for name in ("page.tsx", "layout.tsx"):
        if (root / "src" / "app" / name).is_file():
            lines.append(f"    {name}")
    lines.append("    api/ (for API routes)")

    lines.append("  components/")
    for name in _list_names(root / COMPONENTS_DIR, suffixes=(".tsx", ".ts")):
        lines.append(f"    {name}")

    lines.append("  db/")
    for name in _list_names(root / "src" / "db", suffixes=(".ts",)) or ["schema.ts", "index.ts"]:
        lines.append(f"    {name}")

    return "\n".join(lines)


def _list_names(directory: Path, *, suffixes: Tuple[str, ...]) -> List[str]:
    try:
        entries = sorted(directory.iterdir(), key=lambda entry: entry.name.lower())
    except OSError:
        return []
    return [entry.name for entry in entries if entry.is_file() and entry.suffix in suffixes]


__all__ = [
    "ContextBundle",
    "ContextGatherer",
    "ContextGatheringOptions",
    "DEFAULT_ROLES",
    "FILE_UNIVERSE",
    "RELEVANCE_RULES",
    "RelevanceRule",
    "summarize_structure",
]
