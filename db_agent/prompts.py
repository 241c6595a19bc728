"""Prompt templates for plan generation."""
from __future__ import annotations

from typing import Iterable, Mapping

from .context.gatherer import ContextBundle

SYSTEM_BASE = """You are an expert full-stack developer specializing in Next.js, TypeScript, and Drizzle ORM.
You are working on a music streaming app clone and need to implement database features with frontend integration."""

REQUIREMENTS_TEMPLATE = """
**CRITICAL REQUIREMENTS:**
1. Use {pm} as the package manager
2. Only install dependencies that are NOT already installed
3. Integrate backend APIs into existing frontend components
4. Keep the existing UI/UX design intact; only add data fetching functionality
5. Use a simple, functional implementation with no user management
6. Focus on displaying the requested data in the existing UI components
"""

RESPONSE_FORMAT = """
**RESPONSE FORMAT (JSON only):**
{
  "plan": ["step 1", "step 2"],
  "files_to_modify": [
    {
      "filePath": "path/to/file",
      "newContent": "complete file content"
    }
  ],
  "commands_to_run": ["command1", "command2"]
}
"""

COMMAND_RULES_TEMPLATE = """
**COMMAND GENERATION RULES:**
- Use "{pm}" instead of npm
- Only include install commands for dependencies NOT in the installed list
- For drizzle commands use "{runner} drizzle-kit generate" and "{runner} drizzle-kit push"
- For scripts use "{pm} run <script>"
"""

IMPLEMENTATION_RULES = """
**IMPLEMENTATION REQUIREMENTS:**
1. Create or update the database schema in src/db/schema.ts
2. Create API endpoints in src/app/api/[route]/route.ts
3. Modify existing components to fetch and display data from the new APIs
4. Add proper TypeScript types
5. Include loading states and error handling
6. Use the existing UI components and styling
7. Populate tables with realistic sample data (titles, artists, cover images, durations)
8. Ensure the frontend actually calls the new APIs and displays the data

Respond with the JSON object only. Every file in files_to_modify must contain its complete new content.
"""


def _fenced(language: str, body: str) -> str:
    return f"```{language}\n{body or '// (not present)'}\n```"


def _format_relevant(files: Mapping[str, str]) -> str:
    if not files:
        return "None"
    return "\n".join(f"**{path}:**\n{_fenced('tsx', content)}\n" for path, content in files.items())


def _format_list(items: Iterable[str]) -> str:
    joined = ", ".join(sorted(items))
    return joined or "None"


def build_prompt(query: str, bundle: ContextBundle) -> str:
    """Render the single text prompt sent to the model for ``query``."""
    pm = bundle.package_manager.value
    sections = [
        SYSTEM_BASE,
        REQUIREMENTS_TEMPLATE.format(pm=pm),
        f"**ALREADY INSTALLED DEPENDENCIES:**\n{_format_list(bundle.installed_dependencies)}",
        "**PROJECT CONTEXT:**",
        f"Package Manager: {pm}",
        f"Structure:\n{bundle.project_structure_summary}",
        f"Drizzle Config:\n{_fenced('typescript', bundle.build_config_source)}",
        f"Current Schema:\n{_fenced('typescript', bundle.schema_source)}",
        f"Main Page:\n{_fenced('tsx', bundle.main_page_source)}",
        f"Relevant Components:\n{_format_relevant(bundle.relevant_files)}",
        f"Existing API Routes: {', '.join(bundle.existing_api_routes) or 'None'}",
        f'**USER REQUEST:** "{query}"',
        RESPONSE_FORMAT,
        COMMAND_RULES_TEMPLATE.format(pm=pm, runner=bundle.package_manager.runner),
        IMPLEMENTATION_RULES,
    ]
    return "\n\n".join(section.strip("\n") for section in sections)


__all__ = ["build_prompt"]
