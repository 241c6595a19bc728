"""Helper utilities shared across CLI commands."""
from __future__ import annotations

from typing import Any, Dict, Optional, Sequence

import click

from ..core.approval import ApprovalManager, ApprovalPolicy
from ..core.utils.agent_config import AgentConfig, load_agent_yaml
from ..core.utils.config import Settings
from ..core.utils.logger import get_logger
from ..execution.runner import INTERACTIVE_COMMANDS, CommandRunner
from ..project.inspector import PackageManager, ProjectStatus
from ..providers.llm import LLMClient, create_client

LOGGER = get_logger(__name__)

RATE_LIMIT_REMEDIES = (
    "Wait a few minutes and try again",
    "Upgrade your Gemini API plan for higher limits",
    "Use a cheaper model (for example gemini-2.5-flash) via DB_AGENT_MODEL",
    "Break the query into smaller requests",
)

MIGRATION_REMEDIES = (
    "Check your DATABASE_URL environment variable",
    "Ensure your database is running and accessible",
    "Try running migrations manually:",
)


def _build_context(settings: Settings) -> Dict[str, Any]:
    return {
        "settings": settings,
        "llm_client": None,
        "agent_config": load_agent_yaml(settings.workspace_root),
    }


def get_llm_client(ctx: click.Context) -> LLMClient:
    client = ctx.obj.get("llm_client")
    if client:
        return client
    settings: Settings = ctx.obj["settings"]
    if not settings.api_key:
        raise click.ClickException("No API key configured. Set GEMINI_API_KEY or DB_AGENT_API_KEY.")

    client = create_client(
        provider=settings.provider,
        api_key=settings.api_key,
        model=settings.model,
        base_url=settings.base_url or None,
        timeout=settings.request_timeout,
        include_thoughts=settings.include_thoughts,
    )
    ctx.obj["llm_client"] = client
    return client


def build_approvals(settings: Settings, policy: ApprovalPolicy) -> ApprovalManager:
    return ApprovalManager(policy, audit_file=settings.resolved_audit_file())


def build_runner(settings: Settings, agent_config: Optional[AgentConfig]) -> CommandRunner:
    interactive = INTERACTIVE_COMMANDS
    if agent_config and agent_config.interactive_commands:
        interactive = agent_config.interactive_commands
    return CommandRunner(settings.workspace_root, interactive_commands=interactive)


def format_remedies(header: str, remedies: Sequence[str], extra: Sequence[str] = ()) -> str:
    lines = [header, "", "Possible solutions:"]
    lines.extend(f"{index}. {remedy}" for index, remedy in enumerate(remedies, start=1))
    lines.extend(extra)
    return "\n".join(lines)


def echo_next_steps(package_manager: PackageManager) -> None:
    pm = package_manager.value
    click.echo("\nTry running your Next.js app to see the changes:")
    click.echo(f"   {pm} run dev")
    click.echo("If something doesn't work, check the console for errors and try:")
    click.echo(f"   {pm} run build")


def _mark(flag: bool) -> str:
    return "[x]" if flag else "[ ]"


def render_status(status: ProjectStatus) -> None:
    click.echo(f"Package manager: {status.package_manager.value}")
    if not status.manifest_found:
        click.secho("Not a valid Node.js project or missing package.json", fg="red")
        return

    click.echo(f"Project: {status.project_name or 'Unnamed'}")
    click.echo(f"Next.js: {status.framework_version or 'Not found'}")

    click.echo("\nDatabase dependencies:")
    for name, version in status.database_dependencies.items():
        click.echo(f"  {_mark(bool(version))} {name}: {version or 'Not installed'}")

    setup = status.database_setup
    if setup is not None:
        click.echo("\nDatabase setup:")
        for label, present in (
            ("Schema", setup.schema),
            ("Connection", setup.connection),
            ("Drizzle config", setup.config),
            ("Migrations", setup.migrations),
        ):
            click.echo(f"  {_mark(present)} {label}: {'Found' if present else 'Not found'}")

    click.echo(f"\nAPI routes: {len(status.api_routes)} found")
    for route in status.api_routes:
        click.echo(f"  - {route}")

    click.echo("\nEnvironment:")
    for name, present in status.environment.items():
        click.echo(f"  {_mark(present)} {name}: {'Set' if present else 'Not set'}")


__all__ = [
    "MIGRATION_REMEDIES",
    "RATE_LIMIT_REMEDIES",
    "build_approvals",
    "build_runner",
    "echo_next_steps",
    "format_remedies",
    "get_llm_client",
    "render_status",
]
