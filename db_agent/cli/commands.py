"""Command definitions for the database agent CLI."""
from __future__ import annotations

import uuid
from pathlib import Path

import click

from .. import __version__
from ..agent import DatabaseAgent
from ..core.approval import ApprovalPolicy
from ..core.utils.config import Settings, load_settings
from ..core.utils.logger import configure_logging, get_logger, set_correlation_id
from ..execution import (
    AUTO_CONFIRM_FLAG,
    CommandExecutionError,
    CommandRunner,
    ExecutionOptions,
    ExecutorState,
    FileWriteError,
    PlanExecutor,
    delete_files,
    find_backups,
)
from ..planning import PlanRecoveryError
from ..project import ProjectEnvironmentError, ProjectInspector
from ..providers.llm import LLMError, LLMRateLimitError
from .utils import (
    MIGRATION_REMEDIES,
    RATE_LIMIT_REMEDIES,
    _build_context,
    build_approvals,
    build_runner,
    echo_next_steps,
    format_remedies,
    get_llm_client,
    render_status,
)

LOGGER = get_logger(__name__)


@click.group()
@click.version_option(__version__, prog_name="db-agent")
@click.option("--config", "config_path", type=click.Path(path_type=Path), help="Path to config file.")
@click.option("--verbose", is_flag=True, help="Enable verbose logging output.")
@click.pass_context
def cli(ctx: click.Context, config_path: Path | None, verbose: bool) -> None:
    """AI agent for database tasks in a Next.js project."""
    settings = load_settings(config_path)
    if verbose:
        settings.log_level = "DEBUG"
    configure_logging(settings.log_level, structured=settings.structured_logging)
    ctx.obj = _build_context(settings)


@cli.command()
@click.argument("query")
@click.option("-y", "--yes", is_flag=True, help="Skip confirmation prompts.")
@click.option("--dry-run", is_flag=True, help="Show what would be done without doing it.")
@click.option("--backup/--no-backup", default=True, show_default=True, help="Back up files before overwriting them.")
@click.option("--auto-confirm", is_flag=True, help="Automatically confirm drizzle schema changes.")
@click.pass_context
def run(ctx: click.Context, query: str, yes: bool, dry_run: bool, backup: bool, auto_confirm: bool) -> None:
    """Execute a database-related QUERY against the current project."""
    settings: Settings = ctx.obj["settings"]
    set_correlation_id(uuid.uuid4().hex[:12])
    click.echo("Database agent starting...")

    inspector = ProjectInspector(settings.workspace_root)
    try:
        package_manager = inspector.ensure_environment(settings.api_key)
    except ProjectEnvironmentError as exc:
        raise click.ClickException(str(exc)) from exc

    click.echo(f'Processing query: "{query}"')
    agent = DatabaseAgent(
        settings,
        get_llm_client(ctx),
        agent_config=ctx.obj.get("agent_config"),
        inspector=inspector,
    )
    try:
        plan = agent.run(query)
    except LLMRateLimitError as exc:
        raise click.ClickException(
            format_remedies(f"Rate limit exceeded after {settings.max_retries} attempts: {exc}", RATE_LIMIT_REMEDIES)
        ) from exc
    except LLMError as exc:
        raise click.ClickException(f"Model request failed: {exc}") from exc
    except PlanRecoveryError as exc:
        raise click.ClickException(f"Agent failed to generate a valid plan: {exc}") from exc

    executor = PlanExecutor(
        settings.workspace_root,
        build_approvals(settings, ApprovalPolicy.unattended(yes)),
        build_runner(settings, ctx.obj.get("agent_config")),
        ExecutionOptions(
            yes=yes,
            dry_run=dry_run,
            backup=backup,
            auto_confirm=auto_confirm,
            preview_chars=settings.preview_chars,
        ),
    )
    try:
        report = executor.execute(plan)
    except FileWriteError as exc:
        raise click.ClickException(f"{exc}. Aborting; no commands were run.") from exc
    except CommandExecutionError as exc:
        raise click.ClickException(f"{exc}\nYou may need to run it manually.") from exc

    if report.state is ExecutorState.DONE and report.failed_commands:
        click.secho("\nAgent finished the plan, but some commands failed.", fg="yellow")
        echo_next_steps(package_manager)
    elif report.state is ExecutorState.DONE:
        click.secho("\nAgent has finished executing the plan!", fg="green")
        echo_next_steps(package_manager)


@cli.command()
@click.pass_context
def status(ctx: click.Context) -> None:
    """Check the current project status and database setup."""
    settings: Settings = ctx.obj["settings"]
    click.echo("Checking project status...\n")
    render_status(ProjectInspector(settings.workspace_root).collect_status())


@cli.command()
@click.option("--generate", is_flag=True, help="Generate new migration files.")
@click.option("--push", is_flag=True, help="Push schema changes to the database.")
@click.option("--auto-confirm", is_flag=True, help="Automatically confirm schema changes.")
@click.pass_context
def migrate(ctx: click.Context, generate: bool, push: bool, auto_confirm: bool) -> None:
    """Run drizzle-kit migrations manually."""
    settings: Settings = ctx.obj["settings"]
    prefix = ProjectInspector(settings.workspace_root).detect_package_manager().runner
    runner = CommandRunner(settings.workspace_root)

    steps = []
    if generate:
        steps.append(("Generating migration files...", "generate"))
    if push:
        steps.append(("Pushing schema changes to database...", "push"))
    if not steps:
        click.echo("Running full migration process...")
        steps = [
            ("Step 1: Generating migration files...", "generate"),
            ("Step 2: Pushing schema changes...", "push"),
        ]

    for message, subcommand in steps:
        click.echo(message)
        command = f"{prefix} drizzle-kit {subcommand}"
        if auto_confirm:
            command = f"{command} {AUTO_CONFIRM_FLAG}"
        outcome = runner.run(command, interactive=not auto_confirm)
        if not outcome.succeeded:
            raise click.ClickException(
                format_remedies(
                    f"Migration failed: '{command}' exited with code {outcome.exit_code}",
                    MIGRATION_REMEDIES,
                    extra=(f"   {prefix} drizzle-kit generate", f"   {prefix} drizzle-kit push"),
                )
            )

    click.secho("\nDatabase migrations completed successfully!", fg="green")


@cli.command()
@click.option("--dry-run", is_flag=True, help="Show what would be cleaned without deleting anything.")
@click.option("-y", "--yes", is_flag=True, help="Delete without asking for confirmation.")
@click.pass_context
def cleanup(ctx: click.Context, dry_run: bool, yes: bool) -> None:
    """Clean up backup files created by the agent."""
    settings: Settings = ctx.obj["settings"]
    root = settings.workspace_root
    backups = find_backups(root)
    if not backups:
        click.echo("No backup files found")
        return

    click.echo(f"Found {len(backups)} backup files:")
    for path in backups:
        click.echo(f"  - {path.relative_to(root)}")

    if dry_run:
        click.echo("\nDry run - no files were deleted.")
        return

    approvals = build_approvals(settings, ApprovalPolicy(auto_approve_cleanup=yes))
    if not approvals.require("cleanup", prompt="\nDelete these backup files?"):
        click.echo("Cleanup cancelled")
        return

    deleted, failed = delete_files(backups)
    for path in deleted:
        click.echo(f"Deleted: {path.relative_to(root)}")
    for path in failed:
        click.secho(f"Failed to delete: {path.relative_to(root)}", fg="red", err=True)
    click.echo("\nCleanup complete!")
    if failed:
        ctx.exit(1)


def main() -> None:
    cli(prog_name="db-agent")


if __name__ == "__main__":  # pragma: no cover
    main()
