import json

from click.testing import CliRunner

import db_agent.cli.commands as commands_module
from db_agent.cli import cli
from db_agent.execution import ExecutionOutcome
from db_agent.providers.llm.base import LLMRateLimitError, PartKind, StreamChunk, StreamPart

PAYLOAD = {
    "plan": ["Create songs route"],
    "files_to_modify": [{"filePath": "src/app/api/songs/route.ts", "newContent": "export {}\n"}],
    "commands_to_run": [],
}


class FakeClient:
    model = "fake"

    def __init__(self, answer=None, error=None):
        self.answer = answer if answer is not None else json.dumps(PAYLOAD)
        self.error = error

    def open_stream(self, prompt):
        if self.error is not None:
            raise self.error
        return iter([StreamChunk(parts=(StreamPart(PartKind.ANSWER, self.answer),))])


def _use_client(monkeypatch, client):
    monkeypatch.setattr(commands_module, "get_llm_client", lambda ctx: client)


def _invoke(project, *args, input=None):
    return CliRunner().invoke(cli, ["--config", str(project / "missing.toml"), *args], input=input)


def test_run_requires_api_key(nextjs_project, monkeypatch):
    monkeypatch.chdir(nextjs_project)

    result = _invoke(nextjs_project, "run", "show songs")

    assert result.exit_code == 1
    assert "GEMINI_API_KEY" in result.output


def test_run_rejects_non_next_project(tmp_path, monkeypatch):
    monkeypatch.setenv("GEMINI_API_KEY", "key")

    result = _invoke(tmp_path, "run", "show songs")

    assert result.exit_code == 1
    assert "Next.js" in result.output


def test_run_dry_run(nextjs_project, monkeypatch):
    monkeypatch.chdir(nextjs_project)
    monkeypatch.setenv("GEMINI_API_KEY", "key")
    _use_client(monkeypatch, FakeClient())

    result = _invoke(nextjs_project, "run", "show songs", "--dry-run")

    assert result.exit_code == 0, result.output
    assert "--- src/app/api/songs/route.ts ---" in result.output
    assert not (nextjs_project / "src" / "app" / "api").exists()


def test_run_applies_plan_after_confirmation(nextjs_project, monkeypatch):
    monkeypatch.chdir(nextjs_project)
    monkeypatch.setenv("GEMINI_API_KEY", "key")
    _use_client(monkeypatch, FakeClient())

    result = _invoke(nextjs_project, "run", "show songs", input="y\n")

    assert result.exit_code == 0, result.output
    assert (nextjs_project / "src" / "app" / "api" / "songs" / "route.ts").read_text() == "export {}\n"
    assert "npm run dev" in result.output


def test_run_reports_failed_last_command(nextjs_project, monkeypatch):
    monkeypatch.chdir(nextjs_project)
    monkeypatch.setenv("GEMINI_API_KEY", "key")
    _use_client(monkeypatch, FakeClient(answer=json.dumps({**PAYLOAD, "commands_to_run": ["npm run build"]})))

    class FailingRunner:
        def prepare(self, command, *, auto_confirm):
            return command, False

        def run(self, command, *, interactive):
            return ExecutionOutcome(command, 1, interactive)

    monkeypatch.setattr(commands_module, "build_runner", lambda settings, agent_config: FailingRunner())

    result = _invoke(nextjs_project, "run", "show songs", input="y\n")

    assert result.exit_code == 0, result.output
    assert "1 command(s) failed: npm run build" in result.output
    assert "some commands failed" in result.output
    assert "All changes have been applied." not in result.output
    assert "Agent has finished executing the plan!" not in result.output


def test_run_cancelled_by_operator(nextjs_project, monkeypatch):
    monkeypatch.chdir(nextjs_project)
    monkeypatch.setenv("GEMINI_API_KEY", "key")
    _use_client(monkeypatch, FakeClient())

    result = _invoke(nextjs_project, "run", "show songs", input="n\n")

    assert result.exit_code == 0
    assert "Operation cancelled by user." in result.output
    assert not (nextjs_project / "src" / "app" / "api").exists()


def test_run_reports_invalid_plan(nextjs_project, monkeypatch):
    monkeypatch.chdir(nextjs_project)
    monkeypatch.setenv("GEMINI_API_KEY", "key")
    _use_client(monkeypatch, FakeClient(answer='{"plan": []}'))

    result = _invoke(nextjs_project, "run", "show songs", "--yes")

    assert result.exit_code == 1
    assert "files_to_modify" in result.output


def test_run_reports_rate_limit_remedies(nextjs_project, monkeypatch):
    monkeypatch.chdir(nextjs_project)
    monkeypatch.setenv("GEMINI_API_KEY", "key")
    monkeypatch.setenv("DB_AGENT_MAX_RETRIES", "1")
    _use_client(monkeypatch, FakeClient(error=LLMRateLimitError("quota", status_code=429)))

    result = _invoke(nextjs_project, "run", "show songs")

    assert result.exit_code == 1
    assert "Possible solutions:" in result.output
    assert "Break the query into smaller requests" in result.output


def test_status(nextjs_project, monkeypatch):
    monkeypatch.chdir(nextjs_project)

    result = _invoke(nextjs_project, "status")

    assert result.exit_code == 0
    assert "Project: music-app" in result.output
    assert "[x] drizzle-orm: 0.33.0" in result.output
    assert "[ ] pg: Not installed" in result.output
    assert "[ ] GEMINI_API_KEY: Not set" in result.output


def test_migrate_runs_generate_then_push(nextjs_project, monkeypatch):
    monkeypatch.chdir(nextjs_project)
    ran = []

    class RecordingRunner:
        def __init__(self, root, **kwargs):
            pass

        def run(self, command, *, interactive):
            ran.append((command, interactive))
            return ExecutionOutcome(command, 0, interactive)

    monkeypatch.setattr(commands_module, "CommandRunner", RecordingRunner)

    result = _invoke(nextjs_project, "migrate", "--auto-confirm")

    assert result.exit_code == 0, result.output
    assert ran == [("npx drizzle-kit generate --yes", False), ("npx drizzle-kit push --yes", False)]


def test_migrate_failure_prints_remedies(nextjs_project, monkeypatch):
    monkeypatch.chdir(nextjs_project)
    monkeypatch.setenv("PATH", "")

    result = _invoke(nextjs_project, "migrate", "--push", "--auto-confirm")

    assert result.exit_code == 1
    assert "DATABASE_URL" in result.output
    assert "npx drizzle-kit generate" in result.output


def test_cleanup_dry_run_and_delete(nextjs_project, monkeypatch):
    monkeypatch.chdir(nextjs_project)
    backup = nextjs_project / "src" / "app" / "page.tsx.backup-20240101000000"
    backup.write_text("old", encoding="utf-8")

    dry = _invoke(nextjs_project, "cleanup", "--dry-run")
    assert dry.exit_code == 0
    assert "src/app/page.tsx.backup-20240101000000" in dry.output
    assert backup.exists()

    cancelled = _invoke(nextjs_project, "cleanup", input="n\n")
    assert "Cleanup cancelled" in cancelled.output
    assert backup.exists()

    confirmed = _invoke(nextjs_project, "cleanup", input="yes\n")
    assert confirmed.exit_code == 0
    assert not backup.exists()


def test_cleanup_without_backups(tmp_path):
    result = _invoke(tmp_path, "cleanup")

    assert "No backup files found" in result.output


def test_version_option():
    result = CliRunner().invoke(cli, ["--version"])

    assert result.exit_code == 0
    assert "db-agent" in result.output
