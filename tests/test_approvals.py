import pytest

from db_agent.core.approval import ApprovalManager, ApprovalPolicy


@pytest.mark.parametrize("answer", ["y", "Y", "yes", " YES "])
def test_affirmative_answers_approve(monkeypatch, answer):
    monkeypatch.setattr("click.prompt", lambda *args, **kwargs: answer)
    manager = ApprovalManager(ApprovalPolicy())

    assert manager.require("changes", prompt="Proceed?") is True


@pytest.mark.parametrize("answer", ["", "n", "no", "yep", "sure"])
def test_anything_else_refuses(monkeypatch, answer):
    monkeypatch.setattr("click.prompt", lambda *args, **kwargs: answer)
    manager = ApprovalManager(ApprovalPolicy())

    assert manager.require("changes", prompt="Proceed?") is False


def test_prompt_text_includes_default_hint(monkeypatch):
    seen = {}

    def fake_prompt(text, **kwargs):
        seen["text"] = text
        return "n"

    monkeypatch.setattr("click.prompt", fake_prompt)
    ApprovalManager(ApprovalPolicy()).require("continue", prompt="Continue with remaining commands?")

    assert seen["text"] == "Continue with remaining commands? (y/N)"


def test_unattended_policy_only_covers_changes(monkeypatch):
    def fail_prompt(*args, **kwargs):
        raise AssertionError("prompt should not be shown")

    monkeypatch.setattr("click.prompt", fail_prompt)
    manager = ApprovalManager(ApprovalPolicy.unattended(True))

    assert manager.require("changes") is True
    assert manager.maybe_auto("continue") is False
    assert manager.maybe_auto("cleanup") is False


def test_audit_file_records_decisions(tmp_path, monkeypatch):
    monkeypatch.setattr("click.prompt", lambda *args, **kwargs: "no")
    audit_file = tmp_path / "audit" / "approvals.log"
    manager = ApprovalManager(ApprovalPolicy(auto_approve_cleanup=True), audit_file=audit_file)

    manager.require("cleanup")
    manager.require("changes")

    lines = audit_file.read_text(encoding="utf-8").splitlines()
    assert [line.split("\t")[1:] for line in lines] == [
        ["cleanup", "True", "auto"],
        ["changes", "False", "prompt"],
    ]
