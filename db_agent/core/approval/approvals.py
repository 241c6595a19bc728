"""Operator approval prompts."""
from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path

import click

from ..utils.logger import get_logger
from .policy import ApprovalPolicy

LOGGER = get_logger(__name__)

AFFIRMATIVE_ANSWERS = frozenset({"y", "yes"})


class ApprovalManager:
    """Handles human-in-the-loop approvals before side effects."""

    def __init__(self, policy: ApprovalPolicy, audit_file: Path | None = None) -> None:
        self.policy = policy
        self.audit_file = audit_file

    def require(self, purpose: str, *, prompt: str | None = None) -> bool:
        """Ask the operator for an explicit yes; anything else is a refusal."""
        if self.maybe_auto(purpose):
            LOGGER.info("%s automatically approved by policy.", purpose.capitalize())
            self._log(purpose, granted=True, reason="auto")
            return True

        prompt_text = f"{prompt or f'Approve {purpose}?'} (y/N)"
        answer = click.prompt(prompt_text, default="", show_default=False)
        decision = answer.strip().lower() in AFFIRMATIVE_ANSWERS
        LOGGER.info("Approval for %s: %s", purpose, decision)
        self._log(purpose, granted=decision, reason="prompt")
        return decision

    def maybe_auto(self, purpose: str) -> bool:
        if purpose == "changes":
            return self.policy.auto_approve_changes
        if purpose == "cleanup":
            return self.policy.auto_approve_cleanup
        return False

    def _log(self, purpose: str, granted: bool, reason: str) -> None:
        if not self.audit_file:
            return
        try:
            self.audit_file.parent.mkdir(parents=True, exist_ok=True)
            timestamp = datetime.now(timezone.utc).isoformat()
            with self.audit_file.open("a", encoding="utf-8") as handle:
                handle.write(f"{timestamp}\t{purpose}\t{granted}\t{reason}\n")
        except OSError as exc:  # pragma: no cover - best effort logging
            LOGGER.warning("Failed to write approval audit entry: %s", exc)


__all__ = ["ApprovalManager", "AFFIRMATIVE_ANSWERS"]
