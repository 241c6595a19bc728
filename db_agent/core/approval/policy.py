"""Approval policy models."""
from __future__ import annotations

from dataclasses import dataclass


@dataclass
class ApprovalPolicy:
    auto_approve_changes: bool = False
    auto_approve_cleanup: bool = False

    @classmethod
    def unattended(cls, enabled: bool) -> "ApprovalPolicy":
        """Policy for ``--yes``: the plan is applied without a confirmation prompt."""
        return cls(auto_approve_changes=enabled)


__all__ = ["ApprovalPolicy"]
