"""Human-in-the-loop approval helpers."""
from .approvals import AFFIRMATIVE_ANSWERS, ApprovalManager
from .policy import ApprovalPolicy

__all__ = ["AFFIRMATIVE_ANSWERS", "ApprovalManager", "ApprovalPolicy"]
