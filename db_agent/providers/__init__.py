"""External service provider integrations."""
from __future__ import annotations

from . import llm
from .llm import (
    GEMINI_DEFAULT_BASE_URL,
    LLMClient,
    LLMError,
    LLMRateLimitError,
    RetryConfig,
    create_client,
)

__all__ = [
    "GEMINI_DEFAULT_BASE_URL",
    "LLMClient",
    "LLMError",
    "LLMRateLimitError",
    "RetryConfig",
    "create_client",
    "llm",
]
