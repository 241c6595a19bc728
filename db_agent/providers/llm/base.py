"""Abstractions for streaming LLM providers."""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Iterator, Protocol, Tuple


class PartKind(str, Enum):
    THOUGHT = "thought"
    ANSWER = "answer"


@dataclass(frozen=True)
class StreamPart:
    """One content part of a streamed chunk: reasoning or answer text."""

    kind: PartKind
    text: str = ""


@dataclass(frozen=True)
class StreamChunk:
    parts: Tuple[StreamPart, ...] = ()


@dataclass
class StreamHooks:
    """Callbacks invoked while a response stream is folded."""

    on_thought: Callable[[str], None] | None = None
    on_answer: Callable[[str], None] | None = None


@dataclass
class RetryConfig:
    """Rate-limit retry policy: wait ``backoff_base ** attempt`` seconds, no jitter."""

    max_retries: int = 3
    backoff_base: float = 2.0

    def delay_for(self, attempt: int) -> float:
        return self.backoff_base ** attempt


class LLMError(RuntimeError):
    """Raised when an LLM provider encounters an error."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class LLMRateLimitError(LLMError):
    """Raised when the provider reports a rate limit condition."""


class LLMTimeoutError(LLMError):
    """Raised when a request times out before the provider responds."""


class LLMConnectionError(LLMError):
    """Raised when the client is unable to reach the provider."""


class LLMResponseError(LLMError):
    """Raised when the provider returns a malformed or error response."""


class LLMClient(Protocol):
    """Protocol for clients that stream a single-prompt generation."""

    model: str

    def open_stream(self, prompt: str) -> Iterator[StreamChunk]:
        """Issue the request and return a lazy, non-restartable chunk iterator.

        Errors reported by the backend before streaming starts (including rate
        limiting) are raised from this call, not from the iterator.
        """
        ...


__all__ = [
    "LLMClient",
    "LLMConnectionError",
    "LLMError",
    "LLMRateLimitError",
    "LLMResponseError",
    "LLMTimeoutError",
    "PartKind",
    "RetryConfig",
    "StreamChunk",
    "StreamHooks",
    "StreamPart",
]
