"""Factory helpers for LLM providers."""
from __future__ import annotations

from .base import (
    LLMClient,
    LLMConnectionError,
    LLMError,
    LLMRateLimitError,
    LLMResponseError,
    LLMTimeoutError,
    PartKind,
    RetryConfig,
    StreamChunk,
    StreamHooks,
    StreamPart,
)
from .gemini import DEFAULT_BASE_URL as GEMINI_DEFAULT_BASE_URL, GeminiClient
from .retry import call_with_retry
from .streaming import StreamResult, consume_stream

_PROVIDER_MAP = {
    "gemini": {
        "client": GeminiClient,
        "default_base_url": GEMINI_DEFAULT_BASE_URL,
    },
}


def create_client(
    provider: str,
    api_key: str,
    model: str,
    base_url: str | None = None,
    **provider_kwargs,
) -> LLMClient:
    key = provider.lower()
    try:
        provider_entry = _PROVIDER_MAP[key]
    except KeyError as exc:
        raise ValueError(f"Unsupported LLM provider: {provider}") from exc

    client_cls = provider_entry["client"]
    init_kwargs = {k: v for k, v in provider_kwargs.items() if k in {"timeout", "include_thoughts"}}
    init_kwargs["base_url"] = base_url or provider_entry["default_base_url"]
    return client_cls(api_key=api_key, model=model, **init_kwargs)


__all__ = [
    "GEMINI_DEFAULT_BASE_URL",
    "GeminiClient",
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
    "StreamResult",
    "call_with_retry",
    "consume_stream",
    "create_client",
]
