"""Rate-limit retry with exponential backoff for model calls."""
from __future__ import annotations

import time
from typing import Callable, Iterator, Optional

from ...core.utils.logger import get_logger
from .base import LLMClient, LLMRateLimitError, RetryConfig, StreamChunk

LOGGER = get_logger(__name__)


def call_with_retry(
    client: LLMClient,
    prompt: str,
    retry_config: Optional[RetryConfig] = None,
    *,
    sleep: Callable[[float], None] = time.sleep,
) -> Iterator[StreamChunk]:
    """Open a response stream, retrying only on rate limiting.

    Attempt ``n`` that is rate limited waits ``2 ** n`` seconds before attempt
    ``n + 1``. A rate limit on the final attempt, or any other error, is raised
    immediately.
    """
    config = retry_config or RetryConfig()
    attempts = max(1, config.max_retries)

    attempt = 1
    while True:
        LOGGER.info(
            "Attempt %d/%d - contacting %s", attempt, attempts, client.model, extra={"attempt": attempt}
        )
        try:
            return client.open_stream(prompt)
        except LLMRateLimitError:
            if attempt >= attempts:
                raise
            delay = config.delay_for(attempt)
            LOGGER.warning("Rate limited. Waiting %.0fs before retry...", delay, extra={"attempt": attempt})
            sleep(delay)
            attempt += 1


__all__ = ["call_with_retry"]
