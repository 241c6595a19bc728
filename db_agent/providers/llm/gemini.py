"""Gemini streamGenerateContent client over plain HTTP."""
from __future__ import annotations

import json
from typing import Any, Dict, Iterator, List

import requests

from ...core.utils.logger import get_logger
from .base import (
    LLMConnectionError,
    LLMError,
    LLMRateLimitError,
    LLMResponseError,
    LLMTimeoutError,
    PartKind,
    StreamChunk,
    StreamPart,
)

LOGGER = get_logger(__name__)

DEFAULT_BASE_URL = "https://generativelanguage.googleapis.com/v1beta"


class GeminiClient:
    """Streams generations from the Gemini API, including thought parts."""

    def __init__(
        self,
        api_key: str,
        model: str,
        *,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = 120.0,
        include_thoughts: bool = True,
    ) -> None:
        self.api_key = api_key
        self.model = model
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.include_thoughts = include_thoughts

    # ------------------------------------------------------------------
    # Request helpers
    # ------------------------------------------------------------------

    def _request_url(self) -> str:
        return f"{self.base_url}/models/{self.model}:streamGenerateContent"

    def _build_headers(self) -> Dict[str, str]:
        return {
            "x-goog-api-key": self.api_key,
            "Content-Type": "application/json",
        }

    def _prepare_payload(self, prompt: str) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "contents": [{"role": "user", "parts": [{"text": prompt}]}],
        }
        if self.include_thoughts:
            payload["generationConfig"] = {"thinkingConfig": {"includeThoughts": True}}
        return payload

    def _error_from_status(self, status_code: int, response_text: str) -> LLMError:
        message = f"Gemini API error {status_code}: {response_text}"
        if status_code == 429:
            return LLMRateLimitError(message, status_code=status_code)
        if status_code in {408, 504}:
            return LLMTimeoutError(message, status_code=status_code)
        if status_code in {502, 503}:
            return LLMConnectionError(message, status_code=status_code)
        return LLMResponseError(message, status_code=status_code)

    def _wrap_transport_error(self, exc: Exception) -> LLMError:
        if isinstance(exc, requests.Timeout):
            return LLMTimeoutError(f"Gemini request timed out: {exc}")
        return LLMConnectionError(f"Gemini connection failed: {exc}")

    # ------------------------------------------------------------------
    # High level API
    # ------------------------------------------------------------------

    def open_stream(self, prompt: str) -> Iterator[StreamChunk]:
        try:
            response = requests.post(
                self._request_url(),
                params={"alt": "sse"},
                headers=self._build_headers(),
                data=json.dumps(self._prepare_payload(prompt)),
                timeout=self.timeout,
                stream=True,
            )
        except (requests.Timeout, requests.ConnectionError) as exc:
            raise self._wrap_transport_error(exc) from exc
        except requests.RequestException as exc:
            raise LLMResponseError(f"Gemini request failed: {exc}") from exc

        if response.status_code >= 400:
            with response:
                raise self._error_from_status(response.status_code, response.text)
        return self._iter_chunks(response)

    def _iter_chunks(self, response: requests.Response) -> Iterator[StreamChunk]:
        # SSE responses carry no charset, so requests would fall back to ISO-8859-1.
        response.encoding = "utf-8"
        with response:
            for line in response.iter_lines(decode_unicode=True):
                if not line or not line.startswith("data: "):
                    continue
                try:
                    data = json.loads(line[len("data: "):])
                except json.JSONDecodeError:
                    LOGGER.debug("Skipping undecodable stream line")
                    continue
                yield parse_stream_chunk(data)


def parse_stream_chunk(data: Dict[str, Any]) -> StreamChunk:
    """Flatten every candidate's content parts into one chunk."""
    parts: List[StreamPart] = []
    for candidate in data.get("candidates") or []:
        content = candidate.get("content") if isinstance(candidate, dict) else None
        if not isinstance(content, dict):
            continue
        for part in content.get("parts") or []:
            if not isinstance(part, dict):
                continue
            kind = PartKind.THOUGHT if part.get("thought") else PartKind.ANSWER
            text = part.get("text")
            parts.append(StreamPart(kind=kind, text=text if isinstance(text, str) else ""))
    return StreamChunk(parts=tuple(parts))


__all__ = ["GeminiClient", "DEFAULT_BASE_URL", "parse_stream_chunk"]
