"""Fold a streamed response into separate thought and answer buffers."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Optional

from .base import PartKind, StreamChunk, StreamHooks


@dataclass(frozen=True)
class StreamResult:
    thoughts: str
    answer: str


def consume_stream(chunks: Iterable[StreamChunk], hooks: Optional[StreamHooks] = None) -> StreamResult:
    """Single forward pass over ``chunks``; only the answer text is meant to go forward."""
    thoughts: List[str] = []
    answer: List[str] = []
    for chunk in chunks:
        for part in chunk.parts:
            if not part.text:
                continue
            if part.kind is PartKind.THOUGHT:
                thoughts.append(part.text)
                if hooks and hooks.on_thought:
                    hooks.on_thought(part.text)
            else:
                answer.append(part.text)
                if hooks and hooks.on_answer:
                    hooks.on_answer(part.text)
    return StreamResult(thoughts="".join(thoughts), answer="".join(answer))


__all__ = ["StreamResult", "consume_stream"]
