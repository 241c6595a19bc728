"""Per-query project context."""
from .gatherer import (
    ContextBundle,
    ContextGatherer,
    ContextGatheringOptions,
    RelevanceRule,
    summarize_structure,
)

__all__ = [
    "ContextBundle",
    "ContextGatherer",
    "ContextGatheringOptions",
    "RelevanceRule",
    "summarize_structure",
]
