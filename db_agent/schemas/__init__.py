"""Utilities for accessing bundled JSON schemas."""
from __future__ import annotations

import json
from functools import lru_cache
from importlib import resources
from typing import Any, Dict

from jsonschema import Draft7Validator


def load_schema(name: str) -> Dict[str, Any]:
    """Read and decode a packaged schema."""
    return json.loads(resources.files(__name__).joinpath(name).read_text(encoding="utf-8"))


@lru_cache(maxsize=8)
def load_validator(name: str) -> Draft7Validator:
    return Draft7Validator(load_schema(name))


__all__ = ["load_schema", "load_validator"]
