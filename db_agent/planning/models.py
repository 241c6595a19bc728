"""Plan data structures recovered from model output."""
from __future__ import annotations

from typing import Any, Iterable, List, Mapping

from pydantic import BaseModel, ConfigDict, Field


class FileEdit(BaseModel):
    """Full-content replacement of one project file."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    file_path: str = Field(..., alias="filePath", min_length=1, description="Path relative to the project root.")
    new_content: str = Field(..., alias="newContent", description="Complete new file content.")


class Plan(BaseModel):
    """Validated contract between the model output and the executor."""

    model_config = ConfigDict(frozen=True)

    steps: List[str] = Field(default_factory=list, description="Human-readable steps, display only.")
    files_to_modify: List[FileEdit] = Field(default_factory=list)
    commands_to_run: List[str] = Field(default_factory=list)

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "Plan":
        """Build from a schema-checked wire payload (``plan``/``files_to_modify``/``commands_to_run``)."""
        return cls(
            steps=[step if isinstance(step, str) else str(step) for step in payload["plan"]],
            files_to_modify=[FileEdit.model_validate(entry) for entry in payload["files_to_modify"]],
            commands_to_run=list(payload.get("commands_to_run") or []),
        )

    def with_commands(self, commands: Iterable[str]) -> "Plan":
        return self.model_copy(update={"commands_to_run": list(commands)})


__all__ = ["FileEdit", "Plan"]
