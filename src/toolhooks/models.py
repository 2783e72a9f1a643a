"""Pydantic models for hook input payloads and verdicts."""

from __future__ import annotations

import json
from enum import StrEnum
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

EDIT_TOOLS = frozenset({"Edit", "Write"})


class VerdictStatus(StrEnum):
    OK = "ok"
    BLOCKED = "blocked"


class ToolUse(BaseModel):
    """One entry of a batched ``tool_uses`` payload."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    tool_name: str = Field("", validation_alias=AliasChoices("tool_name", "toolName"))
    tool_input: dict[str, Any] = Field(
        default_factory=dict, validation_alias=AliasChoices("tool_input", "toolInput")
    )

    @field_validator("tool_input", mode="before")
    @classmethod
    def _null_input(cls, value: Any) -> Any:
        return value if value is not None else {}

    @property
    def file_path(self) -> str:
        ti = self.tool_input
        return ti.get("file_path") or ti.get("filePath") or ti.get("path") or ""

    @property
    def command(self) -> str:
        return self.tool_input.get("command") or ""

    @property
    def edited_content(self) -> str:
        """Text introduced by the call: ``new_string`` for Edit, ``content`` for Write."""
        if self.tool_name == "Edit":
            return self.tool_input.get("new_string") or ""
        if self.tool_name == "Write":
            return self.tool_input.get("content") or ""
        return ""

    @property
    def is_edit_or_write(self) -> bool:
        return self.tool_name in EDIT_TOOLS


class HookEvent(ToolUse):
    """Payload an agent writes to a hook's stdin.

    Accepts the agent's native field names as well as the camelCase form.
    """

    event: str = Field("", validation_alias=AliasChoices("event", "hook_event_name"))
    prompt: str = ""
    cwd: str | None = None
    tool_uses: list[ToolUse] = Field(default_factory=list)

    @field_validator("prompt", mode="before")
    @classmethod
    def _null_prompt(cls, value: Any) -> Any:
        return value if value is not None else ""

    @field_validator("tool_uses", mode="before")
    @classmethod
    def _null_tool_uses(cls, value: Any) -> Any:
        return value if value is not None else []

    @property
    def is_post_tool_use(self) -> bool:
        return self.event == "PostToolUse"

    @property
    def is_batch(self) -> bool:
        return bool(self.tool_uses)


class Verdict(BaseModel):
    """Hook result written to stdout: ``{status, message?, details?}``."""

    model_config = ConfigDict(extra="forbid")

    status: VerdictStatus
    message: str | None = None
    details: dict[str, Any] | None = None

    @classmethod
    def ok(cls, message: str | None = None) -> Verdict:
        return cls(status=VerdictStatus.OK, message=message or None)

    @classmethod
    def blocked(cls, message: str, details: dict[str, Any] | None = None) -> Verdict:
        return cls(status=VerdictStatus.BLOCKED, message=message, details=details or None)

    @property
    def is_blocked(self) -> bool:
        return self.status == VerdictStatus.BLOCKED

    @property
    def exit_code(self) -> int:
        return 1 if self.is_blocked else 0

    def to_json(self) -> str:
        return json.dumps(self.model_dump(mode="json", exclude_none=True), ensure_ascii=False)
