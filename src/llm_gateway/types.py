"""Canonical request/response models shared by every dialect."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, SecretStr, model_validator

Role = Literal["system", "user", "assistant"]


class Message(BaseModel):
    """Single chat message."""

    model_config = ConfigDict(frozen=True)

    role: Role
    content: str


class ToolDef(BaseModel):
    """Function-style tool the backend may be asked to invoke."""

    model_config = ConfigDict(frozen=True)

    name: str
    description: str | None = None
    parameters_schema: dict[str, Any] = Field(default_factory=dict)


class GenerationRequest(BaseModel):
    """Canonical request accepted by the gateway."""

    model_config = ConfigDict(frozen=True)

    messages: list[Message] = Field(min_length=1)
    tools: list[ToolDef] = Field(default_factory=list)
    # name of the single tool the backend must call
    tool_choice: str | None = None
    temperature: float | None = None
    model_override: str | None = None

    @model_validator(mode="after")
    def _check_tools(self) -> GenerationRequest:
        names = [t.name for t in self.tools]
        if len(names) != len(set(names)):
            raise ValueError("tool names must be unique")
        if self.tool_choice is not None and self.tool_choice not in names:
            raise ValueError(f"tool_choice '{self.tool_choice}' does not name a declared tool")
        return self


class ToolCall(BaseModel):
    """A tool invocation returned by a backend."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    arguments_json: str


class AssistantMessage(BaseModel):
    """Normalized assistant reply."""

    model_config = ConfigDict(frozen=True)

    role: Literal["assistant"] = "assistant"
    content: str | None = None
    tool_calls: list[ToolCall] | None = None

    @model_validator(mode="after")
    def _check_not_empty(self) -> AssistantMessage:
        if self.content is None and not self.tool_calls:
            raise ValueError("assistant message has neither content nor tool calls")
        return self


class CanonicalResponse(BaseModel):
    """Successful gateway result."""

    model_config = ConfigDict(frozen=True)

    message: AssistantMessage
    # display name of the backend that answered, or "default"
    provenance: str


class ProviderConfig(BaseModel):
    """One configured completion backend."""

    model_config = ConfigDict(frozen=True)

    id: str
    vendor_kind: str
    credential: SecretStr
    base_url_override: str | None = None
    model_override: str | None = None
    display_name: str
    priority: int = 0
    active: bool = True

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> ProviderConfig:
        """Build a config from a provider table row."""
        return cls(
            id=str(row["id"]),
            vendor_kind=row["provider"],
            credential=row["api_key"],
            base_url_override=row.get("base_url") or None,
            model_override=row.get("model") or None,
            display_name=row.get("display_name") or row["provider"],
            priority=row.get("priority", 0),
            active=row.get("is_active", True),
        )


@dataclass(frozen=True)
class WireRequest:
    """Vendor specific HTTP request ready to be sent."""

    url: str
    headers: dict[str, str] = field(repr=False)
    body: dict[str, Any]
