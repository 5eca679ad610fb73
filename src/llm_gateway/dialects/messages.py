"""Messages style dialect (Anthropic Messages API)."""

from __future__ import annotations

import json
from typing import Any

from llm_gateway.dialects.base import BaseDialect, VendorDialect
from llm_gateway.types import (
    AssistantMessage,
    GenerationRequest,
    Message,
    ToolCall,
    ToolDef,
    WireRequest,
)

API_VERSION = "2023-06-01"
MAX_TOKENS = 8192


class MessagesDialect(BaseDialect):
    """System prompt travels out of band; credential in a vendor header."""

    dialect = VendorDialect.MESSAGES

    def build_request(
        self,
        req: GenerationRequest,
        credential: str,
        model: str,
        base_url: str,
    ) -> WireRequest:
        headers = {
            "x-api-key": credential,
            "anthropic-version": API_VERSION,
            "content-type": "application/json",
        }
        return WireRequest(url=base_url, headers=headers, body=self._build_payload(req, model))

    def normalize(self, data: Any) -> AssistantMessage:
        """Collapse a content block list into one assistant message.

        Only the first ``tool_use`` block is kept, so at most one tool call is
        ever produced. When a tool call is present the first text block (if
        any) becomes the content; otherwise the content is the first text
        block or an empty string.
        """
        blocks = data.get("content") if isinstance(data, dict) else None
        if not isinstance(blocks, list):
            raise ValueError("response has no content blocks")

        tool_use = _first_block(blocks, "tool_use")
        text_block = _first_block(blocks, "text")
        text = text_block.get("text") if text_block else None

        if tool_use is None:
            return AssistantMessage(content=text or "")

        name = tool_use.get("name")
        if not isinstance(name, str) or not name:
            raise ValueError("tool_use block has no name")
        call = ToolCall(
            id=str(tool_use.get("id", "")),
            name=name,
            arguments_json=json.dumps(tool_use.get("input") or {}),
        )
        return AssistantMessage(content=text or None, tool_calls=[call])

    def _build_payload(self, req: GenerationRequest, model: str) -> dict[str, Any]:
        system_text, msgs = self._split_system(req.messages)

        payload: dict[str, Any] = {
            "model": model,
            "max_tokens": MAX_TOKENS,
            "messages": [self._serialize_message(m) for m in msgs],
        }

        if system_text is not None:
            payload["system"] = system_text
        if req.temperature is not None:
            payload["temperature"] = req.temperature
        if req.tools:
            payload["tools"] = [self._serialize_tool(t) for t in req.tools]
        if req.tool_choice is not None:
            payload["tool_choice"] = {"type": "tool", "name": req.tool_choice}
        return payload

    @staticmethod
    def _split_system(messages: list[Message]) -> tuple[str | None, list[Message]]:
        # Only the first system message is lifted; later ones stay in place.
        for index, m in enumerate(messages):
            if m.role == "system":
                return m.content, messages[:index] + messages[index + 1 :]
        return None, list(messages)

    @staticmethod
    def _serialize_message(message: Message) -> dict[str, Any]:
        return {"role": message.role, "content": message.content}

    @staticmethod
    def _serialize_tool(tool: ToolDef) -> dict[str, Any]:
        return {
            "name": tool.name,
            "description": tool.description or "",
            "input_schema": tool.parameters_schema,
        }


def _first_block(blocks: list[Any], block_type: str) -> dict[str, Any] | None:
    for b in blocks:
        if isinstance(b, dict) and b.get("type") == block_type:
            return b
    return None
