"""Chat Completions style dialect (OpenAI compatible backends)."""

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


class ChatCompletionsDialect(BaseDialect):
    """Messages stay inline; credential travels as a bearer token."""

    dialect = VendorDialect.CHAT_COMPLETIONS

    def build_request(
        self,
        req: GenerationRequest,
        credential: str,
        model: str,
        base_url: str,
    ) -> WireRequest:
        headers = {
            "Authorization": f"Bearer {credential}",
            "Content-Type": "application/json",
        }
        return WireRequest(url=base_url, headers=headers, body=self._build_payload(req, model))

    def normalize(self, data: Any) -> AssistantMessage:
        if not isinstance(data, dict):
            raise ValueError("response body is not a JSON object")
        choices = data.get("choices")
        if not isinstance(choices, list) or not choices:
            raise ValueError("response has no choices")
        message = choices[0].get("message") if isinstance(choices[0], dict) else None
        if not isinstance(message, dict):
            raise ValueError("first choice has no message")

        raw_calls = message.get("tool_calls") or []
        tool_calls = [self._parse_tool_call(c) for c in raw_calls]
        return AssistantMessage(content=message.get("content"), tool_calls=tool_calls or None)

    def _build_payload(self, req: GenerationRequest, model: str) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "model": model,
            "messages": [self._serialize_message(m) for m in req.messages],
        }

        if req.temperature is not None:
            payload["temperature"] = req.temperature
        if req.tools:
            payload["tools"] = [self._serialize_tool(t) for t in req.tools]
        if req.tool_choice is not None:
            payload["tool_choice"] = {
                "type": "function",
                "function": {"name": req.tool_choice},
            }
        return payload

    @staticmethod
    def _serialize_message(message: Message) -> dict[str, Any]:
        return {"role": message.role, "content": message.content}

    @staticmethod
    def _serialize_tool(tool: ToolDef) -> dict[str, Any]:
        return {
            "type": "function",
            "function": {
                "name": tool.name,
                "description": tool.description or "",
                "parameters": tool.parameters_schema,
            },
        }

    @staticmethod
    def _parse_tool_call(raw: Any) -> ToolCall:
        function = raw.get("function") if isinstance(raw, dict) else None
        if not isinstance(function, dict):
            raise ValueError("tool call has no function")
        name = function.get("name")
        if not isinstance(name, str) or not name:
            raise ValueError("tool call has no function name")
        arguments = function.get("arguments")
        return ToolCall(
            id=str(raw.get("id", "")),
            name=name,
            # some compatible backends send the arguments already decoded
            arguments_json=arguments if isinstance(arguments, str) else json.dumps(arguments or {}),
        )
