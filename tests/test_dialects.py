import json
import unittest

from llm_gateway.dialects import (
    ChatCompletionsDialect,
    MessagesDialect,
    VendorDialect,
    get_dialect,
    resolve_vendor,
)
from llm_gateway.dialects.messages import API_VERSION, MAX_TOKENS
from llm_gateway.errors import UnrecognizedVendor
from llm_gateway.types import GenerationRequest, Message, ToolDef

LOOKUP = ToolDef(
    name="lookup",
    description="Look up a formula",
    parameters_schema={"type": "object", "properties": {"query": {"type": "string"}}},
)


class VendorCatalogueTests(unittest.TestCase):
    def test_known_vendors_resolve_to_dialects(self) -> None:
        self.assertIs(resolve_vendor("openai").dialect, VendorDialect.CHAT_COMPLETIONS)
        self.assertIs(resolve_vendor("groq").dialect, VendorDialect.CHAT_COMPLETIONS)
        self.assertIs(resolve_vendor("anthropic").dialect, VendorDialect.MESSAGES)

    def test_unknown_vendor_raises(self) -> None:
        with self.assertRaises(UnrecognizedVendor):
            resolve_vendor("mystery")

    def test_get_dialect_returns_matching_implementation(self) -> None:
        self.assertIsInstance(get_dialect(VendorDialect.CHAT_COMPLETIONS), ChatCompletionsDialect)
        self.assertIsInstance(get_dialect(VendorDialect.MESSAGES), MessagesDialect)


class ChatCompletionsDialectTests(unittest.TestCase):
    def setUp(self) -> None:
        self.dialect = ChatCompletionsDialect()

    def test_build_request_keeps_system_inline(self) -> None:
        req = GenerationRequest(
            messages=[
                Message(role="system", content="be brief"),
                Message(role="user", content="hi"),
            ],
            temperature=0.2,
        )
        wire = self.dialect.build_request(req, "sk-1", "gpt-4o-mini", "https://x.test/v1/chat/completions")

        self.assertEqual(wire.url, "https://x.test/v1/chat/completions")
        self.assertEqual(wire.headers["Authorization"], "Bearer sk-1")
        self.assertEqual(
            wire.body,
            {
                "model": "gpt-4o-mini",
                "messages": [
                    {"role": "system", "content": "be brief"},
                    {"role": "user", "content": "hi"},
                ],
                "temperature": 0.2,
            },
        )

    def test_build_request_serializes_tools_and_choice(self) -> None:
        req = GenerationRequest(
            messages=[Message(role="user", content="hi")],
            tools=[LOOKUP],
            tool_choice="lookup",
        )
        body = self.dialect.build_request(req, "k", "m", "https://x.test").body

        self.assertEqual(body["tools"][0]["type"], "function")
        self.assertEqual(body["tools"][0]["function"]["name"], "lookup")
        self.assertEqual(body["tools"][0]["function"]["parameters"], LOOKUP.parameters_schema)
        self.assertEqual(body["tool_choice"], {"type": "function", "function": {"name": "lookup"}})

    def test_normalize_passes_message_through(self) -> None:
        msg = self.dialect.normalize(
            {
                "choices": [
                    {
                        "message": {
                            "role": "assistant",
                            "content": None,
                            "tool_calls": [
                                {
                                    "id": "call_1",
                                    "type": "function",
                                    "function": {"name": "lookup", "arguments": '{"query": "crcl"}'},
                                }
                            ],
                        }
                    }
                ]
            }
        )
        self.assertIsNone(msg.content)
        assert msg.tool_calls is not None
        self.assertEqual(msg.tool_calls[0].id, "call_1")
        self.assertEqual(json.loads(msg.tool_calls[0].arguments_json), {"query": "crcl"})

    def test_normalize_text_only(self) -> None:
        msg = self.dialect.normalize({"choices": [{"message": {"role": "assistant", "content": "hello"}}]})
        self.assertEqual(msg.content, "hello")
        self.assertIsNone(msg.tool_calls)

    def test_normalize_rejects_malformed_bodies(self) -> None:
        for data in ([], {}, {"choices": []}, {"choices": [{}]}, {"choices": [{"message": {"content": None}}]}):
            with self.subTest(data=data), self.assertRaises(ValueError):
                self.dialect.normalize(data)


class MessagesDialectTests(unittest.TestCase):
    def setUp(self) -> None:
        self.dialect = MessagesDialect()

    def test_build_request_lifts_first_system_message(self) -> None:
        req = GenerationRequest(
            messages=[
                Message(role="user", content="first"),
                Message(role="system", content="rules"),
                Message(role="assistant", content="ok"),
                Message(role="system", content="more rules"),
                Message(role="user", content="second"),
            ]
        )
        wire = self.dialect.build_request(req, "ak-1", "claude", "https://api.test/v1/messages")

        self.assertEqual(wire.body["system"], "rules")
        self.assertEqual(
            [m["content"] for m in wire.body["messages"]],
            ["first", "ok", "more rules", "second"],
        )
        self.assertEqual(wire.body["messages"][2]["role"], "system")
        self.assertEqual(wire.body["max_tokens"], MAX_TOKENS)

    def test_build_request_headers(self) -> None:
        req = GenerationRequest(messages=[Message(role="user", content="hi")])
        wire = self.dialect.build_request(req, "ak-1", "claude", "https://api.test/v1/messages")

        self.assertEqual(wire.headers["x-api-key"], "ak-1")
        self.assertEqual(wire.headers["anthropic-version"], API_VERSION)
        self.assertNotIn("Authorization", wire.headers)

    def test_build_request_without_system_omits_field(self) -> None:
        req = GenerationRequest(messages=[Message(role="user", content="hi")], temperature=0.0)
        body = self.dialect.build_request(req, "k", "claude", "https://api.test").body

        self.assertNotIn("system", body)
        self.assertEqual(body["temperature"], 0.0)
        self.assertNotIn("tools", body)
        self.assertNotIn("tool_choice", body)

    def test_build_request_remaps_tools(self) -> None:
        req = GenerationRequest(
            messages=[Message(role="user", content="hi")],
            tools=[LOOKUP],
            tool_choice="lookup",
        )
        body = self.dialect.build_request(req, "k", "claude", "https://api.test").body

        self.assertEqual(
            body["tools"],
            [{"name": "lookup", "description": "Look up a formula", "input_schema": LOOKUP.parameters_schema}],
        )
        self.assertEqual(body["tool_choice"], {"type": "tool", "name": "lookup"})

    def test_normalize_tool_use_with_text(self) -> None:
        msg = self.dialect.normalize(
            {
                "content": [
                    {"type": "text", "text": "Looking it up."},
                    {"type": "tool_use", "id": "toolu_1", "name": "lookup", "input": {"query": "crcl"}},
                    {"type": "tool_use", "id": "toolu_2", "name": "lookup", "input": {"query": "bmi"}},
                ]
            }
        )
        self.assertEqual(msg.content, "Looking it up.")
        assert msg.tool_calls is not None
        self.assertEqual(len(msg.tool_calls), 1)
        self.assertEqual(msg.tool_calls[0].id, "toolu_1")

    def test_normalize_tool_use_without_text(self) -> None:
        msg = self.dialect.normalize(
            {"content": [{"type": "tool_use", "id": "toolu_1", "name": "lookup", "input": {}}]}
        )
        self.assertIsNone(msg.content)
        assert msg.tool_calls is not None
        self.assertEqual(msg.tool_calls[0].arguments_json, "{}")

    def test_normalize_text_only(self) -> None:
        msg = self.dialect.normalize({"content": [{"type": "text", "text": "hello"}]})
        self.assertEqual(msg.content, "hello")
        self.assertIsNone(msg.tool_calls)

    def test_normalize_without_blocks_yields_empty_text(self) -> None:
        msg = self.dialect.normalize({"content": []})
        self.assertEqual(msg.content, "")
        self.assertIsNone(msg.tool_calls)

    def test_normalize_rejects_missing_content(self) -> None:
        with self.assertRaises(ValueError):
            self.dialect.normalize({"error": "overloaded"})

    def test_tool_call_round_trip(self) -> None:
        req = GenerationRequest(
            messages=[Message(role="user", content="what is the crcl?")],
            tools=[LOOKUP],
        )
        wire = self.dialect.build_request(req, "k", "claude", "https://api.test")
        sent_tool = wire.body["tools"][0]
        tool_input = {"query": "crcl", "filters": {"units": ["mL/min"], "adult": True}}

        msg = self.dialect.normalize(
            {"content": [{"type": "tool_use", "id": "toolu_9", "name": sent_tool["name"], "input": tool_input}]}
        )

        assert msg.tool_calls is not None
        self.assertEqual(msg.tool_calls[0].name, LOOKUP.name)
        self.assertEqual(json.loads(msg.tool_calls[0].arguments_json), tool_input)


if __name__ == "__main__":
    unittest.main()
