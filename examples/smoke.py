import asyncio
import logging

from llm_gateway import Gateway, GatewayError, GatewaySettings
from llm_gateway.types import GenerationRequest, Message, ToolDef


async def main() -> None:
    settings = GatewaySettings()
    logging.basicConfig(level=settings.log_level)

    req = GenerationRequest(
        messages=[
            Message(role="system", content="You answer with a tool call only."),
            Message(role="user", content="Look up the creatinine clearance formula."),
        ],
        tools=[
            ToolDef(
                name="lookup",
                description="Look up a clinical formula",
                parameters_schema={
                    "type": "object",
                    "properties": {"query": {"type": "string"}},
                    "required": ["query"],
                },
            )
        ],
        tool_choice="lookup",
    )

    async with Gateway.from_settings(settings) as gateway:
        try:
            resp = await gateway.generate(req)
        except GatewayError as e:
            print("Failed:", e.kind, e)
            return

    print("Answered by:", resp.provenance)
    print(resp.message.model_dump_json(indent=2))


if __name__ == "__main__":
    asyncio.run(main())
