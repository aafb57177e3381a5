#!/usr/bin/env python3
"""
Structured output with a Pydantic model.

The model's JSON schema is sent as ``response_format`` and the reply is
validated back into a ``Book`` instance.

Usage:
    export OPENAI_API_KEY="your-api-key"
    python examples/structured_pydantic.py
"""

import asyncio

from pydantic import BaseModel

from structured_chat import ChatClient
from structured_chat.telemetry import configure_logging


class Book(BaseModel):
    name: str
    authors: list[str]


async def main() -> None:
    """Run Pydantic structured output example."""
    configure_logging("DEBUG")

    async with await ChatClient.create("gpt-4o-mini") as client:
        # parse() returns the validated model instance
        book = await (
            client.chat()
            .system("You are a helpful assistant.")
            .user("Tell me about a famous book.")
            .output_model(Book)
            .max_tokens(200)
            .temperature(0.0)
            .parse()
        )
        print(f"Book: {book.name}")
        print(f"Authors: {', '.join(book.authors)}")

        # execute() keeps the raw JSON alongside the parsed object
        response, stats = await (
            client.chat()
            .user("Name another famous book.")
            .output_model(Book)
            .execute_with_stats()
        )
        print(f"Raw content: {response.content}")
        print(f"Parsed: {response.parsed!r}")
        print(f"Latency: {stats.latency_ms:.0f}ms, retries: {stats.retry_count}")


if __name__ == "__main__":
    asyncio.run(main())
