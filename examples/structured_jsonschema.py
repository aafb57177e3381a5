#!/usr/bin/env python3
"""
Structured output with a plain JSON Schema document.

The reply is checked with ``jsonschema`` and returned as a dict.

Usage:
    export OPENAI_API_KEY="your-api-key"
    python examples/structured_jsonschema.py
"""

import asyncio

from structured_chat import ChatClient, OutputValidationError

BOOK_SCHEMA = {
    "title": "Book",
    "type": "object",
    "properties": {
        "name": {"type": "string"},
        "authors": {"type": "array", "items": {"type": "string"}},
    },
    "required": ["name", "authors"],
    "additionalProperties": False,
}


async def main() -> None:
    """Run JSON Schema structured output example."""
    client = await ChatClient.create("gpt-4o-mini")

    try:
        book = await (
            client.chat()
            .user("Tell me about a famous book.")
            .json_schema(BOOK_SCHEMA, name="Book")
            .max_tokens(200)
            .parse()
        )
        print(f"Book: {book['name']} by {', '.join(book['authors'])}")
    except OutputValidationError as e:
        print(f"Invalid output: {e.errors}")
        print(f"Raw content: {e.raw}")
    finally:
        await client.close()


if __name__ == "__main__":
    asyncio.run(main())
