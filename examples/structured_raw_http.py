#!/usr/bin/env python3
"""
Structured output over raw HTTP.

Builds the ``POST /v1/chat/completions`` body by hand and decodes
``choices[0].message.content`` with ``json.loads``.

Usage:
    export OPENAI_API_KEY="your-api-key"
    python examples/structured_raw_http.py
"""

import asyncio
import json
import os

from structured_chat import build_chat_payload, extract_content, post_chat_completion

BOOK_SCHEMA = {
    "type": "object",
    "properties": {
        "name": {"type": "string"},
        "authors": {"type": "array", "items": {"type": "string"}},
    },
    "required": ["name", "authors"],
}


async def main() -> None:
    """Run raw HTTP structured output example."""
    payload = build_chat_payload(
        "gpt-4o-mini",
        [{"role": "user", "content": "Tell me about a famous book."}],
        schema=BOOK_SCHEMA,
        name="Book",
        max_tokens=200,
        temperature=0.0,
    )
    print("Request body:")
    print(json.dumps(payload, indent=2))

    body = await post_chat_completion(
        payload,
        base_url=os.getenv("STRUCTURED_CHAT_BASE_URL", "https://api.openai.com"),
        api_key=os.environ["OPENAI_API_KEY"],
    )
    book = json.loads(extract_content(body))
    print(f"Book: {book['name']} by {', '.join(book['authors'])}")


if __name__ == "__main__":
    asyncio.run(main())
