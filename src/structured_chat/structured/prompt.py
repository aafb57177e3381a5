"""
Schema instruction for the system prompt.

In structured mode the hosted service prepends a fixed instruction to the
system prompt telling the model which schema its answer must follow. Some
OpenAI-compatible backends do not, so the client can apply the same
augmentation locally.
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

from structured_chat.types.message import Message

if TYPE_CHECKING:
    from collections.abc import Sequence

SCHEMA_INSTRUCTION_TEMPLATE = (
    "You must respond with a single JSON value that conforms to the following "
    "JSON Schema. Do not include any text outside the JSON value.\n"
    "JSON Schema: {schema}"
)


def build_schema_instruction(schema: dict[str, Any]) -> str:
    """Render the schema instruction for ``schema``.

    The schema is embedded in compact form with sorted keys, so the same
    schema always produces the same instruction.
    """
    compact = json.dumps(schema, separators=(",", ":"), sort_keys=True)
    return SCHEMA_INSTRUCTION_TEMPLATE.format(schema=compact)


def inject_schema_instruction(
    messages: Sequence[Message],
    schema: dict[str, Any],
) -> list[Message]:
    """Return ``messages`` with the schema instruction prepended to the system prompt.

    A leading system message keeps its text after the instruction; without
    one, a system message holding only the instruction is inserted first.
    Prompts that already start with the instruction are returned unchanged.
    The input sequence is not modified.
    """
    instruction = build_schema_instruction(schema)
    result = list(messages)

    if result and result[0].is_system:
        system = result[0]
        if system.content.startswith(instruction):
            return result
        content = f"{instruction}\n\n{system.content}" if system.content else instruction
        result[0] = Message.system(content)
        return result

    result.insert(0, Message.system(instruction))
    return result
