"""
Structured output module for structured-chat.

Provides schema generation, the ``response_format`` request field, output
validation and the schema instruction for the system prompt.
"""

from structured_chat.structured.json_mode import (
    JsonMode,
    ResponseFormat,
    StructuredOutput,
    extract_json,
)
from structured_chat.structured.prompt import (
    SCHEMA_INSTRUCTION_TEMPLATE,
    build_schema_instruction,
    inject_schema_instruction,
)
from structured_chat.structured.schema import (
    SchemaGenerator,
    json_schema_from_pydantic,
    json_schema_from_type,
    schema_name_for,
    to_strict_schema,
)
from structured_chat.structured.validator import (
    OutputValidator,
    ValidationResult,
)

__all__ = [
    "SCHEMA_INSTRUCTION_TEMPLATE",
    "JsonMode",
    "OutputValidator",
    "ResponseFormat",
    "SchemaGenerator",
    "StructuredOutput",
    "ValidationResult",
    "build_schema_instruction",
    "extract_json",
    "inject_schema_instruction",
    "json_schema_from_pydantic",
    "json_schema_from_type",
    "schema_name_for",
    "to_strict_schema",
]
