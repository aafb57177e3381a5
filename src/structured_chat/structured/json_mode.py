"""
Response format configuration for structured output.

Renders the ``response_format`` request field and wraps decoded responses.
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, TypeVar

from pydantic import BaseModel

from structured_chat.errors import OutputValidationError, ValidationError
from structured_chat.structured.schema import (
    json_schema_from_pydantic,
    schema_name_for,
    to_strict_schema,
)
from structured_chat.structured.validator import OutputValidator, ValidationResult

T = TypeVar("T", bound=BaseModel)


class JsonMode(str, Enum):
    """JSON mode options."""

    # Any syntactically valid JSON object
    JSON = "json"

    # JSON constrained by a caller-supplied schema
    JSON_SCHEMA = "json_schema"

    OFF = "off"


@dataclass
class ResponseFormat:
    """Configuration of the ``response_format`` request field.

    Attributes:
        mode: JSON mode to use
        schema: JSON schema sent as ``json_schema.schema``
        name: Schema name sent as ``json_schema.name``
        strict: Whether the service should enforce the schema exactly
        model: Pydantic model the schema was generated from, if any

    A strict ``json_schema`` format closes its schema on construction.
    """

    mode: JsonMode = JsonMode.JSON
    schema: dict[str, Any] | None = None
    name: str = "response"
    strict: bool = True
    model: type[BaseModel] | None = None

    def __post_init__(self) -> None:
        if self.mode == JsonMode.JSON_SCHEMA and self.strict and self.schema:
            self.schema = to_strict_schema(self.schema)

    @classmethod
    def json_object(cls) -> ResponseFormat:
        """Create config for plain JSON object mode."""
        return cls(mode=JsonMode.JSON)

    @classmethod
    def off(cls) -> ResponseFormat:
        return cls(mode=JsonMode.OFF)

    @classmethod
    def from_schema(
        cls,
        schema: dict[str, Any],
        name: str | None = None,
        strict: bool = True,
    ) -> ResponseFormat:
        """Create config from a JSON schema.

        Args:
            schema: JSON schema dictionary
            name: Schema name (defaults to the schema title or "response")
            strict: Whether to enforce strict compliance

        Returns:
            ResponseFormat instance
        """
        return cls(
            mode=JsonMode.JSON_SCHEMA,
            schema=schema,
            name=schema_name_for(name or schema),
            strict=strict,
        )

    @classmethod
    def from_pydantic(
        cls,
        model: type[BaseModel],
        name: str | None = None,
        strict: bool = True,
    ) -> ResponseFormat:
        """Create config from a Pydantic model.

        Args:
            model: Pydantic model class
            name: Schema name (defaults to the model name)
            strict: Whether to enforce strict compliance

        Returns:
            ResponseFormat instance
        """
        schema = json_schema_from_pydantic(model)
        return cls(
            mode=JsonMode.JSON_SCHEMA,
            schema=schema,
            name=schema_name_for(name or model),
            strict=strict,
            model=model,
        )

    @property
    def is_structured(self) -> bool:
        """True when a schema constrains the output."""
        return self.mode == JsonMode.JSON_SCHEMA

    def to_request_format(self) -> dict[str, Any] | None:
        """Render the ``response_format`` object.

        Raises:
            ValidationError: If json_schema mode has no schema
        """
        if self.mode == JsonMode.OFF:
            return None

        if self.mode == JsonMode.JSON:
            return {"type": "json_object"}

        if not self.schema:
            raise ValidationError(
                "json_schema mode requires a schema",
                field="response_format.json_schema.schema",
            )

        return {
            "type": "json_schema",
            "json_schema": {
                "name": self.name,
                "strict": self.strict,
                "schema": self.schema,
            },
        }

    def to_payload(self) -> dict[str, Any]:
        """Render the request fragment, ``{}`` when off."""
        request_format = self.to_request_format()
        if request_format is None:
            return {}
        return {"response_format": request_format}

    def validator(self) -> OutputValidator:
        """Build the validator matching this format."""
        if self.model is not None:
            return OutputValidator(self.model)
        return OutputValidator(self.schema)


@dataclass
class StructuredOutput:
    """Structured output result with validation.

    Attributes:
        raw: Raw response content
        parsed: Decoded JSON value
        validated: Validated value (model instance for Pydantic validators)
        validation_result: Validation result
    """

    raw: str
    parsed: Any = None
    validated: Any = None
    validation_result: ValidationResult = field(default_factory=ValidationResult)

    @property
    def is_valid(self) -> bool:
        return self.validation_result.valid

    @property
    def data(self) -> Any:
        """Get the best available data representation."""
        if self.validated is not None:
            return self.validated
        if self.parsed is not None:
            return self.parsed
        return self.raw

    def as_model(self, model: type[T]) -> T:
        """Get output as a Pydantic model.

        Raises:
            OutputValidationError: If the output is not valid
        """
        if not self.is_valid:
            raise OutputValidationError(
                "Output is not valid",
                raw=self.raw,
                errors=list(self.validation_result.errors),
            )
        if isinstance(self.validated, model):
            return self.validated
        if self.parsed is not None:
            return OutputValidator().parse(self.parsed, model)
        raise OutputValidationError("No parsed data available", raw=self.raw)

    @classmethod
    def from_response(
        cls,
        content: str,
        validator: OutputValidator | None = None,
    ) -> StructuredOutput:
        """Create structured output from response content.

        Args:
            content: Response content
            validator: Optional validator

        Returns:
            StructuredOutput instance
        """
        try:
            parsed = json.loads(content)
        except json.JSONDecodeError as e:
            return cls(
                raw=content,
                validation_result=ValidationResult(
                    valid=False, errors=[f"Invalid JSON: {e}"]
                ),
            )

        validation_result = ValidationResult(valid=True, data=parsed)
        validated = None

        if validator is not None:
            validation_result = validator.validate(parsed)
            if validation_result.valid:
                validated = validation_result.data

        return cls(
            raw=content,
            parsed=parsed,
            validated=validated,
            validation_result=validation_result,
        )


_EXTRACT_PATTERNS = (
    re.compile(r"```json\s*([\s\S]*?)\s*```"),
    re.compile(r"```\s*([\s\S]*?)\s*```"),
    re.compile(r"\{[\s\S]*\}"),
    re.compile(r"\[[\s\S]*\]"),
)


def extract_json(text: str) -> Any:
    """Extract JSON from text that may contain markdown code blocks.

    Args:
        text: Text potentially containing JSON

    Returns:
        Decoded JSON value or None

    Example:
        >>> extract_json('Here you go: ```json {"name": "Dune"} ```')
        {'name': 'Dune'}
    """
    try:
        return json.loads(text)
    except json.JSONDecodeError:
        pass

    for pattern in _EXTRACT_PATTERNS:
        match = pattern.search(text)
        if match:
            candidate = match.group(1) if match.groups() else match.group(0)
            try:
                return json.loads(candidate.strip())
            except json.JSONDecodeError:
                continue

    return None
