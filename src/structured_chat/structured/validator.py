"""
Output validation for structured responses.

Validates model output against a JSON Schema (via ``jsonschema``) or a
Pydantic model.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, TypeVar

import jsonschema
from jsonschema import Draft202012Validator
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError
from referencing.exceptions import Unresolvable

from structured_chat.errors import OutputValidationError, ValidationError

T = TypeVar("T", bound=BaseModel)


@dataclass
class ValidationResult:
    """Result of validation.

    Attributes:
        valid: Whether validation passed
        errors: List of validation errors
        data: Validated/parsed data
    """

    valid: bool = True
    errors: list[str] = field(default_factory=list)
    data: Any = None

    def __bool__(self) -> bool:
        return self.valid

    def raise_if_invalid(self, raw: str | None = None) -> None:
        """Raise OutputValidationError if validation failed."""
        if not self.valid:
            raise OutputValidationError(
                "; ".join(self.errors) or "Output failed validation",
                raw=raw,
                errors=list(self.errors),
            )


def _format_error_path(error: jsonschema.ValidationError) -> str:
    path = "$"
    for part in error.absolute_path:
        path += f"[{part}]" if isinstance(part, int) else f".{part}"
    return path


def _format_pydantic_errors(exc: PydanticValidationError) -> list[str]:
    messages = []
    for err in exc.errors():
        loc = ".".join(str(part) for part in err.get("loc", ()))
        messages.append(f"{loc or '$'}: {err.get('msg', 'invalid value')}")
    return messages


class OutputValidator:
    """Validator for structured output.

    Validates JSON strings and dictionaries against a JSON Schema document or
    a Pydantic model.

    Example:
        >>> validator = OutputValidator(Book)
        >>> result = validator.validate('{"name": "Dune", "authors": ["Frank Herbert"]}')
        >>> result.valid
        True
        >>> result.data
        Book(name='Dune', authors=['Frank Herbert'])
    """

    def __init__(self, schema: dict[str, Any] | type | None = None) -> None:
        """Initialize validator.

        Args:
            schema: JSON schema dict or Pydantic model class

        Raises:
            ValidationError: If the schema is not a valid JSON Schema document
            ValueError: If schema is neither a dict nor a Pydantic model
        """
        self._pydantic_model: type[BaseModel] | None = None
        self._json_schema: dict[str, Any] | None = None
        self._validator: Draft202012Validator | None = None

        if schema is None:
            return

        if isinstance(schema, dict):
            try:
                Draft202012Validator.check_schema(schema)
            except jsonschema.SchemaError as e:
                raise ValidationError(
                    f"Invalid JSON Schema: {e.message}",
                    field="schema",
                ) from e
            self._json_schema = schema
            self._validator = Draft202012Validator(schema)
        elif isinstance(schema, type) and issubclass(schema, BaseModel):
            self._pydantic_model = schema
            self._json_schema = schema.model_json_schema()
        else:
            raise ValueError(
                "Schema must be a JSON schema dict or Pydantic model class"
            )

    @property
    def json_schema(self) -> dict[str, Any] | None:
        return self._json_schema

    @property
    def pydantic_model(self) -> type[BaseModel] | None:
        return self._pydantic_model

    def validate(self, data: str | Any) -> ValidationResult:
        """Validate data against the schema.

        Args:
            data: JSON string or already-decoded value

        Returns:
            ValidationResult with validation status and parsed data

        Raises:
            ValidationError: If the schema holds a $ref that cannot be resolved
        """
        if isinstance(data, str):
            try:
                parsed = json.loads(data)
            except json.JSONDecodeError as e:
                return ValidationResult(valid=False, errors=[f"Invalid JSON: {e}"])
        else:
            parsed = data

        if self._pydantic_model is not None:
            return self._validate_pydantic(parsed)

        if self._validator is not None:
            return self._validate_json_schema(parsed)

        return ValidationResult(valid=True, data=parsed)

    def validate_or_raise(self, data: str | Any) -> Any:
        """Validate data and raise if invalid.

        Raises:
            OutputValidationError: If validation fails
        """
        result = self.validate(data)
        result.raise_if_invalid(raw=data if isinstance(data, str) else None)
        return result.data

    def parse(self, data: str | Any, model: type[T]) -> T:
        """Parse and validate data into a Pydantic model.

        Args:
            data: JSON string or decoded value
            model: Pydantic model class

        Returns:
            Model instance

        Raises:
            OutputValidationError: If decoding or validation fails
        """
        raw = data if isinstance(data, str) else None
        try:
            if isinstance(data, str):
                return model.model_validate_json(data)
            return model.model_validate(data)
        except PydanticValidationError as e:
            raise OutputValidationError(
                f"Output does not match {model.__name__}",
                raw=raw,
                errors=_format_pydantic_errors(e),
            ) from e

    def _validate_pydantic(self, data: Any) -> ValidationResult:
        try:
            validated = self._pydantic_model.model_validate(data)
        except PydanticValidationError as e:
            return ValidationResult(valid=False, errors=_format_pydantic_errors(e))
        return ValidationResult(valid=True, data=validated)

    def _validate_json_schema(self, data: Any) -> ValidationResult:
        try:
            errors = sorted(
                self._validator.iter_errors(data),
                key=lambda err: [str(p) for p in err.absolute_path],
            )
        except Unresolvable as e:
            raise ValidationError(
                f"Unresolvable reference in JSON Schema: {e}",
                field="schema",
            ) from e
        if errors:
            return ValidationResult(
                valid=False,
                errors=[f"{_format_error_path(err)}: {err.message}" for err in errors],
            )
        return ValidationResult(valid=True, data=data)
