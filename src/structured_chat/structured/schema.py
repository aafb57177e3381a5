"""
JSON Schema generation utilities.

Builds the ``schema`` document carried in ``response_format.json_schema``
from Python types, Pydantic models, or a fluent builder, and closes schemas
for strict mode.
"""

from __future__ import annotations

import copy
import json
import re
import types
from typing import Any, Union, get_args, get_origin

_DEFAULT_SCHEMA_NAME = "response"
_MAX_SCHEMA_NAME_LENGTH = 64
_INVALID_NAME_CHARS = re.compile(r"[^a-zA-Z0-9_-]+")

_UNION_ORIGINS = (Union, types.UnionType)


def json_schema_from_type(python_type: Any) -> dict[str, Any]:
    """Generate JSON schema from a Python type.

    Args:
        python_type: Python type to convert

    Returns:
        JSON schema dictionary

    Example:
        >>> json_schema_from_type(list[str])
        {'type': 'array', 'items': {'type': 'string'}}
    """
    if python_type is type(None) or python_type is None:
        return {"type": "null"}

    type_mapping = {
        str: {"type": "string"},
        int: {"type": "integer"},
        float: {"type": "number"},
        bool: {"type": "boolean"},
        bytes: {"type": "string", "format": "byte"},
    }

    if python_type in type_mapping:
        return dict(type_mapping[python_type])

    if python_type is Any:
        return {}

    origin = get_origin(python_type)
    args = get_args(python_type)

    if origin is list:
        if args:
            return {"type": "array", "items": json_schema_from_type(args[0])}
        return {"type": "array"}

    if origin is dict:
        schema: dict[str, Any] = {"type": "object"}
        if len(args) >= 2:
            schema["additionalProperties"] = json_schema_from_type(args[1])
        return schema

    if origin is tuple:
        if args:
            return {
                "type": "array",
                "prefixItems": [json_schema_from_type(arg) for arg in args],
                "minItems": len(args),
                "maxItems": len(args),
            }
        return {"type": "array"}

    if origin in _UNION_ORIGINS:
        return {"anyOf": [json_schema_from_type(arg) for arg in args]}

    if hasattr(python_type, "model_json_schema"):
        return json_schema_from_pydantic(python_type)

    return {"type": "object"}


def json_schema_from_pydantic(model: type) -> dict[str, Any]:
    """Generate JSON schema from a Pydantic model.

    Args:
        model: Pydantic model class

    Returns:
        JSON schema dictionary

    Raises:
        ValueError: If model is not a Pydantic model
    """
    if not hasattr(model, "model_json_schema"):
        raise ValueError(f"{model} is not a Pydantic model")

    return model.model_json_schema()


def to_strict_schema(schema: dict[str, Any]) -> dict[str, Any]:
    """Return a copy of ``schema`` closed for strict mode.

    Every object schema gets ``additionalProperties: false`` and lists all of
    its properties as required. Nested properties, array items, ``$defs``,
    schema-valued ``additionalProperties``, ``patternProperties`` and
    combinators are walked recursively. The input is not modified.

    Example:
        >>> to_strict_schema({"type": "object", "properties": {"a": {"type": "string"}}})
        {'type': 'object', 'properties': {'a': {'type': 'string'}}, 'additionalProperties': False, 'required': ['a']}
    """
    result = copy.deepcopy(schema)
    _close_object(result)
    return result


def _close_object(node: Any) -> None:
    if isinstance(node, list):
        for item in node:
            _close_object(item)
        return
    if not isinstance(node, dict):
        return

    properties = node.get("properties")
    if node.get("type") == "object" or isinstance(properties, dict):
        if isinstance(properties, dict):
            node["additionalProperties"] = False
            node["required"] = list(properties.keys())
            for prop_schema in properties.values():
                _close_object(prop_schema)
        elif "additionalProperties" not in node:
            node["additionalProperties"] = False

    if isinstance(node.get("additionalProperties"), dict):
        _close_object(node["additionalProperties"])

    for key in ("items", "prefixItems", "anyOf", "oneOf", "allOf", "not"):
        if key in node:
            _close_object(node[key])

    for key in ("$defs", "definitions", "patternProperties"):
        defs = node.get(key)
        if isinstance(defs, dict):
            for sub in defs.values():
                _close_object(sub)


def schema_name_for(obj: Any, default: str = _DEFAULT_SCHEMA_NAME) -> str:
    """Derive a ``json_schema.name`` from a model class or schema dict.

    Names are restricted to ``[a-zA-Z0-9_-]`` and 64 characters.

    Example:
        >>> schema_name_for({"title": "Book info"})
        'Book_info'
    """
    raw: str | None = None
    if isinstance(obj, dict):
        title = obj.get("title")
        raw = title if isinstance(title, str) else None
    elif isinstance(obj, str):
        raw = obj
    elif obj is not None:
        raw = getattr(obj, "__name__", None)

    if not raw:
        return default

    name = _INVALID_NAME_CHARS.sub("_", raw.strip()).strip("_")
    return name[:_MAX_SCHEMA_NAME_LENGTH] or default


class SchemaGenerator:
    """Generator for JSON schemas with customization options.

    Example:
        >>> generator = SchemaGenerator(title="Book")
        >>> generator.add_property("name", str, description="Book title")
        >>> generator.add_property("authors", list[str])
        >>> schema = generator.build()
    """

    def __init__(
        self,
        title: str | None = None,
        description: str | None = None,
    ) -> None:
        """Initialize schema generator.

        Args:
            title: Schema title
            description: Schema description
        """
        self._title = title
        self._description = description
        self._properties: dict[str, dict[str, Any]] = {}
        self._required: list[str] = []
        self._additional_properties: bool | dict[str, Any] = False
        self._defs: dict[str, dict[str, Any]] = {}

    def add_property(
        self,
        name: str,
        python_type: Any,
        *,
        description: str | None = None,
        required: bool = True,
        default: Any = None,
        enum: list[Any] | None = None,
        minimum: float | None = None,
        maximum: float | None = None,
        min_length: int | None = None,
        max_length: int | None = None,
        pattern: str | None = None,
    ) -> SchemaGenerator:
        """Add a property to the schema.

        Args:
            name: Property name
            python_type: Property type
            description: Property description
            required: Whether property is required
            default: Default value
            enum: Allowed values
            minimum: Minimum value (for numbers)
            maximum: Maximum value (for numbers)
            min_length: Minimum length (for strings)
            max_length: Maximum length (for strings)
            pattern: Regex pattern (for strings)

        Returns:
            Self for chaining
        """
        prop_schema = json_schema_from_type(python_type)

        if description:
            prop_schema["description"] = description
        if default is not None:
            prop_schema["default"] = default
        if enum:
            prop_schema["enum"] = enum
        if minimum is not None:
            prop_schema["minimum"] = minimum
        if maximum is not None:
            prop_schema["maximum"] = maximum
        if min_length is not None:
            prop_schema["minLength"] = min_length
        if max_length is not None:
            prop_schema["maxLength"] = max_length
        if pattern:
            prop_schema["pattern"] = pattern

        self._properties[name] = prop_schema

        if required and name not in self._required:
            self._required.append(name)

        return self

    def add_object_property(
        self,
        name: str,
        nested_schema: dict[str, Any],
        *,
        description: str | None = None,
        required: bool = True,
    ) -> SchemaGenerator:
        """Add a nested object property.

        Args:
            name: Property name
            nested_schema: Nested JSON schema
            description: Property description
            required: Whether property is required

        Returns:
            Self for chaining
        """
        prop_schema = copy.deepcopy(nested_schema)
        if description:
            prop_schema["description"] = description

        self._properties[name] = prop_schema

        if required and name not in self._required:
            self._required.append(name)

        return self

    def allow_additional_properties(
        self, allowed: bool | type = True
    ) -> SchemaGenerator:
        """Configure additional properties.

        Args:
            allowed: True to allow any, False to disallow, or type to restrict

        Returns:
            Self for chaining
        """
        if isinstance(allowed, bool):
            self._additional_properties = allowed
        else:
            self._additional_properties = json_schema_from_type(allowed)
        return self

    def build(self) -> dict[str, Any]:
        """Build the JSON schema."""
        schema: dict[str, Any] = {
            "type": "object",
            "properties": copy.deepcopy(self._properties),
        }

        if self._title:
            schema["title"] = self._title
        if self._description:
            schema["description"] = self._description
        if self._required:
            schema["required"] = list(self._required)
        if self._additional_properties is not True:
            schema["additionalProperties"] = self._additional_properties
        if self._defs:
            schema["$defs"] = copy.deepcopy(self._defs)

        return schema

    def to_json(self, indent: int = 2) -> str:
        """Convert schema to JSON string."""
        return json.dumps(self.build(), indent=indent)

    @classmethod
    def from_pydantic(cls, model: type) -> SchemaGenerator:
        """Create generator from Pydantic model.

        Args:
            model: Pydantic model class

        Returns:
            SchemaGenerator instance
        """
        schema = json_schema_from_pydantic(model)
        generator = cls(
            title=schema.get("title") or getattr(model, "__name__", None),
            description=schema.get("description"),
        )
        generator._properties = schema.get("properties", {})
        generator._required = list(schema.get("required", []))
        generator._defs = schema.get("$defs", {})
        return generator
