"""
JSON Schema inference from an example document.

Turns a sample JSON object (typically the "output example" a user types
into the form) into a JSON-Schema-like tree that can be dropped into a
structured-output directive.

Known simplifications, kept for compatibility with schemas produced by
earlier versions of the form:
- Every observed key is required; optionality is never inferred.
- Arrays of objects are described by their FIRST element only.
- In mixed-type arrays the object branch is an empty object schema.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from core.exceptions import SchemaParseError
from utils.json_utils import parse_json_text

#: JSON value as produced by json.loads.
JsonValue = Any

#: Inferred schema node (plain dict so it serializes without conversion).
SchemaNode = dict[str, Any]

#: Deepest object/array nesting an example may have.
MAX_EXAMPLE_DEPTH = 64


class JsonKind(str, Enum):
    """Structural kind of a parsed JSON value, named as in JSON Schema."""

    OBJECT = "object"
    ARRAY = "array"
    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    NULL = "null"


def classify(value: JsonValue) -> JsonKind:
    """Return the JSON kind of a parsed value.

    Arrays and null are checked before the primitive kinds, and booleans
    before numbers since bool is a subclass of int.

    Raises:
        SchemaParseError: If the value is not something json.loads produces
    """
    if isinstance(value, list):
        return JsonKind.ARRAY
    if value is None:
        return JsonKind.NULL
    if isinstance(value, dict):
        return JsonKind.OBJECT
    if isinstance(value, str):
        return JsonKind.STRING
    if isinstance(value, bool):
        return JsonKind.BOOLEAN
    if isinstance(value, (int, float)):
        return JsonKind.NUMBER
    raise SchemaParseError(f"Unsupported value of type {type(value).__name__}")


def infer_schema(example: JsonValue) -> SchemaNode:
    """Infer an object schema from an example JSON object.

    Args:
        example: Parsed JSON; must be an object at the top level

    Returns:
        Schema node with type "object"

    Raises:
        SchemaParseError: If the top-level value is not an object, or objects
            nest deeper than MAX_EXAMPLE_DEPTH

    Example:
        >>> infer_schema({"a": 1})
        {'type': 'object', 'properties': {'a': {'type': 'number'}}, 'required': ['a']}
    """
    kind = classify(example)
    if kind is not JsonKind.OBJECT:
        raise SchemaParseError(f"Example must be a JSON object, got {kind.value}")
    return _object_schema(example)


def infer_schema_from_text(text: str, field: str = "outputExample") -> SchemaNode:
    """Parse example text and infer its schema.

    Raises:
        InvalidJsonError: If the text is not valid JSON
        SchemaParseError: If the parsed value is not an object
    """
    return infer_schema(parse_json_text(text, field))


def _object_schema(obj: dict[str, JsonValue], depth: int = 1) -> SchemaNode:
    if depth > MAX_EXAMPLE_DEPTH:
        raise SchemaParseError(f"Example is nested too deeply (more than {MAX_EXAMPLE_DEPTH} levels)")
    properties: dict[str, SchemaNode] = {}
    required: list[str] = []
    for key, value in obj.items():
        required.append(key)
        properties[key] = _value_schema(value, depth + 1)
    return {"type": JsonKind.OBJECT.value, "properties": properties, "required": required}


def _value_schema(value: JsonValue, depth: int) -> SchemaNode:
    kind = classify(value)
    if kind is JsonKind.OBJECT:
        return _object_schema(value, depth)
    if kind is JsonKind.ARRAY:
        return {"type": JsonKind.ARRAY.value, "items": _items_schema(value, depth + 1)}
    return {"type": kind.value}


def _items_schema(values: list[JsonValue], depth: int) -> SchemaNode:
    kinds: list[JsonKind] = []
    for item in values:
        kind = classify(item)
        if kind not in kinds:
            kinds.append(kind)

    if not kinds:
        return {}

    if len(kinds) == 1:
        if kinds[0] is JsonKind.OBJECT:
            return _object_schema(values[0], depth)
        return {"type": kinds[0].value}

    return {"anyOf": [_object_schema({}) if k is JsonKind.OBJECT else {"type": k.value} for k in kinds]}


def enforce_no_additional_properties(schema: Any) -> Any:
    """Set additionalProperties to false on every object node lacking it.

    Walks object ``properties`` and array ``items``. Existing
    ``additionalProperties`` keys are left untouched, and fragments that are
    not object/array shaped are skipped, so hand-written or partial schemas
    are accepted. Running the pass twice gives the same result as once.

    Mutates ``schema`` in place and returns it.
    """
    if not isinstance(schema, dict):
        return schema

    node_type = schema.get("type")
    if node_type == JsonKind.OBJECT.value:
        schema.setdefault("additionalProperties", False)
        properties = schema.get("properties")
        if isinstance(properties, dict):
            for child in properties.values():
                enforce_no_additional_properties(child)
    elif node_type == JsonKind.ARRAY.value and schema.get("items"):
        enforce_no_additional_properties(schema["items"])

    return schema


__all__ = [
    "JsonKind",
    "JsonValue",
    "MAX_EXAMPLE_DEPTH",
    "SchemaNode",
    "classify",
    "enforce_no_additional_properties",
    "infer_schema",
    "infer_schema_from_text",
]
