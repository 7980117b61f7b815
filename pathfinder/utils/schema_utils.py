"""
JSON Schema Utilities for structured reasoning-service output.

Provides helpers for building strict schemas from Pydantic models and for
decoding untrusted model output into validated Pydantic objects.
"""

import json
import re
from typing import Any, Type, TypeVar
from pydantic import BaseModel, ValidationError

from pathfinder.exceptions import CurationOutputError


T = TypeVar("T", bound=BaseModel)

_EXCERPT_CHARS = 200


def get_strict_schema(model: Type[BaseModel]) -> dict[str, Any]:
    """
    Get a strict JSON schema from a Pydantic model.

    Transforms the schema to meet OpenAI's strict mode requirements:
    - All objects have additionalProperties: false
    - All properties are in the required array
    - $ref references have no sibling keywords
    """
    return make_schema_strict(model.model_json_schema())


def make_schema_strict(schema: dict[str, Any]) -> dict[str, Any]:
    """Transform a JSON schema to meet OpenAI's strict mode requirements."""
    def transform(obj: dict[str, Any]) -> dict[str, Any]:
        if not isinstance(obj, dict):
            return obj

        if "$ref" in obj:
            return {"$ref": obj["$ref"]}

        result = {}
        for key, value in obj.items():
            if key == "$defs":
                result[key] = {k: transform(v) for k, v in value.items()}
            elif isinstance(value, dict):
                result[key] = transform(value)
            elif isinstance(value, list):
                result[key] = [transform(item) if isinstance(item, dict) else item for item in value]
            else:
                result[key] = value

        if result.get("type") == "object" and "properties" in result:
            result["additionalProperties"] = False
            result["required"] = list(result["properties"].keys())

        return result

    return transform(schema)


def extract_json_from_text(text: str) -> str:
    """
    Extract a single JSON object from text that may contain other content.

    A fenced ```json block wins; otherwise the span from the first "{" to the
    last "}" is taken.
    """
    code_block_match = re.search(r"```(?:json)?\s*(\{.*?\})\s*```", text, re.DOTALL)
    if code_block_match:
        return code_block_match.group(1)

    json_match = re.search(r"\{.*\}", text, re.DOTALL)
    if json_match:
        return json_match.group()

    raise ValueError("No JSON object found in text")


def decode_model_output(text: str, model: Type[T]) -> T:
    """
    Decode untrusted output into `model`, rejecting anything structurally invalid.

    Raises:
        CurationOutputError: no JSON object, malformed JSON, or schema mismatch
    """
    excerpt = (text or "")[:_EXCERPT_CHARS]
    try:
        raw = extract_json_from_text(text or "")
    except ValueError as e:
        raise CurationOutputError("no JSON object in response", excerpt) from e

    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        raise CurationOutputError(f"malformed JSON ({e.msg})", excerpt) from e

    if not isinstance(data, dict):
        raise CurationOutputError("top-level value is not an object", excerpt)

    try:
        return model.model_validate(data)
    except ValidationError as e:
        raise CurationOutputError(
            f"does not match {model.__name__} ({e.error_count()} errors)", excerpt
        ) from e
