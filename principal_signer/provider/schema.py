"""
JSON schemas for signer provider replies.

Byte strings travel as JSON arrays of integers 0-255. Each reply is
validated here before any field is read; a mismatch is reported as
MalformedResponseError by the caller.
"""

from __future__ import annotations

from typing import Any

import jsonschema  # type: ignore[import-untyped]

PUBLIC_KEY_BYTES = 32
SIGNATURE_BYTES = 64
MIN_RANDOMNESS_BYTES = 32


def byte_array(min_items: int | None = None, max_items: int | None = None) -> dict[str, Any]:
    schema: dict[str, Any] = {
        "type": "array",
        "items": {"type": "integer", "minimum": 0, "maximum": 255},
    }
    if min_items is not None:
        schema["minItems"] = min_items
    if max_items is not None:
        schema["maxItems"] = max_items
    return schema


RANDOMNESS_SCHEMA: dict[str, Any] = byte_array(min_items=MIN_RANDOMNESS_BYTES)

PUBLIC_KEY_SCHEMA: dict[str, Any] = {
    "type": "object",
    "required": ["public_key"],
    "properties": {
        "public_key": byte_array(PUBLIC_KEY_BYTES, PUBLIC_KEY_BYTES),
        "chain_code": byte_array(),
    },
}

SIGNATURE_SCHEMA: dict[str, Any] = {
    "type": "object",
    "required": ["signature"],
    "properties": {
        "signature": byte_array(SIGNATURE_BYTES, SIGNATURE_BYTES),
    },
}


def validate(instance: Any, schema: dict[str, Any]) -> None:
    jsonschema.validate(instance=instance, schema=schema)
