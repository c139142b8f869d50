"""JSON Codec — the one place phial turns Python values into JSON text and back.

Invariants:
    - encode_json never emits NaN/Infinity (PostgreSQL JSONB rejects them)
    - Every encode/decode failure surfaces as SerializationError, chained to the cause
    - Output is compact and keeps non-ASCII characters as-is
"""

import json
from typing import Any

from phial.core.errors import ErrorContext, SerializationError


def encode_json(value: Any) -> str:
    """Serialize value to JSON text."""
    try:
        return json.dumps(
            value, ensure_ascii=False, allow_nan=False, separators=(",", ":"),
        )
    except (TypeError, ValueError) as e:
        raise SerializationError(
            f"Value cannot be represented as JSON: {e}",
            ErrorContext(debug_info={"type": type(value).__name__}),
        ) from e


def decode_json(raw: str | bytes) -> Any:
    """Parse JSON text. Empty input decodes to None."""
    if not raw:
        return None
    try:
        return json.loads(raw)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise SerializationError(f"Malformed JSON: {e}") from e
