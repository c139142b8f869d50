"""Params & Error Shaping — pure transforms between request data and model data.

Invariants:
    - changeset_params output keys are valid Python identifiers (usable as **kwargs)
    - parse_errors always returns a dict; unknown input collapses to a generic message
    - Neither function performs IO or mutates its input
"""

import keyword
import re
from collections.abc import Mapping, Sequence
from typing import Any

from pydantic import ValidationError

from phial.core.errors import ErrorContext, InvalidArgumentError
from phial.core.jsonb_query import normalize_key

GENERIC_ERROR_MESSAGE = "There was an error processing your request"

_PLACEHOLDER = re.compile(r"%\{(\w+)\}")


def changeset_params(params: Mapping[Any, Any] | None = None) -> dict[str, Any]:
    """Convert a string-keyed mapping into identifier-keyed keyword arguments."""
    result: dict[str, Any] = {}
    for key, value in (params or {}).items():
        name = normalize_key(key)
        if not name.isidentifier() or keyword.iskeyword(name):
            raise InvalidArgumentError(
                f"Parameter name {name!r} is not a valid attribute name",
                field=name,
                context=ErrorContext(debug_info={"key": name}),
            )
        result[name] = value
    return result


def parse_errors(errors: Any) -> dict:
    """Flatten validation errors into {field: [messages]}.

    Accepts a pydantic ValidationError or the list of error dicts that
    ValidationError.errors() / RequestValidationError.errors() return.
    A plain string becomes {"error": message}; a mapping is returned as-is.
    """
    if isinstance(errors, ValidationError):
        return _group_error_dicts(errors.errors())
    if isinstance(errors, str):
        return {"error": errors}
    if isinstance(errors, Mapping):
        return dict(errors)
    if isinstance(errors, Sequence) and all(
        isinstance(e, Mapping) and "msg" in e for e in errors
    ):
        return _group_error_dicts(errors)
    return {"error": GENERIC_ERROR_MESSAGE}


def interpolate_message(message: str, ctx: Mapping[str, Any] | None) -> str:
    """Replace %{name} placeholders with values from ctx; unknown names stay."""
    if not ctx:
        return message
    return _PLACEHOLDER.sub(
        lambda m: str(ctx[m.group(1)]) if m.group(1) in ctx else m.group(0),
        message,
    )


def _group_error_dicts(error_dicts: Sequence[Mapping[str, Any]]) -> dict[str, list[str]]:
    grouped: dict[str, list[str]] = {}
    for e in error_dicts:
        field = ".".join(str(loc) for loc in e.get("loc", ())) or "error"
        grouped.setdefault(field, []).append(
            interpolate_message(e["msg"], e.get("ctx")),
        )
    return grouped
