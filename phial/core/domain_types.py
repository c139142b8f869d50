"""Domain Types — named types shared by the query builder and the helpers around it.

Invariants:
    - ClauseMode has exactly two members (AND, OR)
    - Filters may be a mapping (insertion order) or an iterable of (key, value) pairs

Design Decisions:
    - str Enum: values round-trip through settings and query strings as plain text
"""

from collections.abc import Iterable, Mapping
from enum import Enum
from typing import Any, Union

from sqlalchemy.sql.elements import ColumnElement


class ClauseMode(str, Enum):
    """How a new predicate relates to the ones already on the query."""
    AND = "and"
    OR = "or"


# Anything json.dumps accepts; the builder does not inspect it.
JSONValue = Any

FilterTerm = tuple[Any, JSONValue]
Filters = Union[Mapping[Any, JSONValue], Iterable[FilterTerm]]

# Column name (str or str Enum) or an SQL expression / ORM attribute.
ColumnRef = Union[str, Enum, ColumnElement, Any]
