"""JSONB Query Builder — appends one containment predicate per filter term to a Select.

Invariants:
    - Exactly one predicate per (key, value) term, attached in input order
    - Each predicate is CAST(column AS JSONB) @> CAST('{"key": value}' AS JSONB)
    - Keys are normalized once (normalize_key) so Enum and str spellings match
    - The input query is never mutated; empty filters return it unchanged
    - mode is validated before any predicate is built
    - OR mode folds left: each predicate is OR'd against the whole accumulated
      WHERE clause, giving ((base OR a) OR b) OR c, not a flat any-of-N
    - JSON and SQLAlchemy errors reach the caller unchanged; no partial result

Design Decisions:
    - Plain functions over SQLAlchemy Select: callers compose them with their own
      statements instead of inheriting helpers
    - Payload serialized eagerly with core/json_codec so unencodable values fail
      while the statement is built, not when it is executed
"""

from collections.abc import Mapping
from enum import Enum
from typing import Any

from sqlalchemy import Select, Text, cast, inspect, literal, or_, select
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.sql.elements import ColumnElement

from phial.core.domain_types import ClauseMode, ColumnRef, Filters, FilterTerm
from phial.core.errors import ErrorContext, InvalidArgumentError
from phial.core.json_codec import encode_json


def normalize_key(key: Any) -> str:
    """Canonical string form of a filter key or column name."""
    if isinstance(key, Enum):
        key = key.value if isinstance(key.value, str) else key.name
    return str(key)


def coerce_mode(mode: ClauseMode | str | None) -> ClauseMode:
    """Resolve an explicit clause mode. None means the default (AND)."""
    if mode is None:
        return ClauseMode.AND
    if isinstance(mode, ClauseMode):
        return mode
    if isinstance(mode, str) and not isinstance(mode, Enum):
        try:
            return ClauseMode(mode.lower())
        except ValueError:
            pass
    raise InvalidArgumentError(
        f"Unsupported clause mode {mode!r}. Supported: "
        f"{', '.join(m.value for m in ClauseMode)}",
        field="mode",
        context=ErrorContext(mode=repr(mode)),
    )


def jsonb_contains(column: ColumnElement, key: Any, value: Any) -> ColumnElement[bool]:
    """Predicate: column (as JSONB) is a superset of {normalize_key(key): value}."""
    payload = encode_json({normalize_key(key): value})
    return cast(column, JSONB).contains(cast(literal(payload, Text), JSONB))


def or_where(query: Select, criterion: ColumnElement[bool]) -> Select:
    """Attach criterion OR'd against everything already in the WHERE clause."""
    existing = query.whereclause
    if existing is None:
        return query.where(criterion)
    # Select exposes no public way to replace its WHERE clause.
    combined = query._generate()
    combined._where_criteria = (or_(existing, criterion),)
    return combined


def build_jsonb_query(
    query: Any,
    column: ColumnRef,
    filters: Filters,
    mode: ClauseMode | str | None = ClauseMode.AND,
) -> Any:
    """Return query with one JSONB containment predicate per filter term.

    query may be a Select, a mapped class or a Table; the latter two are
    wrapped in select() once a predicate has to be attached. column is a
    column name (ORM attribute key first, then table column name on the
    query's first FROM) or an SQL expression used as-is.

    Raises InvalidArgumentError for a missing query, an unknown mode, a
    malformed filter term or a column that does not resolve.
    """
    if query is None:
        raise InvalidArgumentError("query must not be None", field="query")
    clause_mode = coerce_mode(mode)
    terms = _collect_terms(filters)
    if not terms:
        return query

    acc = _as_select(query)
    target = _resolve_column(acc, column)
    for key, value in terms:
        predicate = jsonb_contains(target, key, value)
        if clause_mode is ClauseMode.OR:
            acc = or_where(acc, predicate)
        else:
            acc = acc.where(predicate)
    return acc


def _collect_terms(filters: Filters | None) -> list[FilterTerm]:
    """Materialize filters into (key, value) pairs, validating their shape."""
    if filters is None:
        return []
    if isinstance(filters, Mapping):
        return list(filters.items())
    if isinstance(filters, (str, bytes)):
        raise InvalidArgumentError(
            "filters must be a mapping or a sequence of (key, value) pairs",
            field="filters",
        )
    terms = []
    for index, term in enumerate(filters):
        if not isinstance(term, (tuple, list)) or len(term) != 2:
            raise InvalidArgumentError(
                f"Filter term #{index} is not a (key, value) pair: {term!r}",
                field="filters",
            )
        terms.append((term[0], term[1]))
    return terms


def _as_select(query: Any) -> Select:
    if isinstance(query, Select):
        return query
    return select(query)


def _resolve_column(query: Select, column: ColumnRef) -> ColumnElement:
    """Look a named column up on the query's first FROM; pass expressions through."""
    if not isinstance(column, (str, Enum)):
        return column
    name = normalize_key(column)

    descriptions = query.column_descriptions
    entity = descriptions[0].get("entity") if descriptions else None
    if entity is not None and name in inspect(entity).mapper.columns:
        return getattr(entity, name)

    froms = query.get_final_froms()
    if froms and name in froms[0].c:
        return froms[0].c[name]

    raise InvalidArgumentError(
        f"Column '{name}' does not exist on the queried table",
        field="column",
        context=ErrorContext(column=name),
    )
