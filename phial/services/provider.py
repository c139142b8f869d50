"""CRUD Provider — forwards get/insert/update/delete to an AsyncSession.

Invariants:
    - Writes commit immediately and refresh the instance before returning it
    - attrs keys must name mapped attributes of the model (InvalidArgumentError otherwise)
    - A failed commit is rolled back and surfaces as DatabaseError
    - find_by_jsonb builds its statement with core/jsonb_query.build_jsonb_query

Design Decisions:
    - Explicit object wrapping a session instead of helpers mixed into caller modules
    - get() returns None for a missing row; get_or_404() raises ResourceNotFoundError
"""

import logging
from collections.abc import Mapping
from typing import Any, TypeVar

from sqlalchemy import inspect, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from phial.config import get_settings
from phial.core.domain_types import ClauseMode, ColumnRef, Filters
from phial.core.errors import (
    DatabaseError, ErrorContext, InvalidArgumentError, ResourceNotFoundError,
)
from phial.core.jsonb_query import build_jsonb_query
from phial.core.params import changeset_params

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT")


class Provider:
    """Basic CRUD over one AsyncSession."""

    def __init__(self, db: AsyncSession):
        self._db = db

    async def get(self, model: type[ModelT], record_id: Any) -> ModelT | None:
        return await self._db.get(model, record_id)

    async def get_or_404(self, model: type[ModelT], record_id: Any) -> ModelT:
        record = await self.get(model, record_id)
        if record is None:
            raise ResourceNotFoundError(model.__name__, str(record_id))
        return record

    async def get_all(self, model: type[ModelT]) -> list[ModelT]:
        result = await self._db.execute(select(model))
        return list(result.scalars().all())

    async def insert(
        self, target: type[ModelT] | ModelT, attrs: Mapping[str, Any] | None = None,
    ) -> ModelT:
        """Insert a new row. target is a model class or an unsaved instance."""
        record = target() if isinstance(target, type) else target
        _apply_changes(record, attrs)
        self._db.add(record)
        await self._commit("insert", record)
        logger.info(
            f"Inserted {type(record).__name__}",
            extra={"model": type(record).__name__, "operation": "insert",
                   "record_id": str(_identity(record))},
        )
        return record

    async def update(self, record: ModelT, attrs: Mapping[str, Any] | None = None) -> ModelT:
        _apply_changes(record, attrs)
        await self._commit("update", record)
        logger.info(
            f"Updated {type(record).__name__}",
            extra={"model": type(record).__name__, "operation": "update",
                   "record_id": str(_identity(record))},
        )
        return record

    async def delete(self, record: ModelT) -> ModelT:
        record_id = _identity(record)
        await self._db.delete(record)
        await self._commit("delete")
        logger.info(
            f"Deleted {type(record).__name__}",
            extra={"model": type(record).__name__, "operation": "delete",
                   "record_id": str(record_id)},
        )
        return record

    async def find_by_jsonb(
        self,
        model: type[ModelT],
        column: ColumnRef,
        filters: Filters,
        mode: ClauseMode | str | None = None,
    ) -> list[ModelT]:
        """Rows of model whose JSONB column contains every (or, in OR mode, any) term."""
        clause_mode = mode if mode is not None else get_settings().default_clause_mode
        stmt = build_jsonb_query(select(model), column, filters, clause_mode)
        result = await self._db.execute(stmt)
        return list(result.scalars().all())

    async def _commit(self, operation: str, record: Any = None) -> None:
        try:
            await self._db.commit()
            if record is not None:
                await self._db.refresh(record)
        except SQLAlchemyError as e:
            await self._db.rollback()
            logger.error(
                f"{operation} failed: {e}", extra={"operation": operation},
            )
            raise DatabaseError(str(e.__class__.__name__), operation) from e


def _apply_changes(record: Any, attrs: Mapping[str, Any] | None) -> None:
    """Set attrs on record after checking each one is a mapped attribute."""
    changes = changeset_params(attrs)
    mapped = inspect(type(record)).attrs
    unknown = sorted(name for name in changes if name not in mapped)
    if unknown:
        raise InvalidArgumentError(
            f"{type(record).__name__} has no attribute(s): {', '.join(unknown)}",
            field=unknown[0],
            context=ErrorContext(debug_info={"unknown": unknown}),
        )
    for name, value in changes.items():
        setattr(record, name, value)


def _identity(record: Any) -> Any:
    identity = inspect(record).identity
    if identity is None:
        return None
    return identity[0] if len(identity) == 1 else identity
