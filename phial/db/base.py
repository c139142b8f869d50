"""Declarative Base & Key Conventions — UUID ("binary id") primary and foreign keys.

Invariants:
    - BinaryIdMixin.id is a UUID primary key generated client-side (uuid4)
    - foreign_key() columns are UUID-typed, matching BinaryIdMixin.id
    - dict annotations map to JSON, rendered as JSONB on PostgreSQL

Design Decisions:
    - Mixin + helper instead of class decorators: models stay plain DeclarativeBase
      subclasses and opt in explicitly
"""

import uuid
from typing import Any

from sqlalchemy import JSON, ForeignKey
from sqlalchemy.dialects.postgresql import JSONB, UUID
from sqlalchemy.orm import DeclarativeBase, Mapped, MappedColumn, mapped_column

BINARY_ID = UUID(as_uuid=True)
JSON_DOCUMENT = JSON().with_variant(JSONB(), "postgresql")


class Base(DeclarativeBase):
    """Base class for ORM models built on phial conventions."""
    type_annotation_map = {
        dict: JSON_DOCUMENT,
        uuid.UUID: BINARY_ID,
    }


class BinaryIdMixin:
    """UUID primary key, autogenerated."""
    id: Mapped[uuid.UUID] = mapped_column(
        BINARY_ID, primary_key=True, default=uuid.uuid4,
    )


def foreign_key(target: str, **kwargs: Any) -> MappedColumn[Any]:
    """UUID foreign key column pointing at target ("table.column")."""
    ondelete = kwargs.pop("ondelete", None)
    kwargs.setdefault("nullable", False)
    return mapped_column(BINARY_ID, ForeignKey(target, ondelete=ondelete), **kwargs)
