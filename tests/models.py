"""Fixture models used across the test suite."""

import uuid

from sqlalchemy import String, Text
from sqlalchemy.orm import Mapped, mapped_column

from phial.db.base import Base, BinaryIdMixin, foreign_key


class Post(BinaryIdMixin, Base):
    __tablename__ = "posts"

    title: Mapped[str] = mapped_column(String(200), nullable=False)
    published: Mapped[bool] = mapped_column(nullable=False, default=False)
    # "metadata" is reserved on declarative classes, so the attribute is meta.
    meta: Mapped[dict] = mapped_column("metadata", nullable=False, default=dict)


class Comment(BinaryIdMixin, Base):
    __tablename__ = "comments"

    post_id: Mapped[uuid.UUID] = foreign_key("posts.id", ondelete="CASCADE")
    body: Mapped[str] = mapped_column(Text, nullable=False)
