"""
Blog Backend — Post SQLAlchemy Model
======================================

What:  ORM model for the `posts` table, with soft delete.
How:   Deleting a post stamps `deleted_at` instead of removing the row.
       A session-wide `do_orm_execute` listener adds
       `deleted_at IS NULL` to every ORM SELECT that touches Post, so
       soft-deleted posts disappear from default reads.

Opting out of the filter:
    select(Post).execution_options(include_deleted=True)
"""

from datetime import datetime
from typing import List, Optional

from sqlalchemy import ForeignKey, Integer, String, Text, event
from sqlalchemy.orm import Mapped, Session, mapped_column, relationship, with_loader_criteria

from app.database import Base
from app.models.mixins import TimestampMixin, UTCDateTime, utc_now


class Post(TimestampMixin, Base):
    """A blog post owned by one user."""

    __tablename__ = "posts"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    title: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    content: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    user_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("users.id"),
        nullable=True,
        index=True,
    )

    # NULL while the post is active
    deleted_at: Mapped[Optional[datetime]] = mapped_column(
        UTCDateTime(),
        nullable=True,
        default=None,
        comment="Soft-delete marker",
    )

    author: Mapped[Optional["User"]] = relationship(back_populates="posts")  # noqa: F821
    comments: Mapped[List["Comment"]] = relationship(back_populates="post")  # noqa: F821

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None

    def soft_delete(self) -> None:
        self.deleted_at = utc_now()

    def restore(self) -> None:
        self.deleted_at = None

    def __repr__(self) -> str:
        return f"<Post(id={self.id}, user_id={self.user_id}, deleted={self.is_deleted})>"


@event.listens_for(Session, "do_orm_execute")
def _exclude_soft_deleted_posts(execute_state) -> None:
    if (
        execute_state.is_select
        and not execute_state.is_column_load
        and not execute_state.is_relationship_load
        and not execute_state.execution_options.get("include_deleted", False)
    ):
        execute_state.statement = execute_state.statement.options(
            with_loader_criteria(
                Post,
                lambda cls: cls.deleted_at.is_(None),
                include_aliases=True,
            )
        )
