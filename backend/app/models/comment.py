"""Comment model: many comments belong to one post and one user."""

from typing import Optional

from sqlalchemy import ForeignKey, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.database import Base
from app.models.mixins import TimestampMixin


class Comment(TimestampMixin, Base):
    __tablename__ = "comments"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    content: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    post_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("posts.id"),
        nullable=True,
        index=True,
    )
    user_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("users.id"),
        nullable=True,
        index=True,
    )

    post: Mapped[Optional["Post"]] = relationship(back_populates="comments")  # noqa: F821
    author: Mapped[Optional["User"]] = relationship(back_populates="comments")  # noqa: F821

    def __repr__(self) -> str:
        return f"<Comment(id={self.id}, post_id={self.post_id}, user_id={self.user_id})>"
