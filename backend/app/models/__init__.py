"""ORM models. Importing the package registers every table on Base.metadata."""

from app.models.user import User
from app.models.post import Post
from app.models.comment import Comment

__all__ = ["User", "Post", "Comment"]
