"""Comment operations (service layer only; no HTTP surface yet)."""

import logging
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.exceptions import DatabaseError
from app.models.comment import Comment
from app.schemas.post import CommentResponse
from app.services.user_service import describe_db_error

logger = logging.getLogger(__name__)


class CommentService:

    async def create_comment(
        self,
        db: AsyncSession,
        post_id: int,
        user_id: int,
        content: Optional[str],
    ) -> CommentResponse:
        """The store's foreign keys reject unknown posts and users (DatabaseError)."""
        try:
            comment = Comment(post_id=post_id, user_id=user_id, content=content)
            db.add(comment)
            await db.flush()
            logger.info("Comment %s added to post %s by user %s", comment.id, post_id, user_id)
            return CommentResponse.model_validate(comment)
        except SQLAlchemyError as e:
            logger.error("Database error adding comment to post %s: %s", post_id, str(e))
            raise DatabaseError(
                message=describe_db_error(e),
                context={"operation": "create_comment", "post_id": post_id, "user_id": user_id},
            )

    async def list_comments(self, db: AsyncSession, post_id: int) -> List[CommentResponse]:
        try:
            result = await db.execute(
                select(Comment).where(Comment.post_id == post_id).order_by(Comment.id)
            )
            return [CommentResponse.model_validate(c) for c in result.scalars().all()]
        except SQLAlchemyError as e:
            logger.error("Database error listing comments for post %s: %s", post_id, str(e))
            raise DatabaseError(message=describe_db_error(e), context={"post_id": post_id})


comment_service = CommentService()
