"""
Blog Backend — Post Service
=============================

What:  Create/read/delete operations for posts. No HTTP surface yet.
How:   Deletion is soft: `delete_post` stamps `deleted_at`, after which the
       post is hidden from every default read (see app.models.post).
       Reads that need deleted posts pass include_deleted=True.
"""

import logging
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.exceptions import BlogError, DatabaseError, NotFoundError
from app.models.post import Post
from app.schemas.post import PostResponse
from app.services.user_service import describe_db_error

logger = logging.getLogger(__name__)


class PostService:

    async def create_post(
        self,
        db: AsyncSession,
        user_id: int,
        title: Optional[str],
        content: Optional[str],
    ) -> PostResponse:
        """
        Raises:
            DatabaseError: e.g. FOREIGN KEY constraint failed for an unknown user
        """
        try:
            post = Post(user_id=user_id, title=title, content=content)
            db.add(post)
            await db.flush()
            logger.info("Post %s created by user %s", post.id, user_id)
            return PostResponse.model_validate(post)
        except SQLAlchemyError as e:
            logger.error("Database error creating post for user %s: %s", user_id, str(e))
            raise DatabaseError(
                message=describe_db_error(e),
                context={"operation": "create_post", "user_id": user_id},
            )

    async def _load(self, db: AsyncSession, post_id: int, include_deleted: bool) -> Post:
        # session.get() would answer from the identity map without the filter
        query = select(Post).where(Post.id == post_id)
        if include_deleted:
            query = query.execution_options(include_deleted=True)
        result = await db.execute(query)
        post = result.scalar_one_or_none()
        if post is None:
            raise NotFoundError(resource="Post", resource_id=post_id)
        return post

    async def get_post(
        self,
        db: AsyncSession,
        post_id: int,
        include_deleted: bool = False,
    ) -> PostResponse:
        try:
            post = await self._load(db, post_id, include_deleted)
            return PostResponse.model_validate(post)
        except BlogError:
            raise
        except SQLAlchemyError as e:
            logger.error("Database error fetching post %s: %s", post_id, str(e))
            raise DatabaseError(message=describe_db_error(e), context={"post_id": post_id})

    async def list_posts(
        self,
        db: AsyncSession,
        user_id: Optional[int] = None,
        include_deleted: bool = False,
    ) -> List[PostResponse]:
        """Posts ordered by id, optionally limited to one author."""
        try:
            query = select(Post).order_by(Post.id)
            if user_id is not None:
                query = query.where(Post.user_id == user_id)
            if include_deleted:
                query = query.execution_options(include_deleted=True)
            result = await db.execute(query)
            return [PostResponse.model_validate(post) for post in result.scalars().all()]
        except SQLAlchemyError as e:
            logger.error("Database error listing posts: %s", str(e))
            raise DatabaseError(message=describe_db_error(e), context={"user_id": user_id})

    async def delete_post(self, db: AsyncSession, post_id: int) -> PostResponse:
        """
        Soft-delete an active post.

        Raises:
            NotFoundError: unknown id, or the post is already deleted
        """
        try:
            post = await self._load(db, post_id, include_deleted=False)
            post.soft_delete()
            await db.flush()
            logger.info("Post %s soft-deleted", post_id)
            return PostResponse.model_validate(post)
        except BlogError:
            raise
        except SQLAlchemyError as e:
            logger.error("Database error deleting post %s: %s", post_id, str(e))
            raise DatabaseError(message=describe_db_error(e), context={"post_id": post_id})

    async def restore_post(self, db: AsyncSession, post_id: int) -> PostResponse:
        """Clears the soft-delete marker; restoring an active post is a no-op."""
        try:
            post = await self._load(db, post_id, include_deleted=True)
            if post.is_deleted:
                post.restore()
                await db.flush()
                logger.info("Post %s restored", post_id)
            return PostResponse.model_validate(post)
        except BlogError:
            raise
        except SQLAlchemyError as e:
            logger.error("Database error restoring post %s: %s", post_id, str(e))
            raise DatabaseError(message=describe_db_error(e), context={"post_id": post_id})


post_service = PostService()
