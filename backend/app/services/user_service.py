"""
Blog Backend — User Service
=============================

What:  Signup and update workflows for users.
How:   Each method performs at most one lookup and one write on the session
       it is given; committing is left to the request's unit of work.
Who:   Called by the /users route handlers.

Signup:   lookup by email → conflict? → build → validate → insert (hook runs)
Update:   lookup by id → not found? → assign supplied fields → flush
          (validation only if the caller passes validate=True)

Error translation:
    Our own exceptions (ValidationError, ConflictError, NotFoundError)
    propagate unchanged. SQLAlchemy errors become DatabaseError carrying the
    driver's message, e.g. "UNIQUE constraint failed: users.email" when a
    concurrent signup wins the race past the email lookup.
"""

import logging
from typing import Any, Dict, Optional

from sqlalchemy import select
from sqlalchemy.exc import DBAPIError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.exceptions import BlogError, ConflictError, DatabaseError, NotFoundError
from app.models.user import User
from app.schemas.user import UserResponse

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = ("name", "email", "role")


def describe_db_error(exc: SQLAlchemyError) -> str:
    """The driver's own message when there is one, else SQLAlchemy's."""
    if isinstance(exc, DBAPIError) and exc.orig is not None:
        return str(exc.orig)
    return str(exc)


class UserService:
    """Business logic for user signup and update."""

    async def create_user(
        self,
        db: AsyncSession,
        name: Optional[str],
        email: Optional[str],
        role: Optional[str] = None,
    ) -> UserResponse:
        """
        Register a new user.

        Raises:
            ConflictError: email already registered (→ 400)
            ValidationError: field constraint or pre-insert hook failed (→ 500)
            DatabaseError: the insert failed in the store (→ 500)
        """
        try:
            if email is not None:
                result = await db.execute(select(User).where(User.email == email))
                if result.scalar_one_or_none() is not None:
                    logger.info("Signup rejected, email already registered: %s", email)
                    raise ConflictError()

            user = User(name=name, email=email, role=role)
            user.validate()

            db.add(user)
            await db.flush()
            logger.info("User %s created (role=%s)", user.id, user.role)

            return UserResponse.model_validate(user)

        except BlogError:
            raise
        except SQLAlchemyError as e:
            logger.error("Database error creating user %s: %s", email, str(e))
            raise DatabaseError(
                message=describe_db_error(e),
                context={"operation": "create_user", "error_type": type(e).__name__},
            )

    async def update_user(
        self,
        db: AsyncSession,
        user_id: int,
        changes: Dict[str, Any],
        validate: bool = False,
    ) -> UserResponse:
        """
        Apply `changes` to an existing user.

        Only keys present in `changes` are written. Field validation is
        skipped unless `validate` is True, so an update may store a short
        name, a malformed email or an unknown role.

        Raises:
            NotFoundError: no user with this id (→ 404)
            ValidationError: only when validate=True
            DatabaseError: the update failed in the store (→ 500)
        """
        try:
            user = await db.get(User, user_id)
            if user is None:
                raise NotFoundError(resource="User", resource_id=user_id)

            for field, value in changes.items():
                if field in UPDATABLE_FIELDS:
                    setattr(user, field, value)

            if validate:
                user.validate()

            await db.flush()
            logger.info("User %s updated: %s", user.id, ", ".join(sorted(changes)) or "no fields")

            return UserResponse.model_validate(user)

        except BlogError:
            raise
        except SQLAlchemyError as e:
            logger.error("Database error updating user %s: %s", user_id, str(e))
            raise DatabaseError(
                message=describe_db_error(e),
                context={"operation": "update_user", "user_id": user_id},
            )


# ── Singleton Instance ────────────────────────────────────────────────────
user_service = UserService()
