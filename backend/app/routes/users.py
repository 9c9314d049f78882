"""
Blog Backend — User Route Handlers
====================================

What:  POST /users/signup (create) and PUT /users/{user_id} (update).
How:   Extracts the body, delegates to UserService, returns JSON.
       Failures are raised as exceptions and rendered by the global
       handlers in main.py.
"""

import logging

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db_session
from app.exceptions import NotFoundError
from app.schemas.common import ErrorResponse
from app.schemas.user import UserResponse, UserSignupRequest, UserUpdateRequest
from app.services.user_service import user_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/users", tags=["Users"])


@router.post(
    "/signup",
    response_model=UserResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        201: {"description": "User created", "model": UserResponse},
        400: {"description": "Email already registered", "model": ErrorResponse},
        500: {"description": "Validation or server error", "model": ErrorResponse},
    },
    summary="Register a new user",
)
async def signup(
    payload: UserSignupRequest,
    db: AsyncSession = Depends(get_db_session),
) -> UserResponse:
    """
    Create a user after checking the email is free and the fields are valid.

    Example:
        POST /users/signup {"name": "Alice Smith", "email": "alice@example.com", "role": "user"}
        → 201 {"id": 1, "name": "Alice Smith", ...}
    """
    return await user_service.create_user(
        db=db,
        name=payload.name,
        email=payload.email,
        role=payload.role,
    )


@router.put(
    "/{user_id}",
    response_model=UserResponse,
    responses={
        200: {"description": "Updated user", "model": UserResponse},
        404: {"description": "User not found", "model": ErrorResponse},
        500: {"description": "Server error", "model": ErrorResponse},
    },
    summary="Update an existing user",
)
async def update_user(
    user_id: str,
    payload: UserUpdateRequest,
    db: AsyncSession = Depends(get_db_session),
) -> UserResponse:
    """
    Write the supplied fields to the user. Field validation does not run
    here: `{"name": "Al"}` or `{"email": "not-an-email"}` are stored as sent.

    An id that is not an integer names no user, so it is a 404 like any
    other unknown id.
    """
    try:
        pk = int(user_id)
    except ValueError:
        raise NotFoundError(resource="User", resource_id=user_id)

    return await user_service.update_user(
        db=db,
        user_id=pk,
        changes=payload.model_dump(exclude_unset=True),
    )
