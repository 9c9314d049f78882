"""
Blog Backend — User Request/Response Schemas
==============================================

What:  Pydantic models for the signup and update endpoints.
How:   FastAPI validates request bodies against these models and serializes
       responses through UserResponse.

The request models only check JSON types. Field rules (name length, email
shape, role) belong to the User model: signup applies them, update does
not, so they cannot live here.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class UserSignupRequest(BaseModel):
    """Body of POST /users/signup."""
    name: Optional[str] = Field(default=None, description="Display name (at least 3 characters)")
    email: Optional[str] = Field(default=None, description="Unique email address")
    role: Optional[str] = Field(default=None, description="One of: user, admin")


class UserUpdateRequest(BaseModel):
    """
    Body of PUT /users/{id}.

    Any subset of the fields may be sent; only the fields present in the
    payload are written (`model_dump(exclude_unset=True)`).
    """
    name: Optional[str] = Field(default=None, description="New display name")
    email: Optional[str] = Field(default=None, description="New email address")
    role: Optional[str] = Field(default=None, description="New role")


class UserResponse(BaseModel):
    """A user record as returned by both endpoints."""
    id: int = Field(description="System-assigned identity")
    name: Optional[str] = Field(default=None)
    email: Optional[str] = Field(default=None)
    role: Optional[str] = Field(default=None)
    created_at: datetime = Field(description="Creation timestamp (UTC)")
    updated_at: datetime = Field(description="Last update timestamp (UTC)")

    model_config = {"from_attributes": True}
