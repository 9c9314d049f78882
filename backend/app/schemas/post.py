"""Response models for posts and comments (service layer only; no routes yet)."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class PostResponse(BaseModel):
    id: int
    title: Optional[str] = None
    content: Optional[str] = None
    user_id: Optional[int] = None
    created_at: datetime
    updated_at: datetime
    deleted_at: Optional[datetime] = Field(
        default=None,
        description="Set when the post has been soft-deleted",
    )

    model_config = {"from_attributes": True}


class CommentResponse(BaseModel):
    id: int
    content: Optional[str] = None
    post_id: Optional[int] = None
    user_id: Optional[int] = None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}
