"""
Guia Backend — Comment Request/Response Schemas
=================================================

What:  Payloads for POST /comments and the two read shapes (raw comment,
       comment with resolved author name).
"""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import AliasChoices, BaseModel, Field, field_validator

LISTING_FK_FIELDS = (
    "restaurant_id",
    "hotel_id",
    "taxi_id",
    "gym_id",
    "supermarket_id",
    "tourism_id",
    "movie_theater_id",
    "emergency_id",
)


class CommentCreate(BaseModel):
    """
    Body of POST /comments.

    Exactly one `<kind>_id` must be set; CommentService enforces that.
    `user_id` omitted, null or "" makes the comment anonymous.
    """
    comments: str = Field(min_length=1, description="Review text")
    stars: float = Field(ge=0, le=5, description="Rating from 0 to 5")
    user_id: Optional[uuid.UUID] = None

    restaurant_id: Optional[uuid.UUID] = None
    hotel_id: Optional[uuid.UUID] = None
    taxi_id: Optional[uuid.UUID] = None
    gym_id: Optional[uuid.UUID] = None
    supermarket_id: Optional[uuid.UUID] = None
    tourism_id: Optional[uuid.UUID] = None
    movie_theater_id: Optional[uuid.UUID] = Field(
        default=None,
        validation_alias=AliasChoices("movie_theater_id", "movieTheater_id"),
    )
    emergency_id: Optional[uuid.UUID] = None

    @field_validator("user_id", *LISTING_FK_FIELDS, mode="before")
    @classmethod
    def blank_is_none(cls, v):
        # HTML forms and some clients send "" for "no value"
        if isinstance(v, str) and not v.strip():
            return None
        return v


class CommentResponse(BaseModel):
    """A stored comment exactly as persisted (GET /comments, POST /comments)."""
    id: uuid.UUID
    comments: str
    stars: float
    user_id: Optional[uuid.UUID] = None
    restaurant_id: Optional[uuid.UUID] = None
    hotel_id: Optional[uuid.UUID] = None
    taxi_id: Optional[uuid.UUID] = None
    gym_id: Optional[uuid.UUID] = None
    supermarket_id: Optional[uuid.UUID] = None
    tourism_id: Optional[uuid.UUID] = None
    movie_theater_id: Optional[uuid.UUID] = None
    emergency_id: Optional[uuid.UUID] = None
    is_anonymous: bool = Field(alias="isAnonymous")
    created_at: Optional[datetime] = Field(default=None, alias="createdAt")

    model_config = {"from_attributes": True, "populate_by_name": True}


class CommentWithAuthor(BaseModel):
    """
    A comment as shown under a listing.

    userName is "Anónimo" for anonymous comments or when the author no longer
    resolves; otherwise the first word of the author's name. The route drops
    the null foreign keys so only the listing's own `<kind>_id` remains.
    """
    id: uuid.UUID
    comments: str
    stars: float
    restaurant_id: Optional[uuid.UUID] = None
    hotel_id: Optional[uuid.UUID] = None
    taxi_id: Optional[uuid.UUID] = None
    gym_id: Optional[uuid.UUID] = None
    supermarket_id: Optional[uuid.UUID] = None
    tourism_id: Optional[uuid.UUID] = None
    movie_theater_id: Optional[uuid.UUID] = None
    emergency_id: Optional[uuid.UUID] = None
    is_anonymous: bool = Field(alias="isAnonymous")
    user_name: str = Field(alias="userName")

    model_config = {"populate_by_name": True}
