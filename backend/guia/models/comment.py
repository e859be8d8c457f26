"""
Guia Backend — Comment SQLAlchemy Model
=========================================

What:  A star-rated review attached to exactly one listing.
How:   One nullable foreign key per listing kind; CommentService guarantees
       exactly one of them is set on creation. The Rating Aggregator joins a
       kind's table to this one through that kind's column.

Invariants:
    - exactly one `<kind>_id` column is populated
    - user_id is optional; is_anonymous is true iff user_id was absent at creation
    - deleting a listing nulls the reference instead of failing the delete
"""

import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import Boolean, Float, ForeignKey, Text, TIMESTAMP, Uuid, text
from sqlalchemy.orm import Mapped, mapped_column

from guia.database import Base
from guia.models.user import utcnow


def _listing_fk(table: str) -> Mapped[Optional[uuid.UUID]]:
    return mapped_column(
        Uuid,
        ForeignKey(f"{table}.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )


class Comment(Base):
    __tablename__ = "comments"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    comments: Mapped[str] = mapped_column(Text, nullable=False)

    stars: Mapped[float] = mapped_column(Float, nullable=False)

    user_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid, ForeignKey("users.id"), nullable=True, index=True
    )

    restaurant_id: Mapped[Optional[uuid.UUID]] = _listing_fk("restaurants")
    hotel_id: Mapped[Optional[uuid.UUID]] = _listing_fk("hotels")
    taxi_id: Mapped[Optional[uuid.UUID]] = _listing_fk("taxis")
    gym_id: Mapped[Optional[uuid.UUID]] = _listing_fk("gyms")
    supermarket_id: Mapped[Optional[uuid.UUID]] = _listing_fk("supermarkets")
    tourism_id: Mapped[Optional[uuid.UUID]] = _listing_fk("tourisms")
    movie_theater_id: Mapped[Optional[uuid.UUID]] = _listing_fk("movie_theaters")
    emergency_id: Mapped[Optional[uuid.UUID]] = _listing_fk("emergencies")

    is_anonymous: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=text("false")
    )

    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), nullable=False, default=utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), nullable=False, default=utcnow
    )

    def __repr__(self) -> str:
        return f"<Comment(id={self.id}, stars={self.stars}, is_anonymous={self.is_anonymous})>"
