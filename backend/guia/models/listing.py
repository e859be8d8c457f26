"""
Guia Backend — Listing SQLAlchemy Models
==========================================

What:  One table per listing kind (restaurants, hotels, taxis, gyms,
       supermarkets, tourisms, movie_theaters, emergencies).
How:   The columns every kind shares live on ListingMixin; each concrete
       class adds only its table name and, except MovieTheater, a
       `categories` array. The generic ListingService works against the
       mixin's columns, so no per-kind query code exists.

Column Notes:
    - images / offers / categories: PostgreSQL TEXT[] (overlap search uses
      the `&&` operator). On SQLite they degrade to JSON so the test suite
      can run against an in-memory database.
    - location: {"latitude": float, "longitude": float}
    - time:     {"weekdays": str, "weekends": str}
    - zone:     one of Este, Norte, Sur, Oeste, Central (validated by the
                form parser, stored as text)
    - images is append-only through the API: updates add URLs, never drop them
"""

import uuid
from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy import (
    JSON,
    Boolean,
    ForeignKey,
    Index,
    String,
    Text,
    TIMESTAMP,
    Uuid,
    text,
)
from sqlalchemy.dialects import postgresql
from sqlalchemy.orm import Mapped, mapped_column

from guia.database import Base
from guia.models.user import utcnow

# TEXT[] on PostgreSQL, JSON list on SQLite
TextArray = postgresql.ARRAY(Text).with_variant(JSON(), "sqlite")

DEFAULT_WEB = "No hay dirección web"
DEFAULT_ZONE = "Central"


class ListingMixin:
    """Columns shared by every listing kind."""

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    name: Mapped[str] = mapped_column(String(255), nullable=False)

    location: Mapped[Optional[Dict[str, Any]]] = mapped_column(JSON, nullable=True)

    images: Mapped[Optional[List[str]]] = mapped_column(TextArray, nullable=True, default=list)

    offers: Mapped[Optional[List[str]]] = mapped_column(TextArray, nullable=True, default=list)

    cod_area: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    phone: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    city: Mapped[Optional[str]] = mapped_column(String(120), nullable=True)
    country: Mapped[Optional[str]] = mapped_column(String(120), nullable=True)

    web: Mapped[Optional[str]] = mapped_column(
        String(255), nullable=True, default=DEFAULT_WEB
    )

    time: Mapped[Optional[Dict[str, Any]]] = mapped_column(JSON, nullable=True)

    zone: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=DEFAULT_ZONE,
        server_default=text(f"'{DEFAULT_ZONE}'"),
    )

    is_active: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=True, server_default=text("true")
    )

    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id"), nullable=False, index=True
    )

    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), nullable=False, default=utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), nullable=False, default=utcnow
    )

    def __repr__(self) -> str:
        return (
            f"<{type(self).__name__}(id={self.id}, name='{self.name}', "
            f"is_active={self.is_active})>"
        )


class Restaurant(ListingMixin, Base):
    __tablename__ = "restaurants"

    categories: Mapped[Optional[List[str]]] = mapped_column(TextArray, nullable=True, default=list)

    __table_args__ = (Index("idx_restaurants_active_name", "is_active", "name"),)


class Hotel(ListingMixin, Base):
    __tablename__ = "hotels"

    categories: Mapped[Optional[List[str]]] = mapped_column(TextArray, nullable=True, default=list)

    __table_args__ = (Index("idx_hotels_active_name", "is_active", "name"),)


class Taxi(ListingMixin, Base):
    __tablename__ = "taxis"

    categories: Mapped[Optional[List[str]]] = mapped_column(TextArray, nullable=True, default=list)

    __table_args__ = (Index("idx_taxis_active_name", "is_active", "name"),)


class Gym(ListingMixin, Base):
    __tablename__ = "gyms"

    categories: Mapped[Optional[List[str]]] = mapped_column(TextArray, nullable=True, default=list)

    __table_args__ = (Index("idx_gyms_active_name", "is_active", "name"),)


class Supermarket(ListingMixin, Base):
    __tablename__ = "supermarkets"

    categories: Mapped[Optional[List[str]]] = mapped_column(TextArray, nullable=True, default=list)

    __table_args__ = (Index("idx_supermarkets_active_name", "is_active", "name"),)


class Tourism(ListingMixin, Base):
    __tablename__ = "tourisms"

    categories: Mapped[Optional[List[str]]] = mapped_column(TextArray, nullable=True, default=list)

    __table_args__ = (Index("idx_tourisms_active_name", "is_active", "name"),)


class MovieTheater(ListingMixin, Base):
    """Movie theaters carry no category enumeration."""

    __tablename__ = "movie_theaters"

    __table_args__ = (Index("idx_movie_theaters_active_name", "is_active", "name"),)


class Emergency(ListingMixin, Base):
    __tablename__ = "emergencies"

    categories: Mapped[Optional[List[str]]] = mapped_column(TextArray, nullable=True, default=list)

    __table_args__ = (Index("idx_emergencies_active_name", "is_active", "name"),)
