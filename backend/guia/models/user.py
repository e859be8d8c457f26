"""
Guia Backend — User SQLAlchemy Model
======================================

What:  ORM model for the `users` table.
Who:   UserService (signup, update, toggle), AuthService (login, Google
       upsert), CommentService (author name join).

Table Design:
    - email is unique; signup and email changes check it before writing
    - password holds a bcrypt hash and is NULL for users created through
      Google sign-in
    - listings and comments reference users by a plain foreign key; deleting
      users is not an API operation
"""

import uuid
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import Boolean, String, TIMESTAMP, Uuid, text
from sqlalchemy.orm import Mapped, mapped_column

from guia.database import Base


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class User(Base):
    """A person who owns listings and writes comments."""

    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    name: Mapped[str] = mapped_column(String(255), nullable=False)

    email: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        unique=True,
        index=True,
    )

    password: Mapped[Optional[str]] = mapped_column(
        String(255),
        nullable=True,
        comment="bcrypt hash; NULL for accounts created through Google sign-in",
    )

    cod_area: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    phone: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    city: Mapped[Optional[str]] = mapped_column(String(120), nullable=True)
    country: Mapped[Optional[str]] = mapped_column(String(120), nullable=True)

    is_admin: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=text("false")
    )
    is_active: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=True, server_default=text("true")
    )

    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), nullable=False, default=utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), nullable=False, default=utcnow
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email='{self.email}', is_active={self.is_active})>"
