"""
Guia Backend — User & Auth Schemas
====================================

What:  Signup/update bodies, the public user shape (never includes the
       password hash), and login responses.
How:   Inputs accept both the camelCase names the web client sends
       (codArea, isAdmin, isActive) and snake_case; outputs use camelCase.
"""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import AliasChoices, BaseModel, Field

EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"


class UserCreate(BaseModel):
    """Body of POST /users (signup)."""
    name: str = Field(min_length=1)
    email: str = Field(pattern=EMAIL_PATTERN)
    password: str = Field(min_length=1)
    cod_area: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("codArea", "cod_area")
    )
    phone: Optional[str] = None
    city: Optional[str] = None
    country: Optional[str] = None
    is_admin: bool = Field(default=False, validation_alias=AliasChoices("isAdmin", "is_admin"))
    is_active: bool = Field(default=True, validation_alias=AliasChoices("isActive", "is_active"))


class UserUpdate(BaseModel):
    """
    Body of PUT /users/{id}.

    Only fields present in the body are written. `password`, when present
    and non-empty, is re-hashed; otherwise the stored hash is kept.
    """
    name: Optional[str] = Field(default=None, min_length=1)
    email: Optional[str] = Field(default=None, pattern=EMAIL_PATTERN)
    password: Optional[str] = None
    cod_area: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("codArea", "cod_area")
    )
    phone: Optional[str] = None
    city: Optional[str] = None
    country: Optional[str] = None
    is_admin: Optional[bool] = Field(
        default=None, validation_alias=AliasChoices("isAdmin", "is_admin")
    )
    is_active: Optional[bool] = Field(
        default=None, validation_alias=AliasChoices("isActive", "is_active")
    )


class UserResponse(BaseModel):
    id: uuid.UUID
    name: str
    email: str
    cod_area: Optional[str] = Field(default=None, alias="codArea")
    phone: Optional[str] = None
    city: Optional[str] = None
    country: Optional[str] = None
    is_admin: bool = Field(alias="isAdmin")
    is_active: bool = Field(alias="isActive")
    created_at: Optional[datetime] = Field(default=None, alias="createdAt")
    updated_at: Optional[datetime] = Field(default=None, alias="updatedAt")

    model_config = {"from_attributes": True, "populate_by_name": True}


class UserWithToken(UserResponse):
    """Returned by signup and by the first Google sign-in of a new email."""
    token: str


class LoginRequest(BaseModel):
    email: str
    password: str


class LoginResponse(BaseModel):
    """Returned by POST /login and by GET /google for an existing user."""
    message: str
    token: str
    email: str
    name: str
    id: uuid.UUID
