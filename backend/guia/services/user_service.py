"""
Guia Backend — User Service
=============================

What:  Signup, lookup, update, activation toggle, email/password login and
       Google sign-in for user accounts.
Who:   Called by routes/users.py and routes/auth.py.

Passwords are stored as bcrypt hashes only. Accounts created through Google
sign-in have no password and cannot use POST /login until one is set.
"""

import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Tuple

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from guia.exceptions import ConflictError, NotFoundError, UnauthorizedError
from guia.models import User
from guia.schemas.user import (
    LoginResponse,
    UserCreate,
    UserResponse,
    UserUpdate,
    UserWithToken,
)
from guia.services.auth_service import (
    GoogleIdentityVerifier,
    TokenService,
    hash_password,
    verify_password,
)

logger = logging.getLogger(__name__)

LOGIN_FAILED = "email or password incorrect"


def normalize_email(email: str) -> str:
    return email.strip().lower()


class UserService:

    def __init__(self, tokens: TokenService, google: GoogleIdentityVerifier):
        self.tokens = tokens
        self.google = google

    async def _find_by_email(self, db: AsyncSession, email: str):
        result = await db.execute(select(User).where(func.lower(User.email) == normalize_email(email)))
        return result.scalar_one_or_none()

    async def _flush_unique(self, db: AsyncSession, email: str) -> None:
        try:
            await db.flush()
        except IntegrityError:
            raise ConflictError(message=f"Email '{email}' is already registered")

    async def get(self, db: AsyncSession, user_id: uuid.UUID) -> User:
        user = await db.get(User, user_id)
        if user is None:
            raise NotFoundError(resource="user", resource_id=str(user_id))
        return user

    async def signup(self, db: AsyncSession, payload: UserCreate) -> UserWithToken:
        """
        Raises:
            ConflictError: the email is already registered
        """
        email = normalize_email(payload.email)
        if await self._find_by_email(db, email) is not None:
            raise ConflictError(message=f"Email '{email}' is already registered")

        user = User(
            name=payload.name.strip(),
            email=email,
            password=await hash_password(payload.password),
            cod_area=payload.cod_area,
            phone=payload.phone,
            city=payload.city,
            country=payload.country,
            is_admin=payload.is_admin,
            is_active=payload.is_active,
        )
        db.add(user)
        await self._flush_unique(db, email)

        logger.info("User %s signed up", user.id)
        return UserWithToken(
            **UserResponse.model_validate(user).model_dump(),
            token=self.tokens.issue(user.id),
        )

    async def list_users(self, db: AsyncSession) -> List[UserResponse]:
        """Every non-admin account."""
        result = await db.execute(
            select(User).where(User.is_admin.is_(False)).order_by(User.created_at.desc())
        )
        return [UserResponse.model_validate(u) for u in result.scalars().all()]

    async def get_user(self, db: AsyncSession, user_id: uuid.UUID) -> UserResponse:
        return UserResponse.model_validate(await self.get(db, user_id))

    async def update(self, db: AsyncSession, user_id: uuid.UUID, payload: UserUpdate) -> UserResponse:
        """
        Write the fields present in `payload`.

        A non-empty password is re-hashed; an empty or absent one leaves the
        stored hash alone.

        Raises:
            NotFoundError: no user with that id
            ConflictError: the new email belongs to another user
        """
        user = await self.get(db, user_id)
        changes = payload.model_dump(exclude_unset=True)

        password = changes.pop("password", None)
        if password:
            user.password = await hash_password(password)

        if changes.get("email"):
            changes["email"] = normalize_email(changes["email"])
            other = await self._find_by_email(db, changes["email"])
            if other is not None and other.id != user.id:
                raise ConflictError(message=f"Email '{changes['email']}' is already registered")

        for field, value in changes.items():
            if value is not None:
                setattr(user, field, value)
        user.updated_at = datetime.now(timezone.utc)
        await self._flush_unique(db, user.email)

        logger.info("User %s updated (%s)", user_id, ", ".join(sorted(changes)) or "password")
        return UserResponse.model_validate(user)

    async def toggle_active(self, db: AsyncSession, user_id: uuid.UUID) -> UserResponse:
        user = await self.get(db, user_id)
        user.is_active = not user.is_active
        user.updated_at = datetime.now(timezone.utc)
        await db.flush()
        logger.info("User %s is_active=%s", user_id, user.is_active)
        return UserResponse.model_validate(user)

    async def login(self, db: AsyncSession, email: str, password: str) -> LoginResponse:
        """
        Raises:
            UnauthorizedError: unknown email, no password set, or wrong password
        """
        user = await self._find_by_email(db, email)
        if user is None or not user.password or not await verify_password(password, user.password):
            logger.info("Failed login for %s", normalize_email(email))
            raise UnauthorizedError(message=LOGIN_FAILED)

        return LoginResponse(
            message="Login successful",
            token=self.tokens.issue(user.id),
            email=user.email,
            name=user.name,
            id=user.id,
        )

    async def google_sign_in(
        self,
        db: AsyncSession,
        identity_token: str,
    ) -> Tuple[bool, Any]:
        """
        Exchange a Google identity token for an API token.

        Returns:
            (created, body): created is True when the email had no account
            yet, in which case body is a UserWithToken; otherwise body is a
            LoginResponse.

        Raises:
            UnauthorizedError: the identity token did not verify
        """
        claims: Dict[str, Any] = await self.google.verify(identity_token)
        email = normalize_email(claims["email"])

        user = await self._find_by_email(db, email)
        if user is not None:
            return False, LoginResponse(
                message="Login successful",
                token=self.tokens.issue(user.id),
                email=user.email,
                name=user.name,
                id=user.id,
            )

        user = User(
            name=claims.get("name") or email.split("@")[0],
            email=email,
            password=None,
        )
        db.add(user)
        await self._flush_unique(db, email)

        logger.info("User %s created through Google sign-in", user.id)
        return True, UserWithToken(
            **UserResponse.model_validate(user).model_dump(),
            token=self.tokens.issue(user.id),
        )
