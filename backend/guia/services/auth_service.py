"""
Guia Backend — Authentication Primitives
==========================================

What:  Password hashing, bearer-token issuance/verification, and Google
       identity token verification.
How:   bcrypt (cost 10) for passwords; python-jose HS256 JWTs whose payload
       is {"userId": "<uuid>", "exp": <unix time>}; google-auth verifies
       Firebase identity tokens against the configured project.
Who:   TokenService and GoogleIdentityVerifier are built once by
       build_context(); UserService and the bearer guard use them.

The signing secret comes from configuration and is the same for every
process, so tokens survive restarts and work across workers.
"""

import logging
import uuid
from datetime import datetime, timedelta, timezone
from typing import Any, Dict

import bcrypt
import requests
from google.auth.transport import requests as google_requests
from google.oauth2 import id_token
from jose import ExpiredSignatureError, JWTError, jwt
from starlette.concurrency import run_in_threadpool

from guia.exceptions import ForbiddenError, UnauthorizedError

logger = logging.getLogger(__name__)

BCRYPT_ROUNDS = 10


# ── Passwords ─────────────────────────────────────────────────────────────

def _hash(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(rounds=BCRYPT_ROUNDS)).decode("utf-8")


def _check(password: str, hashed: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode("utf-8"), hashed.encode("utf-8"))
    except ValueError:
        # Stored value is not a bcrypt hash
        return False


async def hash_password(password: str) -> str:
    return await run_in_threadpool(_hash, password)


async def verify_password(password: str, hashed: str) -> bool:
    return await run_in_threadpool(_check, password, hashed)


# ── Bearer tokens ─────────────────────────────────────────────────────────

class TokenService:
    """Issues and verifies the API's own bearer tokens."""

    def __init__(self, secret: str, algorithm: str = "HS256", expire_minutes: int = 60):
        self.secret = secret
        self.algorithm = algorithm
        self.expire_minutes = expire_minutes

    def issue(self, user_id: uuid.UUID) -> str:
        expires = datetime.now(timezone.utc) + timedelta(minutes=self.expire_minutes)
        return jwt.encode(
            {"userId": str(user_id), "exp": expires},
            self.secret,
            algorithm=self.algorithm,
        )

    def verify(self, token: str) -> uuid.UUID:
        """
        Returns the user id carried by `token`.

        Raises:
            ForbiddenError: bad signature, expired, or malformed payload
        """
        try:
            payload = jwt.decode(token, self.secret, algorithms=[self.algorithm])
        except ExpiredSignatureError:
            raise ForbiddenError(message="Token expired")
        except JWTError as e:
            logger.info("Rejected bearer token: %s", str(e))
            raise ForbiddenError(message="Invalid token")

        try:
            return uuid.UUID(str(payload["userId"]))
        except (KeyError, ValueError):
            raise ForbiddenError(message="Invalid token")


# ── Google identity ───────────────────────────────────────────────────────

class GoogleIdentityVerifier:
    """
    Verifies Google (Firebase Authentication) identity tokens.

    The session is reused across calls so Google's signing certificates are
    fetched over a pooled connection.
    """

    def __init__(self, project_id: str):
        self.project_id = project_id
        self._request = google_requests.Request(session=requests.Session())

    def _verify(self, token: str) -> Dict[str, Any]:
        return id_token.verify_firebase_token(token, self._request, audience=self.project_id)

    async def verify(self, token: str) -> Dict[str, Any]:
        """
        Returns the token's claims (at least `email`; usually `name`).

        Raises:
            UnauthorizedError: the token is not a valid identity token for
                               the configured project, or carries no email
        """
        if not self.project_id:
            raise UnauthorizedError(message="Google sign-in is not configured")
        try:
            claims = await run_in_threadpool(self._verify, token)
        except Exception as e:
            logger.warning("Google identity token rejected: %s", str(e))
            raise UnauthorizedError(message="Invalid Google token")

        if not claims or not claims.get("email"):
            raise UnauthorizedError(message="Invalid Google token")
        return claims
