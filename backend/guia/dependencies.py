"""
Guia Backend — FastAPI Dependencies
=====================================

What:  Request-scoped accessors for the application context and the bearer
       token guard.
"""

import uuid
from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from guia.context import AppContext
from guia.exceptions import UnauthorizedError

# auto_error=False: a missing header is reported as 401 by require_user,
# not FastAPI's default 403
bearer_scheme = HTTPBearer(auto_error=False)


def get_context(request: Request) -> AppContext:
    return request.app.state.context


def require_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    context: AppContext = Depends(get_context),
) -> uuid.UUID:
    """
    Resolve the caller from `Authorization: Bearer <token>`.

    Raises:
        UnauthorizedError: no bearer token (401)
        ForbiddenError:    token invalid or expired (403)
    """
    if credentials is None or not credentials.credentials:
        raise UnauthorizedError(message="Authentication token required")
    return context.tokens.verify(credentials.credentials)


def mutation_guard(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    context: AppContext = Depends(get_context),
) -> Optional[uuid.UUID]:
    """require_user, but only when REQUIRE_AUTH_FOR_MUTATIONS is on."""
    if not context.settings.require_auth_for_mutations:
        return None
    return require_user(credentials=credentials, context=context)
