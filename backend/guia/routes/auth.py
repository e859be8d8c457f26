"""
Guia Backend — Authentication Route Handlers
==============================================

Routes:
    POST /login    email + password → bearer token
    GET  /google   Authorization: Bearer <Google identity token> → bearer token
                   201 with the new user when the email had no account,
                   200 with the login payload otherwise
"""

from typing import Optional

from fastapi import APIRouter, Depends
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from fastapi.security import HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession

from guia.context import AppContext
from guia.database import get_db_session
from guia.dependencies import bearer_scheme, get_context
from guia.exceptions import UnauthorizedError
from guia.schemas.common import ErrorResponse
from guia.schemas.user import LoginRequest, LoginResponse, UserWithToken

router = APIRouter(tags=["Auth"])


@router.post(
    "/login",
    response_model=LoginResponse,
    responses={401: {"description": "email or password incorrect", "model": ErrorResponse}},
    summary="Log in with email and password",
)
async def login(
    payload: LoginRequest,
    db: AsyncSession = Depends(get_db_session),
    context: AppContext = Depends(get_context),
):
    return await context.users.login(db, payload.email, payload.password)


@router.get(
    "/google",
    response_model=LoginResponse,
    responses={
        201: {"description": "Account created", "model": UserWithToken},
        401: {"description": "Missing or invalid identity token", "model": ErrorResponse},
    },
    summary="Sign in with a Google identity token",
)
async def google_sign_in(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: AsyncSession = Depends(get_db_session),
    context: AppContext = Depends(get_context),
):
    if credentials is None or not credentials.credentials:
        raise UnauthorizedError(message="Google identity token required")

    created, body = await context.users.google_sign_in(db, credentials.credentials)
    if created:
        return JSONResponse(status_code=201, content=jsonable_encoder(body.model_dump(by_alias=True)))
    return body
