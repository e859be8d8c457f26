"""
Guia Backend — User Route Handlers
====================================

Routes:
    GET   /users                  non-admin users
    POST  /users                  signup, 201 with a bearer token
    GET   /users/{id}
    PUT   /users/{id}             partial update
    PATCH /users/isActive/{id}    flip is_active
"""

import uuid
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from guia.context import AppContext
from guia.database import get_db_session
from guia.dependencies import get_context
from guia.schemas.common import ErrorResponse
from guia.schemas.user import UserCreate, UserResponse, UserUpdate, UserWithToken

router = APIRouter(prefix="/users", tags=["Users"])


@router.get("", response_model=List[UserResponse], summary="List non-admin users")
async def list_users(
    db: AsyncSession = Depends(get_db_session),
    context: AppContext = Depends(get_context),
):
    return await context.users.list_users(db)


@router.post(
    "",
    status_code=201,
    response_model=UserWithToken,
    responses={409: {"description": "Email already registered", "model": ErrorResponse}},
    summary="Sign up",
)
async def signup(
    payload: UserCreate,
    db: AsyncSession = Depends(get_db_session),
    context: AppContext = Depends(get_context),
):
    return await context.users.signup(db, payload)


@router.get(
    "/{user_id}",
    response_model=UserResponse,
    responses={404: {"description": "User not found", "model": ErrorResponse}},
    summary="Get one user",
)
async def get_user(
    user_id: uuid.UUID,
    db: AsyncSession = Depends(get_db_session),
    context: AppContext = Depends(get_context),
):
    return await context.users.get_user(db, user_id)


@router.put(
    "/{user_id}",
    response_model=UserResponse,
    responses={
        404: {"description": "User not found", "model": ErrorResponse},
        409: {"description": "Email already registered", "model": ErrorResponse},
    },
    summary="Update a user",
)
async def update_user(
    user_id: uuid.UUID,
    payload: UserUpdate,
    db: AsyncSession = Depends(get_db_session),
    context: AppContext = Depends(get_context),
):
    return await context.users.update(db, user_id, payload)


@router.patch(
    "/isActive/{user_id}",
    response_model=UserResponse,
    responses={404: {"description": "User not found", "model": ErrorResponse}},
    summary="Toggle whether a user is active",
)
async def toggle_user(
    user_id: uuid.UUID,
    db: AsyncSession = Depends(get_db_session),
    context: AppContext = Depends(get_context),
):
    return await context.users.toggle_active(db, user_id)
