"""
Guia Backend — Comment Route Handlers
=======================================

Routes:
    GET    /comments                  every comment, as stored
    GET    /comments/{slug}/{id}      comments on one listing, with userName
    POST   /comments                  201
    DELETE /comments/{id}             204

Slugs: restaurant, hotel, taxi, gym, supermarket, tourism, movieTheater,
emergency. An unknown slug is a 404.
"""

import uuid
from typing import List

from fastapi import APIRouter, Depends, Response
from sqlalchemy.ext.asyncio import AsyncSession

from guia.context import AppContext
from guia.database import get_db_session
from guia.dependencies import get_context
from guia.schemas.comment import CommentCreate, CommentResponse, CommentWithAuthor
from guia.schemas.common import ErrorResponse

router = APIRouter(prefix="/comments", tags=["Comments"])


@router.get("", response_model=List[CommentResponse], summary="List every comment")
async def list_comments(
    db: AsyncSession = Depends(get_db_session),
    context: AppContext = Depends(get_context),
):
    return await context.comments.list_all(db)


@router.get(
    "/{slug}/{listing_id}",
    response_model=List[CommentWithAuthor],
    # Only the listing's own <kind>_id is present on each item
    response_model_exclude_none=True,
    responses={404: {"description": "Unknown listing type", "model": ErrorResponse}},
    summary="List the comments on one listing",
)
async def list_listing_comments(
    slug: str,
    listing_id: uuid.UUID,
    db: AsyncSession = Depends(get_db_session),
    context: AppContext = Depends(get_context),
):
    return await context.comments.list_for_listing(db, slug, listing_id)


@router.post(
    "",
    status_code=201,
    response_model=CommentResponse,
    responses={
        400: {"description": "Zero or several listings referenced", "model": ErrorResponse},
        404: {"description": "Listing not found", "model": ErrorResponse},
    },
    summary="Comment on a listing",
)
async def create_comment(
    payload: CommentCreate,
    db: AsyncSession = Depends(get_db_session),
    context: AppContext = Depends(get_context),
):
    return await context.comments.create(db, payload)


@router.delete(
    "/{comment_id}",
    status_code=204,
    responses={404: {"description": "Comment not found", "model": ErrorResponse}},
    summary="Delete a comment",
)
async def delete_comment(
    comment_id: uuid.UUID,
    db: AsyncSession = Depends(get_db_session),
    context: AppContext = Depends(get_context),
) -> Response:
    await context.comments.delete(db, comment_id)
    return Response(status_code=204)
