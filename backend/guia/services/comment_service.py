"""
Guia Backend — Comment Service
================================

What:  Create, list and delete star-rated comments on listings.
How:   The listing a comment belongs to is identified by whichever
       `<kind>_id` the client set; KINDS_BY_FK maps that column back to the
       kind so existence can be checked against the right table.

Author names:
    Comments under a listing are returned with `userName`: "Anónimo" for
    anonymous comments or when the author row is gone, otherwise the first
    whitespace-separated word of the author's name.
"""

import logging
import uuid
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from guia.exceptions import DatabaseError, NotFoundError, ValidationError
from guia.kinds import KINDS_BY_FK, KINDS_BY_SLUG
from guia.models import Comment, User
from guia.schemas.comment import (
    LISTING_FK_FIELDS,
    CommentCreate,
    CommentResponse,
    CommentWithAuthor,
)

logger = logging.getLogger(__name__)

ANONYMOUS_NAME = "Anónimo"


def display_name(is_anonymous: bool, user_name: Optional[str]) -> str:
    if is_anonymous or not user_name or not user_name.split():
        return ANONYMOUS_NAME
    return user_name.split()[0]


class CommentService:

    async def create(self, db: AsyncSession, payload: CommentCreate) -> CommentResponse:
        """
        Attach a comment to exactly one listing.

        Raises:
            ValidationError: zero or several `<kind>_id` fields were set
            NotFoundError:   the referenced listing does not exist
        """
        targets = {
            field: getattr(payload, field)
            for field in LISTING_FK_FIELDS
            if getattr(payload, field) is not None
        }
        if len(targets) != 1:
            raise ValidationError(
                message="A comment must reference exactly one listing",
                field="listing",
                context={"given": sorted(targets)},
            )

        (fk_field, listing_id), = targets.items()
        kind = KINDS_BY_FK[fk_field]
        if await db.get(kind.model, listing_id) is None:
            raise NotFoundError(resource=kind.name, resource_id=str(listing_id))

        comment = Comment(
            comments=payload.comments,
            stars=payload.stars,
            user_id=payload.user_id,
            is_anonymous=payload.user_id is None,
            **{fk_field: listing_id},
        )
        db.add(comment)
        try:
            await db.flush()
        except SQLAlchemyError as e:
            logger.error("Database error creating comment on %s %s: %s", kind.name, listing_id, str(e))
            raise DatabaseError(context={"kind": kind.name, "error_type": type(e).__name__})

        logger.info(
            "Comment %s created on %s %s (stars=%s, anonymous=%s)",
            comment.id,
            kind.name,
            listing_id,
            comment.stars,
            comment.is_anonymous,
        )
        return CommentResponse.model_validate(comment)

    async def list_all(self, db: AsyncSession) -> List[CommentResponse]:
        result = await db.execute(select(Comment).order_by(Comment.created_at.desc()))
        return [CommentResponse.model_validate(c) for c in result.scalars().all()]

    async def list_for_listing(
        self,
        db: AsyncSession,
        slug: str,
        listing_id: uuid.UUID,
    ) -> List[CommentWithAuthor]:
        """
        Comments on one listing with the author's display name.

        Raises:
            NotFoundError: `slug` names no listing kind
        """
        kind = KINDS_BY_SLUG.get(slug)
        if kind is None:
            raise NotFoundError(resource="listing type", resource_id=slug)

        fk = getattr(Comment, kind.comment_fk)
        result = await db.execute(
            select(Comment, User.name)
            .outerjoin(User, Comment.user_id == User.id)
            .where(fk == listing_id)
            .order_by(Comment.created_at.desc())
        )
        return [
            CommentWithAuthor(
                id=comment.id,
                comments=comment.comments,
                stars=comment.stars,
                is_anonymous=comment.is_anonymous,
                user_name=display_name(comment.is_anonymous, user_name),
                **{kind.comment_fk: listing_id},
            )
            for comment, user_name in result.all()
        ]

    async def delete(self, db: AsyncSession, comment_id: uuid.UUID) -> None:
        comment = await db.get(Comment, comment_id)
        if comment is None:
            raise NotFoundError(resource="comment", resource_id=str(comment_id))
        try:
            await db.delete(comment)
            await db.flush()
        except SQLAlchemyError as e:
            logger.error("Database error deleting comment %s: %s", comment_id, str(e))
            raise DatabaseError(context={"comment_id": str(comment_id), "error_type": type(e).__name__})
        logger.info("Deleted comment %s", comment_id)
