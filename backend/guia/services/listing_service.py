"""
Guia Backend — Listing Service (Search & Mutation Pipelines)
==============================================================

What:  Every listing operation for one kind: list active (name search),
       list by owner, list by category, create, update, toggle, delete.
How:   One ListingService per ListingKind; the kind supplies the model, the
       category enumeration, the comment foreign key and the media folder,
       so the same code serves all eight tables.
Who:   Called by the router that routes/listings.py builds for each kind.

Mutation Flow (POST /<kind>, PUT /<kind>/{id}):
    ┌──────────────┐    ┌──────────────┐    ┌──────────────┐    ┌────────┐
    │ Parse fields │───▶│ Validate     │───▶│ Upload all   │───▶│ Flush  │
    │ (form_parser)│    │ images       │    │ concurrently │    │ (DB)   │
    └──────────────┘    └──────────────┘    └──────────────┘    └────────┘
    A ValidationError at either of the first two steps means nothing was
    uploaded. Uploads that succeeded are kept if a later step fails.

Pagination:
    List-active falls back to page 1 / default page size when page or limit
    are absent, non-numeric or below 1. List-by-category paginates only when
    both parse; otherwise it returns every match and reports the page it
    could parse (or null).
"""

import logging
import uuid
from datetime import datetime, timezone
from typing import List, Optional, Sequence, Tuple

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from guia.exceptions import DatabaseError, NotFoundError, ValidationError
from guia.kinds import ListingKind
from guia.models import User
from guia.models.listing import ListingMixin
from guia.schemas.listing import (
    ListingFormData,
    ListingPage,
    ListingResponse,
    RatedListingResponse,
)
from guia.services import form_parser
from guia.services.media_base import MediaService, UploadedImage
from guia.services.rating_service import average_stars

logger = logging.getLogger(__name__)


def parse_positive_int(raw: Optional[str]) -> Optional[int]:
    """int(raw) when it is a whole number >= 1, else None."""
    if raw is None:
        return None
    try:
        value = int(str(raw).strip())
    except ValueError:
        return None
    return value if value >= 1 else None


class ListingService:
    """
    Business logic for one listing kind.

    Services flush, never commit; get_db_session commits once the route
    returns.
    """

    def __init__(self, kind: ListingKind, media: MediaService, default_page_size: int = 10):
        self.kind = kind
        self.model = kind.model
        self.media = media
        self.default_page_size = default_page_size

    # ── Search ────────────────────────────────────────────────────────────

    def category_filter(self, categories: Sequence[str], dialect_name: str):
        """
        Rows whose `categories` shares at least one value with `categories`.

        PostgreSQL uses the array overlap operator (&&). SQLite stores the
        array as JSON, so the same test runs through json_each.
        """
        if dialect_name == "sqlite":
            each = func.json_each(self.model.categories).table_valued("value")
            return select(1).select_from(each).where(each.c.value.in_(list(categories))).exists()
        return self.model.categories.overlap(list(categories))

    async def _rated(self, db: AsyncSession, listings: Sequence[ListingMixin]) -> List[RatedListingResponse]:
        ratings = await average_stars(db, self.kind, [listing.id for listing in listings])
        items = []
        for listing in listings:
            item = RatedListingResponse.model_validate(listing)
            item.average_stars = ratings.get(listing.id)
            items.append(item)
        return items

    async def _page(
        self,
        db: AsyncSession,
        conditions: list,
        page: Optional[int],
        limit: Optional[int],
    ) -> Tuple[int, List[ListingMixin]]:
        count_result = await db.execute(select(func.count(self.model.id)).where(*conditions))
        total = count_result.scalar() or 0

        query = (
            select(self.model)
            .where(*conditions)
            .order_by(self.model.created_at.desc(), self.model.id)
        )
        if page is not None and limit is not None:
            query = query.offset((page - 1) * limit).limit(limit)

        result = await db.execute(query)
        return total, list(result.scalars().all())

    async def list_active(
        self,
        db: AsyncSession,
        search: Optional[str] = None,
        page: Optional[str] = None,
        limit: Optional[str] = None,
    ) -> ListingPage:
        """
        Active listings, newest first, optionally filtered by a
        case-insensitive substring of the name, one page at a time.
        """
        page_number = parse_positive_int(page) or 1
        page_size = parse_positive_int(limit) or self.default_page_size

        conditions = [self.model.is_active.is_(True)]
        if search:
            conditions.append(self.model.name.icontains(search, autoescape=True))

        try:
            total, listings = await self._page(db, conditions, page_number, page_size)
            items = await self._rated(db, listings)
        except SQLAlchemyError as e:
            logger.error("Database error listing %s: %s", self.kind.plural, str(e), exc_info=True)
            raise DatabaseError(context={"kind": self.kind.name})

        return ListingPage(current_page=page_number, total_results=total, items=items)

    async def list_by_category(
        self,
        db: AsyncSession,
        categories: Sequence[str],
        page: Optional[str] = None,
        limit: Optional[str] = None,
    ) -> ListingPage:
        """
        Active listings tagged with any of `categories`.

        Raises:
            ValidationError: a category is not in the kind's enumeration
            NotFoundError:   the requested page holds no listings
        """
        if not self.kind.has_categories:
            raise NotFoundError(message=f"{self.kind.plural} have no categories")

        requested = [c for c in categories if c]
        unknown = [c for c in requested if c not in self.kind.categories]
        if not requested or unknown:
            raise ValidationError(
                message=f"Invalid {self.kind.title} categories: {', '.join(unknown) or 'none given'}",
                field="categories",
                context={"unknown": unknown, "allowed": list(self.kind.categories)},
            )

        page_number = parse_positive_int(page)
        page_size = parse_positive_int(limit)

        conditions = [
            self.model.is_active.is_(True),
            self.category_filter(requested, db.bind.dialect.name),
        ]

        try:
            total, listings = await self._page(db, conditions, page_number, page_size)
            if not listings:
                raise NotFoundError(
                    resource=self.kind.name,
                    message=f"{self.kind.plural} not found",
                    context={"categories": requested},
                )
            items = await self._rated(db, listings)
        except SQLAlchemyError as e:
            logger.error(
                "Database error searching %s by category: %s", self.kind.plural, str(e), exc_info=True
            )
            raise DatabaseError(context={"kind": self.kind.name})

        return ListingPage(current_page=page_number, total_results=total, items=items)

    async def list_by_owner(self, db: AsyncSession, user_id: uuid.UUID) -> List[ListingResponse]:
        """Every listing of one owner, active or not, without ratings."""
        try:
            result = await db.execute(
                select(self.model)
                .where(self.model.user_id == user_id)
                .order_by(self.model.created_at.desc(), self.model.id)
            )
            listings = result.scalars().all()
        except SQLAlchemyError as e:
            logger.error("Database error listing %s of %s: %s", self.kind.plural, user_id, str(e))
            raise DatabaseError(context={"kind": self.kind.name, "user_id": str(user_id)})
        return [ListingResponse.model_validate(listing) for listing in listings]

    # ── Mutation ──────────────────────────────────────────────────────────

    async def get_listing(self, db: AsyncSession, listing_id: uuid.UUID) -> ListingMixin:
        listing = await db.get(self.model, listing_id)
        if listing is None:
            raise NotFoundError(resource=self.kind.name, resource_id=str(listing_id))
        return listing

    async def _flush(self, db: AsyncSession, action: str, listing_id: Optional[uuid.UUID]) -> None:
        try:
            await db.flush()
        except SQLAlchemyError as e:
            logger.error(
                "Database error on %s %s %s: %s", action, self.kind.name, listing_id, str(e), exc_info=True
            )
            raise DatabaseError(
                context={"kind": self.kind.name, "action": action, "error_type": type(e).__name__},
            )

    async def create(
        self,
        db: AsyncSession,
        form: ListingFormData,
        images: Sequence[UploadedImage] = (),
    ) -> ListingResponse:
        """
        Create an active listing.

        Raises:
            ValidationError:  missing name/user_id, malformed field, bad image
            NotFoundError:    user_id does not reference a user
            MediaUploadError: the media host failed an upload
        """
        values = form_parser.parse_create(self.kind, form)
        self.media.validate(images)

        if await db.get(User, values["user_id"]) is None:
            raise NotFoundError(resource="user", resource_id=str(values["user_id"]))

        urls = await self.media.upload_many(images, self.kind.image_folder)

        listing = self.model(**values, images=urls, is_active=True)
        db.add(listing)
        await self._flush(db, "create", None)

        logger.info("Created %s %s with %d image(s)", self.kind.name, listing.id, len(urls))
        return ListingResponse.model_validate(listing)

    async def update(
        self,
        db: AsyncSession,
        listing_id: uuid.UUID,
        form: ListingFormData,
        images: Sequence[UploadedImage] = (),
    ) -> ListingResponse:
        """
        Merge the sent fields into an existing listing and append new images.

        Raises:
            NotFoundError:    no listing with that id
                              or a sent user_id does not reference a user
            ValidationError:  a sent field is malformed
            MediaUploadError: the media host failed an upload
        """
        listing = await self.get_listing(db, listing_id)
        values = form_parser.merge_update(self.kind, listing, form)
        self.media.validate(images)

        if values["user_id"] != listing.user_id and await db.get(User, values["user_id"]) is None:
            raise NotFoundError(resource="user", resource_id=str(values["user_id"]))

        urls = await self.media.upload_many(images, self.kind.image_folder)

        for field, value in values.items():
            setattr(listing, field, value)
        # Reassign rather than mutate so the ARRAY/JSON column is marked dirty
        listing.images = list(listing.images or []) + urls
        await self._flush(db, "update", listing_id)

        logger.info("Updated %s %s (+%d image(s))", self.kind.name, listing_id, len(urls))
        return ListingResponse.model_validate(listing)

    async def toggle_active(self, db: AsyncSession, listing_id: uuid.UUID) -> ListingResponse:
        listing = await self.get_listing(db, listing_id)
        listing.is_active = not listing.is_active
        listing.updated_at = datetime.now(timezone.utc)
        await self._flush(db, "toggle", listing_id)

        logger.info("Toggled %s %s to is_active=%s", self.kind.name, listing_id, listing.is_active)
        return ListingResponse.model_validate(listing)

    async def delete(self, db: AsyncSession, listing_id: uuid.UUID) -> None:
        listing = await self.get_listing(db, listing_id)
        await db.delete(listing)
        await self._flush(db, "delete", listing_id)
        logger.info("Deleted %s %s", self.kind.name, listing_id)
