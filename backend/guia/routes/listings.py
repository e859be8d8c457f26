"""
Guia Backend — Listing Route Handlers
=======================================

What:  The seven endpoints every listing kind exposes, built once per kind
       by build_listing_router().
How:   Handlers are thin: read query/form/files, call the kind's
       ListingService from the application context, shape the response.

Routes (shown for restaurants; same for every plural):
    GET    /restaurants?search=&page=&limit=          active, rated, paginated
    GET    /restaurants/categories?categories=&...    by category (not movieTheaters)
    GET    /restaurants/{user_id}                     everything one owner has
    POST   /restaurants                               multipart create, files in "images"
    PUT    /restaurants/{id}                          multipart update
    PATCH  /restaurants/isActive/{id}                 flip is_active
    DELETE /restaurants/{id}                          204

/categories is registered before /{user_id} so the literal segment wins.
"""

import logging
import uuid
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, Query, Response, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from guia.context import AppContext
from guia.database import get_db_session
from guia.dependencies import get_context, mutation_guard
from guia.kinds import LISTING_KINDS, ListingKind
from guia.schemas.common import ErrorResponse
from guia.schemas.listing import ListingFormData, ListingResponse, listing_page_model
from guia.services.media_base import UploadedImage

logger = logging.getLogger(__name__)


def listing_form(
    name: Optional[str] = Form(default=None),
    location: Optional[str] = Form(default=None, description='JSON: {"latitude": .., "longitude": ..}'),
    offers: Optional[str] = Form(default=None, description="JSON array of strings"),
    cod_area: Optional[str] = Form(default=None, alias="codArea"),
    phone: Optional[str] = Form(default=None),
    city: Optional[str] = Form(default=None),
    country: Optional[str] = Form(default=None),
    web: Optional[str] = Form(default=None),
    time: Optional[str] = Form(default=None, description='JSON: {"weekdays": .., "weekends": ..}'),
    zone: Optional[str] = Form(default=None, description="Este, Norte, Sur, Oeste or Central"),
    categories: Optional[str] = Form(default=None, description="JSON array of category names"),
    user_id: Optional[str] = Form(default=None),
) -> ListingFormData:
    return ListingFormData(
        name=name,
        location=location,
        offers=offers,
        cod_area=cod_area,
        phone=phone,
        city=city,
        country=country,
        web=web,
        time=time,
        zone=zone,
        categories=categories,
        user_id=user_id,
    )


async def read_images(files: Optional[List[UploadFile]]) -> List[UploadedImage]:
    images = []
    for upload in files or []:
        # Browsers send an empty part when no file was picked
        if not upload.filename:
            continue
        images.append(
            UploadedImage(
                filename=upload.filename,
                content=await upload.read(),
                content_type=upload.content_type,
            )
        )
    return images


def split_categories(values: List[str]) -> List[str]:
    """Accept both ?categories=A&categories=B and ?categories=A,B."""
    return [part.strip() for value in values for part in value.split(",") if part.strip()]


def build_listing_router(kind: ListingKind) -> APIRouter:
    router = APIRouter(prefix=f"/{kind.plural}", tags=[kind.title.title()])
    page_model = listing_page_model(kind)

    def service(context: AppContext = Depends(get_context)):
        return context.listings[kind.name]

    @router.get(
        "",
        response_model=page_model,
        responses={500: {"description": "Server error", "model": ErrorResponse}},
        summary=f"List active {kind.plural}",
        description="Active listings, newest first, with their average stars. "
        "`search` matches any part of the name, ignoring case.",
        name=f"list_{kind.name}",
    )
    async def list_active(
        search: Optional[str] = Query(default=None),
        page: Optional[str] = Query(default=None, description="1-based page, default 1"),
        limit: Optional[str] = Query(default=None, description="Page size, default 10"),
        db: AsyncSession = Depends(get_db_session),
        listings=Depends(service),
    ):
        result = await listings.list_active(db, search=search, page=page, limit=limit)
        return page_model(
            current_page=result.current_page,
            total_results=result.total_results,
            items=result.items,
        )

    if kind.has_categories:

        @router.get(
            "/categories",
            response_model=page_model,
            responses={
                400: {"description": "Unknown category", "model": ErrorResponse},
                404: {"description": "No listing on this page", "model": ErrorResponse},
            },
            summary=f"List active {kind.plural} by category",
            description="Listings tagged with any of the given categories. Pagination "
            "applies only when both `page` and `limit` are given.",
            name=f"list_{kind.name}_by_category",
        )
        async def list_by_category(
            categories: List[str] = Query(default=[]),
            page: Optional[str] = Query(default=None),
            limit: Optional[str] = Query(default=None),
            db: AsyncSession = Depends(get_db_session),
            listings=Depends(service),
        ):
            result = await listings.list_by_category(
                db, split_categories(categories), page=page, limit=limit
            )
            return page_model(
                current_page=result.current_page,
                total_results=result.total_results,
                items=result.items,
            )

    @router.get(
        "/{user_id}",
        response_model=List[ListingResponse],
        summary=f"List every {kind.title} owned by a user",
        name=f"list_{kind.name}_by_owner",
    )
    async def list_by_owner(
        user_id: uuid.UUID,
        db: AsyncSession = Depends(get_db_session),
        listings=Depends(service),
    ):
        return await listings.list_by_owner(db, user_id)

    @router.post(
        "",
        status_code=201,
        response_model=ListingResponse,
        responses={
            400: {"description": "Missing or malformed field", "model": ErrorResponse},
            500: {"description": "Image upload failed", "model": ErrorResponse},
        },
        summary=f"Create a {kind.title}",
        name=f"create_{kind.name}",
    )
    async def create(
        form: ListingFormData = Depends(listing_form),
        images: Optional[List[UploadFile]] = File(default=None),
        db: AsyncSession = Depends(get_db_session),
        listings=Depends(service),
        _caller=Depends(mutation_guard),
    ):
        return await listings.create(db, form, await read_images(images))

    @router.put(
        "/{listing_id}",
        response_model=ListingResponse,
        responses={
            400: {"description": "Malformed field", "model": ErrorResponse},
            404: {"description": f"{kind.title} not found", "model": ErrorResponse},
        },
        summary=f"Update a {kind.title}",
        description="Fields left out keep their stored value. New images are appended.",
        name=f"update_{kind.name}",
    )
    async def update(
        listing_id: uuid.UUID,
        form: ListingFormData = Depends(listing_form),
        images: Optional[List[UploadFile]] = File(default=None),
        db: AsyncSession = Depends(get_db_session),
        listings=Depends(service),
        _caller=Depends(mutation_guard),
    ):
        return await listings.update(db, listing_id, form, await read_images(images))

    @router.patch(
        "/isActive/{listing_id}",
        response_model=ListingResponse,
        responses={404: {"description": f"{kind.title} not found", "model": ErrorResponse}},
        summary=f"Toggle whether a {kind.title} is active",
        name=f"toggle_{kind.name}",
    )
    async def toggle_active(
        listing_id: uuid.UUID,
        db: AsyncSession = Depends(get_db_session),
        listings=Depends(service),
        _caller=Depends(mutation_guard),
    ):
        return await listings.toggle_active(db, listing_id)

    @router.delete(
        "/{listing_id}",
        status_code=204,
        responses={404: {"description": f"{kind.title} not found", "model": ErrorResponse}},
        summary=f"Delete a {kind.title}",
        name=f"delete_{kind.name}",
    )
    async def delete(
        listing_id: uuid.UUID,
        db: AsyncSession = Depends(get_db_session),
        listings=Depends(service),
        _caller=Depends(mutation_guard),
    ) -> Response:
        await listings.delete(db, listing_id)
        return Response(status_code=204)

    return router


listing_routers = [build_listing_router(kind) for kind in LISTING_KINDS]
