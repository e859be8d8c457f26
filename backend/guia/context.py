"""
Guia Backend — Application Context
====================================

What:  The one object that holds everything a request may need: settings,
       database engine and session factory, media service, token service,
       Google verifier, and the per-kind listing services.
How:   build_context() assembles it from Settings; create_app() stores it on
       app.state.context and dependencies.py reads it from there.
Why:   Tests build a context around an in-memory database, a fixed signing
       secret and a fake identity verifier, then hand it to create_app().
       Nothing is read from module-level singletons at request time.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, Optional

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from guia.config import Settings
from guia.config import settings as default_settings
from guia.database import build_engine, build_session_factory
from guia.kinds import LISTING_KINDS
from guia.services.auth_service import GoogleIdentityVerifier, TokenService
from guia.services.cloudinary_service import CloudinaryMediaService
from guia.services.comment_service import CommentService
from guia.services.file_service import LocalMediaService
from guia.services.listing_service import ListingService
from guia.services.media_base import MediaService
from guia.services.user_service import UserService

logger = logging.getLogger(__name__)


@dataclass
class AppContext:
    settings: Settings
    engine: AsyncEngine
    session_factory: async_sessionmaker[AsyncSession]
    media: MediaService
    tokens: TokenService
    google: GoogleIdentityVerifier
    comments: CommentService
    users: UserService
    listings: Dict[str, ListingService] = field(default_factory=dict)

    async def close(self) -> None:
        await self.engine.dispose()
        logger.info("Database engine disposed")


def build_media_service(settings: Settings) -> MediaService:
    if settings.media_backend == "local":
        return LocalMediaService(
            storage_root=settings.storage_root,
            public_base_url=settings.public_base_url,
            max_file_size=settings.max_file_size,
        )
    return CloudinaryMediaService(
        cloud_name=settings.cloudinary_cloud_name,
        api_key=settings.cloudinary_api_key,
        api_secret=settings.cloudinary_api_secret,
        max_file_size=settings.max_file_size,
    )


def build_context(
    settings: Optional[Settings] = None,
    *,
    engine: Optional[AsyncEngine] = None,
    media: Optional[MediaService] = None,
    google: Optional[GoogleIdentityVerifier] = None,
) -> AppContext:
    """
    Assemble an AppContext.

    Every keyword argument overrides the component built from `settings`.
    """
    settings = settings or default_settings
    engine = engine or build_engine(settings)
    media = media or build_media_service(settings)
    tokens = TokenService(
        secret=settings.jwt_secret,
        algorithm=settings.jwt_algorithm,
        expire_minutes=settings.jwt_expire_minutes,
    )
    google = google or GoogleIdentityVerifier(project_id=settings.firebase_project_id)

    context = AppContext(
        settings=settings,
        engine=engine,
        session_factory=build_session_factory(engine),
        media=media,
        tokens=tokens,
        google=google,
        comments=CommentService(),
        users=UserService(tokens=tokens, google=google),
        listings={
            kind.name: ListingService(kind, media, default_page_size=settings.default_page_size)
            for kind in LISTING_KINDS
        },
    )
    logger.info(
        "Application context built (media=%s, kinds=%d)",
        type(media).__name__,
        len(context.listings),
    )
    return context
