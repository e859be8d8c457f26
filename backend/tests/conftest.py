"""
Guia Backend — Test Configuration (conftest.py)
=================================================

What:  Shared pytest fixtures for the entire test suite.
How:   Every test that needs the database gets a fresh in-memory SQLite
       engine (aiosqlite) with all tables created, wrapped in an AppContext
       with a fixed JWT secret, local media storage under tmp_path and a
       fake Google verifier. HTTP tests drive create_app(context) through
       httpx's ASGITransport; no server, network or media host is involved.

Fixture Hierarchy:
    settings ──▶ context ──┬──▶ db      (AsyncSession for seeding/asserting)
                           └──▶ client  (httpx AsyncClient over the app)
    owner: a committed user that owns seeded listings

Seeding helpers live in factories.py.
"""

import os
import tempfile
from typing import Any, Dict

# Before any guia import: guia.config builds its default Settings at import
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["MEDIA_BACKEND"] = "local"
os.environ["STORAGE_ROOT"] = tempfile.mkdtemp(prefix="guia_test_")
os.environ["JWT_SECRET"] = "test-secret-not-real"
os.environ["LOG_LEVEL"] = "WARNING"

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from guia.config import Settings
from guia.context import build_context
from guia.database import create_all_tables
from guia.exceptions import UnauthorizedError
from guia.models import User
from guia.services.auth_service import GoogleIdentityVerifier

from factories import seed_user

TEST_JWT_SECRET = "test-secret-not-real"


class FakeGoogleVerifier(GoogleIdentityVerifier):
    """Accepts the identity tokens registered in `tokens`, rejects the rest."""

    def __init__(self):
        super().__init__(project_id="guia-test")
        self.tokens: Dict[str, Dict[str, Any]] = {}

    async def verify(self, token: str) -> Dict[str, Any]:
        if token not in self.tokens:
            raise UnauthorizedError(message="Invalid Google token")
        return self.tokens[token]


# ══════════════════════════════════════════════════════════════════════════
# Core Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        database_url="sqlite+aiosqlite:///:memory:",
        media_backend="local",
        storage_root=str(tmp_path / "uploads"),
        public_base_url="http://test",
        jwt_secret=TEST_JWT_SECRET,
        firebase_project_id="guia-test",
        log_level="WARNING",
    )


@pytest.fixture
def google_verifier() -> FakeGoogleVerifier:
    return FakeGoogleVerifier()


@pytest_asyncio.fixture
async def context(settings, google_verifier):
    ctx = build_context(settings, google=google_verifier)
    await create_all_tables(ctx.engine)
    yield ctx
    await ctx.close()


@pytest_asyncio.fixture
async def db(context):
    async with context.session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def client(context):
    """
    HTTPX AsyncClient bound to create_app(context).

    raise_app_exceptions=False lets tests see the 500 response produced by
    the catch-all handler instead of the re-raised exception.
    """
    from guia.main import create_app

    app = create_app(context)
    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest_asyncio.fixture
async def owner(db) -> User:
    return await seed_user(db)


@pytest.fixture
def sample_image_bytes():
    """Smallest valid JPEG: SOI + JFIF header + EOI."""
    return (
        b'\xff\xd8\xff\xe0\x00\x10JFIF\x00\x01\x01\x00\x00\x01\x00\x01\x00\x00'
        b'\xff\xd9'
    )


@pytest.fixture
def sample_png_bytes():
    """PNG signature + IHDR chunk for a 1x1 RGB image."""
    return (
        b"\x89PNG\r\n\x1a\n"
        b"\x00\x00\x00\rIHDR\x00\x00\x00\x01\x00\x00\x00\x01\x08\x02\x00\x00\x00\x90wS\xde"
    )
