"""
Guia Backend — Listing & Application Endpoint Tests
=====================================================

What:  The per-kind listing routers, error handling and health over HTTP.
How:   httpx AsyncClient against create_app(context), local media storage.

What we test:
    ✅ Multipart create with images, camelCase response, 201
    ✅ Envelope keys: currentPage, totalResults, <plural>, averageStars
    ✅ Category route (and its absence for movieTheaters)
    ✅ Owner route, update, toggle, delete
    ✅ Error bodies: 400 field errors, 404, media failure 500, catch-all 500
    ✅ /health and X-Request-ID
"""

import json
import uuid
from unittest.mock import AsyncMock, patch

import pytest
from httpx import ASGITransport, AsyncClient

from guia.exceptions import MediaUploadError
from guia.main import INTERNAL_ERROR_MESSAGE, create_app
from guia.models import Emergency, MovieTheater, Restaurant
from guia.models.listing import DEFAULT_WEB

from factories import seed_comment, seed_listing


def restaurant_form(owner, **fields):
    data = {
        "name": "Pollos Kiki",
        "user_id": str(owner.id),
        "codArea": "+591",
        "phone": "4444444",
        "city": "Cochabamba",
        "location": json.dumps({"latitude": -17.39, "longitude": -66.15}),
        "categories": json.dumps(["Polleria"]),
        "zone": "Norte",
    }
    data.update(fields)
    return data


class TestCreateListing:

    @pytest.mark.asyncio
    async def test_multipart_create(self, client, owner, sample_image_bytes):
        response = await client.post(
            "/restaurants",
            data=restaurant_form(owner),
            files=[
                ("images", ("front.jpg", sample_image_bytes, "image/jpeg")),
                ("images", ("menu.jpg", sample_image_bytes, "image/jpeg")),
            ],
        )

        assert response.status_code == 201
        body = response.json()
        assert body["name"] == "Pollos Kiki"
        assert body["codArea"] == "+591"
        assert body["isActive"] is True
        assert body["zone"] == "Norte"
        assert body["web"] == DEFAULT_WEB
        assert body["location"] == {"latitude": -17.39, "longitude": -66.15}
        assert len(body["images"]) == 2
        assert body["images"][0].startswith("http://test/uploads/restaurants_images/")

    @pytest.mark.asyncio
    async def test_stored_image_is_served(self, client, owner, sample_image_bytes):
        created = await client.post(
            "/restaurants",
            data=restaurant_form(owner),
            files=[("images", ("front.jpg", sample_image_bytes, "image/jpeg"))],
        )
        path = created.json()["images"][0].replace("http://test", "")

        response = await client.get(path)

        assert response.status_code == 200
        assert response.content == sample_image_bytes

    @pytest.mark.asyncio
    async def test_malformed_json_field(self, client, owner):
        response = await client.post(
            "/restaurants", data=restaurant_form(owner, offers="[not json")
        )

        assert response.status_code == 400
        body = response.json()
        assert body["error"] == "validation_error"
        assert body["details"]["field"] == "offers"

    @pytest.mark.asyncio
    async def test_unsupported_image(self, client, owner):
        response = await client.post(
            "/restaurants",
            data=restaurant_form(owner),
            files=[("images", ("notes.txt", b"hello", "text/plain"))],
        )
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_renamed_binary_rejected(self, client, owner):
        response = await client.post(
            "/restaurants",
            data=restaurant_form(owner),
            files=[("images", ("photo.jpg", b"MZ\x90\x00 this is a PE executable", "image/jpeg"))],
        )

        assert response.status_code == 400
        assert response.json()["details"]["field"] == "images"

        listed = await client.get("/restaurants")
        assert listed.json()["totalResults"] == 0

    @pytest.mark.asyncio
    async def test_media_failure(self, client, context, owner, sample_image_bytes):
        with patch.object(context.media, "upload", new=AsyncMock(side_effect=MediaUploadError())):
            response = await client.post(
                "/restaurants",
                data=restaurant_form(owner),
                files=[("images", ("front.jpg", sample_image_bytes, "image/jpeg"))],
            )

        assert response.status_code == 500
        assert response.json()["message"] == "Error uploading images"

        listed = await client.get("/restaurants")
        assert listed.json()["totalResults"] == 0


class TestSearchListings:

    @pytest.mark.asyncio
    async def test_envelope(self, client, db, owner):
        listing = await seed_listing(db, Restaurant, owner, name="Casa Blanca")
        await seed_comment(db, 5, "restaurant_id", listing.id)

        response = await client.get("/restaurants", params={"search": "casa"})

        assert response.status_code == 200
        body = response.json()
        assert set(body) == {"currentPage", "totalResults", "restaurants"}
        assert body["currentPage"] == 1
        assert body["totalResults"] == 1
        assert body["restaurants"][0]["averageStars"] == 5.0

    @pytest.mark.asyncio
    async def test_plural_key_per_kind(self, client, db, owner):
        await seed_listing(db, MovieTheater, owner, name="Cine Center")

        body = (await client.get("/movieTheaters")).json()

        assert body["movieTheaters"][0]["name"] == "Cine Center"
        assert body["movieTheaters"][0]["categories"] is None
        assert body["movieTheaters"][0]["averageStars"] is None

    @pytest.mark.asyncio
    async def test_by_category(self, client, db, owner):
        await seed_listing(db, Emergency, owner, name="Bomberos Central", categories=["Bomberos"])
        await seed_listing(db, Emergency, owner, name="Farmacia Chavez", categories=["Farmacias"])

        response = await client.get(
            "/emergencies/categories",
            params={"categories": "Bomberos,Policia", "page": "1", "limit": "5"},
        )

        assert response.status_code == 200
        body = response.json()
        assert [e["name"] for e in body["emergencies"]] == ["Bomberos Central"]
        assert body["currentPage"] == 1

    @pytest.mark.asyncio
    async def test_by_category_repeated_param(self, client, db, owner):
        await seed_listing(db, Restaurant, owner, name="A", categories=["Cafes"])
        await seed_listing(db, Restaurant, owner, name="B", categories=["Alitas"])

        response = await client.get(
            "/restaurants/categories", params=[("categories", "Cafes"), ("categories", "Alitas")]
        )

        assert response.json()["totalResults"] == 2
        assert response.json()["currentPage"] is None

    @pytest.mark.asyncio
    async def test_by_category_errors(self, client, db, owner):
        await seed_listing(db, Restaurant, owner, name="A", categories=["Cafes"])

        unknown = await client.get("/restaurants/categories", params={"categories": "Sushi"})
        empty = await client.get(
            "/restaurants/categories", params={"categories": "Cafes", "page": "3", "limit": "10"}
        )

        assert unknown.status_code == 400
        assert empty.status_code == 404
        assert empty.json()["message"] == "restaurants not found"

    @pytest.mark.asyncio
    async def test_movie_theaters_have_no_category_route(self, client):
        # Falls through to /{user_id}, which rejects the non-UUID segment
        response = await client.get("/movieTheaters/categories", params={"categories": "Any"})
        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_by_owner(self, client, db, owner):
        await seed_listing(db, Restaurant, owner, name="Open")
        await seed_listing(db, Restaurant, owner, name="Closed", is_active=False)

        response = await client.get(f"/restaurants/{owner.id}")

        assert response.status_code == 200
        assert {r["name"] for r in response.json()} == {"Open", "Closed"}


class TestChangeListing:

    @pytest.mark.asyncio
    async def test_update_keeps_unsent_fields(self, client, db, owner):
        listing = await seed_listing(db, Restaurant, owner, name="Old", phone="111", city="Sucre")

        response = await client.put(f"/restaurants/{listing.id}", data={"name": "New", "city": ""})

        assert response.status_code == 200
        body = response.json()
        assert body["name"] == "New"
        assert body["phone"] == "111"
        assert body["city"] == "Sucre"

    @pytest.mark.asyncio
    async def test_update_unknown(self, client):
        response = await client.put(f"/restaurants/{uuid.uuid4()}", data={"name": "New"})
        assert response.status_code == 404
        assert response.json()["error"] == "not_found"

    @pytest.mark.asyncio
    async def test_toggle_hides_from_search(self, client, db, owner):
        listing = await seed_listing(db, Restaurant, owner, name="Toggle")

        toggled = await client.patch(f"/restaurants/isActive/{listing.id}")
        listed = await client.get("/restaurants")

        assert toggled.json()["isActive"] is False
        assert listed.json()["totalResults"] == 0

    @pytest.mark.asyncio
    async def test_delete(self, client, db, owner):
        listing = await seed_listing(db, Restaurant, owner, name="Gone")

        first = await client.delete(f"/restaurants/{listing.id}")
        second = await client.delete(f"/restaurants/{listing.id}")

        assert first.status_code == 204
        assert first.content == b""
        assert second.status_code == 404


class TestApplication:

    @pytest.mark.asyncio
    async def test_unexpected_error_is_generic_500(self, context):
        app = create_app(context)

        @app.get("/boom")
        async def boom():
            raise RuntimeError("connection string leaked?")

        transport = ASGITransport(app=app, raise_app_exceptions=False)
        async with AsyncClient(transport=transport, base_url="http://test") as ac:
            response = await ac.get("/boom")

        assert response.status_code == 500
        body = response.json()
        assert body["message"] == INTERNAL_ERROR_MESSAGE
        assert "leaked" not in response.text

    @pytest.mark.asyncio
    async def test_health(self, client):
        response = await client.get("/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["database"] == "connected"
        assert body["media"] == "available"

    @pytest.mark.asyncio
    async def test_health_degraded_when_media_down(self, client, context):
        with patch.object(context.media, "health_check", new=AsyncMock(return_value=False)):
            response = await client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "degraded"

    @pytest.mark.asyncio
    async def test_request_id_header(self, client):
        generated = await client.get("/health")
        echoed = await client.get("/health", headers={"X-Request-ID": "abc12345"})

        assert len(generated.headers["X-Request-ID"]) == 8
        assert echoed.headers["X-Request-ID"] == "abc12345"
