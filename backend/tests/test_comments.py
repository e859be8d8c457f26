"""
Guia Backend — Comment Tests
==============================

What we test:
    ✅ Anonymous and signed comments
    ✅ Exactly one listing reference, and it must exist
    ✅ Star range
    ✅ userName resolution (first word, or "Anónimo")
    ✅ Per-kind listing route and unknown slugs
    ✅ Delete, then 404; a failed flush surfaces as DatabaseError
    ✅ New comments move the listing's averageStars
"""

import uuid
from unittest.mock import AsyncMock, patch

import pytest
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession

from guia.exceptions import DatabaseError
from guia.models import Hotel, MovieTheater, Restaurant
from guia.services.comment_service import ANONYMOUS_NAME, display_name

from factories import seed_comment, seed_listing, seed_user


class TestDisplayName:

    @pytest.mark.parametrize(
        "is_anonymous,name,expected",
        [
            (True, "Maria Lopez", ANONYMOUS_NAME),
            (False, None, ANONYMOUS_NAME),
            (False, "   ", ANONYMOUS_NAME),
            (False, "Maria Fernanda Lopez", "Maria"),
            (False, "Cher", "Cher"),
        ],
    )
    def test_values(self, is_anonymous, name, expected):
        assert display_name(is_anonymous, name) == expected


class TestCreateComment:

    @pytest.mark.asyncio
    async def test_anonymous(self, client, db, owner):
        listing = await seed_listing(db, Restaurant, owner, name="Casa Blanca")

        response = await client.post(
            "/comments",
            json={"comments": "Excelente", "stars": 5, "restaurant_id": str(listing.id), "user_id": ""},
        )

        assert response.status_code == 201
        body = response.json()
        assert body["isAnonymous"] is True
        assert body["user_id"] is None
        assert body["restaurant_id"] == str(listing.id)

    @pytest.mark.asyncio
    async def test_signed(self, client, db, owner):
        listing = await seed_listing(db, Hotel, owner, name="Hotel Sol")

        response = await client.post(
            "/comments",
            json={"comments": "Limpio", "stars": 4.5, "hotel_id": str(listing.id), "user_id": str(owner.id)},
        )

        assert response.status_code == 201
        assert response.json()["isAnonymous"] is False
        assert response.json()["stars"] == 4.5

    @pytest.mark.asyncio
    async def test_movie_theater_camel_case_key(self, client, db, owner):
        listing = await seed_listing(db, MovieTheater, owner, name="Cine Center")

        response = await client.post(
            "/comments",
            json={"comments": "Buen sonido", "stars": 4, "movieTheater_id": str(listing.id)},
        )

        assert response.status_code == 201
        assert response.json()["movie_theater_id"] == str(listing.id)

    @pytest.mark.asyncio
    async def test_no_listing_reference(self, client):
        response = await client.post("/comments", json={"comments": "Hola", "stars": 3})
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_two_listing_references(self, client, db, owner):
        restaurant = await seed_listing(db, Restaurant, owner, name="R")
        hotel = await seed_listing(db, Hotel, owner, name="H")

        response = await client.post(
            "/comments",
            json={
                "comments": "Hola",
                "stars": 3,
                "restaurant_id": str(restaurant.id),
                "hotel_id": str(hotel.id),
            },
        )
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_listing_of_another_kind_is_not_found(self, client, db, owner):
        hotel = await seed_listing(db, Hotel, owner, name="H")
        response = await client.post(
            "/comments", json={"comments": "Hola", "stars": 3, "restaurant_id": str(hotel.id)}
        )
        assert response.status_code == 404

    @pytest.mark.asyncio
    @pytest.mark.parametrize("stars", [-1, 5.5, 6])
    async def test_stars_out_of_range(self, client, db, owner, stars):
        listing = await seed_listing(db, Restaurant, owner, name="R")
        response = await client.post(
            "/comments",
            json={"comments": "Hola", "stars": stars, "restaurant_id": str(listing.id)},
        )
        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_new_comment_moves_average(self, client, db, owner):
        listing = await seed_listing(db, Restaurant, owner, name="Rated")
        await seed_comment(db, 2, "restaurant_id", listing.id)

        await client.post(
            "/comments", json={"comments": "Mejor", "stars": 4, "restaurant_id": str(listing.id)}
        )
        response = await client.get("/restaurants")

        assert response.json()["restaurants"][0]["averageStars"] == 3.0


class TestListComments:

    @pytest.mark.asyncio
    async def test_list_all(self, client, db, owner):
        listing = await seed_listing(db, Restaurant, owner, name="R")
        await seed_comment(db, 3, "restaurant_id", listing.id)
        await seed_comment(db, 4, "restaurant_id", listing.id, user=owner)

        response = await client.get("/comments")

        assert response.status_code == 200
        assert len(response.json()) == 2

    @pytest.mark.asyncio
    async def test_for_listing_resolves_user_name(self, client, db, owner):
        listing = await seed_listing(db, Restaurant, owner, name="R")
        other = await seed_listing(db, Restaurant, owner, name="Other")
        await seed_comment(db, 3, "restaurant_id", listing.id, text="Anonimo dice")
        await seed_comment(db, 5, "restaurant_id", listing.id, user=owner, text="Maria dice")
        await seed_comment(db, 1, "restaurant_id", other.id)

        response = await client.get(f"/comments/restaurant/{listing.id}")

        assert response.status_code == 200
        names = {c["comments"]: c["userName"] for c in response.json()}
        assert names == {"Anonimo dice": ANONYMOUS_NAME, "Maria dice": "Maria"}
        for comment in response.json():
            assert comment["restaurant_id"] == str(listing.id)
            assert "hotel_id" not in comment

    @pytest.mark.asyncio
    async def test_movie_theater_slug(self, client, db, owner):
        listing = await seed_listing(db, MovieTheater, owner, name="Cine")
        await seed_comment(db, 4, "movie_theater_id", listing.id)

        response = await client.get(f"/comments/movieTheater/{listing.id}")

        assert response.status_code == 200
        assert len(response.json()) == 1

    @pytest.mark.asyncio
    async def test_unknown_slug(self, client):
        response = await client.get(f"/comments/spaceship/{uuid.uuid4()}")
        assert response.status_code == 404


class TestDeleteComment:

    @pytest.mark.asyncio
    async def test_delete_then_not_found(self, client, db, owner):
        listing = await seed_listing(db, Restaurant, owner, name="R")
        comment = await seed_comment(db, 3, "restaurant_id", listing.id)

        first = await client.delete(f"/comments/{comment.id}")
        second = await client.delete(f"/comments/{comment.id}")

        assert first.status_code == 204
        assert second.status_code == 404

    @pytest.mark.asyncio
    async def test_deleted_author_shows_anonymous(self, client, db, owner):
        author = await seed_user(db, name="Pedro Paramo", email="pedro@example.com")
        listing = await seed_listing(db, Restaurant, owner, name="R")
        await seed_comment(db, 3, "restaurant_id", listing.id, user=author)
        await db.delete(author)
        await db.commit()

        response = await client.get(f"/comments/restaurant/{listing.id}")

        assert response.json()[0]["userName"] == ANONYMOUS_NAME

    @pytest.mark.asyncio
    async def test_flush_failure_is_database_error(self, db, context, owner):
        listing = await seed_listing(db, Restaurant, owner, name="R")
        comment = await seed_comment(db, 3, "restaurant_id", listing.id)

        failing_flush = AsyncMock(side_effect=OperationalError("DELETE", {}, Exception("locked")))
        with patch.object(AsyncSession, "flush", new=failing_flush):
            with pytest.raises(DatabaseError) as exc_info:
                await context.comments.delete(db, comment.id)

        assert exc_info.value.context["comment_id"] == str(comment.id)
        assert exc_info.value.context["error_type"] == "OperationalError"
