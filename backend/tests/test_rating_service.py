"""
Guia Backend — Rating Aggregator Tests
========================================

What we test:
    ✅ Mean of stars per listing
    ✅ Listings without comments map to None
    ✅ Comments on another kind never leak into a kind's averages
    ✅ Only the requested ids are aggregated
"""

import uuid

import pytest
from sqlalchemy.dialects import postgresql

from guia.kinds import KINDS_BY_NAME
from guia.models import Hotel, Restaurant
from guia.services.rating_service import average_stars, average_stars_query

from factories import seed_comment, seed_listing


class TestAverageStars:

    @pytest.mark.asyncio
    async def test_mean_and_missing(self, db, owner):
        rated = await seed_listing(db, Restaurant, owner, name="Pollos Kiki")
        unrated = await seed_listing(db, Restaurant, owner, name="Sin Reseñas")
        await seed_comment(db, 4, "restaurant_id", rated.id)
        await seed_comment(db, 5, "restaurant_id", rated.id)

        result = await average_stars(db, KINDS_BY_NAME["restaurant"], [rated.id, unrated.id])

        assert result == {rated.id: 4.5, unrated.id: None}

    @pytest.mark.asyncio
    async def test_other_kind_comments_ignored(self, db, owner):
        restaurant = await seed_listing(db, Restaurant, owner, name="Casa Blanca")
        hotel = await seed_listing(db, Hotel, owner, name="Hotel Sol")
        await seed_comment(db, 1, "hotel_id", hotel.id)
        await seed_comment(db, 3, "restaurant_id", restaurant.id)

        result = await average_stars(db, KINDS_BY_NAME["restaurant"], [restaurant.id])

        assert result == {restaurant.id: 3.0}

    @pytest.mark.asyncio
    async def test_only_requested_ids(self, db, owner):
        first = await seed_listing(db, Restaurant, owner, name="Uno")
        second = await seed_listing(db, Restaurant, owner, name="Dos")
        await seed_comment(db, 2, "restaurant_id", second.id)

        result = await average_stars(db, KINDS_BY_NAME["restaurant"], [first.id])

        assert list(result) == [first.id]

    @pytest.mark.asyncio
    async def test_empty_ids_skip_query(self, db):
        assert await average_stars(db, KINDS_BY_NAME["gym"], []) == {}

    def test_query_uses_left_outer_join_on_kind_fk(self):
        sql = str(
            average_stars_query(KINDS_BY_NAME["movie_theater"], [uuid.uuid4()]).compile(
                dialect=postgresql.dialect()
            )
        )
        assert "LEFT OUTER JOIN comments ON comments.movie_theater_id = movie_theaters.id" in sql
        assert "GROUP BY movie_theaters.id" in sql
