"""
Guia Backend — ORM Models
===========================

Importing this package registers every table with Base.metadata, which
Alembic autogenerate and the test suite's create_all() rely on.
"""

from guia.models.user import User
from guia.models.listing import (
    Emergency,
    Gym,
    Hotel,
    ListingMixin,
    MovieTheater,
    Restaurant,
    Supermarket,
    Taxi,
    Tourism,
)
from guia.models.comment import Comment

__all__ = [
    "User",
    "ListingMixin",
    "Restaurant",
    "Hotel",
    "Taxi",
    "Gym",
    "Supermarket",
    "Tourism",
    "MovieTheater",
    "Emergency",
    "Comment",
]
