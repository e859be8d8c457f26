"""
Guia Backend — Listing Kind Registry
======================================

What:  One ListingKind descriptor per listing type.
How:   Everything that differs between kinds (table/model, URL plural,
       comment route slug, category enumeration, comment foreign key, media
       folder) lives here. The search/mutation engine, the rating aggregator,
       the comment service and the router factory all take a ListingKind
       instead of having one hand-written copy per kind.

Adding a kind:
    1. Add the model class in models/listing.py
    2. Add its `<kind>_id` column to models/comment.py
    3. Register a ListingKind below and write an Alembic revision
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional, Tuple, Type

from guia.models import (
    Emergency,
    Gym,
    Hotel,
    MovieTheater,
    Restaurant,
    Supermarket,
    Taxi,
    Tourism,
)
from guia.models.listing import ListingMixin


class Zone(str, Enum):
    ESTE = "Este"
    NORTE = "Norte"
    SUR = "Sur"
    OESTE = "Oeste"
    CENTRAL = "Central"


ZONES = frozenset(zone.value for zone in Zone)


RESTAURANT_CATEGORIES = (
    "Churrasqueria",
    "Polleria",
    "Mariscos",
    "Cochabambina",
    "Rapida",
    "Alitas",
    "Oriental",
    "Salteñerias",
    "Mexicana",
    "Americana",
    "Cafes",
    "Vegetariana",
    "Pizzeria",
    "Heladeria",
    "Pasteleria",
    "Internacional",
    "Otros",
)

HOTEL_CATEGORIES = (
    "Hoteles",
    "Hostales",
    "Residenciales",
    "Apart Hotel",
    "Alojamientos",
    "Moteles",
    "Otros",
)

TAXI_CATEGORIES = (
    "Radio Taxi",
    "Taxi Express",
    "Mototaxi",
    "Trufi",
    "Otros",
)

GYM_CATEGORIES = (
    "Gimnacios",
    "Calistenia",
    "Boxeo",
    "Karate",
    "Natacion",
    "MMA",
    "Futbol",
    "Otros",
)

SUPERMARKET_CATEGORIES = (
    "Supermercados",
    "Minimercados",
    "Mayoristas",
    "Tiendas de Barrio",
    "Otros",
)

TOURISM_CATEGORIES = ("Museos", "Parques", "Aventura", "Discotecas")

EMERGENCY_CATEGORIES = (
    "Bomberos",
    "Policia",
    "Hospitales",
    "SAR Bolivia",
    "Defensa Civil",
    "Cruz Roja",
    "Compañia de Servicios",
    "Ambulancias",
    "Farmacias",
)


@dataclass(frozen=True)
class ListingKind:
    """
    Descriptor for one listing type.

    Attributes:
        name:        Internal key ("restaurant"); also the singular label in messages
        slug:        Segment used by GET /comments/{slug}/{id} ("movieTheater")
        plural:      URL prefix and response key ("movieTheaters")
        model:       ORM class mapped to the kind's table
        comment_fk:  Column on Comment that points at this kind
        categories:  Allowed category values, or None when the kind has none
        image_folder: Folder on the media host for this kind's uploads
    """

    name: str
    slug: str
    plural: str
    model: Type[ListingMixin]
    comment_fk: str
    categories: Optional[Tuple[str, ...]] = None

    @property
    def has_categories(self) -> bool:
        return self.categories is not None

    @property
    def image_folder(self) -> str:
        return f"{self.plural}_images"

    @property
    def title(self) -> str:
        return self.name.replace("_", " ")


LISTING_KINDS: Tuple[ListingKind, ...] = (
    ListingKind(
        name="restaurant",
        slug="restaurant",
        plural="restaurants",
        model=Restaurant,
        comment_fk="restaurant_id",
        categories=RESTAURANT_CATEGORIES,
    ),
    ListingKind(
        name="hotel",
        slug="hotel",
        plural="hotels",
        model=Hotel,
        comment_fk="hotel_id",
        categories=HOTEL_CATEGORIES,
    ),
    ListingKind(
        name="taxi",
        slug="taxi",
        plural="taxis",
        model=Taxi,
        comment_fk="taxi_id",
        categories=TAXI_CATEGORIES,
    ),
    ListingKind(
        name="gym",
        slug="gym",
        plural="gyms",
        model=Gym,
        comment_fk="gym_id",
        categories=GYM_CATEGORIES,
    ),
    ListingKind(
        name="supermarket",
        slug="supermarket",
        plural="supermarkets",
        model=Supermarket,
        comment_fk="supermarket_id",
        categories=SUPERMARKET_CATEGORIES,
    ),
    ListingKind(
        name="tourism",
        slug="tourism",
        plural="tourisms",
        model=Tourism,
        comment_fk="tourism_id",
        categories=TOURISM_CATEGORIES,
    ),
    ListingKind(
        name="movie_theater",
        slug="movieTheater",
        plural="movieTheaters",
        model=MovieTheater,
        comment_fk="movie_theater_id",
        categories=None,
    ),
    ListingKind(
        name="emergency",
        slug="emergency",
        plural="emergencies",
        model=Emergency,
        comment_fk="emergency_id",
        categories=EMERGENCY_CATEGORIES,
    ),
)

KINDS_BY_NAME: Dict[str, ListingKind] = {kind.name: kind for kind in LISTING_KINDS}
KINDS_BY_SLUG: Dict[str, ListingKind] = {kind.slug: kind for kind in LISTING_KINDS}
KINDS_BY_FK: Dict[str, ListingKind] = {kind.comment_fk: kind for kind in LISTING_KINDS}
