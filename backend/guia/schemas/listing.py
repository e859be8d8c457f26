"""
Guia Backend — Listing Request/Response Schemas
=================================================

What:  Pydantic models for listing payloads, the JSON sub-documents carried
       inside multipart form fields, and the per-kind paginated envelope.
How:   Python attributes are snake_case; wire names follow the established
       API (codArea, isActive, averageStars, ...) through field aliases;
       populate_by_name lets ORM objects validate with from_attributes.

Multipart forms:
    POST/PUT /<kind> arrive as multipart/form-data. Scalar fields are plain
    strings; location, offers, time and categories are JSON-encoded strings.
    ListingFormData keeps them raw; services/form_parser.py turns them into
    the typed values below or raises ValidationError.
"""

import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import Dict, List, Optional, Type

from pydantic import BaseModel, ConfigDict, Field, create_model, field_validator

from guia.kinds import ListingKind


class Location(BaseModel):
    latitude: float
    longitude: float


class Schedule(BaseModel):
    """Opening hours as free text, e.g. {"weekdays": "8:00-22:00", "weekends": "Cerrado"}."""
    weekdays: str
    weekends: str


class ListingResponse(BaseModel):
    """
    What:  Full representation of one listing.
    Who:   Returned by create/update/toggle and by GET /<kind>/{userId}.

    `images` and `offers` are normalized to lists (NULL columns become []).
    `categories` is null for movie theaters.
    """
    id: uuid.UUID
    name: str
    location: Optional[Location] = None
    images: List[str] = Field(default_factory=list)
    offers: List[str] = Field(default_factory=list)
    cod_area: Optional[str] = Field(default=None, alias="codArea")
    phone: Optional[str] = None
    city: Optional[str] = None
    country: Optional[str] = None
    web: Optional[str] = None
    time: Optional[Schedule] = None
    zone: str
    categories: Optional[List[str]] = None
    is_active: bool = Field(alias="isActive")
    user_id: uuid.UUID
    created_at: Optional[datetime] = Field(default=None, alias="createdAt")
    updated_at: Optional[datetime] = Field(default=None, alias="updatedAt")

    model_config = {"from_attributes": True, "populate_by_name": True}

    @field_validator("images", "offers", mode="before")
    @classmethod
    def normalize_list(cls, v):
        return list(v or [])


class RatedListingResponse(ListingResponse):
    """A listing annotated with the mean of its comment stars (null without comments)."""
    average_stars: Optional[float] = Field(default=None, alias="averageStars")


_PAGE_MODELS: Dict[str, Type[BaseModel]] = {}


def listing_page_model(kind: ListingKind) -> Type[BaseModel]:
    """
    Build (once) the paginated envelope for a kind.

    Shape: {"currentPage": int | null, "totalResults": int, "<plural>": [...]}
    The list key differs per kind ("restaurants", "movieTheaters", ...), so
    the model is created dynamically and cached by kind name.
    """
    if kind.name not in _PAGE_MODELS:
        class_name = "".join(part.capitalize() for part in kind.name.split("_")) + "Page"
        _PAGE_MODELS[kind.name] = create_model(
            class_name,
            __config__=ConfigDict(populate_by_name=True),
            current_page=(Optional[int], Field(default=None, alias="currentPage")),
            total_results=(int, Field(alias="totalResults")),
            items=(List[RatedListingResponse], Field(alias=kind.plural)),
        )
    return _PAGE_MODELS[kind.name]


@dataclass
class ListingPage:
    """Search result handed from ListingService to the router."""
    current_page: Optional[int]
    total_results: int
    items: List[RatedListingResponse]


@dataclass
class ListingFormData:
    """
    Raw multipart fields of a create/update request.

    Every attribute is the string the client sent, or None when the field was
    absent. Empty strings are treated as absent by the update merge.
    """
    name: Optional[str] = None
    location: Optional[str] = None
    offers: Optional[str] = None
    cod_area: Optional[str] = None
    phone: Optional[str] = None
    city: Optional[str] = None
    country: Optional[str] = None
    web: Optional[str] = None
    time: Optional[str] = None
    zone: Optional[str] = None
    categories: Optional[str] = None
    user_id: Optional[str] = None
