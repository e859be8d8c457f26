"""
Guia Backend — Listing Form Field Parser
==========================================

What:  Turns the raw multipart fields of a create/update request into column
       values, or raises ValidationError.
How:   location, offers, time and categories arrive as JSON strings and are
       decoded with pydantic TypeAdapters, so malformed JSON and wrong shapes
       fail the same way. zone and categories are checked against the kind's
       enumerations.
When:  Before any image is uploaded. A request with a bad field never
       reaches the media host.

Blank strings count as absent everywhere.
"""

import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from guia.exceptions import ValidationError
from guia.kinds import ListingKind, ZONES
from guia.models.listing import DEFAULT_WEB, DEFAULT_ZONE, ListingMixin
from guia.schemas.listing import ListingFormData, Location, Schedule

_LOCATION = TypeAdapter(Location)
_SCHEDULE = TypeAdapter(Schedule)
_STRING_LIST = TypeAdapter(List[str])

SCALAR_FIELDS = ("name", "cod_area", "phone", "city", "country", "web")


def _present(value: Optional[str]) -> bool:
    return value is not None and value.strip() != ""


def _decode(adapter: TypeAdapter, raw: str, field: str) -> Any:
    try:
        return adapter.validate_json(raw)
    except PydanticValidationError as e:
        raise ValidationError(
            message=f"Field '{field}' is not valid JSON of the expected shape",
            field=field,
            context={"errors": e.errors(include_url=False, include_context=False)},
        )


def parse_location(raw: str) -> Dict[str, float]:
    return _decode(_LOCATION, raw, "location").model_dump()


def parse_schedule(raw: str) -> Dict[str, str]:
    return _decode(_SCHEDULE, raw, "time").model_dump()


def parse_offers(raw: str) -> List[str]:
    return _decode(_STRING_LIST, raw, "offers")


def parse_categories(kind: ListingKind, raw: str) -> List[str]:
    categories = _decode(_STRING_LIST, raw, "categories")
    unknown = [c for c in categories if c not in kind.categories]
    if unknown:
        raise ValidationError(
            message=f"Unknown {kind.title} categories: {', '.join(unknown)}",
            field="categories",
            context={"unknown": unknown, "allowed": list(kind.categories)},
        )
    return categories


def parse_zone(raw: str) -> str:
    zone = raw.strip()
    if zone not in ZONES:
        raise ValidationError(
            message=f"Zone '{zone}' is not valid. Allowed: {', '.join(sorted(ZONES))}",
            field="zone",
        )
    return zone


def parse_user_id(raw: str) -> uuid.UUID:
    try:
        return uuid.UUID(raw.strip())
    except ValueError:
        raise ValidationError(message="Field 'user_id' must be a UUID", field="user_id")


def parse_create(kind: ListingKind, form: ListingFormData) -> Dict[str, Any]:
    """
    Column values for a new listing (images excluded).

    Raises:
        ValidationError: name or user_id missing, or any field malformed
    """
    if not _present(form.name):
        raise ValidationError(message="Field 'name' is required", field="name")
    if not _present(form.user_id):
        raise ValidationError(message="Field 'user_id' is required", field="user_id")

    values: Dict[str, Any] = {
        field: getattr(form, field).strip() if _present(getattr(form, field)) else None
        for field in SCALAR_FIELDS
    }
    if values["web"] is None:
        values["web"] = DEFAULT_WEB

    values["user_id"] = parse_user_id(form.user_id)
    values["zone"] = parse_zone(form.zone) if _present(form.zone) else DEFAULT_ZONE
    values["location"] = parse_location(form.location) if _present(form.location) else None
    values["time"] = parse_schedule(form.time) if _present(form.time) else None
    values["offers"] = parse_offers(form.offers) if _present(form.offers) else []

    # Categories on a kind without an enumeration are ignored
    if kind.has_categories:
        values["categories"] = (
            parse_categories(kind, form.categories) if _present(form.categories) else []
        )

    return values


def merge_update(kind: ListingKind, listing: ListingMixin, form: ListingFormData) -> Dict[str, Any]:
    """
    Column values for an update: every field the client sent replaces the
    stored value, every field it left out keeps it. JSON fields are decoded
    only when sent. `images` is not touched here; new URLs are appended by
    the caller.
    """
    values: Dict[str, Any] = {}
    for field in SCALAR_FIELDS:
        raw = getattr(form, field)
        values[field] = raw.strip() if _present(raw) else getattr(listing, field)

    values["user_id"] = parse_user_id(form.user_id) if _present(form.user_id) else listing.user_id
    values["zone"] = parse_zone(form.zone) if _present(form.zone) else listing.zone
    values["location"] = parse_location(form.location) if _present(form.location) else listing.location
    values["time"] = parse_schedule(form.time) if _present(form.time) else listing.time
    values["offers"] = parse_offers(form.offers) if _present(form.offers) else listing.offers

    if kind.has_categories:
        values["categories"] = (
            parse_categories(kind, form.categories)
            if _present(form.categories)
            else listing.categories
        )

    values["updated_at"] = datetime.now(timezone.utc)
    return values
