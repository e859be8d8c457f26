"""
Guia Backend — Form Field Parser Tests
========================================

What we test:
    ✅ Create: required fields, defaults, JSON sub-fields, enumerations
    ✅ Update: fill-if-missing merge, JSON re-parsed only when sent
    ✅ Every failure is a ValidationError naming the field
"""

import json
import uuid

import pytest

from guia.exceptions import ValidationError
from guia.kinds import KINDS_BY_NAME
from guia.models import Restaurant
from guia.models.listing import DEFAULT_WEB
from guia.schemas.listing import ListingFormData
from guia.services.form_parser import merge_update, parse_create

RESTAURANT = KINDS_BY_NAME["restaurant"]
MOVIE_THEATER = KINDS_BY_NAME["movie_theater"]


def form(**fields) -> ListingFormData:
    base = {"name": "La Cantonata", "user_id": str(uuid.uuid4())}
    base.update(fields)
    return ListingFormData(**base)


class TestParseCreate:

    def test_minimal_form_gets_defaults(self):
        values = parse_create(RESTAURANT, form())

        assert values["name"] == "La Cantonata"
        assert values["web"] == DEFAULT_WEB
        assert values["zone"] == "Central"
        assert values["offers"] == []
        assert values["categories"] == []
        assert values["location"] is None
        assert values["time"] is None
        assert isinstance(values["user_id"], uuid.UUID)

    def test_json_fields_decoded(self):
        values = parse_create(
            RESTAURANT,
            form(
                location=json.dumps({"latitude": -17.39, "longitude": -66.15}),
                offers=json.dumps(["2x1 martes", "Delivery"]),
                time=json.dumps({"weekdays": "8:00-22:00", "weekends": "Cerrado"}),
                categories=json.dumps(["Polleria", "Rapida"]),
                zone="Norte",
            ),
        )

        assert values["location"] == {"latitude": -17.39, "longitude": -66.15}
        assert values["offers"] == ["2x1 martes", "Delivery"]
        assert values["time"] == {"weekdays": "8:00-22:00", "weekends": "Cerrado"}
        assert values["categories"] == ["Polleria", "Rapida"]
        assert values["zone"] == "Norte"

    @pytest.mark.parametrize("field", ["name", "user_id"])
    def test_required_fields(self, field):
        with pytest.raises(ValidationError) as exc_info:
            parse_create(RESTAURANT, form(**{field: "  "}))
        assert exc_info.value.field == field

    @pytest.mark.parametrize(
        "field,raw",
        [
            ("location", "{not json"),
            ("location", json.dumps({"latitude": "north"})),
            ("offers", json.dumps("just a string")),
            ("time", json.dumps({"weekdays": "9-5"})),
            ("categories", json.dumps(["Polleria", "Sushi"])),
            ("zone", "Centro"),
            ("user_id", "not-a-uuid"),
        ],
    )
    def test_malformed_field_rejected(self, field, raw):
        with pytest.raises(ValidationError) as exc_info:
            parse_create(RESTAURANT, form(**{field: raw}))
        assert exc_info.value.field == field

    def test_kind_without_categories_ignores_them(self):
        values = parse_create(MOVIE_THEATER, form(categories=json.dumps(["Anything"])))
        assert "categories" not in values


class TestMergeUpdate:

    def existing(self) -> Restaurant:
        return Restaurant(
            name="Old Name",
            phone="4444444",
            city="Cochabamba",
            web="https://old.example",
            zone="Sur",
            location={"latitude": 1.0, "longitude": 2.0},
            offers=["old offer"],
            categories=["Mariscos"],
            user_id=uuid.uuid4(),
        )

    def test_absent_fields_keep_stored_values(self):
        listing = self.existing()
        values = merge_update(RESTAURANT, listing, ListingFormData(name="New Name"))

        assert values["name"] == "New Name"
        assert values["phone"] == "4444444"
        assert values["web"] == "https://old.example"
        assert values["zone"] == "Sur"
        assert values["location"] == {"latitude": 1.0, "longitude": 2.0}
        assert values["offers"] == ["old offer"]
        assert values["categories"] == ["Mariscos"]
        assert values["user_id"] == listing.user_id
        assert "images" not in values
        assert values["updated_at"] is not None

    def test_empty_strings_count_as_absent(self):
        values = merge_update(RESTAURANT, self.existing(), ListingFormData(city="", offers=""))
        assert values["city"] == "Cochabamba"
        assert values["offers"] == ["old offer"]

    def test_sent_json_fields_replace(self):
        values = merge_update(
            RESTAURANT,
            self.existing(),
            ListingFormData(offers=json.dumps([]), categories=json.dumps(["Cafes"])),
        )
        assert values["offers"] == []
        assert values["categories"] == ["Cafes"]

    def test_malformed_sent_field_rejected(self):
        with pytest.raises(ValidationError):
            merge_update(RESTAURANT, self.existing(), ListingFormData(time="[]"))
