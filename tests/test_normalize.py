from datetime import datetime, timedelta, timezone

import pytest

from propsearch.normalize import (
    PLACEHOLDER_IMAGE,
    coerce_number,
    is_valid_image_url,
    normalize,
    normalize_many,
    split_images,
)

NOW = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)


def test_image_fallback_on_empty_json_array():
    assert normalize({"other_images": "[]"}).images == (PLACEHOLDER_IMAGE,)


def test_images_dedup_and_order():
    rec = normalize({"main_image": "/a.jpg", "primary_image": "/a.jpg", "other_images": "/b.jpg,/a.jpg"})
    assert rec.images == ("/a.jpg", "/b.jpg")


def test_images_skip_invalid_entries():
    rec = normalize({
        "main_image": "null",
        "primary_image": "[object Object]",
        "other_images": '["https://cdn.example.com/x.jpg", "undefined", "ftp://y.jpg", 5]',
    })
    assert rec.images == ("https://cdn.example.com/x.jpg",)


def test_split_images_native_and_json():
    assert split_images(["/a.jpg"]) == ["/a.jpg"]
    assert split_images('"/a.jpg"') == ["/a.jpg"]
    assert split_images("") == []
    assert split_images(None) == []


def test_is_valid_image_url():
    assert is_valid_image_url("/uploads/1.jpg")
    assert is_valid_image_url("https://x.test/1.jpg")
    assert not is_valid_image_url("[]")
    assert not is_valid_image_url("data:image/png;base64,AAA")
    assert not is_valid_image_url(None)


def test_price_coercion():
    assert normalize({"price": "₹1,50,000"}).price == 150000
    assert coerce_number("12.5 lakh?") == 12.5
    assert coerce_number("call for price") == 0
    assert coerce_number(float("nan")) == 0
    assert coerce_number(None) == 0
    assert coerce_number("₹2.5 Cr.") == 2.5
    assert coerce_number("1.2.3") == 1.2
    assert coerce_number("...") == 0


def test_non_mapping_input_yields_defaults():
    rec = normalize("garbage")
    assert rec.price == 0
    assert rec.images == (PLACEHOLDER_IMAGE,)
    assert rec.category == ""


def test_field_fallback_chains():
    rec = normalize({
        "propertyType": "Flat / Apartment",
        "listing_type": "rent",
        "location": {"city": "Mohali", "locality": "Phase 7"},
        "bhk": 2,
        "facingDirection": "north east",
        "furnished_status": "semi-furnished",
        "contact": {"isOwner": True},
    })
    assert rec.category == "Flat/Apartment"
    assert rec.posting_type == "Rent"
    assert rec.location.city == "Mohali"
    assert rec.location.locality == "Phase 7"
    assert rec.bhk == "2 BHK"
    assert rec.facing == "North-East"
    assert rec.furnishing_type == "Semi Furnished"
    assert rec.posted_by == "Owner"


def test_unknown_posting_type_defaults_to_sell():
    assert normalize({"posting_type": "auction"}).posting_type == "Sell"


def test_amenities_from_json_string():
    rec = normalize({"amenities": '["Gym", "Security Guard", "Helipad"]'})
    assert rec.amenities == {"Gym", "Security", "Helipad"}
    assert normalize({"amenities": "not json"}).amenities == frozenset()


def test_parking_derivation():
    rec = normalize({"parking_spaces": 2, "bike_parking": "Yes"})
    assert (rec.parking.cars, rec.parking.bikes) == (2, True)
    rec = normalize({"car_parking": "Covered"})
    assert rec.parking.cars == 1
    assert rec.parking.covered is True
    rec = normalize({"car_parking": "No", "bike_parking": "false"})
    assert (rec.parking.cars, rec.parking.bikes) == (0, False)


def test_area_conversions():
    assert normalize({"area_sqm": 100}).carpet_area == pytest.approx(1076.4)
    assert normalize({"plot_area": "200 sq yd"}).plot_area == 1800
    assert normalize({"plot_area": 2, "plot_size_unit": "acres"}).plot_area == 87120
    assert normalize({"plotSize": {"value": 50, "unit": "gaj"}}).plot_area == 450


def test_floor_bucket_from_number():
    assert normalize({"your_floor": 0}).floor == "Ground Floor"
    assert normalize({"your_floor": "7"}).floor == "4+ Floors"
    assert normalize({"floor": "first", "your_floor": 9}).floor == "1st Floor"
    assert normalize({}).floor == ""


def test_newly_listed_from_created_at():
    fresh = {"created_at": (NOW - timedelta(days=3)).isoformat()}
    stale = {"created_at": (NOW - timedelta(days=30)).isoformat()}
    assert normalize(fresh, now=NOW).newly_listed is True
    assert normalize(stale, now=NOW).newly_listed is False
    assert normalize({**fresh, "newly_listed": "false"}, now=NOW).newly_listed is False
    assert normalize(fresh).newly_listed is False


def test_immediate_move_in_follows_construction_status():
    assert normalize({"property_status": "Ready to move"}).immediate_move_in is True
    assert normalize({"property_status": "under construction"}).immediate_move_in is False
    assert normalize({"property_status": "ready", "immediate_move_in": "no"}).immediate_move_in is False


def test_verification_status_and_legal_info():
    rec = normalize({"verification_status": "Approved", "legalInfo": {"reraApproved": True, "reraNumber": "PBRERA-1"}})
    assert rec.verified is True
    assert rec.status == "Approved"
    assert rec.rera_approved is True
    assert rec.rera_number == "PBRERA-1"


def test_normalize_many_preserves_order():
    recs = normalize_many([{"id": "a"}, None, {"id": 3}])
    assert [r.id for r in recs] == ["a", "", "3"]


def test_huge_integers_do_not_break_normalize():
    huge = 10 ** 400
    rec = normalize({"price": huge, "created_at": huge, "parking_spaces": huge, "plot_area": huge})
    assert rec.price == 0
    assert rec.created_at is None
    assert rec.parking.cars == 0
    assert rec.plot_area == 0
    assert coerce_number(huge) == 0


def test_deeply_nested_json_does_not_break_normalize():
    nested = "[" * 100000 + "]" * 100000
    rec = normalize({"other_images": nested, "amenities": nested})
    assert rec.images == (PLACEHOLDER_IMAGE,)
    assert rec.amenities == frozenset()
