from datetime import datetime, timezone

from propsearch.normalize import normalize, normalize_many
from propsearch.predicate import compile_filters, filter_records, sort_records
from propsearch.schemas import FilterState


def test_end_to_end_room_scenario():
    raws = [
        {"price": "₹20,000", "city": "Mohali", "property_type": "Room"},
        {"price": "₹60,000", "city": "Kurali", "property_type": "Room"},
    ]
    f = FilterState.model_validate(
        {"propertyType": "Room", "location": {"city": "Mohali"}, "priceRange": {"min": 0, "max": 50000}}
    )
    matched = filter_records(normalize_many(raws), f)
    assert len(matched) == 1
    assert matched[0].location.city == "Mohali"
    assert matched[0].price == 20000


def test_category_field_isolation():
    plots = normalize_many([
        {"property_type": "Plot", "bhk": "3 BHK"},
        {"property_type": "Plot"},
    ])
    f = FilterState(property_type="Plot/Land", bhk="2 BHK")
    assert len(filter_records(plots, f)) == 2


def test_category_field_applies_within_its_category():
    flats = normalize_many([
        {"property_type": "Flat", "bhk": "2 BHK"},
        {"property_type": "Flat", "bhk": "3 BHK"},
    ])
    f = FilterState(property_type="Flat/Apartment", bhk="2 BHK")
    assert [r.bhk for r in filter_records(flats, f)] == ["2 BHK"]


def test_empty_price_range_matches_nothing():
    pred = compile_filters(FilterState(price_range={"min": 50000, "max": 10000}))
    for raw in ({"price": 20000}, {"price": 0}, {"price": 10 ** 9}, {}):
        assert not pred(normalize(raw))


def test_unset_bounds_are_open():
    recs = normalize_many([{"price": 100}, {"price": 10 ** 8}])
    assert len(filter_records(recs, FilterState(price_range={"min": 0, "max": 0}))) == 2
    assert len(filter_records(recs, FilterState(price_range={"min": 1000}))) == 1


def test_location_is_case_insensitive_substring():
    recs = normalize_many([{"city": "Mohali"}, {"city": "Kharar"}])
    assert len(filter_records(recs, FilterState(location={"city": " moh "}))) == 1


def test_nearby_landmarks_never_filters():
    recs = normalize_many([{"city": "Mohali"}, {"city": "Kharar"}])
    assert len(filter_records(recs, FilterState(location={"nearbyLandmarks": "Airport"}))) == 2


def test_amenities_are_a_superset_test():
    recs = normalize_many([
        {"id": "a", "amenities": ["Gym", "Lift", "CCTV"]},
        {"id": "b", "amenities": ["Gym"]},
    ])
    f = FilterState(amenities=["gym", "elevator"])
    assert [r.id for r in filter_records(recs, f)] == ["a"]


def test_commercial_fields_gated_by_commercial_category():
    recs = normalize_many([
        {"id": "shop", "property_type": "Commercial", "commercial_category": "shop", "frontage": 30},
        {"id": "small", "property_type": "Commercial", "commercial_category": "shop", "frontage": 10},
    ])
    # cabinsCount is an office attribute and is ignored for shops
    f = FilterState(property_type="Commercial", commercial_category="Shop / Showroom", cabins_count=5, frontage=20)
    assert [r.id for r in filter_records(recs, f)] == ["shop"]


def test_power_load_numeric_or_text():
    recs = normalize_many([
        {"id": "big", "property_type": "Commercial", "commercial_category": "warehouse", "power_load": "100 kVA"},
        {"id": "small", "property_type": "Commercial", "commercial_category": "warehouse", "power_load": "20 kVA"},
    ])
    f = FilterState(property_type="Commercial", commercial_category="Warehouse / Godown", power_load="50")
    assert [r.id for r in filter_records(recs, f)] == ["big"]
    f = f.model_copy(update={"power_load": "kva"})
    assert len(filter_records(recs, f)) == 2


def test_parking_and_plot_size():
    recs = normalize_many([
        {"id": "a", "property_type": "House", "parking_spaces": 2, "plot_area": "200 sq yd"},
        {"id": "b", "property_type": "House", "parking_spaces": 0, "plot_area": 900},
    ])
    parked = FilterState(property_type="Independent House/Villa", parking={"cars": 1})
    assert [r.id for r in filter_records(recs, parked)] == ["a"]
    sized = FilterState(property_type="Independent House/Villa", plot_size={"min": 150, "unit": "sqyard"})
    assert [r.id for r in filter_records(recs, sized)] == ["a"]


def test_room_booleans_are_required_when_set():
    recs = normalize_many([
        {"id": "wifi", "property_type": "Room", "wifi": "yes"},
        {"id": "plain", "property_type": "Room"},
    ])
    assert [r.id for r in filter_records(recs, FilterState(property_type="Room", wifi=True))] == ["wifi"]


def test_advanced_flags():
    recs = normalize_many([
        {"id": "v", "verified": True, "negotiable": "yes"},
        {"id": "n"},
    ])
    assert [r.id for r in filter_records(recs, FilterState(verified_listings=True))] == ["v"]
    assert [r.id for r in filter_records(recs, FilterState(negotiable_price=True))] == ["v"]


def test_sort_records():
    recs = normalize_many([
        {"id": "old", "price": 300, "created_at": "2024-01-01T00:00:00Z"},
        {"id": "undated", "price": 100},
        {"id": "new", "price": 200, "created_at": datetime(2024, 5, 1, tzinfo=timezone.utc)},
    ])
    assert [r.id for r in sort_records(recs, "newest")] == ["new", "old", "undated"]
    assert [r.id for r in sort_records(recs, "oldest")] == ["old", "new", "undated"]
    assert [r.id for r in sort_records(recs, "price_asc")] == ["undated", "new", "old"]
    assert [r.id for r in sort_records(recs, "price_desc")] == ["old", "new", "undated"]
    assert [r.id for r in sort_records(recs, None)] == ["old", "undated", "new"]
