from propsearch.catalog import (
    AMENITIES_CANON,
    CATEGORY_FIELDS,
    PROPERTY_CATEGORIES,
    PROPERTY_TYPES_CANON,
    applicable_fields,
    canonize,
    canonize_list,
    commercial_fields,
)
from propsearch.schemas import filter_field_name


def test_applicable_fields_per_category():
    assert applicable_fields("Flat/Apartment") == {"bhk", "floor", "facing", "parking"}
    assert applicable_fields("Plot/Land") == {"plotType", "plotSize", "facing", "roadWidth", "boundaryWall"}
    assert "wifi" in applicable_fields("Room")
    assert "wifi" in applicable_fields("PG")
    assert "bhk" not in applicable_fields("PG")


def test_applicable_fields_unknown_category_is_empty():
    assert applicable_fields("Castle") == frozenset()
    assert applicable_fields("") == frozenset()
    assert applicable_fields(None) == frozenset()


def test_commercial_fields_are_gated_by_sub_category():
    assert commercial_fields("Office Space") == {"carpetArea", "cabinsCount", "workstations", "washrooms", "pantry"}
    assert commercial_fields("Shop / Showroom") == {"frontage", "carpetArea", "washrooms"}
    assert commercial_fields("Commercial Plot") == frozenset()
    assert commercial_fields("") == frozenset()


def test_every_descriptor_names_a_filter_field():
    for category in PROPERTY_CATEGORIES:
        for d in CATEGORY_FIELDS[category]:
            assert filter_field_name(d.name) is not None, (category, d.name)


def test_canonize_synonyms_and_whitespace():
    assert canonize("  Security   Guard ", AMENITIES_CANON) == "Security"
    assert canonize("Flat / Apartment", PROPERTY_TYPES_CANON) == "Flat/Apartment"
    assert canonize("villa", PROPERTY_TYPES_CANON) == "Independent House/Villa"
    assert canonize("castle", PROPERTY_TYPES_CANON) is None
    assert canonize(None, PROPERTY_TYPES_CANON) is None


def test_canonize_list_dedups_and_drops_unknown():
    assert canonize_list(["pool", "Swimming Pool", "jacuzzi", "gym"], AMENITIES_CANON) == ["Swimming Pool", "Gym"]
