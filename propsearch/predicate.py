import logging
import math
from collections.abc import Callable, Iterable
from typing import Any

from .catalog import SQFT_PER_UNIT, FieldDescriptor, field_descriptors
from .normalize import coerce_number
from .schemas import FilterState, PropertyRecord, filter_field_name

logger = logging.getLogger(__name__)

Predicate = Callable[[PropertyRecord], bool]

# Advanced flag on the filter -> boolean on the record.
ADVANCED_FLAGS = {
    "newly_listed": "newly_listed",
    "verified_listings": "verified",
    "negotiable_price": "negotiable",
    "rera_approved": "rera_approved",
    "pet_friendly": "pet_friendly",
    "immediate_move_in": "immediate_move_in",
}

LOCATION_FIELDS = ("city", "locality", "pincode")


def _never(record: PropertyRecord) -> bool:
    return False


def usable_bound(value: Any) -> float:
    """A usable range bound, or 0 for unset/malformed."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return 0
    if not math.isfinite(value) or value <= 0:
        return 0
    return float(value)


def range_test(lo: Any, hi: Any, getter: Callable[[PropertyRecord], float]) -> Predicate | None:
    lo, hi = usable_bound(lo), usable_bound(hi)
    if not lo and not hi:
        return None
    if lo and hi and lo > hi:
        return _never

    def test(record: PropertyRecord) -> bool:
        value = getter(record)
        return (not lo or value >= lo) and (not hi or value <= hi)

    return test


def _equals(attr: str, expected: Any) -> Predicate:
    return lambda r: getattr(r, attr) == expected


def _contains(attr: str, needle: str) -> Predicate:
    needle = needle.strip().casefold()
    return lambda r: needle in getattr(r.location, attr).casefold()


def _at_least(attr: str, minimum: float) -> Predicate:
    return lambda r: getattr(r, attr) >= minimum


def _is_true(attr: str) -> Predicate:
    return lambda r: getattr(r, attr) is True


def _power_load_test(wanted: str) -> Predicate | None:
    wanted = wanted.strip()
    if not wanted:
        return None
    minimum = coerce_number(wanted)

    def test(record: PropertyRecord) -> bool:
        have = record.power_load
        if minimum and coerce_number(have):
            return coerce_number(have) >= minimum
        return wanted.casefold() in have.casefold()

    return test


def _parking_tests(filters: FilterState) -> list[Predicate]:
    tests: list[Predicate] = []
    cars = filters.parking.cars
    if cars > 0:
        tests.append(lambda r: r.parking.cars >= cars)
    if filters.parking.bikes:
        tests.append(lambda r: r.parking.bikes)
    return tests


def _plot_size_test(filters: FilterState) -> Predicate | None:
    size = filters.plot_size
    factor = SQFT_PER_UNIT.get(size.unit, 1.0)
    return range_test(usable_bound(size.min) * factor, usable_bound(size.max) * factor, lambda r: r.plot_area)


def active_descriptors(filters: FilterState) -> list[FieldDescriptor]:
    """Conditional fields that apply under the selected type and commercial category."""
    commercial = filters.commercial_category
    return [
        d
        for d in field_descriptors(filters.property_type)
        if not d.commercial_categories or commercial in d.commercial_categories
    ]


def _category_tests(filters: FilterState, descriptor: FieldDescriptor) -> list[Predicate]:
    name = filter_field_name(descriptor.name)
    if name is None:
        return []
    value = getattr(filters, name)
    kind = descriptor.kind
    if kind == "parking":
        return _parking_tests(filters)
    if kind == "range":
        test = _plot_size_test(filters)
    elif kind == "choice":
        test = _equals(name, value) if value else None
    elif kind == "bool":
        test = _is_true(name) if value else None
    elif kind == "number":
        minimum = usable_bound(value)
        test = _at_least(name, minimum) if minimum else None
    elif kind == "text":
        test = _power_load_test(value)
    else:
        test = None
    return [test] if test else []


def compile_filters(filters: FilterState) -> Predicate:
    """Builds a predicate over PropertyRecord from a FilterState.

    The predicate is the conjunction of one test per set field. Fields of a
    category other than the selected property type are ignored, as are the
    commercial attributes the selected commercial category does not expose.
    """
    tests: list[Predicate] = []

    if filters.property_type:
        tests.append(_equals("category", filters.property_type))

    for attr in LOCATION_FIELDS:
        needle = getattr(filters.location, attr)
        if needle and needle.strip():
            tests.append(_contains(attr, needle))

    price = range_test(filters.price_range.min, filters.price_range.max, lambda r: r.price)
    if price is _never:
        logger.debug("compile_filters: empty price range %s", filters.price_range)
        return _never
    if price:
        tests.append(price)

    if filters.furnishing:
        tests.append(_equals("furnishing_type", filters.furnishing))
    if filters.construction_status:
        tests.append(_equals("construction_status", filters.construction_status))
    if filters.posted_by:
        tests.append(_equals("posted_by", filters.posted_by))

    if filters.amenities:
        wanted = frozenset(filters.amenities)
        tests.append(lambda r: wanted <= r.amenities)

    for descriptor in active_descriptors(filters):
        tests.extend(_category_tests(filters, descriptor))

    for flag, attr in ADVANCED_FLAGS.items():
        if getattr(filters, flag):
            tests.append(_is_true(attr))

    if any(t is _never for t in tests):
        return _never

    def predicate(record: PropertyRecord) -> bool:
        return all(test(record) for test in tests)

    return predicate


def filter_records(records: Iterable[PropertyRecord], filters: FilterState) -> list[PropertyRecord]:
    predicate = compile_filters(filters)
    return [r for r in records if predicate(r)]


def _created_ts(record: PropertyRecord) -> float:
    return record.created_at.timestamp() if record.created_at else 0.0


def sort_records(records: Iterable[PropertyRecord], sort_by: str | None) -> list[PropertyRecord]:
    records = list(records)
    if sort_by == "newest":
        return sorted(records, key=lambda r: (r.created_at is None, -_created_ts(r)))
    if sort_by == "oldest":
        return sorted(records, key=lambda r: (r.created_at is None, _created_ts(r)))
    if sort_by == "price_asc":
        return sorted(records, key=lambda r: r.price)
    if sort_by == "price_desc":
        return sorted(records, key=lambda r: -r.price)
    return records
