import json
import logging
import math
import re
from collections.abc import Callable, Iterable, Mapping, Sequence
from datetime import datetime, timedelta, timezone
from typing import Any

from pydantic import ValidationError

from .catalog import (
    AMENITIES_CANON,
    BHK_CANON,
    COMMERCIAL_CATEGORY_CANON,
    CONSTRUCTION_STATUS_CANON,
    FACING_CANON,
    FLOOR_CANON,
    FLOORS_CANON,
    FURNISHING_CANON,
    PG_OCCUPANCY_CANON,
    PLOT_TYPE_CANON,
    PLOT_UNIT_CANON,
    POSTED_BY_CANON,
    POSTING_TYPES_CANON,
    PROPERTY_TYPES_CANON,
    ROAD_WIDTHS,
    ROOM_TYPE_CANON,
    SQFT_PER_UNIT,
    WATER_SUPPLY_CANON,
    canonize,
)
from .schemas import PropertyRecord, RecordLocation, RecordParking
from .utils import get_path, is_blank

logger = logging.getLogger(__name__)

PLACEHOLDER_IMAGE = "/assets/hero.jpg"
# Sentinels that leak out of upstream serializers in place of a real URL.
INVALID_IMAGE_LITERALS = frozenset({"[]", "null", "undefined", "[object Object]"})
IMAGE_PREFIXES = ("/", "http://", "https://")
SQM_TO_SQFT = 10.764
NEWLY_LISTED_DAYS = 7
TRUTHY = frozenset({"yes", "y", "true", "1", "on"})

_NON_NUMERIC_RE = re.compile(r"[^0-9.]")
_LEADING_NUMBER_RE = re.compile(r"\d*\.?\d+")
_DIGITS_RE = re.compile(r"\d+")

Coercer = Callable[[Any], Any]
Accessor = tuple[str, Coercer]


# ---------- coercions ----------

def coerce_number(value: Any) -> float:
    """Numbers and currency-formatted strings ("₹1,50,000") to float; 0 on failure."""
    if value is None or isinstance(value, bool):
        return 0.0
    if isinstance(value, (int, float)):
        try:
            number = float(value)
        except OverflowError:
            return 0.0
    else:
        match = _LEADING_NUMBER_RE.match(_NON_NUMERIC_RE.sub("", str(value)))
        if not match:
            return 0.0
        number = float(match.group())
    return number if math.isfinite(number) else 0.0


def _digits(text: str) -> int | None:
    try:
        return int(text)
    except ValueError:
        return None


def coerce_int(value: Any) -> int:
    return int(coerce_number(value))


def coerce_optional_int(value: Any) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, float):
        return int(value) if math.isfinite(value) else None
    if isinstance(value, int):
        return value
    match = _DIGITS_RE.search(coerce_text(value))
    return _digits(match.group()) if match else None


def coerce_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value != 0
    if isinstance(value, str):
        return value.strip().casefold() in TRUTHY
    return False


def coerce_text(value: Any) -> str:
    if value is None or isinstance(value, (bool, Mapping, list, tuple)):
        return ""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    try:
        return str(value).strip()
    except ValueError:
        # ints past the interpreter's str conversion limit
        return ""


def coerce_count(value: Any) -> int:
    """Counts from "2 Car Parking", "Yes", "Covered", 3 or {"count": 2}."""
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, (int, float)):
        return max(coerce_int(value), 0)
    if isinstance(value, Mapping):
        return coerce_count(value.get("count"))
    text = str(value).casefold()
    match = _DIGITS_RE.search(text)
    if match:
        return _digits(match.group()) or 0
    return 1 if ("yes" in text or "covered" in text) else 0


def parse_json_list(value: Any) -> list[str]:
    """A JSON-encoded array or a native sequence; [] on anything else."""
    if isinstance(value, str):
        if not value.strip():
            return []
        try:
            value = json.loads(value)
        except (ValueError, RecursionError):
            logger.debug("parse_json_list: not JSON: %.60r", value)
            return []
    if not isinstance(value, (list, tuple, set, frozenset)):
        return []
    return [str(v).strip() for v in value if isinstance(v, str) and v.strip()]


def coerce_datetime(value: Any) -> datetime | None:
    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, (int, float)) and not isinstance(value, bool):
        try:
            seconds = value / 1000 if value > 1e12 else value
            dt = datetime.fromtimestamp(seconds, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None
    elif isinstance(value, str):
        try:
            dt = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
        except ValueError:
            return None
    else:
        return None
    return dt if dt.tzinfo else dt.replace(tzinfo=timezone.utc)


def _choice(table: dict[str, list[str]]) -> Coercer:
    return lambda v: canonize(coerce_text(v), table) or ""


def _bhk(value: Any) -> str:
    text = coerce_text(value)
    if text.isdigit():
        text = f"{text} BHK"
    return canonize(text, BHK_CANON) or ""


def _floors(value: Any) -> str:
    text = coerce_text(value)
    by_count = {"1": "Single Floor", "2": "Duplex", "3": "Triplex"}
    return by_count.get(text) or canonize(text, FLOORS_CANON) or ""


def _road_width(value: Any) -> str:
    text = coerce_text(value)
    if text in ROAD_WIDTHS:
        return text
    width = coerce_number(text)
    for limit, label in ((40, "40 ft+"), (30, "30 ft"), (20, "20 ft"), (10, "10 ft")):
        if width >= limit:
            return label
    return ""


def _owner_flag(value: Any) -> str:
    return "Owner" if coerce_bool(value) else "Broker"


def _sqm(value: Any) -> float:
    return coerce_number(value) * SQM_TO_SQFT


def _verified_status(value: Any) -> bool:
    return coerce_text(value).casefold() in {"verified", "approved"}


def _id(value: Any) -> str:
    return coerce_text(value)


# ---------- field fallback chains ----------
# Each logical field: ordered (raw key, coercer) pairs. Dotted keys reach
# into nested camelCase payloads. The first present value wins.

FIELD_CHAINS: dict[str, Sequence[Accessor]] = {
    "id": (("id", _id), ("property_id", _id), ("_id", _id)),
    "category": (
        ("property_type", _choice(PROPERTY_TYPES_CANON)),
        ("propertyType", _choice(PROPERTY_TYPES_CANON)),
        ("propertyCategory", _choice(PROPERTY_TYPES_CANON)),
        ("category", _choice(PROPERTY_TYPES_CANON)),
    ),
    "posting_type": (
        ("posting_type", _choice(POSTING_TYPES_CANON)),
        ("postingType", _choice(POSTING_TYPES_CANON)),
        ("listing_type", _choice(POSTING_TYPES_CANON)),
    ),
    "title": (("property_title", coerce_text), ("title", coerce_text), ("propertyTitle", coerce_text)),
    "description": (("description", coerce_text),),
    "status": (("status", coerce_text), ("verification_status", coerce_text)),
    "price": (("price", coerce_number),),
    "maintenance_charges": (
        ("maintenance_charges", coerce_number),
        ("maintenanceCharges", coerce_number),
        ("maintenance_fee", coerce_number),
    ),
    "built_up_area": (
        ("built_up_area", coerce_number),
        ("builtUpArea", coerce_number),
        ("area_sqft", coerce_number),
        ("area", coerce_number),
    ),
    "carpet_area": (
        ("carpet_area", coerce_number),
        ("carpetArea", coerce_number),
        ("area_sqm", _sqm),
    ),
    "city": (("city", coerce_text), ("location.city", coerce_text)),
    "locality": (("locality", coerce_text), ("location.locality", coerce_text)),
    "society_name": (
        ("society_name", coerce_text),
        ("societyName", coerce_text),
        ("location.societyName", coerce_text),
    ),
    "landmark": (("landmark", coerce_text), ("location.landmark", coerce_text)),
    "pincode": (("pincode", coerce_text), ("zipcode", coerce_text), ("location.pincode", coerce_text)),
    "furnishing_type": (
        ("furnishing_type", _choice(FURNISHING_CANON)),
        ("furnishingType", _choice(FURNISHING_CANON)),
        ("furnished_status", _choice(FURNISHING_CANON)),
    ),
    "construction_status": (
        ("property_status", _choice(CONSTRUCTION_STATUS_CANON)),
        ("propertyStatus", _choice(CONSTRUCTION_STATUS_CANON)),
        ("possession_status", _choice(CONSTRUCTION_STATUS_CANON)),
        ("construction_status", _choice(CONSTRUCTION_STATUS_CANON)),
    ),
    "posted_by": (
        ("posted_by", _choice(POSTED_BY_CANON)),
        ("postedBy", _choice(POSTED_BY_CANON)),
        ("contact.isOwner", _owner_flag),
        ("is_owner", _owner_flag),
    ),
    "amenities": (
        ("amenities", parse_json_list),
        ("societyAmenities", parse_json_list),
        ("society_amenities", parse_json_list),
    ),
    "furnishings": (
        ("furnishings", parse_json_list),
        ("furnishingItems", parse_json_list),
        ("furnishing_items", parse_json_list),
    ),
    "additional_rooms": (("additional_rooms", parse_json_list), ("additionalRooms", parse_json_list)),
    "floor_plan": (("floor_plan", coerce_text), ("floorPlan", coerce_text)),
    "map_link": (("map_link", coerce_text), ("mapLink", coerce_text), ("location.googleMapLink", coerce_text)),
    "created_at": (("created_at", coerce_datetime), ("createdAt", coerce_datetime)),
    "property_age": (("property_age", coerce_int), ("propertyAge", coerce_int), ("age_of_property", coerce_int)),
    "total_floors": (("total_floors", coerce_int), ("totalFloors", coerce_int)),
    "your_floor": (
        ("your_floor", coerce_optional_int),
        ("yourFloor", coerce_optional_int),
        ("floor_number", coerce_optional_int),
    ),
    "floor": (("floor", _choice(FLOOR_CANON)), ("floor_type", _choice(FLOOR_CANON))),
    "bhk": (("bhk_type", _bhk), ("bhkType", _bhk), ("bhk", _bhk)),
    "facing": (
        ("facing_direction", _choice(FACING_CANON)),
        ("facingDirection", _choice(FACING_CANON)),
        ("facing", _choice(FACING_CANON)),
    ),
    "parking_count": (
        ("parking_spaces", coerce_count),
        ("parking", coerce_count),
        ("car_parking", coerce_count),
        ("carParking", coerce_count),
    ),
    "parking_kind": (("car_parking", coerce_text), ("carParking.type", coerce_text), ("carParking", coerce_text)),
    "bike_parking": (("bike_parking", coerce_bool), ("bikeParking", coerce_bool)),
    "lift": (("lift", coerce_bool),),
    "modular_kitchen": (("modular_kitchen", coerce_bool), ("modularKitchen", coerce_bool)),
    "plot_type": (("plot_type", _choice(PLOT_TYPE_CANON)), ("plotType", _choice(PLOT_TYPE_CANON))),
    "plot_size": (("plot_area", None), ("plot_size", None), ("plotSize", None), ("plotArea", None)),
    "plot_unit": (
        ("plot_size_unit", _choice(PLOT_UNIT_CANON)),
        ("plotSizeUnit", _choice(PLOT_UNIT_CANON)),
        ("plot_unit", _choice(PLOT_UNIT_CANON)),
    ),
    "water_supply": (("water_supply", _choice(WATER_SUPPLY_CANON)), ("waterSupply", _choice(WATER_SUPPLY_CANON))),
    "floors": (("floors_type", _floors), ("floorsType", _floors), ("floors", _floors)),
    "road_width": (("road_width", _road_width), ("roadWidth", _road_width)),
    "boundary_wall": (("boundary_wall", coerce_bool), ("boundaryWall", coerce_bool)),
    "commercial_category": (
        ("commercial_category", _choice(COMMERCIAL_CATEGORY_CANON)),
        ("commercialCategory", _choice(COMMERCIAL_CATEGORY_CANON)),
        ("commercial_type", _choice(COMMERCIAL_CATEGORY_CANON)),
    ),
    "cabins_count": (("cabins_count", coerce_count), ("cabinsCount", coerce_count), ("cabins", coerce_count)),
    "workstations": (("workstations", coerce_count),),
    "washrooms": (("washrooms", coerce_count), ("washroom", coerce_count)),
    "pantry": (("pantry", coerce_bool),),
    "ceiling_height": (("ceiling_height", coerce_number), ("ceilingHeight", coerce_number)),
    "loading_dock": (("loading_dock", coerce_bool), ("loadingDock", coerce_bool)),
    "power_load": (("power_load", coerce_text), ("powerLoad", coerce_text)),
    "truck_parking": (("truck_parking", coerce_bool), ("truckParking", coerce_bool)),
    "frontage": (("frontage", coerce_number),),
    "room_type": (("room_type", _choice(ROOM_TYPE_CANON)), ("roomType", _choice(ROOM_TYPE_CANON))),
    "attached_bathroom": (("attached_bathroom", coerce_bool), ("attachedBathroom", coerce_bool)),
    "kitchen_access": (("kitchen_access", coerce_bool), ("kitchenAccess", coerce_bool)),
    "wifi": (("wifi", coerce_bool),),
    "electricity_included": (("electricity_included", coerce_bool), ("electricityIncluded", coerce_bool)),
    "air_cooler_ac": (("air_cooler_ac", coerce_bool), ("airCoolerAC", coerce_bool), ("ac", coerce_bool)),
    "pg_occupancy": (
        ("pg_occupancy", _choice(PG_OCCUPANCY_CANON)),
        ("pgOccupancy", _choice(PG_OCCUPANCY_CANON)),
        ("occupancy_type", _choice(PG_OCCUPANCY_CANON)),
    ),
    "food_included": (("food_included", coerce_bool), ("foodIncluded", coerce_bool)),
    "housekeeping": (("housekeeping", coerce_bool),),
    "laundry": (("laundry", coerce_bool),),
    "newly_listed": (("newly_listed", coerce_bool), ("newlyListed", coerce_bool), ("is_new", coerce_bool)),
    "verified": (
        ("verified", coerce_bool),
        ("is_verified", coerce_bool),
        ("isVerified", coerce_bool),
        ("verification_status", _verified_status),
    ),
    "negotiable": (
        ("negotiable", coerce_bool),
        ("price_negotiable", coerce_bool),
        ("is_negotiable", coerce_bool),
        ("negotiablePrice", coerce_bool),
    ),
    "rera_approved": (
        ("rera_approved", coerce_bool),
        ("reraApproved", coerce_bool),
        ("legalInfo.reraApproved", coerce_bool),
    ),
    "rera_number": (("rera_number", coerce_text), ("reraNumber", coerce_text), ("legalInfo.reraNumber", coerce_text)),
    "registry_available": (
        ("registry_available", coerce_bool),
        ("registryAvailable", coerce_bool),
        ("legalInfo.registryAvailable", coerce_bool),
    ),
    "loan_available": (
        ("loan_available", coerce_bool),
        ("loanAvailable", coerce_bool),
        ("legalInfo.loanAvailable", coerce_bool),
    ),
    "tax_paid": (("tax_paid", coerce_bool), ("taxPaid", coerce_bool), ("legalInfo.taxPaid", coerce_bool)),
    "pet_friendly": (("pet_friendly", coerce_bool), ("petFriendly", coerce_bool), ("pets_allowed", coerce_bool)),
    "immediate_move_in": (
        ("immediate_move_in", coerce_bool),
        ("immediateMoveIn", coerce_bool),
        ("available_immediately", coerce_bool),
    ),
}

MAIN_IMAGE_KEYS = ("main_image", "mainImage")
PRIMARY_IMAGE_KEYS = ("primary_image", "primaryImage")
OTHER_IMAGE_KEYS = ("other_images", "otherImages", "images")


def first_present(raw: Mapping, chain: Sequence[Accessor], default: Any = None) -> Any:
    for key, coerce in chain:
        value = get_path(raw, key)
        if is_blank(value):
            continue
        return coerce(value) if coerce else value
    return default


def _field(raw: Mapping, name: str, default: Any) -> Any:
    value = first_present(raw, FIELD_CHAINS[name], default)
    return default if value is None or value == "" else value


# ---------- images ----------

def is_valid_image_url(url: Any) -> bool:
    if not url:
        return False
    text = str(url).strip()
    if not text or text in INVALID_IMAGE_LITERALS:
        return False
    return text.startswith(IMAGE_PREFIXES)


def split_images(value: Any) -> list[Any]:
    """Image list from a native sequence, a JSON array string or a comma-separated string."""
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return list(value)
    if not isinstance(value, str):
        return [value]
    text = value.strip()
    if not text:
        return []
    try:
        parsed = json.loads(text)
    except (ValueError, RecursionError):
        parsed = None
    if isinstance(parsed, list):
        return parsed
    if isinstance(parsed, str):
        return [parsed]
    return [part.strip() for part in text.split(",") if part.strip()]


def build_images(raw: Mapping) -> tuple[str, ...]:
    candidates = [
        first_present(raw, [(k, None) for k in MAIN_IMAGE_KEYS]),
        first_present(raw, [(k, None) for k in PRIMARY_IMAGE_KEYS]),
        *split_images(first_present(raw, [(k, None) for k in OTHER_IMAGE_KEYS])),
    ]
    images: list[str] = []
    for candidate in candidates:
        if not is_valid_image_url(candidate):
            continue
        url = str(candidate).strip()
        if url not in images:
            images.append(url)
    if not images:
        return (PLACEHOLDER_IMAGE,)
    return tuple(images)


# ---------- derived fields ----------

def floor_bucket(floor: int | None) -> str:
    if floor is None:
        return ""
    if floor <= 0:
        return "Ground Floor"
    return {1: "1st Floor", 2: "2nd Floor", 3: "3rd Floor"}.get(floor, "4+ Floors")


def derive_parking(raw: Mapping) -> RecordParking:
    cars = _field(raw, "parking_count", 0)
    kind = _field(raw, "parking_kind", "")
    return RecordParking(
        cars=cars,
        bikes=_field(raw, "bike_parking", False),
        covered=cars > 0 and "covered" in kind.casefold(),
    )


def _detect_unit(text: str) -> str:
    text = text.casefold()
    if "acre" in text:
        return "acre"
    if "yd" in text or "yard" in text or "gaj" in text:
        return "sqyard"
    return "sqft"


def plot_area_sqft(raw: Mapping) -> float:
    value = first_present(raw, FIELD_CHAINS["plot_size"])
    if value is None:
        return 0.0
    if isinstance(value, Mapping):
        amount = coerce_number(value.get("value", value.get("size")))
        unit = canonize(coerce_text(value.get("unit")), PLOT_UNIT_CANON) or "sqft"
    else:
        amount = coerce_number(value)
        unit = _field(raw, "plot_unit", "") or _detect_unit(coerce_text(value))
    return amount * SQFT_PER_UNIT.get(unit, 1.0)


def _amenities(raw: Mapping) -> frozenset[str]:
    return frozenset(canonize(a, AMENITIES_CANON) or a for a in _field(raw, "amenities", []))


def _newly_listed(raw: Mapping, created_at: datetime | None, now: datetime | None, days: int) -> bool:
    explicit = first_present(raw, FIELD_CHAINS["newly_listed"])
    if explicit is not None:
        return explicit
    if now is None or created_at is None:
        return False
    now = now if now.tzinfo else now.replace(tzinfo=timezone.utc)
    return timedelta(0) <= now - created_at <= timedelta(days=days)


# ---------- entry points ----------

_PLAIN_FIELDS = {
    "posting_type": "Sell",
    "title": "",
    "description": "",
    "status": "",
    "price": 0.0,
    "maintenance_charges": 0.0,
    "carpet_area": 0.0,
    "furnishing_type": "",
    "construction_status": "",
    "posted_by": "",
    "floor_plan": "",
    "map_link": "",
    "property_age": 0,
    "total_floors": 0,
    "bhk": "",
    "facing": "",
    "lift": False,
    "modular_kitchen": False,
    "plot_type": "",
    "water_supply": "",
    "floors": "",
    "road_width": "",
    "boundary_wall": False,
    "commercial_category": "",
    "cabins_count": 0,
    "workstations": 0,
    "washrooms": 0,
    "pantry": False,
    "ceiling_height": 0.0,
    "loading_dock": False,
    "power_load": "",
    "truck_parking": False,
    "frontage": 0.0,
    "room_type": "",
    "attached_bathroom": False,
    "kitchen_access": False,
    "wifi": False,
    "electricity_included": False,
    "air_cooler_ac": False,
    "pg_occupancy": "",
    "food_included": False,
    "housekeeping": False,
    "laundry": False,
    "verified": False,
    "negotiable": False,
    "rera_approved": False,
    "rera_number": "",
    "registry_available": False,
    "loan_available": False,
    "tax_paid": False,
    "pet_friendly": False,
}


def normalize(
    raw: Any,
    *,
    now: datetime | None = None,
    newly_listed_days: int = NEWLY_LISTED_DAYS,
) -> PropertyRecord:
    """Maps one raw listing (DB row, API JSON or fixture) to a PropertyRecord.

    Total: missing or malformed values fall back to empty/zero defaults, and a
    record without a usable image gets the placeholder. ``now`` is only used to
    derive ``newly_listed`` when the payload carries no explicit flag.
    """
    if not isinstance(raw, Mapping):
        logger.debug("normalize: expected a mapping, got %s", type(raw).__name__)
        raw = {}

    fields: dict[str, Any] = {name: _field(raw, name, default) for name, default in _PLAIN_FIELDS.items()}

    your_floor = _field(raw, "your_floor", None)
    created_at = _field(raw, "created_at", None)
    built_up = _field(raw, "built_up_area", 0.0)
    construction_status = fields["construction_status"]
    immediate = first_present(raw, FIELD_CHAINS["immediate_move_in"])

    fields.update(
        id=_field(raw, "id", ""),
        category=_field(raw, "category", ""),
        built_up_area=built_up,
        location=RecordLocation(
            city=_field(raw, "city", ""),
            locality=_field(raw, "locality", ""),
            society_name=_field(raw, "society_name", ""),
            landmark=_field(raw, "landmark", ""),
            pincode=_field(raw, "pincode", ""),
        ),
        amenities=_amenities(raw),
        furnishings=tuple(_field(raw, "furnishings", [])),
        additional_rooms=tuple(_field(raw, "additional_rooms", [])),
        images=build_images(raw),
        created_at=created_at,
        your_floor=your_floor,
        floor=_field(raw, "floor", "") or floor_bucket(your_floor),
        parking=derive_parking(raw),
        plot_area=plot_area_sqft(raw),
        newly_listed=_newly_listed(raw, created_at, now, newly_listed_days),
        immediate_move_in=immediate if immediate is not None else construction_status == "Ready to Move",
    )

    try:
        return PropertyRecord(**fields)
    except ValidationError as e:
        logger.warning("normalize: dropping malformed fields of record %r: %s", fields.get("id"), e)
        return PropertyRecord(
            id=fields.get("id") or "",
            title=fields.get("title") or "",
            images=fields.get("images") or (PLACEHOLDER_IMAGE,),
        )


def normalize_many(raws: Iterable[Any], **kwargs: Any) -> list[PropertyRecord]:
    return [normalize(raw, **kwargs) for raw in raws]
