# Catalog of supported values, common synonyms and per-category filter fields.
from dataclasses import dataclass
from typing import Literal, get_args

PropertyCategory = Literal[
    "Flat/Apartment",
    "Independent House/Villa",
    "Builder Floor",
    "Plot/Land",
    "Commercial",
    "Farmhouse",
    "Room",
    "PG",
]
PostingType = Literal["Sell", "Rent"]
FurnishingType = Literal["Fully Furnished", "Semi Furnished", "Unfurnished"]
ConstructionStatus = Literal["Ready to Move", "Under Construction"]
PostedBy = Literal["Owner", "Broker"]
FacingDirection = Literal[
    "North", "East", "West", "South", "North-East", "North-West", "South-East", "South-West"
]
CommonAmenity = Literal[
    "Power Backup",
    "Lift",
    "Security",
    "CCTV",
    "Gym",
    "Swimming Pool",
    "Park",
    "Kids Play Area",
    "Visitor Parking",
    "Fire Safety",
]
BHKType = Literal[
    "Studio",
    "1 BHK",
    "2 BHK",
    "3 BHK",
    "3+1 BHK",
    "4 BHK",
    "4+1 BHK",
    "5 BHK",
    "6 BHK",
    "7 BHK",
    "8 BHK",
    "9 BHK",
]
FloorType = Literal["Ground Floor", "1st Floor", "2nd Floor", "3rd Floor", "4+ Floors"]
PlotType = Literal["Residential Plot", "Commercial Plot", "Agricultural Land"]
RoomType = Literal["Single", "Double", "Triple"]
PGOccupancyType = Literal["Single", "Double", "Triple", "Four Sharing"]
CommercialCategory = Literal["Office Space", "Warehouse / Godown", "Shop / Showroom", "Commercial Plot"]
WaterSupply = Literal["Borewell", "Municipal", "Both"]
FloorsType = Literal["Single Floor", "Duplex", "Triplex"]
RoadWidth = Literal["10 ft", "20 ft", "30 ft", "40 ft+"]
PlotSizeUnit = Literal["sqft", "sqyard", "acre"]

PROPERTY_CATEGORIES: tuple[str, ...] = get_args(PropertyCategory)
POSTING_TYPES: tuple[str, ...] = get_args(PostingType)
FURNISHING_TYPES: tuple[str, ...] = get_args(FurnishingType)
CONSTRUCTION_STATUSES: tuple[str, ...] = get_args(ConstructionStatus)
POSTED_BY: tuple[str, ...] = get_args(PostedBy)
FACING_DIRECTIONS: tuple[str, ...] = get_args(FacingDirection)
COMMON_AMENITIES: tuple[str, ...] = get_args(CommonAmenity)
BHK_TYPES: tuple[str, ...] = get_args(BHKType)
FLOOR_TYPES: tuple[str, ...] = get_args(FloorType)
PLOT_TYPES: tuple[str, ...] = get_args(PlotType)
ROOM_TYPES: tuple[str, ...] = get_args(RoomType)
PG_OCCUPANCY_TYPES: tuple[str, ...] = get_args(PGOccupancyType)
COMMERCIAL_CATEGORIES: tuple[str, ...] = get_args(CommercialCategory)
WATER_SUPPLIES: tuple[str, ...] = get_args(WaterSupply)
FLOORS_TYPES: tuple[str, ...] = get_args(FloorsType)
ROAD_WIDTHS: tuple[str, ...] = get_args(RoadWidth)
PLOT_SIZE_UNITS: tuple[str, ...] = get_args(PlotSizeUnit)

SQFT_PER_UNIT = {"sqft": 1.0, "sqyard": 9.0, "acre": 43560.0}

PROPERTY_TYPES_CANON = {
    "Flat/Apartment": ["flat / apartment", "flat", "apartment", "flat/apartment"],
    "Independent House/Villa": [
        "independent house / villa",
        "independent house",
        "house",
        "villa",
        "kothi",
    ],
    "Builder Floor": ["builder floor", "builder-floor"],
    "Plot/Land": ["plot / land", "plot", "land"],
    "Commercial": ["commercial"],
    "Farmhouse": ["farmhouse", "farm house"],
    "Room": ["room", "rooms"],
    "PG": ["pg", "paying guest"],
}

POSTING_TYPES_CANON = {
    "Sell": ["sell", "sale", "buy"],
    "Rent": ["rent", "lease", "rental"],
}

FURNISHING_CANON = {
    "Fully Furnished": ["fully furnished", "fully", "furnished"],
    "Semi Furnished": ["semi furnished", "semi-furnished", "semi"],
    "Unfurnished": ["unfurnished", "un-furnished", "not furnished"],
}

CONSTRUCTION_STATUS_CANON = {
    "Ready to Move": ["ready to move", "ready", "ready-to-move", "possession ready"],
    "Under Construction": ["under construction", "under-construction", "uc"],
}

POSTED_BY_CANON = {
    "Owner": ["owner", "individual"],
    "Broker": ["broker", "agent", "dealer"],
}

FACING_CANON = {
    "North": ["north", "n"],
    "East": ["east", "e"],
    "West": ["west", "w"],
    "South": ["south", "s"],
    "North-East": ["north-east", "north east", "northeast", "ne"],
    "North-West": ["north-west", "north west", "northwest", "nw"],
    "South-East": ["south-east", "south east", "southeast", "se"],
    "South-West": ["south-west", "south west", "southwest", "sw"],
}

AMENITIES_CANON = {
    "Power Backup": ["power backup", "backup", "generator"],
    "Lift": ["lift", "elevator"],
    "Security": ["security", "security guard", "24x7 security"],
    "CCTV": ["cctv", "cctv camera", "cctv cameras"],
    "Gym": ["gym", "gymnasium"],
    "Swimming Pool": ["swimming pool", "pool"],
    "Park": ["park", "garden"],
    "Kids Play Area": ["kids play area", "play area", "children play area"],
    "Visitor Parking": ["visitor parking", "guest parking"],
    "Fire Safety": ["fire safety", "fire fighting"],
}

BHK_CANON = {
    "Studio": ["studio", "1 rk", "1rk"],
    "1 BHK": ["1bhk", "1 bhk"],
    "2 BHK": ["2bhk", "2 bhk"],
    "3 BHK": ["3bhk", "3 bhk"],
    "3+1 BHK": ["3+1bhk", "3+1 bhk", "3 + 1 bhk"],
    "4 BHK": ["4bhk", "4 bhk"],
    "4+1 BHK": ["4+1bhk", "4+1 bhk", "4 + 1 bhk"],
    "5 BHK": ["5bhk", "5 bhk"],
    "6 BHK": ["6bhk", "6 bhk"],
    "7 BHK": ["7bhk", "7 bhk"],
    "8 BHK": ["8bhk", "8 bhk"],
    "9 BHK": ["9bhk", "9 bhk"],
}

FLOOR_CANON = {
    "Ground Floor": ["ground floor", "ground", "g floor", "g"],
    "1st Floor": ["1st floor", "1st", "first floor", "first"],
    "2nd Floor": ["2nd floor", "2nd", "second floor", "second"],
    "3rd Floor": ["3rd floor", "3rd", "third floor", "third"],
    "4+ Floors": ["4+ floors", "4+", "4th floor", "4th", "top floor", "top"],
}

COMMERCIAL_CATEGORY_CANON = {
    "Office Space": ["office space", "office"],
    "Warehouse / Godown": ["warehouse / godown", "warehouse", "godown"],
    "Shop / Showroom": ["shop / showroom", "shop", "showroom"],
    "Commercial Plot": ["commercial plot"],
}

PLOT_TYPE_CANON = {
    "Residential Plot": ["residential plot", "residential"],
    "Commercial Plot": ["commercial plot"],
    "Agricultural Land": ["agricultural land", "agricultural", "agri land"],
}

ROOM_TYPE_CANON = {
    "Single": ["single", "single room"],
    "Double": ["double", "double room", "twin"],
    "Triple": ["triple", "triple room"],
}

PG_OCCUPANCY_CANON = {
    "Single": ["single", "single sharing"],
    "Double": ["double", "double sharing", "twin sharing"],
    "Triple": ["triple", "triple sharing"],
    "Four Sharing": ["four sharing", "4 sharing", "quad"],
}

WATER_SUPPLY_CANON = {
    "Borewell": ["borewell", "bore well"],
    "Municipal": ["municipal", "corporation"],
    "Both": ["both"],
}

FLOORS_CANON = {
    "Single Floor": ["single floor", "single storey", "1 floor"],
    "Duplex": ["duplex", "2 floors"],
    "Triplex": ["triplex", "3 floors"],
}

PLOT_UNIT_CANON = {
    "sqft": ["sq ft", "sq. ft.", "sqft.", "square feet", "sft"],
    "sqyard": ["sq yard", "sq yd", "sqyd", "sq. yd.", "square yard", "square yards", "gaj"],
    "acre": ["acre", "acres"],
}


def _key(value: str) -> str:
    return " ".join(value.split()).lower()


def canonize(value: str | None, table: dict[str, list[str]]) -> str | None:
    if not value or not isinstance(value, str):
        return None
    v = _key(value)
    for canon, syns in table.items():
        if v == canon.lower() or v in syns:
            return canon
    return None


def canonize_list(values: list[str] | None, table: dict[str, list[str]]) -> list[str]:
    out: list[str] = []
    for v in values or []:
        c = canonize(v, table)
        if c and c not in out:
            out.append(c)
    return out


@dataclass(frozen=True)
class FieldDescriptor:
    name: str
    kind: Literal["choice", "bool", "number", "text", "range", "parking"]
    domain: tuple[str, ...] = ()
    default: object = ""
    # Only consulted for Commercial: the sub-categories exposing the field.
    commercial_categories: tuple[str, ...] = ()


BHK = FieldDescriptor("bhk", "choice", BHK_TYPES)
FLOOR = FieldDescriptor("floor", "choice", FLOOR_TYPES)
FACING = FieldDescriptor("facing", "choice", FACING_DIRECTIONS)
PARKING = FieldDescriptor("parking", "parking", default={"cars": 0, "bikes": False})
PLOT_SIZE = FieldDescriptor(
    "plotSize", "range", PLOT_SIZE_UNITS, default={"min": 0, "max": 0, "unit": "sqft"}
)
PLOT_TYPE = FieldDescriptor("plotType", "choice", PLOT_TYPES)
WATER = FieldDescriptor("waterSupply", "choice", WATER_SUPPLIES)
FLOORS = FieldDescriptor("floors", "choice", FLOORS_TYPES)
ROAD_WIDTH = FieldDescriptor("roadWidth", "choice", ROAD_WIDTHS)
BOUNDARY_WALL = FieldDescriptor("boundaryWall", "bool", default=False)
WIFI = FieldDescriptor("wifi", "bool", default=False)
ELECTRICITY = FieldDescriptor("electricityIncluded", "bool", default=False)

OFFICE, WAREHOUSE, SHOP = "Office Space", "Warehouse / Godown", "Shop / Showroom"

CATEGORY_FIELDS: dict[str, tuple[FieldDescriptor, ...]] = {
    "Flat/Apartment": (BHK, FLOOR, FACING, PARKING),
    "Independent House/Villa": (BHK, FACING, PARKING, PLOT_SIZE, WATER, FLOORS),
    "Builder Floor": (
        BHK,
        FLOOR,
        FACING,
        PARKING,
        FieldDescriptor("lift", "bool", default=False),
        FieldDescriptor("modularKitchen", "bool", default=False),
    ),
    "Plot/Land": (PLOT_TYPE, PLOT_SIZE, FACING, ROAD_WIDTH, BOUNDARY_WALL),
    "Commercial": (
        FieldDescriptor("commercialCategory", "choice", COMMERCIAL_CATEGORIES),
        FieldDescriptor("carpetArea", "number", default=0, commercial_categories=(OFFICE, WAREHOUSE, SHOP)),
        FieldDescriptor("cabinsCount", "number", default=0, commercial_categories=(OFFICE,)),
        FieldDescriptor("workstations", "number", default=0, commercial_categories=(OFFICE,)),
        FieldDescriptor("washrooms", "number", default=0, commercial_categories=(OFFICE, SHOP)),
        FieldDescriptor("pantry", "bool", default=False, commercial_categories=(OFFICE,)),
        FieldDescriptor("ceilingHeight", "number", default=0, commercial_categories=(WAREHOUSE,)),
        FieldDescriptor("loadingDock", "bool", default=False, commercial_categories=(WAREHOUSE,)),
        FieldDescriptor("powerLoad", "text", commercial_categories=(WAREHOUSE,)),
        FieldDescriptor("truckParking", "bool", default=False, commercial_categories=(WAREHOUSE,)),
        FieldDescriptor("frontage", "number", default=0, commercial_categories=(SHOP,)),
    ),
    "Farmhouse": (PLOT_SIZE, WATER, FLOORS, BOUNDARY_WALL, FACING),
    "Room": (
        FieldDescriptor("roomType", "choice", ROOM_TYPES),
        FieldDescriptor("attachedBathroom", "bool", default=False),
        FieldDescriptor("kitchenAccess", "bool", default=False),
        WIFI,
        ELECTRICITY,
        FieldDescriptor("airCoolerAC", "bool", default=False),
    ),
    "PG": (
        FieldDescriptor("pgOccupancy", "choice", PG_OCCUPANCY_TYPES),
        FieldDescriptor("foodIncluded", "bool", default=False),
        WIFI,
        FieldDescriptor("housekeeping", "bool", default=False),
        FieldDescriptor("laundry", "bool", default=False),
        ELECTRICITY,
    ),
}


def field_descriptors(category: str | None) -> tuple[FieldDescriptor, ...]:
    return CATEGORY_FIELDS.get(category or "", ())


def applicable_fields(category: str | None) -> frozenset[str]:
    """Names (camelCase) of the conditional fields a category exposes.

    Unknown or empty categories expose nothing.
    """
    return frozenset(d.name for d in field_descriptors(category))


def commercial_fields(commercial_category: str | None) -> frozenset[str]:
    return frozenset(
        d.name
        for d in CATEGORY_FIELDS["Commercial"]
        if commercial_category and commercial_category in d.commercial_categories
    )
