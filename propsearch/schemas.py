from datetime import date, datetime
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, conint, field_serializer, field_validator, model_validator
from pydantic.alias_generators import to_camel

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
    POSTED_BY_CANON,
    POSTING_TYPES_CANON,
    PROPERTY_TYPES_CANON,
    ROOM_TYPE_CANON,
    WATER_SUPPLY_CANON,
    BHKType,
    CommercialCategory,
    CommonAmenity,
    ConstructionStatus,
    FacingDirection,
    FloorsType,
    FloorType,
    FurnishingType,
    PGOccupancyType,
    PlotSizeUnit,
    PlotType,
    PostedBy,
    PostingType,
    PropertyCategory,
    RoadWidth,
    RoomType,
    WaterSupply,
    canonize,
)

Unset = Literal[""]
SortKey = Literal["newest", "oldest", "price_asc", "price_desc"]

_FILTER_CANON = {
    "property_type": PROPERTY_TYPES_CANON,
    "furnishing": FURNISHING_CANON,
    "construction_status": CONSTRUCTION_STATUS_CANON,
    "posted_by": POSTED_BY_CANON,
    "bhk": BHK_CANON,
    "floor": FLOOR_CANON,
    "facing": FACING_CANON,
    "plot_type": PLOT_TYPE_CANON,
    "water_supply": WATER_SUPPLY_CANON,
    "floors": FLOORS_CANON,
    "commercial_category": COMMERCIAL_CATEGORY_CANON,
    "room_type": ROOM_TYPE_CANON,
    "pg_occupancy": PG_OCCUPANCY_CANON,
}


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True, alias_generator=to_camel)


class Location(_Frozen):
    city: str = ""
    locality: str = ""
    nearby_landmarks: str = ""   # stored and serialized, never filters
    pincode: str = ""


class PriceRange(_Frozen):
    min: float = 0
    max: float = 0


class Parking(_Frozen):
    cars: int = 0
    bikes: bool = False


class PlotSize(_Frozen):
    min: float = 0
    max: float = 0
    unit: PlotSizeUnit = "sqft"


class FilterState(_Frozen):
    # Universal
    property_type: PropertyCategory | Unset = ""
    location: Location = Field(default_factory=Location)
    price_range: PriceRange = Field(default_factory=PriceRange)
    furnishing: FurnishingType | Unset = ""
    construction_status: ConstructionStatus | Unset = ""
    posted_by: PostedBy | Unset = ""
    amenities: frozenset[CommonAmenity] = frozenset()

    # Flat / house / builder floor
    bhk: BHKType | Unset = ""
    floor: FloorType | Unset = ""
    facing: FacingDirection | Unset = ""
    parking: Parking = Field(default_factory=Parking)
    lift: bool = False
    modular_kitchen: bool = False

    # Plot / house / farmhouse
    plot_type: PlotType | Unset = ""
    plot_size: PlotSize = Field(default_factory=PlotSize)
    water_supply: WaterSupply | Unset = ""
    floors: FloorsType | Unset = ""
    road_width: RoadWidth | Unset = ""
    boundary_wall: bool = False

    # Commercial
    commercial_category: CommercialCategory | Unset = ""
    carpet_area: float = 0
    cabins_count: int = 0
    workstations: int = 0
    washrooms: int = 0
    pantry: bool = False
    ceiling_height: float = 0
    loading_dock: bool = False
    power_load: str = ""
    truck_parking: bool = False
    frontage: float = 0

    # Room
    room_type: RoomType | Unset = ""
    attached_bathroom: bool = False
    kitchen_access: bool = False
    wifi: bool = False
    electricity_included: bool = False
    air_cooler_ac: bool = Field(default=False, alias="airCoolerAC")

    # PG
    pg_occupancy: PGOccupancyType | Unset = ""
    food_included: bool = False
    housekeeping: bool = False
    laundry: bool = False

    # Advanced
    newly_listed: bool = False
    verified_listings: bool = False
    negotiable_price: bool = False
    rera_approved: bool = False
    pet_friendly: bool = False
    immediate_move_in: bool = False

    @field_validator(*_FILTER_CANON, mode="before")
    @classmethod
    def _canonize_choice(cls, v, info):
        if v is None:
            return ""
        if isinstance(v, str):
            if not v.strip():
                return ""
            return canonize(v, _FILTER_CANON[info.field_name]) or v
        return v

    @field_validator("amenities", mode="before")
    @classmethod
    def _canonize_amenities(cls, v):
        if v is None:
            return frozenset()
        if isinstance(v, str):
            v = [v]
        if isinstance(v, (list, tuple, set, frozenset)):
            return frozenset(canonize(a, AMENITIES_CANON) or a for a in v)
        return v

    @field_serializer("amenities")
    def _sorted_amenities(self, amenities: frozenset[str]) -> list[str]:
        return sorted(amenities)


class RecordLocation(_Frozen):
    city: str = ""
    locality: str = ""
    society_name: str = ""
    landmark: str = ""
    pincode: str = ""


class RecordParking(_Frozen):
    cars: int = 0
    bikes: bool = False
    covered: bool = False


class PropertyRecord(_Frozen):
    id: str = ""
    category: PropertyCategory | Unset = ""
    posting_type: PostingType = "Sell"
    title: str = ""
    description: str = ""
    status: str = ""
    price: float = 0
    maintenance_charges: float = 0
    built_up_area: float = 0
    carpet_area: float = 0
    location: RecordLocation = Field(default_factory=RecordLocation)
    furnishing_type: FurnishingType | Unset = ""
    construction_status: ConstructionStatus | Unset = ""
    posted_by: PostedBy | Unset = ""
    amenities: frozenset[str] = frozenset()
    furnishings: tuple[str, ...] = ()
    additional_rooms: tuple[str, ...] = ()
    images: tuple[str, ...] = ()
    floor_plan: str = ""
    map_link: str = ""
    created_at: Optional[datetime] = None

    property_age: int = 0
    total_floors: int = 0
    your_floor: Optional[int] = None

    bhk: BHKType | Unset = ""
    floor: FloorType | Unset = ""
    facing: FacingDirection | Unset = ""
    parking: RecordParking = Field(default_factory=RecordParking)
    lift: bool = False
    modular_kitchen: bool = False

    plot_type: PlotType | Unset = ""
    plot_area: float = 0   # sq ft
    water_supply: WaterSupply | Unset = ""
    floors: FloorsType | Unset = ""
    road_width: RoadWidth | Unset = ""
    boundary_wall: bool = False

    commercial_category: CommercialCategory | Unset = ""
    cabins_count: int = 0
    workstations: int = 0
    washrooms: int = 0
    pantry: bool = False
    ceiling_height: float = 0
    loading_dock: bool = False
    power_load: str = ""
    truck_parking: bool = False
    frontage: float = 0

    room_type: RoomType | Unset = ""
    attached_bathroom: bool = False
    kitchen_access: bool = False
    wifi: bool = False
    electricity_included: bool = False
    air_cooler_ac: bool = Field(default=False, alias="airCoolerAC")

    pg_occupancy: PGOccupancyType | Unset = ""
    food_included: bool = False
    housekeeping: bool = False
    laundry: bool = False

    newly_listed: bool = False
    verified: bool = False
    negotiable: bool = False
    rera_approved: bool = False
    rera_number: str = ""
    registry_available: bool = False
    loan_available: bool = False
    tax_paid: bool = False
    pet_friendly: bool = False
    immediate_move_in: bool = False

    @field_serializer("amenities")
    def _sorted_amenities(self, amenities: frozenset[str]) -> list[str]:
        return sorted(amenities)


# The python name and the camelCase alias both resolve to the python name.
FILTER_FIELD_NAMES: dict[str, str] = {}
for _name, _info in FilterState.model_fields.items():
    FILTER_FIELD_NAMES[_name] = _name
    if _info.alias:
        FILTER_FIELD_NAMES[_info.alias] = _name


def filter_field_name(key: str) -> str | None:
    return FILTER_FIELD_NAMES.get(key) if isinstance(key, str) else None


# ---------- reducer actions ----------

class SetField(_Frozen):
    kind: Literal["set_field"] = "set_field"
    key: str
    value: Any = None


class ToggleAmenity(_Frozen):
    kind: Literal["toggle_amenity"] = "toggle_amenity"
    amenity: str


class SetRangeBound(_Frozen):
    kind: Literal["set_range_bound"] = "set_range_bound"
    field: str
    bound: str
    value: Any = 0


class Reset(_Frozen):
    kind: Literal["reset"] = "reset"


FilterAction = Annotated[
    Union[SetField, ToggleAmenity, SetRangeBound, Reset], Field(discriminator="kind")
]


MAX_ADULTS = 16
MAX_CHILDREN = 5
MAX_INFANTS = 5


class Guests(_Frozen):
    adults: conint(ge=0, le=MAX_ADULTS) = 0
    children: conint(ge=0, le=MAX_CHILDREN) = 0
    infants: conint(ge=0, le=MAX_INFANTS) = 0

    @model_validator(mode="after")
    def _dependents_need_an_adult(self):
        if self.adults == 0 and (self.children or self.infants):
            raise ValueError("children and infants require at least one adult")
        return self


class SessionState(_Frozen):
    location: str = ""
    check_in: Optional[date] = None
    check_out: Optional[date] = None
    guests: Guests = Field(default_factory=Guests)
    property_type: str = ""
    furnishing: str = ""
    filters: FilterState = Field(default_factory=FilterState)


class SessionAction(_Frozen):
    type: str
    payload: Any = None


# ---------- API ----------

class NormalizeRequest(BaseModel):
    records: list[dict[str, Any]] = Field(default_factory=list)
    reference_time: Optional[datetime] = None


class ApplyFilterRequest(BaseModel):
    state: FilterState = Field(default_factory=FilterState)
    action: FilterAction


class ApplySessionRequest(BaseModel):
    state: SessionState = Field(default_factory=SessionState)
    action: SessionAction


class SearchRequest(BaseModel):
    records: list[dict[str, Any]] = Field(default_factory=list)
    filters: FilterState = Field(default_factory=FilterState)
    sort_by: Optional[SortKey] = "newest"
    posting_type: Optional[PostingType] = None
    limit: Optional[conint(ge=1)] = None
    offset: conint(ge=0) = 0
    include_unpublished: bool = False
    reference_time: Optional[datetime] = None


class Pagination(BaseModel):
    total: int
    limit: int
    offset: int
    has_more: bool


class SearchResponse(BaseModel):
    data: list[PropertyRecord]
    pagination: Pagination


class StatsRequest(BaseModel):
    records: list[dict[str, Any]] = Field(default_factory=list)
    include_unpublished: bool = False


class StatsResponse(BaseModel):
    total: int
    by_property_type: dict[str, int]
    by_posting_type: dict[str, int]


class FilterParamsResponse(BaseModel):
    params: dict[str, Any]
    query: str
    url: Optional[str] = None


class FieldDescriptorOut(BaseModel):
    name: str
    kind: str
    domain: list[str] = Field(default_factory=list)
    default: Any = None
    commercial_categories: list[str] = Field(default_factory=list)
