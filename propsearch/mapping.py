import logging
from collections.abc import Mapping
from typing import Any, NamedTuple
from urllib.parse import parse_qs

from pydantic import BaseModel, ValidationError

from .catalog import AMENITIES_CANON, SQFT_PER_UNIT, canonize
from .errors import MappingError
from .predicate import ADVANCED_FLAGS, active_descriptors, usable_bound
from .schemas import FilterState, filter_field_name
from .settings import settings
from .utils import qs

logger = logging.getLogger(__name__)


class Condition(NamedTuple):
    column: str
    op: str        # eq | ilike | gte | lte | contains | none
    value: Any


# FilterState field -> column of the properties table, where they differ.
DB_COLUMNS = {
    "property_type": "property_type",
    "furnishing": "furnishing_type",
    "construction_status": "property_status",
    "bhk": "bhk_type",
    "facing": "facing_direction",
    "plot_size": "plot_area",
    "carpet_area": "carpet_area",
    "verified_listings": "verified",
    "negotiable_price": "negotiable",
}

NOTHING = [Condition("*", "none", None)]


def _fmt(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _default(model: type[BaseModel], name: str) -> Any:
    return model.model_fields[name].get_default(call_default_factory=True)


def filters_to_params(f: FilterState) -> dict[str, Any]:
    """Canonical flat representation: camelCase keys, dotted for nested
    objects, only non-default fields, amenities sorted."""
    params: dict[str, Any] = {}
    for name, info in FilterState.model_fields.items():
        value = getattr(f, name)
        if value == _default(FilterState, name):
            continue
        key = info.alias or name
        if name == "amenities":
            params[key] = sorted(value)
        elif isinstance(value, BaseModel):
            for sub, sub_info in type(value).model_fields.items():
                sub_value = getattr(value, sub)
                if sub_value != _default(type(value), sub):
                    params[f"{key}.{sub_info.alias or sub}"] = _fmt(sub_value)
        else:
            params[key] = _fmt(value)
    logger.debug("filters_to_params -> %s", params)
    return params


def filters_to_query(f: FilterState) -> str:
    return qs(filters_to_params(f))


def _accept(model: type[BaseModel], name: str, value: Any) -> bool:
    try:
        model.model_validate({name: value})
    except ValidationError:
        logger.warning("params_to_filters: dropping %s=%r", name, value)
        return False
    return True


def params_to_filters(params: Mapping[str, Any] | str) -> FilterState:
    """Inverse of filters_to_params. Accepts a mapping or a raw query string;
    unknown keys and invalid values are dropped one by one."""
    if isinstance(params, str):
        params = parse_qs(params.lstrip("?"))
    data: dict[str, Any] = {}
    for key, raw in params.items():
        values = raw if isinstance(raw, (list, tuple)) else [raw]
        if not values:
            continue
        top, _, sub = key.partition(".")
        name = filter_field_name(top)
        if name is None:
            logger.debug("params_to_filters: unknown key %r", key)
            continue
        nested = FilterState.model_fields[name].annotation
        if name == "amenities":
            data[name] = [a for a in values if canonize(a, AMENITIES_CANON)]
        elif sub and isinstance(nested, type) and issubclass(nested, BaseModel):
            if _accept(nested, sub, values[-1]):
                data.setdefault(name, {})[sub] = values[-1]
        elif not sub and _accept(FilterState, name, values[-1]):
            data[name] = values[-1]
    return FilterState.model_validate(data)


def build_search_url(filters: FilterState) -> str:
    if not settings.BASE_URL:
        raise MappingError("BASE_URL is not configured. Set BASE_URL in the environment.")
    base = str(settings.BASE_URL).rstrip("/")
    path = settings.RESULTS_PATH if settings.RESULTS_PATH.startswith("/") else f"/{settings.RESULTS_PATH}"
    query = filters_to_query(filters)
    url = f"{base}{path}?{query}" if query else f"{base}{path}"
    logger.info("Search URL built: %s", url)
    return url


def _column(name: str) -> str:
    return DB_COLUMNS.get(name, name)


def _range(column: str, lo: float, hi: float) -> list[Condition] | None:
    """None when the range is empty (min > max)."""
    if lo and hi and lo > hi:
        return None
    out = []
    if lo:
        out.append(Condition(column, "gte", lo))
    if hi:
        out.append(Condition(column, "lte", hi))
    return out


def filters_to_conditions(f: FilterState) -> list[Condition]:
    """Server-side query description, gated exactly like compile_filters."""
    conds: list[Condition] = []
    if f.property_type:
        conds.append(Condition("property_type", "eq", f.property_type))
    for attr in ("city", "locality", "pincode"):
        needle = getattr(f.location, attr).strip()
        if needle:
            conds.append(Condition(attr, "ilike", f"%{needle}%"))

    price = _range("price", usable_bound(f.price_range.min), usable_bound(f.price_range.max))
    if price is None:
        return list(NOTHING)
    conds.extend(price)

    for name in ("furnishing", "construction_status", "posted_by"):
        if getattr(f, name):
            conds.append(Condition(_column(name), "eq", getattr(f, name)))
    if f.amenities:
        conds.append(Condition("amenities", "contains", sorted(f.amenities)))

    for d in active_descriptors(f):
        name = filter_field_name(d.name)
        value = getattr(f, name)
        if d.kind == "parking":
            if f.parking.cars > 0:
                conds.append(Condition("parking_spaces", "gte", f.parking.cars))
            if f.parking.bikes:
                conds.append(Condition("bike_parking", "eq", True))
        elif d.kind == "range":
            factor = SQFT_PER_UNIT.get(f.plot_size.unit, 1.0)
            plot = _range(
                _column(name),
                usable_bound(f.plot_size.min) * factor,
                usable_bound(f.plot_size.max) * factor,
            )
            if plot is None:
                return list(NOTHING)
            conds.extend(plot)
        elif d.kind in ("choice", "bool") and value:
            conds.append(Condition(_column(name), "eq", value))
        elif d.kind == "number" and usable_bound(value):
            conds.append(Condition(_column(name), "gte", value))
        elif d.kind == "text" and value.strip():
            conds.append(Condition(_column(name), "ilike", f"%{value.strip()}%"))

    for flag in ADVANCED_FLAGS:
        if getattr(f, flag):
            conds.append(Condition(_column(flag), "eq", True))
    return conds
