import logging
from typing import Any

from pydantic import ValidationError

from .catalog import AMENITIES_CANON, canonize
from .schemas import FilterState, Reset, SetField, SetRangeBound, ToggleAmenity
from .schemas import filter_field_name as field_name

logger = logging.getLogger(__name__)

RANGE_FIELDS = ("price_range", "plot_size")
RANGE_BOUNDS = ("min", "max")


def default_value(name: str) -> Any:
    return FilterState.model_fields[name].get_default(call_default_factory=True)


def apply(state: FilterState, action: Any) -> FilterState:
    """Returns the FilterState that results from applying ``action`` to ``state``.

    Never mutates ``state`` and never raises: unknown actions, unknown keys and
    values that do not fit the field leave the state unchanged.
    """
    if isinstance(action, SetField):
        return _set_field(state, action.key, action.value)
    if isinstance(action, ToggleAmenity):
        return _toggle_amenity(state, action.amenity)
    if isinstance(action, SetRangeBound):
        return _set_range_bound(state, action.field, action.bound, action.value)
    if isinstance(action, Reset):
        return FilterState()
    logger.debug("Ignoring unknown filter action: %r", action)
    return state


def _set_field(state: FilterState, key: str, value: Any) -> FilterState:
    name = field_name(key)
    if name is None:
        logger.debug("set_field: unknown key %r", key)
        return state
    try:
        candidate = FilterState.model_validate({**state.model_dump(), name: value})
    except ValidationError as e:
        logger.debug("set_field: rejected %s=%r (%d errors)", name, value, e.error_count())
        return state
    # Re-selecting the current value deselects it.
    if getattr(candidate, name) == getattr(state, name):
        return state.model_copy(update={name: default_value(name)})
    return candidate


def _toggle_amenity(state: FilterState, amenity: str) -> FilterState:
    canon = canonize(amenity, AMENITIES_CANON)
    if canon is None:
        logger.debug("toggle_amenity: unknown amenity %r", amenity)
        return state
    if canon in state.amenities:
        amenities = state.amenities - {canon}
    else:
        amenities = state.amenities | {canon}
    return state.model_copy(update={"amenities": frozenset(amenities)})


def _set_range_bound(state: FilterState, field: str, bound: str, value: Any) -> FilterState:
    name = field_name(field)
    if name not in RANGE_FIELDS or bound not in RANGE_BOUNDS:
        logger.debug("set_range_bound: unknown range %r.%r", field, bound)
        return state
    current = getattr(state, name)
    try:
        updated = type(current).model_validate({**current.model_dump(), bound: value})
    except ValidationError:
        logger.debug("set_range_bound: rejected %s.%s=%r", name, bound, value)
        return state
    return state.model_copy(update={name: updated})
