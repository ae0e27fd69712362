"""Session-wide state transitions: search location, dates, guests and filters."""
import logging
from typing import Any

from pydantic import TypeAdapter, ValidationError

from .reducer import apply as apply_filter
from .schemas import (
    MAX_ADULTS,
    MAX_CHILDREN,
    MAX_INFANTS,
    FilterAction,
    FilterState,
    Guests,
    Parking,
    PriceRange,
    SessionAction,
    SessionState,
    ToggleAmenity,
)

logger = logging.getLogger(__name__)


class SessionActionType:
    SET_LOCATION = "SET_LOCATION"
    SET_CHECK_IN = "SET_CHECK_IN"
    SET_CHECK_OUT = "SET_CHECK_OUT"
    SET_GUESTS = "SET_GUESTS"
    RESET_DATES = "RESET_DATES"
    RESET_GUESTS = "RESET_GUESTS"
    INCREASE_ADULTS = "INCREASE_ADULTS"
    INCREASE_CHILDREN = "INCREASE_CHILDREN"
    INCREASE_INFANTS = "INCREASE_INFANTS"
    DECREASE_ADULTS = "DECREASE_ADULTS"
    DECREASE_CHILDREN = "DECREASE_CHILDREN"
    DECREASE_INFANTS = "DECREASE_INFANTS"
    SET_PROPERTY_TYPE = "SET_PROPERTY_TYPE"
    SET_FURNISHING = "SET_FURNISHING"
    SET_FILTER_STATE = "SET_FILTER_STATE"
    RESET_FILTERS = "RESET_FILTERS"
    SET_PRICE_RANGE = "SET_PRICE_RANGE"
    SET_CONSTRUCTION_STATUS = "SET_CONSTRUCTION_STATUS"
    SET_POSTED_BY = "SET_POSTED_BY"
    TOGGLE_AMENITY = "TOGGLE_AMENITY"
    SET_BHK = "SET_BHK"
    SET_FLOOR = "SET_FLOOR"
    SET_FACING = "SET_FACING"
    SET_PARKING = "SET_PARKING"
    FILTER = "FILTER"


T = SessionActionType

# Actions that overwrite a single filter field (no toggle-off).
_FILTER_FIELD_ACTIONS = {
    T.SET_CONSTRUCTION_STATUS: "construction_status",
    T.SET_POSTED_BY: "posted_by",
    T.SET_BHK: "bhk",
    T.SET_FLOOR: "floor",
    T.SET_FACING: "facing",
}

_filter_action = TypeAdapter(FilterAction)


def _validated(state: SessionState, update: dict[str, Any]) -> SessionState:
    try:
        return SessionState.model_validate({**state.model_dump(), **update})
    except ValidationError:
        logger.debug("session: rejected update %r", update)
        return state


def _with_filters(state: SessionState, update: dict[str, Any]) -> SessionState:
    try:
        filters = FilterState.model_validate({**state.filters.model_dump(), **update})
    except ValidationError:
        logger.debug("session: rejected filter update %r", update)
        return state
    return state.model_copy(update={"filters": filters})


def _guests(state: SessionState, **changes: int) -> SessionState:
    return state.model_copy(update={"guests": state.guests.model_copy(update=changes)})


def apply_session(state: SessionState, action: SessionAction) -> SessionState:
    """Pure transition function for the session store; unknown types are no-ops."""
    kind = getattr(action, "type", None)
    payload = getattr(action, "payload", None)
    g = state.guests
    adults, children, infants = g.adults, g.children, g.infants

    if kind == T.SET_LOCATION:
        return _validated(state, {"location": payload or ""})
    if kind == T.SET_CHECK_IN:
        return _validated(state, {"check_in": payload})
    if kind == T.SET_CHECK_OUT:
        return _validated(state, {"check_out": payload})
    if kind == T.SET_GUESTS:
        return _validated(state, {"guests": payload})
    if kind == T.RESET_DATES:
        return state.model_copy(update={"check_in": None, "check_out": None})
    if kind == T.RESET_GUESTS:
        return state.model_copy(update={"guests": Guests()})

    if kind == T.INCREASE_ADULTS:
        if adults >= MAX_ADULTS:
            return state
        return _guests(state, adults=adults + 1)
    if kind == T.INCREASE_CHILDREN:
        if children >= MAX_CHILDREN:
            return state
        # A dependent always brings an adult along.
        if adults <= 0:
            return _guests(state, children=children + 1, adults=adults + 1)
        return _guests(state, children=children + 1)
    if kind == T.INCREASE_INFANTS:
        if infants >= MAX_INFANTS:
            return state
        if adults <= 0:
            return _guests(state, infants=infants + 1, adults=adults + 1)
        return _guests(state, infants=infants + 1)
    if kind == T.DECREASE_ADULTS:
        if adults <= 0:
            return state
        if adults <= 1 and (children >= 1 or infants >= 1):
            return state
        return _guests(state, adults=adults - 1)
    if kind == T.DECREASE_CHILDREN:
        if children <= 0:
            return state
        return _guests(state, children=children - 1)
    if kind == T.DECREASE_INFANTS:
        if infants <= 0:
            return state
        return _guests(state, infants=infants - 1)

    if kind == T.SET_PROPERTY_TYPE:
        return _validated(state, {"property_type": payload or ""})
    if kind == T.SET_FURNISHING:
        return _validated(state, {"furnishing": payload or ""})
    if kind == T.SET_FILTER_STATE:
        return _validated(state, {"filters": payload})
    if kind == T.RESET_FILTERS:
        return state.model_copy(update={"filters": FilterState()})
    if kind == T.SET_PRICE_RANGE:
        return _with_filters(state, {"price_range": payload or PriceRange()})
    if kind == T.SET_PARKING:
        return _with_filters(state, {"parking": payload or Parking()})
    if kind in _FILTER_FIELD_ACTIONS:
        return _with_filters(state, {_FILTER_FIELD_ACTIONS[kind]: payload})
    if kind == T.TOGGLE_AMENITY:
        filters = apply_filter(state.filters, ToggleAmenity(amenity=str(payload or "")))
        return state.model_copy(update={"filters": filters})
    if kind == T.FILTER:
        try:
            inner = _filter_action.validate_python(payload)
        except ValidationError:
            logger.debug("session: rejected filter action %r", payload)
            return state
        return state.model_copy(update={"filters": apply_filter(state.filters, inner)})

    logger.debug("session: ignoring unknown action type %r", kind)
    return state
