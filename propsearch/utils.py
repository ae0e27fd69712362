from collections.abc import Mapping
from typing import Any
from urllib.parse import urlencode

_MISSING = object()


def qs(params: dict) -> str:
    clean = {}
    for k, v in params.items():
        if v is None:
            continue
        if isinstance(v, list) and len(v) == 0:
            continue
        clean[k] = v
    return urlencode(clean, doseq=True)


def get_path(data: Any, path: str, default: Any = None) -> Any:
    """Looks up a dotted path ("location.city") through nested mappings."""
    cur = data
    for part in path.split("."):
        if not isinstance(cur, Mapping):
            return default
        cur = cur.get(part, _MISSING)
        if cur is _MISSING:
            return default
    return cur


def is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())
