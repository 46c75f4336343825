"""
Filter request model and value coercion helpers.

A FilterRequest is a read-only mapping of WP_Comment_Query style query vars.
Nothing here raises on malformed input: helpers coerce what they can and
report "empty" for the rest, so a bad optional value simply disables its
filter dimension.
"""

import logging
import re
from collections.abc import Mapping
from types import MappingProxyType
from typing import Any, Dict, Iterator, List, Optional

logger = logging.getLogger("comment_query.request")

# Alternate spellings accepted on input -> canonical query var
PARAMETER_ALIASES = {
    "page": "paged",
    "order_by": "orderby",
}

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")
_NUMERIC = re.compile(r"^\s*[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?\s*$")
_LIST_SEPARATORS = re.compile(r"[\s,]+")


class FilterRequest(Mapping):
    """
    Immutable view over the query vars of one compilation.

    The constructor copies the incoming mapping, so later changes to the
    caller's dict never leak into a compilation in progress.
    """

    def __init__(self, params: Optional[Mapping] = None, **kwargs: Any):
        data: Dict[str, Any] = {}
        merged = dict(params or {})
        merged.update(kwargs)
        for name, value in merged.items():
            canonical = PARAMETER_ALIASES.get(name)
            if canonical is None:
                data[name] = value
            elif canonical not in merged:
                data[canonical] = value
        self._data = MappingProxyType(data)

    @classmethod
    def coerce(cls, request: Any) -> "FilterRequest":
        """Return `request` as a FilterRequest, wrapping plain mappings and None."""
        if isinstance(request, cls):
            return request
        return cls(request)

    def __getitem__(self, name: str) -> Any:
        return self._data[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __repr__(self) -> str:
        return f"FilterRequest({dict(self._data)!r})"

    def is_set(self, name: str) -> bool:
        """True when the parameter is present and not None."""
        return self._data.get(name) is not None

    def is_empty(self, name: str) -> bool:
        return is_empty(self._data.get(name))

    def with_params(self, **params: Any) -> "FilterRequest":
        """Return a new request with `params` overriding the current values."""
        data = dict(self._data)
        data.update(params)
        return FilterRequest(data)


def is_empty(value: Any) -> bool:
    """
    Emptiness in the WordPress query-var sense.

    None, False, "", "0", 0, 0.0 and empty containers are empty. Everything else,
    including "0.0" and " ", is a real value.
    """
    if value is None or value is False:
        return True
    if isinstance(value, str):
        return value == "" or value == "0"
    if isinstance(value, (int, float)):
        return value == 0
    if isinstance(value, (list, tuple, set, frozenset, dict)):
        return len(value) == 0
    return False


def is_exact_zero(value: Any) -> bool:
    """True only for the integer 0, not for "0", 0.0 or False."""
    return type(value) is int and value == 0


def to_int(value: Any) -> int:
    """
    Best-effort integer cast that never raises.

    Numbers are truncated, strings contribute their leading integer ("12abc"
    is 12) and anything unparsable is 0.
    """
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if value != value or value in (float("inf"), float("-inf")):
            return 0
        return int(value)
    if isinstance(value, str):
        stripped = value.strip()
        if _LEADING_INT.fullmatch(stripped):
            return _parse_int(stripped, value)
        if is_numeric(stripped):
            return to_int(float(stripped))
        match = _LEADING_INT.match(value)
        if match:
            return _parse_int(match.group(1), value)
    if value is not None:
        logger.warning("Could not read %r as an integer, using 0", value)
    return 0


def _parse_int(digits: str, value: Any) -> int:
    # int() refuses digit strings beyond sys.get_int_max_str_digits()
    try:
        return int(digits)
    except ValueError:
        logger.warning("Could not read %.40r... as an integer, using 0", value)
        return 0


def is_numeric(value: Any) -> bool:
    """Numbers and numeric strings ("3", "-2.5", "1e3"); booleans are not numeric."""
    if isinstance(value, bool):
        return False
    if isinstance(value, (int, float)):
        return True
    if isinstance(value, str):
        return bool(_NUMERIC.match(value))
    return False


def as_list(value: Any) -> List[Any]:
    """
    Coerce a value to a list.

    Lists, tuples and sets keep their items, mappings contribute their values,
    a scalar becomes a one-element list and None becomes [].
    """
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return list(value)
    if isinstance(value, (set, frozenset)):
        return sorted(value, key=str)
    if isinstance(value, Mapping):
        return list(value.values())
    return [value]


def split_csv(value: Any) -> List[str]:
    """
    Split a comma separated string, or take a list as-is, stripping each entry.

    Entries are kept even when blank so the single vs multi encoding matches
    the caller's input exactly.
    """
    if isinstance(value, str):
        items = value.split(",")
    else:
        items = as_list(value)
    return [str(item).strip() for item in items]


def parse_list(value: Any) -> List[Any]:
    """Split on runs of commas and whitespace; lists pass through unchanged."""
    if isinstance(value, str):
        return [item for item in _LIST_SEPARATORS.split(value) if item]
    return as_list(value)
