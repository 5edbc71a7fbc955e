# utils.py

import json
from dataclasses import fields, is_dataclass
from typing import Any, NamedTuple

DISPLAY_KEYS = ("name", "text", "presentation", "fullName")


class FlatValue(NamedTuple):
    kind: str  # 'scalar' or 'list'
    value: Any


def display_string(value):
    """Pick the first available display attribute of a payload object."""
    if isinstance(value, dict):
        for key in DISPLAY_KEYS:
            if value.get(key):
                return value[key]
        return json.dumps(value, sort_keys=True)
    return value


def flatten_value(value):
    """
    Reduce a tracker field value to something printable.

    Lists are joined with ", " after reducing each element, objects become
    their first available display attribute, scalars pass through.

    :param value: Raw field value from the tracker payload
    :return: FlatValue tagged 'list' or 'scalar'
    """
    if isinstance(value, list):
        return FlatValue("list", ", ".join(str(display_string(v)) for v in value))
    if isinstance(value, dict):
        return FlatValue("scalar", display_string(value))
    return FlatValue("scalar", value)


def to_jsonable(obj):
    """Convert dataclasses and sets into plain JSON-compatible structures."""
    if is_dataclass(obj) and not isinstance(obj, type):
        return {f.name: to_jsonable(getattr(obj, f.name)) for f in fields(obj)}
    if isinstance(obj, (set, frozenset)):
        return sorted(to_jsonable(v) for v in obj)
    if isinstance(obj, (list, tuple)):
        return [to_jsonable(v) for v in obj]
    if isinstance(obj, dict):
        return {k: to_jsonable(v) for k, v in obj.items()}
    return obj


def json_dumps(obj, **kwargs):
    return json.dumps(to_jsonable(obj), **kwargs)


def count_by(items, attr, default):
    """Build a value -> occurrence count histogram over an attribute."""
    counts = {}
    for item in items:
        value = getattr(item, attr, None) or default
        counts[value] = counts.get(value, 0) + 1
    return counts
