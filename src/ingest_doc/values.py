"""The closed value model and its deep-copy engine.

A document field may only ever hold one of the kinds in ``ValueKind``.
``kind_of`` is the single place that maps a runtime object onto that set;
every traversal and copy goes through it, so an unrecognised type is caught
the moment it is touched instead of leaking through.
"""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict

from .errors import UnsupportedValueType


class ValueKind(Enum):
    NULL = "null"
    STRING = "string"
    BOOLEAN = "boolean"
    INTEGER = "integer"
    FLOAT = "float"
    BYTES = "bytes"
    TIMESTAMP = "timestamp"
    LIST = "list"
    MAP = "map"


def kind_of(value: Any) -> ValueKind:
    """Classify *value*; raise ``UnsupportedValueType`` for anything else."""
    if value is None:
        return ValueKind.NULL
    if isinstance(value, str):
        return ValueKind.STRING
    # bool is an int subclass, test it first
    if isinstance(value, bool):
        return ValueKind.BOOLEAN
    if isinstance(value, int):
        return ValueKind.INTEGER
    if isinstance(value, float):
        return ValueKind.FLOAT
    if isinstance(value, (bytes, bytearray)):
        return ValueKind.BYTES
    if isinstance(value, datetime):
        return ValueKind.TIMESTAMP
    if isinstance(value, list):
        return ValueKind.LIST
    if isinstance(value, dict):
        return ValueKind.MAP
    raise UnsupportedValueType(value)


def is_container(value: Any) -> bool:
    return isinstance(value, (dict, list))


def validate_value(value: Any) -> None:
    """Walk *value* and raise ``UnsupportedValueType`` on the first bad node."""
    kind = kind_of(value)
    if kind is ValueKind.MAP:
        for key, item in value.items():
            if not isinstance(key, str):
                raise UnsupportedValueType(key)
            validate_value(item)
    elif kind is ValueKind.LIST:
        for item in value:
            validate_value(item)


def _copy_timestamp(ts: datetime) -> datetime:
    if ts.tzinfo is None:
        return datetime.combine(ts.date(), ts.time())
    utc = ts.astimezone(timezone.utc)
    return datetime.combine(utc.date(), utc.time(), tzinfo=timezone.utc)


def deep_copy(value: Any) -> Any:
    """Return a clone of *value* sharing no mutable node with the input.

    * maps and lists are rebuilt recursively
    * bytes are duplicated into a fresh buffer
    * timestamps are rebuilt from their fields (aware ones normalised to UTC)
    * strings, numbers, booleans and ``None`` are immutable and returned as-is
    """
    kind = kind_of(value)

    if kind is ValueKind.MAP:
        return {key: deep_copy(item) for key, item in value.items()}
    if kind is ValueKind.LIST:
        return [deep_copy(item) for item in value]
    if kind is ValueKind.BYTES:
        if isinstance(value, bytearray):
            return bytearray(value)
        return bytes(bytearray(value))
    if kind is ValueKind.TIMESTAMP:
        return _copy_timestamp(value)
    return value


def deep_copy_map(mapping: Dict[str, Any]) -> Dict[str, Any]:
    if not isinstance(mapping, dict):
        raise UnsupportedValueType(mapping)
    return deep_copy(mapping)


def freeze(value: Any) -> Any:
    """Hashable, order-insensitive snapshot of a value graph (for ``__hash__``)."""
    kind = kind_of(value)
    if kind is ValueKind.MAP:
        return frozenset((key, freeze(item)) for key, item in value.items())
    if kind is ValueKind.LIST:
        return tuple(freeze(item) for item in value)
    if kind is ValueKind.BYTES:
        return bytes(value)
    return value
