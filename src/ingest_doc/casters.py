"""Type projection of field values.

``cast`` checks that a value read from a document is of the kind the caller
asked for.  It never converts: a string holding ``"42"`` is not an ``int``.

Exports
-------
BUILTIN_KINDS
    Dictionary mapping kind names to the Python types that satisfy them.
    Default names: str, int, float, number, bool, bytes, timestamp, list,
    map, any.

A custom registry can be passed to ``IngestDocument(kinds=...)``.
"""

from __future__ import annotations

import base64
import binascii
from datetime import datetime
from typing import Any, Mapping, Tuple, Type, Union

from .errors import TypeMismatch

Expected = Union[str, Type[Any], Tuple[Type[Any], ...]]

# ─────────────────────────────────────────────────────────────────────────────
# Built-in kinds
# ─────────────────────────────────────────────────────────────────────────────

BUILTIN_KINDS: dict[str, Tuple[Type[Any], ...]] = {
    "str": (str,),
    "int": (int,),
    "float": (float,),
    "number": (int, float),
    "bool": (bool,),
    "bytes": (bytes, bytearray),
    "timestamp": (datetime,),
    "list": (list,),
    "map": (dict,),
    "any": (object,),
}


def _expected_types(expected: Expected, kinds: Mapping[str, Tuple[Type[Any], ...]]) -> Tuple[Type[Any], ...]:
    if isinstance(expected, str):
        try:
            return kinds[expected]
        except KeyError:
            raise ValueError(f"unknown value kind [{expected}]") from None
    if isinstance(expected, tuple):
        return expected
    return (expected,)


def _expected_name(expected: Expected) -> str:
    if isinstance(expected, str):
        return expected
    if isinstance(expected, tuple):
        return " | ".join(t.__name__ for t in expected)
    return expected.__name__


def cast(
        path: str,
        value: Any,
        expected: Expected = object,
        kinds: Mapping[str, Tuple[Type[Any], ...]] = BUILTIN_KINDS,
) -> Any:
    """Return *value* if it is of the *expected* kind, ``None`` if it is ``None``.

    ``bool`` is only accepted where ``bool`` (or ``object``) is expected,
    never as an ``int``.

    Raises:
        TypeMismatch: *value* is present but of another kind.
    """
    if value is None:
        return None

    types = _expected_types(expected, kinds)
    if isinstance(value, bool) and bool not in types and object not in types:
        raise TypeMismatch(path, type(value).__name__, _expected_name(expected))
    if isinstance(value, types):
        return value
    raise TypeMismatch(path, type(value).__name__, _expected_name(expected))


def decode_bytes(path: str, value: Any) -> Any:
    """Interpret a field value as raw bytes.

    Bytes are returned as-is and strings are decoded as standard base64;
    ``None`` passes through.
    """
    if value is None or isinstance(value, (bytes, bytearray)):
        return value
    if isinstance(value, str):
        try:
            return base64.b64decode(value, validate=True)
        except (binascii.Error, ValueError) as e:
            raise TypeMismatch(path, "str", "bytes", detail=f"invalid base64 content ({e})") from e
    raise TypeMismatch(path, type(value).__name__, "bytes", detail="must be string or byte array")
