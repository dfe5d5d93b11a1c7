"""Dot-notation path parsing.

A path addresses one of two roots:

    _ingest.<rest>   - pipeline metadata
    _source.<rest>   - document body (explicit)
    <rest>           - document body (default)

The ``_ingest.`` prefix is checked first.  The remainder is split literally
on every ``.``: interior empty segments are kept (``a..b`` has three
segments), trailing empty ones are dropped.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Tuple

from .errors import InvalidPath

SEPARATOR = "."
INGEST_KEY = "_ingest"
SOURCE_KEY = "_source"
INGEST_KEY_PREFIX = INGEST_KEY + SEPARATOR
SOURCE_PREFIX = SOURCE_KEY + SEPARATOR


class RootSelector(Enum):
    SOURCE = "source"
    INGEST = "ingest"


@dataclass(frozen=True)
class FieldPath:
    """A parsed path: the original string, its root and its segments."""

    path: str
    root: RootSelector
    segments: Tuple[str, ...]

    @property
    def parents(self) -> Tuple[str, ...]:
        return self.segments[:-1]

    @property
    def leaf(self) -> str:
        return self.segments[-1]


def split_segments(path: str) -> Tuple[str, ...]:
    parts = path.split(SEPARATOR)
    while parts and parts[-1] == "":
        parts.pop()
    return tuple(parts)


def parse_path(path: Any) -> FieldPath:
    """Parse *path* into a ``FieldPath``.

    Raises:
        InvalidPath: path is ``None``, not a string, empty, or has no segment.

    Examples::

        parse_path("a.b")             -> SOURCE, ("a", "b")
        parse_path("_source.a")       -> SOURCE, ("a",)
        parse_path("_ingest.timestamp") -> INGEST, ("timestamp",)
    """
    if not isinstance(path, str) or not path:
        raise InvalidPath(path)

    if path.startswith(INGEST_KEY_PREFIX):
        root = RootSelector.INGEST
        rest = path[len(INGEST_KEY_PREFIX):]
    elif path.startswith(SOURCE_PREFIX):
        root = RootSelector.SOURCE
        rest = path[len(SOURCE_PREFIX):]
    else:
        root = RootSelector.SOURCE
        rest = path

    segments = split_segments(rest)
    if not segments or segments == ("",):
        raise InvalidPath(path)

    return FieldPath(path=path, root=root, segments=segments)
