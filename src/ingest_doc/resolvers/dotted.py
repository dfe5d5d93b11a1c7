"""Dot-notation ValueResolver.

Walks a parsed ``FieldPath`` over nested maps and lists.  All four
operations share one traversal discipline and differ in two places: what a
missing intermediate node means, and what happens at the leaf.

=========  ======================  ==========================================
operation  missing map key         leaf
=========  ======================  ==========================================
get        ``FieldNotFound``       returned as-is
exists     ``False``               key present / index in range
set        created as ``{}``       overwritten, or merged by the append rule
delete     ``FieldNotFound``       key / element removed
=========  ======================  ==========================================

List segments are never created.  A list segment must be a base-10 integer
within ``0 <= index < len``; negative indices do not count from the end.
"""

from __future__ import annotations

import re
from typing import Any, List, Optional

from ..core import ValueResolver
from ..errors import (
    FieldNotFound,
    IndexOutOfBounds,
    NotAnIndex,
    NotIndexable,
    NullParent,
)
from ..paths import FieldPath
from ..values import ValueKind, kind_of, validate_value


# ─────────────────────────────────────────────────────────────────────────────
# Append rule
# ─────────────────────────────────────────────────────────────────────────────


def extend_values(target: List[Any], value: Any) -> None:
    """Append *value* to *target*, flattening one level if it is a list."""
    if isinstance(value, list):
        target.extend(value)
    else:
        target.append(value)


def append_values(existing: Any, value: Any) -> List[Any]:
    """Merge *value* into *existing* and return the resulting list.

    An existing list is extended in place and returned; any other value is
    wrapped into a new list first.

    Examples::

        append_values([1], 2)       → [1, 2]   (same list object)
        append_values("a", "b")     → ["a", "b"]
        append_values("a", ["b"])   → ["a", "b"]
    """
    if isinstance(existing, list):
        target = existing
    else:
        target = [existing]
    extend_values(target, value)
    return target


# ─────────────────────────────────────────────────────────────────────────────
# Resolver
# ─────────────────────────────────────────────────────────────────────────────


class DottedPathResolver(ValueResolver):
    """``ValueResolver`` over dot-separated segments."""

    _INDEX_RE = re.compile(r"[+-]?[0-9]+")
    # Segments outside the 32-bit signed range are not indices.
    _INDEX_MIN = -(2 ** 31)
    _INDEX_MAX = 2 ** 31 - 1

    # -- read ---------------------------------------------------------------

    def get(self, field_path: FieldPath, root: Any) -> Any:
        """Read the value at *field_path*; every segment must exist.

        Examples::

            get(a.b, {"a": {"b": 42}})      → 42
            get(arr.1, {"arr": [1, 2]})     → 2
            get(arr.x, {"arr": [1, 2]})     → NotAnIndex
        """
        context = root
        for segment in field_path.segments:
            context = self._resolve(segment, field_path.path, context)
        return context

    def exists(self, field_path: FieldPath, root: Any, fail_out_of_range: bool = False) -> bool:
        """Return whether *field_path* holds a value.

        Absence never raises: missing keys, ``None`` or scalar parents and
        non-numeric list segments all yield ``False``.  An out-of-range
        list index raises ``IndexOutOfBounds`` only if *fail_out_of_range*.
        """
        path = field_path.path
        context = root
        for segment in field_path.parents:
            if isinstance(context, dict):
                context = context.get(segment)
            elif isinstance(context, list):
                index = self._lenient_index(segment, path, context, fail_out_of_range)
                if index is None:
                    return False
                context = context[index]
            else:
                return False

        leaf = field_path.leaf
        if isinstance(context, dict):
            return leaf in context
        if isinstance(context, list):
            return self._lenient_index(leaf, path, context, fail_out_of_range) is not None
        return False

    # -- write --------------------------------------------------------------

    def set(self, field_path: FieldPath, root: Any, value: Any, append: bool = False) -> None:
        """Write *value* at *field_path*.

        Missing intermediate map keys are created as empty maps.  With
        *append*, the leaf is merged using ``append_values`` instead of being
        replaced; an absent map leaf becomes a new list.
        """
        validate_value(value)
        path = field_path.path
        context = root

        for segment in field_path.parents:
            kind = kind_of(context)
            if kind is ValueKind.NULL:
                raise NullParent(segment, path)
            if kind is ValueKind.MAP:
                if segment not in context:
                    context[segment] = {}
                context = context[segment]
            elif kind is ValueKind.LIST:
                context = context[self._strict_index(segment, path, context)]
            else:
                raise NotIndexable(segment, path, context)

        leaf = field_path.leaf
        kind = kind_of(context)
        if kind is ValueKind.NULL:
            raise NullParent(leaf, path, action="set")

        if kind is ValueKind.MAP:
            if not append:
                context[leaf] = value
            elif leaf in context:
                existing = context[leaf]
                merged = append_values(existing, value)
                if merged is not existing:
                    context[leaf] = merged
            else:
                fresh: List[Any] = []
                extend_values(fresh, value)
                context[leaf] = fresh
        elif kind is ValueKind.LIST:
            index = self._strict_index(leaf, path, context)
            if not append:
                context[index] = value
            else:
                existing = context[index]
                merged = append_values(existing, value)
                if merged is not existing:
                    context[index] = merged
        else:
            raise NotIndexable(leaf, path, context, action="set")

    def delete(self, field_path: FieldPath, root: Any) -> None:
        """Remove the value at *field_path*; it must exist."""
        path = field_path.path
        context = root
        for segment in field_path.parents:
            context = self._resolve(segment, path, context)

        leaf = field_path.leaf
        kind = kind_of(context)
        if kind is ValueKind.MAP:
            if leaf not in context:
                raise FieldNotFound(leaf, path)
            del context[leaf]
        elif kind is ValueKind.LIST:
            del context[self._strict_index(leaf, path, context)]
        elif kind is ValueKind.NULL:
            raise NullParent(leaf, path, action="remove")
        else:
            raise NotIndexable(leaf, path, context, action="remove")

    # -- internal helpers ---------------------------------------------------

    def _parse_index(self, segment: str) -> Optional[int]:
        if self._INDEX_RE.fullmatch(segment) is None:
            return None
        index = int(segment)
        if not self._INDEX_MIN <= index <= self._INDEX_MAX:
            return None
        return index

    def _strict_index(self, segment: str, path: str, items: List[Any]) -> int:
        index = self._parse_index(segment)
        if index is None:
            raise NotAnIndex(segment, path)
        if index < 0 or index >= len(items):
            raise IndexOutOfBounds(index, len(items), path)
        return index

    def _lenient_index(
            self,
            segment: str,
            path: str,
            items: List[Any],
            fail_out_of_range: bool,
    ) -> Optional[int]:
        index = self._parse_index(segment)
        if index is None:
            return None
        if index < 0 or index >= len(items):
            if fail_out_of_range:
                raise IndexOutOfBounds(index, len(items), path)
            return None
        return index

    def _resolve(self, segment: str, path: str, context: Any) -> Any:
        """Step one strict segment down from *context*."""
        kind = kind_of(context)
        if kind is ValueKind.NULL:
            raise NullParent(segment, path)
        if kind is ValueKind.MAP:
            if segment in context:
                return context[segment]
            raise FieldNotFound(segment, path)
        if kind is ValueKind.LIST:
            return context[self._strict_index(segment, path, context)]
        raise NotIndexable(segment, path, context)
