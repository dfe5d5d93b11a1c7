"""Error taxonomy for path resolution and value handling.

Every error derives from ``IngestDocumentError`` (a ``ValueError``), and the
structural ones additionally derive from the builtin exception a plain
``dict`` / ``list`` lookup would have raised, so callers can catch either
the precise class or the familiar builtin:

* ``FieldNotFound``        – ``KeyError``
* ``IndexOutOfBounds``     – ``IndexError``
* ``NotIndexable``         – ``TypeError``
* ``TypeMismatch``         – ``TypeError``
* ``UnsupportedValueType`` – ``TypeError``

All messages carry the complete original path.
"""

from __future__ import annotations

from typing import Any


def _type_name(value: Any) -> str:
    return type(value).__name__


class IngestDocumentError(ValueError):
    """Base class for every error raised by this package."""


class InvalidPath(IngestDocumentError):
    """Path is ``None``, not a string, empty, or reduces to no usable segment."""

    def __init__(self, path: Any) -> None:
        self.path = path
        if path is not None and not isinstance(path, str):
            super().__init__(f"path [{path!r}] must be a string, not [{_type_name(path)}]")
        elif not path:
            super().__init__("path cannot be null nor empty")
        else:
            super().__init__(f"path [{path}] is not valid")


class FieldNotFound(IngestDocumentError, KeyError):
    """A required map key is absent."""

    def __init__(self, field: str, path: str) -> None:
        self.field = field
        self.path = path
        super().__init__(f"field [{field}] not present as part of path [{path}]")

    def __str__(self) -> str:
        # KeyError would repr-quote the message
        return self.args[0]


class IndexOutOfBounds(IngestDocumentError, IndexError):
    """List index is negative or past the end."""

    def __init__(self, index: int, length: int, path: str) -> None:
        self.index = index
        self.length = length
        self.path = path
        super().__init__(
            f"[{index}] is out of bounds for array with length [{length}] as part of path [{path}]"
        )


class NotAnIndex(IngestDocumentError):
    """A non-numeric segment was used against a list."""

    def __init__(self, segment: str, path: str) -> None:
        self.segment = segment
        self.path = path
        super().__init__(
            f"[{segment}] is not an integer, cannot be used as an index as part of path [{path}]"
        )


class NotIndexable(IngestDocumentError, TypeError):
    """Traversal reached a scalar where a map or list was required."""

    def __init__(self, segment: str, path: str, context: Any, action: str = "resolve") -> None:
        self.segment = segment
        self.path = path
        self.actual = _type_name(context)
        if action == "set":
            msg = f"cannot set [{segment}] with parent object of type [{self.actual}] as part of path [{path}]"
        else:
            msg = f"cannot {action} [{segment}] from object of type [{self.actual}] as part of path [{path}]"
        super().__init__(msg)


class NullParent(IngestDocumentError):
    """Traversal reached ``None`` where a map or list was required."""

    def __init__(self, segment: str, path: str, action: str = "resolve") -> None:
        self.segment = segment
        self.path = path
        if action == "set":
            msg = f"cannot set [{segment}] with null parent as part of path [{path}]"
        else:
            msg = f"cannot {action} [{segment}] from null as part of path [{path}]"
        super().__init__(msg)


class TypeMismatch(IngestDocumentError, TypeError):
    """A present value cannot be interpreted as the requested kind."""

    def __init__(self, path: str, actual: str, expected: str, detail: str | None = None) -> None:
        self.path = path
        self.actual = actual
        self.expected = expected
        msg = f"field [{path}] of type [{actual}] cannot be cast to [{expected}]"
        if detail:
            msg = f"{msg}: {detail}"
        super().__init__(msg)


class UnsupportedValueType(IngestDocumentError, TypeError):
    """A value outside the closed value set was found in a document graph."""

    def __init__(self, value: Any) -> None:
        self.actual = _type_name(value)
        super().__init__(f"unexpected value type [{self.actual}]")


class TemplateError(IngestDocumentError):
    """A template could not be rendered against its model."""

    def __init__(self, template: str, reason: str) -> None:
        self.template = template
        super().__init__(f"failed to render template [{template}]: {reason}")
