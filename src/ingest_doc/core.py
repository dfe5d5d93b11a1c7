"""Core abstractions.

This module owns every *interface* in the package.  Nothing here depends on
a concrete implementation; the concrete classes live in ``resolvers``,
``templates`` and ``value_source``.

Call flow (``IngestDocument`` entry points)::

    IngestDocument.get_field_value("a.b.0")
      │
      ▼
    parse_path(path) → FieldPath(root, segments)   ← root selection
      │
      ▼
    ValueResolver.get(field_path, root_container)  ← traversal
      │
      ▼
    cast(path, value, expected)                     ← type projection
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Mapping

from .paths import FieldPath


# ─────────────────────────────────────────────────────────────────────────────
# ValueResolver: path-addressing abstraction
# ─────────────────────────────────────────────────────────────────────────────


class ValueResolver(ABC):
    """Abstract interface for reading/writing parsed paths inside a container.

    Every method receives the already-parsed ``FieldPath`` and the root
    container it addresses; root selection is the caller's job.

    Default implementation: ``resolvers.dotted.DottedPathResolver``.
    """

    @abstractmethod
    def get(self, field_path: FieldPath, root: Any) -> Any:
        """Read the value at *field_path*.  Raises if any segment is absent."""

    @abstractmethod
    def exists(self, field_path: FieldPath, root: Any, fail_out_of_range: bool = False) -> bool:
        """Check whether *field_path* resolves to a value, without raising for absence."""

    @abstractmethod
    def set(self, field_path: FieldPath, root: Any, value: Any, append: bool = False) -> None:
        """Write (or append) *value* at *field_path*, creating missing map nodes."""

    @abstractmethod
    def delete(self, field_path: FieldPath, root: Any) -> None:
        """Remove the value at *field_path*.  Raises if it is absent."""


# ─────────────────────────────────────────────────────────────────────────────
# Collaborators supplied at call time
# ─────────────────────────────────────────────────────────────────────────────


class TemplateRenderer(ABC):
    """Turns a parameterised expression plus a model into a concrete string.

    Implementations must raise ``errors.TemplateError`` when rendering fails.
    Default implementation: ``templates.Template``.
    """

    @abstractmethod
    def render(self, model: Mapping[str, Any]) -> str: ...


class ValueSource(ABC):
    """Produces a fresh value from configuration plus the current model.

    Default implementations and the ``wrap`` factory live in
    ``value_source``.
    """

    @abstractmethod
    def resolve(self, model: Mapping[str, Any]) -> Any: ...
