"""The mutable per-record document handed from stage to stage.

An ``IngestDocument`` owns two maps:

* ``source_and_metadata`` – the record's own fields plus the metadata keys
  (``_index``, ``_type``, ``_id`` and, when given, ``_routing`` /
  ``_parent``)
* ``ingest_metadata``     – pipeline-local bookkeeping, seeded with the
  capture ``timestamp`` (UTC)

Paths starting with ``_ingest.`` address the second map; all other paths
(optionally prefixed ``_source.``) address the first.  Every field operation
also accepts a ``TemplateRenderer`` instead of a path string; it is rendered
against ``create_template_model()`` first.

An instance is not synchronised.  Use ``copy()`` to hand an independent
snapshot to another flow of control.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Tuple, Type, Union

from .casters import BUILTIN_KINDS, Expected, cast, decode_bytes
from .core import TemplateRenderer, ValueResolver, ValueSource
from .errors import IngestDocumentError
from .paths import INGEST_KEY, SOURCE_KEY, FieldPath, RootSelector, parse_path
from .resolvers.dotted import DottedPathResolver
from .values import deep_copy_map, freeze, validate_value

logger = logging.getLogger(__name__)

TIMESTAMP = "timestamp"

PathLike = Union[str, TemplateRenderer]


class MetaData(Enum):
    """Metadata kinds, in extraction order, and their keys in the body."""

    INDEX = "_index"
    TYPE = "_type"
    ID = "_id"
    ROUTING = "_routing"
    PARENT = "_parent"

    @property
    def field_name(self) -> str:
        return self.value


class IngestDocument:
    """A single record being processed before it is indexed."""

    def __init__(
            self,
            index: str,
            doc_type: Optional[str],
            doc_id: str,
            routing: Optional[str] = None,
            parent: Optional[str] = None,
            source: Optional[Mapping[str, Any]] = None,
            *,
            resolver: ValueResolver | None = None,
            kinds: Mapping[str, Tuple[Type[Any], ...]] | None = None,
    ) -> None:
        body: Dict[str, Any] = dict(source) if source else {}
        body[MetaData.INDEX.field_name] = cast(MetaData.INDEX.field_name, index, str)
        body[MetaData.TYPE.field_name] = cast(MetaData.TYPE.field_name, doc_type, str)
        body[MetaData.ID.field_name] = cast(MetaData.ID.field_name, doc_id, str)
        if routing is not None:
            body[MetaData.ROUTING.field_name] = cast(MetaData.ROUTING.field_name, routing, str)
        if parent is not None:
            body[MetaData.PARENT.field_name] = cast(MetaData.PARENT.field_name, parent, str)

        ingest = {TIMESTAMP: datetime.now(timezone.utc)}
        self._setup(body, ingest, resolver, kinds)
        logger.debug("created document [%s/%s/%s]", index, doc_type, doc_id)

    @classmethod
    def from_maps(
            cls,
            source_and_metadata: Dict[str, Any],
            ingest_metadata: Dict[str, Any],
            *,
            resolver: ValueResolver | None = None,
            kinds: Mapping[str, Tuple[Type[Any], ...]] | None = None,
    ) -> IngestDocument:
        """Wrap two existing maps as-is (no copy, no timestamp injected).

        Useful for replaying a captured document and for tests that need a
        deterministic ``ingest_metadata``.
        """
        doc = cls.__new__(cls)
        doc._setup(source_and_metadata, ingest_metadata, resolver, kinds)
        return doc

    def _setup(
            self,
            source_and_metadata: Dict[str, Any],
            ingest_metadata: Dict[str, Any],
            resolver: ValueResolver | None,
            kinds: Mapping[str, Tuple[Type[Any], ...]] | None,
    ) -> None:
        validate_value(source_and_metadata)
        validate_value(ingest_metadata)
        self._source_and_metadata = source_and_metadata
        self._ingest_metadata = ingest_metadata
        self._resolver = resolver if resolver is not None else DottedPathResolver()
        self._kinds = dict(kinds) if kinds else BUILTIN_KINDS

    # -- accessors ----------------------------------------------------------

    @property
    def source_and_metadata(self) -> Dict[str, Any]:
        """The live body map.  Prefer the field operations for mutation."""
        return self._source_and_metadata

    @property
    def ingest_metadata(self) -> Dict[str, Any]:
        """The live pipeline metadata map (``timestamp`` plus anything set under ``_ingest.``)."""
        return self._ingest_metadata

    # -- read ---------------------------------------------------------------

    def get_field_value(
            self,
            path: PathLike,
            expected: Expected = object,
            ignore_missing: bool = False,
    ) -> Any:
        """Return the value at *path*, checked against *expected*.

        With *ignore_missing*, a path that does not exist yields ``None``;
        a value that exists but has the wrong kind still raises.

        Raises:
            InvalidPath, FieldNotFound, IndexOutOfBounds, NotAnIndex,
            NotIndexable, NullParent: the path cannot be resolved.
            TypeMismatch: the value is not of the *expected* kind.
        """
        path = self._render_path(path)
        try:
            field_path = parse_path(path)
            value = self._resolver.get(field_path, self._root(field_path))
            return cast(path, value, expected, self._kinds)
        except IngestDocumentError:
            if ignore_missing and not self.has_field(path):
                return None
            raise

    def get_field_value_as_bytes(self, path: PathLike, ignore_missing: bool = False) -> Any:
        """Return the value at *path* as bytes; strings are base64-decoded."""
        path = self._render_path(path)
        value = self.get_field_value(path, object, ignore_missing)
        return decode_bytes(path, value)

    def has_field(self, path: PathLike, fail_out_of_range: bool = False) -> bool:
        """Return whether *path* holds a value (``None`` counts as a value).

        Raises:
            InvalidPath: malformed path.
            IndexOutOfBounds: only with *fail_out_of_range*.
        """
        field_path = parse_path(self._render_path(path))
        return self._resolver.exists(field_path, self._root(field_path), fail_out_of_range)

    # -- write --------------------------------------------------------------

    def set_field_value(self, path: PathLike, value: Any) -> None:
        """Write *value* at *path*, replacing whatever was there.

        Missing intermediate maps are created.  *value* may be a
        ``ValueSource``, resolved against the template model.
        """
        self._set(path, value, append=False)

    def append_field_value(self, path: PathLike, value: Any) -> None:
        """Append *value* (or each element, if it is a list) to the list at *path*.

        A scalar already at *path* is turned into a list first; an absent
        field becomes a new list.
        """
        self._set(path, value, append=True)

    def remove_field(self, path: PathLike) -> None:
        field_path = parse_path(self._render_path(path))
        self._resolver.delete(field_path, self._root(field_path))

    # -- templates ----------------------------------------------------------

    def create_template_model(self) -> Dict[str, Any]:
        """Body fields plus ``_source`` (the body) and ``_ingest`` (pipeline metadata).

        A body field named ``_ingest`` is shadowed here; reach it through
        ``_source._ingest``.
        """
        model = dict(self._source_and_metadata)
        model[SOURCE_KEY] = self._source_and_metadata
        model[INGEST_KEY] = self._ingest_metadata
        return model

    def render_template(self, template: TemplateRenderer) -> str:
        return template.render(self.create_template_model())

    # -- metadata -----------------------------------------------------------

    def extract_metadata(self) -> Dict[MetaData, Optional[str]]:
        """Remove the metadata fields from the body and return them by kind.

        Fields already gone map to ``None``; calling this twice is safe.

        Raises:
            TypeMismatch: a metadata field holds something other than a string.
        """
        extracted: Dict[MetaData, Optional[str]] = {}
        for meta in MetaData:
            value = self._source_and_metadata.pop(meta.field_name, None)
            extracted[meta] = cast(meta.field_name, value, str)
        logger.debug("extracted metadata %s", {m.name: v for m, v in extracted.items()})
        return extracted

    # -- copying ------------------------------------------------------------

    def copy(self) -> IngestDocument:
        """Return a fully independent duplicate of this document."""
        return IngestDocument.from_maps(
            deep_copy_map(self._source_and_metadata),
            deep_copy_map(self._ingest_metadata),
            resolver=self._resolver,
            kinds=self._kinds,
        )

    def __copy__(self) -> IngestDocument:
        return self.copy()

    def __deepcopy__(self, memo: Dict[int, Any]) -> IngestDocument:
        return self.copy()

    # -- structural identity ------------------------------------------------

    def __eq__(self, other: object) -> bool:
        if other is self:
            return True
        if not isinstance(other, IngestDocument):
            return NotImplemented
        return (
            self._source_and_metadata == other._source_and_metadata
            and self._ingest_metadata == other._ingest_metadata
        )

    def __hash__(self) -> int:
        return hash((freeze(self._source_and_metadata), freeze(self._ingest_metadata)))

    def __repr__(self) -> str:
        return (
            f"IngestDocument(source_and_metadata={self._source_and_metadata!r}, "
            f"ingest_metadata={self._ingest_metadata!r})"
        )

    # -- internal helpers ---------------------------------------------------

    def _root(self, field_path: FieldPath) -> Dict[str, Any]:
        if field_path.root is RootSelector.INGEST:
            return self._ingest_metadata
        return self._source_and_metadata

    def _render_path(self, path: PathLike, model: Mapping[str, Any] | None = None) -> str:
        if isinstance(path, TemplateRenderer):
            return path.render(model if model is not None else self.create_template_model())
        return path

    def _set(self, path: PathLike, value: Any, append: bool) -> None:
        if isinstance(path, TemplateRenderer) or isinstance(value, ValueSource):
            model = self.create_template_model()
            path = self._render_path(path, model)
            if isinstance(value, ValueSource):
                value = value.resolve(model)
        field_path = parse_path(path)
        self._resolver.set(field_path, self._root(field_path), value, append=append)
