from .casters import BUILTIN_KINDS, cast, decode_bytes
from .core import TemplateRenderer, ValueResolver, ValueSource
from .document import TIMESTAMP, IngestDocument, MetaData
from .errors import (
    FieldNotFound,
    IndexOutOfBounds,
    IngestDocumentError,
    InvalidPath,
    NotAnIndex,
    NotIndexable,
    NullParent,
    TemplateError,
    TypeMismatch,
    UnsupportedValueType,
)
from .paths import INGEST_KEY, SOURCE_KEY, FieldPath, RootSelector, parse_path
from .resolvers.dotted import DottedPathResolver, append_values
from .templates import Template, compile_template, has_placeholder
from .value_source import ListValue, MapValue, ObjectValue, TemplateValue, wrap
from .values import ValueKind, deep_copy, deep_copy_map, is_container, kind_of, validate_value

__all__ = [
    # document
    "IngestDocument",
    "MetaData",
    "TIMESTAMP",
    # paths
    "FieldPath",
    "RootSelector",
    "parse_path",
    "INGEST_KEY",
    "SOURCE_KEY",
    # resolution
    "ValueResolver",
    "DottedPathResolver",
    "append_values",
    "cast",
    "decode_bytes",
    "BUILTIN_KINDS",
    # values
    "ValueKind",
    "kind_of",
    "is_container",
    "validate_value",
    "deep_copy",
    "deep_copy_map",
    # collaborators
    "TemplateRenderer",
    "ValueSource",
    "Template",
    "compile_template",
    "has_placeholder",
    "wrap",
    "ObjectValue",
    "TemplateValue",
    "ListValue",
    "MapValue",
    # errors
    "IngestDocumentError",
    "InvalidPath",
    "FieldNotFound",
    "IndexOutOfBounds",
    "NotAnIndex",
    "NotIndexable",
    "NullParent",
    "TypeMismatch",
    "UnsupportedValueType",
    "TemplateError",
]
