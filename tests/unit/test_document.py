"""Tests for IngestDocument."""

import base64
import copy
from datetime import datetime, timezone

import pytest
from ingest_doc import (
    FieldNotFound,
    IndexOutOfBounds,
    IngestDocument,
    InvalidPath,
    MetaData,
    NotAnIndex,
    NotIndexable,
    NullParent,
    Template,
    TemplateError,
    TypeMismatch,
    UnsupportedValueType,
    wrap,
)


class TestConstruction:
    """Test constructors."""

    def test_metadata_is_injected(self):
        """Metadata keys land in the body next to the source."""
        doc = IngestDocument("idx", "type", "1", source={"field": "value"})

        assert doc.source_and_metadata == {
            "field": "value",
            "_index": "idx",
            "_type": "type",
            "_id": "1",
        }

    def test_routing_and_parent(self):
        """Optional metadata is stored when given."""
        doc = IngestDocument("idx", "type", "1", routing="r", parent="p")

        assert doc.source_and_metadata["_routing"] == "r"
        assert doc.source_and_metadata["_parent"] == "p"

    def test_optional_metadata_omitted(self):
        """Missing routing and parent leave no keys."""
        doc = IngestDocument("idx", "type", "1")

        assert "_routing" not in doc.source_and_metadata
        assert "_parent" not in doc.source_and_metadata

    def test_source_is_copied_not_aliased(self):
        """Writes do not reach the caller's source map."""
        source = {"a": 1}
        doc = IngestDocument("idx", "type", "1", source=source)

        doc.set_field_value("b", 2)
        assert source == {"a": 1}

    def test_timestamp_seeded(self):
        """Pipeline metadata starts with the construction time."""
        before = datetime.now(timezone.utc)
        doc = IngestDocument("idx", "type", "1")
        after = datetime.now(timezone.utc)

        assert list(doc.ingest_metadata) == ["timestamp"]
        assert before <= doc.ingest_metadata["timestamp"] <= after
        assert doc.has_field("_ingest.timestamp") is True
        assert doc.has_field("timestamp") is False

    def test_non_string_metadata_rejected(self):
        """Metadata values must be strings."""
        with pytest.raises(TypeMismatch):
            IngestDocument(1, "type", "1")

    def test_unsupported_source_value_rejected(self):
        """Source values outside the value model are rejected."""
        with pytest.raises(UnsupportedValueType):
            IngestDocument("idx", "type", "1", source={"bad": object()})

    def test_from_maps_wraps_as_is(self, captured_at):
        """from_maps keeps both maps by reference."""
        body = {"a": 1}
        ingest = {"timestamp": captured_at}
        doc = IngestDocument.from_maps(body, ingest)

        assert doc.source_and_metadata is body
        assert doc.ingest_metadata is ingest


class TestGetFieldValue:
    """Test get_field_value()."""

    def test_simple(self, document):
        """Top-level fields read with their type."""
        assert document.get_field_value("foo", str) == "bar"
        assert document.get_field_value("int", int) == 123
        assert document.get_field_value("double", float) == 123.45
        assert document.get_field_value("flag", bool) is True

    def test_nested(self, document):
        """Nested maps and list indices are traversed."""
        assert document.get_field_value("fizz.buzz", str) == "hello world"
        assert document.get_field_value("fizz.1", str) == "bar"
        assert document.get_field_value("fizz.list.0.field") == "value"
        assert document.get_field_value("fizz.list.1") == "plain"

    def test_source_prefix(self, document):
        """_source. reads the body."""
        assert document.get_field_value("_source.foo", str) == "bar"
        assert document.get_field_value("_source._index", str) == "index"

    def test_ingest_prefix(self, document, captured_at):
        """_ingest. reads pipeline metadata."""
        assert document.get_field_value("_ingest.timestamp", datetime) == captured_at

    def test_null_value(self, document):
        """A stored None reads back as None."""
        assert document.get_field_value("fizz.foo_null", str) is None

    def test_type_mismatch(self, document):
        """Wrong expected type raises TypeMismatch."""
        with pytest.raises(TypeMismatch, match=r"field \[foo\] of type \[str\] cannot be cast to \[int\]"):
            document.get_field_value("foo", int)

    def test_named_kind(self, document):
        """Kind names are accepted as the expected type."""
        assert document.get_field_value("list", "list") == [1, 2, 3]

    def test_missing(self, document):
        """Absent key raises with the full path."""
        with pytest.raises(FieldNotFound, match=r"field \[missing\] not present as part of path \[fizz.missing\]"):
            document.get_field_value("fizz.missing")

    def test_dotted_key_is_not_addressable(self, document):
        """Keys containing the separator cannot be reached by path."""
        with pytest.raises(FieldNotFound):
            document.get_field_value("dots.foo.bar")

    def test_structural_errors(self, document):
        """Each structural failure raises its own error."""
        with pytest.raises(IndexOutOfBounds):
            document.get_field_value("list.3")
        with pytest.raises(NotAnIndex):
            document.get_field_value("list.x")
        with pytest.raises(NotIndexable):
            document.get_field_value("foo.bar")
        with pytest.raises(NullParent):
            document.get_field_value("fizz.foo_null.x")

    @pytest.mark.parametrize("path", [None, "", ".", "_ingest."])
    def test_invalid_paths(self, document, path):
        """Unusable paths raise InvalidPath."""
        with pytest.raises(InvalidPath):
            document.get_field_value(path)

    def test_ignore_missing(self, document):
        """Absence becomes None, wrong types still raise."""
        assert document.get_field_value("missing", str, ignore_missing=True) is None
        assert document.get_field_value("fizz.list.9", ignore_missing=True) is None
        assert document.get_field_value("foo.bar", ignore_missing=True) is None
        with pytest.raises(TypeMismatch):
            document.get_field_value("foo", int, ignore_missing=True)

    def test_ignore_missing_still_rejects_invalid_paths(self, document):
        """Lenient reads still reject invalid paths."""
        with pytest.raises(InvalidPath):
            document.get_field_value("", ignore_missing=True)

    def test_templated_path(self, document):
        """A Template path is rendered before reading."""
        document.set_field_value("which", "buzz")

        assert document.get_field_value(Template("fizz.${which}"), str) == "hello world"

    def test_template_failure_surfaces(self, document):
        """Rendering errors propagate to the caller."""
        with pytest.raises(TemplateError):
            document.get_field_value(Template("${lowercase(int)}"))


class TestGetFieldValueAsBytes:
    """Test get_field_value_as_bytes()."""

    def test_base64_string(self, document):
        """Base64 strings decode to bytes."""
        document.set_field_value("encoded", base64.b64encode(bytes([1, 2, 3])).decode("ascii"))

        assert document.get_field_value_as_bytes("encoded") == bytes([1, 2, 3])

    def test_raw_bytes(self, document):
        """Stored bytes are returned unchanged."""
        document.set_field_value("raw", b"\x01\x02")

        assert document.get_field_value_as_bytes("raw") == b"\x01\x02"

    def test_other_kind_rejected(self, document):
        """Other kinds raise TypeMismatch."""
        with pytest.raises(TypeMismatch):
            document.get_field_value_as_bytes("int")

    def test_missing(self, document):
        """Absent field raises unless ignore_missing."""
        with pytest.raises(FieldNotFound):
            document.get_field_value_as_bytes("missing")
        assert document.get_field_value_as_bytes("missing", ignore_missing=True) is None


class TestHasField:
    """Test has_field()."""

    def test_existing(self, document):
        """Present fields, including None values, exist."""
        assert document.has_field("foo") is True
        assert document.has_field("fizz.foo_null") is True
        assert document.has_field("fizz.list.0.field") is True
        assert document.has_field("_index") is True
        assert document.has_field("_source.foo") is True

    def test_missing(self, document):
        """Absent or unreachable fields do not exist."""
        assert document.has_field("missing") is False
        assert document.has_field("fizz.missing") is False
        assert document.has_field("foo.bar") is False
        assert document.has_field("fizz.foo_null.x") is False
        assert document.has_field("_ingest.missing") is False

    def test_list_indices(self):
        """Out-of-range indices raise only when asked to."""
        doc = IngestDocument.from_maps({"a": [1, 2, 3]}, {})

        assert doc.has_field("a.0") is True
        assert doc.has_field("a.5") is False
        with pytest.raises(IndexOutOfBounds):
            doc.has_field("a.5", True)
        assert doc.has_field("a.x", True) is False

    def test_invalid_path(self, document):
        """Invalid paths still raise."""
        with pytest.raises(InvalidPath):
            document.has_field("")

    def test_templated_path(self, document):
        """A Template path is rendered before checking."""
        assert document.has_field(Template("${foo}")) is False
        assert document.has_field(Template("fi${'zz'}")) is True


class TestSetFieldValue:
    """Test set_field_value() and append_field_value()."""

    def test_set_then_get(self, document):
        """Set creates intermediate maps."""
        document.set_field_value("new.nested.field", "v")

        assert document.get_field_value("new.nested.field") == "v"
        assert document.source_and_metadata["new"] == {"nested": {"field": "v"}}

    def test_set_into_ingest_metadata(self, document):
        """_ingest. writes go to pipeline metadata."""
        document.set_field_value("_ingest.pipeline", "p1")

        assert document.ingest_metadata["pipeline"] == "p1"
        assert "pipeline" not in document.source_and_metadata

    def test_set_list_element(self, document):
        """Existing list slots are overwritten."""
        document.set_field_value("list.1", "two")

        assert document.get_field_value("list") == [1, "two", 3]

    def test_set_list_out_of_range(self, document):
        """Lists are never grown by set."""
        with pytest.raises(IndexOutOfBounds):
            document.set_field_value("empty_list.0", 1)

    def test_set_under_scalar(self, document):
        """Scalars cannot hold children."""
        with pytest.raises(NotIndexable):
            document.set_field_value("foo.bar", 1)

    def test_append_absent(self, document):
        """Appending to an absent field starts a list."""
        document.append_field_value("new_tags", "a")
        assert document.get_field_value("new_tags") == ["a"]

        document.append_field_value("new_tags", "b")
        assert document.get_field_value("new_tags") == ["a", "b"]

    def test_append_existing_list(self, document):
        """Appending a list to a list flattens it."""
        document.append_field_value("tags", ["c", "d"])

        assert document.get_field_value("tags") == ["a", "b", "c", "d"]

    def test_append_scalar(self, document):
        """A scalar becomes the first list element."""
        document.append_field_value("foo", "baz")

        assert document.get_field_value("foo") == ["bar", "baz"]

    def test_templated_set(self, document):
        """Template path and value source are both resolved."""
        document.set_field_value(Template("copy_of_${foo}"), wrap("${fizz.buzz}!"))

        assert document.get_field_value("copy_of_bar") == "hello world!"

    def test_value_source_sees_metadata(self, document, captured_at):
        """Value sources render against pipeline metadata."""
        document.set_field_value("stamped", wrap("${_ingest.timestamp}"))

        assert document.get_field_value("stamped") == str(captured_at)

    def test_templated_append(self, document):
        """Append accepts a Template path and a list source."""
        document.append_field_value(Template("tags"), wrap(["${foo}", 1]))

        assert document.get_field_value("tags") == ["a", "b", "bar", 1]


class TestRemoveField:
    """Test remove_field()."""

    def test_remove(self, document):
        """Top-level field is removed."""
        document.remove_field("foo")

        assert document.has_field("foo") is False

    def test_remove_nested_and_list(self, document):
        """Nested keys and list elements are removed."""
        document.remove_field("fizz.buzz")
        document.remove_field("list.0")

        assert "buzz" not in document.source_and_metadata["fizz"]
        assert document.get_field_value("list") == [2, 3]

    def test_remove_ingest(self, document):
        """_ingest. removals touch pipeline metadata."""
        document.remove_field("_ingest.timestamp")

        assert document.ingest_metadata == {}

    def test_remove_missing(self, document):
        """Absent fields raise and nothing is created."""
        with pytest.raises(FieldNotFound):
            document.remove_field("missing")
        with pytest.raises(FieldNotFound):
            document.remove_field("missing.deeper")
        assert "missing" not in document.source_and_metadata

    def test_remove_out_of_range(self, document):
        """Out-of-range list index raises."""
        with pytest.raises(IndexOutOfBounds):
            document.remove_field("list.10")

    def test_remove_templated(self, document):
        """A Template path is rendered before removal."""
        document.remove_field(Template("${'fizz'}.buzz"))

        assert document.has_field("fizz.buzz") is False

    def test_set_then_remove_restores_absence(self, document):
        """Set then remove leaves the body unchanged."""
        before = copy.deepcopy(document.source_and_metadata)

        document.set_field_value("fizz.fresh", 1)
        document.remove_field("fizz.fresh")

        assert document.has_field("fizz.fresh") is False
        assert document.source_and_metadata == before


class TestTemplateModel:
    """Test create_template_model() and render_template()."""

    def test_model_shape(self, document):
        """Model holds body fields plus _source and _ingest."""
        model = document.create_template_model()

        assert model["foo"] == "bar"
        assert model["_source"] is document.source_and_metadata
        assert model["_ingest"] is document.ingest_metadata

    def test_ingest_shadows_body_field(self, captured_at):
        """Pipeline metadata wins over a body field named _ingest."""
        doc = IngestDocument.from_maps({"_ingest": "body"}, {"timestamp": captured_at})
        model = doc.create_template_model()

        assert model["_ingest"] == {"timestamp": captured_at}
        assert model["_source"]["_ingest"] == "body"

    def test_render_template(self, document):
        """render_template renders against the document model."""
        assert document.render_template(Template("${_index}/${_source.foo}")) == "index/bar"


class TestExtractMetadata:
    """Test extract_metadata()."""

    def test_extract(self):
        """Metadata is removed in enum order, missing keys map to None."""
        doc = IngestDocument("idx", None, "1", source={"field": "x"})
        extracted = doc.extract_metadata()

        assert list(extracted) == list(MetaData)
        assert extracted == {
            MetaData.INDEX: "idx",
            MetaData.TYPE: None,
            MetaData.ID: "1",
            MetaData.ROUTING: None,
            MetaData.PARENT: None,
        }
        assert doc.source_and_metadata == {"field": "x"}

    def test_extract_all_kinds(self):
        """Every metadata kind is extracted."""
        doc = IngestDocument("idx", "t", "1", routing="r", parent="p")

        assert doc.extract_metadata() == {
            MetaData.INDEX: "idx",
            MetaData.TYPE: "t",
            MetaData.ID: "1",
            MetaData.ROUTING: "r",
            MetaData.PARENT: "p",
        }

    def test_second_call_returns_nothing(self):
        """Metadata is gone after the first call."""
        doc = IngestDocument("idx", "t", "1")
        doc.extract_metadata()

        assert doc.extract_metadata() == {meta: None for meta in MetaData}

    def test_non_string_metadata(self):
        """Non-string metadata raises TypeMismatch."""
        doc = IngestDocument.from_maps({"_index": 5}, {})

        with pytest.raises(TypeMismatch, match=r"field \[_index\]"):
            doc.extract_metadata()

    def test_field_names(self):
        """Each kind maps to its body key."""
        assert [m.field_name for m in MetaData] == ["_index", "_type", "_id", "_routing", "_parent"]


class TestCopyAndEquality:
    """Test copy(), equality and hashing."""

    def test_copy_is_equal_but_independent(self, document):
        """Copies are equal and share no containers."""
        duplicate = document.copy()

        assert duplicate == document
        assert duplicate is not document
        assert duplicate.source_and_metadata is not document.source_and_metadata
        assert duplicate.source_and_metadata["fizz"] is not document.source_and_metadata["fizz"]
        assert duplicate.ingest_metadata is not document.ingest_metadata

        duplicate.append_field_value("list", 4)
        assert document.get_field_value("list") == [1, 2, 3]
        assert duplicate != document

    def test_copy_module(self, document):
        """copy and deepcopy both produce deep copies."""
        assert copy.deepcopy(document) == document
        assert copy.copy(document).source_and_metadata is not document.source_and_metadata

    def test_hash_is_structural(self, document):
        """Equal documents hash alike."""
        assert hash(document) == hash(document.copy())
        assert len({document, document.copy()}) == 1

    def test_not_equal_to_other_types(self, document):
        """A document never equals a plain map."""
        assert document != {"foo": "bar"}

    def test_ingest_metadata_takes_part(self, document):
        """Pipeline metadata counts for equality."""
        other = document.copy()
        other.set_field_value("_ingest.extra", 1)

        assert other != document

    def test_repr(self, document):
        """repr shows both maps."""
        text = repr(document)

        assert text.startswith("IngestDocument(source_and_metadata={")
        assert "ingest_metadata={'timestamp'" in text
