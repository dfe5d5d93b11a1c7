"""pytest configuration and shared fixtures."""

from datetime import datetime, timezone

import pytest

from ingest_doc import IngestDocument

CAPTURED_AT = datetime(2016, 6, 1, 12, 30, 0, tzinfo=timezone.utc)


@pytest.fixture
def sample_source():
    """Sample record body for tests."""
    return {
        "foo": "bar",
        "int": 123,
        "double": 123.45,
        "flag": True,
        "tags": ["a", "b"],
        "fizz": {
            "buzz": "hello world",
            "foo_null": None,
            "1": "bar",
            "list": [{"field": "value"}, "plain"],
        },
        "list": [1, 2, 3],
        "empty_list": [],
        "dots": {"foo.bar": "baz"},
    }


@pytest.fixture
def document(sample_source, captured_at):
    """Document with a fixed capture timestamp so equality is deterministic."""
    body = dict(sample_source)
    body.update({"_index": "index", "_type": "type", "_id": "id"})
    return IngestDocument.from_maps(body, {"timestamp": captured_at})


@pytest.fixture
def captured_at():
    """Fixed capture timestamp used for ``ingest_metadata``."""
    return CAPTURED_AT
