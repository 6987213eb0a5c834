"""Tests for in-memory snapshots and change tracking."""

from __future__ import annotations

from datetime import date, datetime

import pytest

from docaudit.document import Document, track_changes
from docaudit.model import Blob, DocumentView, PropertyView, Shape


def test_document_satisfies_views(make_doc):
    doc = make_doc({"dc:title": "x"})

    assert isinstance(doc, DocumentView)
    assert isinstance(doc.property("dc:title"), PropertyView)


def test_paths_and_lookup(make_doc):
    doc = make_doc({"test:complex": {"inner": {"flag": True}}})

    assert doc.schemas() == ["dublincore", "file", "test"]
    assert doc.property("content").shape is Shape.ATTACHMENT
    assert doc.property("test:complex/inner/flag").value is True
    assert doc.property("/test:complex/inner/flag").path == "test:complex/inner/flag"
    assert doc.get_value("test:complex") == {
        "string": None,
        "stringlist": None,
        "date": None,
        "inner": {"flag": True},
    }


def test_missing_path_raises_key_error(make_doc):
    doc = make_doc()
    with pytest.raises(KeyError, match="dc:nope"):
        doc.property("dc:nope")


def test_unknown_property_rejected(make_doc):
    with pytest.raises(ValueError, match="Unknown properties: dc:nope"):
        make_doc({"dc:nope": 1})


def test_unknown_sub_field_rejected(make_doc):
    with pytest.raises(ValueError, match="unknown sub-fields"):
        make_doc({"test:complex": {"bogus": 1}})


def test_values_coerced_to_declared_types(make_doc):
    doc = make_doc(
        {
            "dc:expired": "2016-03-17",
            "test:count": "7",
            "dc:subjects": "single",
            "content": {"filename": "text.txt", "length": 3},
            "test:complex": {"inner": {"flag": "false"}, "date": "2016-03-17T10:00:00"},
        }
    )

    assert doc.get_value("dc:expired") == date(2016, 3, 17)
    assert doc.get_value("test:count") == 7
    assert doc.get_value("dc:subjects") == ("single",)
    assert doc.get_value("content") == Blob(filename="text.txt", length=3)
    assert doc.get_value("test:complex/inner/flag") is False
    assert doc.get_value("test:complex/date") == datetime(2016, 3, 17, 10, 0)


def test_bad_value_rejected(make_doc):
    with pytest.raises(ValueError, match="test:count"):
        make_doc({"test:count": "seven"})


def test_fresh_document_is_clean(make_doc):
    assert make_doc({"dc:title": "x"}).dirty_paths() == []


def test_track_changes_marks_only_differences(make_doc):
    before = make_doc({"dc:title": "a", "test:complex": {"string": "s", "stringlist": ["x"]}})
    after = track_changes(
        before,
        make_doc({"dc:title": "a", "test:complex": {"string": "t", "stringlist": ["x"]}}),
    )

    assert after.dirty_paths() == ["test:complex/string"]
    assert after.property("test:complex").is_dirty
    assert not after.property("dc:title").is_dirty
    assert [c.name for c in after.property("test:complex").dirty_children()] == ["string"]


def test_track_changes_keeps_identity(make_doc, schemas):
    before = make_doc()
    edited = Document.from_values(
        schemas, {"dc:title": "x"}, doc_id="doc-0001", lifecycle_state="approved"
    )

    after = track_changes(before, edited)

    assert after.doc_id == "doc-0001"
    assert after.lifecycle_state == "approved"
    assert after.dirty_paths() == ["dc:title"]
