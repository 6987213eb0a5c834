"""Tests for change descriptor construction and value formatting."""

from __future__ import annotations

import json
from datetime import date, datetime, timezone

from docaudit.config import DiffConfig
from docaudit.descriptor import (
    FIELD_NAME,
    NEW_VALUE,
    OLD_VALUE,
    ChangeDescriptor,
    build_descriptor,
    format_value,
    normalize_field_name,
)
from docaudit.model import Blob


class Opaque:
    def __str__(self) -> str:
        return "opaque!"


def test_format_none_is_empty_marker():
    assert format_value(None) == "EMPTY"


def test_format_dates():
    assert format_value(date(2016, 3, 17)) == "03/17/2016"
    assert format_value(datetime(2016, 3, 17, 8, 30)) == "03/17/2016"


def test_format_aware_datetime_uses_local_zone():
    value = datetime(2016, 3, 17, 12, 0, tzinfo=timezone.utc)
    expected = value.astimezone().strftime("%m/%d/%Y")
    assert format_value(value) == expected


def test_format_other_values_use_str():
    assert format_value("text") == "text"
    assert format_value(42) == "42"
    assert format_value(1.5) == "1.5"
    assert format_value(True) == "True"
    assert format_value(Opaque()) == "opaque!"


def test_format_respects_config():
    config = DiffConfig(date_format="%Y-%m-%d", empty_value="-")
    assert format_value(date(2016, 3, 17), config) == "2016-03-17"
    assert format_value(None, config) == "-"


def test_normalize_strips_one_leading_slash():
    assert normalize_field_name("/dc:title") == "dc:title"
    assert normalize_field_name("dc:title") == "dc:title"
    assert normalize_field_name("//x") == "/x"
    assert normalize_field_name("test:complex/string") == "test:complex/string"


def test_build_default_comment(context):
    entry = build_descriptor(context, "/dc:title", "old", None)

    assert entry.field_name == "dc:title"
    assert entry.old_value == "old"
    assert entry.new_value == "EMPTY"
    assert entry.comment == "dc:title : old -> EMPTY"


def test_build_comment_override(context):
    entry = build_descriptor(context, "dc:subjects", None, "art", comment="dc:subjects : Added art")
    assert entry.comment == "dc:subjects : Added art"
    assert entry.new_value == "art"


def test_extended_info(context):
    entry = build_descriptor(context, "dc:title", None, "x")
    assert entry.extended == {FIELD_NAME: "dc:title", OLD_VALUE: "EMPTY", NEW_VALUE: "x"}


def test_serialization_round_trip(context):
    entry = build_descriptor(context, "content", None, Blob("text.txt").filename)

    data = json.loads(entry.to_json())
    assert data["event_id"] == "Property Modification"
    assert data["category"] == "Document"
    assert data["extended"]["fieldname"] == "content"
    assert data["timestamp"] == "2016-03-17T12:00:00+00:00"

    assert ChangeDescriptor.from_dict(data) == entry
