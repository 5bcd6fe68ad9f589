#!/usr/bin/env python3
"""
Tests for stream kinds and property definitions.

Usage:
    pytest tests/test_streams.py -v
"""

import os
import sys

# Add project root to path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from core.streams import (
    COMMON_PROPERTIES,
    DerivedProperty,
    SortClass,
    StoredProperty,
    StreamKind,
    StreamProperty,
    StreamPropertyMap,
    common_property_requests,
)


def test_parse_known_and_unknown_kinds():
    assert StreamKind.parse("Video") is StreamKind.VIDEO
    assert StreamKind.parse("general") is StreamKind.GENERAL
    assert StreamKind.parse("Chapters") is StreamKind.MAX
    assert StreamKind.MAX not in StreamKind.real_kinds()
    assert [int(k) for k in StreamKind] == list(range(8))


def test_requests_skip_missing_kinds_and_derived_columns():
    requests = common_property_requests({StreamKind.GENERAL: 1, StreamKind.VIDEO: 1, StreamKind.AUDIO: 0})
    kinds = {r.stream for r in requests}
    assert kinds == {StreamKind.GENERAL, StreamKind.VIDEO}

    names = {r.property for r in requests}
    assert "Time" not in names
    assert "Resolution" not in names
    assert "Video:Count" not in names
    # Fetched only to compute Resolution
    assert StreamProperty(StreamKind.VIDEO, "Width") in requests
    assert StreamProperty(StreamKind.VIDEO, "Height") in requests


def test_requests_empty_without_counts():
    assert common_property_requests({}) == []
    assert common_property_requests({StreamKind.MENU: 2}) == []


def test_definition_tables():
    general = {d.name: d for d in COMMON_PROPERTIES[StreamKind.GENERAL]}
    assert general["CompleteName"].title == "File Path"
    assert general["CompleteName"].in_list_view and not general["CompleteName"].in_card_view
    assert general["FileSize"].sort_class is SortClass.NUMERIC
    assert isinstance(general["Time"], DerivedProperty)
    assert not general["Time"].sortable
    assert general["Audio:Count"].title == "A"

    video = {d.name: d for d in COMMON_PROPERTIES[StreamKind.VIDEO]}
    assert isinstance(video["Width"], StoredProperty)
    assert not video["Width"].in_card_view and not video["Width"].in_list_view
    assert video["Default"].title == "D"


def test_formatting_through_definitions():
    general = {d.name: d for d in COMMON_PROPERTIES[StreamKind.GENERAL]}
    assert general["FileSize"].format("1536", {}) == "1.5KB"
    assert general["Time"].format(None, {"Duration": "5005"}) == "00:00:05.005"
    # Count columns show the cell value
    assert general["Video:Count"].format("2", {}) == "2"


def test_to_json_shape():
    item = StreamPropertyMap(StreamKind.AUDIO, 1, {"Format": "AAC"})
    assert item.to_json() == {"stream": "Audio", "num": 1, "propertyMap": {"Format": "AAC"}}
