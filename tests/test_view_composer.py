#!/usr/bin/env python3
"""
Tests for the pure view projections.

Tests:
1. List rows and placeholders
2. Filters (idempotent, case-insensitive, details entries)
3. Typed sorting (descending is the reverse of ascending)
4. Header sort state, stream group selection, pagination
5. LastResultMemo identity caching

Usage:
    pytest tests/test_view_composer.py -v
"""

import os
import sys

# Add project root to path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from core.backend import Parameter
from core.streams import SortClass, StreamKind, StreamPropertyMap
from core.view_composer import (
    LastResultMemo,
    Paginator,
    SortState,
    StreamGroupSelection,
    build_list_rows,
    card_sections,
    filter_file_properties,
    filter_instances,
    filter_parameters,
    filter_rows,
    format_cell,
    list_view_columns,
    parameter_streams,
    pending_files,
    sort_rows,
    visible_instances,
)
from tests.fakes import sample_maps, video_counts


def make_rows():
    files = ["/m/a.mkv", "/m/b.mkv", "/m/c.mkv", "/m/pending.mkv"]
    counts = {f: video_counts() for f in files[:3]}
    common = {
        "/m/a.mkv": sample_maps("/m/a.mkv", "HEVC", "1500000"),
        "/m/b.mkv": sample_maps("/m/b.mkv", "AVC", "800000"),
        "/m/c.mkv": sample_maps("/m/c.mkv", "hevc", "1500000"),
    }
    return files, counts, common


# =============================================================================
# LIST ROWS
# =============================================================================

def test_rows_only_for_loaded_files_in_session_order():
    files, counts, common = make_rows()
    rows = build_list_rows(files, counts, common)
    assert [r["file"] for r in rows] == ["/m/a.mkv", "/m/b.mkv", "/m/c.mkv"]
    assert rows[0]["Video:Format"] == "HEVC"
    assert rows[0]["General:Video:Count"] == "1"
    assert pending_files(files, counts, common) == ["/m/pending.mkv"]


def test_rows_use_instance_zero_only():
    maps = (
        StreamPropertyMap(StreamKind.AUDIO, 0, {"Language": "en"}),
        StreamPropertyMap(StreamKind.AUDIO, 1, {"Language": "de"}),
    )
    rows = build_list_rows(["/x"], {"/x": {StreamKind.AUDIO: 2}}, {"/x": maps})
    assert rows[0]["Audio:Language"] == "en"


def test_list_cells_are_formatted():
    files, counts, common = make_rows()
    row = build_list_rows(files, counts, common)[0]
    columns = {c.column_id: c for c in list_view_columns()}
    assert format_cell(columns["General:FileSize"].definition, row, "General:FileSize") == "1GB"
    assert format_cell(columns["General:Time"].definition, row, "General:Time") == "1d 01:01:01.234"
    assert format_cell(columns["Video:Resolution"].definition, row, "Video:Resolution") == "1920x1080"
    assert format_cell(columns["Video:BitRate"].definition, row, "Video:BitRate") == "1.5Mbps"
    assert "Video:Width" not in columns


def test_card_sections_follow_table_order():
    sections = card_sections(sample_maps())
    assert [s.stream for s in sections] == [StreamKind.GENERAL, StreamKind.VIDEO, StreamKind.AUDIO]
    video = sections[1]
    assert "Resolution" in video.headers
    index = video.headers.index("Resolution")
    assert video.rows[0][index] == "1920x1080"


# =============================================================================
# FILTERS
# =============================================================================

def test_filter_rows_idempotent_and_case_insensitive():
    files, counts, common = make_rows()
    rows = build_list_rows(files, counts, common)
    once = filter_rows(rows, "hevc")
    assert [r["file"] for r in once] == ["/m/a.mkv", "/m/c.mkv"]
    assert filter_rows(once, "hevc") == once
    assert filter_rows(rows, "") is rows


def test_filter_file_properties_matches_any_instance():
    _, _, common = make_rows()
    result = filter_file_properties(common, "avc")
    assert list(result) == ["/m/b.mkv"]
    assert filter_file_properties(common, "Dolby").keys() == common.keys()


def test_filter_instances_keeps_matching_entries():
    result = filter_instances(sample_maps(), "format")
    assert [m.stream for m in result] == [StreamKind.GENERAL, StreamKind.VIDEO, StreamKind.AUDIO]
    assert set(result[2].property_map) == {"Format_Commercial"}
    assert filter_instances(sample_maps(), "1080")[0].property_map == {"Height": "1080"}
    assert filter_instances(sample_maps(), "nothing-matches") == []


def test_visible_instances_combines_kind_and_text():
    result = visible_instances(sample_maps(), "format", {StreamKind.AUDIO})
    assert [m.stream for m in result] == [StreamKind.AUDIO]
    assert visible_instances(sample_maps(), "", set()) == []


# =============================================================================
# SORTING
# =============================================================================

def test_descending_is_reverse_of_ascending():
    files, counts, common = make_rows()
    rows = build_list_rows(files, counts, common)
    for column, sort_class in (("Video:BitRate", SortClass.NUMERIC),
                               ("Video:Format", SortClass.LEXICOGRAPHIC)):
        ascending = sort_rows(rows, column, True, sort_class)
        descending = sort_rows(rows, column, False, sort_class)
        assert descending == list(reversed(ascending))


def test_numeric_sort_and_missing_values():
    rows = [{"file": "a", "x": "10"}, {"file": "b", "x": "9.5"}, {"file": "c"}]
    result = sort_rows(rows, "x", True, SortClass.NUMERIC)
    assert [r["file"] for r in result] == ["c", "b", "a"]


def test_unsortable_column_keeps_order():
    rows = [{"file": "b"}, {"file": "a"}]
    assert sort_rows(rows, "General:Time", True, SortClass.NONE) is rows
    assert sort_rows(rows, None, True, SortClass.LEXICOGRAPHIC) is rows


def test_sort_state_toggle():
    state = SortState()
    state = state.toggle("General:FileSize", SortClass.NUMERIC)
    assert state == SortState("General:FileSize", True)
    state = state.toggle("General:FileSize", SortClass.NUMERIC)
    assert state == SortState("General:FileSize", False)
    state = state.toggle("General:Title", SortClass.LEXICOGRAPHIC)
    assert state == SortState("General:Title", True)
    assert state.toggle("General:Time", SortClass.NONE) is state


# =============================================================================
# STREAM GROUPS / PAGINATION
# =============================================================================

def test_stream_group_selection():
    selection = StreamGroupSelection.from_counts(video_counts(text=2))
    assert selection.available == (StreamKind.GENERAL, StreamKind.VIDEO, StreamKind.AUDIO, StreamKind.TEXT)
    assert not selection.can_select_all
    assert selection.can_select_none

    selection.toggle(StreamKind.VIDEO)
    assert not selection.is_selected(StreamKind.VIDEO)
    assert selection.can_select_all

    selection.select_none()
    assert selection.selected == frozenset()
    assert not selection.can_select_none

    # Kinds the file does not have cannot be selected
    selection.toggle(StreamKind.MENU)
    assert selection.selected == frozenset()

    selection.select_all()
    assert selection.selected == frozenset(selection.available)


def test_paginator():
    paginator = Paginator()
    paginator.set_items(list(range(23)))
    assert paginator.page_count == 3
    assert paginator.range_label() == "1-10 of 23"

    paginator.set_page(2)
    assert paginator.items() == [20, 21, 22]
    assert paginator.range_label() == "21-23 of 23"

    paginator.set_page(99)
    assert paginator.page == 2

    paginator.set_rows_per_page(15)
    assert paginator.page == 0
    assert paginator.page_count == 2

    paginator.set_page(1)
    paginator.set_items(list(range(5)))
    assert paginator.page == 0

    paginator.set_items([])
    assert paginator.range_label() == "0-0 of 0"
    assert paginator.items() == []


def test_parameter_catalog_filters():
    parameters = [
        Parameter(0, "General", "Format"),
        Parameter(1, "General", "FileSize"),
        Parameter(2, "Video", "Format"),
        Parameter(3, "Audio", "SamplingRate"),
    ]
    assert parameter_streams(parameters) == ["General", "Video", "Audio"]
    assert [p.id for p in filter_parameters(parameters, None, "format")] == [0, 2]
    assert [p.id for p in filter_parameters(parameters, "General", "")] == [0, 1]
    assert [p.id for p in filter_parameters(parameters, "Video", "size")] == []


# =============================================================================
# MEMO
# =============================================================================

def test_memo_recomputes_only_on_new_inputs():
    files, counts, common = make_rows()
    memo = LastResultMemo(build_list_rows)

    first = memo(files, counts, common)
    assert memo(files, counts, common) is first
    assert memo.hits == 1

    # Equal content, new object: recompute
    second = memo(files, dict(counts), common)
    assert second is not first
    assert second == first
    assert memo.misses == 2


def test_memo_compares_strings_by_value():
    memo = LastResultMemo(filter_rows)
    rows = [{"file": "a"}]
    first = memo(rows, "".join(["a", "b"]))
    assert memo(rows, "ab") is first
