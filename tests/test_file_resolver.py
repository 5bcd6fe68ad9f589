#!/usr/bin/env python3
"""
Tests for Gio directory expansion and text writing.

Usage:
    pytest tests/test_file_resolver.py -v
"""

import os
import sys

# Add project root to path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

import pytest

from core.gio_bridge.file_resolver import ResolveError, resolve_files, write_text_file


@pytest.fixture
def media_tree(tmp_path):
    (tmp_path / "movies" / "extras").mkdir(parents=True)
    (tmp_path / "music").mkdir()
    for name in ("movies/b.mkv", "movies/a.MP4", "movies/notes.txt",
                 "movies/extras/trailer.mkv", "music/song.flac"):
        (tmp_path / name).write_bytes(b"")
    return tmp_path


def test_directory_expands_recursively_with_filter(media_tree):
    files = resolve_files([str(media_tree / "movies")], ["mkv", "mp4"])
    assert files == [
        str(media_tree / "movies" / "a.MP4"),
        str(media_tree / "movies" / "b.mkv"),
        str(media_tree / "movies" / "extras" / "trailer.mkv"),
    ]


def test_empty_extension_list_keeps_every_file(media_tree):
    files = resolve_files([str(media_tree / "music"), str(media_tree / "movies" / "notes.txt")], [])
    assert files == [
        str(media_tree / "music" / "song.flac"),
        str(media_tree / "movies" / "notes.txt"),
    ]


def test_explicit_files_bypass_filter_and_are_deduplicated(media_tree):
    notes = str(media_tree / "movies" / "notes.txt")
    files = resolve_files([notes, notes], ["mkv"])
    assert files == [notes]


def test_missing_path_raises(tmp_path):
    with pytest.raises(ResolveError):
        resolve_files([str(tmp_path / "missing.mkv")], [])


def test_write_text_file(tmp_path):
    target = tmp_path / "out.json"
    write_text_file(str(target), '[{"stream": "Général"}]')
    assert target.read_text(encoding="utf-8") == '[{"stream": "Général"}]'

    with pytest.raises(ResolveError):
        write_text_file(str(tmp_path / "missing-dir" / "out.json"), "[]")
