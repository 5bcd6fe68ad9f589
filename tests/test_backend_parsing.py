#!/usr/bin/env python3
"""
Tests for the mediainfo CLI adapter.

Tests:
1. --Info-Parameters catalog parsing
2. --Output=JSON track conversion (instances, extra fields, aliases, media path)
3. Stream counting and property selection
4. Subprocess failures become BackendError

Usage:
    pytest tests/test_backend_parsing.py -v
"""

import os
import sys
import textwrap

# Add project root to path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

import pytest
from PySide6.QtCore import QSettings

from core.backend import (
    BackendError,
    MediaInfoCliBackend,
    Parameter,
    count_streams,
    parse_info_parameters,
    parse_tracks,
    select_properties,
)
from core.config import ConfigStore
from core.streams import StreamKind, StreamProperty

INFO_PARAMETERS = textwrap.dedent("""\
    General
    Count                            : Count of objects available in this stream
    Format                           : Format used

    Video
    Width                            : Width (aperture size if present) in pixel
    Height                           : Height in pixel

    Chapters
    Total                            : Never reached
""")

DOCUMENT = {
    "media": {
        "@ref": "/m/a.mkv",
        "track": [
            {"@type": "General", "Format": "Matroska", "Duration": "5.280",
             "extra": {"ErrorDetectionType": "Per level 1"}},
            {"@type": "Video", "Format": "HEVC", "Width": "1920", "Height": "1080"},
            {"@type": "Audio", "@typeorder": "1", "Format_Commercial_IfAny": "Dolby Digital",
             "Channels": "6"},
            {"@type": "Audio", "@typeorder": "2", "Format": "AAC", "Channels": "2",
             "Title": ["Stereo", "Commentary"]},
            {"@type": "Unknown", "Format": "?"},
        ],
    }
}


def test_parse_info_parameters_stops_at_unknown_header():
    parameters = parse_info_parameters(INFO_PARAMETERS)
    assert parameters == [
        Parameter(0, "General", "Count"),
        Parameter(1, "General", "Format"),
        Parameter(2, "Video", "Width"),
        Parameter(3, "Video", "Height"),
    ]


def test_parse_tracks_numbers_instances_per_kind():
    maps = parse_tracks(DOCUMENT)
    assert [(m.stream, m.num) for m in maps] == [
        (StreamKind.GENERAL, 0),
        (StreamKind.VIDEO, 0),
        (StreamKind.AUDIO, 0),
        (StreamKind.AUDIO, 1),
    ]


def test_parse_tracks_flattens_and_normalizes():
    general, _, first_audio, second_audio = parse_tracks(DOCUMENT)
    assert "@type" not in general.property_map
    assert general.property_map["ErrorDetectionType"] == "Per level 1"
    assert general.property_map["Duration"] == "5280"
    assert first_audio.property_map["Format_Commercial"] == "Dolby Digital"
    assert first_audio.property_map["Channel(s)"] == "6"
    assert second_audio.property_map["Title"] == "Stereo / Commentary"


def test_media_path_fills_general_complete_name():
    general = parse_tracks(DOCUMENT)[0]
    assert general.property_map["CompleteName"] == "/m/a.mkv"

    selected = select_properties(parse_tracks(DOCUMENT), [
        StreamProperty(StreamKind.GENERAL, "CompleteName"),
        StreamProperty(StreamKind.GENERAL, "Format"),
    ])
    assert selected[0].property_map == {"CompleteName": "/m/a.mkv", "Format": "Matroska"}

    # Only the General track carries the path
    assert all("CompleteName" not in m.property_map for m in parse_tracks(DOCUMENT)[1:])


def test_parse_tracks_handles_single_track_object():
    maps = parse_tracks({"media": {"track": {"@type": "General", "Format": "MPEG-4"}}})
    assert len(maps) == 1
    assert parse_tracks({}) == []


def test_count_streams_covers_every_real_kind():
    counts = count_streams(parse_tracks(DOCUMENT))
    assert set(counts) == set(StreamKind.real_kinds())
    assert counts[StreamKind.AUDIO].count == 2
    assert counts[StreamKind.MENU].count == 0


def test_select_properties():
    maps = parse_tracks(DOCUMENT)
    selected = select_properties(maps, [
        StreamProperty(StreamKind.VIDEO, "Width"),
        StreamProperty(StreamKind.AUDIO, "Channel(s)"),
        StreamProperty(StreamKind.AUDIO, "Missing"),
    ])
    assert [(m.stream, m.property_map) for m in selected] == [
        (StreamKind.VIDEO, {"Width": "1920"}),
        (StreamKind.AUDIO, {"Channel(s)": "6"}),
        (StreamKind.AUDIO, {"Channel(s)": "2"}),
    ]
    assert select_properties(maps, None) is maps


def make_backend(tmp_path, executable):
    settings = QSettings(str(tmp_path / "config.ini"), QSettings.IniFormat)
    return MediaInfoCliBackend(ConfigStore(settings), executable=executable)


def test_missing_executable_raises_backend_error(tmp_path):
    backend = make_backend(tmp_path, str(tmp_path / "no-such-mediainfo"))
    with pytest.raises(BackendError, match="not found"):
        backend.get_about()


def test_non_zero_exit_raises_backend_error(tmp_path):
    script = tmp_path / "mediainfo"
    script.write_text("#!/bin/sh\necho 'broken file' >&2\nexit 1\n")
    script.chmod(0o755)
    backend = make_backend(tmp_path, str(script))
    with pytest.raises(BackendError, match="broken file"):
        backend.get_stream_count_map("/m/a.mkv")


def test_about_uses_last_version_line(tmp_path):
    script = tmp_path / "mediainfo"
    script.write_text("#!/bin/sh\necho 'MediaInfo Command line,'\necho 'MediaInfoLib - v24.01'\n")
    script.chmod(0o755)
    about = make_backend(tmp_path, str(script)).get_about()
    assert about.backend_version == "MediaInfoLib - v24.01"
    assert about.app_version
