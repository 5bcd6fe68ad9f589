#!/usr/bin/env python3
"""
Tests for the unit-aware formatters.

Tests:
1. Size / bit rate / sampling rate thresholds and trimming
2. Duration and Time (days, padding, missing input)
3. Derived resolution
4. Total formatters: bad input gives ""

Usage:
    pytest tests/test_formatting.py -v
"""

import os
import sys

# Add project root to path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from core.formatting import (
    format_bit_rate,
    format_duration,
    format_fps,
    format_resolution,
    format_sampling_rate,
    format_size,
    format_stream_counts,
    format_time,
    shrink_file_name,
    trim_fraction_zeros,
)
from core.streams import StreamKind


def test_format_size_thresholds():
    assert format_size("1073741824") == "1GB"
    assert format_size("1536") == "1.5KB"
    assert format_size("512") == "512B"
    assert format_size("1048576") == "1MB"
    assert format_size("1024") == "1KB"


def test_format_bit_rate_thresholds():
    assert format_bit_rate("1500000") == "1.5Mbps"
    assert format_bit_rate("1500") == "1.5Kbps"
    assert format_bit_rate("999") == "999bps"
    assert format_bit_rate("1000") == "1Kbps"


def test_format_sampling_rate():
    assert format_sampling_rate("48000") == "48kHz"
    assert format_sampling_rate("44100") == "44.1kHz"


def test_format_duration_is_seconds_without_unit():
    assert format_duration("90061234") == "90061.234"
    assert format_duration("5000") == "5"
    assert format_duration("1500") == "1.5"


def test_format_time_with_days():
    assert format_time({"Duration": "90061234"}) == "1d 01:01:01.234"


def test_format_time_pads_fields():
    assert format_time({"Duration": "5005"}) == "00:00:05.005"
    assert format_time({"General:Duration": "3600000"}) == "01:00:00.000"


def test_format_resolution():
    assert format_resolution({"Width": "1920", "Height": "1080"}) == "1920x1080"
    assert format_resolution({"Width": "1920"}) == ""
    assert format_resolution({"Height": "1080"}) == ""
    assert format_resolution({"Video:Width": "720", "Video:Height": "576"}) == "720x576"


def test_formatters_are_total():
    for formatter in (format_size, format_bit_rate, format_sampling_rate, format_duration, format_fps):
        assert formatter(None) == ""
        assert formatter("") == ""
    assert format_size("abc") == ""
    assert format_fps("abc") == ""
    assert format_fps("23.976 (24000/1001)") == ""
    assert format_time({}) == ""
    assert format_time({"Duration": "n/a"}) == ""


def test_trim_fraction_zeros():
    assert trim_fraction_zeros("1.500") == "1.5"
    assert trim_fraction_zeros("2.000") == "2"
    assert trim_fraction_zeros("100") == "100"
    assert format_fps("23.976") == "23.976"
    assert format_fps("25.000") == "25"


def test_format_stream_counts_skips_zero():
    text = format_stream_counts({StreamKind.AUDIO: 2, StreamKind.VIDEO: 1, StreamKind.TEXT: 0})
    assert text == "Video: 1, Audio: 2"
    assert format_stream_counts({}) == ""


def test_shrink_file_name_keeps_tail():
    name = "/very/long/path/to/some/movie-file-name.mkv"
    shrunk = shrink_file_name(name, 20)
    assert len(shrunk) == 20
    assert shrunk.startswith("...")
    assert shrunk.endswith("name.mkv")
    assert shrink_file_name("short.mkv", 20) == "short.mkv"
