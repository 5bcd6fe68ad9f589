#!/usr/bin/env python3
"""
Tests for the configuration model and its QSettings persistence.

Usage:
    pytest tests/test_config.py -v
"""

import os
import sys

# Add project root to path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from PySide6.QtCore import QSettings

from core.config import (
    DEFAULT_VIDEO_EXTENSIONS,
    AppConfig,
    ConfigStore,
    DirectoryMode,
    DisplayMode,
    FileExtensions,
    active_file_extensions,
    dialog_filters,
    normalize_config,
    parse_extensions,
)


def make_store(tmp_path):
    settings = QSettings(str(tmp_path / "config.ini"), QSettings.IniFormat)
    return ConfigStore(settings)


def test_parse_extensions_normalizes():
    assert parse_extensions("MP4, .mkv  avi,,mp4") == ["mp4", "mkv", "avi"]
    assert parse_extensions(["FLAC", ".Wav"]) == ["flac", "wav"]
    assert parse_extensions("") == []
    assert parse_extensions(None) == []


def test_defaults_when_nothing_is_stored(tmp_path):
    config = make_store(tmp_path).load()
    assert config.append_on_file_drop is True
    assert config.display_mode is DisplayMode.AUTO
    assert config.directory_mode is DirectoryMode.ALL
    assert config.file_extensions.video == DEFAULT_VIDEO_EXTENSIONS


def test_save_and_load_round_trip(tmp_path):
    store = make_store(tmp_path)
    saved = []
    store.configChanged.connect(saved.append)

    config = AppConfig(
        append_on_file_drop=False,
        display_mode=DisplayMode.DARK,
        directory_mode=DirectoryMode.AUDIO,
        file_extensions=FileExtensions(audio=["FLAC", ".mp3"], image=[], video=["mkv"]),
    )
    result = store.save(config)
    assert result.file_extensions.audio == ["flac", "mp3"]
    assert saved == [result]

    loaded = make_store(tmp_path).load()
    assert loaded == result
    assert loaded.file_extensions.image == []


def test_copy_is_deep():
    config = AppConfig()
    clone = config.copy()
    clone.file_extensions.audio.append("xyz")
    assert "xyz" not in config.file_extensions.audio


def test_normalize_config():
    config = AppConfig(file_extensions=FileExtensions(audio=["MP3", "mp3"]))
    assert normalize_config(config).file_extensions.audio == ["mp3"]
    assert config.file_extensions.audio == ["MP3", "mp3"]


def test_active_file_extensions_by_directory_mode():
    config = AppConfig(file_extensions=FileExtensions(audio=["flac"], image=["png"], video=["mkv"]))
    assert active_file_extensions(config) == []
    config.directory_mode = DirectoryMode.IMAGE
    assert active_file_extensions(config) == ["png"]
    config.directory_mode = DirectoryMode.VIDEO
    assert active_file_extensions(config) == ["mkv"]


def test_dialog_filters():
    config = AppConfig(file_extensions=FileExtensions(audio=["flac"], image=[], video=["mkv", "mp4"]))
    filters = dialog_filters(config)
    assert filters[0] == "Media files (*.mkv *.mp4 *.flac)"
    assert "Video (*.mkv *.mp4)" in filters
    assert "Audio (*.flac)" in filters
    assert not any(f.startswith("Image") for f in filters)
    assert filters[-1] == "All files (*)"
