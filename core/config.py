"""
Config — Application Configuration Model

Features:
- AppConfig dataclass (append-on-drop, display mode, directory mode, extensions)
- QSettings persistence via ConfigStore
- Extension list normalization and file dialog filters

Usage:
    store = ConfigStore()
    config = store.load()
    config.directory_mode = DirectoryMode.VIDEO
    store.save(config)
"""

import re
from dataclasses import dataclass, field, replace
from enum import IntEnum
from typing import Dict, List

from PySide6.QtCore import QObject, QSettings, Signal


class DisplayMode(IntEnum):
    AUTO = 0
    LIGHT = 1
    DARK = 2


class DirectoryMode(IntEnum):
    """Which files a directory expands to."""
    ALL = 0
    AUDIO = 1
    IMAGE = 2
    VIDEO = 3


DEFAULT_AUDIO_EXTENSIONS = ["mp3", "aac", "flac", "wav", "ogg", "m4a", "mka", "ape", "ac3", "dts"]
DEFAULT_IMAGE_EXTENSIONS = ["jpg", "jpeg", "png", "gif", "bmp", "tif"]
DEFAULT_VIDEO_EXTENSIONS = ["mkv", "mp4", "m2ts", "ts", "avi", "mov", "wmv", "flv", "webm"]

_EXTENSION_SPLIT_RE = re.compile(r"[, .]+")


@dataclass
class FileExtensions:
    audio: List[str] = field(default_factory=lambda: list(DEFAULT_AUDIO_EXTENSIONS))
    image: List[str] = field(default_factory=lambda: list(DEFAULT_IMAGE_EXTENSIONS))
    video: List[str] = field(default_factory=lambda: list(DEFAULT_VIDEO_EXTENSIONS))


@dataclass
class AppConfig:
    append_on_file_drop: bool = True
    display_mode: DisplayMode = DisplayMode.AUTO
    directory_mode: DirectoryMode = DirectoryMode.ALL
    file_extensions: FileExtensions = field(default_factory=FileExtensions)

    def copy(self) -> "AppConfig":
        return replace(
            self,
            file_extensions=FileExtensions(
                audio=list(self.file_extensions.audio),
                image=list(self.file_extensions.image),
                video=list(self.file_extensions.video),
            ),
        )


# =============================================================================
# HELPERS
# =============================================================================

def parse_extensions(text) -> List[str]:
    """
    Normalize a free-text extension list ("mp4, .mkv  avi") or a list.
    Lowercase, no dots, no empties, first occurrence wins.
    """
    if isinstance(text, (list, tuple)):
        text = ",".join(str(item) for item in text)
    result: List[str] = []
    for part in _EXTENSION_SPLIT_RE.split(str(text or "")):
        part = part.strip().lower()
        if part and part not in result:
            result.append(part)
    return result


def normalize_config(config: AppConfig) -> AppConfig:
    normalized = config.copy()
    normalized.display_mode = DisplayMode(int(config.display_mode))
    normalized.directory_mode = DirectoryMode(int(config.directory_mode))
    normalized.file_extensions.audio = parse_extensions(config.file_extensions.audio)
    normalized.file_extensions.image = parse_extensions(config.file_extensions.image)
    normalized.file_extensions.video = parse_extensions(config.file_extensions.video)
    return normalized


def active_file_extensions(config: AppConfig) -> List[str]:
    """Extensions a directory expands to. Empty list means every file."""
    mode = config.directory_mode
    if mode == DirectoryMode.AUDIO:
        return list(config.file_extensions.audio)
    if mode == DirectoryMode.IMAGE:
        return list(config.file_extensions.image)
    if mode == DirectoryMode.VIDEO:
        return list(config.file_extensions.video)
    return []


def dialog_filters(config: AppConfig) -> List[str]:
    """Qt name filters for the file picker."""
    groups = [
        ("Video", config.file_extensions.video),
        ("Image", config.file_extensions.image),
        ("Audio", config.file_extensions.audio),
    ]
    everything = [ext for _, exts in groups for ext in exts]
    filters = [f"Media files ({' '.join('*.' + ext for ext in everything)})"]
    for name, exts in groups:
        if exts:
            filters.append(f"{name} ({' '.join('*.' + ext for ext in exts)})")
    filters.append("All files (*)")
    return filters


# =============================================================================
# PERSISTENCE
# =============================================================================

class ConfigStore(QObject):
    """
    Persists AppConfig in QSettings.

    Signals:
        configChanged(object): emitted with the saved AppConfig
    """

    configChanged = Signal(object)

    def __init__(self, settings: QSettings | None = None, parent=None):
        super().__init__(parent)
        self._settings = settings or QSettings("MediaLens", "Config")

    def load(self) -> AppConfig:
        """Load the configuration. Missing keys fall back to defaults."""
        defaults = AppConfig()
        s = self._settings

        s.beginGroup("General")
        append = s.value("appendOnFileDrop", defaults.append_on_file_drop)
        display = s.value("displayMode", int(defaults.display_mode))
        directory = s.value("directoryMode", int(defaults.directory_mode))
        s.endGroup()

        s.beginGroup("FileExtensions")
        extensions: Dict[str, List[str]] = {}
        for name in ("audio", "image", "video"):
            stored = s.value(name)
            extensions[name] = parse_extensions(stored) if stored is not None else list(getattr(defaults.file_extensions, name))
        s.endGroup()

        config = AppConfig(
            append_on_file_drop=_to_bool(append),
            display_mode=_to_enum(DisplayMode, display, defaults.display_mode),
            directory_mode=_to_enum(DirectoryMode, directory, defaults.directory_mode),
            file_extensions=FileExtensions(**extensions),
        )
        print(f"[ConfigStore] Loaded config from {s.fileName()}")
        return config

    def save(self, config: AppConfig) -> AppConfig:
        """Normalize, persist and return the stored configuration."""
        config = normalize_config(config)
        s = self._settings

        s.beginGroup("General")
        s.setValue("appendOnFileDrop", config.append_on_file_drop)
        s.setValue("displayMode", int(config.display_mode))
        s.setValue("directoryMode", int(config.directory_mode))
        s.endGroup()

        s.beginGroup("FileExtensions")
        s.setValue("audio", ",".join(config.file_extensions.audio))
        s.setValue("image", ",".join(config.file_extensions.image))
        s.setValue("video", ",".join(config.file_extensions.video))
        s.endGroup()

        s.sync()
        print(f"[ConfigStore] Saved config to {s.fileName()}")
        self.configChanged.emit(config)
        return config


def _to_bool(value) -> bool:
    # QSettings INI backends hand booleans back as strings
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "yes", "on")
    return bool(value)


def _to_enum(enum_cls, value, default):
    try:
        return enum_cls(int(value))
    except (TypeError, ValueError):
        return default
