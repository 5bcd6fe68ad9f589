"""
Backend — Media Inspection Interface

Defines the request/response surface the session talks to, plus the
adapter for the `mediainfo` command-line tool.

All methods are synchronous and may block; BackendClient runs them on
RequestPool workers. Every failure is raised as BackendError with a
human-readable message.

Usage:
    backend = MediaInfoCliBackend(ConfigStore())
    counts = backend.get_stream_count_map("/tmp/clip.mkv")
"""

import json
import shutil
import subprocess
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional

from core.config import AppConfig, ConfigStore, active_file_extensions
from core.gio_bridge import file_resolver
from core.streams import StreamCount, StreamKind, StreamProperty, StreamPropertyMap

APP_NAME = "MediaLens"
APP_VERSION = "0.5.0"


class BackendError(Exception):
    """A backend call failed. str(error) is shown to the user."""


@dataclass(frozen=True)
class About:
    app_version: str
    backend_version: str


@dataclass(frozen=True)
class Parameter:
    id: int
    stream: str
    property: str


class MediaBackend(ABC):
    """The operations the session consumes."""

    @abstractmethod
    def get_about(self) -> About: ...

    @abstractmethod
    def get_config(self) -> AppConfig: ...

    @abstractmethod
    def set_config(self, config: AppConfig) -> AppConfig: ...

    @abstractmethod
    def get_files(self, paths: List[str]) -> List[str]: ...

    @abstractmethod
    def get_parameters(self) -> List[Parameter]: ...

    @abstractmethod
    def get_stream_count_map(self, file: str) -> Dict[StreamKind, StreamCount]: ...

    @abstractmethod
    def get_properties_map(self, file: str,
                           properties: Optional[List[StreamProperty]]) -> List[StreamPropertyMap]: ...

    @abstractmethod
    def write_text_file(self, path: str, text: str) -> None: ...


# =============================================================================
# MEDIAINFO OUTPUT PARSING
# =============================================================================

def parse_info_parameters(text: str) -> List[Parameter]:
    """
    Parse `mediainfo --Info-Parameters` output.

    Blocks are a stream kind header followed by "Name : description" lines,
    separated by blank lines. An unknown header stops parsing.
    """
    parameters: List[Parameter] = []
    expect_header = True
    kind = StreamKind.GENERAL
    for raw_line in text.splitlines():
        line = raw_line.strip()
        if expect_header:
            if not line:
                continue
            kind = StreamKind.parse(line)
            if kind is StreamKind.MAX:
                print(f"[MediaInfoCliBackend] Unexpected stream header {line!r}")
                break
            expect_header = False
        elif not line:
            expect_header = True
        else:
            name = line.split(":", 1)[0].strip()
            if name:
                parameters.append(Parameter(len(parameters), kind.label, name))
    return parameters


def _flatten(track: dict) -> Dict[str, str]:
    result: Dict[str, str] = {}
    for key, value in track.items():
        if key.startswith("@"):
            continue
        if isinstance(value, dict):
            # "extra" holds format-specific fields
            result.update(_flatten(value))
        elif isinstance(value, list):
            result[key] = " / ".join(str(v) for v in value)
        else:
            result[key] = str(value)
    return result


def parse_tracks(document: dict) -> List[StreamPropertyMap]:
    """
    Convert `mediainfo --Output=JSON` into StreamPropertyMaps.
    Instance numbers follow the order of appearance per kind. The media
    path ("@ref") becomes the General CompleteName.
    """
    media = document.get("media") or {}
    tracks = media.get("track") or []
    if isinstance(tracks, dict):
        tracks = [tracks]
    path = media.get("@ref")

    counters: Dict[StreamKind, int] = {}
    maps: List[StreamPropertyMap] = []
    for track in tracks:
        kind = StreamKind.parse(track.get("@type", ""))
        if kind is StreamKind.MAX:
            continue
        num = counters.get(kind, 0)
        counters[kind] = num + 1
        properties = _normalize(_flatten(track))
        if kind is StreamKind.GENERAL and path:
            properties.setdefault("CompleteName", str(path))
        maps.append(StreamPropertyMap(kind, num, properties))
    return maps


# JSON field names that differ from the MediaInfo parameter names
_JSON_ALIASES = {
    "Channels": "Channel(s)",
    "Format_Commercial_IfAny": "Format_Commercial",
}

# Durations are reported in seconds by the JSON output, milliseconds elsewhere
_SECONDS_FIELDS = ("Duration",)


def _normalize(properties: Dict[str, str]) -> Dict[str, str]:
    for alias, name in _JSON_ALIASES.items():
        if alias in properties:
            properties.setdefault(name, properties[alias])
    for name in _SECONDS_FIELDS:
        value = properties.get(name)
        if value and "." in value:
            try:
                properties[name] = str(round(float(value) * 1000))
            except ValueError:
                pass
    return properties


def count_streams(maps: Iterable[StreamPropertyMap]) -> Dict[StreamKind, StreamCount]:
    counts = {kind: 0 for kind in StreamKind.real_kinds()}
    for item in maps:
        counts[item.stream] = counts.get(item.stream, 0) + 1
    return {kind: StreamCount(kind, count) for kind, count in counts.items()}


def select_properties(maps: List[StreamPropertyMap],
                      properties: Optional[List[StreamProperty]]) -> List[StreamPropertyMap]:
    """Restrict maps to the requested (stream, property) pairs. None = all."""
    if properties is None:
        return maps
    wanted: Dict[StreamKind, List[str]] = {}
    for request in properties:
        wanted.setdefault(request.stream, []).append(request.property)

    selected = []
    for item in maps:
        names = wanted.get(item.stream)
        if not names:
            continue
        selected.append(StreamPropertyMap(
            item.stream,
            item.num,
            {name: item.property_map[name] for name in names if name in item.property_map},
        ))
    return selected


# =============================================================================
# MEDIAINFO CLI ADAPTER
# =============================================================================

class MediaInfoCliBackend(MediaBackend):
    """
    Backend built on the `mediainfo` executable.

    Configuration is delegated to ConfigStore (QSettings), directory
    expansion and file writing to the Gio file resolver.
    """

    def __init__(self, config_store: ConfigStore, executable: str | None = None):
        self._config_store = config_store
        self._config = config_store.load()
        self._executable = executable or shutil.which("mediainfo") or "mediainfo"

    # -------------------------------------------------------------------------
    # PUBLIC API
    # -------------------------------------------------------------------------

    def get_about(self) -> About:
        output = self._run("--Version")
        lines = [line.strip() for line in output.splitlines() if line.strip()]
        return About(APP_VERSION, lines[-1] if lines else "")

    def get_config(self) -> AppConfig:
        return self._config.copy()

    def set_config(self, config: AppConfig) -> AppConfig:
        self._config = self._config_store.save(config)
        return self._config.copy()

    def get_files(self, paths: List[str]) -> List[str]:
        try:
            return file_resolver.resolve_files(paths, active_file_extensions(self._config))
        except file_resolver.ResolveError as e:
            raise BackendError(str(e)) from e

    def get_parameters(self) -> List[Parameter]:
        return parse_info_parameters(self._run("--Info-Parameters"))

    def get_stream_count_map(self, file: str) -> Dict[StreamKind, StreamCount]:
        return count_streams(self._inspect(file))

    def get_properties_map(self, file: str,
                           properties: Optional[List[StreamProperty]]) -> List[StreamPropertyMap]:
        return select_properties(self._inspect(file, full=properties is None), properties)

    def write_text_file(self, path: str, text: str) -> None:
        try:
            file_resolver.write_text_file(path, text)
        except file_resolver.ResolveError as e:
            raise BackendError(str(e)) from e

    # -------------------------------------------------------------------------
    # INTERNAL
    # -------------------------------------------------------------------------

    def _inspect(self, file: str, full: bool = False) -> List[StreamPropertyMap]:
        args = ["--Output=JSON"]
        if full:
            args.append("--Full")
        output = self._run(*args, file)
        try:
            document = json.loads(output)
        except json.JSONDecodeError as e:
            raise BackendError(f"Failed to parse media information of {file}: {e}") from e
        maps = parse_tracks(document)
        if not maps:
            raise BackendError(f"No media information found for {file}.")
        return maps

    def _run(self, *args: str) -> str:
        command = [self._executable, *args]
        try:
            completed = subprocess.run(command, capture_output=True, text=True, check=False)
        except FileNotFoundError as e:
            raise BackendError(f"MediaInfo executable not found: {self._executable}") from e
        except OSError as e:
            raise BackendError(f"Failed to run MediaInfo: {e}") from e

        if completed.returncode != 0:
            message = (completed.stderr or completed.stdout).strip()
            print(f"[MediaInfoCliBackend] {' '.join(command)} exited with {completed.returncode}")
            raise BackendError(message or f"MediaInfo exited with code {completed.returncode}.")
        return completed.stdout
