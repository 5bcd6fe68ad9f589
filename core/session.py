"""
Session — The Application Store

Owns everything the views read: the ordered media file set, the property
cache, the tab workspace, the configuration, the About info and the
parameter catalog. Views never mutate this state directly; they call the
entry points below.

Every backend failure is turned into exactly one notification
(notificationRaised) and never escapes to the caller.

Usage:
    session = Session(BackendClient(MediaInfoCliBackend(ConfigStore())))
    session.load_config()
    session.add_paths(["/media/movies"], append=True)
"""

import json
from enum import IntEnum
from typing import Iterable, List, Optional, Sequence, Tuple

from PySide6.QtCore import QObject, Signal, Slot

from core.config import AppConfig, normalize_config
from core.property_cache import PropertyCache
from core.streams import StreamPropertyMap
from core.workspace import Workspace


class Severity(IntEnum):
    INFO = 0
    ERROR = 1


class Session(QObject):
    """
    Signals:
        filesChanged(): the media file set was replaced
        configChanged(object): the in-memory AppConfig changed
        aboutChanged(object): About info arrived
        parametersChanged(): the parameter catalog arrived
        notificationRaised(str, int): (title, Severity)
    """

    filesChanged = Signal()
    configChanged = Signal(object)
    aboutChanged = Signal(object)
    parametersChanged = Signal()
    notificationRaised = Signal(str, int)

    def __init__(self, client, parent=None):
        super().__init__(parent)
        self._client = client
        self.cache = PropertyCache(client, self)
        self.workspace = Workspace(self)

        self._files: Tuple[str, ...] = ()
        self._config = AppConfig()
        self._saved_config = AppConfig()
        self._about = None
        self._parameters: Tuple = ()

        self.cache.streamCountsChanged.connect(self._on_cache_changed)
        self.cache.commonPropertiesChanged.connect(self._on_cache_changed)
        self.cache.errorOccurred.connect(self._on_cache_error)

    # -------------------------------------------------------------------------
    # STATE
    # -------------------------------------------------------------------------

    @property
    def files(self) -> Tuple[str, ...]:
        return self._files

    @property
    def config(self) -> AppConfig:
        return self._config

    @property
    def config_dirty(self) -> bool:
        """True when the in-memory config differs from the saved one."""
        return normalize_config(self._config) != normalize_config(self._saved_config)

    @property
    def about(self):
        return self._about

    @property
    def parameters(self) -> Tuple:
        return self._parameters

    @property
    def detailed_files(self) -> List[str]:
        return self.workspace.detailed_files

    # -------------------------------------------------------------------------
    # MEDIA FILES
    # -------------------------------------------------------------------------

    def add_paths(self, paths: Sequence[str], append: bool = True) -> None:
        """Resolve files/directories through the backend, then merge or replace."""
        paths = [p for p in paths if p]
        if not paths:
            return
        print(f"[Session] Resolving {len(paths)} path(s), append={append}")
        self._client.get_files(
            paths,
            on_result=lambda files: self._merge_files(files, append),
            on_error=lambda message: self.notify(message, Severity.ERROR),
        )

    def add_dropped_paths(self, paths: Sequence[str]) -> None:
        self.add_paths(paths, self._config.append_on_file_drop)

    def delete_file(self, file: str) -> None:
        if file not in self._files:
            return
        self._files = tuple(f for f in self._files if f != file)
        self.cache.delete(file)
        self.workspace.remove_file(file)
        self.filesChanged.emit()

    @Slot()
    def clear_files(self) -> None:
        self._files = ()
        self.cache.clear()
        self.workspace.clear_details()
        self.filesChanged.emit()

    def _merge_files(self, files: Iterable[str], append: bool) -> None:
        merged = list(self._files) if append else []
        seen = set(merged)
        for file in files:
            if file not in seen:
                seen.add(file)
                merged.append(file)

        if not append:
            kept = set(merged)
            self.cache.retain(kept)
            for file in self.workspace.detailed_files:
                if file not in kept:
                    self.workspace.remove_file(file)

        self._files = tuple(merged)
        print(f"[Session] {len(self._files)} file(s) in session")
        self.filesChanged.emit()
        self.refresh()

    # -------------------------------------------------------------------------
    # CACHE POPULATION
    # -------------------------------------------------------------------------

    def refresh(self) -> None:
        """Lazy population pass over every file (no-op for loading/present slots)."""
        for file in self._files:
            self.cache.ensure_stream_counts(file)
            if self.cache.stream_counts(file) is not None:
                self.cache.ensure_common_properties(file)
        for file in self.workspace.detailed_files:
            self.cache.ensure_all_properties(file)

    def open_details(self, file: str) -> None:
        # The view must see LOADING when it is created
        self.cache.ensure_all_properties(file)
        self.workspace.open_details(file)

    def retry(self, file: str) -> None:
        """Manual retry: abandon in-flight requests of the file and reissue them."""
        self.cache.retry(file)
        self.cache.ensure_common_properties(file, force=True)
        if file in self.workspace.detailed_files:
            self.cache.ensure_all_properties(file)

    def _on_cache_changed(self, file: str) -> None:
        self.refresh()

    def _on_cache_error(self, message: str) -> None:
        self.notify(message, Severity.ERROR)

    # -------------------------------------------------------------------------
    # CONFIGURATION
    # -------------------------------------------------------------------------

    def load_config(self) -> None:
        self._client.get_config(
            on_result=self._apply_saved_config,
            on_error=lambda message: self.notify(message, Severity.ERROR),
        )

    def update_config(self, config: AppConfig) -> None:
        """Change the in-memory config without persisting it."""
        self._config = config.copy()
        self.configChanged.emit(self._config)

    def save_config(self, config: Optional[AppConfig] = None) -> None:
        if config is not None:
            self.update_config(config)
        self._client.set_config(
            self._config.copy(),
            on_result=self._on_config_saved,
            on_error=lambda message: self.notify(message, Severity.ERROR),
        )

    def _apply_saved_config(self, config: AppConfig) -> None:
        self._saved_config = config.copy()
        self._config = config.copy()
        self.configChanged.emit(self._config)

    def _on_config_saved(self, config: AppConfig) -> None:
        self._apply_saved_config(config)
        self.notify("Settings saved.", Severity.INFO)

    # -------------------------------------------------------------------------
    # ABOUT / PARAMETERS
    # -------------------------------------------------------------------------

    def load_about(self, force: bool = False) -> None:
        if self._about is not None and not force:
            return
        self._client.get_about(
            on_result=self._on_about,
            on_error=lambda message: self.notify(message, Severity.ERROR),
        )

    def load_parameters(self, force: bool = False) -> None:
        if self._parameters and not force:
            return
        self._client.get_parameters(
            on_result=self._on_parameters,
            on_error=lambda message: self.notify(message, Severity.ERROR),
        )

    def _on_about(self, about) -> None:
        self._about = about
        self.aboutChanged.emit(about)

    def _on_parameters(self, parameters) -> None:
        self._parameters = tuple(parameters)
        print(f"[Session] Loaded {len(self._parameters)} parameters")
        self.parametersChanged.emit()

    # -------------------------------------------------------------------------
    # JSON EXPORT
    # -------------------------------------------------------------------------

    @staticmethod
    def export_json(maps: Optional[Sequence[StreamPropertyMap]]) -> str:
        """Pretty JSON (2-space indent) of property maps."""
        return json.dumps([m.to_json() for m in (maps or ())], indent=2, ensure_ascii=False)

    def write_json(self, path: str, text: str) -> None:
        self._client.write_text_file(
            path,
            text,
            on_result=lambda _: self.notify(f"Json code is saved to {path}.", Severity.INFO),
            on_error=lambda message: self.notify(
                f"Failed to save to {path} with error: {message}.", Severity.ERROR
            ),
        )

    # -------------------------------------------------------------------------
    # NOTIFICATIONS
    # -------------------------------------------------------------------------

    def notify(self, title: str, severity: Severity = Severity.INFO) -> None:
        print(f"[Session] {severity.name}: {title}")
        self.notificationRaised.emit(title, int(severity))
