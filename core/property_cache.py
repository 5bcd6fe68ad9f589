"""
PropertyCache — Lazy Per-File Metadata Store

Each media file owns three slots, filled independently and at most once:

    STREAM_COUNTS       StreamKind -> count table
    COMMON_PROPERTIES   the stored properties the summary views display
    ALL_PROPERTIES      every property of every instance (details, JSON)

Slot lifecycle: ABSENT -> LOADING -> PRESENT. A slot is marked LOADING
before its request is issued, so repeated ensure_* calls while a request
is in flight are no-ops. PRESENT is permanent until the file is deleted.
A failed request puts the slot back to ABSENT.

Every mutation swaps in a new dict (copy-on-write). Readers may hold a
snapshot without it changing under them, and view memoization can key on
object identity.

Queued requests of a dropped file are cancelled through the client.
Responses are tagged with the file's generation token. delete(), clear()
and retry() renew or drop tokens, so late responses are discarded.
"""

import itertools
from enum import Enum
from typing import Dict, FrozenSet, List, Mapping, Optional, Tuple

from PySide6.QtCore import QObject, Signal

from core.streams import StreamKind, StreamPropertyMap, common_property_requests


class Slot(Enum):
    STREAM_COUNTS = "stream_counts"
    COMMON_PROPERTIES = "common_properties"
    ALL_PROPERTIES = "all_properties"


class SlotState(Enum):
    ABSENT = 0
    LOADING = 1
    PRESENT = 2


StreamCounts = Mapping[StreamKind, int]
PropertyMaps = Tuple[StreamPropertyMap, ...]


class PropertyCache(QObject):
    """
    Signals:
        streamCountsChanged(str): stream counts of a file became PRESENT
        commonPropertiesChanged(str): common properties became PRESENT
        allPropertiesChanged(str): all properties became PRESENT
        errorOccurred(str): a request failed (message for the user)
    """

    streamCountsChanged = Signal(str)
    commonPropertiesChanged = Signal(str)
    allPropertiesChanged = Signal(str)
    errorOccurred = Signal(str)

    def __init__(self, client, parent=None):
        super().__init__(parent)
        self._client = client

        self._present: Dict[Slot, Dict[str, object]] = {slot: {} for slot in Slot}
        self._loading: Dict[Slot, FrozenSet[str]] = {slot: frozenset() for slot in Slot}

        self._tokens: Dict[str, int] = {}
        self._token_counter = itertools.count(1)

        # (slot, file) -> id of the in-flight backend request
        self._requests: Dict[Tuple[Slot, str], str] = {}

    # -------------------------------------------------------------------------
    # SNAPSHOTS
    # -------------------------------------------------------------------------

    @property
    def stream_counts_map(self) -> Mapping[str, StreamCounts]:
        return self._present[Slot.STREAM_COUNTS]

    @property
    def common_properties_map(self) -> Mapping[str, PropertyMaps]:
        return self._present[Slot.COMMON_PROPERTIES]

    @property
    def all_properties_map(self) -> Mapping[str, PropertyMaps]:
        return self._present[Slot.ALL_PROPERTIES]

    def stream_counts(self, file: str) -> Optional[StreamCounts]:
        return self._present[Slot.STREAM_COUNTS].get(file)

    def common_properties(self, file: str) -> Optional[PropertyMaps]:
        return self._present[Slot.COMMON_PROPERTIES].get(file)

    def all_properties(self, file: str) -> Optional[PropertyMaps]:
        return self._present[Slot.ALL_PROPERTIES].get(file)

    def state(self, slot: Slot, file: str) -> SlotState:
        if file in self._present[slot]:
            return SlotState.PRESENT
        if file in self._loading[slot]:
            return SlotState.LOADING
        return SlotState.ABSENT

    def is_loading(self, file: str) -> bool:
        return any(file in self._loading[slot] for slot in Slot)

    # -------------------------------------------------------------------------
    # POPULATION
    # -------------------------------------------------------------------------

    def ensure_stream_counts(self, file: str) -> bool:
        """Request the stream count table. Returns True if a request was issued."""
        if self.state(Slot.STREAM_COUNTS, file) is not SlotState.ABSENT:
            return False

        token = self._begin(Slot.STREAM_COUNTS, file)
        request_id = self._client.get_stream_count_map(
            file,
            on_result=lambda result: self._on_stream_counts(file, token, result),
            on_error=lambda message: self._on_failure(Slot.STREAM_COUNTS, file, token, message),
        )
        self._requests[(Slot.STREAM_COUNTS, file)] = request_id
        return True

    def ensure_common_properties(self, file: str, force: bool = False) -> bool:
        """
        Request the stored common properties of every kind the file has.

        No-op until stream counts are PRESENT. With nothing to request, the
        slot is only marked PRESENT (empty) when force is set.
        """
        if self.state(Slot.COMMON_PROPERTIES, file) is not SlotState.ABSENT:
            return False
        counts = self.stream_counts(file)
        if counts is None:
            return False

        requests = common_property_requests(counts)
        if not requests:
            if force:
                self._store(Slot.COMMON_PROPERTIES, file, ())
                self.commonPropertiesChanged.emit(file)
            return False

        token = self._begin(Slot.COMMON_PROPERTIES, file)
        request_id = self._client.get_properties_map(
            file,
            requests,
            on_result=lambda result: self._on_properties(Slot.COMMON_PROPERTIES, file, token, result),
            on_error=lambda message: self._on_failure(Slot.COMMON_PROPERTIES, file, token, message),
        )
        self._requests[(Slot.COMMON_PROPERTIES, file)] = request_id
        return True

    def ensure_all_properties(self, file: str) -> bool:
        if self.state(Slot.ALL_PROPERTIES, file) is not SlotState.ABSENT:
            return False

        token = self._begin(Slot.ALL_PROPERTIES, file)
        request_id = self._client.get_properties_map(
            file,
            None,
            on_result=lambda result: self._on_properties(Slot.ALL_PROPERTIES, file, token, result),
            on_error=lambda message: self._on_failure(Slot.ALL_PROPERTIES, file, token, message),
        )
        self._requests[(Slot.ALL_PROPERTIES, file)] = request_id
        return True

    def retry(self, file: str) -> List[Slot]:
        """
        Abandon the file's in-flight requests and issue them again.
        Returns the slots that were reset.
        """
        reset = [slot for slot in Slot if file in self._loading[slot]]
        if reset:
            self._cancel([(slot, file) for slot in reset])
            self._loading = {
                slot: (loading - {file} if slot in reset else loading)
                for slot, loading in self._loading.items()
            }
            self._tokens = {**self._tokens, file: next(self._token_counter)}
            print(f"[PropertyCache] Retrying {file}: {', '.join(slot.value for slot in reset)}")

        self.ensure_stream_counts(file)
        self.ensure_common_properties(file)
        if Slot.ALL_PROPERTIES in reset:
            self.ensure_all_properties(file)
        return reset

    # -------------------------------------------------------------------------
    # REMOVAL
    # -------------------------------------------------------------------------

    def delete(self, file: str) -> None:
        """
        Drop every slot of the file. Its queued requests are cancelled and
        late responses for it are discarded.
        """
        self._cancel([(slot, file) for slot in Slot])
        self._present = {
            slot: {f: v for f, v in values.items() if f != file}
            for slot, values in self._present.items()
        }
        self._loading = {slot: loading - {file} for slot, loading in self._loading.items()}
        self._tokens = {f: t for f, t in self._tokens.items() if f != file}

    def clear(self) -> None:
        self._cancel(list(self._requests))
        self._present = {slot: {} for slot in Slot}
        self._loading = {slot: frozenset() for slot in Slot}
        self._tokens = {}

    def retain(self, files) -> None:
        """Delete every file not in files."""
        keep = set(files)
        for file in [f for f in self._known_files() if f not in keep]:
            self.delete(file)

    # -------------------------------------------------------------------------
    # INTERNAL
    # -------------------------------------------------------------------------

    def _known_files(self):
        known = set(self._tokens)
        for values in self._present.values():
            known.update(values)
        return known

    def _token(self, file: str) -> int:
        token = self._tokens.get(file)
        if token is None:
            token = next(self._token_counter)
            self._tokens = {**self._tokens, file: token}
        return token

    def _begin(self, slot: Slot, file: str) -> int:
        self._loading = {**self._loading, slot: self._loading[slot] | {file}}
        return self._token(file)

    def _is_current(self, slot: Slot, file: str, token: int) -> bool:
        if self._tokens.get(file) != token or file not in self._loading[slot]:
            print(f"[PropertyCache] Discarding stale {slot.value} response for {file}")
            return False
        return True

    def _store(self, slot: Slot, file: str, value) -> None:
        self._present = {**self._present, slot: {**self._present[slot], file: value}}
        self._loading = {**self._loading, slot: self._loading[slot] - {file}}
        self._requests.pop((slot, file), None)

    def _cancel(self, keys) -> None:
        ids = [self._requests.pop(key) for key in keys if key in self._requests]
        if ids:
            self._client.cancel(ids)

    def _on_stream_counts(self, file: str, token: int, result) -> None:
        if not self._is_current(Slot.STREAM_COUNTS, file, token):
            return
        counts = {}
        for kind, value in dict(result).items():
            # Accept both StreamCount records and bare integers
            counts[kind] = getattr(value, "count", value)
        self._store(Slot.STREAM_COUNTS, file, counts)
        self.streamCountsChanged.emit(file)

    def _on_properties(self, slot: Slot, file: str, token: int, result) -> None:
        if not self._is_current(slot, file, token):
            return
        self._store(slot, file, tuple(result))
        if slot is Slot.COMMON_PROPERTIES:
            self.commonPropertiesChanged.emit(file)
        else:
            self.allPropertiesChanged.emit(file)

    def _on_failure(self, slot: Slot, file: str, token: int, message: str) -> None:
        if not self._is_current(slot, file, token):
            return
        self._loading = {**self._loading, slot: self._loading[slot] - {file}}
        self._requests.pop((slot, file), None)
        print(f"[PropertyCache] {slot.value} failed for {file}: {message}")
        self.errorOccurred.emit(message)
