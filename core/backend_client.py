"""
BackendClient — Asynchronous Facade over MediaBackend

Every method schedules the matching backend call on the RequestPool and
returns a request id immediately. The continuation (on_result/on_error)
is invoked later on the main thread.

Usage:
    client = BackendClient(MediaInfoCliBackend(ConfigStore()))
    client.get_stream_count_map(path, on_result=store, on_error=report)
"""

import itertools
from typing import Callable, Dict, Iterable, List, Optional, Tuple

from PySide6.QtCore import QObject, Slot

from core.backend import MediaBackend
from core.request_pool import RequestPool
from core.streams import StreamProperty

ResultCallback = Callable[[object], None]
ErrorCallback = Callable[[str], None]

# Lower runs first
PRIORITY_USER = 0
PRIORITY_DETAILS = 10
PRIORITY_COUNTS = 20
PRIORITY_COMMON = 30


class BackendClient(QObject):
    """Maps request ids to continuations."""

    def __init__(self, backend: MediaBackend, pool: RequestPool | None = None, parent=None):
        super().__init__(parent)
        self._backend = backend
        self._pool = pool or RequestPool(parent=self)
        self._ids = itertools.count(1)
        self._pending: Dict[str, Tuple[Optional[ResultCallback], Optional[ErrorCallback]]] = {}

        self._pool.resultReady.connect(self._on_result)
        self._pool.errorOccurred.connect(self._on_error)

    @property
    def backend(self) -> MediaBackend:
        return self._backend

    def pending_count(self) -> int:
        return len(self._pending)

    def cancel(self, request_ids: Iterable[str]) -> None:
        """
        Forget the continuations of request_ids. Queued calls never run;
        a call already running finishes and its outcome is dropped.
        """
        ids = [r for r in request_ids if r in self._pending]
        if not ids:
            return
        self._pool.cancel(ids)
        for request_id in ids:
            del self._pending[request_id]

    # -------------------------------------------------------------------------
    # BACKEND OPERATIONS
    # -------------------------------------------------------------------------

    def get_about(self, on_result=None, on_error=None) -> str:
        return self._call(self._backend.get_about, (), on_result, on_error, PRIORITY_USER)

    def get_config(self, on_result=None, on_error=None) -> str:
        return self._call(self._backend.get_config, (), on_result, on_error, PRIORITY_USER)

    def set_config(self, config, on_result=None, on_error=None) -> str:
        return self._call(self._backend.set_config, (config,), on_result, on_error, PRIORITY_USER)

    def get_files(self, paths: List[str], on_result=None, on_error=None) -> str:
        return self._call(self._backend.get_files, (list(paths),), on_result, on_error, PRIORITY_USER)

    def get_parameters(self, on_result=None, on_error=None) -> str:
        return self._call(self._backend.get_parameters, (), on_result, on_error, PRIORITY_USER)

    def get_stream_count_map(self, file: str, on_result=None, on_error=None) -> str:
        return self._call(self._backend.get_stream_count_map, (file,),
                          on_result, on_error, PRIORITY_COUNTS)

    def get_properties_map(self, file: str, properties: Optional[List[StreamProperty]],
                           on_result=None, on_error=None) -> str:
        priority = PRIORITY_DETAILS if properties is None else PRIORITY_COMMON
        return self._call(self._backend.get_properties_map, (file, properties),
                          on_result, on_error, priority)

    def write_text_file(self, path: str, text: str, on_result=None, on_error=None) -> str:
        return self._call(self._backend.write_text_file, (path, text),
                          on_result, on_error, PRIORITY_USER)

    # -------------------------------------------------------------------------
    # INTERNAL
    # -------------------------------------------------------------------------

    def _call(self, func, args, on_result, on_error, priority) -> str:
        request_id = f"{func.__name__}:{next(self._ids)}"
        self._pending[request_id] = (on_result, on_error)
        self._pool.enqueue(request_id, func, *args, priority=priority)
        return request_id

    @Slot(str, object)
    def _on_result(self, request_id: str, result: object) -> None:
        on_result, _ = self._pending.pop(request_id, (None, None))
        if on_result is not None:
            on_result(result)

    @Slot(str, str)
    def _on_error(self, request_id: str, message: str) -> None:
        if request_id not in self._pending:
            # Cancelled while running
            return
        _, on_error = self._pending.pop(request_id)
        if on_error is not None:
            on_error(message)
        else:
            print(f"[BackendClient] Unhandled error for {request_id}: {message}")
