"""
RequestPool — Prioritized QThreadPool Runner for Backend Calls

Wraps synchronous backend calls (subprocess, Gio) into the Qt threading
ecosystem. Results are routed back through signals; receivers living on
the main thread get them as queued events.

Key Features:
1. Lowest-integer-first priority queueing.
2. Bounded concurrency (default 4 workers in flight).
3. cancel() drops queued requests before they ever start.
"""

import heapq
import itertools
from collections.abc import Callable, Iterable
from typing import Any

from PySide6.QtCore import QMutex, QMutexLocker, QObject, QRunnable, QThreadPool, Signal


class RequestTask(QRunnable):
    """A single backend call executed on a pool thread."""

    def __init__(
        self,
        request_id: str,
        func: Callable[..., Any],
        on_complete_callback: Callable[[str, Any, str | None], None],
        *args: Any,
    ):
        super().__init__()
        self.request_id = request_id
        self.func = func
        self.on_complete = on_complete_callback
        self.args = args
        self.setAutoDelete(True)

    def run(self) -> None:
        try:
            res = self.func(*self.args)
        except Exception as e:
            self.on_complete(self.request_id, None, str(e) or type(e).__name__)
            return
        self.on_complete(self.request_id, res, None)


class RequestPool(QObject):
    """
    Schedules RequestTasks on the global QThreadPool.

    Signals:
        resultReady(str, object): (request_id, result)
        errorOccurred(str, str): (request_id, error_message)
    """

    resultReady = Signal(str, object)
    errorOccurred = Signal(str, str)

    def __init__(self, max_concurrent: int = 4, parent: QObject | None = None):
        super().__init__(parent)
        self.max_concurrent = max_concurrent

        # Priority Queue: (priority, counter, (request_id, func, args))
        self._queue: list[tuple[int, int, Any]] = []
        self._counter = itertools.count()

        self._active_count = 0
        self._mutex = QMutex()
        self._pool = QThreadPool.globalInstance()

    # -------------------------------------------------------------------------
    # PUBLIC API
    # -------------------------------------------------------------------------

    def enqueue(self, request_id: str, func: Callable[..., Any], *args: Any,
                priority: int = 50) -> None:
        """Submit a call. Lower priority values run first."""
        with QMutexLocker(self._mutex):
            heapq.heappush(self._queue, (priority, next(self._counter), (request_id, func, args)))
        self._process_queue()

    def cancel(self, request_ids: Iterable[str]) -> int:
        """
        Drop the given requests if they are still queued.
        Running ones complete normally. Returns how many were dropped.
        """
        ids = set(request_ids)
        with QMutexLocker(self._mutex):
            before = len(self._queue)
            self._queue = [entry for entry in self._queue if entry[2][0] not in ids]
            heapq.heapify(self._queue)
            dropped = before - len(self._queue)
        if dropped:
            print(f"[RequestPool] Dropped {dropped} queued request(s)")
        return dropped

    def pending_count(self) -> int:
        with QMutexLocker(self._mutex):
            return len(self._queue) + self._active_count

    # -------------------------------------------------------------------------
    # INTERNAL
    # -------------------------------------------------------------------------

    def _process_queue(self) -> None:
        with QMutexLocker(self._mutex):
            while self._queue and self._active_count < self.max_concurrent:
                priority, _, (request_id, func, args) = heapq.heappop(self._queue)
                self._active_count += 1
                runnable = RequestTask(request_id, func, self._on_task_end, *args)
                # Align Python priority (0=High) with Qt priority (High wins)
                self._pool.start(runnable, -priority)

    def _on_task_end(self, request_id: str, result: Any, error: str | None) -> None:
        with QMutexLocker(self._mutex):
            self._active_count -= 1

        if error is None:
            self.resultReady.emit(request_id, result)
        else:
            self.errorOccurred.emit(request_id, error)

        self._process_queue()
