#!/usr/bin/env python3
"""
Tests for RequestPool and BackendClient.

Tests:
1. Results and errors arrive on the main thread via signals
2. BackendClient routes them to the caller's continuation
3. cancel() drops queued requests and silences running ones
4. Clearing the session stops its queued metadata reads

Usage:
    pytest tests/test_request_pool.py -v
"""

import os
import sys
import threading
import time

# Add project root to path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from PySide6.QtCore import QEventLoop, QObject, QTimer, Slot

from core.backend_client import BackendClient
from core.request_pool import RequestPool
from core.session import Session


def wait_until(predicate, timeout_ms=5000):
    """Spin the event loop until predicate() is true or the timeout expires."""
    loop = QEventLoop()
    poll = QTimer()
    poll.timeout.connect(lambda: predicate() and loop.quit())
    poll.start(10)
    QTimer.singleShot(timeout_ms, loop.quit)
    loop.exec()
    poll.stop()
    return predicate()


class Collector(QObject):
    def __init__(self):
        super().__init__()
        self.results = []
        self.errors = []
        self.threads = []

    @Slot(str, object)
    def on_result(self, request_id, result):
        self.threads.append(threading.get_ident())
        self.results.append((request_id, result))

    @Slot(str, str)
    def on_error(self, request_id, message):
        self.errors.append((request_id, message))


def failing():
    raise ValueError("bad input")


def test_results_and_errors_are_delivered():
    pool = RequestPool()
    collector = Collector()
    pool.resultReady.connect(collector.on_result)
    pool.errorOccurred.connect(collector.on_error)

    pool.enqueue("add:1", lambda a, b: a + b, 2, 3)
    pool.enqueue("fail:1", failing)

    assert wait_until(lambda: collector.results and collector.errors)
    assert collector.results == [("add:1", 5)]
    assert collector.errors == [("fail:1", "bad input")]
    assert collector.threads == [threading.get_ident()]
    assert wait_until(lambda: pool.pending_count() == 0)


def test_cancel_drops_only_queued_requests():
    pool = RequestPool(max_concurrent=1)
    collector = Collector()
    pool.resultReady.connect(collector.on_result)

    gate = threading.Event()
    pool.enqueue("blocker", gate.wait, 5)
    pool.enqueue("queued", lambda: "never")
    pool.enqueue("kept", lambda: "ran")
    assert pool.cancel(["blocker", "queued", "unknown"]) == 1
    gate.set()

    assert wait_until(lambda: pool.pending_count() == 0)
    # The running blocker still completes
    assert sorted(collector.results) == [("blocker", True), ("kept", "ran")]


class SlowBackend:
    """Counts metadata reads; each one takes a while."""

    def __init__(self, delay=0.05):
        self.delay = delay
        self.reads = []
        self._lock = threading.Lock()

    def get_files(self, paths):
        return list(paths)

    def get_stream_count_map(self, file):
        with self._lock:
            self.reads.append(file)
        time.sleep(self.delay)
        return {}

    def get_about(self):
        raise RuntimeError("no mediainfo")


def test_client_invokes_continuations():
    client = BackendClient(SlowBackend(delay=0))
    results, errors = [], []

    request_id = client.get_stream_count_map("/m/a.mkv", on_result=results.append, on_error=errors.append)
    assert request_id.startswith("get_stream_count_map:")
    client.get_about(on_result=results.append, on_error=errors.append)

    assert wait_until(lambda: results and errors)
    assert results == [{}]
    assert errors == ["no mediainfo"]
    assert client.pending_count() == 0


def test_cancelled_continuations_never_run():
    pool = RequestPool(max_concurrent=1)
    client = BackendClient(SlowBackend(), pool)
    results = []

    running = client.get_stream_count_map("/m/a.mkv", on_result=results.append)
    queued = client.get_stream_count_map("/m/b.mkv", on_result=results.append)
    client.cancel([running, queued])
    assert client.pending_count() == 0

    assert wait_until(lambda: pool.pending_count() == 0)
    wait_until(lambda: False, timeout_ms=100)
    assert results == []


def test_clear_files_stops_queued_reads():
    backend = SlowBackend()
    pool = RequestPool(max_concurrent=1)
    session = Session(BackendClient(backend, pool))
    files = [f"/m/{n:02d}.mkv" for n in range(20)]

    session.add_paths(files)
    assert wait_until(lambda: len(session.files) == 20)
    session.clear_files()
    reads_at_clear = len(backend.reads)

    assert wait_until(lambda: pool.pending_count() == 0)
    # Only a read already running when the session was cleared may finish
    assert len(backend.reads) - reads_at_clear <= 1
    assert len(backend.reads) < len(files)
    assert session.cache.stream_counts_map == {}
