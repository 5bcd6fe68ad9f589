#!/usr/bin/env python3
"""
Tests for the filter input Debouncer.

Usage:
    pytest tests/test_debouncer.py -v
"""

import os
import sys

# Add project root to path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from PySide6.QtCore import QEventLoop, QTimer

from core.debouncer import Debouncer


def spin(ms):
    loop = QEventLoop()
    QTimer.singleShot(ms, loop.quit)
    loop.exec()


def test_burst_collapses_into_last_value():
    debouncer = Debouncer(interval_ms=30)
    settled = []
    debouncer.settled.connect(settled.append)

    for text in ("h", "he", "hev", "hevc"):
        debouncer.setText(text)
    assert debouncer.isPending()
    assert settled == []

    spin(150)
    assert settled == ["hevc"]
    assert debouncer.settled_text == "hevc"
    assert not debouncer.isPending()


def test_flush_emits_immediately():
    debouncer = Debouncer(interval_ms=10_000)
    settled = []
    debouncer.settled.connect(settled.append)

    debouncer.setText("avc")
    debouncer.flush()
    assert settled == ["avc"]
    assert not debouncer.isPending()
