#!/usr/bin/env python3
"""
Tests for the F12 memory report.

Usage:
    pytest tests/test_diagnostics.py -v
"""

import os
import sys

# Add project root to path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from core.diagnostics import MemoryProfiler
from core.session import Session
from tests.fakes import FakeClient


def test_object_counts_include_session_objects():
    session = Session(FakeClient())
    counts = MemoryProfiler.object_counts()
    assert counts["Session"] >= 1
    assert counts["PropertyCache"] >= 1
    del session


def test_report_prints_session_section(capsys):
    session = Session(FakeClient())
    MemoryProfiler.print_report(session)
    out = capsys.readouterr().out
    assert "MEMORY DIAGNOSTICS REPORT" in out
    assert "--- Session ---" in out
    rss, vms = MemoryProfiler.process_memory_mb()
    assert rss > 0 and vms >= rss
