#!/usr/bin/env python3
"""
Tests for the keyboard shortcut model.

Usage:
    pytest tests/test_shortcuts.py -v
"""

import os
import sys

# Add project root to path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from PySide6.QtCore import QSettings

from ui.models.shortcuts import DEFAULT_SHORTCUTS, SELECT_TAB_ACTIONS, ShortcutAction, Shortcuts


def make_shortcuts(tmp_path):
    return Shortcuts(QSettings(str(tmp_path / "shortcuts.ini"), QSettings.IniFormat))


def test_defaults_have_no_conflicts(tmp_path):
    shortcuts = make_shortcuts(tmp_path)
    assert shortcuts.get(ShortcutAction.CLOSE_TAB) == "Ctrl+W"
    assert [shortcuts.get(a) for a in SELECT_TAB_ACTIONS] == [f"Ctrl+{n}" for n in range(1, 10)]
    assert shortcuts.get_conflicts() == {}


def test_set_persists_and_reports_conflicts(tmp_path):
    shortcuts = make_shortcuts(tmp_path)
    changes = []
    shortcuts.configChanged.connect(lambda: changes.append(True))

    shortcuts.set(ShortcutAction.SHOW_ABOUT, "F10")
    assert changes == [True]
    assert shortcuts.get_conflicts() == {"F10": [ShortcutAction.SHOW_SETTINGS, ShortcutAction.SHOW_ABOUT]}

    reloaded = make_shortcuts(tmp_path)
    assert reloaded.get(ShortcutAction.SHOW_ABOUT) == "F10"

    reloaded.reset()
    assert reloaded.get(ShortcutAction.SHOW_ABOUT) == DEFAULT_SHORTCUTS[ShortcutAction.SHOW_ABOUT]
