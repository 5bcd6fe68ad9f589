import os
import sys

# Add project root to path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

import pytest
from PySide6.QtCore import QCoreApplication


@pytest.fixture(scope="session", autouse=True)
def qapp():
    """One QCoreApplication for the whole run (signals, timers, QSettings)."""
    app = QCoreApplication.instance() or QCoreApplication([])
    app.setOrganizationName("MediaLensTests")
    app.setApplicationName("MediaLensTests")
    yield app
