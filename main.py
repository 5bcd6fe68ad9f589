#!/usr/bin/env python3
import sys
import time

# [DIAGNOSTICS] Capture absolute start time and base module count
_START_TIME = time.perf_counter()
_BASE_MODULE_COUNT = len(sys.modules)
import signal
import os
import argparse
from pathlib import Path

from PySide6.QtWidgets import QApplication

# Add project root to path so imports work
sys.path.append(str(Path(__file__).parent))

from core.backend import APP_NAME, MediaInfoCliBackend
from core.backend_client import BackendClient
from core.config import ConfigStore
from core.diagnostics import MemoryProfiler
from core.session import Session
from ui.main_window import MainWindow


def parse_args():
    parser = argparse.ArgumentParser(description="MediaLens Media Metadata Viewer")
    parser.add_argument("paths", nargs="*", help="Files or folders to open")
    parser.add_argument("--mediainfo", default=None, help="Path to the mediainfo executable")
    parser.add_argument("--profile", action="store_true", help="Enable cProfile performance profiling")
    return parser.parse_args()


def main():
    signal.signal(signal.SIGINT, signal.SIG_DFL)

    args = parse_args()

    app = QApplication(sys.argv)
    app.setOrganizationName(APP_NAME)
    app.setApplicationName(APP_NAME)

    # Session wiring: config -> backend -> async client -> session
    config_store = ConfigStore()
    backend = MediaInfoCliBackend(config_store, executable=args.mediainfo)
    client = BackendClient(backend)
    session = Session(client)

    window = MainWindow(session)
    window.show()

    session.load_config()
    if args.paths:
        session.add_paths([os.path.abspath(p) for p in args.paths], append=True)

    # Profiling Wrapper
    if args.profile:
        import cProfile
        import pstats
        print("Profiling enabled...")
        profiler = cProfile.Profile()
        profiler.enable()

    # Start Internal Memory Profiler (Tracemalloc) so F12 has early history
    MemoryProfiler.start()

    # [DIAGNOSTICS] Print final startup metrics just before handing off to the Qt Event Loop
    startup_ms = (time.perf_counter() - _START_TIME) * 1000
    total_modules = len(sys.modules)
    app_modules = total_modules - _BASE_MODULE_COUNT
    print(f"\n[Diagnostics] {APP_NAME} Initialized:")
    print(f"  └─ Boot Time:  {startup_ms:.1f} ms")
    print(f"  └─ Footprint:  {total_modules} total modules loaded into RAM ({app_modules} application-specific)")

    ret_code = app.exec()

    if args.profile:
        profiler.disable()
        print("\n--- Profiling Stats (Top 20 by Cumulative Time) ---")
        stats = pstats.Stats(profiler).sort_stats("cumulative")
        stats.print_stats(20)
        stats.dump_stats("medialens.prof")
        print(f"Profile data saved to '{os.path.abspath('medialens.prof')}'")

    sys.exit(ret_code)

if __name__ == "__main__":
    main()
