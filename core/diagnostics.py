"""
Diagnostics Module for MediaLens

Provides internal memory profiling using 'gc', 'tracemalloc' and psutil.
Bound to F12: prints a report of process memory, live application objects
and the size of the property cache.
"""

import ctypes
import gc
import os
import tracemalloc
from collections import Counter

import psutil

TARGET_CLASSES = [
    'Session', 'PropertyCache', 'Workspace', 'BackendClient',
    'RequestPool', 'RequestTask', 'StreamPropertyMap',
    'DetailsView', 'ListView', 'FileCard',
]

APP_MODULE_PREFIXES = ("core.", "ui.")


class MemoryProfiler:
    _snapshot = None

    @staticmethod
    def start():
        """Start tracking memory allocations."""
        if not tracemalloc.is_tracing():
            tracemalloc.start()
            print("[Diagnostics] Tracemalloc started.")

    @staticmethod
    def take_snapshot():
        """Take a snapshot for comparison."""
        MemoryProfiler._snapshot = tracemalloc.take_snapshot()
        print("[Diagnostics] Snapshot taken.")

    @staticmethod
    def process_memory_mb():
        """(rss, vms) of this process in MB."""
        mem = psutil.Process(os.getpid()).memory_info()
        return mem.rss / 1024 / 1024, mem.vms / 1024 / 1024

    @staticmethod
    def object_counts() -> Counter:
        counts = Counter()
        for obj in gc.get_objects():
            cls = type(obj)
            module = getattr(cls, "__module__", None) or ""
            if cls.__name__ in TARGET_CLASSES or module.startswith(APP_MODULE_PREFIXES):
                counts[cls.__name__] += 1
        return counts

    @staticmethod
    def print_report(session=None):
        """
        Force garbage collection, trim memory, and print a detailed report.
        """
        print("\n" + "="*60)
        print("MEMORY DIAGNOSTICS REPORT")
        print("="*60)

        # 1. Force GC
        unreachable = gc.collect()
        print(f"GC: Collected {unreachable} unreachable objects.")

        # 2. Return freed heap to the OS (glibc only)
        try:
            libc = ctypes.CDLL("libc.so.6")
            libc.malloc_trim(0)
            print("System: malloc_trim(0) called (Force OS reclaim).")
        except OSError as e:
            print(f"System: malloc_trim unavailable: {e}")

        # 3. Current Process Memory
        try:
            rss, vms = MemoryProfiler.process_memory_mb()
            print(f"RSS Memory: {rss:.2f} MB")
            print(f"VMS Memory: {vms:.2f} MB")
        except psutil.Error:
            print("RSS Memory: Unavailable")

        # 4. Session state
        if session is not None:
            cache = session.cache
            print("\n--- Session ---")
            print(f"{'Files':<30}: {len(session.files)}")
            print(f"{'Stream counts':<30}: {len(cache.stream_counts_map)}")
            print(f"{'Common properties':<30}: {len(cache.common_properties_map)}")
            print(f"{'All properties':<30}: {len(cache.all_properties_map)}")
            print(f"{'Tabs':<30}: {len(session.workspace.tabs)}")

        # 5. Object Counts
        print("\n--- Active Object Counts (MediaLens) ---")
        for name, count in MemoryProfiler.object_counts().most_common():
            print(f"{name:<30}: {count}")

        # 6. Tracemalloc Statistics
        if tracemalloc.is_tracing():
            print("\n--- Top Memory Allocators (Current) ---")
            snapshot = tracemalloc.take_snapshot()
            for stat in snapshot.statistics('lineno')[:10]:
                print(stat)

            if MemoryProfiler._snapshot:
                print("\n--- Difference since last Snapshot ---")
                for stat in snapshot.compare_to(MemoryProfiler._snapshot, 'lineno')[:10]:
                    print(stat)

            # Update snapshot for next diff
            MemoryProfiler._snapshot = snapshot
        else:
            print("\n[Warn] Tracemalloc not running. Call start() early.")

        print("="*60 + "\n")
