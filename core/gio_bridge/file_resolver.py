"""
FileResolver — Gio Directory Expansion and Text Writing

Expands a mixed list of files and directories into a flat list of media
files. Directories are walked recursively with Gio.enumerate_children and
filtered by extension. Runs synchronously: callers execute it on a
RequestPool worker thread.

Usage:
    from core.gio_bridge.file_resolver import resolve_files
    files = resolve_files(["/media/movies", "/tmp/clip.mkv"], ["mkv", "mp4"])
"""

import os
from typing import Iterable, List, Optional, Set

import gi
gi.require_version('Gio', '2.0')
from gi.repository import Gio, GLib


QUERY_ATTRIBUTES = ",".join([
    "standard::name",
    "standard::type",
    "standard::is-hidden",
])


class ResolveError(Exception):
    """Raised when a requested path cannot be read."""


def _matches(name: str, extensions: Set[str]) -> bool:
    if not extensions:
        return True
    _, ext = os.path.splitext(name)
    return ext[1:].lower() in extensions


def _walk(gfile: Gio.File, extensions: Set[str], result: List[str], cancellable) -> None:
    try:
        enumerator = gfile.enumerate_children(
            QUERY_ATTRIBUTES,
            Gio.FileQueryInfoFlags.NONE,
            cancellable,
        )
    except GLib.Error as e:
        # Unreadable subdirectories are skipped, not fatal
        print(f"[FileResolver] Skipping {gfile.get_path()}: {e.message}")
        return

    children = []
    try:
        while True:
            info = enumerator.next_file(cancellable)
            if info is None:
                break
            children.append(info)
    finally:
        enumerator.close(None)

    children.sort(key=lambda i: i.get_name())
    for info in children:
        child = gfile.get_child(info.get_name())
        if info.get_file_type() == Gio.FileType.DIRECTORY:
            _walk(child, extensions, result, cancellable)
        elif _matches(info.get_name(), extensions):
            result.append(child.get_path())


def resolve_files(paths: Iterable[str], extensions: Optional[Iterable[str]] = None,
                  cancellable: Gio.Cancellable | None = None) -> List[str]:
    """
    Flatten files and directories into a de-duplicated list of file paths.

    Args:
        paths: Files and/or directories.
        extensions: Extensions (no dot) a directory expands to. Empty = all.
            Explicitly listed files are always kept.

    Raises:
        ResolveError: a listed path does not exist.
    """
    ext_set = {e.lower().lstrip(".") for e in (extensions or []) if e}
    result: List[str] = []

    for path in paths:
        gfile = Gio.File.new_for_path(path)
        try:
            info = gfile.query_info("standard::type", Gio.FileQueryInfoFlags.NONE, cancellable)
        except GLib.Error as e:
            raise ResolveError(f"Cannot open {path}: {e.message}") from e

        if info.get_file_type() == Gio.FileType.DIRECTORY:
            _walk(gfile, ext_set, result, cancellable)
        else:
            result.append(gfile.get_path())

    seen = set()
    unique = []
    for path in result:
        if path not in seen:
            seen.add(path)
            unique.append(path)
    return unique


def write_text_file(path: str, text: str) -> None:
    """Atomically replace the contents of path with UTF-8 text."""
    gfile = Gio.File.new_for_path(path)
    try:
        gfile.replace_contents(
            text.encode("utf-8"),
            None,
            False,
            Gio.FileCreateFlags.REPLACE_DESTINATION,
            None,
        )
    except GLib.Error as e:
        raise ResolveError(f"Cannot write {path}: {e.message}") from e
