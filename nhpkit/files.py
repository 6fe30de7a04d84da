"""Reading, hashing and watching files."""

from __future__ import annotations

import hashlib
import os
import threading
from typing import Callable, Optional

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

from . import logger as log

DEBOUNCE_SECONDS = 0.1
_HASHES = {"md5": hashlib.md5, "sha1": hashlib.sha1, "sha256": hashlib.sha256}


def read_whole_file(file_name: str) -> str:
    """Return the whole content of a text file."""
    with open(file_name, encoding="utf-8", errors="replace") as handle:
        return handle.read()


def hash_file(method: str, file_name: str) -> str:
    """Return the hex digest of a file using md5, sha1 or sha256."""
    factory = _HASHES.get(method.lower())
    if factory is None:
        raise ValueError(f"unsupported hash method: {method}")
    digest = factory()
    with open(file_name, "rb") as handle:
        for chunk in iter(lambda: handle.read(65536), b""):
            digest.update(chunk)
    return digest.hexdigest()


class _Handler(FileSystemEventHandler):
    def __init__(self, watcher: "FileWatcher") -> None:
        super().__init__()
        self._watcher = watcher

    def _matches(self, path) -> bool:
        return os.path.abspath(os.fsdecode(path)) == self._watcher.filename

    def on_modified(self, event: FileSystemEvent) -> None:
        if not event.is_directory and self._matches(event.src_path):
            self._watcher._changed()

    def on_created(self, event: FileSystemEvent) -> None:
        if not event.is_directory and self._matches(event.src_path):
            self._watcher._changed()

    def on_moved(self, event: FileSystemEvent) -> None:
        if not event.is_directory and self._matches(event.dest_path):
            self._watcher._changed()

    def on_deleted(self, event: FileSystemEvent) -> None:
        if self._matches(event.src_path):
            self._watcher._stopped = True


class FileWatcher:
    """Calls a callback, debounced, whenever a file is written or created.

    Watching ends when the file is removed or the watcher is closed.
    """

    def __init__(self, filename: str, callback: Optional[Callable[[], None]]) -> None:
        self.filename = os.path.abspath(filename)
        self._callback = callback
        self._timer: Optional[threading.Timer] = None
        self._lock = threading.Lock()
        self._stopped = False
        self._observer = Observer()
        directory = os.path.dirname(self.filename) or "."
        self._observer.schedule(_Handler(self), directory, recursive=False)
        self._observer.start()

    def _changed(self) -> None:
        if self._stopped or self._callback is None:
            return
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
            self._timer = threading.Timer(DEBOUNCE_SECONDS, self._callback)
            self._timer.daemon = True
            self._timer.start()

    def close(self) -> None:
        """Stop watching and wait for the watching thread to end."""
        self._stopped = True
        self._observer.stop()
        self._observer.join()
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None
        log.info("file watcher for %s closed", self.filename)

    def __enter__(self) -> "FileWatcher":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


def watch_file(file: str, callback: Optional[Callable[[], None]]) -> Optional[FileWatcher]:
    """Watch ``file`` for changes; return None if watching cannot start."""
    try:
        watcher = FileWatcher(file, callback)
    except OSError as exc:
        log.error("failed to create file watcher for %s: %s", file, exc)
        return None
    log.info("start watching file %s", watcher.filename)
    return watcher