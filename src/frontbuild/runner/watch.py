"""File watching on top of watchdog.

A `Watcher` observes the directory a glob pattern is rooted in and calls its
callback once per burst of matching changes, with the paths that changed.
"""

from __future__ import annotations

import fnmatch
import os
import threading
from pathlib import Path
from typing import Callable

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer


def watch_root(pattern: str) -> Path:
    """Deepest directory of `pattern` that holds no wildcard."""
    parts = Path(pattern).parts
    base: list[str] = []
    for part in parts:
        if any(ch in part for ch in "*?["):
            break
        base.append(part)
    if len(base) == len(parts):
        # plain file path
        base = base[:-1]
    return Path(*base) if base else Path(".")


def matches(path: str, pattern: str) -> bool:
    if fnmatch.fnmatch(path, pattern):
        return True
    # `**/` also matches zero directories
    return "**/" in pattern and fnmatch.fnmatch(path, pattern.replace("**/", ""))


class _Handler(FileSystemEventHandler):
    def __init__(self, watcher: "Watcher"):
        super().__init__()
        self.watcher = watcher

    def on_any_event(self, event: FileSystemEvent) -> None:
        if event.is_directory:
            return
        for p in (event.src_path, getattr(event, "dest_path", "")):
            if p and self.watcher.matches(os.fsdecode(p)):
                self.watcher.trigger(os.fsdecode(p))


class Watcher:
    def __init__(self, pattern: str | Path, callback: Callable[[list[str]], None], delay: float = 0.05):
        self.pattern = os.path.abspath(str(pattern))
        self.root = watch_root(self.pattern)
        self.callback = callback
        self.delay = delay
        self._timer: threading.Timer | None = None
        self._pending: set[str] = set()
        self._lock = threading.Lock()
        self._observer = None

    def matches(self, path: str) -> bool:
        return matches(os.path.abspath(path), self.pattern)

    def trigger(self, path: str | None = None) -> None:
        """Schedule the callback, restarting the delay on every new change."""
        with self._lock:
            if path:
                self._pending.add(os.path.abspath(path))
            if self._timer is not None:
                self._timer.cancel()
            self._timer = threading.Timer(self.delay, self._fire)
            self._timer.daemon = True
            self._timer.start()

    def _fire(self) -> None:
        with self._lock:
            if self._timer is not threading.current_thread():
                # superseded by a later change
                return
            changed, self._pending = sorted(self._pending), set()
            self._timer = None
        self.callback(changed)

    def start(self) -> None:
        self.root.mkdir(parents=True, exist_ok=True)
        self._observer = Observer()
        depth = len(Path(self.pattern).parts) - len(self.root.parts)
        recursive = "**" in self.pattern or depth > 1
        self._observer.schedule(_Handler(self), str(self.root), recursive=recursive)
        self._observer.daemon = True
        self._observer.start()

    def stop(self) -> None:
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None
            self._pending.clear()
        if self._observer is not None:
            self._observer.stop()
            self._observer.join()
            self._observer = None
