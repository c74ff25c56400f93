"""Keeps the client-info table in sync with the OS lease files.

Change notifications come from a watchdog observer on each lease file's
parent directory (lease files are usually replaced by rename, which a watch
on the file itself would lose). Notified paths are queued and re-parsed by
a single worker thread. A full re-read on a fixed interval is opt-in
(``refresh_interval > 0``); by default notifications are the only trigger.
"""

from __future__ import annotations

import logging
import os
import queue
import threading
import time
from typing import Callable, Dict, List, Optional, Set

from watchdog.events import (
    EVENT_TYPE_CREATED,
    EVENT_TYPE_MODIFIED,
    EVENT_TYPE_MOVED,
    FileSystemEvent,
    FileSystemEventHandler,
)
from watchdog.observers import Observer

from rplat.core.errors import ClientInfoParseError, WatcherInitError
from rplat.leases import WatchedFile
from rplat.model.client_info import ClientInfoTable

IDLE = "idle"
WATCHING = "watching"
REPARSING = "reparsing"

# watchdog >= 2.3 reports close-after-write on inotify backends.
_EVENT_TYPE_CLOSED = "closed"
_RELOAD_EVENTS = {EVENT_TYPE_CREATED, EVENT_TYPE_MODIFIED, EVENT_TYPE_MOVED, _EVENT_TYPE_CLOSED}


class _LeaseEventHandler(FileSystemEventHandler):
    def __init__(self, watcher: "ClientInfoWatcher") -> None:
        super().__init__()
        self._watcher = watcher

    def on_any_event(self, event: FileSystemEvent) -> None:
        if event.is_directory or event.event_type not in _RELOAD_EVENTS:
            return
        path = getattr(event, "dest_path", "") or event.src_path
        self._watcher.notify(os.fsdecode(path))


class ClientInfoWatcher:
    def __init__(
        self,
        table: ClientInfoTable,
        refresh_interval: float = 0.0,
        observer_factory: Callable[[], object] = Observer,
        logger: logging.Logger | None = None,
    ) -> None:
        self._table = table
        self._refresh_interval = float(refresh_interval)
        self._observer_factory = observer_factory
        self._log = logger or logging.getLogger("rplat.watcher")
        self._files: Dict[str, WatchedFile] = {}
        self._watched_dirs: Set[str] = set()
        self._events: "queue.Queue[Optional[str]]" = queue.Queue()
        self._handler = _LeaseEventHandler(self)
        self._observer = None
        self._thread: Optional[threading.Thread] = None
        self._lock = threading.Lock()
        self.state = IDLE

    def start(self) -> None:
        """Start the notifier and the worker thread.

        Raises :class:`WatcherInitError` when the notifier cannot be set up;
        the watcher then stays idle.
        """
        if self._thread is not None:
            return
        try:
            observer = self._observer_factory()
            observer.start()
        except Exception as exc:  # noqa: BLE001
            raise WatcherInitError(f"could not start file watcher: {exc}") from exc
        self._observer = observer
        self._thread = threading.Thread(target=self._run, name="rplat-client-info", daemon=True)
        self.state = WATCHING
        self._thread.start()

    def stop(self, timeout: float | None = None) -> None:
        if self._thread is None:
            return
        self._events.put(None)
        if self._observer is not None:
            self._observer.stop()
            self._observer.join(timeout)
        self._thread.join(timeout)
        self._thread = None
        self.state = IDLE

    def load(self, watched: WatchedFile) -> bool:
        """Parse *watched* into the table now. Failures are logged, not raised."""
        with self._lock:
            self._files[watched.path] = watched
        if not os.path.exists(watched.path):
            self._log.debug("client info file %s does not exist", watched.path)
            return False
        try:
            records = watched.parse(watched.path)
        except ClientInfoParseError as exc:
            self._log.warning("failed to read client info file: %s", exc)
            return False
        except Exception:  # noqa: BLE001
            self._log.exception("client info parser failed for %s", watched.path)
            return False
        self._table.replace_source(watched.path, records)
        self._log.debug("loaded %d client info records from %s", len(records), watched.path)
        return True

    def add(self, watched: WatchedFile) -> bool:
        """Subscribe to changes of *watched*. Failures are logged, not raised."""
        if self._observer is None:
            self._log.warning("cannot watch %s: watcher not started", watched.path)
            return False
        directory = os.path.dirname(os.path.abspath(watched.path))
        with self._lock:
            self._files[watched.path] = watched
            if directory in self._watched_dirs:
                return True
        if not os.path.isdir(directory):
            self._log.debug("not watching %s: %s does not exist", watched.path, directory)
            return False
        try:
            self._observer.schedule(self._handler, directory, recursive=False)
        except OSError as exc:
            self._log.warning("failed to watch %s: %s", directory, exc)
            return False
        with self._lock:
            self._watched_dirs.add(directory)
        return True

    def notify(self, path: str) -> None:
        with self._lock:
            known = path in self._files
        if known:
            self._events.put(path)

    def watch_list(self) -> List[str]:
        with self._lock:
            return sorted(self._files)

    def _run(self) -> None:
        if self._refresh_interval <= 0:
            while True:
                path = self._events.get()
                if path is None:
                    return
                self._reparse(path)

        next_refresh = time.monotonic() + self._refresh_interval
        while True:
            timeout = max(0.0, next_refresh - time.monotonic())
            try:
                path = self._events.get(timeout=timeout)
            except queue.Empty:
                for name in self.watch_list():
                    self._reparse(name)
                next_refresh = time.monotonic() + self._refresh_interval
                continue
            if path is None:
                return
            self._reparse(path)

    def _reparse(self, path: str) -> None:
        with self._lock:
            watched = self._files.get(path)
        if watched is None:
            return
        self.state = REPARSING
        try:
            try:
                size = os.path.getsize(path)
            except OSError:
                return
            if size == 0:
                # Truncated for rewrite; the next event carries the content.
                self._log.debug("skip empty client info file %s", path)
                return
            try:
                records = watched.parse(path)
            except ClientInfoParseError as exc:
                self._log.warning("failed to read client info file: %s", exc)
                return
            except Exception:  # noqa: BLE001
                # Keep the worker alive; stale records stay until the next event.
                self._log.exception("client info parser failed for %s", path)
                return
            if self._table.replace_source(path, records):
                self._log.debug("client info updated from %s: %d records", path, len(records))
        finally:
            self.state = WATCHING
