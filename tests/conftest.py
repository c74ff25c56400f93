from __future__ import annotations

import threading
import time
from typing import Callable, Dict, Iterable, List, Optional

import pytest

from rplat.core.probe import HostProbe
from rplat.runtime.nvram import Nvram, NvramError
from rplat.runtime.state import reset_state


class FakeProbe(HostProbe):
    def __init__(
        self,
        uname: Optional[Dict[str, str]] = None,
        files: Iterable[str] = (),
        dirs: Iterable[str] = (),
        contents: Optional[Dict[str, str]] = None,
    ) -> None:
        self._uname = dict(uname or {})
        self._files = set(files)
        self._dirs = set(dirs)
        self._contents = dict(contents or {})
        self.calls: List[str] = []

    def uname(self, flag: str) -> str:
        self.calls.append(f"uname {flag}")
        return self._uname.get(flag, "")

    def has_file(self, path: str) -> bool:
        self.calls.append(f"file {path}")
        return path in self._files or path in self._contents

    def has_dir(self, path: str) -> bool:
        self.calls.append(f"dir {path}")
        return path in self._dirs

    def read_file(self, path: str) -> str:
        self.calls.append(f"read {path}")
        return self._contents.get(path, "")


class FakeNvram(Nvram):
    """Values may be a string or a list consumed one answer per call."""

    def __init__(self, values: Optional[Dict[str, object]] = None) -> None:
        super().__init__()
        self.values = dict(values or {})
        self.calls: List[str] = []

    def get(self, key: str) -> str:
        self.calls.append(key)
        value = self.values.get(key)
        if isinstance(value, list):
            value = value.pop(0) if len(value) > 1 else value[0]
        if value is None:
            raise NvramError(f"nvram: no value for {key}")
        if isinstance(value, Exception):
            raise value
        return str(value)


class FakeObserver:
    def __init__(self) -> None:
        self.scheduled: List[tuple] = []
        self.started = False
        self.stopped = False

    def schedule(self, handler, path: str, recursive: bool = False) -> object:
        self.scheduled.append((handler, path))
        return object()

    def start(self) -> None:
        self.started = True

    def stop(self) -> None:
        self.stopped = True

    def join(self, timeout: Optional[float] = None) -> None:
        _ = timeout


class RecordingEvent(threading.Event):
    """Cancellation event whose waits return immediately and are recorded."""

    def __init__(self) -> None:
        super().__init__()
        self.waits: List[float] = []

    def wait(self, timeout: Optional[float] = None) -> bool:
        self.waits.append(timeout)
        return self.is_set()


def wait_until(predicate: Callable[[], bool], timeout: float = 3.0) -> bool:
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.01)
    return predicate()


@pytest.fixture(autouse=True)
def _fresh_router_state():
    reset_state()
    yield
    reset_state()
