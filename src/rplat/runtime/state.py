"""Process-wide router state.

Exactly one :class:`RouterState` is published per process. Concurrent first
callers may each run detection, but only the first published candidate is
ever observed.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import Optional

from rplat.core.probe import HostProbe, detect
from rplat.model.client_info import ClientInfoTable
from rplat.runtime.watcher import ClientInfoWatcher


@dataclass
class RouterState:
    platform: str
    send_client_info: bool = False
    client_info: ClientInfoTable = field(default_factory=ClientInfoTable)
    watcher: Optional[ClientInfoWatcher] = None
    # Serializes enabling client-info reporting.
    lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)


_slot_lock = threading.Lock()
_state: Optional[RouterState] = None


def current_state() -> Optional[RouterState]:
    return _state


def publish_state(candidate: RouterState) -> RouterState:
    """Store *candidate* unless a state exists; return the published one."""
    global _state
    with _slot_lock:
        if _state is None:
            _state = candidate
        return _state


def get_state(probe: HostProbe | None = None) -> RouterState:
    state = _state
    if state is not None:
        return state
    return publish_state(RouterState(platform=detect(probe)))


def reset_state() -> None:
    """Drop the published state, stopping its watcher. Intended for tests."""
    global _state
    with _slot_lock:
        state, _state = _state, None
    if state is not None and state.watcher is not None:
        state.watcher.stop(timeout=1.0)
