from __future__ import annotations

import re
import threading
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional

_MAC_RE = re.compile(r"^[0-9a-f]{2}([:-])(?:[0-9a-f]{2}\1){4}[0-9a-f]{2}$")


def normalize_mac(value: str) -> Optional[str]:
    """Return *value* as lowercase colon-separated MAC, or None if it is not one."""
    mac = value.strip().lower()
    if not _MAC_RE.match(mac):
        return None
    return mac.replace("-", ":")


@dataclass(frozen=True)
class ClientInfo:
    mac: str
    ip: str
    hostname: str = ""
    expires: Optional[int] = None
    source: str = ""


class ClientInfoTable:
    """MAC -> latest :class:`ClientInfo`, shared between the watcher and readers.

    Each source file owns a contribution; :meth:`replace_source` swaps a
    file's whole contribution under the lock, so readers see either the old
    or the new record for a MAC, never a mix.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._records: Dict[str, ClientInfo] = {}
        self._sources: Dict[str, set] = {}

    def replace_source(self, source: str, records: Iterable[ClientInfo]) -> bool:
        incoming: Dict[str, ClientInfo] = {}
        for record in records:
            incoming[record.mac] = record
        with self._lock:
            updated = False
            previous = self._sources.get(source, set())
            for mac in previous - set(incoming):
                current = self._records.get(mac)
                if current is not None and current.source == source:
                    del self._records[mac]
                    updated = True
            for mac, record in incoming.items():
                if self._records.get(mac) != record:
                    self._records[mac] = record
                    updated = True
            self._sources[source] = set(incoming)
            return updated

    def get(self, mac: str) -> Optional[ClientInfo]:
        key = normalize_mac(mac)
        if key is None:
            return None
        with self._lock:
            return self._records.get(key)

    def snapshot(self) -> List[ClientInfo]:
        with self._lock:
            records = list(self._records.values())
        return sorted(records, key=lambda r: r.mac)

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)
