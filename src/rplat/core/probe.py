"""Host firmware detection.

Detection is an ordered chain of checks against kernel identification
strings and well-known marker paths. The first matching check wins, so the
order of ``_CHECKS`` is the precedence policy.
"""

from __future__ import annotations

import logging
import os
import subprocess
from typing import Callable, List, Tuple

from rplat.core.ids import DDWRT, EDGEOS, MERLIN, OPENWRT, PFSENSE, SYNOLOGY, TOMATO, UBIOS, UNKNOWN

_log = logging.getLogger("rplat.probe")


class HostProbe:
    """Read-only view of the host used by :func:`detect`.

    Implementations must not raise: unreadable sources report empty output
    or ``False``.
    """

    def uname(self, flag: str) -> str:
        raise NotImplementedError

    def has_file(self, path: str) -> bool:
        raise NotImplementedError

    def has_dir(self, path: str) -> bool:
        raise NotImplementedError

    def read_file(self, path: str) -> str:
        raise NotImplementedError


class SystemHostProbe(HostProbe):
    def __init__(self, timeout: float = 5.0) -> None:
        self._timeout = timeout

    def uname(self, flag: str) -> str:
        try:
            proc = subprocess.run(
                ["uname", flag],
                capture_output=True,
                text=True,
                timeout=self._timeout,
            )
        except (OSError, subprocess.SubprocessError) as exc:
            _log.debug("uname %s failed: %s", flag, exc)
            return ""
        # Some firmware prints the answer but exits non-zero on unknown flags.
        return proc.stdout or ""

    def has_file(self, path: str) -> bool:
        return os.path.exists(path)

    def has_dir(self, path: str) -> bool:
        return os.path.isdir(path)

    def read_file(self, path: str) -> str:
        try:
            with open(path, "r", encoding="utf-8", errors="replace") as f:
                return f.read()
        except OSError as exc:
            _log.debug("read %s failed: %s", path, exc)
            return ""


Check = Callable[[HostProbe], bool]

_CHECKS: List[Tuple[Check, str]] = [
    (lambda p: p.uname("-o").startswith("DD-WRT"), DDWRT),
    (lambda p: p.uname("-o").startswith("ASUSWRT-Merlin"), MERLIN),
    (lambda p: p.has_file("/etc/openwrt_version"), OPENWRT),
    (lambda p: p.has_dir("/data/unifi"), UBIOS),
    (lambda p: p.uname("-u").startswith("synology"), SYNOLOGY),
    (lambda p: p.uname("-o").startswith("Tomato"), TOMATO),
    (lambda p: p.has_dir("/config/scripts/post-config.d"), EDGEOS),
    # EdgeOS 2.x
    (lambda p: p.has_file("/etc/ubnt/init/vyatta-router"), EDGEOS),
    (lambda p: p.read_file("/etc/platform").startswith("pfSense"), PFSENSE),
]


def detect(probe: HostProbe | None = None) -> str:
    """Return the platform identifier of the host, or ``UNKNOWN``."""
    probe = probe or SystemHostProbe()
    for check, platform in _CHECKS:
        if check(probe):
            _log.info("detected router platform: %s", platform)
            return platform
    _log.info("no supported router platform detected")
    return UNKNOWN
