"""Bounded backoff polling for external readiness signals.

The wait never gives up on its own. Only the cancellation event stops it,
since the conditions waited on (NTP sync on boot, for example) are outside
the process's control and eventually become true.
"""

from __future__ import annotations

import logging
import threading
from typing import Callable, Optional

from rplat.core.errors import ReadinessCancelledError

ReadinessCheck = Callable[[], bool]


class Backoff:
    def __init__(self, base_delay: float = 0.5, max_delay: float = 10.0) -> None:
        if base_delay <= 0 or max_delay <= 0:
            raise ValueError("backoff delays must be positive")
        self.base_delay = float(base_delay)
        self.max_delay = float(max_delay)
        self._attempts = 0

    @property
    def attempts(self) -> int:
        return self._attempts

    def next_delay(self) -> float:
        # Exponent is capped so the multiplication never overflows on long waits.
        delay = self.base_delay * (2 ** min(self._attempts, 32))
        self._attempts += 1
        return min(delay, self.max_delay)

    def reset(self) -> None:
        self._attempts = 0


def wait_ready(
    check: ReadinessCheck,
    cancel: Optional[threading.Event] = None,
    *,
    name: str = "readiness",
    base_delay: float = 0.5,
    max_delay: float = 10.0,
    logger: logging.Logger | None = None,
) -> None:
    """Block until ``check()`` returns true.

    Exceptions raised by *check* count as "not ready yet". Raises
    :class:`ReadinessCancelledError` once *cancel* is set.
    """
    log = logger or logging.getLogger("rplat.readiness")
    cancel = cancel or threading.Event()
    backoff = Backoff(base_delay=base_delay, max_delay=max_delay)
    while True:
        if cancel.is_set():
            raise ReadinessCancelledError(f"{name}: cancelled after {backoff.attempts} attempts")
        try:
            ready = bool(check())
            reason = "not ready"
        except Exception as exc:  # noqa: BLE001
            ready = False
            reason = str(exc) or type(exc).__name__
        if ready:
            if backoff.attempts:
                log.info("%s: ready after %d retries", name, backoff.attempts)
            return
        delay = backoff.next_delay()
        log.info("%s: %s, retrying in %.1fs", name, reason, delay)
        if cancel.wait(delay):
            raise ReadinessCancelledError(f"{name}: cancelled after {backoff.attempts} attempts")
