from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from typing import Any, Dict, Tuple

from rplat.leases import WatchedFile
from rplat.runtime.config import RouterSettings
from rplat.runtime.nvram import Nvram
from rplat.runtime.readiness import wait_ready

LOCAL_LISTEN_ADDRESS = "127.0.0.1:5354"


@dataclass
class ServiceConfig:
    """Service descriptor handed to the service manager at install time."""

    name: str
    display_name: str = ""
    description: str = ""
    executable: str = ""
    arguments: list = field(default_factory=list)
    option: Dict[str, Any] = field(default_factory=dict)


class RouterPlatform:
    """Lifecycle hooks for one router firmware family.

    The base implementation of every hook is a no-op. Subclasses override
    what their firmware needs; deployments that perform the actual
    configuration edits subclass again and call ``register_platform``.
    """

    name: str = ""
    # Empty means the agent is the system resolver and binds to the
    # address the system designates.
    listen_address: str = LOCAL_LISTEN_ADDRESS
    watched_files: Tuple[WatchedFile, ...] = ()

    def __init__(self, nvram: Nvram | None = None, logger: logging.Logger | None = None) -> None:
        self.nvram = nvram or Nvram()
        self.log = logger or logging.getLogger(f"rplat.platforms.{self.name}")

    def configure(self) -> None:
        pass

    def configure_service(self, svc: ServiceConfig) -> None:
        _ = svc

    def pre_run(self, cancel: threading.Event, settings: RouterSettings) -> None:
        _ = (cancel, settings)

    def post_install(self, svc: ServiceConfig) -> None:
        _ = svc

    def cleanup(self, svc: ServiceConfig) -> None:
        _ = svc

    def wait_ntp_ready(self, cancel: threading.Event, settings: RouterSettings) -> None:
        # NTP may be out of sync right after boot; wait until the firmware sets ntp_ready=1.
        wait_ready(
            lambda: self.nvram.get("ntp_ready") == "1",
            cancel,
            name=f"{self.name} ntp_ready",
            base_delay=settings.readiness_base_delay,
            max_delay=settings.readiness_max_delay,
            logger=self.log,
        )

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r})"
