from __future__ import annotations

import threading

from rplat.core.ids import MERLIN
from rplat.leases import dnsmasq_file
from rplat.platforms.base import RouterPlatform
from rplat.runtime.config import RouterSettings


class MerlinPlatform(RouterPlatform):
    name = MERLIN
    watched_files = (dnsmasq_file("/var/lib/misc/dnsmasq.leases"),)

    def pre_run(self, cancel: threading.Event, settings: RouterSettings) -> None:
        self.wait_ntp_ready(cancel, settings)
