from __future__ import annotations

from rplat.core.ids import UBIOS
from rplat.leases import dnsmasq_file
from rplat.platforms.base import RouterPlatform


class UbiosPlatform(RouterPlatform):
    name = UBIOS
    watched_files = (
        dnsmasq_file("/mnt/data/udapi-config/dnsmasq.lease"),  # UDM Pro
        dnsmasq_file("/data/udapi-config/dnsmasq.lease"),  # UDR
    )
