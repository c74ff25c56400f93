from __future__ import annotations

from rplat.core.ids import SYNOLOGY
from rplat.leases import dnsmasq_file
from rplat.platforms.base import RouterPlatform


class SynologyPlatform(RouterPlatform):
    name = SYNOLOGY
    watched_files = (dnsmasq_file("/etc/dhcpd/dhcpd-leases.log"),)
