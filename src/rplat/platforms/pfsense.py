from __future__ import annotations

from rplat.core.ids import PFSENSE
from rplat.leases import isc_dhcp_file
from rplat.platforms.base import RouterPlatform


class PfsensePlatform(RouterPlatform):
    """pfSense runs the agent as the system DNS resolver."""

    name = PFSENSE
    listen_address = ""
    watched_files = (isc_dhcp_file("/var/dhcpd/var/db/dhcpd.leases"),)
