from __future__ import annotations

from rplat.core.ids import EDGEOS
from rplat.leases import dnsmasq_file, isc_dhcp_file
from rplat.platforms.base import RouterPlatform


class EdgeOsPlatform(RouterPlatform):
    name = EDGEOS
    # dnsmasq or ISC dhcpd, depending on the configured DHCP server.
    watched_files = (
        dnsmasq_file("/run/dnsmasq-dhcp.leases"),
        isc_dhcp_file("/run/dhcpd.leases"),
    )
