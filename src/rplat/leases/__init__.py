"""Parsers for OS-maintained DHCP lease tables."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, List

from rplat.leases.dnsmasq import parse_dnsmasq_leases
from rplat.leases.isc_dhcp import parse_isc_dhcp_leases
from rplat.model.client_info import ClientInfo

LeaseParser = Callable[[str], List[ClientInfo]]


@dataclass(frozen=True)
class WatchedFile:
    path: str
    parse: LeaseParser


def dnsmasq_file(path: str) -> WatchedFile:
    return WatchedFile(path=path, parse=parse_dnsmasq_leases)


def isc_dhcp_file(path: str) -> WatchedFile:
    return WatchedFile(path=path, parse=parse_isc_dhcp_leases)


__all__ = [
    "LeaseParser",
    "WatchedFile",
    "dnsmasq_file",
    "isc_dhcp_file",
    "parse_dnsmasq_leases",
    "parse_isc_dhcp_leases",
]
