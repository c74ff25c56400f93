"""ISC dhcpd lease database parser (EdgeOS, pfSense)."""

from __future__ import annotations

import calendar
import re
import time
from typing import Dict, List, Optional

from rplat.core.errors import ClientInfoParseError
from rplat.model.client_info import ClientInfo, normalize_mac

_LEASE_START = re.compile(r"^lease\s+(\S+)\s*\{$")
_QUOTED = re.compile(r'"(?:[^"\\]|\\.)*"')


def parse_isc_dhcp_leases(path: str) -> List[ClientInfo]:
    try:
        with open(path, "r", encoding="utf-8", errors="replace") as f:
            text = f.read()
    except OSError as exc:
        raise ClientInfoParseError(path, str(exc)) from exc
    return parse_isc_dhcp_text(text, source=path)


def parse_isc_dhcp_text(text: str, source: str = "") -> List[ClientInfo]:
    records: Dict[str, ClientInfo] = {}
    ip: Optional[str] = None
    fields: Dict[str, str] = {}
    for lineno, raw in enumerate(text.splitlines(), start=1):
        line = raw.strip()
        if not line or line.startswith("#"):
            continue
        bare = _QUOTED.sub('""', line)
        if ip is None:
            m = _LEASE_START.match(bare)
            if m:
                ip = m.group(1)
                fields = {}
            elif "{" in bare or "}" in bare:
                # Other top-level blocks (failover, host) are not leases.
                if not bare.endswith("{") and bare != "}":
                    raise ClientInfoParseError(source, f"line {lineno}: unexpected brace")
            continue
        if bare == "}":
            record = _build_record(ip, fields, source)
            if record is not None:
                records[record.mac] = record
            ip = None
            continue
        if "{" in bare or "}" in bare:
            raise ClientInfoParseError(source, f"line {lineno}: nested block in lease {ip}")
        key, _, value = line.rstrip(";").partition(" ")
        if key in ("hardware", "client-hostname", "ends"):
            fields[key] = value.strip()
    if ip is not None:
        raise ClientInfoParseError(source, f"unterminated lease block for {ip}")
    return list(records.values())


def _build_record(ip: str, fields: Dict[str, str], source: str) -> Optional[ClientInfo]:
    hardware = fields.get("hardware", "").split()
    if len(hardware) != 2:
        return None
    mac = normalize_mac(hardware[1])
    if mac is None:
        return None
    hostname = fields.get("client-hostname", "").strip('"')
    return ClientInfo(mac=mac, ip=ip, hostname=hostname, expires=_parse_ends(fields.get("ends", "")), source=source)


def _parse_ends(value: str) -> Optional[int]:
    # "4 2023/01/05 22:00:00" (weekday, UTC date, time) or "never"
    parts = value.split()
    if len(parts) != 3:
        return None
    try:
        return calendar.timegm(time.strptime(f"{parts[1]} {parts[2]}", "%Y/%m/%d %H:%M:%S"))
    except ValueError:
        return None
