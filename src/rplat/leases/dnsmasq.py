"""dnsmasq lease file parser.

Each lease is one line::

    <expiry-epoch> <mac> <ip> <hostname|*> <client-id|*>

DHCPv6 leases carry a ``duid`` header line and DUIDs in the MAC column;
both are skipped.
"""

from __future__ import annotations

from typing import Dict, List

from rplat.core.errors import ClientInfoParseError
from rplat.model.client_info import ClientInfo, normalize_mac


def parse_dnsmasq_leases(path: str) -> List[ClientInfo]:
    try:
        with open(path, "r", encoding="utf-8", errors="replace") as f:
            text = f.read()
    except OSError as exc:
        raise ClientInfoParseError(path, str(exc)) from exc
    return parse_dnsmasq_text(text, source=path)


def parse_dnsmasq_text(text: str, source: str = "") -> List[ClientInfo]:
    records: Dict[str, ClientInfo] = {}
    for lineno, line in enumerate(text.splitlines(), start=1):
        fields = line.split()
        if not fields or fields[0] == "duid":
            continue
        if len(fields) < 4:
            raise ClientInfoParseError(source, f"line {lineno}: expected at least 4 fields, got {len(fields)}")
        mac = normalize_mac(fields[1])
        if mac is None:
            continue
        try:
            expires = int(fields[0])
        except ValueError:
            raise ClientInfoParseError(source, f"line {lineno}: bad expiry {fields[0]!r}") from None
        hostname = "" if fields[3] == "*" else fields[3]
        records[mac] = ClientInfo(mac=mac, ip=fields[2], hostname=hostname, expires=expires, source=source)
    return list(records.values())
