from __future__ import annotations

from typing import Tuple

OPENWRT = "openwrt"
DDWRT = "ddwrt"
MERLIN = "merlin"
UBIOS = "ubios"
SYNOLOGY = "synology"
TOMATO = "tomato"
EDGEOS = "edgeos"
PFSENSE = "pfsense"

# Detection found no known firmware.
UNKNOWN = ""

SUPPORTED_PLATFORMS: Tuple[str, ...] = (
    EDGEOS,
    DDWRT,
    MERLIN,
    OPENWRT,
    PFSENSE,
    SYNOLOGY,
    TOMATO,
    UBIOS,
)
