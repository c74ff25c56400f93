"""Client-info models."""

from rplat.model.client_info import ClientInfo, ClientInfoTable, normalize_mac

__all__ = [
    "ClientInfo",
    "ClientInfoTable",
    "normalize_mac",
]
