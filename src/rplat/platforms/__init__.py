"""Router firmware families."""

from rplat.platforms.base import LOCAL_LISTEN_ADDRESS, RouterPlatform, ServiceConfig
from rplat.platforms.registry import (
    available_platforms,
    is_supported,
    load_platform,
    lookup,
    register_platform,
    supported_platforms,
)

__all__ = [
    "LOCAL_LISTEN_ADDRESS",
    "RouterPlatform",
    "ServiceConfig",
    "available_platforms",
    "is_supported",
    "load_platform",
    "lookup",
    "register_platform",
    "supported_platforms",
]
