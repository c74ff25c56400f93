from __future__ import annotations

from typing import Dict, List, Optional, Type

from rplat.core.ids import SUPPORTED_PLATFORMS
from rplat.platforms.base import RouterPlatform
from rplat.platforms.ddwrt import DDWrtPlatform
from rplat.platforms.edgeos import EdgeOsPlatform
from rplat.platforms.merlin import MerlinPlatform
from rplat.platforms.openwrt import OpenWrtPlatform
from rplat.platforms.pfsense import PfsensePlatform
from rplat.platforms.synology import SynologyPlatform
from rplat.platforms.tomato import TomatoPlatform
from rplat.platforms.ubios import UbiosPlatform

_REGISTRY: Dict[str, Type[RouterPlatform]] = {
    cls.name: cls
    for cls in (
        EdgeOsPlatform,
        DDWrtPlatform,
        MerlinPlatform,
        OpenWrtPlatform,
        PfsensePlatform,
        SynologyPlatform,
        TomatoPlatform,
        UbiosPlatform,
    )
}


def register_platform(name: str, platform_cls: Type[RouterPlatform]) -> None:
    """Replace the implementation of a known platform.

    Only the fixed set of identifiers can be registered; the set of
    supported firmware does not grow at runtime.
    """
    if name not in SUPPORTED_PLATFORMS:
        raise KeyError(f"Unknown platform: {name!r}. Available: {list(SUPPORTED_PLATFORMS)}")
    _REGISTRY[name] = platform_cls


def is_supported(name: str) -> bool:
    return name in _REGISTRY


def supported_platforms() -> List[str]:
    return list(SUPPORTED_PLATFORMS)


def lookup(name: str) -> Optional[Type[RouterPlatform]]:
    return _REGISTRY.get(name)


def load_platform(name: str, **kwargs) -> Optional[RouterPlatform]:
    platform_cls = lookup(name)
    if platform_cls is None:
        return None
    return platform_cls(**kwargs)


def available_platforms() -> List[str]:
    """Names with a registered implementation, sorted."""
    return sorted(_REGISTRY.keys())
