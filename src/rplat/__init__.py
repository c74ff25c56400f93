"""Router platform detection and lifecycle dispatch."""

from rplat.core.errors import NotSupportedError, RouterError
from rplat.core.ids import SUPPORTED_PLATFORMS, UNKNOWN
from rplat.runtime.lifecycle import (
    Router,
    cleanup,
    client_info,
    configure,
    configure_service,
    listen_address,
    name,
    post_install,
    pre_run,
)

__all__ = [
    "NotSupportedError",
    "Router",
    "RouterError",
    "SUPPORTED_PLATFORMS",
    "UNKNOWN",
    "cleanup",
    "client_info",
    "configure",
    "configure_service",
    "listen_address",
    "name",
    "post_install",
    "pre_run",
]
