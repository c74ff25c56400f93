from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict

from rplat.utils.io import load_yaml


@dataclass(frozen=True)
class UpstreamConfig:
    name: str
    endpoint: str = ""
    send_client_info: bool = False


@dataclass(frozen=True)
class RouterSettings:
    client_info_refresh: float = 0.0
    readiness_base_delay: float = 0.5
    readiness_max_delay: float = 10.0


@dataclass(frozen=True)
class AgentConfig:
    upstreams: Dict[str, UpstreamConfig] = field(default_factory=dict)
    router: RouterSettings = field(default_factory=RouterSettings)

    def has_upstream_send_client_info(self) -> bool:
        return any(upstream.send_client_info for upstream in self.upstreams.values())


def parse_agent_config(raw: Dict[str, Any]) -> AgentConfig:
    upstreams_raw = dict(raw.get("upstreams") or {})
    router_raw = dict(raw.get("router") or {})

    upstreams = {
        str(key): UpstreamConfig(
            name=str(key),
            endpoint=str(item.get("endpoint", "")),
            send_client_info=bool(item.get("send_client_info", False)),
        )
        for key, item in upstreams_raw.items()
    }

    router = RouterSettings(
        client_info_refresh=float(router_raw.get("client_info_refresh", 0.0)),
        readiness_base_delay=float(router_raw.get("readiness_base_delay", 0.5)),
        readiness_max_delay=float(router_raw.get("readiness_max_delay", 10.0)),
    )
    if router.client_info_refresh < 0:
        raise ValueError("router.client_info_refresh must not be negative")
    if router.readiness_base_delay <= 0 or router.readiness_max_delay <= 0:
        raise ValueError("router readiness delays must be positive")

    return AgentConfig(upstreams=upstreams, router=router)


def load_agent_config(path: str | Path) -> AgentConfig:
    return parse_agent_config(load_yaml(path))
