"""Lifecycle entry points used by the agent's install, start and stop paths.

:class:`Router` binds the hooks of the detected platform to one
:class:`RouterState`. The module-level functions operate on the
process-wide state and detect the platform on first use.
"""

from __future__ import annotations

import logging
import threading
from typing import Any, Callable, Optional

from watchdog.observers import Observer

from rplat.core.errors import HandlerError, NotSupportedError, RouterError
from rplat.core.probe import HostProbe
from rplat.model.client_info import ClientInfo
from rplat.platforms.base import RouterPlatform, ServiceConfig
from rplat.platforms.registry import load_platform
from rplat.runtime.config import RouterSettings
from rplat.runtime.nvram import Nvram
from rplat.runtime.state import RouterState, get_state
from rplat.runtime.watcher import ClientInfoWatcher


class Router:
    def __init__(
        self,
        state: RouterState,
        settings: RouterSettings | None = None,
        nvram: Nvram | None = None,
        observer_factory: Callable[[], object] = Observer,
        logger: logging.Logger | None = None,
    ) -> None:
        self.state = state
        self.settings = settings or RouterSettings()
        self._observer_factory = observer_factory
        self._log = logger or logging.getLogger("rplat.lifecycle")
        self._platform: Optional[RouterPlatform] = load_platform(state.platform, nvram=nvram)

    @classmethod
    def detect(cls, probe: HostProbe | None = None, **kwargs: Any) -> "Router":
        return cls(get_state(probe), **kwargs)

    @property
    def name(self) -> str:
        return self.state.platform

    @property
    def platform(self) -> Optional[RouterPlatform]:
        return self._platform

    def configure(self, cfg: Any) -> None:
        """Prepare the router for running the agent.

        *cfg* needs ``has_upstream_send_client_info()``. When it returns
        true, the client-info table is loaded and watched before the
        platform's configure hook runs.
        """
        platform = self._require_platform()
        if cfg.has_upstream_send_client_info():
            self._enable_client_info(platform, getattr(cfg, "router", None) or self.settings)
        self._call(platform, "configure")

    def configure_service(self, svc: ServiceConfig) -> None:
        if self._platform is not None:
            self._call(self._platform, "configure_service", svc)

    def pre_run(self, cancel: threading.Event | None = None) -> None:
        """Block until the router is ready for running the agent."""
        if self._platform is not None:
            self._call(self._platform, "pre_run", cancel or threading.Event(), self.settings)

    def post_install(self, svc: ServiceConfig) -> None:
        if self._platform is not None:
            self._call(self._platform, "post_install", svc)

    def cleanup(self, svc: ServiceConfig) -> None:
        if self._platform is not None:
            self._call(self._platform, "cleanup", svc)

    def listen_address(self) -> str:
        if self._platform is None:
            return ""
        return self._platform.listen_address

    def client_info(self, mac: str) -> Optional[ClientInfo]:
        if not self.state.send_client_info:
            return None
        return self.state.client_info.get(mac)

    def _require_platform(self) -> RouterPlatform:
        if self._platform is None:
            raise NotSupportedError(self.state.platform)
        return self._platform

    def _enable_client_info(self, platform: RouterPlatform, settings: RouterSettings) -> None:
        state = self.state
        with state.lock:
            if state.send_client_info:
                return
            watcher = ClientInfoWatcher(
                state.client_info,
                refresh_interval=settings.client_info_refresh,
                observer_factory=self._observer_factory,
            )
            watcher.start()
            state.send_client_info = True
            state.watcher = watcher
            for watched in platform.watched_files:
                watcher.load(watched)
                watcher.add(watched)
        self._log.info(
            "client info reporting enabled on %s: %d records from %s",
            platform.name,
            len(state.client_info),
            watcher.watch_list(),
        )

    def _call(self, platform: RouterPlatform, hook: str, *args: Any) -> None:
        try:
            getattr(platform, hook)(*args)
        except RouterError:
            raise
        except Exception as exc:  # noqa: BLE001
            raise HandlerError(platform.name, hook, exc) from exc


def name() -> str:
    return get_state().platform


def configure(cfg: Any) -> None:
    Router(get_state()).configure(cfg)


def configure_service(svc: ServiceConfig) -> None:
    Router(get_state()).configure_service(svc)


def pre_run(cancel: threading.Event | None = None, settings: RouterSettings | None = None) -> None:
    Router(get_state(), settings=settings).pre_run(cancel)


def post_install(svc: ServiceConfig) -> None:
    Router(get_state()).post_install(svc)


def cleanup(svc: ServiceConfig) -> None:
    Router(get_state()).cleanup(svc)


def listen_address() -> str:
    return Router(get_state()).listen_address()


def client_info(mac: str) -> Optional[ClientInfo]:
    return Router(get_state()).client_info(mac)
