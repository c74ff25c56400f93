from __future__ import annotations

from pathlib import Path

import pytest
from conftest import FakeNvram, FakeObserver, RecordingEvent, wait_until
from watchdog.events import FileModifiedEvent

from rplat.core.errors import HandlerError, Jffs2NotEnabledError, NotSupportedError, WatcherInitError
from rplat.core.ids import DDWRT, MERLIN, OPENWRT, PFSENSE, SUPPORTED_PLATFORMS, UNKNOWN
from rplat.leases import WatchedFile, dnsmasq_file
from rplat.platforms import registry
from rplat.platforms.base import ServiceConfig
from rplat.platforms.openwrt import OPENWRT_INIT_SCRIPT, OpenWrtPlatform
from rplat.runtime import lifecycle
from rplat.runtime.config import AgentConfig, RouterSettings, UpstreamConfig
from rplat.runtime.lifecycle import Router
from rplat.runtime.state import RouterState, publish_state

LEASES = (
    "1700000000 aa:bb:cc:dd:ee:01 192.168.1.10 laptop *\n"
    "1700000100 aa:bb:cc:dd:ee:02 192.168.1.11 phone *\n"
)


def _config(send_client_info: bool) -> AgentConfig:
    return AgentConfig(
        upstreams={"0": UpstreamConfig(name="0", endpoint="https://dns.example", send_client_info=send_client_info)},
        router=RouterSettings(),
    )


@pytest.fixture
def isolated_registry(monkeypatch):
    monkeypatch.setattr(registry, "_REGISTRY", dict(registry._REGISTRY))
    return registry


@pytest.fixture
def observer() -> FakeObserver:
    return FakeObserver()


def _stop_watcher(state: RouterState) -> None:
    if state.watcher is not None:
        state.watcher.stop(timeout=1.0)


def test_configure_unsupported_platform_has_no_side_effects(observer: FakeObserver) -> None:
    state = RouterState(platform=UNKNOWN)
    router = Router(state, observer_factory=lambda: observer)

    with pytest.raises(NotSupportedError):
        router.configure(_config(send_client_info=True))

    assert state.send_client_info is False
    assert state.watcher is None
    assert observer.started is False


def test_configure_primes_client_info_before_platform_hook(tmp_path: Path, isolated_registry, observer: FakeObserver) -> None:
    leases = tmp_path / "dhcp.leases"
    leases.write_text(LEASES, encoding="utf-8")
    state = RouterState(platform=OPENWRT)
    seen_by_hook = []

    class LeasesOpenWrt(OpenWrtPlatform):
        watched_files = (dnsmasq_file(str(leases)),)

        def configure(self) -> None:
            seen_by_hook.append(len(state.client_info))

    isolated_registry.register_platform(OPENWRT, LeasesOpenWrt)
    router = Router(state, observer_factory=lambda: observer)
    try:
        router.configure(_config(send_client_info=True))

        assert seen_by_hook == [2]
        assert state.send_client_info is True
        assert state.watcher is not None
        assert router.client_info("AA:BB:CC:DD:EE:02").hostname == "phone"

        leases.write_text("1700000200 aa:bb:cc:dd:ee:03 192.168.1.12 tv *\n", encoding="utf-8")
        handler = observer.scheduled[0][0]
        handler.dispatch(FileModifiedEvent(str(leases)))

        assert wait_until(lambda: router.client_info("aa:bb:cc:dd:ee:03") is not None)
        assert router.client_info("aa:bb:cc:dd:ee:01") is None
    finally:
        _stop_watcher(state)


def test_configure_survives_crashing_lease_parser(tmp_path: Path, isolated_registry, observer: FakeObserver) -> None:
    leases = tmp_path / "dhcp.leases"
    leases.write_text(LEASES, encoding="utf-8")
    hook_calls = []

    def broken_parse(path: str):
        raise ValueError(f"cannot parse {path}")

    class BrokenLeasesOpenWrt(OpenWrtPlatform):
        watched_files = (WatchedFile(path=str(leases), parse=broken_parse),)

        def configure(self) -> None:
            hook_calls.append("configure")

    isolated_registry.register_platform(OPENWRT, BrokenLeasesOpenWrt)
    state = RouterState(platform=OPENWRT)
    router = Router(state, observer_factory=lambda: observer)
    try:
        router.configure(_config(send_client_info=True))

        assert hook_calls == ["configure"]
        assert state.send_client_info is True
        assert len(state.client_info) == 0
        assert [path for _, path in observer.scheduled] == [str(tmp_path)]
    finally:
        _stop_watcher(state)


def test_configure_starts_one_watcher(tmp_path: Path, isolated_registry) -> None:
    observers = []

    def factory() -> FakeObserver:
        observers.append(FakeObserver())
        return observers[-1]

    class LeasesOpenWrt(OpenWrtPlatform):
        watched_files = (dnsmasq_file(str(tmp_path / "dhcp.leases")),)

    isolated_registry.register_platform(OPENWRT, LeasesOpenWrt)
    state = RouterState(platform=OPENWRT)
    router = Router(state, observer_factory=factory)
    try:
        router.configure(_config(send_client_info=True))
        router.configure(_config(send_client_info=True))
        assert len(observers) == 1
    finally:
        _stop_watcher(state)


def test_configure_without_client_info_skips_watcher(isolated_registry, observer: FakeObserver) -> None:
    calls = []

    class RecordingOpenWrt(OpenWrtPlatform):
        def configure(self) -> None:
            calls.append("configure")

    isolated_registry.register_platform(OPENWRT, RecordingOpenWrt)
    state = RouterState(platform=OPENWRT)
    router = Router(state, observer_factory=lambda: observer)
    router.configure(_config(send_client_info=False))

    assert calls == ["configure"]
    assert state.watcher is None
    assert router.client_info("aa:bb:cc:dd:ee:01") is None


def test_configure_fails_when_watcher_cannot_start() -> None:
    def broken_factory():
        raise OSError("too many open files")

    state = RouterState(platform=MERLIN)
    router = Router(state, observer_factory=broken_factory)
    with pytest.raises(WatcherInitError):
        router.configure(_config(send_client_info=True))
    assert state.send_client_info is False
    assert state.watcher is None


def test_handler_errors_are_wrapped_with_platform(isolated_registry) -> None:
    class BrokenOpenWrt(OpenWrtPlatform):
        def configure(self) -> None:
            raise OSError("uci commit failed")

    isolated_registry.register_platform(OPENWRT, BrokenOpenWrt)
    with pytest.raises(HandlerError) as excinfo:
        Router(RouterState(platform=OPENWRT)).configure(_config(send_client_info=False))

    assert excinfo.value.platform == OPENWRT
    assert excinfo.value.hook == "configure"
    assert isinstance(excinfo.value.__cause__, OSError)


def test_configure_service_openwrt_sets_init_script() -> None:
    svc = ServiceConfig(name="agent")
    Router(RouterState(platform=OPENWRT)).configure_service(svc)
    assert svc.option["SysvScript"] == OPENWRT_INIT_SCRIPT


def test_configure_service_ddwrt_requires_jffs2() -> None:
    svc = ServiceConfig(name="agent")
    router = Router(RouterState(platform=DDWRT), nvram=FakeNvram({"enable_jffs2": "0"}))
    with pytest.raises(Jffs2NotEnabledError):
        router.configure_service(svc)

    router = Router(RouterState(platform=DDWRT), nvram=FakeNvram({"enable_jffs2": "0", "sys_enable_jffs2": "1"}))
    router.configure_service(svc)
    assert svc.option == {}


def test_configure_service_is_noop_elsewhere() -> None:
    for name in (UNKNOWN, PFSENSE, MERLIN):
        svc = ServiceConfig(name="agent")
        Router(RouterState(platform=name)).configure_service(svc)
        assert svc.option == {}


def test_post_install_and_cleanup_dispatch_to_platform(isolated_registry) -> None:
    calls = []

    class HookedPfsense(registry.PfsensePlatform):
        def post_install(self, svc: ServiceConfig) -> None:
            calls.append(("post_install", svc.name))

        def cleanup(self, svc: ServiceConfig) -> None:
            calls.append(("cleanup", svc.name))

    isolated_registry.register_platform(PFSENSE, HookedPfsense)
    router = Router(RouterState(platform=PFSENSE))
    svc = ServiceConfig(name="agent")
    router.post_install(svc)
    router.cleanup(svc)

    assert calls == [("post_install", "agent"), ("cleanup", "agent")]


def test_unknown_platform_hooks_are_noops() -> None:
    router = Router(RouterState(platform=UNKNOWN))
    svc = ServiceConfig(name="agent")
    router.post_install(svc)
    router.cleanup(svc)
    router.pre_run(RecordingEvent())
    assert router.listen_address() == ""


def test_pre_run_waits_only_where_needed() -> None:
    nvram = FakeNvram({"ntp_ready": ["0", "1"]})
    cancel = RecordingEvent()
    Router(RouterState(platform=MERLIN), nvram=nvram).pre_run(cancel)
    assert nvram.calls == ["ntp_ready", "ntp_ready"]

    nvram = FakeNvram()
    Router(RouterState(platform=OPENWRT), nvram=nvram).pre_run(RecordingEvent())
    assert nvram.calls == []


def test_listen_address_for_each_platform() -> None:
    for name in SUPPORTED_PLATFORMS:
        expected = "" if name == PFSENSE else "127.0.0.1:5354"
        assert Router(RouterState(platform=name)).listen_address() == expected


def test_module_functions_use_published_state() -> None:
    publish_state(RouterState(platform=OPENWRT))
    svc = ServiceConfig(name="agent")

    assert lifecycle.name() == OPENWRT
    assert lifecycle.listen_address() == "127.0.0.1:5354"
    lifecycle.configure_service(svc)
    assert "SysvScript" in svc.option
    assert lifecycle.client_info("aa:bb:cc:dd:ee:01") is None


def test_module_configure_unsupported() -> None:
    publish_state(RouterState(platform=UNKNOWN))
    with pytest.raises(NotSupportedError):
        lifecycle.configure(_config(send_client_info=True))
