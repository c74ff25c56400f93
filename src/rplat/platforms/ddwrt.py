from __future__ import annotations

from rplat.core.errors import Jffs2NotEnabledError
from rplat.core.ids import DDWRT
from rplat.leases import dnsmasq_file
from rplat.platforms.base import RouterPlatform, ServiceConfig
from rplat.runtime.nvram import NvramError


class DDWrtPlatform(RouterPlatform):
    name = DDWRT
    watched_files = (dnsmasq_file("/tmp/dnsmasq.leases"),)

    def configure_service(self, svc: ServiceConfig) -> None:
        _ = svc
        if not self.jffs2_enabled():
            raise Jffs2NotEnabledError()

    def jffs2_enabled(self) -> bool:
        # Older builds use enable_jffs2, newer ones sys_enable_jffs2.
        for key in ("enable_jffs2", "sys_enable_jffs2"):
            try:
                if self.nvram.get(key) == "1":
                    return True
            except NvramError as exc:
                self.log.debug("nvram get %s: %s", key, exc)
        return False
