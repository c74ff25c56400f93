from __future__ import annotations

from rplat.core.ids import OPENWRT
from rplat.leases import dnsmasq_file
from rplat.platforms.base import RouterPlatform, ServiceConfig

OPENWRT_INIT_SCRIPT = """#!/bin/sh /etc/rc.common
USE_PROCD=1
# After network starts
START=21
# Before network stops
STOP=89
cmd="{{.Path}}{{range .Arguments}} {{.|cmd}}{{end}}"
name="{{.Name}}"
pid_file="/var/run/${name}.pid"

start_service() {
  echo "Starting ${name}"
  procd_open_instance
  procd_set_param command ${cmd}
  procd_set_param respawn
  procd_set_param stdout 1
  procd_set_param stderr 1
  procd_set_param pidfile ${pid_file}
  procd_close_instance
  echo "${name} has been started"
}
"""


class OpenWrtPlatform(RouterPlatform):
    name = OPENWRT
    watched_files = (dnsmasq_file("/tmp/dhcp.leases"),)

    def configure_service(self, svc: ServiceConfig) -> None:
        svc.option["SysvScript"] = OPENWRT_INIT_SCRIPT
