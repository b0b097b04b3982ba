from __future__ import annotations

import ipaddress
import logging
import socket
import time

import psutil

from healthnet.models import StorageInfo
from healthnet.probe.base import BaseProbe

logger = logging.getLogger(__name__)

NS_PER_SECOND = 1_000_000_000


class PsutilProbe(BaseProbe):
    """Samples the local host through psutil."""

    name = "psutil"

    def __init__(self, cpu_interval: float = 1.0) -> None:
        self.cpu_interval = cpu_interval

    def sample_hostname(self) -> str:
        return socket.gethostname()

    def sample_ip_address(self) -> str:
        """First non-loopback IPv4 address, in interface enumeration order."""
        for addrs in psutil.net_if_addrs().values():
            for addr in addrs:
                if addr.family != socket.AF_INET:
                    continue
                if not ipaddress.ip_address(addr.address).is_loopback:
                    return addr.address
        return ""

    def sample_cpu_load_per_core(self) -> list[float]:
        return [float(p) for p in psutil.cpu_percent(interval=self.cpu_interval, percpu=True)]

    def sample_ram_usage_percent(self) -> float:
        vm = psutil.virtual_memory()
        return min(vm.used / vm.total * 100.0, 100.0)

    def sample_storage_usage(self) -> list[StorageInfo]:
        results: list[StorageInfo] = []
        seen: set[str] = set()
        for part in psutil.disk_partitions(all=False):
            if not part.fstype or not part.mountpoint or part.mountpoint in seen:
                continue
            try:
                usage = psutil.disk_usage(part.mountpoint)
            except OSError as exc:
                logger.warning("Skipping mount %s: %s", part.mountpoint, exc)
                continue
            seen.add(part.mountpoint)
            results.append(
                StorageInfo(
                    mountpoint=part.mountpoint,
                    total=usage.total,
                    used=usage.used,
                    free=usage.free,
                )
            )
        return results

    def sample_uptime_ns(self) -> int:
        return int(time.time() - psutil.boot_time()) * NS_PER_SECOND
