"""Local fleet simulator for healthnet.

Starts a handful of Responders on localhost, each backed by a synthetic
probe, optionally adds an address nobody listens on, then fans a query out
to all of them and renders the results.

Usage:
    python simulator/simulate.py                # 3 hosts, one dead address
    python simulator/simulate.py --hosts 5 --no-dead
    python simulator/simulate.py --base-port 9100
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import random
import socket
import sys
from pathlib import Path

# Allow running from project root
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from healthnet.engine import FanOutCoordinator
from healthnet.models import RequestOutcome, StorageInfo
from healthnet.net import Requester, Responder
from healthnet.probe import BaseProbe
from healthnet.render import ConsoleRenderer

logging.basicConfig(level=logging.INFO, format="%(asctime)s [SIM] %(message)s")
logger = logging.getLogger("simulator")

GIB = 1024 ** 3
NS_PER_SECOND = 1_000_000_000


class SyntheticProbe(BaseProbe):
    """Probe that invents plausible metrics for a fake host."""

    name = "synthetic"

    def __init__(self, hostname: str, seed: int | None = None) -> None:
        self.hostname = hostname
        self._rng = random.Random(seed)
        self._cores = self._rng.choice([2, 4, 8])
        self._ip = f"10.0.0.{self._rng.randint(2, 254)}"

    def sample_hostname(self) -> str:
        return self.hostname

    def sample_ip_address(self) -> str:
        return self._ip

    def sample_cpu_load_per_core(self) -> list[float]:
        return [round(self._rng.uniform(0, 100), 2) for _ in range(self._cores)]

    def sample_ram_usage_percent(self) -> float:
        return round(self._rng.uniform(10, 95), 2)

    def sample_storage_usage(self) -> list[StorageInfo]:
        mounts = ["/"] + (["/data"] if self._rng.random() < 0.5 else [])
        results: list[StorageInfo] = []
        for mount in mounts:
            total = self._rng.randint(32, 2048) * GIB
            used = self._rng.randint(0, total)
            results.append(StorageInfo(mountpoint=mount, total=total, used=used, free=total - used))
        return results

    def sample_uptime_ns(self) -> int:
        return self._rng.randint(60, 90 * 86400) * NS_PER_SECOND


def _unused_port() -> int:
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind(("127.0.0.1", 0))
        return sock.getsockname()[1]


async def build_fleet(count: int, base_port: int = 0, seed: int | None = None) -> list[Responder]:
    """Start ``count`` responders; ``base_port`` 0 picks ephemeral ports."""
    fleet: list[Responder] = []
    for i in range(count):
        port = base_port + i if base_port else 0
        probe = SyntheticProbe(f"sim-host-{i + 1}", seed=None if seed is None else seed + i)
        responder = Responder(probe, host="127.0.0.1", port=port)
        await responder.start()
        fleet.append(responder)
    return fleet


async def run(hosts: int = 3, base_port: int = 0, dead: bool = True) -> list[RequestOutcome]:
    fleet = await build_fleet(hosts, base_port)
    addresses = ["%s:%d" % r.address for r in fleet]
    if dead:
        addresses.append(f"127.0.0.1:{_unused_port()}")
    logger.info("Querying %d address(es): %s", len(addresses), ", ".join(addresses))

    coordinator = FanOutCoordinator(
        Requester(dial_timeout=2.0, read_timeout=5.0),
        on_outcome=ConsoleRenderer().handle,
    )
    try:
        return await coordinator.dispatch(addresses)
    finally:
        for responder in fleet:
            await responder.stop()


async def main() -> None:
    parser = argparse.ArgumentParser(description="healthnet fleet simulator")
    parser.add_argument("--hosts", type=int, default=3, help="Number of simulated hosts")
    parser.add_argument("--base-port", type=int, default=0, help="First port (0 = ephemeral)")
    parser.add_argument("--no-dead", action="store_true", help="Skip the unreachable address")
    args = parser.parse_args()

    outcomes = await run(args.hosts, args.base_port, dead=not args.no_dead)
    ok = sum(1 for o in outcomes if o.ok)
    logger.info("Simulation finished: %d/%d hosts answered", ok, len(outcomes))


if __name__ == "__main__":
    asyncio.run(main())
