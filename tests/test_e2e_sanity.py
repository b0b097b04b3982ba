"""End-to-end runtime sanity check.

Starts real Responders on localhost, fans a query out through the
Coordinator and checks what the Renderer prints.
"""

from __future__ import annotations

import io
import socket

import pytest

from healthnet.engine import FanOutCoordinator, select_addresses
from healthnet.models import StorageInfo, SystemInfo
from healthnet.net import Requester, Responder
from healthnet.probe.base import BaseProbe
from healthnet.render import ConsoleRenderer

NS = 1_000_000_000

EXPECTED = SystemInfo(
    hostname="e2e-host",
    ip_address="192.168.10.4",
    cpu_usage=[10.0, 20.0, 30.0, 40.0],
    ram_usage=55.0,
    storage=[StorageInfo(mountpoint="/", total=100 * 10**9, used=40 * 10**9, free=60 * 10**9)],
    uptime_ns=3600 * NS,
)


class ScenarioProbe(BaseProbe):
    """Host with 4 cores, 55% RAM, one 100 GB root mount and 1h uptime."""

    name = "scenario"

    def __init__(self, hostname: str = "e2e-host") -> None:
        self.hostname = hostname

    def sample_hostname(self) -> str:
        return self.hostname

    def sample_ip_address(self) -> str:
        return "192.168.10.4"

    def sample_cpu_load_per_core(self) -> list[float]:
        return [10.0, 20.0, 30.0, 40.0]

    def sample_ram_usage_percent(self) -> float:
        return 55.0

    def sample_storage_usage(self) -> list[StorageInfo]:
        return [StorageInfo(mountpoint="/", total=100 * 10**9, used=40 * 10**9, free=60 * 10**9)]

    def sample_uptime_ns(self) -> int:
        return 3600 * NS


def _unused_port() -> int:
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind(("127.0.0.1", 0))
        return sock.getsockname()[1]


@pytest.mark.asyncio
async def test_single_server_round_trip_and_render():
    responder = Responder(ScenarioProbe(), host="127.0.0.1", port=0)
    await responder.start()
    out = io.StringIO()
    address = "127.0.0.1:%d" % responder.address[1]
    try:
        coordinator = FanOutCoordinator(Requester(), on_outcome=ConsoleRenderer(out).handle)
        outcomes = await coordinator.dispatch([address])
    finally:
        await responder.stop()

    assert len(outcomes) == 1
    assert outcomes[0].ok
    assert outcomes[0].info == EXPECTED

    text = out.getvalue()
    for core in range(4):
        assert f"Core {core}:" in text
    assert "Core 4:" not in text
    assert "RAM Usage: 55.00%" in text
    assert text.count("Mountpoint:") == 1
    assert "  Mountpoint: /" in text
    assert "Total: 93 GB" in text
    assert "Uptime: 1h0m0s" in text


@pytest.mark.asyncio
async def test_select_all_with_one_unreachable_server():
    responders = [
        Responder(ScenarioProbe(f"host-{i}"), host="127.0.0.1", port=0) for i in range(2)
    ]
    for r in responders:
        await r.start()
    dead = f"127.0.0.1:{_unused_port()}"
    servers = ["127.0.0.1:%d" % responders[0].address[1], dead, "127.0.0.1:%d" % responders[1].address[1]]

    out = io.StringIO()
    try:
        coordinator = FanOutCoordinator(
            Requester(dial_timeout=2.0), on_outcome=ConsoleRenderer(out).handle
        )
        outcomes = await coordinator.dispatch(select_addresses(servers, "0"))
    finally:
        for r in responders:
            await r.stop()

    assert len(outcomes) == 3
    failed = [o for o in outcomes if not o.ok]
    assert len(failed) == 1
    assert failed[0].address == dead

    text = out.getvalue()
    assert text.count("Failed to retrieve system information") == 1
    assert f"Failed to retrieve system information from {dead}" in text
    assert text.count("System Information (") == 2
    assert "Hostname: host-0" in text
    assert "Hostname: host-1" in text
