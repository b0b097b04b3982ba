from __future__ import annotations

import io

import pytest

from healthnet.models import FailureReason, RequestOutcome, StorageInfo, SystemInfo
from healthnet.render.console import (
    ConsoleRenderer,
    format_duration,
    format_snapshot,
    format_unavailable,
)

NS = 1_000_000_000


@pytest.mark.parametrize(
    "ns, expected",
    [
        (0, "0s"),
        (1, "1ns"),
        (1_500, "1.5µs"),
        (250_000_000, "250ms"),
        (1_500_000_000, "1.5s"),
        (59 * NS, "59s"),
        (90 * NS, "1m30s"),
        (3600 * NS, "1h0m0s"),
        (26 * 3600 * NS + 61 * NS, "26h1m1s"),
        (-90 * NS, "-1m30s"),
    ],
)
def test_format_duration(ns, expected):
    assert format_duration(ns) == expected


def test_format_snapshot():
    info = SystemInfo(
        hostname="box",
        ip_address="10.0.0.2",
        cpu_usage=[1.0, 22.456],
        ram_usage=55.0,
        storage=[StorageInfo(mountpoint="/", total=100 * 10**9, used=40 * 10**9, free=60 * 10**9)],
        uptime_ns=3600 * NS,
    )
    text = format_snapshot(info, "box:9999")
    assert text.splitlines() == [
        "System Information (box:9999):",
        "Hostname: box",
        "IP Address: 10.0.0.2",
        "",
        "CPU Usage:",
        "  Core 0: 1.00%",
        "  Core 1: 22.46%",
        "",
        "RAM Usage: 55.00%",
        "",
        "Storage Info:",
        "  Mountpoint: /",
        "    Total: 93 GB",
        "    Used: 37 GB",
        "    Free: 55 GB",
        "",
        "Uptime: 1h0m0s",
    ]


def test_format_unavailable():
    assert format_unavailable("a:1") == "Failed to retrieve system information from a:1"
    assert format_unavailable("a:1", "timeout") == (
        "Failed to retrieve system information from a:1: timeout"
    )


class TestConsoleRenderer:
    def test_render_writes_block(self):
        out = io.StringIO()
        ConsoleRenderer(out).render(SystemInfo(hostname="box"), "box:9999")
        assert "Hostname: box" in out.getvalue()

    def test_empty_hostname_renders_unavailable(self):
        """Other fields of an empty snapshot are never shown."""
        out = io.StringIO()
        info = SystemInfo(hostname="", cpu_usage=[50.0], ram_usage=12.0)
        ConsoleRenderer(out).render(info, "a:1")
        text = out.getvalue()
        assert "Failed to retrieve system information from a:1" in text
        assert "Core" not in text
        assert "RAM" not in text

    def test_handle_failed_outcome(self):
        out = io.StringIO()
        outcome = RequestOutcome.failure("a:1", FailureReason.DIAL_FAILED, "refused")
        ConsoleRenderer(out).handle(outcome)
        assert out.getvalue().strip() == (
            "Failed to retrieve system information from a:1: dial_failed (refused)"
        )

    def test_handle_ok_outcome(self):
        out = io.StringIO()
        ConsoleRenderer(out).handle(RequestOutcome.success("a:1", SystemInfo(hostname="h")))
        assert "System Information (a:1):" in out.getvalue()
