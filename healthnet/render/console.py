from __future__ import annotations

import sys
from typing import TextIO

from healthnet.models import RequestOutcome, SystemInfo

GIB = 1024 ** 3

_SUBSECOND_UNITS = ((1_000_000, "ms"), (1_000, "µs"), (1, "ns"))


def _with_fraction(whole: int, rem: int, digits: int) -> str:
    if not rem:
        return str(whole)
    return f"{whole}.{rem:0{digits}d}".rstrip("0")


def format_duration(ns: int) -> str:
    """Render nanoseconds the way Go prints a time.Duration (``1h0m0s``, ``1.5s``, ``250ms``)."""
    if ns == 0:
        return "0s"
    sign = "-" if ns < 0 else ""
    u = abs(ns)

    if u < 1_000_000_000:
        for unit, suffix in _SUBSECOND_UNITS:
            if u >= unit:
                digits = len(str(unit)) - 1
                return f"{sign}{_with_fraction(u // unit, u % unit, digits)}{suffix}"

    secs, frac = divmod(u, 1_000_000_000)
    hours, secs = divmod(secs, 3600)
    minutes, secs = divmod(secs, 60)
    text = f"{_with_fraction(secs, frac, 9)}s"
    if hours:
        text = f"{hours}h{minutes}m{text}"
    elif minutes:
        text = f"{minutes}m{text}"
    return sign + text


def format_snapshot(info: SystemInfo, address: str) -> str:
    lines = [
        f"System Information ({address}):",
        f"Hostname: {info.hostname}",
        f"IP Address: {info.ip_address}",
        "",
        "CPU Usage:",
    ]
    lines += [f"  Core {i}: {usage:.2f}%" for i, usage in enumerate(info.cpu_usage)]
    lines += ["", f"RAM Usage: {info.ram_usage:.2f}%", "", "Storage Info:"]
    for storage in info.storage:
        lines += [
            f"  Mountpoint: {storage.mountpoint}",
            f"    Total: {storage.total // GIB} GB",
            f"    Used: {storage.used // GIB} GB",
            f"    Free: {storage.free // GIB} GB",
        ]
    lines += ["", f"Uptime: {format_duration(info.uptime_ns)}"]
    return "\n".join(lines)


def format_unavailable(address: str, reason: str = "") -> str:
    text = f"Failed to retrieve system information from {address}"
    return f"{text}: {reason}" if reason else text


class ConsoleRenderer:
    """Writes snapshots and failures to a text stream, one block per outcome."""

    def __init__(self, stream: TextIO | None = None) -> None:
        self.stream = stream if stream is not None else sys.stdout

    def render(self, info: SystemInfo, address: str) -> None:
        # an empty hostname means there is nothing trustworthy to show
        if info.hostname == "":
            self.render_unavailable(address, "empty snapshot")
            return
        self._write(format_snapshot(info, address))

    def render_unavailable(self, address: str, reason: str = "") -> None:
        self._write(format_unavailable(address, reason))

    def handle(self, outcome: RequestOutcome) -> None:
        if outcome.ok and outcome.info is not None:
            self.render(outcome.info, outcome.address)
            return
        reason = outcome.reason.value if outcome.reason else "unknown"
        if outcome.detail:
            reason = f"{reason} ({outcome.detail})"
        self.render_unavailable(outcome.address, reason)

    def _write(self, text: str) -> None:
        print(text, file=self.stream)
        print(file=self.stream)
