from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Callable, TypeVar

from healthnet.models import StorageInfo, SystemInfo

logger = logging.getLogger(__name__)

T = TypeVar("T")


class BaseProbe(ABC):
    """Abstract base for local metrics probes.

    Subclasses implement one sampler per metric. The base class composes them
    into a snapshot on a best-effort basis: a sampler that raises leaves its
    field at the zero value and the remaining samplers still run.
    """

    name: str = "base"

    # ── samplers ────────────────────────────────────────

    @abstractmethod
    def sample_hostname(self) -> str: ...

    @abstractmethod
    def sample_ip_address(self) -> str: ...

    @abstractmethod
    def sample_cpu_load_per_core(self) -> list[float]: ...

    @abstractmethod
    def sample_ram_usage_percent(self) -> float: ...

    @abstractmethod
    def sample_storage_usage(self) -> list[StorageInfo]: ...

    @abstractmethod
    def sample_uptime_ns(self) -> int: ...

    # ── snapshot ────────────────────────────────────────

    def snapshot(self) -> SystemInfo:
        return SystemInfo(
            hostname=self._best_effort("hostname", self.sample_hostname),
            ip_address=self._best_effort("ip_address", self.sample_ip_address),
            cpu_usage=self._best_effort("cpu_usage", self.sample_cpu_load_per_core),
            ram_usage=self._best_effort("ram_usage", self.sample_ram_usage_percent),
            storage=self._best_effort("storage", self.sample_storage_usage),
            uptime_ns=self._best_effort("uptime_ns", self.sample_uptime_ns),
        )

    async def collect(self) -> SystemInfo:
        """Take a snapshot off the event loop; samplers may block."""
        return await asyncio.to_thread(self.snapshot)

    # ── internals ───────────────────────────────────────

    def _best_effort(self, field: str, sampler: Callable[[], T]) -> T:
        """Sample one field and check it alone; any failure yields the field's zero value."""
        try:
            value = sampler()
            SystemInfo.model_validate({field: value})
        except Exception as exc:
            logger.warning("Probe [%s] failed to sample %s: %s", self.name, field, exc)
            return SystemInfo.model_fields[field].get_default(call_default_factory=True)
        return value
