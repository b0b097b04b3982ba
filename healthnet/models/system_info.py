from __future__ import annotations

from datetime import timedelta
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, model_validator

UINT64_MAX = 2**64 - 1
INT64_MIN = -(2**63)
INT64_MAX = 2**63 - 1


class StorageInfo(BaseModel):
    """Usage of one mounted volume, in bytes."""

    model_config = ConfigDict(frozen=True)

    mountpoint: str = ""
    total: int = Field(default=0, ge=0, le=UINT64_MAX)
    used: int = Field(default=0, ge=0, le=UINT64_MAX)
    free: int = Field(default=0, ge=0, le=UINT64_MAX)


class SystemInfo(BaseModel):
    """Point-in-time snapshot of a host's health.

    Built once by the responding side's probe, sent over the wire and
    rendered by the requesting side. Never mutated after construction.
    """

    model_config = ConfigDict(frozen=True)

    hostname: str = ""
    ip_address: str = ""
    cpu_usage: tuple[Annotated[float, Field(ge=0, le=100)], ...] = ()
    ram_usage: float = Field(default=0.0, ge=0, le=100)
    storage: tuple[StorageInfo, ...] = ()
    uptime_ns: int = Field(default=0, ge=INT64_MIN, le=INT64_MAX)

    @model_validator(mode="after")
    def _unique_mountpoints(self) -> SystemInfo:
        seen: set[str] = set()
        for storage in self.storage:
            if storage.mountpoint in seen:
                raise ValueError(f"duplicate mountpoint {storage.mountpoint!r}")
            seen.add(storage.mountpoint)
        return self

    @property
    def uptime(self) -> timedelta:
        return timedelta(microseconds=self.uptime_ns // 1000)

    @property
    def core_count(self) -> int:
        return len(self.cpu_usage)
