from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Annotated, Any

import yaml
from pydantic import field_validator
from pydantic_settings import BaseSettings, NoDecode

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    # --- app ---
    app_name: str = "healthnet"
    log_level: str = "INFO"

    # --- responder ---
    listen_host: str = "0.0.0.0"
    listen_port: int = 9999
    cpu_sample_interval: float = 1.0  # seconds the per-core CPU sample spans

    # --- requester ---
    servers: Annotated[list[str], NoDecode] = ["127.0.0.1:9999"]
    servers_file: str | None = None  # YAML; replaces ``servers`` when set
    dial_timeout: float = 5.0
    read_timeout: float = 10.0
    max_payload_bytes: int = 1 << 20

    model_config = {"env_file": ".env", "env_prefix": "HEALTHNET_"}

    @field_validator("servers", mode="before")
    @classmethod
    def _split_servers(cls, value: Any) -> Any:
        # env accepts "a:1,b:2" as well as a JSON list
        if isinstance(value, str):
            if value.strip().startswith("["):
                return json.loads(value)
            return [item.strip() for item in value.split(",") if item.strip()]
        return value


def load_servers_file(path: str | Path) -> list[str]:
    """Read ``servers:`` (or a bare list) of ``host:port`` strings from YAML."""
    raw = yaml.safe_load(Path(path).read_text())
    entries = raw.get("servers", []) if isinstance(raw, dict) else raw
    if not isinstance(entries, list):
        raise ValueError(f"{path}: expected a list of servers")
    servers: list[str] = []
    for entry in entries:
        address = str(entry).strip()
        if not address:
            logger.warning("Skipping empty server entry in %s", path)
            continue
        servers.append(address)
    return servers


def load_server_addresses(settings: Settings) -> list[str]:
    if settings.servers_file:
        return load_servers_file(settings.servers_file)
    return [s.strip() for s in settings.servers if s.strip()]


settings = Settings()
