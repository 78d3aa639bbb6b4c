from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import os


DEFAULT_DEVICETYPE = "hue-bridge-client#python"
DEFAULT_DISCOVERY_URL = "https://discovery.meethue.com/"


def _split_csv(value: str | None) -> list[str]:
    if not value:
        return []
    return [item.strip() for item in value.split(",") if item.strip()]


@dataclass(frozen=True)
class ClientConfig:
    bridge_host: Optional[str]
    username: Optional[str]
    devicetype: str
    request_timeout_seconds: float
    command_delay_ms: int
    discovery_url: str
    log_level: str

    @staticmethod
    def from_env() -> "ClientConfig":
        hosts = _split_csv(os.getenv("HUE_BRIDGE_HOST"))
        return ClientConfig(
            bridge_host=hosts[0] if hosts else None,
            username=os.getenv("HUE_USERNAME") or None,
            devicetype=os.getenv("HUE_DEVICETYPE", DEFAULT_DEVICETYPE),
            request_timeout_seconds=float(os.getenv("HUE_REQUEST_TIMEOUT_SECONDS", "10")),
            command_delay_ms=int(os.getenv("HUE_COMMAND_DELAY_MS", "50")),
            discovery_url=os.getenv("HUE_DISCOVERY_URL", DEFAULT_DISCOVERY_URL),
            log_level=os.getenv("HUE_LOG_LEVEL", "INFO").upper(),
        )
