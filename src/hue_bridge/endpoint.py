from __future__ import annotations

from dataclasses import dataclass


def api_root_url(address: str) -> str:
    return f"http://{address}/api"


@dataclass(frozen=True)
class BridgeEndpoint:
    address: str
    username: str

    def __post_init__(self) -> None:
        if not isinstance(self.address, str) or not self.address.strip():
            raise ValueError("address must be a non-empty string")
        if not isinstance(self.username, str) or not self.username.strip():
            raise ValueError("username must be a non-empty string")

    @property
    def base_url(self) -> str:
        return f"{api_root_url(self.address)}/{self.username}/"

    def url(self, path: str = "") -> str:
        return build_url(self, path)


def build_url(endpoint: BridgeEndpoint, path: str = "") -> str:
    # Malformed addresses are not rejected here; they fail later in the transport.
    return endpoint.base_url + path.lstrip("/")
