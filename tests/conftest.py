import pytest

from hue_bridge.config import ClientConfig


@pytest.fixture
def config() -> ClientConfig:
    return ClientConfig(
        bridge_host="bridge.test",
        username="user1",
        devicetype="hue-bridge-client#tests",
        request_timeout_seconds=10.0,
        command_delay_ms=0,
        discovery_url="https://discovery.test/",
        log_level="DEBUG",
    )
