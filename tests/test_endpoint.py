import pytest

from hue_bridge.endpoint import BridgeEndpoint, api_root_url, build_url


def test_build_url_joins_address_username_and_path():
    endpoint = BridgeEndpoint(address="192.168.1.2", username="abc")
    assert build_url(endpoint, "lights/3/state") == "http://192.168.1.2/api/abc/lights/3/state"
    assert endpoint.url("scenes/x/lightstates/2") == "http://192.168.1.2/api/abc/scenes/x/lightstates/2"


def test_build_url_strips_leading_slash_and_allows_empty_path():
    endpoint = BridgeEndpoint(address="bridge.test", username="abc")
    assert endpoint.url("/groups/1/action") == "http://bridge.test/api/abc/groups/1/action"
    assert endpoint.url() == "http://bridge.test/api/abc/"


def test_api_root_url():
    assert api_root_url("bridge.test") == "http://bridge.test/api"


@pytest.mark.parametrize("address,username", [("", "abc"), ("bridge.test", ""), ("  ", "abc")])
def test_endpoint_rejects_empty_strings(address, username):
    with pytest.raises(ValueError):
        BridgeEndpoint(address=address, username=username)


def test_endpoint_is_immutable():
    endpoint = BridgeEndpoint(address="bridge.test", username="abc")
    with pytest.raises(AttributeError):
        endpoint.address = "other"  # type: ignore[misc]
