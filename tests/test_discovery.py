import socket

import httpx
import pytest

from hue_bridge import discovery
from hue_bridge.discovery import (
    DiscoveredBridge,
    _extract_upnp_fields,
    _ip_from_location,
    _is_bridge_response,
    _looks_like_hue_description,
    _parse_httpish_headers,
    discover_nupnp,
    enrich_with_description,
    merge_discovered,
    ssdp_discover,
)
from hue_bridge.errors import HueDecodeError

HUE_XML = """<?xml version="1.0" encoding="UTF-8"?>
<root xmlns="urn:schemas-upnp-org:device-1-0">
  <device>
    <deviceType>urn:schemas-upnp-org:device:Basic:1</deviceType>
    <friendlyName>Hue Bridge (192.168.1.29)</friendlyName>
    <manufacturer>Signify</manufacturer>
    <modelName>Philips hue bridge 2015</modelName>
    <UDN>uuid:abc</UDN>
  </device>
</root>
"""


def test_parse_httpish_headers_lowercases_keys():
    packet = "HTTP/1.1 200 OK\r\nST: upnp:rootdevice\r\nLOCATION: http://1.2.3.4/description.xml\r\nhue-bridgeid: 001788FFFE100491\r\n\r\n"
    headers = _parse_httpish_headers(packet)
    assert headers["st"] == "upnp:rootdevice"
    assert headers["location"] == "http://1.2.3.4/description.xml"
    assert _is_bridge_response(packet, headers) is True


def test_non_bridge_ssdp_response_is_ignored():
    packet = "HTTP/1.1 200 OK\r\nSERVER: Linux/3.14 UPnP/1.0 MediaServer/1.0\r\n\r\n"
    assert _is_bridge_response(packet, _parse_httpish_headers(packet)) is False


def test_ip_from_location_extracts_hostname():
    assert _ip_from_location("http://192.168.1.2:80/description.xml") == "192.168.1.2"


def test_looks_like_hue_description_accepts_hue_metadata():
    assert _looks_like_hue_description(HUE_XML) is True


def test_looks_like_hue_description_rejects_non_hue():
    xml = HUE_XML.replace("Hue Bridge", "Router").replace("Signify", "Acme").replace("Philips hue bridge", "Box")
    assert _looks_like_hue_description(xml) is False
    assert _looks_like_hue_description("<not xml") is False


def test_extract_upnp_fields_parses_default_namespace():
    fields = _extract_upnp_fields(HUE_XML)
    assert fields["friendly_name"] == "Hue Bridge (192.168.1.29)"
    assert fields["model"] == "Philips hue bridge 2015"


@pytest.mark.asyncio
async def test_discover_nupnp_returns_addresses():
    async def handler(request: httpx.Request) -> httpx.Response:
        assert str(request.url) == "https://discovery.test/"
        return httpx.Response(200, json=[{"id": "001788fffe100491", "internalipaddress": "192.168.2.23", "port": 443}])

    bridges = await discover_nupnp(url="https://discovery.test/", transport=httpx.MockTransport(handler))
    assert [b.ip for b in bridges] == ["192.168.2.23"]
    assert bridges[0].bridge_id == "001788fffe100491"
    assert bridges[0].source == "nupnp"


@pytest.mark.asyncio
async def test_discover_nupnp_rejects_unexpected_body():
    async def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"error": "rate limited"})

    with pytest.raises(HueDecodeError):
        await discover_nupnp(url="https://discovery.test/", transport=httpx.MockTransport(handler))


@pytest.mark.asyncio
async def test_enrich_with_description_fills_metadata():
    async def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/description.xml"
        return httpx.Response(200, text=HUE_XML)

    bridge = DiscoveredBridge(ip="192.168.1.29", source="nupnp")
    enriched = await enrich_with_description(bridge, transport=httpx.MockTransport(handler))
    assert enriched.friendly_name == "Hue Bridge (192.168.1.29)"
    assert enriched.location == "http://192.168.1.29/description.xml"


def test_merge_discovered_prefers_entries_with_location():
    merged = merge_discovered(
        [
            DiscoveredBridge(ip="10.0.0.2", source="nupnp"),
            DiscoveredBridge(ip="10.0.0.2", source="ssdp", location="http://10.0.0.2/description.xml"),
            DiscoveredBridge(ip="10.0.0.3", source="mdns"),
        ]
    )
    assert {b.ip: b.source for b in merged} == {"10.0.0.2": "ssdp", "10.0.0.3": "mdns"}


class FakeSocket:
    """UDP socket stand-in: records the datagram sent and replays queued replies."""

    instances: list["FakeSocket"] = []

    def __init__(self, *args) -> None:
        self.sent: list[tuple[bytes, tuple[str, int]]] = []
        self.replies = [
            (
                b"HTTP/1.1 200 OK\r\n"
                b"LOCATION: http://192.168.1.29:80/description.xml\r\n"
                b"SERVER: Linux/3.14.0 UPnP/1.0 IpBridge/1.48.0\r\n"
                b"hue-bridgeid: 001788FFFE100491\r\n"
                b"ST: upnp:IpBridge\r\n\r\n",
                ("192.168.1.29", 1900),
            )
        ]
        self.closed = False
        FakeSocket.instances.append(self)

    def setsockopt(self, *args) -> None:
        pass

    def settimeout(self, value: float) -> None:
        pass

    def sendto(self, data: bytes, addr: tuple[str, int]) -> None:
        self.sent.append((data, addr))

    def recvfrom(self, bufsize: int):
        if self.replies:
            return self.replies.pop(0)
        raise socket.timeout()

    def close(self) -> None:
        self.closed = True


def test_ssdp_discover_searches_for_ip_bridges(monkeypatch):
    FakeSocket.instances = []
    monkeypatch.setattr(discovery.socket, "socket", FakeSocket)

    bridges = ssdp_discover(timeout_seconds=0.05)

    sock = FakeSocket.instances[0]
    data, addr = sock.sent[0]
    assert addr == ("239.255.255.250", 1900)
    assert data.startswith(b"M-SEARCH * HTTP/1.1\r\n")
    assert b"ST: upnp:IpBridge\r\n" in data
    assert b"MAN: ssdp:discover\r\n" in data
    assert sock.closed is True
    assert [(b.ip, b.bridge_id, b.source) for b in bridges] == [("192.168.1.29", "001788FFFE100491", "ssdp")]
