"""Find bridge addresses on the local network.

Discovery only produces address strings for ``Bridge.connect``; it is not
part of the request path.
"""

from __future__ import annotations

import logging
import socket
import time
import urllib.parse
import xml.etree.ElementTree as ET
from dataclasses import dataclass
from typing import Any

import httpx

from hue_bridge.config import DEFAULT_DISCOVERY_URL
from hue_bridge.models import Discovery
from hue_bridge.reconcile import reconcile
from hue_bridge.transport import HueTransport

logger = logging.getLogger(__name__)

SSDP_ADDR = ("239.255.255.250", 1900)
IPBRIDGE_SEARCH_TARGET = "upnp:IpBridge"


@dataclass(frozen=True)
class DiscoveredBridge:
    ip: str
    source: str  # nupnp | ssdp | mdns
    location: str | None = None
    bridge_id: str | None = None
    model: str | None = None
    friendly_name: str | None = None
    raw: dict[str, Any] | None = None


async def discover_nupnp(
    *,
    url: str = DEFAULT_DISCOVERY_URL,
    transport: httpx.AsyncBaseTransport | None = None,
    timeout_seconds: float = 10.0,
) -> list[DiscoveredBridge]:
    """Ask the vendor's cloud which bridges registered from this public IP."""
    async with HueTransport(transport=transport, timeout_seconds=timeout_seconds) as hue:
        raw = await hue.execute("GET", url)
        entries: list[Discovery] = reconcile(hue.read_body_as_text(raw), list[Discovery])
    return [
        DiscoveredBridge(ip=entry.into_ip(), source="nupnp", bridge_id=entry.id, raw=entry.model_dump())
        for entry in entries
    ]


def _parse_httpish_headers(packet: str) -> dict[str, str]:
    headers: dict[str, str] = {}
    for line in packet.splitlines():
        if ":" not in line:
            continue
        k, v = line.split(":", 1)
        headers[k.strip().lower()] = v.strip()
    return headers


def _ip_from_location(location: str) -> str | None:
    try:
        parsed = urllib.parse.urlparse(location)
    except ValueError:
        return None
    return parsed.hostname or None


def _is_bridge_response(packet: str, headers: dict[str, str]) -> bool:
    server = headers.get("server", "").lower()
    return "ipbridge" in server or "hue-bridgeid" in headers or "ipbridge" in packet.lower()


def _find_device(xml_text: str) -> ET.Element | None:
    try:
        root = ET.fromstring(xml_text)
    except ET.ParseError:
        return None
    ns = {"upnp": "urn:schemas-upnp-org:device-1-0"}
    device = root.find(".//upnp:device", ns)
    if device is None:
        device = root.find(".//device")
    return device


def _device_text(device: ET.Element, tag: str) -> str | None:
    el = device.find(f"upnp:{tag}", {"upnp": "urn:schemas-upnp-org:device-1-0"})
    if el is None:
        el = device.find(tag)
    if el is not None and el.text:
        return el.text.strip()
    return None


def _looks_like_hue_description(xml_text: str) -> bool:
    device = _find_device(xml_text)
    if device is None:
        return False
    device_type = _device_text(device, "deviceType") or ""
    if "urn:schemas-upnp-org:device:basic:1" not in device_type.lower():
        return False
    hay = " ".join(
        _device_text(device, tag) or "" for tag in ("friendlyName", "manufacturer", "modelName")
    ).lower()
    return "hue" in hay or "philips" in hay or "signify" in hay


def _extract_upnp_fields(xml_text: str) -> dict[str, str | None]:
    out: dict[str, str | None] = {"model": None, "friendly_name": None}
    device = _find_device(xml_text)
    if device is None:
        return out
    out["model"] = _device_text(device, "modelName")
    out["friendly_name"] = _device_text(device, "friendlyName")
    return out


def ssdp_discover(*, timeout_seconds: float = 5.0, st: str = IPBRIDGE_SEARCH_TARGET) -> list[DiscoveredBridge]:
    # Keep the MAN value unquoted; some bridges ignore the quoted form.
    msg = "\r\n".join(
        [
            "M-SEARCH * HTTP/1.1",
            f"HOST: {SSDP_ADDR[0]}:{SSDP_ADDR[1]}",
            "MAN: ssdp:discover",
            f"MX: {max(1, min(5, int(timeout_seconds)))}",
            f"ST: {st}",
            "",
            "",
        ]
    ).encode("utf-8")

    sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM, socket.IPPROTO_UDP)
    try:
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        sock.settimeout(0.2)
        sock.sendto(msg, SSDP_ADDR)

        deadline = time.time() + timeout_seconds
        found: dict[str, DiscoveredBridge] = {}

        while time.time() < deadline:
            try:
                data, addr = sock.recvfrom(65535)
            except socket.timeout:
                continue
            packet = data.decode("utf-8", "ignore")
            headers = _parse_httpish_headers(packet)
            if not _is_bridge_response(packet, headers):
                continue

            location = headers.get("location")
            ip = (_ip_from_location(location) if location else None) or addr[0]
            found[ip] = DiscoveredBridge(
                ip=ip,
                source="ssdp",
                location=location,
                bridge_id=headers.get("hue-bridgeid"),
                raw={"headers": headers, "from": addr[0]},
            )

        logger.debug("ssdp found %d bridge(s)", len(found))
        return list(found.values())
    finally:
        sock.close()


def mdns_discover(*, timeout_seconds: float = 3.0) -> list[DiscoveredBridge]:
    # zeroconf is the optional "mdns" extra.
    try:
        from zeroconf import ServiceBrowser, ServiceStateChange, Zeroconf
    except ImportError:
        logger.info("zeroconf not installed; skipping mDNS discovery")
        return []

    found: dict[str, DiscoveredBridge] = {}

    def on_service_state_change(zeroconf: Zeroconf, service_type: str, name: str, state_change: ServiceStateChange):
        if state_change is not ServiceStateChange.Added:
            return
        info = zeroconf.get_service_info(service_type, name, timeout=1000)
        if not info or not info.addresses:
            return
        ip = socket.inet_ntoa(info.addresses[0])
        found[ip] = DiscoveredBridge(ip=ip, source="mdns", raw={"name": name, "port": info.port})

    zc = Zeroconf()
    try:
        _ = ServiceBrowser(zc, "_hue._tcp.local.", handlers=[on_service_state_change])
        time.sleep(timeout_seconds)
    finally:
        zc.close()

    return list(found.values())


async def enrich_with_description(
    bridge: DiscoveredBridge, *, transport: httpx.AsyncBaseTransport | None = None
) -> DiscoveredBridge:
    """Fill model and name from the bridge's ``description.xml`` when it has one."""
    location = bridge.location or f"http://{bridge.ip}/description.xml"
    try:
        async with httpx.AsyncClient(follow_redirects=True, timeout=2.0, transport=transport) as client:
            resp = await client.get(location)
    except httpx.HTTPError as exc:
        logger.debug("could not fetch %s: %s", location, exc)
        return bridge
    if resp.status_code != 200 or not _looks_like_hue_description(resp.text):
        return bridge
    fields = _extract_upnp_fields(resp.text)
    return DiscoveredBridge(
        ip=bridge.ip,
        source=bridge.source,
        location=location,
        bridge_id=bridge.bridge_id,
        model=fields.get("model"),
        friendly_name=fields.get("friendly_name"),
        raw=bridge.raw,
    )


def merge_discovered(bridges: list[DiscoveredBridge]) -> list[DiscoveredBridge]:
    # One entry per IP; prefer entries that know their description location.
    by_ip: dict[str, DiscoveredBridge] = {}
    for b in bridges:
        prev = by_ip.get(b.ip)
        if not prev or (not prev.location and b.location):
            by_ip[b.ip] = b
    return list(by_ip.values())
