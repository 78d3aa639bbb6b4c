from __future__ import annotations

import asyncio
import logging
import time

import httpx

from hue_bridge.endpoint import api_root_url
from hue_bridge.error_registry import BridgeErrorType
from hue_bridge.errors import HueBridgeError
from hue_bridge.models import User, encode_payload
from hue_bridge.reconcile import reconcile
from hue_bridge.transport import HueTransport

logger = logging.getLogger(__name__)


async def register_user(
    address: str,
    devicetype: str,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
    timeout_seconds: float = 10.0,
) -> str:
    """Ask the bridge for a new username.

    Until the link button on the bridge has been pressed this raises
    ``HueBridgeError`` with ``error_type == BridgeErrorType.LINK_BUTTON_NOT_PRESSED``.
    """
    if not address:
        raise ValueError("address must be a non-empty string")
    body = encode_payload({"devicetype": devicetype})
    async with HueTransport(transport=transport, timeout_seconds=timeout_seconds) as hue:
        raw = await hue.execute("POST", api_root_url(address), body=body)
        user: User = reconcile(hue.read_body_as_text(raw), User)
    logger.info("registered new user on %s", address)
    return user.username


async def pair(
    address: str,
    devicetype: str,
    *,
    timeout_seconds: float = 60.0,
    interval_seconds: float = 1.5,
    transport: httpx.AsyncBaseTransport | None = None,
) -> str:
    """Keep calling ``register_user`` until the link button is pressed.

    Other errors propagate immediately. If the deadline passes the last
    link-button error is raised.
    """
    deadline = time.monotonic() + timeout_seconds
    attempt = 0
    while True:
        attempt += 1
        try:
            return await register_user(address, devicetype, transport=transport)
        except HueBridgeError as err:
            if err.error_type is not BridgeErrorType.LINK_BUTTON_NOT_PRESSED:
                raise
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                raise
            logger.info("[%d] link button not pressed yet, retrying (%.0fs left)", attempt, remaining)
            await asyncio.sleep(min(interval_seconds, remaining))
