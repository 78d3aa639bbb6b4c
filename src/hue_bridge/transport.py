from __future__ import annotations

import logging
from dataclasses import dataclass

import httpx

from hue_bridge.errors import HueEncodingError, HueTransportError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RawResponse:
    status_code: int
    content: bytes


class HueTransport:
    def __init__(
        self,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
        timeout_seconds: float = 10.0,
    ) -> None:
        self._transport = transport
        self._timeout_seconds = timeout_seconds
        self._client: httpx.AsyncClient | None = None

    async def __aenter__(self) -> "HueTransport":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    async def close(self) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None

    def _get_client(self) -> httpx.AsyncClient:
        if self._client:
            return self._client
        self._client = httpx.AsyncClient(
            timeout=httpx.Timeout(self._timeout_seconds, connect=min(3.0, self._timeout_seconds)),
            transport=self._transport,
        )
        return self._client

    async def execute(self, method: str, url: str, *, body: bytes | None = None) -> RawResponse:
        client = self._get_client()
        headers = {"Content-Type": "application/json"} if body is not None else None
        try:
            resp = await client.request(method, url, content=body, headers=headers)
        except httpx.TransportError as exc:
            logger.warning("%s %s failed: %s", method, url, exc)
            raise HueTransportError(str(exc)) from exc

        logger.debug("%s %s -> %s", method, url, resp.status_code)
        if resp.status_code >= 400:
            # The body is still reconciled; the bridge puts its own errors there.
            logger.warning("%s %s returned HTTP %s", method, url, resp.status_code)
        return RawResponse(status_code=resp.status_code, content=resp.content)

    @staticmethod
    def read_body_as_text(raw: RawResponse) -> str:
        try:
            return raw.content.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise HueEncodingError(f"Response body is not valid UTF-8: {exc}") from exc
