from __future__ import annotations

from typing import TYPE_CHECKING, Literal

from hue_bridge.error_registry import BridgeErrorType, lookup

if TYPE_CHECKING:
    from hue_bridge.outcome import ErrorDetail


ErrorKind = Literal["transport", "encoding", "decode", "bridge", "empty"]


class HueError(Exception):
    kind: ErrorKind


class HueTransportError(HueError):
    kind: ErrorKind = "transport"


class HueEncodingError(HueError):
    kind: ErrorKind = "encoding"


class HueDecodeError(HueError):
    kind: ErrorKind = "decode"

    def __init__(self, message: str, *, body: str | None = None) -> None:
        super().__init__(message)
        self.body = body


class HueEmptyResponseError(HueError):
    kind: ErrorKind = "empty"

    def __init__(self, message: str = "Malformed response: empty outcome list") -> None:
        super().__init__(message)


class HueBridgeError(HueError):
    """The bridge rejected the request and said why.

    ``detail`` is kept exactly as the bridge sent it.
    """

    kind: ErrorKind = "bridge"

    def __init__(self, detail: "ErrorDetail") -> None:
        super().__init__(f"Bridge error {detail.type} at {detail.address!r}: {detail.description}")
        self.detail = detail

    @property
    def type(self) -> int:
        return self.detail.type

    @property
    def address(self) -> str:
        return self.detail.address

    @property
    def description(self) -> str:
        return self.detail.description

    @property
    def error_type(self) -> BridgeErrorType | None:
        entry = lookup(self.detail.type)
        return entry.error_type if entry else None

    @property
    def retryable(self) -> bool:
        entry = lookup(self.detail.type)
        return bool(entry and entry.retryable)
