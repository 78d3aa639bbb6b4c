from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum


class BridgeErrorType(IntEnum):
    UNAUTHORIZED_USER = 1
    BODY_CONTAINS_INVALID_JSON = 2
    RESOURCE_NOT_AVAILABLE = 3
    METHOD_NOT_AVAILABLE = 4
    MISSING_PARAMETERS = 5
    PARAMETER_NOT_AVAILABLE = 6
    INVALID_PARAMETER_VALUE = 7
    PARAMETER_NOT_MODIFIABLE = 8
    TOO_MANY_ITEMS_IN_LIST = 11
    PORTAL_CONNECTION_REQUIRED = 12
    LINK_BUTTON_NOT_PRESSED = 101
    DHCP_CANNOT_BE_DISABLED = 110
    INVALID_UPDATESTATE = 111
    DEVICE_IS_OFF = 201
    GROUP_TABLE_FULL = 301
    DEVICE_GROUP_TABLE_FULL = 302
    SCENE_COULD_NOT_BE_CREATED = 402
    SCENE_BUFFER_FULL = 403
    INTERNAL_ERROR = 901


@dataclass(frozen=True)
class BridgeErrorEntry:
    error_type: BridgeErrorType
    retryable: bool


# Error types documented for the v1 (CLIP) API. Retryable means the same request
# may succeed later without changes, e.g. after the user presses the link button.
BRIDGE_ERROR_REGISTRY: tuple[BridgeErrorEntry, ...] = (
    BridgeErrorEntry(error_type=BridgeErrorType.UNAUTHORIZED_USER, retryable=False),
    BridgeErrorEntry(error_type=BridgeErrorType.BODY_CONTAINS_INVALID_JSON, retryable=False),
    BridgeErrorEntry(error_type=BridgeErrorType.RESOURCE_NOT_AVAILABLE, retryable=False),
    BridgeErrorEntry(error_type=BridgeErrorType.METHOD_NOT_AVAILABLE, retryable=False),
    BridgeErrorEntry(error_type=BridgeErrorType.MISSING_PARAMETERS, retryable=False),
    BridgeErrorEntry(error_type=BridgeErrorType.PARAMETER_NOT_AVAILABLE, retryable=False),
    BridgeErrorEntry(error_type=BridgeErrorType.INVALID_PARAMETER_VALUE, retryable=False),
    BridgeErrorEntry(error_type=BridgeErrorType.PARAMETER_NOT_MODIFIABLE, retryable=False),
    BridgeErrorEntry(error_type=BridgeErrorType.TOO_MANY_ITEMS_IN_LIST, retryable=False),
    BridgeErrorEntry(error_type=BridgeErrorType.PORTAL_CONNECTION_REQUIRED, retryable=True),
    BridgeErrorEntry(error_type=BridgeErrorType.LINK_BUTTON_NOT_PRESSED, retryable=True),
    BridgeErrorEntry(error_type=BridgeErrorType.DHCP_CANNOT_BE_DISABLED, retryable=False),
    BridgeErrorEntry(error_type=BridgeErrorType.INVALID_UPDATESTATE, retryable=False),
    BridgeErrorEntry(error_type=BridgeErrorType.DEVICE_IS_OFF, retryable=True),
    BridgeErrorEntry(error_type=BridgeErrorType.GROUP_TABLE_FULL, retryable=False),
    BridgeErrorEntry(error_type=BridgeErrorType.DEVICE_GROUP_TABLE_FULL, retryable=False),
    BridgeErrorEntry(error_type=BridgeErrorType.SCENE_COULD_NOT_BE_CREATED, retryable=False),
    BridgeErrorEntry(error_type=BridgeErrorType.SCENE_BUFFER_FULL, retryable=False),
    BridgeErrorEntry(error_type=BridgeErrorType.INTERNAL_ERROR, retryable=True),
)

_BY_CODE: dict[int, BridgeErrorEntry] = {int(e.error_type): e for e in BRIDGE_ERROR_REGISTRY}


def lookup(code: int) -> BridgeErrorEntry | None:
    return _BY_CODE.get(code)
