from __future__ import annotations

import logging
from typing import Any, ClassVar, Generic, NoReturn, TypeVar, Union

from pydantic import BaseModel, ConfigDict

from hue_bridge.errors import HueBridgeError

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Changes confirmed by a write call; keys are resource addresses such as
# "/lights/1/state/on", so the shape differs per endpoint.
SuccessVec = list[dict[str, Any]]


class ErrorDetail(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: int
    address: str = ""
    description: str = ""


class Success(BaseModel, Generic[T]):
    """One ``{"success": ...}`` entry of the bridge's write envelope."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    is_success: ClassVar[bool] = True

    success: T

    def into_result(self) -> T:
        return self.success


class Failure(BaseModel):
    """One ``{"error": {...}}`` entry of the bridge's write envelope."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    is_success: ClassVar[bool] = False

    error: ErrorDetail

    def into_result(self) -> NoReturn:
        logger.info(
            "bridge rejected request: type=%s address=%s description=%s",
            self.error.type,
            self.error.address,
            self.error.description,
        )
        raise HueBridgeError(self.error)


RpcOutcome = Union[Success[Any], Failure]


def outcome_type(item_type: Any) -> Any:
    return Union[Success[item_type], Failure]
