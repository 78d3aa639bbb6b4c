"""Turn bridge response bodies into values or typed errors.

The bridge answers reads with the requested object itself and writes with a
list of ``{"success": ...}`` / ``{"error": {...}}`` entries. Which shape comes
back is not fully determined by the HTTP method, so the direct shape is tried
first and the envelope second.
"""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import Any, Iterable

from pydantic import TypeAdapter, ValidationError

from hue_bridge.errors import HueDecodeError, HueEmptyResponseError
from hue_bridge.outcome import RpcOutcome, outcome_type

logger = logging.getLogger(__name__)


@lru_cache(maxsize=None)
def _adapter(target_type: Any) -> TypeAdapter:
    return TypeAdapter(target_type)


def _envelope_type(item_type: Any) -> Any:
    return list[outcome_type(item_type)]


def reconcile(body: str, target_type: Any) -> Any:
    try:
        return _adapter(target_type).validate_json(body)
    except ValidationError as exc:
        direct_error = exc

    logger.debug("body is not a direct %r, trying outcome envelope", target_type)
    try:
        outcomes = _adapter(_envelope_type(target_type)).validate_json(body)
    except ValidationError:
        logger.warning("unexpected response shape for %r: %.200s", target_type, body)
        # The direct-shape error is the one callers can act on.
        raise HueDecodeError(f"Unexpected response body for {target_type!r}", body=body) from direct_error

    if not outcomes:
        raise HueEmptyResponseError()
    return outcomes[0].into_result()


def extract(outcomes: Iterable[RpcOutcome]) -> list[Any]:
    # Stops at the first failure. The bridge may still have applied later
    # items; nothing after the failure is reported.
    results: list[Any] = []
    for outcome in outcomes:
        results.append(outcome.into_result())
    return results


def reconcile_and_extract(body: str, item_type: Any) -> list[Any]:
    return extract(reconcile(body, _envelope_type(item_type)))
