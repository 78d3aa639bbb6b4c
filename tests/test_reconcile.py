from typing import Any

import pytest
from pydantic import ValidationError

from hue_bridge.errors import HueBridgeError, HueDecodeError, HueEmptyResponseError
from hue_bridge.models import GroupId, Light
from hue_bridge.outcome import ErrorDetail, Failure, Success
from hue_bridge.reconcile import extract, reconcile, reconcile_and_extract


LIGHT_BODY = '{"name": "Desk", "state": {"on": true, "bri": 144, "reachable": true}, "type": "Extended color light"}'


def test_direct_shape_returns_object():
    assert reconcile('{"id": 7}', GroupId) == GroupId(id=7)


def test_direct_shape_wins_over_envelope():
    # A list of dicts is a valid direct value, so it must not be unwrapped.
    body = '[{"success": {"a": 1}}]'
    assert reconcile(body, list[dict[str, Any]]) == [{"success": {"a": 1}}]


def test_read_model_is_decoded_directly():
    light = reconcile(LIGHT_BODY, Light)
    assert light.name == "Desk"
    assert light.state.bri == 144


def test_single_success_envelope_is_unwrapped():
    assert reconcile('[{"success": {"id": "3"}}]', GroupId) == GroupId(id=3)


def test_only_first_outcome_is_used_for_single_value():
    body = '[{"success": {"id": "3"}}, {"error": {"type": 3, "address": "/groups", "description": "x"}}]'
    assert reconcile(body, GroupId) == GroupId(id=3)


def test_write_success_envelope_extracts_changes():
    body = '[{"success": {"lights/1/state/on": true}}]'
    assert reconcile_and_extract(body, dict[str, Any]) == [{"lights/1/state/on": True}]


def test_error_envelope_raises_bridge_error_with_detail_unmodified():
    body = '[{"error": {"type": 1, "address": "/lights/9", "description": "not available"}}]'
    with pytest.raises(HueBridgeError) as exc:
        reconcile(body, Light)
    assert exc.value.kind == "bridge"
    assert exc.value.detail == ErrorDetail(type=1, address="/lights/9", description="not available")
    assert exc.value.type == 1
    assert exc.value.address == "/lights/9"
    assert exc.value.description == "not available"


def test_empty_envelope_for_single_value_is_empty_error():
    with pytest.raises(HueEmptyResponseError) as exc:
        reconcile("[]", GroupId)
    assert exc.value.kind == "empty"


def test_empty_envelope_for_write_call_yields_no_changes():
    assert reconcile_and_extract("[]", dict[str, Any]) == []


def test_malformed_body_is_decode_error_from_direct_attempt():
    with pytest.raises(HueDecodeError) as exc:
        reconcile("not json", GroupId)
    assert exc.value.kind == "decode"
    assert exc.value.body == "not json"
    assert isinstance(exc.value.__cause__, ValidationError)
    assert exc.value.__cause__.title == "GroupId"


def test_malformed_body_for_write_call_is_decode_error():
    with pytest.raises(HueDecodeError):
        reconcile_and_extract("not json", dict[str, Any])


def test_wrong_object_shape_is_decode_error():
    with pytest.raises(HueDecodeError):
        reconcile('{"unexpected": true}', Light)


def test_outcome_with_both_success_and_error_is_rejected():
    body = '[{"success": {"id": "1"}, "error": {"type": 1, "address": "/", "description": "x"}}]'
    with pytest.raises(HueDecodeError):
        reconcile(body, GroupId)


def test_mixed_write_response_stops_at_first_error():
    body = (
        '[{"success": {"/lights/1/state/on": true}},'
        ' {"success": {"/lights/1/state/bri": 200}},'
        ' {"error": {"type": 201, "address": "/lights/1/state/hue", "description": "device is off"}}]'
    )
    with pytest.raises(HueBridgeError) as exc:
        reconcile_and_extract(body, dict[str, Any])
    assert exc.value.type == 201
    assert exc.value.address == "/lights/1/state/hue"


def _ok(value):
    return Success[Any](success=value)


def _err(type_: int, address: str = "/x"):
    return Failure(error=ErrorDetail(type=type_, address=address, description=f"error {type_}"))


def test_extract_preserves_order():
    assert extract([_ok(1), _ok(2), _ok(3)]) == [1, 2, 3]


def test_extract_empty_is_empty_list():
    assert extract([]) == []


@pytest.mark.parametrize("index", [0, 1, 3])
def test_extract_returns_first_error_regardless_of_position(index):
    outcomes = [_ok(i) for i in range(4)]
    outcomes[index] = _err(100 + index, address=f"/item/{index}")
    if index < 3:
        outcomes.append(_err(999))
    with pytest.raises(HueBridgeError) as exc:
        extract(outcomes)
    assert exc.value.type == 100 + index
    assert exc.value.address == f"/item/{index}"


def test_outcome_variants_report_success_flag():
    assert _ok(1).is_success is True
    assert _err(1).is_success is False
