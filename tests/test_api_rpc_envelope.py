"""Tests for nanorpc.api.rpc.envelope."""

import pytest

from nanorpc.api.rpc.envelope import (
    FRESHNESS_WINDOW_MS,
    check_freshness,
    parse_envelope,
    parse_params,
    parse_request_id,
    parse_timestamp,
)
from nanorpc.utils.exceptions import (
    MissingArgumentsError,
    MissingIDError,
    MissingTimestampError,
    TooEarlyError,
)


@pytest.mark.parametrize(
    "value,expected",
    [("abc", "abc"), ("", ""), (42, "42"), (0, "0"), (-7, "-7"), (42.0, "42"), (1.5, "1.5")],
)
def test_parse_request_id(value, expected):
    assert parse_request_id(value) == expected


@pytest.mark.parametrize("value", [None, True, False, [1], {"a": 1}])
def test_parse_request_id_rejects(value):
    with pytest.raises(MissingIDError):
        parse_request_id(value)


def test_parse_params_list_used_as_is():
    assert parse_params({"params": [1, "a", None]}) == (1, "a", None)


def test_parse_params_null_means_no_arguments():
    assert parse_params({"params": None}) == ()


@pytest.mark.parametrize("value", [5, "x", {"k": 1}, True])
def test_parse_params_single_value_wrapped(value):
    assert parse_params({"params": value}) == (value,)


def test_parse_params_arguments_alias():
    assert parse_params({"arguments": [2, 3]}) == (2, 3)


def test_parse_params_prefers_params_over_alias():
    assert parse_params({"params": [1], "arguments": [2]}) == (1,)


def test_parse_params_missing():
    with pytest.raises(MissingArgumentsError) as exc_info:
        parse_params({"id": "1"})
    assert exc_info.value.message == "Missing Arguments"


@pytest.mark.parametrize(
    "value,expected",
    [(1000, 1000), (1000.9, 1000), ("1000", 1000), (" 1000ms", 1000), ("-5", -5)],
)
def test_parse_timestamp(value, expected):
    assert parse_timestamp(value) == expected


@pytest.mark.parametrize("value", [None, "", "abc", True, float("nan"), float("inf"), [1]])
def test_parse_timestamp_rejects(value):
    with pytest.raises(MissingTimestampError):
        parse_timestamp(value)


def test_check_freshness_boundary_inclusive():
    now = 1_000_000
    check_freshness(now - FRESHNESS_WINDOW_MS, now)
    check_freshness(now + FRESHNESS_WINDOW_MS, now)
    with pytest.raises(TooEarlyError):
        check_freshness(now - FRESHNESS_WINDOW_MS - 1, now)
    with pytest.raises(TooEarlyError):
        check_freshness(now + FRESHNESS_WINDOW_MS + 1, now)


def test_check_freshness_custom_window():
    check_freshness(100, 110, window_ms=10)
    with pytest.raises(TooEarlyError) as exc_info:
        check_freshness(100, 111, window_ms=10)
    assert exc_info.value.status == 425
    assert exc_info.value.message == "Time difference is too large"


def test_parse_envelope_success():
    env = parse_envelope("add", {"id": 7, "params": [2, 3], "timestamp": "500"}, now=600)
    assert env.id == "7"
    assert env.method == "add"
    assert env.params == (2, 3)
    assert env.timestamp == 500
    assert env.to_dict() == {"id": "7", "method": "add", "params": [2, 3], "timestamp": 500}


def test_parse_envelope_check_order_id_before_params_before_timestamp():
    with pytest.raises(MissingIDError):
        parse_envelope("m", {}, now=0)
    with pytest.raises(MissingArgumentsError):
        parse_envelope("m", {"id": "1"}, now=0)
    with pytest.raises(MissingTimestampError):
        parse_envelope("m", {"id": "1", "params": []}, now=0)
    with pytest.raises(TooEarlyError):
        parse_envelope("m", {"id": "1", "params": [], "timestamp": 0}, now=FRESHNESS_WINDOW_MS + 1)
