"""Envelope parsing: id / params / timestamp coercion and the freshness window."""

from __future__ import annotations

import math
import re
from typing import Any, Mapping

from nanorpc.api.rpc.context_models import RpcEnvelope
from nanorpc.utils.exceptions import (
    MissingArgumentsError,
    MissingIDError,
    MissingTimestampError,
    TooEarlyError,
)

FRESHNESS_WINDOW_MS = 60 * 1000
PARAMS_FIELDS = ("params", "arguments")

_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def parse_request_id(value: Any) -> str:
    """Numbers become their decimal text, strings pass through."""
    if isinstance(value, str):
        return value
    if _is_number(value):
        if isinstance(value, float):
            return str(int(value)) if value.is_integer() else repr(value)
        return str(value)
    raise MissingIDError()


def parse_params(body: Mapping[str, Any]) -> tuple[Any, ...]:
    """
    Read ``params`` (or its alias ``arguments``).

    The field must be present. A list is used as-is, ``null`` means no
    arguments, and any other value is a single argument.
    """
    for field in PARAMS_FIELDS:
        if field in body:
            value = body[field]
            break
    else:
        raise MissingArgumentsError()
    if isinstance(value, (list, tuple)):
        return tuple(value)
    if value is None:
        return ()
    return (value,)


def parse_timestamp(value: Any) -> int:
    """Accept epoch milliseconds as a number or a string starting with an integer."""
    if _is_number(value):
        if isinstance(value, float) and not math.isfinite(value):
            raise MissingTimestampError()
        return int(value)
    if isinstance(value, str):
        match = _LEADING_INT.match(value)
        if match:
            return int(match.group(1))
    raise MissingTimestampError()


def check_freshness(timestamp: int, now: int, window_ms: int = FRESHNESS_WINDOW_MS) -> None:
    """Reject timestamps further than ``window_ms`` from server time (boundary inclusive)."""
    if abs(now - timestamp) > window_ms:
        raise TooEarlyError()


def parse_envelope(
    method: str,
    body: Mapping[str, Any],
    *,
    now: int,
    window_ms: int = FRESHNESS_WINDOW_MS,
) -> RpcEnvelope:
    """Parse a signature-checked body into an RpcEnvelope, raising on the first bad field."""
    request_id = parse_request_id(body.get("id"))
    params = parse_params(body)
    timestamp = parse_timestamp(body.get("timestamp"))
    check_freshness(timestamp, now, window_ms)
    return RpcEnvelope(id=request_id, method=method, params=params, timestamp=timestamp)
