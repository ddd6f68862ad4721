"""Shared-secret request signing: canonical payload, HMAC-SHA256, constant-time verify.

String values are signed verbatim and everything else as compact JSON, so a
string field and a JSON value with the same text (`"[2,3]"` and `[2,3]`)
produce the same canonical line. Handlers that accept both shapes for one
parameter should attach a schema that pins the type.
"""

from __future__ import annotations

import hashlib
import hmac
import json
from typing import Any, Mapping

from nanorpc.utils.exceptions import BadSignatureError, MissingSignatureError

SIGN_FIELD = "sign"


def _canonical_value(value: Any) -> str:
    if isinstance(value, str):
        return value
    return json.dumps(value, sort_keys=True, separators=(",", ":"), ensure_ascii=False)


def build_canonical_payload(body: Mapping[str, Any]) -> str:
    """
    Build the signed text for a request body.

    Every top-level field except ``sign`` becomes ``key=value`` (strings as-is,
    everything else as compact sorted JSON); the lines are sorted by plain
    code-point order and joined with newlines, so field order never matters.
    """
    pairs = [f"{key}={_canonical_value(value)}" for key, value in body.items() if key != SIGN_FIELD]
    return "\n".join(sorted(pairs))


def compute_signature(body: Mapping[str, Any], secret: str) -> str:
    """Hex HMAC-SHA256 keyed by ``secret`` over ``canonical + "\\n" + secret``."""
    payload = f"{build_canonical_payload(body)}\n{secret}"
    return hmac.new(secret.encode("utf-8"), payload.encode("utf-8"), hashlib.sha256).hexdigest()


def sign_payload(body: Mapping[str, Any], secret: str) -> dict[str, Any]:
    """Return a copy of ``body`` with its ``sign`` field set."""
    signed = {key: value for key, value in body.items() if key != SIGN_FIELD}
    signed[SIGN_FIELD] = compute_signature(signed, secret)
    return signed


def _constant_time_compare(a: str, b: str) -> bool:
    return hmac.compare_digest(a.encode("utf-8"), b.encode("utf-8"))


def verify_signature(body: Mapping[str, Any], secret: str) -> None:
    """Raise MissingSignatureError / BadSignatureError unless ``body`` is correctly signed."""
    sign = body.get(SIGN_FIELD)
    if not isinstance(sign, str):
        raise MissingSignatureError()
    if not _constant_time_compare(compute_signature(body, secret), sign):
        raise BadSignatureError()
