"""Tests for nanorpc.gateway.signature."""

import hashlib
import hmac

import pytest

from nanorpc.gateway.signature import (
    build_canonical_payload,
    compute_signature,
    sign_payload,
    verify_signature,
)
from nanorpc.utils.exceptions import BadSignatureError, MissingSignatureError


def test_canonical_payload_sorts_and_excludes_sign():
    body = {"timestamp": 1000, "params": [2, 3], "id": "1", "sign": "ignored"}
    assert build_canonical_payload(body) == 'id=1\nparams=[2,3]\ntimestamp=1000'


def test_canonical_payload_strings_verbatim_and_json_for_others():
    body = {"a": "x y", "b": None, "c": True, "d": {"z": 1, "a": "é"}, "e": 1.5}
    assert build_canonical_payload(body).split("\n") == [
        "a=x y",
        "b=null",
        "c=true",
        'd={"a":"é","z":1}',
        "e=1.5",
    ]


def test_canonical_payload_uses_code_point_order():
    body = {"b": "1", "B": "2", "_": "3"}
    assert build_canonical_payload(body) == "B=2\n_=3\nb=1"


def test_compute_signature_matches_manual_hmac():
    body = {"id": "1", "params": [], "timestamp": 5}
    canonical = "id=1\nparams=[]\ntimestamp=5"
    expected = hmac.new(b"k", f"{canonical}\nk".encode(), hashlib.sha256).hexdigest()
    assert compute_signature(body, "k") == expected
    assert len(expected) == 64


def test_signature_ignores_field_order():
    a = {"id": "1", "params": [2, 3], "timestamp": 9}
    b = {"timestamp": 9, "params": [2, 3], "id": "1"}
    assert compute_signature(a, "s") == compute_signature(b, "s")


def test_sign_payload_returns_copy_and_replaces_existing_sign():
    body = {"id": "1", "params": [], "timestamp": 1, "sign": "stale"}
    signed = sign_payload(body, "s")
    assert body["sign"] == "stale"
    assert signed["sign"] == compute_signature(body, "s")
    verify_signature(signed, "s")


def test_verify_signature_missing():
    with pytest.raises(MissingSignatureError) as exc_info:
        verify_signature({"id": "1"}, "s")
    assert exc_info.value.status == 400
    assert exc_info.value.message == "Missing Signature"


def test_verify_signature_non_string_sign_is_missing():
    with pytest.raises(MissingSignatureError):
        verify_signature({"id": "1", "sign": 123}, "s")


@pytest.mark.parametrize("field,value", [("id", "2"), ("params", [2, 4]), ("timestamp", 2), ("extra", "x")])
def test_verify_signature_detects_any_mutation(field, value):
    signed = sign_payload({"id": "1", "params": [2, 3], "timestamp": 1}, "s")
    signed[field] = value
    with pytest.raises(BadSignatureError) as exc_info:
        verify_signature(signed, "s")
    assert exc_info.value.message == "Check Signature Failed"


def test_verify_signature_wrong_secret():
    signed = sign_payload({"id": "1", "params": [], "timestamp": 1}, "right")
    with pytest.raises(BadSignatureError):
        verify_signature(signed, "wrong")


def test_empty_secret_still_signs():
    signed = sign_payload({"id": "1", "params": [], "timestamp": 1}, "")
    verify_signature(signed, "")


def _flip_hex(char: str) -> str:
    return "1" if char == "0" else "0"


@pytest.mark.parametrize("position", [0, 1, 31, 32, 62, 63])
def test_verify_signature_rejects_single_character_change_in_sign(position):
    signed = sign_payload({"id": "1", "params": [2, 3], "timestamp": 1}, "s")
    sign = signed["sign"]
    signed["sign"] = sign[:position] + _flip_hex(sign[position]) + sign[position + 1:]
    with pytest.raises(BadSignatureError):
        verify_signature(signed, "s")


def test_verify_signature_is_case_sensitive():
    body = {"id": "1", "params": [2, 3], "timestamp": 1}
    signed = sign_payload(body, "s")
    # hex digests are lowercase; force at least one letter to change
    index = next(i for i, c in enumerate(signed["sign"]) if c.isalpha())
    sign = signed["sign"]
    signed["sign"] = sign[:index] + sign[index].upper() + sign[index + 1:]
    with pytest.raises(BadSignatureError):
        verify_signature(signed, "s")
    signed["sign"] = sign.upper()
    with pytest.raises(BadSignatureError):
        verify_signature(signed, "s")


def test_string_and_json_values_share_a_canonical_line():
    # strings are signed verbatim, so the text "[2,3]" and the array [2,3] canonicalize alike
    as_array = build_canonical_payload({"params": [2, 3]})
    as_text = build_canonical_payload({"params": "[2,3]"})
    assert as_array == as_text == "params=[2,3]"
