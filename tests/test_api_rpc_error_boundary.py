from nanorpc.api.rpc.error_boundary import (
    protocol_rejection_result,
    structured_failure_result,
    unhandled_exception_result,
    unknown_method_result,
)
from nanorpc.utils.exceptions import BadSignatureError, RpcError


def test_unknown_method_result():
    calls = []
    res = unknown_method_result(method="x.y", log_warning=lambda fmt, m: calls.append((fmt, m)))
    assert res[0] is False
    assert res[2] == {"status": 405, "code": 405, "name": "Method Not Allowed", "message": "Missing Method"}
    assert calls and calls[0][1] == "x.y"


def test_protocol_rejection_result_logs_and_maps():
    calls = []
    res = protocol_rejection_result(
        method="abc",
        exc=BadSignatureError(),
        log_warning=lambda fmt, m, status, msg: calls.append((m, status, msg)),
    )
    assert res == (False, None, {"status": 400, "code": 400, "name": "Bad Request", "message": "Check Signature Failed"})
    assert calls == [("abc", 400, "Check Signature Failed")]


def test_structured_failure_result_keeps_handler_code():
    calls = []
    res = structured_failure_result(
        method="abc",
        exc=RpcError(1001, "quota exceeded"),
        log_warning=lambda fmt, m, code, msg: calls.append((m, code)),
    )
    assert res[2] == {"status": 417, "code": 1001, "name": "Expectation Failed", "message": "quota exceeded"}
    assert calls == [("abc", 1001)]


def test_unhandled_exception_result_logs_and_maps():
    calls = []
    res = unhandled_exception_result(
        method="abc",
        exc=RuntimeError("boom"),
        log_exception=lambda fmt, m, code, category, msg: calls.append((m, code, category)),
    )
    assert res[0] is False
    assert res[2] == {"status": 417, "code": 417, "name": "Expectation Failed", "message": "boom"}
    assert calls == [("abc", "INTERNAL_ERROR", "handler")]


def test_unhandled_exception_without_message_uses_class_name():
    res = unhandled_exception_result(method="m", exc=KeyError(), log_exception=lambda *a: None)
    assert res[2]["message"] == "KeyError"
