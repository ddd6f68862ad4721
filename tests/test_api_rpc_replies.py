from nanorpc.api.rpc.replies import build_reply, exception_reply, rpc_error
from nanorpc.utils.exceptions import NotFoundError, RpcError, TooEarlyError


def test_build_reply_success():
    assert build_reply("42", (True, 5, None)) == (200, {"id": "42", "status": 200, "data": 5})


def test_build_reply_success_with_null_data():
    assert build_reply("1", (True, None, None)) == (200, {"id": "1", "status": 200, "data": None})


def test_build_reply_error_uses_error_status():
    status, reply = build_reply("9", (False, None, rpc_error(417, "boom", name="Expectation Failed", code=1001)))
    assert status == 417
    assert reply == {
        "id": "9",
        "status": 417,
        "error": {"code": 1001, "name": "Expectation Failed", "message": "boom"},
    }


def test_rpc_error_code_defaults_to_status():
    assert rpc_error(400, "Missing ID", name="Bad Request")["code"] == 400


def test_exception_reply_without_id():
    status, reply = exception_reply(NotFoundError())
    assert status == 404
    assert reply == {"id": "", "status": 404, "error": {"code": 404, "name": "Not Found", "message": "Page Not Found"}}


def test_exception_reply_keeps_structured_code():
    status, reply = exception_reply(RpcError(7, "nope"), request_id="a")
    assert status == 417
    assert reply["error"]["code"] == 7
    status, reply = exception_reply(TooEarlyError(), request_id="b")
    assert (status, reply["id"], reply["error"]["name"]) == (425, "b", "Too Early")
