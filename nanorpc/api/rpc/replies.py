"""Reply envelopes: success and error frames plus the HTTP status they travel with."""

from __future__ import annotations

from typing import Any

from nanorpc.utils.exceptions import NanoRPCError

RpcResult = tuple[bool, Any | None, dict[str, Any] | None]

OK_STATUS = 200


def rpc_error(status: int, message: str, *, name: str, code: int | None = None) -> dict[str, Any]:
    """Error payload; ``code`` defaults to the HTTP status."""
    return {
        "status": status,
        "code": status if code is None else code,
        "name": name,
        "message": message,
    }


def error_from_exception(exc: NanoRPCError) -> dict[str, Any]:
    return {"status": exc.status, **exc.to_dict()}


def success_reply(request_id: str, data: Any) -> dict[str, Any]:
    return {"id": request_id, "status": OK_STATUS, "data": data}


def error_reply(request_id: str, error: dict[str, Any]) -> dict[str, Any]:
    return {
        "id": request_id,
        "status": error["status"],
        "error": {
            "code": error["code"],
            "name": error["name"],
            "message": error["message"],
        },
    }


def build_reply(request_id: str, result: RpcResult) -> tuple[int, dict[str, Any]]:
    """Turn a pipeline result into ``(http_status, reply_body)``."""
    ok, payload, error = result
    if ok:
        return OK_STATUS, success_reply(request_id, payload)
    if error is None:
        error = rpc_error(500, "unknown error", name="Internal Server Error")
    return error["status"], error_reply(request_id, error)


def exception_reply(exc: NanoRPCError, request_id: str = "") -> tuple[int, dict[str, Any]]:
    """Reply for a rejection raised outside the dispatch pipeline (e.g. unknown route)."""
    return exc.status, error_reply(request_id, error_from_exception(exc))
