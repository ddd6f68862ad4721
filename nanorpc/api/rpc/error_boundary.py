"""Common RPC error-boundary helpers for server dispatch."""

from __future__ import annotations

from typing import Callable

from nanorpc.api.rpc.replies import RpcResult, error_from_exception, rpc_error
from nanorpc.utils.exceptions import (
    MethodNotAllowedError,
    NanoRPCError,
    RpcError,
    classify_exception,
    failure_message,
    sanitize_error_message,
)

HANDLER_FAILURE_STATUS = 417
HANDLER_FAILURE_NAME = "Expectation Failed"


def unknown_method_result(
    *,
    method: str,
    log_warning: Callable[..., None],
) -> RpcResult:
    """Build standardized unknown-method response."""
    log_warning("RPC method not registered: {}", method)
    return False, None, error_from_exception(MethodNotAllowedError())


def protocol_rejection_result(
    *,
    method: str,
    exc: NanoRPCError,
    log_warning: Callable[..., None],
) -> RpcResult:
    """Map a signature/envelope/schema rejection to its error payload."""
    log_warning("RPC {} rejected with {}: {}", method, exc.status, sanitize_error_message(exc.message))
    return False, None, error_from_exception(exc)


def structured_failure_result(
    *,
    method: str,
    exc: RpcError,
    log_warning: Callable[..., None],
) -> RpcResult:
    """Map a handler's RpcError to a 417 reply that keeps the handler's own code."""
    log_warning("RPC method {} failed with {}: {}", method, exc.code, sanitize_error_message(exc.message))
    return False, None, rpc_error(
        HANDLER_FAILURE_STATUS,
        exc.message,
        name=HANDLER_FAILURE_NAME,
        code=exc.code,
    )


def unhandled_exception_result(
    *,
    method: str,
    exc: BaseException,
    log_exception: Callable[..., None],
) -> RpcResult:
    """Map any other handler failure to the generic 417 reply."""
    code, category = classify_exception(exc)
    message = failure_message(exc)
    log_exception("RPC method {} failed with [{}/{}]: {}", method, code, category.value, sanitize_error_message(message))
    return False, None, rpc_error(HANDLER_FAILURE_STATUS, message, name=HANDLER_FAILURE_NAME)
