"""Utility functions for nanorpc."""

from nanorpc.utils.helpers import now_ms
from nanorpc.utils.exceptions import (
    NanoRPCError,
    BadRequestError,
    MissingSignatureError,
    BadSignatureError,
    MissingIDError,
    MissingArgumentsError,
    MissingTimestampError,
    TooEarlyError,
    NotFoundError,
    MethodNotAllowedError,
    NotAcceptableError,
    RpcError,
    DuplicateMethodError,
    RegistryFrozenError,
    ErrorCategory,
    classify_exception,
    sanitize_error_message,
    failure_message,
)

__all__ = [
    "now_ms",
    "NanoRPCError",
    "BadRequestError",
    "MissingSignatureError",
    "BadSignatureError",
    "MissingIDError",
    "MissingArgumentsError",
    "MissingTimestampError",
    "TooEarlyError",
    "NotFoundError",
    "MethodNotAllowedError",
    "NotAcceptableError",
    "RpcError",
    "DuplicateMethodError",
    "RegistryFrozenError",
    "ErrorCategory",
    "classify_exception",
    "sanitize_error_message",
    "failure_message",
]
