"""
Exception hierarchy and error handling utilities for nanorpc.

Provides:
- Protocol rejections carrying their HTTP status and reply phrase
- Structured handler failures with caller-chosen codes
- Error categorization for logging
- Safe error message formatting (no secret leak into logs)
"""

from __future__ import annotations

import asyncio
import json
import re
from enum import Enum
from typing import Any


class ErrorCategory(Enum):
    """Error categories for classification."""
    SIGNATURE = "signature"
    ENVELOPE = "envelope"
    FRESHNESS = "freshness"
    ROUTING = "routing"
    SCHEMA = "schema"
    HANDLER = "handler"
    CONFIGURATION = "configuration"


class NanoRPCError(Exception):
    """Base exception for all nanorpc errors."""

    status: int = 500
    name: str = "Internal Server Error"

    def __init__(
        self,
        message: str,
        *,
        status: int | None = None,
        name: str | None = None,
        category: ErrorCategory = ErrorCategory.HANDLER,
    ):
        super().__init__(message)
        self.message = message
        if status is not None:
            self.status = status
        if name is not None:
            self.name = name
        self.category = category

    @property
    def code(self) -> int:
        return self.status

    def to_dict(self) -> dict[str, Any]:
        return {"code": self.code, "name": self.name, "message": self.message}

    def __str__(self) -> str:
        return f"[{self.status}] {self.message}"


# --- Protocol rejections (detected before dispatch) ---


class BadRequestError(NanoRPCError):
    """Malformed or unauthenticated envelope."""

    status = 400
    name = "Bad Request"

    def __init__(self, message: str, category: ErrorCategory = ErrorCategory.ENVELOPE):
        super().__init__(message, category=category)


class MissingSignatureError(BadRequestError):
    def __init__(self):
        super().__init__("Missing Signature", category=ErrorCategory.SIGNATURE)


class BadSignatureError(BadRequestError):
    def __init__(self):
        super().__init__("Check Signature Failed", category=ErrorCategory.SIGNATURE)


class MissingIDError(BadRequestError):
    def __init__(self):
        super().__init__("Missing ID")


class MissingArgumentsError(BadRequestError):
    def __init__(self):
        super().__init__("Missing Arguments")


class MissingTimestampError(BadRequestError):
    def __init__(self):
        super().__init__("Missing Timestamp")


class TooEarlyError(NanoRPCError):
    """Timestamp outside the freshness window."""

    status = 425
    name = "Too Early"

    def __init__(self, message: str = "Time difference is too large"):
        super().__init__(message, category=ErrorCategory.FRESHNESS)


class NotFoundError(NanoRPCError):
    """No route matched the request path."""

    status = 404
    name = "Not Found"

    def __init__(self, message: str = "Page Not Found"):
        super().__init__(message, category=ErrorCategory.ROUTING)


class MethodNotAllowedError(NanoRPCError):
    """Route matched but no handler is registered under the method name."""

    status = 405
    name = "Method Not Allowed"

    def __init__(self, message: str = "Missing Method"):
        super().__init__(message, category=ErrorCategory.ROUTING)


class NotAcceptableError(NanoRPCError):
    """Envelope rejected by the method's schema."""

    status = 406
    name = "Not Acceptable"

    def __init__(self, message: str):
        super().__init__(message, category=ErrorCategory.SCHEMA)


# --- Handler failures ---


class RpcError(NanoRPCError):
    """
    Structured failure raised (or returned) by a method handler.

    The reply is sent with HTTP 417 but carries ``code`` as given, so callers
    can transport their own error codes.
    """

    status = 417
    name = "Expectation Failed"

    def __init__(self, code: int, message: str):
        super().__init__(message, category=ErrorCategory.HANDLER)
        self._code = code

    @property
    def code(self) -> int:
        return self._code

    def __str__(self) -> str:
        return f"[{self._code}] {self.message}"


# --- Configuration errors (raised to the embedder, never sent on the wire) ---


class DuplicateMethodError(NanoRPCError):
    """A method name was registered twice."""

    def __init__(self, method: str):
        super().__init__(f"{method} method already registered", category=ErrorCategory.CONFIGURATION)
        self.method = method


class RegistryFrozenError(NanoRPCError):
    """Registration attempted after the server started serving."""

    def __init__(self, method: str):
        super().__init__(
            f"cannot register {method}: registry is frozen once the server is running",
            category=ErrorCategory.CONFIGURATION,
        )
        self.method = method


_SENSITIVE_PATTERNS = [
    re.compile(r"(api[_-]?key|token|secret|password|auth|sign)[=:]\s*['\"]?([^\s'\"]+)['\"]?", re.IGNORECASE),
    re.compile(r"bearer\s+[a-zA-Z0-9\-._~+/]+=*", re.IGNORECASE),
    re.compile(r"\b[0-9a-f]{64}\b"),
]


def sanitize_error_message(message: str, replacement: str = "[REDACTED]") -> str:
    """Remove secrets and signatures from messages destined for logs."""
    sanitized = message
    for pattern in _SENSITIVE_PATTERNS:
        sanitized = pattern.sub(replacement, sanitized)
    return sanitized


def classify_exception(exc: BaseException) -> tuple[str, ErrorCategory]:
    """
    Classify an exception raised while serving a call.

    Returns:
        Tuple of (error_code, category)
    """
    if isinstance(exc, NanoRPCError):
        return str(exc.code), exc.category

    if isinstance(exc, asyncio.TimeoutError):
        return "TIMEOUT", ErrorCategory.HANDLER

    if isinstance(exc, json.JSONDecodeError):
        return "JSON_PARSE_ERROR", ErrorCategory.HANDLER

    if isinstance(exc, (ValueError, TypeError)):
        return "INVALID_VALUE", ErrorCategory.HANDLER

    if isinstance(exc, KeyError):
        return "MISSING_KEY", ErrorCategory.HANDLER

    if isinstance(exc, ConnectionError):
        return "CONNECTION_ERROR", ErrorCategory.HANDLER

    return "INTERNAL_ERROR", ErrorCategory.HANDLER


def failure_message(exc: BaseException) -> str:
    """Derive the wire message for an arbitrary handler failure."""
    if isinstance(exc, NanoRPCError):
        return exc.message
    text = str(exc)
    if text:
        return text
    return type(exc).__name__
