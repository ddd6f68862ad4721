"""Shared dataclass models for RPC dispatch context."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Awaitable, Callable


@dataclass(frozen=True, slots=True)
class RpcEnvelope:
    """Parsed request envelope; immutable for the rest of the call."""

    id: str
    method: str
    params: tuple[Any, ...]
    timestamp: int

    def to_dict(self) -> dict[str, Any]:
        """Shape handed to schema validators."""
        return {
            "id": self.id,
            "method": self.method,
            "params": list(self.params),
            "timestamp": self.timestamp,
        }


@dataclass(slots=True)
class RpcDispatchContext:
    """Request-scoped and shared dependencies for one call through the pipeline."""

    method: str
    body: dict[str, Any]
    secret: str
    registry: Any
    validators: Any | None
    serializer: Any | None
    now_ms: Callable[[], int]
    freshness_window_ms: int
    client_host: str | None = None
    request_id: str = ""
    envelope: RpcEnvelope | None = None
    handler: Callable[..., Any | Awaitable[Any]] | None = None
