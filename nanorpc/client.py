"""HTTP client for nanorpc gateways: signs envelopes and unwraps replies."""

from __future__ import annotations

import uuid
from typing import Any, Callable

import httpx

from nanorpc.gateway.signature import sign_payload
from nanorpc.utils.helpers import now_ms as default_now_ms


class NanoRPCClientError(RuntimeError):
    def __init__(
        self,
        message: str,
        *,
        status: int | None = None,
        code: int | None = None,
        name: str | None = None,
        request_id: str = "",
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status = status
        self.code = code
        self.name = name
        self.request_id = request_id


def _default_request_id() -> str:
    return f"req_{uuid.uuid4().hex[:12]}"


class NanoRPCClient:
    """Call methods on a nanorpc gateway at ``base_url`` using the shared ``secret``."""

    def __init__(
        self,
        base_url: str,
        secret: str,
        *,
        timeout: float = 10.0,
        transport: Any | None = None,
        now_ms: Callable[[], int] = default_now_ms,
        id_factory: Callable[[], str] = _default_request_id,
    ):
        self.base_url = base_url.rstrip("/")
        self._secret = secret
        self._timeout = timeout
        self._transport = transport
        self._now_ms = now_ms
        self._id_factory = id_factory

    def url_for(self, method: str) -> str:
        return f"{self.base_url}/nanorpcs/{method}"

    def build_body(
        self,
        params: list[Any] | tuple[Any, ...],
        *,
        request_id: str | int | None = None,
        timestamp: int | None = None,
        **extra: Any,
    ) -> dict[str, Any]:
        """Signed request body; ``extra`` fields travel alongside and are covered by the signature."""
        body: dict[str, Any] = dict(extra)
        body["id"] = request_id if request_id is not None else self._id_factory()
        body["params"] = list(params)
        body["timestamp"] = timestamp if timestamp is not None else self._now_ms()
        return sign_payload(body, self._secret)

    @staticmethod
    def unwrap_reply(status_code: int, reply: Any) -> Any:
        """Return ``data`` from a success reply or raise NanoRPCClientError."""
        if not isinstance(reply, dict):
            raise NanoRPCClientError(f"unexpected reply (HTTP {status_code})", status=status_code)
        request_id = str(reply.get("id") or "")
        if status_code == 200 and reply.get("status") == 200 and "data" in reply:
            return reply["data"]
        error = reply.get("error") if isinstance(reply.get("error"), dict) else {}
        message = str(error.get("message") or f"RPC request failed (HTTP {status_code})")
        raise NanoRPCClientError(
            message,
            status=int(reply.get("status") or status_code),
            code=error.get("code"),
            name=error.get("name"),
            request_id=request_id,
        )

    @staticmethod
    def _decode(response: httpx.Response) -> Any:
        try:
            return response.json()
        except ValueError as exc:
            raise NanoRPCClientError(
                f"reply is not JSON (HTTP {response.status_code})",
                status=response.status_code,
            ) from exc

    def call(self, method: str, *params: Any, **extra: Any) -> Any:
        """Synchronously call ``method`` with positional ``params``."""
        body = self.build_body(params, **extra)
        try:
            with httpx.Client(timeout=self._timeout, transport=self._transport) as client:
                response = client.post(self.url_for(method), json=body)
        except httpx.TimeoutException as exc:
            raise NanoRPCClientError(f"timeout calling {method}", request_id=str(body["id"])) from exc
        except httpx.RequestError as exc:
            raise NanoRPCClientError(f"gateway unavailable: {exc}", request_id=str(body["id"])) from exc
        return self.unwrap_reply(response.status_code, self._decode(response))

    async def acall(self, method: str, *params: Any, **extra: Any) -> Any:
        """Asynchronous variant of call()."""
        body = self.build_body(params, **extra)
        try:
            async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                response = await client.post(self.url_for(method), json=body)
        except httpx.TimeoutException as exc:
            raise NanoRPCClientError(f"timeout calling {method}", request_id=str(body["id"])) from exc
        except httpx.RequestError as exc:
            raise NanoRPCClientError(f"gateway unavailable: {exc}", request_id=str(body["id"])) from exc
        return self.unwrap_reply(response.status_code, self._decode(response))
