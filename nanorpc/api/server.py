"""FastAPI application for the nanorpc gateway.

Single endpoint: POST /nanorpcs/{method}. Every other path answers with the
standard 404 error envelope. Shared state (secret, registry, validators,
serializer) lives on ``app.state`` and is read-only while serving.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import Any, Callable

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from loguru import logger
from starlette.exceptions import HTTPException as StarletteHTTPException

from nanorpc import __version__
from nanorpc.api.rpc.context_models import RpcDispatchContext
from nanorpc.api.rpc.envelope import FRESHNESS_WINDOW_MS
from nanorpc.api.rpc.pipeline_handlers import dispatch_rpc
from nanorpc.api.rpc.registry import MethodRegistry
from nanorpc.api.rpc.replies import build_reply, exception_reply
from nanorpc.api.rpc.schema import SchemaValidator
from nanorpc.api.rpc.serializer import ExecutionSerializer
from nanorpc.utils.exceptions import NanoRPCError, NotFoundError, classify_exception, sanitize_error_message
from nanorpc.utils.helpers import now_ms as default_now_ms

RPC_PATH = "/nanorpcs/{method}"

_FORM_CONTENT_TYPES = ("application/x-www-form-urlencoded", "multipart/form-data")


@dataclass(slots=True)
class RpcAppState:
    """Process-wide dependencies shared by every request."""

    secret: str
    registry: MethodRegistry
    validators: SchemaValidator | None
    serializer: ExecutionSerializer | None
    freshness_window_ms: int
    now_ms: Callable[[], int]


async def read_request_body(request: Request) -> dict[str, Any]:
    """Decode a JSON or form body into a mapping; anything else is an empty body."""
    content_type = request.headers.get("content-type", "").lower()
    if content_type.startswith(_FORM_CONTENT_TYPES):
        form = await request.form()
        body: dict[str, Any] = {}
        for key in form.keys():
            values = [v for v in form.getlist(key) if isinstance(v, str)]
            if not values:
                continue
            body[key] = values[0] if len(values) == 1 else values
        return body
    raw = await request.body()
    if not raw:
        return {}
    try:
        data = await request.json()
    except ValueError:
        logger.debug("RPC body is not valid JSON")
        return {}
    return data if isinstance(data, dict) else {}


def _json_reply(status: int, reply: dict[str, Any]) -> JSONResponse:
    return JSONResponse(status_code=status, content=reply)


def create_app(
    *,
    secret: str,
    registry: MethodRegistry,
    validators: SchemaValidator | None = None,
    serializer: ExecutionSerializer | None = None,
    freshness_window_ms: int = FRESHNESS_WINDOW_MS,
    cors_origins: list[str] | None = None,
    now_ms: Callable[[], int] = default_now_ms,
) -> FastAPI:
    """Create the FastAPI application serving ``registry``."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        registry.freeze()
        if serializer is not None:
            serializer.reset()
        logger.info(
            "nanorpc gateway serving {} method(s), queued={}",
            len(registry),
            serializer is not None,
        )
        yield
        logger.info("nanorpc gateway stopped")

    app = FastAPI(
        title="nanorpc",
        description="Signed single-endpoint RPC gateway",
        version=__version__,
        lifespan=lifespan,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )
    app.state.rpc = RpcAppState(
        secret=secret,
        registry=registry,
        validators=validators,
        serializer=serializer,
        freshness_window_ms=freshness_window_ms,
        now_ms=now_ms,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(cors_origins) if cors_origins is not None else ["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        # unmatched paths and non-POST verbs on the RPC route both read as "no route"
        if exc.status_code in (404, 405):
            return _json_reply(*exception_reply(NotFoundError()))
        return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail}, headers=exc.headers)

    @app.exception_handler(NanoRPCError)
    async def nanorpc_exception_handler(request: Request, exc: NanoRPCError):
        return _json_reply(*exception_reply(exc))

    @app.exception_handler(Exception)
    async def generic_exception_handler(request: Request, exc: Exception):
        code, _category = classify_exception(exc)
        logger.exception("Unhandled exception [{}]: {}", code, sanitize_error_message(str(exc)))
        return _json_reply(
            500,
            {
                "id": "",
                "status": 500,
                "error": {"code": 500, "name": "Internal Server Error", "message": "An unexpected error occurred"},
            },
        )

    @app.post(RPC_PATH)
    async def nanorpc_endpoint(method: str, request: Request):
        state: RpcAppState = request.app.state.rpc
        ctx = RpcDispatchContext(
            method=method,
            body=await read_request_body(request),
            secret=state.secret,
            registry=state.registry,
            validators=state.validators,
            serializer=state.serializer,
            now_ms=state.now_ms,
            freshness_window_ms=state.freshness_window_ms,
            client_host=request.client.host if request.client else None,
        )
        result = await dispatch_rpc(ctx)
        return _json_reply(*build_reply(ctx.request_id, result))

    return app
