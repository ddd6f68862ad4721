"""NanoRPCServer: register methods, then serve them over HTTP."""

from __future__ import annotations

import threading
import time
from typing import Any, Callable

import uvicorn
from fastapi import FastAPI
from loguru import logger

from nanorpc.api.rpc.envelope import FRESHNESS_WINDOW_MS
from nanorpc.api.rpc.registry import MethodHandler, MethodRegistry
from nanorpc.api.rpc.schema import JsonSchemaValidators, SchemaValidator
from nanorpc.api.rpc.serializer import ExecutionSerializer, create_serializer
from nanorpc.api.server import create_app
from nanorpc.config.schema import Config

StopServer = Callable[[], None]


class NanoRPCServer:
    """
    Signed RPC server.

    Usage:
        server = NanoRPCServer("secret")
        server.on("add", lambda a, b: a + b)
        stop = server.run(4000)
    """

    def __init__(
        self,
        secret: str,
        *,
        queued: bool = False,
        validators: SchemaValidator | None = None,
        freshness_window_ms: int = FRESHNESS_WINDOW_MS,
        cors_origins: list[str] | None = None,
        now_ms: Callable[[], int] | None = None,
    ):
        if not isinstance(secret, str):
            raise TypeError("secret must be a string")
        self.validators: SchemaValidator = validators if validators is not None else JsonSchemaValidators()
        self.registry = MethodRegistry()
        self.serializer: ExecutionSerializer | None = create_serializer(queued)
        app_kwargs: dict[str, Any] = {}
        if now_ms is not None:
            app_kwargs["now_ms"] = now_ms
        self.app: FastAPI = create_app(
            secret=secret,
            registry=self.registry,
            validators=self.validators,
            serializer=self.serializer,
            freshness_window_ms=freshness_window_ms,
            cors_origins=cors_origins,
            **app_kwargs,
        )

    @classmethod
    def from_config(cls, config: Config, **kwargs: Any) -> NanoRPCServer:
        """Build a server from loaded configuration."""
        return cls(
            config.secret,
            queued=config.queued,
            freshness_window_ms=config.freshness_window_ms,
            cors_origins=list(config.server.cors_origins),
            **kwargs,
        )

    @property
    def queued(self) -> bool:
        return self.serializer is not None

    def on(self, method: str, handler: MethodHandler) -> NanoRPCServer:
        """Register ``handler`` under ``method``. Raises DuplicateMethodError on reuse."""
        self.registry.register(method, handler)
        return self

    def method(self, name: str | None = None) -> Callable[[MethodHandler], MethodHandler]:
        """Decorator form of on(); the function name is used when ``name`` is omitted."""

        def decorator(func: MethodHandler) -> MethodHandler:
            self.on(name or func.__name__, func)
            return func

        return decorator

    def run(
        self,
        port: int,
        host: str = "0.0.0.0",
        *,
        log_level: str = "warning",
        startup_timeout: float = 10.0,
    ) -> StopServer:
        """Start serving on a background thread and return a callable that stops it."""
        self.registry.freeze()
        config = uvicorn.Config(
            self.app,
            host=host,
            port=port,
            log_level=log_level,
            timeout_graceful_shutdown=10,
        )
        server = uvicorn.Server(config)
        thread = threading.Thread(target=server.run, name=f"nanorpc-{port}", daemon=True)
        thread.start()

        deadline = time.monotonic() + startup_timeout
        while not server.started and thread.is_alive() and time.monotonic() < deadline:
            time.sleep(0.05)
        if not server.started:
            server.should_exit = True
            thread.join(timeout=1.0)
            raise RuntimeError(f"nanorpc server failed to start on {host}:{port}")
        logger.info("nanorpc listening on http://{}:{}/nanorpcs/", host, port)

        def stop() -> None:
            server.should_exit = True
            thread.join(timeout=startup_timeout)

        return stop


def create_nanorpc_server(secret: str, **kwargs: Any) -> NanoRPCServer:
    return NanoRPCServer(secret, **kwargs)
