"""Utilities for sequential RPC handler dispatch pipelines."""

from __future__ import annotations

import inspect
from typing import Any, Awaitable, Callable, Iterable

from fastapi.concurrency import run_in_threadpool

from nanorpc.api.rpc.replies import RpcResult

HandlerResult = RpcResult | None
DispatchHandler = Callable[[], Awaitable[HandlerResult] | HandlerResult]


async def run_handler_pipeline(handlers: Iterable[DispatchHandler]) -> HandlerResult:
    """Run handlers in order and return the first non-None result."""
    for handler in handlers:
        outcome = handler()
        result = await outcome if inspect.isawaitable(outcome) else outcome
        if result is not None:
            return result
    return None


async def call_method_handler(handler: Callable[..., Any], params: Iterable[Any]) -> Any:
    """
    Call a registered method with the params spread as positional arguments.

    Coroutine functions run on the event loop; plain callables run in the
    thread pool so they cannot stall other requests. An awaitable result is
    awaited before returning.
    """
    args = tuple(params)
    if inspect.iscoroutinefunction(handler):
        outcome = handler(*args)
    else:
        outcome = await run_in_threadpool(handler, *args)
    if inspect.isawaitable(outcome):
        outcome = await outcome
    return outcome
