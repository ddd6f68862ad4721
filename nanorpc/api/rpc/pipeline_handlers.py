"""Dispatch pipeline steps for one RPC call.

Steps run in a fixed order and the first one that produces a result wins:
signature -> method lookup -> envelope -> schema -> handler. Every step but
the last returns None when the request may proceed.
"""

from __future__ import annotations

from fastapi.encoders import jsonable_encoder
from loguru import logger

from nanorpc.api.rpc.context_models import RpcDispatchContext
from nanorpc.api.rpc.dispatch_pipeline import (
    DispatchHandler,
    HandlerResult,
    call_method_handler,
    run_handler_pipeline,
)
from nanorpc.api.rpc.envelope import parse_envelope, parse_request_id
from nanorpc.api.rpc.error_boundary import (
    protocol_rejection_result,
    structured_failure_result,
    unhandled_exception_result,
    unknown_method_result,
)
from nanorpc.api.rpc.replies import RpcResult, rpc_error
from nanorpc.api.rpc.schema import format_schema_issues
from nanorpc.gateway.signature import verify_signature
from nanorpc.utils.exceptions import NanoRPCError, NotAcceptableError, RpcError


def verify_signature_step(ctx: RpcDispatchContext) -> HandlerResult:
    try:
        verify_signature(ctx.body, ctx.secret)
    except NanoRPCError as exc:
        return protocol_rejection_result(method=ctx.method, exc=exc, log_warning=logger.warning)
    return None


def resolve_method_step(ctx: RpcDispatchContext) -> HandlerResult:
    handler = ctx.registry.get(ctx.method)
    if handler is None:
        return unknown_method_result(method=ctx.method, log_warning=logger.warning)
    ctx.handler = handler
    return None


def parse_envelope_step(ctx: RpcDispatchContext) -> HandlerResult:
    try:
        # id first, so later rejections can still echo it
        ctx.request_id = parse_request_id(ctx.body.get("id"))
        ctx.envelope = parse_envelope(
            ctx.method,
            ctx.body,
            now=ctx.now_ms(),
            window_ms=ctx.freshness_window_ms,
        )
    except NanoRPCError as exc:
        return protocol_rejection_result(method=ctx.method, exc=exc, log_warning=logger.warning)
    return None


def validate_schema_step(ctx: RpcDispatchContext) -> HandlerResult:
    if ctx.validators is None or ctx.envelope is None:
        return None
    validator = ctx.validators.get_validator(ctx.method)
    if validator is None:
        return None
    issues = validator.validate(ctx.envelope.to_dict())
    if not issues:
        return None
    exc = NotAcceptableError(format_schema_issues(issues))
    return protocol_rejection_result(method=ctx.method, exc=exc, log_warning=logger.warning)


async def invoke_handler_step(ctx: RpcDispatchContext) -> RpcResult:
    envelope = ctx.envelope
    handler = ctx.handler
    if envelope is None or handler is None:
        return False, None, rpc_error(500, "dispatch reached handler without envelope", name="Internal Server Error")

    async def _call():
        return await call_method_handler(handler, envelope.params)

    logger.debug(
        "RPC call method={} id={} client={} waiting={}",
        envelope.method,
        envelope.id,
        ctx.client_host,
        ctx.serializer.queue_depth if ctx.serializer is not None else 0,
    )
    try:
        if ctx.serializer is not None:
            value = await ctx.serializer.run(_call)
        else:
            value = await _call()
        if isinstance(value, RpcError):
            return structured_failure_result(method=envelope.method, exc=value, log_warning=logger.warning)
        data = jsonable_encoder(value)
    except RpcError as exc:
        return structured_failure_result(method=envelope.method, exc=exc, log_warning=logger.warning)
    except Exception as exc:
        return unhandled_exception_result(method=envelope.method, exc=exc, log_exception=logger.exception)
    return True, data, None


def build_rpc_dispatch_handlers(ctx: RpcDispatchContext) -> tuple[DispatchHandler, ...]:
    """Bind every step to the request context, in check order."""
    return (
        lambda: verify_signature_step(ctx),
        lambda: resolve_method_step(ctx),
        lambda: parse_envelope_step(ctx),
        lambda: validate_schema_step(ctx),
        lambda: invoke_handler_step(ctx),
    )


async def dispatch_rpc(ctx: RpcDispatchContext) -> RpcResult:
    """Run the full pipeline; always yields a result."""
    result = await run_handler_pipeline(build_rpc_dispatch_handlers(ctx))
    if result is None:
        return False, None, rpc_error(500, "unknown error", name="Internal Server Error")
    return result
