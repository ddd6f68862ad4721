"""RPC envelope protocol: parsing, validation, dispatch and replies."""

from nanorpc.api.rpc.context_models import RpcDispatchContext, RpcEnvelope
from nanorpc.api.rpc.envelope import FRESHNESS_WINDOW_MS, parse_envelope
from nanorpc.api.rpc.pipeline_handlers import dispatch_rpc
from nanorpc.api.rpc.registry import MethodHandler, MethodRegistry
from nanorpc.api.rpc.replies import build_reply
from nanorpc.api.rpc.schema import JsonSchemaValidators, SchemaIssue, SchemaValidator
from nanorpc.api.rpc.serializer import ExecutionSerializer, create_serializer

__all__ = [
    "FRESHNESS_WINDOW_MS",
    "ExecutionSerializer",
    "JsonSchemaValidators",
    "MethodHandler",
    "MethodRegistry",
    "RpcDispatchContext",
    "RpcEnvelope",
    "SchemaIssue",
    "SchemaValidator",
    "build_reply",
    "create_serializer",
    "dispatch_rpc",
    "parse_envelope",
]
