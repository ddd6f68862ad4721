"""
nanorpc - signed single-endpoint RPC over HTTP.
"""

__version__ = "0.1.0"
__logo__ = "⚡"

from nanorpc.server import NanoRPCServer, create_nanorpc_server
from nanorpc.utils.exceptions import DuplicateMethodError, NanoRPCError, RpcError

__all__ = [
    "__version__",
    "__logo__",
    "NanoRPCServer",
    "create_nanorpc_server",
    "NanoRPCError",
    "RpcError",
    "DuplicateMethodError",
]
