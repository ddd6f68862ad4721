"""Request authentication for the RPC gateway."""

from nanorpc.gateway.signature import (
    SIGN_FIELD,
    build_canonical_payload,
    compute_signature,
    sign_payload,
    verify_signature,
)

__all__ = [
    "SIGN_FIELD",
    "build_canonical_payload",
    "compute_signature",
    "sign_payload",
    "verify_signature",
]
