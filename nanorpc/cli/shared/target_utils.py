"""Resolve ``module:attribute`` targets naming a NanoRPCServer."""

from __future__ import annotations

import importlib
import json
from typing import Any

from nanorpc.server import NanoRPCServer


def load_server_target(target: str) -> NanoRPCServer:
    """
    Import ``module:attribute`` and return the server it names.

    The attribute may be a NanoRPCServer or a zero-argument factory returning one.
    """
    module_name, sep, attr_path = target.partition(":")
    if not sep or not module_name or not attr_path:
        raise ValueError(f"target must look like 'package.module:server', got {target!r}")
    obj: Any = importlib.import_module(module_name)
    for part in attr_path.split("."):
        try:
            obj = getattr(obj, part)
        except AttributeError as exc:
            raise ValueError(f"{module_name} has no attribute {attr_path!r}") from exc
    if not isinstance(obj, NanoRPCServer) and callable(obj):
        obj = obj()
    if not isinstance(obj, NanoRPCServer):
        raise ValueError(f"{target} is not a NanoRPCServer (got {type(obj).__name__})")
    return obj


def parse_value(raw: str) -> Any:
    """Parse CLI input value as JSON if possible; fallback to string."""
    text = raw.strip()
    if text == "":
        return ""
    try:
        return json.loads(text)
    except json.JSONDecodeError:
        lowered = text.lower()
        if lowered in {"true", "false"}:
            return lowered == "true"
        return text
