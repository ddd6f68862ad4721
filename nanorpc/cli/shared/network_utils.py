"""Network helpers for CLI commands."""

from __future__ import annotations

import errno
import socket


def is_port_in_use(host: str, port: int) -> bool:
    """Return True if ``host:port`` is already bound by another process."""
    family = socket.AF_INET6 if ":" in host else socket.AF_INET
    with socket.socket(family, socket.SOCK_STREAM) as s:
        try:
            s.bind((host, port))
            return False
        except OSError as e:
            if e.errno == errno.EADDRINUSE:
                return True
            raise


def local_base_url(host: str, port: int) -> str:
    """Base URL a local client should use to reach a server bound to ``host``."""
    if host in {"0.0.0.0", "::", ""}:
        host = "127.0.0.1"
    return f"http://{host}:{port}"
