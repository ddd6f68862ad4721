"""Pytest hooks and fixtures."""

import os

import pytest

from nanorpc.gateway.signature import sign_payload

SECRET = "test-secret"
NOW_MS = 1_700_000_000_000


def pytest_configure(config):
    """Register custom markers (also in pyproject.toml)."""
    config.addinivalue_line(
        "markers",
        "binds_port: starts a real uvicorn server on localhost (skipped in CI)",
    )


def pytest_collection_modifyitems(config, items):
    """Skip binds_port tests when running in CI (no local sockets)."""
    if os.environ.get("CI") != "true":
        return
    skip = pytest.mark.skip(reason="Binds a local port (skipped in CI)")
    for item in items:
        if "binds_port" in item.keywords:
            item.add_marker(skip)


@pytest.fixture
def secret() -> str:
    return SECRET


@pytest.fixture
def now() -> int:
    return NOW_MS


@pytest.fixture
def signed_body():
    """Build a signed request body: signed_body(params, id=..., timestamp=..., **extra)."""

    def _build(params=None, *, id="1", timestamp=NOW_MS, secret=SECRET, **extra):
        body = {"id": id, "params": [] if params is None else params, "timestamp": timestamp}
        body.update(extra)
        return sign_payload(body, secret)

    return _build
