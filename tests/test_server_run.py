import asyncio
import socket
from concurrent.futures import ThreadPoolExecutor

import pytest

from nanorpc import NanoRPCServer, create_nanorpc_server
from nanorpc.client import NanoRPCClient, NanoRPCClientError
from nanorpc.utils.exceptions import DuplicateMethodError


def _free_port() -> int:
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.bind(("127.0.0.1", 0))
        return s.getsockname()[1]


def test_on_is_chainable_and_rejects_duplicates():
    server = create_nanorpc_server("k")
    assert server.on("a", lambda: 1).on("b", lambda: 2) is server
    with pytest.raises(DuplicateMethodError):
        server.on("a", lambda: 3)


def test_method_decorator_uses_function_name():
    server = NanoRPCServer("k")

    @server.method()
    def ping():
        return "pong"

    @server.method("sum")
    def total(*values):
        return sum(values)

    assert server.registry.method_names == ["ping", "sum"]
    assert ping() == "pong"


def test_secret_must_be_string():
    with pytest.raises(TypeError):
        NanoRPCServer(None)


@pytest.mark.binds_port
def test_run_serves_until_stopped():
    port = _free_port()
    server = NanoRPCServer("k", queued=True)
    server.on("add", lambda a, b: a + b)
    stop = server.run(port, host="127.0.0.1")
    try:
        client = NanoRPCClient(f"http://127.0.0.1:{port}", "k")
        assert client.call("add", 2, 3) == 5
        with pytest.raises(NanoRPCClientError) as exc_info:
            NanoRPCClient(f"http://127.0.0.1:{port}", "wrong").call("add", 1, 1)
        assert exc_info.value.status == 400
    finally:
        stop()
    with pytest.raises(NanoRPCClientError):
        NanoRPCClient(f"http://127.0.0.1:{port}", "k", timeout=1.0).call("add", 1, 1)


def _burst(port: int, calls: int = 3) -> list:
    client = NanoRPCClient(f"http://127.0.0.1:{port}", "k")
    with ThreadPoolExecutor(max_workers=calls) as pool:
        return list(pool.map(lambda i: client.call("slow", i), range(calls)))


@pytest.mark.binds_port
def test_queued_server_restarts_cleanly():
    server = NanoRPCServer("k", queued=True)

    @server.method()
    async def slow(value):
        await asyncio.sleep(0.05)
        return value

    for _ in range(2):
        port = _free_port()
        stop = server.run(port, host="127.0.0.1")
        try:
            assert sorted(_burst(port)) == [0, 1, 2]
        finally:
            stop()
