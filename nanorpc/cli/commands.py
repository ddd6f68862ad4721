"""CLI commands for nanorpc.

serve: run a NanoRPCServer defined in user code.
sign:  compute the signature for a request body.
call:  sign and send one request, print the reply.
"""

import json
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console

from nanorpc import __logo__, __version__
from nanorpc.cli.shared.logging_utils import configure_console_logging, ensure_rotating_log_file
from nanorpc.cli.shared.network_utils import is_port_in_use, local_base_url
from nanorpc.cli.shared.target_utils import load_server_target, parse_value
from nanorpc.config.loader import load_config

app = typer.Typer(
    name="nanorpc",
    help=f"{__logo__} nanorpc - signed RPC over HTTP",
    no_args_is_help=True,
)

console = Console()


def version_callback(value: bool):
    if value:
        console.print(f"{__logo__} nanorpc v{__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        None, "--version", "-V", callback=version_callback, is_eager=True
    ),
):
    """nanorpc - signed RPC over HTTP."""
    pass


def _load_config_or_exit(config_path: Optional[Path]):
    try:
        return load_config(config_path)
    except ValueError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1) from e


def _resolve_secret(secret: Optional[str], config_path: Optional[Path]) -> str:
    if secret is not None:
        return secret
    return _load_config_or_exit(config_path).secret


# ============================================================================
# Server
# ============================================================================


@app.command()
def serve(
    target: str = typer.Argument(..., help="Server to run, as 'package.module:attribute'"),
    host: Optional[str] = typer.Option(None, "--host", "-h", help="Bind host (default from config)"),
    port: Optional[int] = typer.Option(None, "--port", "-p", help="Bind port (default from config)"),
    log_file: Optional[Path] = typer.Option(None, "--log-file", help="Also write logs to this rotating file"),
    config_path: Optional[Path] = typer.Option(None, "--config", "-c", help="Config file path"),
):
    """Serve the NanoRPCServer named by TARGET."""
    config = _load_config_or_exit(config_path)
    host = host or config.server.host
    port = port or config.server.port

    configure_console_logging(config.logging.level)
    file_sink = log_file or config.logging.file
    if file_sink:
        path = ensure_rotating_log_file(file_sink, level=config.logging.level)
        console.print(f"[dim]Logging to {path}[/dim]")

    if is_port_in_use(host, port):
        console.print(
            f"[red]Port {port} is already in use.[/red] "
            f"Close the process using it, or pass [cyan]--port[/cyan] (current: {host}:{port})."
        )
        raise typer.Exit(1)

    try:
        server = load_server_target(target)
    except (ImportError, ValueError) as e:
        console.print(f"[red]Cannot load {target}:[/red] {e}")
        raise typer.Exit(1) from e

    methods = ", ".join(server.registry.method_names) or "(none)"
    console.print(f"[green]✓[/green] Methods: {methods}")
    console.print(f"[green]✓[/green] Queued execution: {'on' if server.queued else 'off'}")
    console.print(f"[green]✓[/green] RPC: {local_base_url(host, port)}/nanorpcs/<method>")

    import uvicorn

    server.registry.freeze()
    uvicorn.run(
        server.app,
        host=host,
        port=port,
        timeout_keep_alive=30,
        timeout_graceful_shutdown=10,
        log_level=config.server.log_level,
    )


# ============================================================================
# Client tools
# ============================================================================


@app.command()
def sign(
    body: str = typer.Argument(..., help="Request body as a JSON object"),
    secret: Optional[str] = typer.Option(None, "--secret", "-s", help="Shared secret (default: NANORPC_SECRET / config)"),
    full: bool = typer.Option(False, "--full", help="Print the whole signed body instead of the signature"),
    config_path: Optional[Path] = typer.Option(None, "--config", "-c", help="Config file path"),
):
    """Compute the signature for BODY."""
    from nanorpc.gateway.signature import sign_payload

    try:
        data = json.loads(body)
    except json.JSONDecodeError as e:
        console.print(f"[red]Body is not valid JSON:[/red] {e}")
        raise typer.Exit(1) from e
    if not isinstance(data, dict):
        console.print("[red]Body must be a JSON object[/red]")
        raise typer.Exit(1)

    signed = sign_payload(data, _resolve_secret(secret, config_path))
    if full:
        console.print_json(data=signed)
    else:
        console.print(signed["sign"], markup=False, highlight=False)


@app.command()
def call(
    url: str = typer.Argument(..., help="Gateway base URL, e.g. http://127.0.0.1:4000"),
    method: str = typer.Argument(..., help="Method name"),
    params: Optional[List[str]] = typer.Argument(None, help="Positional params (JSON values)"),
    request_id: Optional[str] = typer.Option(None, "--id", help="Request id (default: random)"),
    secret: Optional[str] = typer.Option(None, "--secret", "-s", help="Shared secret (default: NANORPC_SECRET / config)"),
    timeout: float = typer.Option(10.0, "--timeout", help="Request timeout in seconds"),
    config_path: Optional[Path] = typer.Option(None, "--config", "-c", help="Config file path"),
):
    """Call METHOD on the gateway at URL and print the result."""
    from nanorpc.client import NanoRPCClient, NanoRPCClientError

    client = NanoRPCClient(url, _resolve_secret(secret, config_path), timeout=timeout)
    values = [parse_value(p) for p in (params or [])]
    try:
        result = client.call(method, *values, request_id=request_id)
    except NanoRPCClientError as e:
        status = f"{e.status} " if e.status is not None else ""
        console.print(f"[red]{status}{e.name or 'Error'}:[/red] {e.message}")
        raise typer.Exit(1) from e
    console.print_json(data=result)


if __name__ == "__main__":
    app()
