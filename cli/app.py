from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

import typer
import uvicorn

from cli.client import ApiClient
from cli.config import CLIConfig, load_config
from cli.render import render_coordinates, render_temperature


class Service(str, Enum):
    front = "front"
    back = "back"


_DEFAULT_PORTS = {Service.front: 8080, Service.back: 8081}


@dataclass
class CLIState:
    config: CLIConfig
    client: ApiClient


app = typer.Typer(
    help="Look up the current temperature of a Brazilian postal code (CEP).",
    context_settings={"help_option_names": ["-h", "--help"]},
)


def _get_state(ctx: typer.Context) -> CLIState:
    state = ctx.obj
    if not isinstance(state, CLIState):
        raise typer.Exit(code=1)
    return state


@app.callback()
def main(
    ctx: typer.Context,
    base_url: Optional[str] = typer.Option(
        None,
        "--base-url",
        "-b",
        help="Front service base URL (defaults to API_BASE_URL env or http://localhost:8080).",
    ),
    timeout: Optional[float] = typer.Option(
        None,
        "--timeout",
        help="Seconds to wait for the front service to answer.",
    ),
) -> None:
    """Entry point for the CLI."""
    config = load_config(base_url=base_url, timeout=timeout)
    client = ApiClient(config)
    ctx.obj = CLIState(config=config, client=client)
    ctx.call_on_close(client.close)


@app.command("temp")
def temp_command(
    ctx: typer.Context,
    cep: str = typer.Argument(..., help="Eight-digit postal code."),
) -> None:
    """Show the current temperature for a postal code."""
    state = _get_state(ctx)
    payload = state.client.get_temperature(cep)
    render_temperature(cep, payload)


@app.command("coords")
def coords_command(
    ctx: typer.Context,
    cep: str = typer.Argument(..., help="Eight-digit postal code."),
) -> None:
    """Show the coordinates and city for a postal code."""
    state = _get_state(ctx)
    payload = state.client.get_coordinates(cep)
    render_coordinates(cep, payload)


@app.command("serve")
def serve_command(
    service: Service = typer.Argument(..., help="Which service to run."),
    host: str = typer.Option("0.0.0.0", "--host", help="Interface to bind."),
    port: Optional[int] = typer.Option(
        None,
        "--port",
        "-p",
        help="Port to bind (defaults to 8080 for front, 8081 for back).",
    ),
) -> None:
    """Run the front or back service under uvicorn."""
    bind_port = port if port is not None else _DEFAULT_PORTS[service]
    typer.echo(f"Starting {service.value} service on {host}:{bind_port} ...")
    uvicorn.run(f"app.main:{service.value}_app", host=host, port=bind_port, log_config=None)
