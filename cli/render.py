from __future__ import annotations

from typing import Any, Dict, Iterable

import typer


def echo_heading(text: str) -> None:
    typer.secho(text, bold=True)


def echo_key_values(pairs: Iterable[tuple[str, Any]]) -> None:
    for key, value in pairs:
        typer.echo(f"{key}: {value}")


def render_temperature(cep: str, payload: Dict[str, Any]) -> None:
    echo_heading(f"Temperature for {cep}")
    echo_key_values(
        [
            ("city", payload.get("city") or "unknown"),
            ("celsius", payload.get("temp_C")),
            ("fahrenheit", payload.get("temp_F")),
            ("kelvin", payload.get("temp_K")),
        ]
    )


def render_coordinates(cep: str, payload: Dict[str, Any]) -> None:
    echo_heading(f"Coordinates for {cep}")
    echo_key_values(
        [
            ("city", payload.get("city") or "unknown"),
            ("latitude", payload.get("latitude")),
            ("longitude", payload.get("longitude")),
        ]
    )
