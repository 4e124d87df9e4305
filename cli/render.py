from __future__ import annotations

from typing import Any, Dict, Iterable, Optional

import typer

ABSENT = "--"


def format_value(value: Optional[float]) -> str:
    if value is None:
        return ABSENT
    return f"{value:.1f}"


def echo_heading(text: str) -> None:
    typer.secho(text, bold=True)


def echo_key_values(pairs: Iterable[tuple[str, Any]]) -> None:
    for key, value in pairs:
        typer.echo(f"{key}: {value}")


def render_snapshot(payload: Dict[str, Any]) -> None:
    run_state = payload.get("run_state") or "not started"
    echo_heading("Sensor Window")
    echo_key_values(
        [
            ("run_state", run_state),
            ("sequence", payload.get("sequence")),
        ]
    )

    typer.echo()
    echo_heading("Statistics")
    echo_key_values(
        [
            ("current", format_value(payload.get("current_value"))),
            ("min", format_value(payload.get("min_value"))),
            ("max", format_value(payload.get("max_value"))),
            ("average", format_value(payload.get("average_value"))),
        ]
    )

    readings = payload.get("readings") or []
    typer.echo()
    echo_heading(f"Readings ({len(readings)})")
    if readings:
        for reading in readings:
            typer.echo(f"  {reading.get('timestamp')}  {format_value(reading.get('value'))}")
    else:
        typer.echo("No readings yet.")
