from __future__ import annotations

import asyncio
from contextlib import aclosing
from dataclasses import dataclass
from typing import Optional

import typer

from app.schemas import SnapshotResponse
from cli.client import ApiClient
from cli.config import CLIConfig, load_config
from cli.render import render_snapshot
from logging_config import configure_logging
from services.monitor import SensorMonitor
from settings import get_settings


@dataclass
class CLIState:
    config: CLIConfig
    client: ApiClient


app = typer.Typer(
    help="Utilities for interacting with the sensor window monitor.",
    context_settings={"help_option_names": ["-h", "--help"]},
)


def _get_state(ctx: typer.Context) -> CLIState:
    state = ctx.obj
    if not isinstance(state, CLIState):
        raise typer.Exit(code=1, message="CLI state is uninitialized.")
    return state


@app.callback()
def main(
    ctx: typer.Context,
    base_url: Optional[str] = typer.Option(
        None,
        "--base-url",
        "-b",
        help="Monitor API base URL (defaults to API_BASE_URL env or http://localhost:8000).",
    ),
    poll_interval: Optional[float] = typer.Option(
        None,
        "--poll-interval",
        help="Seconds between snapshot requests when watching.",
    ),
    timeout: Optional[float] = typer.Option(
        None,
        "--timeout",
        help="Maximum seconds to wait for new snapshots when watching.",
    ),
) -> None:
    """Entry point for the CLI."""
    config = load_config(
        base_url=base_url,
        poll_interval=poll_interval,
        poll_timeout=timeout,
    )
    client = ApiClient(config)
    ctx.obj = CLIState(config=config, client=client)
    ctx.call_on_close(client.close)


@app.command("snapshot")
def snapshot_command(ctx: typer.Context) -> None:
    """Show the current window, statistics and run state."""
    state = _get_state(ctx)
    render_snapshot(state.client.get_snapshot())


@app.command("toggle")
def toggle_command(ctx: typer.Context) -> None:
    """Pause a running simulation or resume a paused one."""
    state = _get_state(ctx)
    payload = state.client.toggle()
    typer.secho(f"Simulation is now {payload.get('run_state')}.", fg=typer.colors.GREEN)


@app.command("pause")
def pause_command(ctx: typer.Context) -> None:
    """Pause the simulation (no-op if already paused)."""
    state = _get_state(ctx)
    payload = state.client.set_run_state("paused")
    typer.secho(f"Simulation is now {payload.get('run_state')}.", fg=typer.colors.GREEN)


@app.command("resume")
def resume_command(ctx: typer.Context) -> None:
    """Resume the simulation (no-op if already running)."""
    state = _get_state(ctx)
    payload = state.client.set_run_state("running")
    typer.secho(f"Simulation is now {payload.get('run_state')}.", fg=typer.colors.GREEN)


@app.command("watch")
def watch_command(
    ctx: typer.Context,
    count: int = typer.Option(5, "--count", "-n", min=1, help="Number of snapshots to show."),
    poll_interval: Optional[float] = typer.Option(
        None,
        "--poll-interval",
        help="Override poll interval while watching.",
    ),
) -> None:
    """Poll the service and render each new snapshot."""
    state = _get_state(ctx)
    interval = poll_interval if poll_interval is not None else state.config.poll_interval
    snapshots = state.client.iter_snapshots(
        interval=interval, count=count, timeout=state.config.poll_timeout
    )
    for index, payload in enumerate(snapshots):
        if index:
            typer.echo()
        render_snapshot(payload)


@app.command("simulate")
def simulate_command(
    ticks: int = typer.Option(5, "--ticks", "-t", min=1, help="Readings to produce before exiting."),
    interval_ms: Optional[int] = typer.Option(
        None,
        "--interval-ms",
        min=1,
        help="Tick interval (defaults to SENSOR_TICK_INTERVAL_MS).",
    ),
) -> None:
    """Run a monitor in-process, without a server, and render every tick."""
    configure_logging()
    settings = get_settings()
    monitor = SensorMonitor(
        capacity=settings.window_capacity,
        interval_ms=interval_ms or settings.tick_interval_ms,
        value_min=settings.value_min,
        value_max=settings.value_max,
    )
    asyncio.run(_simulate(monitor, ticks))


async def _simulate(monitor: SensorMonitor, ticks: int) -> None:
    rendered = 0
    newest = None
    async with monitor, aclosing(monitor.updates()) as updates:
        async for snapshot in updates:
            if not snapshot.readings or snapshot.readings[0] is newest:
                continue
            newest = snapshot.readings[0]
            if rendered:
                typer.echo()
            render_snapshot(SnapshotResponse.from_snapshot(snapshot).model_dump(mode="json"))
            rendered += 1
            if rendered >= ticks:
                break
