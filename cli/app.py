from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import typer

from cli.client import ApiClient
from cli.config import CLIConfig, load_config
from cli.render import render_metrics, render_stage, render_weather


@dataclass
class CLIState:
    config: CLIConfig
    client: ApiClient


app = typer.Typer(
    help="Query sugarcane field metrics from the cane-metrics service.",
    context_settings={"help_option_names": ["-h", "--help"]},
)


def _get_state(ctx: typer.Context) -> CLIState:
    state = ctx.obj
    if not isinstance(state, CLIState):
        typer.secho("CLI state is uninitialized.", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)
    return state


@app.callback()
def main(
    ctx: typer.Context,
    base_url: Optional[str] = typer.Option(
        None,
        "--base-url",
        "-b",
        help="Metrics API base URL (defaults to API_BASE_URL env or http://localhost:8000).",
    ),
    timeout: Optional[float] = typer.Option(
        None,
        "--timeout",
        help="HTTP timeout in seconds.",
    ),
) -> None:
    """Entry point for the CLI."""
    config = load_config(base_url=base_url, timeout=timeout)
    client = ApiClient(config)
    ctx.obj = CLIState(config=config, client=client)
    ctx.call_on_close(client.close)


@app.command("evaluate")
def evaluate_command(
    ctx: typer.Context,
    file: Path = typer.Argument(
        ..., exists=True, dir_okay=False, readable=True, help="JSON file with 'current' and 'history'."
    ),
    stage: Optional[str] = typer.Option(
        None,
        "--stage",
        "-s",
        help="Growth stage key, e.g. TILLERING.",
    ),
) -> None:
    """Derive every metric for a saved sensor snapshot."""
    state = _get_state(ctx)
    payload = state.client.evaluate(file, stage=stage)
    render_metrics(payload)


@app.command("stage")
def stage_command(
    ctx: typer.Context,
    gdd: float = typer.Argument(..., min=0, help="Accumulated growing degree days."),
    avg_daily: Optional[float] = typer.Option(
        None,
        "--avg-daily",
        help="Average daily GDD used for the next-stage estimate.",
    ),
) -> None:
    """Show the phenological stage for an accumulated GDD."""
    state = _get_state(ctx)
    render_stage(state.client.stage(gdd, avg_daily=avg_daily))


@app.command("weather")
def weather_command(
    ctx: typer.Context,
    moisture: Optional[float] = typer.Option(
        None,
        "--moisture",
        "-m",
        min=0,
        max=100,
        help="Current average soil moisture in percent.",
    ),
) -> None:
    """Fetch irrigation advice based on the weather forecast."""
    state = _get_state(ctx)
    render_weather(state.client.weather(moisture=moisture))
