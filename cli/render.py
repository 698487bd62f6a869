from __future__ import annotations

from typing import Any, Dict, Iterable

import typer

_SEVERITY_COLORS = {
    "HIGH": typer.colors.RED,
    "MEDIUM": typer.colors.YELLOW,
    "LOW": typer.colors.BLUE,
}


def echo_heading(text: str) -> None:
    typer.secho(text, bold=True)


def echo_key_values(pairs: Iterable[tuple[str, Any]]) -> None:
    for key, value in pairs:
        typer.echo(f"{key}: {'--' if value is None else value}")


def render_metrics(payload: Dict[str, Any]) -> None:
    stress = payload.get("stress") or {}
    cwsi = payload.get("cwsi") or {}
    echo_heading("Heat & Water Stress")
    echo_key_values(
        [
            ("stage", payload.get("stage")),
            ("thi", payload.get("thi")),
            ("stress", stress.get("label")),
            ("vpd_kpa", payload.get("vpd")),
            ("cwsi", cwsi.get("value")),
            ("cwsi_level", cwsi.get("level")),
        ]
    )
    if stress.get("is_alert"):
        typer.secho(f"ALERT: {stress.get('message')}", fg=typer.colors.RED)

    gdd = payload.get("gdd_summary") or {}
    typer.echo()
    echo_heading("Growing Degree Days")
    echo_key_values(
        [
            ("mode", payload.get("gdd_mode")),
            ("total_gdd", gdd.get("total_gdd")),
            ("stage", gdd.get("current_stage_name")),
            ("progress", f"{gdd.get('stage_progress')}%"),
            ("days_to_next_stage", gdd.get("days_to_next_stage")),
            ("next_stage", gdd.get("next_stage")),
        ]
    )

    depletion = payload.get("depletion") or {}
    infiltration = payload.get("infiltration") or {}
    irrigation = payload.get("irrigation") or {}
    rain = payload.get("rain") or {}
    typer.echo()
    echo_heading("Moisture")
    echo_key_values(
        [
            ("average", payload.get("average_moisture")),
            ("trend", depletion.get("trend")),
            ("rate_per_hour", depletion.get("rate")),
            ("hours_until_critical", depletion.get("hours_until_critical")),
            ("infiltration", infiltration.get("speed")),
            ("irrigate_in_hours", irrigation.get("hours_until")),
            ("rain", rain.get("label")),
        ]
    )

    render_anomalies(payload.get("anomalies") or [], payload.get("sensor_health") or {})


def render_anomalies(anomalies: list[Dict[str, Any]], health: Dict[str, Any]) -> None:
    typer.echo()
    echo_heading("Sensor Health")
    typer.echo(f"status: {health.get('status', 'unknown')}")
    if not anomalies:
        typer.echo("No anomalies detected.")
        return
    for anomaly in anomalies:
        typer.secho(
            f"  - [{anomaly.get('severity')}] {anomaly.get('message')}",
            fg=_SEVERITY_COLORS.get(anomaly.get("severity"), typer.colors.WHITE),
        )


def render_stage(payload: Dict[str, Any]) -> None:
    echo_heading("Growth Stage")
    echo_key_values(
        [
            ("stage", payload.get("name")),
            ("progress", f"{payload.get('progress')}%"),
            ("gdd_in_stage", payload.get("gdd_in_stage")),
            ("gdd_needed_for_next", payload.get("gdd_needed_for_next")),
            ("days_to_next_stage", payload.get("days_to_next_stage")),
            ("next_stage", payload.get("next_stage")),
        ]
    )


def render_weather(payload: Dict[str, Any]) -> None:
    echo_heading("Weather Recommendation")
    echo_key_values(
        [
            ("action", payload.get("action")),
            ("urgency", payload.get("urgency")),
            ("message", payload.get("message")),
            ("forecast_days", payload.get("forecast_days")),
        ]
    )
