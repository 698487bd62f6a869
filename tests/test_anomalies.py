"""Unit tests for sensor anomaly detection."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from models.metrics import Anomaly
from models.readings import HistoricalData, SensorReading, TemperatureSample, TimestampedValue
from services.anomalies import (
    check_out_of_range,
    check_stuck_sensor,
    check_sudden_change,
    detect_anomalies,
    get_sensor_health,
)

_START = datetime(2024, 6, 1, 0, 0, tzinfo=timezone.utc)


def _readings(*points: tuple[float, float | None]) -> list[TimestampedValue]:
    return [TimestampedValue(_START + timedelta(hours=hours), value) for hours, value in points]


def _temperature_history(*points: tuple[float, float | None]) -> HistoricalData:
    return HistoricalData(
        temperature=[
            TemperatureSample(_START + timedelta(hours=hours), temperature=value)
            for hours, value in points
        ]
    )


def _anomaly(severity: str) -> Anomaly:
    return Anomaly(type="test", message="test", severity=severity, sensor_type="moisture")


def test_out_of_range_high() -> None:
    anomaly = check_out_of_range(150, "moisture")

    assert anomaly is not None
    assert anomaly.type == "out_of_range_high"
    assert anomaly.severity == "HIGH"
    assert anomaly.message == "moisture reading above maximum (150 > 100)"


def test_out_of_range_low() -> None:
    anomaly = check_out_of_range(-15.5, "temperature")

    assert anomaly is not None
    assert anomaly.type == "out_of_range_low"
    assert anomaly.message == "temperature reading below minimum (-15.5 < -10)"


@pytest.mark.parametrize(
    "value, sensor_type",
    [(55, "temperature"), (0, "humidity"), (None, "moisture"), (500, "pressure")],
)
def test_out_of_range_passes(value, sensor_type) -> None:
    assert check_out_of_range(value, sensor_type) is None


def test_sudden_change_medium() -> None:
    anomaly = check_sudden_change(_readings((0, 20), (1, 35)), "temperature")

    assert anomaly is not None
    assert anomaly.type == "sudden_change"
    assert anomaly.severity == "MEDIUM"
    assert anomaly.change_rate == 15


def test_sudden_change_high_above_double_threshold() -> None:
    anomaly = check_sudden_change(_readings((0, 20), (1, 45)), "temperature")

    assert anomaly is not None
    assert anomaly.severity == "HIGH"
    assert anomaly.change_rate == 25


def test_sudden_change_ignores_wide_gaps() -> None:
    assert check_sudden_change(_readings((0, 20), (3, 50)), "temperature") is None


def test_sudden_change_reports_first_violation_only() -> None:
    readings = _readings((0, 20), (1, 35), (2, 20), (3, 60))

    anomaly = check_sudden_change(readings, "temperature")

    assert anomaly is not None
    assert anomaly.change_rate == 15


def test_sudden_change_skips_missing_values() -> None:
    readings = _readings((0, 20), (0.5, None), (1, 24))

    assert check_sudden_change(readings, "temperature") is None


def test_stuck_sensor_over_six_hours() -> None:
    readings = _readings(*[(hours * 1.2, 25.0) for hours in range(6)])

    anomaly = check_stuck_sensor(readings, "temperature")

    assert anomaly is not None
    assert anomaly.type == "stuck_sensor"
    assert anomaly.severity == "MEDIUM"
    assert anomaly.stuck_value == 25.0
    assert anomaly.message == "temperature sensor stuck at 25 for 6h"


def test_stuck_sensor_short_span_is_fine() -> None:
    readings = _readings(*[(hours, 25.0) for hours in range(6)])

    assert check_stuck_sensor(readings, "temperature") is None


def test_stuck_sensor_only_looks_at_recent_window() -> None:
    readings = _readings((0, 19.0), (1, 21.0), *[(2 + hours * 1.5, 25.0) for hours in range(6)])

    anomaly = check_stuck_sensor(readings, "temperature")

    assert anomaly is not None
    assert anomaly.message.endswith("for 8h")


@pytest.mark.parametrize(
    "points",
    [
        [(0, 25.0), (8, 25.0)],
        [(0, 25.0), (3, 25.0), (6, 25.1)],
    ],
)
def test_stuck_sensor_requires_identical_window(points) -> None:
    assert check_stuck_sensor(_readings(*points), "temperature") is None


def test_detect_anomalies_flags_saturated_moisture_sensor() -> None:
    anomalies = detect_anomalies(SensorReading(moisture_15cm=150, moisture_30cm=60, temperature=30))

    assert len(anomalies) == 1
    assert anomalies[0].type == "out_of_range_high"
    assert anomalies[0].severity == "HIGH"
    assert anomalies[0].sensor == "moisture_15cm"


def test_detect_anomalies_order_is_stable() -> None:
    current = SensorReading(
        moisture_15cm=150, moisture_45cm=-5, temperature=60, humidity=120
    )
    history = _temperature_history(*[(hours * 1.2, 25.0) for hours in range(6)])

    anomalies = detect_anomalies(current, history)

    assert [anomaly.sensor for anomaly in anomalies] == [
        "moisture_15cm",
        "moisture_45cm",
        "temperature",
        "humidity",
        "temperature",
    ]
    assert anomalies[-1].type == "stuck_sensor"


def test_detect_anomalies_history_checks_run_in_order() -> None:
    history = _temperature_history(
        (0, 25.0), (1, 40.0), (2, 40.0), (5, 40.0), (8, 40.0), (9, 40.0), (10, 40.0)
    )

    anomalies = detect_anomalies(SensorReading(temperature=40), history)

    assert [anomaly.type for anomaly in anomalies] == ["sudden_change", "stuck_sensor"]


def test_detect_anomalies_without_snapshot() -> None:
    assert detect_anomalies(None) == []


def test_detection_is_repeatable() -> None:
    current = SensorReading(moisture_30cm=101)

    assert detect_anomalies(current) == detect_anomalies(current)


def test_sensor_health_levels() -> None:
    assert get_sensor_health([]).status == "healthy"
    assert get_sensor_health([_anomaly("LOW"), _anomaly("HIGH")]).status == "critical"
    assert get_sensor_health([_anomaly("MEDIUM"), _anomaly("LOW")]).status == "warning"
    assert get_sensor_health([_anomaly("LOW")]).status == "minor"


@pytest.mark.parametrize(
    "value, rendered",
    [(1234567.0, "1234567"), (100.123, "100.123"), (150, "150")],
)
def test_out_of_range_message_keeps_full_value(value: float, rendered: str) -> None:
    anomaly = check_out_of_range(value, "moisture")

    assert anomaly.message == f"moisture reading above maximum ({rendered} > 100)"


def test_stuck_message_keeps_decimals() -> None:
    readings = _readings(*[(hours * 1.5, 25.125) for hours in range(6)])

    assert check_stuck_sensor(readings, "temperature").message == (
        "temperature sensor stuck at 25.125 for 8h"
    )
