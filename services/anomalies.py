"""Sensor anomaly detection.

Flags readings that point at a sensor malfunction, an environmental extreme
or a transmission problem: out-of-range values, implausibly fast changes and
sensors stuck on one value.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from types import MappingProxyType
from typing import Iterable, List, Mapping, Optional, Sequence

from models.metrics import Anomaly, SensorHealth
from models.readings import HistoricalData, SensorReading, TimestampedValue, hours_between, present_values
from services.numeric import round_int

MOISTURE_FIELDS = ("moisture_15cm", "moisture_30cm", "moisture_45cm")
SUDDEN_CHANGE_WINDOW_HOURS = 2
STUCK_WINDOW_SIZE = 6
STUCK_MIN_READINGS = 3


@dataclass(frozen=True, slots=True)
class AnomalyThreshold:
    min: float
    max: float
    max_change_per_hour: float
    stuck_threshold: float


ANOMALY_THRESHOLDS: Mapping[str, AnomalyThreshold] = MappingProxyType(
    {
        "moisture": AnomalyThreshold(min=0, max=100, max_change_per_hour=20, stuck_threshold=6),
        "temperature": AnomalyThreshold(min=-10, max=55, max_change_per_hour=10, stuck_threshold=6),
        "humidity": AnomalyThreshold(min=0, max=100, max_change_per_hour=30, stuck_threshold=6),
    }
)

SEVERITY_LEVELS: Mapping[str, str] = MappingProxyType(
    {"LOW": "Low", "MEDIUM": "Medium", "HIGH": "High"}
)


def _format_number(value: float) -> str:
    if float(value).is_integer():
        return str(int(value))
    return str(value)


def check_out_of_range(value: Optional[float], sensor_type: str) -> Optional[Anomaly]:
    threshold = ANOMALY_THRESHOLDS.get(sensor_type)
    if threshold is None or value is None:
        return None

    if value < threshold.min:
        return Anomaly(
            type="out_of_range_low",
            message=(
                f"{sensor_type} reading below minimum "
                f"({_format_number(value)} < {_format_number(threshold.min)})"
            ),
            severity="HIGH",
            sensor_type=sensor_type,
        )

    if value > threshold.max:
        return Anomaly(
            type="out_of_range_high",
            message=(
                f"{sensor_type} reading above maximum "
                f"({_format_number(value)} > {_format_number(threshold.max)})"
            ),
            severity="HIGH",
            sensor_type=sensor_type,
        )

    return None


def check_sudden_change(
    readings: Iterable[TimestampedValue], sensor_type: str
) -> Optional[Anomaly]:
    """Report the first consecutive pair changing faster than allowed."""
    threshold = ANOMALY_THRESHOLDS.get(sensor_type)
    if threshold is None:
        return None

    ordered = present_values(readings)
    for previous, current in zip(ordered, ordered[1:]):
        elapsed = hours_between(previous.timestamp, current.timestamp)
        if not 0 < elapsed <= SUDDEN_CHANGE_WINDOW_HOURS:
            continue

        change_rate = abs(current.value - previous.value) / elapsed
        if change_rate > threshold.max_change_per_hour:
            severity = "HIGH" if change_rate > threshold.max_change_per_hour * 2 else "MEDIUM"
            return Anomaly(
                type="sudden_change",
                message=f"Rapid {sensor_type} change: {round_int(change_rate)}%/hour",
                severity=severity,
                sensor_type=sensor_type,
                change_rate=round_int(change_rate),
            )

    return None


def check_stuck_sensor(
    readings: Iterable[TimestampedValue], sensor_type: str
) -> Optional[Anomaly]:
    threshold = ANOMALY_THRESHOLDS.get(sensor_type)
    if threshold is None:
        return None

    recent = present_values(readings)[-STUCK_WINDOW_SIZE:]
    if len(recent) < STUCK_MIN_READINGS:
        return None

    stuck_value = recent[0].value
    if any(reading.value != stuck_value for reading in recent):
        return None

    span = hours_between(recent[0].timestamp, recent[-1].timestamp)
    if span < threshold.stuck_threshold:
        return None

    return Anomaly(
        type="stuck_sensor",
        message=(
            f"{sensor_type} sensor stuck at {_format_number(stuck_value)} "
            f"for {round_int(span)}h"
        ),
        severity="MEDIUM",
        sensor_type=sensor_type,
        stuck_value=stuck_value,
    )


def detect_anomalies(
    current: Optional[SensorReading],
    historical: Optional[HistoricalData] = None,
) -> List[Anomaly]:
    """Run every check against a snapshot and its temperature history.

    Order is stable: moisture depths, temperature, humidity, then the
    history-based checks.
    """
    anomalies: List[Anomaly] = []
    if current is None:
        return anomalies

    snapshot_checks = [(name, "moisture") for name in MOISTURE_FIELDS]
    snapshot_checks += [("temperature", "temperature"), ("humidity", "humidity")]
    for field_name, sensor_type in snapshot_checks:
        anomaly = check_out_of_range(getattr(current, field_name), sensor_type)
        if anomaly is not None:
            anomalies.append(replace(anomaly, sensor=field_name))

    if historical is not None and historical.temperature:
        series = [
            TimestampedValue(sample.timestamp, sample.temperature)
            for sample in historical.temperature
        ]
        for check in (check_sudden_change, check_stuck_sensor):
            anomaly = check(series, "temperature")
            if anomaly is not None:
                anomalies.append(replace(anomaly, sensor="temperature"))

    return anomalies


_HEALTH_BY_SEVERITY: Sequence[tuple[str, SensorHealth]] = (
    ("HIGH", SensorHealth(status="critical", label="Critical Issues Detected")),
    ("MEDIUM", SensorHealth(status="warning", label="Warnings Detected")),
)


def get_sensor_health(anomalies: Sequence[Anomaly]) -> SensorHealth:
    if not anomalies:
        return SensorHealth(status="healthy", label="All Sensors Normal")

    severities = {anomaly.severity for anomaly in anomalies}
    for severity, health in _HEALTH_BY_SEVERITY:
        if severity in severities:
            return health
    return SensorHealth(status="minor", label="Minor Issues")
