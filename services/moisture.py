"""Soil moisture depletion, infiltration and irrigation timing."""

from __future__ import annotations

from typing import Iterable, List, Optional, Sequence, Tuple

from models.metrics import DepletionResult, InfiltrationResult, IrrigationEstimate
from models.readings import (
    MoistureSample,
    SensorReading,
    TimestampedValue,
    hours_between,
    present_values,
)
from services.numeric import mean, round_half_up, round_int

CRITICAL_MOISTURE = 40.0
DEFAULT_TARGET_MOISTURE = 50.0
TREND_THRESHOLD = 0.5
IRRIGATION_WINDOW_HOURS = 6

_STABLE = DepletionResult(rate=None, trend="stable", hours_until_critical=None)

# (exclusive lower bound on surface - root differential, speed, status, lag hours)
_INFILTRATION_BANDS: Tuple[Tuple[float, str, str, int], ...] = (
    (15, "slow", "poor", 4),
    (8, "moderate", "normal", 2),
    (0, "fast", "good", 1),
)
_SATURATED = ("saturated", "waterlogged", 0)


def calculate_depletion_rate(readings: Iterable[TimestampedValue]) -> DepletionResult:
    ordered = present_values(readings)
    if len(ordered) < 2:
        return _STABLE

    first, last = ordered[0], ordered[-1]
    elapsed = hours_between(first.timestamp, last.timestamp)
    if elapsed <= 0:
        return _STABLE

    rate = (last.value - first.value) / elapsed

    trend = "stable"
    if rate < -TREND_THRESHOLD:
        trend = "depleting"
    elif rate > TREND_THRESHOLD:
        trend = "increasing"

    hours_until_critical = None
    if trend == "depleting" and last.value > CRITICAL_MOISTURE:
        hours_until_critical = round_int((last.value - CRITICAL_MOISTURE) / abs(rate))

    return DepletionResult(
        rate=round_half_up(rate, 2),
        trend=trend,
        hours_until_critical=hours_until_critical,
        current_moisture=last.value,
    )


def _series_average(readings: Iterable[TimestampedValue]) -> Optional[float]:
    return mean([reading.value for reading in readings if reading.value is not None])


def calculate_infiltration_speed(
    surface_readings: Iterable[TimestampedValue],
    root_zone_readings: Iterable[TimestampedValue],
) -> InfiltrationResult:
    """Estimate how quickly surface water reaches the root zone.

    Uses the mean moisture differential between depths as a proxy for lag.
    """
    surface_avg = _series_average(surface_readings)
    root_avg = _series_average(root_zone_readings)
    if surface_avg is None or root_avg is None:
        return InfiltrationResult(speed=None, status="unknown", lag_hours=None)

    differential = surface_avg - root_avg
    speed, status, lag_hours = _SATURATED
    for lower, band_speed, band_status, band_lag in _INFILTRATION_BANDS:
        if differential > lower:
            speed, status, lag_hours = band_speed, band_status, band_lag
            break

    return InfiltrationResult(
        speed=speed,
        status=status,
        lag_hours=lag_hours,
        surface_avg=round_int(surface_avg),
        root_avg=round_int(root_avg),
        differential=round_int(differential),
    )


def estimate_irrigation_time(
    current_moisture: float,
    depletion_rate: float,
    target_moisture: float = DEFAULT_TARGET_MOISTURE,
) -> IrrigationEstimate:
    if depletion_rate >= 0 or current_moisture <= target_moisture:
        return IrrigationEstimate(hours_until=0, recommended=True)

    hours_until = (current_moisture - target_moisture) / abs(depletion_rate)
    return IrrigationEstimate(
        hours_until=round_int(hours_until),
        recommended=hours_until < IRRIGATION_WINDOW_HOURS,
    )


def average_moisture(reading: SensorReading) -> Optional[float]:
    """Mean of the depths that reported; ``None`` when none did."""
    values = [
        value
        for value in (reading.moisture_15cm, reading.moisture_30cm, reading.moisture_45cm)
        if value is not None
    ]
    return mean(values)


def split_moisture_history(
    samples: Sequence[MoistureSample],
) -> Tuple[List[TimestampedValue], List[TimestampedValue]]:
    surface = [TimestampedValue(sample.timestamp, sample.surface) for sample in samples]
    root_zone = [TimestampedValue(sample.timestamp, sample.root_zone) for sample in samples]
    return surface, root_zone
