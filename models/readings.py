"""Input records supplied by the telemetry collector."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from typing import Iterable, List, Optional, Union

Timestamp = Union[datetime, int, float, str]


@dataclass(slots=True)
class SensorReading:
    """Point-in-time snapshot of every field sensor. ``None`` means no data."""

    temperature: Optional[float] = None
    humidity: Optional[float] = None
    moisture_15cm: Optional[float] = None
    moisture_30cm: Optional[float] = None
    moisture_45cm: Optional[float] = None
    rain_active: Optional[bool] = None
    rain_intensity: Optional[float] = None
    light_lux: Optional[float] = None
    air_quality: Optional[float] = None
    timestamp: Optional[Timestamp] = None


@dataclass(slots=True)
class TimestampedValue:
    timestamp: Timestamp
    value: Optional[float]


@dataclass(slots=True)
class DailyTemperature:
    """Daily extremes used by the Tmax/Tmin degree-day path."""

    date: date
    max_temp: Optional[float]
    min_temp: Optional[float]


@dataclass(slots=True)
class TemperatureSample:
    timestamp: Timestamp
    temperature: Optional[float] = None
    humidity: Optional[float] = None


@dataclass(slots=True)
class MoistureSample:
    timestamp: Timestamp
    surface: Optional[float] = None
    root_zone: Optional[float] = None


@dataclass(slots=True)
class RainDay:
    date: date
    duration_hours: float = 0.0
    intensity: str = "none"


@dataclass(slots=True)
class HistoricalData:
    """Recent history windows; samples may arrive in any order."""

    temperature: List[TemperatureSample] = field(default_factory=list)
    moisture: List[MoistureSample] = field(default_factory=list)
    rain: List[RainDay] = field(default_factory=list)
    daily_temperatures: List[DailyTemperature] = field(default_factory=list)


def parse_timestamp(value: Timestamp) -> datetime:
    """Normalise a timestamp to an aware UTC ``datetime``.

    Accepts datetimes (naive ones are assumed UTC), epoch milliseconds and
    ISO-8601 strings with an optional ``Z`` suffix.
    """
    if isinstance(value, bool):
        raise ValueError("Timestamp must not be a boolean.")

    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, (int, float)):
        parsed = datetime.fromtimestamp(value / 1000.0, tz=timezone.utc)
    elif isinstance(value, str):
        candidate = value.strip()
        if not candidate:
            raise ValueError("Timestamp is empty.")
        if candidate.endswith("Z"):
            candidate = candidate[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(candidate)
        except ValueError as exc:
            raise ValueError(f"Invalid timestamp format: {value!r}") from exc
    else:
        raise ValueError(f"Unsupported timestamp type: {type(value).__name__}")

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)

    return parsed.astimezone(timezone.utc)


def hours_between(start: Timestamp, end: Timestamp) -> float:
    return (parse_timestamp(end) - parse_timestamp(start)).total_seconds() / 3600.0


def present_values(readings: Iterable[TimestampedValue]) -> List[TimestampedValue]:
    """Drop points without a value and sort the rest by time."""
    kept = [reading for reading in readings if reading.value is not None]
    return sorted(kept, key=lambda reading: parse_timestamp(reading.timestamp))
