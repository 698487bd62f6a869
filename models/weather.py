"""Weather records produced by the forecast client."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional


@dataclass(slots=True)
class CurrentWeather:
    temperature: float
    feels_like: float
    humidity: float
    pressure: float
    wind_speed: float
    wind_direction: Optional[float]
    cloudiness: Optional[float]
    condition: str
    description: str
    location: str
    sunrise: datetime
    sunset: datetime
    observed_at: datetime


@dataclass(slots=True)
class ForecastDay:
    date: date
    temp_min: float
    temp_max: float
    avg_humidity: float
    precipitation: float
    condition: str
    wind_speed: float
