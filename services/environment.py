"""Light, air quality, rain and overall plant-health classification."""

from __future__ import annotations

import math
from typing import Iterable, Optional, Tuple

from models.metrics import ClassifiedLevel, PlantHealth, RainStatus, RainSummary
from models.readings import RainDay
from services.numeric import clamp, round_half_up, round_int

# Inclusive upper bounds in lux for sugarcane canopy light.
_LIGHT_LEVELS: Tuple[Tuple[float, ClassifiedLevel], ...] = (
    (100, ClassifiedLevel("darkness", "Dark")),
    (10_000, ClassifiedLevel("low", "Low Light")),
    (30_000, ClassifiedLevel("moderate", "Moderate")),
    (60_000, ClassifiedLevel("bright", "Bright")),
    (math.inf, ClassifiedLevel("intense", "Intense")),
)

# Inclusive upper bounds on the 0-100 air quality index.
_AIR_QUALITY_LEVELS: Tuple[Tuple[float, ClassifiedLevel], ...] = (
    (25, ClassifiedLevel("good", "Good", "Excellent air quality for crops")),
    (50, ClassifiedLevel("moderate", "Moderate", "Acceptable conditions, monitor trends")),
    (75, ClassifiedLevel("poor", "Poor", "Poor air quality - may affect plant health")),
    (math.inf, ClassifiedLevel("hazardous", "Hazardous", "Hazardous! Check for pollution sources")),
)

# Inclusive lower bounds on the 0-100 plant health score.
_HEALTH_BANDS: Tuple[Tuple[float, ClassifiedLevel], ...] = (
    (80, ClassifiedLevel("excellent", "Excellent")),
    (60, ClassifiedLevel("good", "Good")),
    (40, ClassifiedLevel("fair", "Fair")),
    (-math.inf, ClassifiedLevel("needs_attention", "Needs Attention")),
)

# (exclusive lower bound on rain intensity %, level, label, litres/hour saved)
_RAIN_LEVELS: Tuple[Tuple[float, str, str, int], ...] = (
    (70, "heavy", "Heavy Rain", 25),
    (40, "moderate", "Moderate Rain", 15),
    (0, "light", "Light Rain", 8),
)
_NO_RAIN = ("none", "No Rain", 0)


def _classify_upper(value: float, bands: Tuple[Tuple[float, ClassifiedLevel], ...]) -> ClassifiedLevel:
    for upper, level in bands:
        if value <= upper:
            return level
    return bands[-1][1]


def get_light_level(lux: Optional[float]) -> Optional[ClassifiedLevel]:
    if lux is None or lux < 0:
        return None
    level = _classify_upper(lux, _LIGHT_LEVELS)
    return ClassifiedLevel(level.level, level.label, get_light_recommendation(lux))


def get_light_recommendation(lux: Optional[float]) -> Optional[str]:
    if lux is None:
        return None
    if lux < 100:
        return "Night time - no photosynthesis"
    if lux < 5_000:
        return "Low light - cloudy conditions"
    if 30_000 <= lux < 60_000:
        return "Optimal light for photosynthesis"
    if lux >= 60_000:
        return "High intensity - monitor for heat stress"
    return "Good growing conditions"


def get_air_quality_level(index: Optional[float]) -> Optional[ClassifiedLevel]:
    if index is None:
        return None
    return _classify_upper(index, _AIR_QUALITY_LEVELS)


def get_rain_status(rain_active: Optional[bool], rain_intensity: Optional[float]) -> RainStatus:
    """Classify the rain sensor and advise on skipping drip irrigation.

    Water savings only count while the sensor reports active rain.
    """
    intensity = rain_intensity or 0.0
    level, label, water_saved = _NO_RAIN
    for lower, band_level, band_label, band_saved in _RAIN_LEVELS:
        if intensity > lower:
            level, label, water_saved = band_level, band_label, band_saved
            break

    active = bool(rain_active)
    if active:
        message = "Rain detected. Consider pausing drip irrigation to conserve water."
    else:
        message = "No rain detected. Irrigation schedule active."
    return RainStatus(
        active=active,
        intensity=level,
        label=label,
        water_saved=water_saved if active else 0,
        message=message,
    )


def summarize_rain(days: Iterable[RainDay]) -> RainSummary:
    """Totals over the recent daily rain log."""
    history = list(days)
    rainy = [day for day in history if day.duration_hours > 0]
    total = sum(day.duration_hours for day in history)
    return RainSummary(
        total_hours=round_half_up(total, 1),
        rainy_days=len(rainy),
        avg_hours_per_rainy_day=round_half_up(total / len(rainy), 1) if rainy else 0.0,
        last_rain_date=max((day.date for day in rainy), default=None),
    )


def calculate_plant_health(
    temperature: Optional[float],
    humidity: Optional[float],
    moisture: Optional[float],
) -> PlantHealth:
    """Score overall conditions from 100 down, penalising each factor outside its ideal range.

    Ideal ranges for sugarcane: 20-38 C, 50-90 %RH, 40-85 % soil moisture.
    """
    if temperature is None or humidity is None or moisture is None:
        return PlantHealth(score=None, status=ClassifiedLevel("unknown", "Analyzing..."))

    score = 100.0
    if temperature < 20:
        score -= (20 - temperature) * 3
    if temperature > 38:
        score -= (temperature - 38) * 5
    if humidity < 50:
        score -= (50 - humidity) * 0.5
    if humidity > 90:
        score -= (humidity - 90) * 0.5
    if moisture < 40:
        score -= (40 - moisture) * 1.5
    if moisture > 85:
        score -= (moisture - 85) * 0.5

    final = round_int(clamp(score, 0, 100))
    for lower, status in _HEALTH_BANDS:
        if final >= lower:
            return PlantHealth(score=final, status=status)
    return PlantHealth(score=final, status=_HEALTH_BANDS[-1][1])
