"""Temperature-Humidity Index and related heat-stress formulas.

THI = 0.8 * T + (RH / 100) * (T - 14.4) + 46.4
"""

from __future__ import annotations

import math
from typing import Optional, Tuple

from models.metrics import StressLevel
from services.numeric import round_half_up

THI_ALERT_THRESHOLD = 78

_UNKNOWN_STRESS = StressLevel(
    level="unknown",
    label="No Data",
    color="gray",
    is_alert=False,
    message="Sensor data unavailable",
)

# (exclusive upper bound, band); first match wins.
_STRESS_BANDS: Tuple[Tuple[float, StressLevel], ...] = (
    (68, StressLevel("normal", "Normal", "success", False, "Ideal conditions for growth")),
    (72, StressLevel("mild", "Mild Stress", "info", False, "Monitor conditions closely")),
    (
        THI_ALERT_THRESHOLD,
        StressLevel("moderate", "Moderate Stress", "warning", False, "Increased evapotranspiration"),
    ),
    (82, StressLevel("high", "High Stress", "danger", True, "High evapotranspiration - irrigate!")),
    (
        math.inf,
        StressLevel(
            "severe",
            "Severe Stress",
            "danger",
            True,
            "Critical heat stress - immediate action needed",
        ),
    ),
)

_MAGNUS_A = 17.27
_MAGNUS_B = 237.7
_FEELS_LIKE_MIN_TEMP = 27


def calculate_thi(temperature: Optional[float], humidity: Optional[float]) -> Optional[float]:
    if temperature is None or humidity is None:
        return None
    thi = 0.8 * temperature + (humidity / 100) * (temperature - 14.4) + 46.4
    return round_half_up(thi, 1)


def get_stress_level(thi: Optional[float]) -> StressLevel:
    if thi is None:
        return _UNKNOWN_STRESS
    for upper, band in _STRESS_BANDS:
        if thi < upper:
            return band
    return _STRESS_BANDS[-1][1]


def calculate_dew_point(temperature: Optional[float], humidity: Optional[float]) -> Optional[float]:
    """Dew point in Celsius via the Magnus approximation."""
    if temperature is None or humidity is None or humidity <= 0:
        return None
    alpha = (_MAGNUS_A * temperature) / (_MAGNUS_B + temperature) + math.log(humidity / 100)
    return (_MAGNUS_B * alpha) / (_MAGNUS_A - alpha)


def calculate_feels_like(temperature: Optional[float], humidity: Optional[float]) -> Optional[float]:
    """Apparent temperature; the humidity correction only applies from 27 C."""
    if temperature is None or humidity is None:
        return None
    if temperature < _FEELS_LIKE_MIN_TEMP:
        return temperature
    vapor = humidity / 100 * 6.105 * math.exp(17.27 * temperature / (237.7 + temperature))
    return temperature + 0.33 * vapor - 4
