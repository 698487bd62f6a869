"""Vapor Pressure Deficit and a simplified Crop Water Stress Index.

CWSI runs from 0 (well watered) to 1 (fully stressed). Without canopy
temperature the index is approximated from air VPD over a 0-3 kPa range,
raised when soil moisture is low.
"""

from __future__ import annotations

import math
from typing import Optional, Tuple

from models.metrics import CWSIResult
from services.numeric import clamp, round_half_up

VPD_FULL_SCALE_KPA = 3.0

# (exclusive upper bound, level, recommendation)
_CWSI_BANDS: Tuple[Tuple[float, str, str], ...] = (
    (0.2, "none", "No water stress - optimal conditions"),
    (0.4, "mild", "Mild stress - monitor closely"),
    (0.6, "moderate", "Moderate stress - consider irrigation"),
    (0.8, "high", "High stress - irrigation recommended"),
    (math.inf, "severe", "Severe stress - immediate irrigation needed"),
)

# (exclusive upper soil moisture %, penalty)
_MOISTURE_PENALTIES: Tuple[Tuple[float, float], ...] = (
    (40, 0.2),
    (60, 0.1),
)


def calculate_saturation_vapor_pressure(temperature: float) -> float:
    """Tetens saturation vapor pressure in kPa."""
    return 0.6108 * math.exp((17.27 * temperature) / (temperature + 237.3))


def calculate_vpd(temperature: Optional[float], humidity: Optional[float]) -> Optional[float]:
    if temperature is None or humidity is None:
        return None
    es = calculate_saturation_vapor_pressure(temperature)
    ea = es * (humidity / 100)
    return round_half_up(es - ea, 2)


def _moisture_penalty(soil_moisture: Optional[float]) -> float:
    if soil_moisture is None:
        return 0.0
    for upper, penalty in _MOISTURE_PENALTIES:
        if soil_moisture < upper:
            return penalty
    return 0.0


def calculate_cwsi(
    temperature: Optional[float],
    humidity: Optional[float],
    soil_moisture: Optional[float] = None,
) -> CWSIResult:
    vpd = calculate_vpd(temperature, humidity)
    if vpd is None:
        return CWSIResult(value=None, level="unknown", message="Insufficient data")

    index = clamp(vpd / VPD_FULL_SCALE_KPA)
    index = clamp(index + _moisture_penalty(soil_moisture))

    for upper, level, message in _CWSI_BANDS:
        if index < upper:
            break

    return CWSIResult(value=round_half_up(index, 2), level=level, message=message, vpd=vpd)
