from __future__ import annotations

from datetime import date

import pytest

from models.readings import RainDay
from services.environment import (
    calculate_plant_health,
    get_air_quality_level,
    get_light_level,
    get_rain_status,
    summarize_rain,
)


@pytest.mark.parametrize(
    "lux, level, message",
    [
        (50, "darkness", "Night time - no photosynthesis"),
        (3_000, "low", "Low light - cloudy conditions"),
        (20_000, "moderate", "Good growing conditions"),
        (45_000, "bright", "Optimal light for photosynthesis"),
        (70_000, "intense", "High intensity - monitor for heat stress"),
    ],
)
def test_light_levels(lux: float, level: str, message: str) -> None:
    result = get_light_level(lux)

    assert result is not None
    assert result.level == level
    assert result.message == message


def test_light_level_upper_bound_is_inclusive() -> None:
    assert get_light_level(10_000).level == "low"
    assert get_light_level(10_001).level == "moderate"


@pytest.mark.parametrize("lux", [None, -1])
def test_light_level_rejects_missing_or_negative(lux) -> None:
    assert get_light_level(lux) is None


@pytest.mark.parametrize(
    "index, level",
    [(10, "good"), (25, "good"), (26, "moderate"), (60, "poor"), (80, "hazardous")],
)
def test_air_quality_levels(index: float, level: str) -> None:
    assert get_air_quality_level(index).level == level


def test_air_quality_without_reading() -> None:
    assert get_air_quality_level(None) is None


def test_plant_health_ideal_conditions() -> None:
    health = calculate_plant_health(30, 70, 60)

    assert health.score == 100
    assert health.status.level == "excellent"


def test_plant_health_penalises_each_factor() -> None:
    health = calculate_plant_health(15, 40, 30)

    assert health.score == 65
    assert health.status.level == "good"


def test_plant_health_is_clamped_at_zero() -> None:
    health = calculate_plant_health(50, 10, 0)

    assert health.score == 0
    assert health.status.level == "needs_attention"


def test_plant_health_unknown_with_missing_input() -> None:
    health = calculate_plant_health(30, None, 60)

    assert health.score is None
    assert health.status.level == "unknown"


@pytest.mark.parametrize(
    "intensity, level, water_saved",
    [(90, "heavy", 25), (70, "moderate", 15), (41, "moderate", 15), (40, "light", 8), (5, "light", 8), (0, "none", 0)],
)
def test_rain_intensity_bands(intensity: float, level: str, water_saved: int) -> None:
    status = get_rain_status(True, intensity)

    assert status.intensity == level
    assert status.water_saved == water_saved
    assert status.active is True


def test_rain_savings_only_while_active() -> None:
    status = get_rain_status(False, 90)

    assert status.intensity == "heavy"
    assert status.water_saved == 0
    assert status.message == "No rain detected. Irrigation schedule active."


def test_rain_status_without_sensor_data() -> None:
    status = get_rain_status(None, None)

    assert status.active is False
    assert status.label == "No Rain"


def test_rain_summary() -> None:
    days = [
        RainDay(date(2024, 6, 3), 0.0),
        RainDay(date(2024, 6, 1), 2.5, "moderate"),
        RainDay(date(2024, 6, 2), 1.0, "light"),
    ]

    summary = summarize_rain(days)

    assert summary.total_hours == 3.5
    assert summary.rainy_days == 2
    assert summary.avg_hours_per_rainy_day == 1.8
    assert summary.last_rain_date == date(2024, 6, 2)


def test_rain_summary_without_rain() -> None:
    summary = summarize_rain([RainDay(date(2024, 6, 1))])

    assert summary.total_hours == 0
    assert summary.avg_hours_per_rainy_day == 0
    assert summary.last_rain_date is None
