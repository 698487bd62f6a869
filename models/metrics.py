"""Derived metric value objects returned by the agronomy services."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import List, Optional


@dataclass(frozen=True, slots=True)
class StressLevel:
    level: str
    label: str
    color: str
    is_alert: bool
    message: str


@dataclass(frozen=True, slots=True)
class CWSIResult:
    value: Optional[float]
    level: str
    message: str
    vpd: Optional[float] = None


@dataclass(frozen=True, slots=True)
class GrowthStageProgress:
    stage: str
    name: str
    progress: int
    gdd_in_stage: int
    gdd_needed_for_next: int


@dataclass(frozen=True, slots=True)
class StageEstimate:
    days: Optional[int]
    next_stage: Optional[str]
    next_stage_name: Optional[str] = None


@dataclass(frozen=True, slots=True)
class GDDSummary:
    total_gdd: int
    current_stage: str
    current_stage_name: str
    stage_progress: int
    days_to_next_stage: Optional[int]
    next_stage: Optional[str]
    gdd_today: float


@dataclass(frozen=True, slots=True)
class ReadingGDD:
    """Degree days derived straight from individual temperature readings."""

    accumulated: int
    daily: int
    reading_count: int


@dataclass(frozen=True, slots=True)
class DepletionResult:
    rate: Optional[float]
    trend: str
    hours_until_critical: Optional[int]
    current_moisture: Optional[float] = None


@dataclass(frozen=True, slots=True)
class InfiltrationResult:
    speed: Optional[str]
    status: str
    lag_hours: Optional[int]
    surface_avg: Optional[int] = None
    root_avg: Optional[int] = None
    differential: Optional[int] = None


@dataclass(frozen=True, slots=True)
class IrrigationEstimate:
    hours_until: int
    recommended: bool


@dataclass(frozen=True, slots=True)
class MoistureStatus:
    status: str
    label: str
    message: str


@dataclass(frozen=True, slots=True)
class Anomaly:
    """A single sensor fault or extreme, rebuilt on every evaluation."""

    type: str
    message: str
    severity: str
    sensor_type: str
    sensor: Optional[str] = None
    change_rate: Optional[int] = None
    stuck_value: Optional[float] = None


@dataclass(frozen=True, slots=True)
class SensorHealth:
    status: str
    label: str


@dataclass(frozen=True, slots=True)
class ClassifiedLevel:
    """Generic banded classification (light, air quality, plant health)."""

    level: str
    label: str
    message: Optional[str] = None


@dataclass(frozen=True, slots=True)
class PlantHealth:
    score: Optional[int]
    status: ClassifiedLevel


@dataclass(frozen=True, slots=True)
class RainStatus:
    """Rain sensor state; ``water_saved`` is litres/hour while rain is active."""

    active: bool
    intensity: str
    label: str
    water_saved: int
    message: str


@dataclass(frozen=True, slots=True)
class RainSummary:
    total_hours: float
    rainy_days: int
    avg_hours_per_rainy_day: float
    last_rain_date: Optional[date] = None


@dataclass(frozen=True, slots=True)
class WeatherRecommendation:
    action: str
    message: str
    urgency: str


@dataclass(frozen=True, slots=True)
class DashboardMetrics:
    """Everything the presentation layer renders for one field snapshot."""

    stage: str
    gdd_mode: str
    thi: Optional[float]
    stress: StressLevel
    dew_point: Optional[float]
    feels_like: Optional[float]
    vpd: Optional[float]
    cwsi: CWSIResult
    average_moisture: Optional[float]
    moisture_status: dict[str, MoistureStatus]
    reading_gdd: ReadingGDD
    gdd_summary: GDDSummary
    depletion: DepletionResult
    infiltration: InfiltrationResult
    irrigation: Optional[IrrigationEstimate]
    anomalies: List[Anomaly] = field(default_factory=list)
    sensor_health: Optional[SensorHealth] = None
    light: Optional[ClassifiedLevel] = None
    air_quality: Optional[ClassifiedLevel] = None
    plant_health: Optional[PlantHealth] = None
    rain: Optional[RainStatus] = None
    rain_history: Optional[RainSummary] = None
