"""Pydantic schemas for the HTTP API layer."""

from __future__ import annotations

from datetime import date, datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from models.readings import (
    DailyTemperature,
    HistoricalData,
    MoistureSample,
    RainDay,
    SensorReading,
    TemperatureSample,
)


class SensorSnapshot(BaseModel):
    """Current readings; omitted or null fields mean the sensor reported nothing."""

    temperature: Optional[float] = None
    humidity: Optional[float] = None
    moisture_15cm: Optional[float] = None
    moisture_30cm: Optional[float] = None
    moisture_45cm: Optional[float] = None
    rain_active: Optional[bool] = None
    rain_intensity: Optional[float] = Field(default=None, ge=0, le=100)
    light_lux: Optional[float] = None
    air_quality: Optional[float] = None
    timestamp: Optional[datetime] = None

    def to_reading(self) -> SensorReading:
        return SensorReading(**self.model_dump())


class TemperaturePoint(BaseModel):
    timestamp: datetime
    temperature: Optional[float] = None
    humidity: Optional[float] = None


class MoisturePoint(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    timestamp: datetime
    surface: Optional[float] = None
    root_zone: Optional[float] = Field(default=None, alias="rootZone")


class RainPoint(BaseModel):
    date: date
    duration_hours: float = Field(default=0.0, ge=0)
    intensity: str = "none"


class DailyTemperaturePoint(BaseModel):
    date: date
    max_temp: Optional[float] = None
    min_temp: Optional[float] = None


class HistoryPayload(BaseModel):
    temperature: List[TemperaturePoint] = Field(default_factory=list)
    moisture: List[MoisturePoint] = Field(default_factory=list)
    rain: List[RainPoint] = Field(default_factory=list)
    daily_temperatures: List[DailyTemperaturePoint] = Field(default_factory=list)

    def to_historical(self) -> HistoricalData:
        return HistoricalData(
            temperature=[TemperatureSample(**point.model_dump()) for point in self.temperature],
            moisture=[MoistureSample(**point.model_dump()) for point in self.moisture],
            rain=[RainDay(**point.model_dump()) for point in self.rain],
            daily_temperatures=[
                DailyTemperature(**point.model_dump()) for point in self.daily_temperatures
            ],
        )


class EvaluationRequest(BaseModel):
    current: SensorSnapshot
    history: HistoryPayload = Field(default_factory=HistoryPayload)
    stage: Optional[str] = Field(
        default=None, description="Growth stage key; defaults to the configured stage."
    )


class AnomalyOut(BaseModel):
    type: str
    message: str
    severity: str
    sensor_type: str
    sensor: Optional[str] = None
    change_rate: Optional[int] = None
    stuck_value: Optional[float] = None


class SensorHealthOut(BaseModel):
    status: str
    label: str


class AnomalyReport(BaseModel):
    anomalies: List[AnomalyOut] = Field(default_factory=list)
    health: SensorHealthOut


class StressLevelOut(BaseModel):
    level: str
    label: str
    color: str
    is_alert: bool
    message: str


class CWSIOut(BaseModel):
    value: Optional[float] = None
    level: str
    message: str
    vpd: Optional[float] = None


class MoistureStatusOut(BaseModel):
    status: str
    label: str
    message: str


class ReadingGDDOut(BaseModel):
    accumulated: int = Field(..., ge=0)
    daily: int = Field(..., ge=0)
    reading_count: int = Field(..., ge=0)


class GDDSummaryOut(BaseModel):
    total_gdd: int
    current_stage: str
    current_stage_name: str
    stage_progress: int = Field(..., ge=0, le=100)
    days_to_next_stage: Optional[int] = None
    next_stage: Optional[str] = None
    gdd_today: float


class DepletionOut(BaseModel):
    rate: Optional[float] = None
    trend: str
    hours_until_critical: Optional[int] = None
    current_moisture: Optional[float] = None


class InfiltrationOut(BaseModel):
    speed: Optional[str] = None
    status: str
    lag_hours: Optional[int] = None
    surface_avg: Optional[int] = None
    root_avg: Optional[int] = None
    differential: Optional[int] = None


class IrrigationOut(BaseModel):
    hours_until: int
    recommended: bool


class ClassifiedLevelOut(BaseModel):
    level: str
    label: str
    message: Optional[str] = None


class PlantHealthOut(BaseModel):
    score: Optional[int] = None
    status: ClassifiedLevelOut


class RainStatusOut(BaseModel):
    active: bool
    intensity: str
    label: str
    water_saved: int = Field(..., ge=0, description="Estimated litres/hour saved by skipping drip irrigation.")
    message: str


class RainSummaryOut(BaseModel):
    total_hours: float = Field(..., ge=0)
    rainy_days: int = Field(..., ge=0)
    avg_hours_per_rainy_day: float = Field(..., ge=0)
    last_rain_date: Optional[date] = None


class DashboardResponse(BaseModel):
    """All derived metrics for one evaluation call."""

    stage: str
    gdd_mode: str
    thi: Optional[float] = None
    stress: StressLevelOut
    dew_point: Optional[float] = None
    feels_like: Optional[float] = None
    vpd: Optional[float] = None
    cwsi: CWSIOut
    average_moisture: Optional[float] = None
    moisture_status: Dict[str, MoistureStatusOut] = Field(default_factory=dict)
    reading_gdd: ReadingGDDOut
    gdd_summary: GDDSummaryOut
    depletion: DepletionOut
    infiltration: InfiltrationOut
    irrigation: Optional[IrrigationOut] = None
    anomalies: List[AnomalyOut] = Field(default_factory=list)
    sensor_health: Optional[SensorHealthOut] = None
    light: Optional[ClassifiedLevelOut] = None
    air_quality: Optional[ClassifiedLevelOut] = None
    plant_health: Optional[PlantHealthOut] = None
    rain: Optional[RainStatusOut] = None
    rain_history: Optional[RainSummaryOut] = None


class MoistureBandOut(BaseModel):
    min: float
    max: float
    optimal: float


class GrowthStageOut(BaseModel):
    key: str
    id: str
    name: str
    description: str
    duration: str
    moisture: MoistureBandOut


class GDDBandOut(BaseModel):
    key: str
    name: str
    min: float
    max: float


class StageTablesResponse(BaseModel):
    growth_stages: List[GrowthStageOut]
    gdd_stages: List[GDDBandOut]


class StageProgressResponse(BaseModel):
    stage: str
    name: str
    progress: int
    gdd_in_stage: int
    gdd_needed_for_next: int
    days_to_next_stage: Optional[int] = None
    next_stage: Optional[str] = None


class WeatherRecommendationResponse(BaseModel):
    action: str
    message: str
    urgency: str
    forecast_days: int = Field(..., ge=0)
