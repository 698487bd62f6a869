"""Field-level evaluation combining every agronomic metric."""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import Dict, Optional, Tuple

from models.metrics import DashboardMetrics, GDDSummary, MoistureStatus, ReadingGDD
from models.readings import HistoricalData, SensorReading
from services.anomalies import detect_anomalies, get_sensor_health
from services.cwsi import calculate_cwsi, calculate_vpd
from services.environment import (
    calculate_plant_health,
    get_air_quality_level,
    get_light_level,
    get_rain_status,
    summarize_rain,
)
from services.gdd import (
    calculate_accumulated_gdd,
    calculate_reading_gdd,
    get_gdd_summary,
)
from services.moisture import (
    average_moisture,
    calculate_depletion_rate,
    calculate_infiltration_speed,
    estimate_irrigation_time,
    split_moisture_history,
)
from services.stages import (
    SENSOR_DEPTHS,
    AgronomyTables,
    GrowthStage,
    find_stage,
    get_agronomy_tables,
    get_moisture_status,
)
from services.thi import calculate_dew_point, calculate_feels_like, calculate_thi, get_stress_level
from settings import get_settings

logger = logging.getLogger(__name__)

GDD_MODE_DAILY = "daily"
GDD_MODE_READING = "reading"
DEFAULT_STAGE = "GRAND_GROWTH"


class DashboardService:
    """Evaluates a sensor snapshot plus recent history into derived metrics.

    Holds only read-only configuration, so one instance can serve concurrent
    callers.
    """

    def __init__(
        self,
        tables: AgronomyTables,
        default_stage: str = DEFAULT_STAGE,
        avg_daily_gdd: float = 15.0,
    ) -> None:
        self.tables = tables
        self.default_stage = find_stage(default_stage, tables.growth_stages).key
        self.avg_daily_gdd = avg_daily_gdd

    def evaluate(
        self,
        current: SensorReading,
        historical: Optional[HistoricalData] = None,
        stage_key: Optional[str] = None,
    ) -> DashboardMetrics:
        history = historical or HistoricalData()
        stage = (
            find_stage(stage_key, self.tables.growth_stages).key
            if stage_key
            else self.default_stage
        )

        temperature, humidity = current.temperature, current.humidity
        avg_moisture = average_moisture(current)
        thi = calculate_thi(temperature, humidity)

        surface, root_zone = split_moisture_history(history.moisture)
        depletion = calculate_depletion_rate(surface)
        irrigation = None
        if avg_moisture is not None and depletion.rate is not None:
            irrigation = estimate_irrigation_time(avg_moisture, depletion.rate)

        reading_gdd = calculate_reading_gdd(history.temperature)
        gdd_mode, gdd_summary = self._summarize_gdd(history, reading_gdd)

        anomalies = detect_anomalies(current, history)
        health = get_sensor_health(anomalies)
        for anomaly in anomalies:
            logger.warning(
                "Sensor anomaly: %s",
                anomaly.message,
                extra={
                    "sensor": anomaly.sensor,
                    "sensor_type": anomaly.sensor_type,
                    "reason": anomaly.type,
                    "status": anomaly.severity,
                },
            )

        metrics = DashboardMetrics(
            stage=stage,
            gdd_mode=gdd_mode,
            thi=thi,
            stress=get_stress_level(thi),
            dew_point=calculate_dew_point(temperature, humidity),
            feels_like=calculate_feels_like(temperature, humidity),
            vpd=calculate_vpd(temperature, humidity),
            cwsi=calculate_cwsi(temperature, humidity, avg_moisture),
            average_moisture=avg_moisture,
            moisture_status=self._moisture_status(current, stage),
            reading_gdd=reading_gdd,
            gdd_summary=gdd_summary,
            depletion=depletion,
            infiltration=calculate_infiltration_speed(surface, root_zone),
            irrigation=irrigation,
            anomalies=anomalies,
            sensor_health=health,
            light=get_light_level(current.light_lux),
            air_quality=get_air_quality_level(current.air_quality),
            plant_health=calculate_plant_health(temperature, humidity, avg_moisture),
            rain=get_rain_status(current.rain_active, current.rain_intensity),
            rain_history=summarize_rain(history.rain),
        )
        logger.info(
            "Evaluated field snapshot",
            extra={
                "stage": stage,
                "reading_count": len(history.temperature) + len(history.moisture),
                "anomaly_count": len(anomalies),
                "health": health.status,
            },
        )
        return metrics

    def _moisture_status(self, current: SensorReading, stage: str) -> Dict[str, MoistureStatus]:
        return {
            depth.field: get_moisture_status(
                getattr(current, depth.field), stage, self.tables.growth_stages
            )
            for depth in SENSOR_DEPTHS
        }

    def _summarize_gdd(
        self, history: HistoricalData, reading_gdd: ReadingGDD
    ) -> tuple[str, GDDSummary]:
        """Prefer daily extremes when supplied, otherwise fall back to raw readings."""
        stages = self.tables.gdd_stages
        if history.daily_temperatures:
            total = calculate_accumulated_gdd(history.daily_temperatures)
            avg_daily = total / len(history.daily_temperatures)
            return GDD_MODE_DAILY, get_gdd_summary(total, avg_daily, stages)

        avg_daily = reading_gdd.daily if reading_gdd.reading_count else self.avg_daily_gdd
        return GDD_MODE_READING, get_gdd_summary(reading_gdd.accumulated, avg_daily, stages)


def _resolve_default_stage(key: str, stages: Tuple[GrowthStage, ...]) -> str:
    """Configured stage if the table knows it, else GRAND_GROWTH or the first stage."""
    known = {stage.key for stage in stages}
    if key.strip().upper() in known:
        return key
    fallback = DEFAULT_STAGE if DEFAULT_STAGE in known else stages[0].key
    logger.warning(
        "Unknown default growth stage, using %s",
        fallback,
        extra={"stage": key, "reason": "unknown_stage"},
    )
    return fallback


@lru_cache
def build_default_dashboard() -> DashboardService:
    """Factory that wires the service from environment settings."""
    settings = get_settings()
    tables = get_agronomy_tables()
    return DashboardService(
        tables=tables,
        default_stage=_resolve_default_stage(settings.default_stage, tables.growth_stages),
        avg_daily_gdd=settings.avg_daily_gdd,
    )
