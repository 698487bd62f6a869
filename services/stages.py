"""Sugarcane growth-stage tables and moisture targets."""

from __future__ import annotations

import json
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import List, Optional, Tuple

from pydantic import BaseModel, Field, ValidationError, model_validator

from models.metrics import MoistureStatus
from settings import get_settings


@dataclass(frozen=True, slots=True)
class MoistureBand:
    min: float
    max: float
    optimal: float


@dataclass(frozen=True, slots=True)
class GrowthStage:
    key: str
    id: str
    name: str
    description: str
    duration: str
    moisture: MoistureBand


@dataclass(frozen=True, slots=True)
class GDDBand:
    key: str
    name: str
    min: float
    max: float


@dataclass(frozen=True, slots=True)
class SensorDepth:
    key: str
    field: str
    depth_cm: int
    label: str
    description: str


GROWTH_STAGES: Tuple[GrowthStage, ...] = (
    GrowthStage(
        key="GERMINATION",
        id="germination",
        name="Germination",
        description="Sprouting phase - high moisture required",
        duration="0-35 days",
        moisture=MoistureBand(min=70, max=90, optimal=80),
    ),
    GrowthStage(
        key="TILLERING",
        id="tillering",
        name="Tillering",
        description="Active root & shoot development",
        duration="35-100 days",
        moisture=MoistureBand(min=65, max=85, optimal=75),
    ),
    GrowthStage(
        key="GRAND_GROWTH",
        id="grand_growth",
        name="Grand Growth",
        description="Maximum cane elongation phase",
        duration="100-270 days",
        moisture=MoistureBand(min=60, max=80, optimal=70),
    ),
    GrowthStage(
        key="MATURITY",
        id="maturity",
        name="Maturity",
        description="Ripening - reduced water for sugar concentration",
        duration="270-360 days",
        moisture=MoistureBand(min=50, max=70, optimal=60),
    ),
)

# Half-open [min, max) bands in accumulated GDD; contiguous from zero.
GDD_STAGE_BANDS: Tuple[GDDBand, ...] = (
    GDDBand(key="GERMINATION", name="Germination", min=0, max=350),
    GDDBand(key="TILLERING", name="Tillering", min=350, max=1000),
    GDDBand(key="GRAND_GROWTH", name="Grand Growth", min=1000, max=2800),
    GDDBand(key="MATURITY", name="Maturity", min=2800, max=4000),
)

SENSOR_DEPTHS: Tuple[SensorDepth, ...] = (
    SensorDepth("SURFACE", "moisture_15cm", 15, "Surface", "15cm - Top soil moisture"),
    SensorDepth("MID", "moisture_30cm", 30, "Mid Zone", "30cm - Middle soil layer"),
    SensorDepth("ROOT", "moisture_45cm", 45, "Root Zone", "45cm - Deep root moisture"),
)

HARVEST_STAGE = "HARVEST"
HARVEST_STAGE_NAME = "Harvest Ready"


def find_stage(key: str, stages: Tuple[GrowthStage, ...] = GROWTH_STAGES) -> GrowthStage:
    """Strict lookup by stage key; raises ``KeyError`` for unknown keys."""
    normalized = key.strip().upper()
    for stage in stages:
        if stage.key == normalized:
            return stage
    raise KeyError(f"Unknown growth stage {key!r}.")


def get_moisture_status(
    value: Optional[float],
    stage_key: Optional[str],
    stages: Tuple[GrowthStage, ...] = GROWTH_STAGES,
) -> MoistureStatus:
    """Compare a moisture reading with the target band of a growth stage.

    Unknown stages fall back to the first (germination) band.
    """
    if value is None:
        return MoistureStatus(status="unknown", label="No Data", message="Sensor data unavailable")

    try:
        band = find_stage(stage_key or "", stages).moisture
    except KeyError:
        band = stages[0].moisture

    if value < band.min:
        return MoistureStatus(status="low", label="Low", message="Irrigation recommended")
    if value > band.max:
        return MoistureStatus(status="high", label="High", message="Risk of waterlogging")
    return MoistureStatus(status="optimal", label="Optimal", message="Moisture level ideal")


class MoistureBandConfig(BaseModel):
    min: float = Field(..., ge=0, le=100)
    max: float = Field(..., ge=0, le=100)
    optimal: float = Field(..., ge=0, le=100)

    @model_validator(mode="after")
    def _check_order(self) -> "MoistureBandConfig":
        if not self.min <= self.optimal <= self.max:
            raise ValueError("moisture band requires min <= optimal <= max")
        return self


class GrowthStageConfig(BaseModel):
    key: str
    name: str
    description: str = ""
    duration: str = ""
    moisture: MoistureBandConfig


class GDDBandConfig(BaseModel):
    key: str
    name: str
    min: float = Field(..., ge=0)
    max: float = Field(..., gt=0)


class AgronomyConfig(BaseModel):
    """Optional on-disk override for the stage tables."""

    growth_stages: Optional[List[GrowthStageConfig]] = None
    gdd_stages: Optional[List[GDDBandConfig]] = None

    @model_validator(mode="after")
    def _check_growth_stages(self) -> "AgronomyConfig":
        if self.growth_stages is None:
            return self
        if not self.growth_stages:
            raise ValueError("growth_stages must not be empty")
        keys = [stage.key.upper() for stage in self.growth_stages]
        if len(set(keys)) != len(keys):
            raise ValueError("growth stage keys must be unique")
        return self

    @model_validator(mode="after")
    def _check_gdd_bands(self) -> "AgronomyConfig":
        if self.gdd_stages is None:
            return self
        if not self.gdd_stages:
            raise ValueError("gdd_stages must not be empty")
        if self.gdd_stages[0].min != 0:
            raise ValueError("first GDD band must start at 0")
        previous_max: Optional[float] = None
        for band in self.gdd_stages:
            if band.max <= band.min:
                raise ValueError(f"GDD band {band.key} has max <= min")
            if previous_max is not None and band.min != previous_max:
                raise ValueError(f"GDD band {band.key} is not contiguous with the previous band")
            previous_max = band.max
        return self


@dataclass(frozen=True)
class AgronomyTables:
    growth_stages: Tuple[GrowthStage, ...] = GROWTH_STAGES
    gdd_stages: Tuple[GDDBand, ...] = GDD_STAGE_BANDS


def load_agronomy_config(path: Path) -> AgronomyTables:
    """Read stage tables from a JSON file, keeping defaults for omitted tables."""
    try:
        raw = json.loads(path.read_text() or "{}")
        config = AgronomyConfig.model_validate(raw)
    except (OSError, json.JSONDecodeError) as exc:
        raise ValueError(f"Unable to read agronomy config {path}: {exc}") from exc
    except ValidationError as exc:
        raise ValueError(f"Invalid agronomy config {path}: {exc}") from exc

    growth_stages = GROWTH_STAGES
    if config.growth_stages:
        growth_stages = tuple(
            GrowthStage(
                key=stage.key.upper(),
                id=stage.key.lower(),
                name=stage.name,
                description=stage.description,
                duration=stage.duration,
                moisture=MoistureBand(
                    min=stage.moisture.min,
                    max=stage.moisture.max,
                    optimal=stage.moisture.optimal,
                ),
            )
            for stage in config.growth_stages
        )

    gdd_stages = GDD_STAGE_BANDS
    if config.gdd_stages:
        gdd_stages = tuple(
            GDDBand(key=band.key.upper(), name=band.name, min=band.min, max=band.max)
            for band in config.gdd_stages
        )

    return AgronomyTables(growth_stages=growth_stages, gdd_stages=gdd_stages)


@lru_cache
def get_agronomy_tables() -> AgronomyTables:
    settings = get_settings()
    if not settings.agronomy_config_path:
        return AgronomyTables()
    return load_agronomy_config(Path(settings.agronomy_config_path))
