"""Growing Degree Days for sugarcane.

Two computation modes are provided and kept separate:

* the classic daily formula, ``max(0, (Tmax + Tmin) / 2 - Tbase)``, summed
  over a series of daily extremes;
* a reading-based mode that sums ``max(0, T - Tbase)`` over every raw
  temperature reading and reports the last reading's share as "today".
"""

from __future__ import annotations

import math
from typing import Iterable, Optional, Sequence

from models.metrics import GDDSummary, GrowthStageProgress, ReadingGDD, StageEstimate
from models.readings import DailyTemperature, TemperatureSample
from services.numeric import round_int
from services.stages import GDD_STAGE_BANDS, HARVEST_STAGE, HARVEST_STAGE_NAME, GDDBand

SUGARCANE_BASE_TEMP = 10.0
DEFAULT_AVG_DAILY_GDD = 15.0


def calculate_daily_gdd(
    max_temp: Optional[float],
    min_temp: Optional[float],
    base_temp: float = SUGARCANE_BASE_TEMP,
) -> float:
    if max_temp is None or min_temp is None:
        return 0.0
    return max(0.0, (max_temp + min_temp) / 2 - base_temp)


def calculate_accumulated_gdd(
    history: Iterable[DailyTemperature],
    base_temp: float = SUGARCANE_BASE_TEMP,
) -> float:
    ordered = sorted(history, key=lambda day: day.date)
    return sum(calculate_daily_gdd(day.max_temp, day.min_temp, base_temp) for day in ordered)


def get_growth_stage(
    accumulated_gdd: float,
    stages: Sequence[GDDBand] = GDD_STAGE_BANDS,
) -> GrowthStageProgress:
    gdd = max(0.0, accumulated_gdd)
    for band in stages:
        if band.min <= gdd < band.max:
            progress = (gdd - band.min) / (band.max - band.min) * 100
            return GrowthStageProgress(
                stage=band.key,
                name=band.name,
                progress=round_int(progress),
                gdd_in_stage=round_int(gdd - band.min),
                gdd_needed_for_next=round_int(band.max - gdd),
            )

    return GrowthStageProgress(
        stage=HARVEST_STAGE,
        name=HARVEST_STAGE_NAME,
        progress=100,
        gdd_in_stage=round_int(gdd - stages[-1].min),
        gdd_needed_for_next=0,
    )


def _next_band(stage_key: str, stages: Sequence[GDDBand]) -> tuple[str, str]:
    keys = [band.key for band in stages]
    index = keys.index(stage_key)
    if index + 1 < len(stages):
        following = stages[index + 1]
        return following.key, following.name
    return HARVEST_STAGE, "Harvest"


def estimate_days_to_next_stage(
    accumulated_gdd: float,
    avg_daily_gdd: float,
    stages: Sequence[GDDBand] = GDD_STAGE_BANDS,
) -> StageEstimate:
    stage = get_growth_stage(accumulated_gdd, stages)
    if stage.gdd_needed_for_next == 0 or avg_daily_gdd <= 0:
        return StageEstimate(days=None, next_stage=None)

    days = math.ceil(stage.gdd_needed_for_next / avg_daily_gdd)
    next_key, next_name = _next_band(stage.stage, stages)
    return StageEstimate(days=days, next_stage=next_key, next_stage_name=next_name)


def get_gdd_summary(
    accumulated_gdd: float,
    avg_daily_gdd: float = DEFAULT_AVG_DAILY_GDD,
    stages: Sequence[GDDBand] = GDD_STAGE_BANDS,
) -> GDDSummary:
    stage = get_growth_stage(accumulated_gdd, stages)
    estimate = estimate_days_to_next_stage(accumulated_gdd, avg_daily_gdd, stages)
    return GDDSummary(
        total_gdd=round_int(accumulated_gdd),
        current_stage=stage.stage,
        current_stage_name=stage.name,
        stage_progress=stage.progress,
        days_to_next_stage=estimate.days,
        next_stage=estimate.next_stage_name,
        gdd_today=avg_daily_gdd,
    )


def calculate_reading_gdd(
    samples: Sequence[TemperatureSample],
    base_temp: float = SUGARCANE_BASE_TEMP,
) -> ReadingGDD:
    """Accumulate degree days from individual readings, no Tmax/Tmin pairing."""
    total = 0.0
    daily = 0.0
    counted = 0
    last_index = len(samples) - 1
    for index, sample in enumerate(samples):
        if sample.temperature is None:
            continue
        contribution = max(0.0, sample.temperature - base_temp)
        total += contribution
        counted += 1
        if index == last_index:
            daily = contribution
    return ReadingGDD(accumulated=round_int(total), daily=round_int(daily), reading_count=counted)
