"""HTTP route definitions for the service."""

from __future__ import annotations

from dataclasses import asdict
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from app.schemas import (
    AnomalyReport,
    DashboardResponse,
    EvaluationRequest,
    StageProgressResponse,
    StageTablesResponse,
    WeatherRecommendationResponse,
)
from services.anomalies import detect_anomalies, get_sensor_health
from services.dashboard import DashboardService, build_default_dashboard
from services.gdd import estimate_days_to_next_stage, get_growth_stage
from services.weather import WeatherClient, build_default_weather_client, get_weather_recommendation

router = APIRouter()


def get_dashboard() -> DashboardService:
    return build_default_dashboard()


def get_weather_client() -> WeatherClient:
    return build_default_weather_client()


@router.post(
    "/metrics",
    response_model=DashboardResponse,
    summary="Derive every agronomic metric for a sensor snapshot and its history.",
)
async def evaluate_metrics(
    payload: EvaluationRequest,
    dashboard: DashboardService = Depends(get_dashboard),
) -> DashboardResponse:
    try:
        metrics = dashboard.evaluate(
            payload.current.to_reading(),
            payload.history.to_historical(),
            stage_key=payload.stage,
        )
    except KeyError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=exc.args[0] if exc.args else str(exc),
        ) from exc
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        ) from exc
    return DashboardResponse.model_validate(asdict(metrics))


@router.post(
    "/anomalies",
    response_model=AnomalyReport,
    summary="Run range, rate-of-change and stuck-sensor checks.",
)
async def check_anomalies(payload: EvaluationRequest) -> AnomalyReport:
    try:
        anomalies = detect_anomalies(
            payload.current.to_reading(), payload.history.to_historical()
        )
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        ) from exc
    health = get_sensor_health(anomalies)
    return AnomalyReport.model_validate(
        {
            "anomalies": [asdict(anomaly) for anomaly in anomalies],
            "health": asdict(health),
        }
    )


@router.get(
    "/stages",
    response_model=StageTablesResponse,
    summary="Growth-stage moisture targets and GDD bands in use.",
)
async def list_stages(
    dashboard: DashboardService = Depends(get_dashboard),
) -> StageTablesResponse:
    tables = dashboard.tables
    return StageTablesResponse.model_validate(
        {
            "growth_stages": [asdict(stage) for stage in tables.growth_stages],
            "gdd_stages": [asdict(band) for band in tables.gdd_stages],
        }
    )


@router.get(
    "/gdd/stage",
    response_model=StageProgressResponse,
    summary="Phenological stage and time to the next stage for an accumulated GDD.",
)
async def stage_for_gdd(
    gdd: float = Query(..., ge=0, description="Accumulated growing degree days."),
    avg_daily: Optional[float] = Query(
        None, description="Average daily GDD; defaults to the configured value."
    ),
    dashboard: DashboardService = Depends(get_dashboard),
) -> StageProgressResponse:
    stages = dashboard.tables.gdd_stages
    daily = dashboard.avg_daily_gdd if avg_daily is None else avg_daily
    progress = get_growth_stage(gdd, stages)
    estimate = estimate_days_to_next_stage(gdd, daily, stages)
    return StageProgressResponse(
        **asdict(progress),
        days_to_next_stage=estimate.days,
        next_stage=estimate.next_stage,
    )


@router.get(
    "/weather/recommendation",
    response_model=WeatherRecommendationResponse,
    summary="Irrigation advice from the upcoming forecast.",
)
def weather_recommendation(
    moisture: Optional[float] = Query(None, ge=0, le=100, description="Average soil moisture."),
    client: WeatherClient = Depends(get_weather_client),
) -> WeatherRecommendationResponse:
    forecast = client.fetch_forecast()
    advice = get_weather_recommendation(forecast, moisture)
    return WeatherRecommendationResponse(**asdict(advice), forecast_days=len(forecast))


@router.get(
    "/health",
    summary="Health check endpoint.",
    status_code=status.HTTP_200_OK,
)
async def healthcheck() -> dict[str, str]:
    return {"status": "ok"}


@router.get(
    "/",
    summary="Root endpoint mirrors health information.",
    status_code=status.HTTP_200_OK,
)
async def root() -> dict[str, str]:
    return {"status": "ok", "detail": "See /health for service status."}
