from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI

from app.api import router
from logging_config import configure_logging
from services.dashboard import build_default_dashboard
from services.stages import get_agronomy_tables
from services.weather import build_default_weather_client


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
    build_default_dashboard()
    try:
        yield
    finally:
        if build_default_weather_client.cache_info().currsize:
            build_default_weather_client().close()
        build_default_weather_client.cache_clear()
        build_default_dashboard.cache_clear()
        get_agronomy_tables.cache_clear()


def create_app() -> FastAPI:
    configure_logging()
    app = FastAPI(
        title="Cane Metrics",
        description="Agronomic indices derived from sugarcane field telemetry.",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.include_router(router)
    return app


app = create_app()
