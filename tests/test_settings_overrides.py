from __future__ import annotations

import json
import logging
from typing import Iterable

from services.dashboard import build_default_dashboard
from services.stages import get_agronomy_tables
from services.weather import build_default_weather_client
from settings import get_settings


def _clear_caches(caches: Iterable) -> None:
    for cache in caches:
        cache.cache_clear()


_CACHES = (
    get_settings,
    get_agronomy_tables,
    build_default_dashboard,
    build_default_weather_client,
)


def test_environment_overrides_apply(monkeypatch) -> None:
    monkeypatch.setenv("LOG_LEVEL", "debug")
    monkeypatch.setenv("CANE_DEFAULT_STAGE", "tillering")
    monkeypatch.setenv("CANE_AVG_DAILY_GDD", "18.5")
    monkeypatch.setenv("OPENWEATHER_API_KEY", "abc123")
    monkeypatch.setenv("WEATHER_LAT", "17.0")
    monkeypatch.setenv("WEATHER_CACHE_SECONDS", "120")
    _clear_caches(_CACHES)

    settings = get_settings()
    dashboard = build_default_dashboard()
    weather = build_default_weather_client()

    try:
        assert settings.log_level == "DEBUG"
        assert dashboard.default_stage == "TILLERING"
        assert dashboard.avg_daily_gdd == 18.5
        assert weather.api_key == "abc123"
        assert weather.lat == 17.0
        assert weather.cache.ttl_seconds == 120
    finally:
        weather.close()
        _clear_caches(_CACHES)


def test_invalid_values_fall_back_to_defaults(monkeypatch) -> None:
    monkeypatch.setenv("CANE_AVG_DAILY_GDD", "-3")
    monkeypatch.setenv("WEATHER_CACHE_SECONDS", "soon")
    monkeypatch.setenv("WEATHER_LON", "")
    monkeypatch.setenv("OPENWEATHER_API_KEY", "your_openweather_api_key_here")
    _clear_caches(_CACHES)

    try:
        settings = get_settings()
        assert settings.avg_daily_gdd == 15.0
        assert settings.weather_cache_seconds == 600.0
        assert settings.weather_lon == 73.8567
        assert settings.weather_api_key is None
        assert settings.default_stage == "GRAND_GROWTH"
    finally:
        _clear_caches(_CACHES)


def test_unknown_default_stage_falls_back(monkeypatch, caplog) -> None:
    monkeypatch.setenv("CANE_DEFAULT_STAGE", "ripening")
    _clear_caches(_CACHES)

    try:
        with caplog.at_level(logging.WARNING, logger="services.dashboard"):
            dashboard = build_default_dashboard()

        assert dashboard.default_stage == "GRAND_GROWTH"
        assert "Unknown default growth stage, using GRAND_GROWTH" in caplog.text
        assert caplog.records[-1].stage == "RIPENING"
    finally:
        _clear_caches(_CACHES)


def test_default_stage_missing_from_overridden_table(monkeypatch, tmp_path) -> None:
    path = tmp_path / "agronomy.json"
    path.write_text(
        json.dumps(
            {
                "growth_stages": [
                    {
                        "key": "ratoon",
                        "name": "Ratoon",
                        "moisture": {"min": 55, "max": 80, "optimal": 70},
                    }
                ]
            }
        )
    )
    monkeypatch.setenv("CANE_AGRONOMY_CONFIG_PATH", str(path))
    _clear_caches(_CACHES)

    try:
        assert build_default_dashboard().default_stage == "RATOON"
    finally:
        _clear_caches(_CACHES)
