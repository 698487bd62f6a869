from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional


_LOG_LEVEL_ENV = "LOG_LEVEL"
_AGRONOMY_CONFIG_ENV = "CANE_AGRONOMY_CONFIG_PATH"
_DEFAULT_STAGE_ENV = "CANE_DEFAULT_STAGE"
_AVG_DAILY_GDD_ENV = "CANE_AVG_DAILY_GDD"
_WEATHER_API_KEY_ENV = "OPENWEATHER_API_KEY"
_WEATHER_LAT_ENV = "WEATHER_LAT"
_WEATHER_LON_ENV = "WEATHER_LON"
_WEATHER_CACHE_ENV = "WEATHER_CACHE_SECONDS"

_PLACEHOLDER_API_KEY = "your_openweather_api_key_here"


@dataclass(frozen=True)
class Settings:
    log_level: str
    agronomy_config_path: Optional[str]
    default_stage: str
    avg_daily_gdd: float
    weather_api_key: Optional[str]
    weather_lat: float
    weather_lon: float
    weather_cache_seconds: float


def _read_str_env(name: str, default: str) -> str:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    return candidate or default


def _read_optional_env(name: str, default: Optional[str]) -> Optional[str]:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    return candidate or None


def _read_float_env(name: str, default: float, positive: bool = False) -> float:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    try:
        parsed = float(candidate)
    except ValueError:
        return default
    if positive and parsed <= 0:
        return default
    return parsed


def _read_log_level(default: str) -> str:
    value = os.getenv(_LOG_LEVEL_ENV)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    return candidate.upper()


def _read_api_key() -> Optional[str]:
    key = _read_optional_env(_WEATHER_API_KEY_ENV, None)
    if key == _PLACEHOLDER_API_KEY:
        return None
    return key


@lru_cache
def get_settings() -> Settings:
    return Settings(
        log_level=_read_log_level("INFO"),
        agronomy_config_path=_read_optional_env(_AGRONOMY_CONFIG_ENV, None),
        default_stage=_read_str_env(_DEFAULT_STAGE_ENV, "GRAND_GROWTH").upper(),
        avg_daily_gdd=_read_float_env(_AVG_DAILY_GDD_ENV, 15.0, positive=True),
        weather_api_key=_read_api_key(),
        weather_lat=_read_float_env(_WEATHER_LAT_ENV, 18.5204),
        weather_lon=_read_float_env(_WEATHER_LON_ENV, 73.8567),
        weather_cache_seconds=_read_float_env(_WEATHER_CACHE_ENV, 600.0, positive=True),
    )
