"""OpenWeather access and weather-driven irrigation advice."""

from __future__ import annotations

import logging
from collections import Counter, OrderedDict
from datetime import date, datetime, timedelta, timezone
from functools import lru_cache
from typing import Any, Dict, List, Optional, Sequence

import httpx

from models.metrics import WeatherRecommendation
from models.weather import CurrentWeather, ForecastDay
from services.cache import TTLCache
from settings import get_settings

logger = logging.getLogger(__name__)

OPENWEATHER_BASE_URL = "https://api.openweathermap.org/data/2.5"
FORECAST_DAYS = 7
FORECAST_SLOTS = 40  # 5 days of 3-hour slots

_CURRENT_KEY = "current"
_FORECAST_KEY = "forecast"


class WeatherClient:
    """Fetch current conditions and a daily forecast for the field location.

    Without an API key, or when the upstream call fails, the client reports
    no data (``None`` / empty list) instead of raising.
    """

    def __init__(
        self,
        api_key: Optional[str],
        lat: float,
        lon: float,
        cache: TTLCache,
        http_client: Optional[httpx.Client] = None,
    ) -> None:
        self.api_key = api_key
        self.lat = lat
        self.lon = lon
        self.cache = cache
        self._client = http_client or httpx.Client(base_url=OPENWEATHER_BASE_URL, timeout=10.0)

    @property
    def configured(self) -> bool:
        return bool(self.api_key)

    def close(self) -> None:
        self._client.close()

    def fetch_current(self) -> Optional[CurrentWeather]:
        cached = self.cache.get(_CURRENT_KEY)
        if cached is not None:
            return cached

        payload = self._get("/weather", {})
        if payload is None:
            return None

        try:
            weather = _parse_current(payload)
        except (KeyError, IndexError, TypeError, ValueError) as exc:
            logger.warning(
                "Unexpected current weather payload",
                extra={"source": "openweather", "reason": repr(exc)},
            )
            return None

        self.cache.set(_CURRENT_KEY, weather)
        return weather

    def fetch_forecast(self) -> List[ForecastDay]:
        cached = self.cache.get(_FORECAST_KEY)
        if cached is not None:
            return cached

        payload = self._get("/forecast", {"cnt": FORECAST_SLOTS})
        if payload is None:
            return []

        try:
            forecast = _parse_forecast(payload)
        except (KeyError, IndexError, TypeError, ValueError) as exc:
            logger.warning(
                "Unexpected forecast payload",
                extra={"source": "openweather", "reason": repr(exc)},
            )
            return []

        self.cache.set(_FORECAST_KEY, forecast)
        return forecast

    def _get(self, path: str, params: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        if not self.configured:
            logger.debug("Weather API key not configured", extra={"source": "openweather"})
            return None

        query = {
            "lat": self.lat,
            "lon": self.lon,
            "appid": self.api_key,
            "units": "metric",
            **params,
        }
        try:
            response = self._client.get(path, params=query)
            response.raise_for_status()
            return response.json()
        except (httpx.HTTPError, ValueError) as exc:
            logger.warning(
                "Weather request failed",
                extra={"source": "openweather", "reason": str(exc) or type(exc).__name__},
            )
            return None


def _from_epoch(seconds: float) -> datetime:
    return datetime.fromtimestamp(seconds, tz=timezone.utc)


def _parse_current(payload: Dict[str, Any]) -> CurrentWeather:
    main = payload["main"]
    wind = payload.get("wind") or {}
    summary = payload["weather"][0]
    return CurrentWeather(
        temperature=float(main["temp"]),
        feels_like=float(main["feels_like"]),
        humidity=float(main["humidity"]),
        pressure=float(main["pressure"]),
        wind_speed=float(wind.get("speed", 0.0)),
        wind_direction=wind.get("deg"),
        cloudiness=(payload.get("clouds") or {}).get("all"),
        condition=summary["main"],
        description=summary["description"],
        location=payload.get("name", ""),
        sunrise=_from_epoch(payload["sys"]["sunrise"]),
        sunset=_from_epoch(payload["sys"]["sunset"]),
        observed_at=_from_epoch(payload.get("dt", 0)),
    )


def _parse_forecast(payload: Dict[str, Any]) -> List[ForecastDay]:
    """Collapse 3-hour slots into per-day aggregates in the city's local time."""
    offset = timedelta(seconds=(payload.get("city") or {}).get("timezone", 0))
    slots: "OrderedDict[date, List[Dict[str, Any]]]" = OrderedDict()
    for item in payload["list"]:
        local_day = (_from_epoch(item["dt"]) + offset).date()
        slots.setdefault(local_day, []).append(item)

    forecast: List[ForecastDay] = []
    for day, items in list(slots.items())[:FORECAST_DAYS]:
        temps = [float(item["main"]["temp"]) for item in items]
        humidity = [float(item["main"]["humidity"]) for item in items]
        winds = [float((item.get("wind") or {}).get("speed", 0.0)) for item in items]
        rain = sum(float((item.get("rain") or {}).get("3h", 0.0)) for item in items)
        conditions = Counter(item["weather"][0]["main"] for item in items)
        forecast.append(
            ForecastDay(
                date=day,
                temp_min=min(temps),
                temp_max=max(temps),
                avg_humidity=sum(humidity) / len(humidity),
                precipitation=rain,
                condition=conditions.most_common(1)[0][0],
                wind_speed=sum(winds) / len(winds),
            )
        )
    return forecast


def get_weather_recommendation(
    forecast: Sequence[ForecastDay],
    current_moisture: Optional[float],
) -> WeatherRecommendation:
    """Advise on irrigation from the next three forecast days and soil moisture."""
    if not forecast:
        return WeatherRecommendation("MONITOR", "Weather data unavailable", "LOW")

    upcoming = list(forecast[:3])
    total_rain = sum(day.precipitation for day in upcoming)
    avg_max_temp = sum(day.temp_max for day in upcoming) / len(upcoming)

    if total_rain > 10:
        return WeatherRecommendation(
            "SKIP_IRRIGATION",
            f"{total_rain:.1f}mm rain expected. Skip irrigation.",
            "LOW",
        )

    if current_moisture is not None:
        if avg_max_temp > 35 and current_moisture < 50:
            return WeatherRecommendation(
                "IRRIGATE_NOW",
                "High temperatures ahead. Irrigate immediately.",
                "HIGH",
            )
        if current_moisture < 60 and total_rain < 5:
            return WeatherRecommendation(
                "SCHEDULE_IRRIGATION",
                "No significant rain expected. Plan irrigation.",
                "MEDIUM",
            )

    return WeatherRecommendation("MONITOR", "Conditions favorable. Continue monitoring.", "LOW")


@lru_cache
def build_default_weather_client() -> WeatherClient:
    """Factory that wires the client from environment settings."""
    settings = get_settings()
    return WeatherClient(
        api_key=settings.weather_api_key,
        lat=settings.weather_lat,
        lon=settings.weather_lon,
        cache=TTLCache(ttl_seconds=settings.weather_cache_seconds),
    )
