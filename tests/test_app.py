from datetime import date, datetime, timedelta, timezone
from typing import Iterator, List

import pytest
from fastapi.testclient import TestClient

from app.api import get_dashboard, get_weather_client
from app.main import create_app
from models.weather import ForecastDay
from services.dashboard import DashboardService, build_default_dashboard
from services.stages import AgronomyTables
from services.weather import WeatherClient, build_default_weather_client

_START = datetime(2024, 6, 1, 6, 0, tzinfo=timezone.utc)


class StubWeatherClient:
    def __init__(self, forecast: List[ForecastDay]) -> None:
        self.forecast = forecast

    def fetch_forecast(self) -> List[ForecastDay]:
        return self.forecast


def _stamp(index: int) -> str:
    return (_START + timedelta(hours=3 * index)).isoformat().replace("+00:00", "Z")


def _payload(**current_overrides) -> dict:
    current = {
        "moisture_15cm": 72,
        "moisture_30cm": 68,
        "moisture_45cm": 65,
        "temperature": 32.5,
        "humidity": 78,
    }
    current.update(current_overrides)
    temperatures = (24.2, 23.1, 22.8, 28.5, 34.2, 36.8, 32.1, 27.4)
    surface = (68, 70, 65, 62, 67, 71, 73)
    root_zone = (62, 63, 64, 65, 66, 65, 64)
    return {
        "current": current,
        "history": {
            "temperature": [
                {"timestamp": _stamp(index), "temperature": value}
                for index, value in enumerate(temperatures)
            ],
            "moisture": [
                {"timestamp": _stamp(index), "surface": top, "rootZone": root}
                for index, (top, root) in enumerate(zip(surface, root_zone))
            ],
        },
    }


@pytest.fixture
def forecast() -> List[ForecastDay]:
    return [
        ForecastDay(
            date=date(2024, 6, day),
            temp_min=24.0,
            temp_max=31.0,
            avg_humidity=65.0,
            precipitation=0.5,
            condition="Clear",
            wind_speed=2.0,
        )
        for day in (1, 2, 3)
    ]


@pytest.fixture
def api_client(forecast) -> Iterator[TestClient]:
    app = create_app()
    app.dependency_overrides[get_dashboard] = lambda: DashboardService(AgronomyTables())
    app.dependency_overrides[get_weather_client] = lambda: StubWeatherClient(forecast)
    client = TestClient(app)
    yield client
    app.dependency_overrides.clear()


def test_lifespan_clears_dashboard_cache() -> None:
    app = create_app()

    with TestClient(app):
        during = build_default_dashboard()
        assert build_default_dashboard() is during

    after = build_default_dashboard()
    try:
        assert after is not during
    finally:
        build_default_dashboard.cache_clear()


def test_health_endpoints(api_client: TestClient) -> None:
    assert api_client.get("/health").json() == {"status": "ok"}
    assert api_client.get("/").json()["status"] == "ok"


def test_metrics_endpoint(api_client: TestClient) -> None:
    response = api_client.post("/metrics", json=_payload())

    assert response.status_code == 200
    body = response.json()
    assert body["stage"] == "GRAND_GROWTH"
    assert body["thi"] == 86.5
    assert body["stress"]["level"] == "severe"
    assert body["cwsi"]["value"] == 0.36
    assert body["gdd_mode"] == "reading"
    assert body["gdd_summary"]["days_to_next_stage"] == 12
    assert body["infiltration"]["speed"] == "fast"
    assert body["moisture_status"]["moisture_15cm"]["status"] == "optimal"
    assert body["sensor_health"]["status"] == "healthy"


def test_metrics_accepts_snake_case_root_zone(api_client: TestClient) -> None:
    payload = _payload()
    for point in payload["history"]["moisture"]:
        point["root_zone"] = point.pop("rootZone")

    body = api_client.post("/metrics", json=payload).json()

    assert body["infiltration"]["root_avg"] == 64


def test_metrics_with_unknown_stage(api_client: TestClient) -> None:
    payload = _payload()
    payload["stage"] = "FLOWERING"

    response = api_client.post("/metrics", json=payload)

    assert response.status_code == 404
    assert "FLOWERING" in response.json()["detail"]


def test_metrics_requires_current_snapshot(api_client: TestClient) -> None:
    response = api_client.post("/metrics", json={"history": {}})

    assert response.status_code == 422


def test_metrics_with_null_readings(api_client: TestClient) -> None:
    response = api_client.post(
        "/metrics", json={"current": {"temperature": None, "moisture_30cm": 61}}
    )

    assert response.status_code == 200
    body = response.json()
    assert body["thi"] is None
    assert body["cwsi"]["level"] == "unknown"
    assert body["irrigation"] is None


def test_anomalies_endpoint(api_client: TestClient) -> None:
    response = api_client.post("/anomalies", json={"current": {"moisture_15cm": 150}})

    assert response.status_code == 200
    body = response.json()
    assert body["health"]["status"] == "critical"
    assert body["anomalies"][0]["sensor"] == "moisture_15cm"
    assert body["anomalies"][0]["message"] == "moisture reading above maximum (150 > 100)"


def test_stage_tables(api_client: TestClient) -> None:
    body = api_client.get("/stages").json()

    assert [stage["key"] for stage in body["growth_stages"]] == [
        "GERMINATION",
        "TILLERING",
        "GRAND_GROWTH",
        "MATURITY",
    ]
    assert body["gdd_stages"][0] == {"key": "GERMINATION", "name": "Germination", "min": 0, "max": 350}


def test_stage_for_gdd(api_client: TestClient) -> None:
    response = api_client.get("/gdd/stage", params={"gdd": 32, "avg_daily": 15})

    assert response.status_code == 200
    assert response.json() == {
        "stage": "GERMINATION",
        "name": "Germination",
        "progress": 9,
        "gdd_in_stage": 32,
        "gdd_needed_for_next": 318,
        "days_to_next_stage": 22,
        "next_stage": "TILLERING",
    }


def test_stage_for_gdd_rejects_negative(api_client: TestClient) -> None:
    assert api_client.get("/gdd/stage", params={"gdd": -1}).status_code == 422


def test_weather_recommendation(api_client: TestClient) -> None:
    response = api_client.get("/weather/recommendation", params={"moisture": 55})

    assert response.status_code == 200
    assert response.json() == {
        "action": "SCHEDULE_IRRIGATION",
        "message": "No significant rain expected. Plan irrigation.",
        "urgency": "MEDIUM",
        "forecast_days": 3,
    }


def test_weather_recommendation_without_moisture(api_client: TestClient) -> None:
    body = api_client.get("/weather/recommendation").json()

    assert body["action"] == "MONITOR"


def test_metrics_reports_rain(api_client: TestClient) -> None:
    payload = _payload(rain_active=True, rain_intensity=55)
    payload["history"]["rain"] = [
        {"date": "2024-05-31", "duration_hours": 1.5, "intensity": "light"},
        {"date": "2024-06-01", "duration_hours": 3.0, "intensity": "moderate"},
    ]

    body = api_client.post("/metrics", json=payload).json()

    assert body["rain"]["intensity"] == "moderate"
    assert body["rain"]["water_saved"] == 15
    assert body["rain_history"] == {
        "total_hours": 4.5,
        "rainy_days": 2,
        "avg_hours_per_rainy_day": 2.3,
        "last_rain_date": "2024-06-01",
    }


def test_lifespan_leaves_unused_weather_client_unbuilt(monkeypatch) -> None:
    built: List[object] = []
    real_init = WeatherClient.__init__

    def tracking_init(self, *args, **kwargs) -> None:
        built.append(self)
        real_init(self, *args, **kwargs)

    monkeypatch.setattr(WeatherClient, "__init__", tracking_init)
    build_default_weather_client.cache_clear()

    with TestClient(create_app()) as client:
        client.get("/health")

    assert built == []
    assert build_default_weather_client.cache_info().currsize == 0


def test_lifespan_closes_weather_client_in_use() -> None:
    build_default_weather_client.cache_clear()

    with TestClient(create_app()):
        weather = build_default_weather_client()

    assert weather._client.is_closed
    assert build_default_weather_client.cache_info().currsize == 0
