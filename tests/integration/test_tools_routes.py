from fastapi.testclient import TestClient

from weather_skill import main
from weather_skill.core.errors import TransportError
from weather_skill.main import app
from weather_skill.tools.base import WeatherReport

client = TestClient(app)


def test_weather_tool_formats_report(monkeypatch):
    monkeypatch.setattr(
        main.weather_service,
        "fetch",
        lambda city_name: WeatherReport(description=["cloudy"], temp=58.7, humidity=70),
    )

    response = client.get("/tools/weather", params={"city": "Seattle"})

    assert response.status_code == 200
    payload = response.json()
    assert payload["message"] == "It's 59 and cloudy in Seattle."
    assert payload["report"]["humidity"] == 70


def test_weather_tool_requires_city():
    assert client.get("/tools/weather").status_code == 400


def test_weather_tool_outage_returns_404(monkeypatch):
    def failing_fetch(city_name):
        raise TransportError("timeout")

    monkeypatch.setattr(main.weather_service, "fetch", failing_fetch)

    response = client.get("/tools/weather", params={"city": "Seattle"})

    assert response.status_code == 404


def test_cities_tool_returns_matches():
    response = client.get("/tools/cities", params={"query": "weather in NYC"})

    assert response.status_code == 200
    assert response.json()["results"][0]["name"] == "New York"


def test_cities_tool_not_found():
    response = client.get("/tools/cities", params={"query": "nowhere special"})

    assert response.status_code == 404
