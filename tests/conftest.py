from __future__ import annotations

import json
import os
import tempfile
from pathlib import Path

import pytest

# Point the app's memory DB somewhere disposable before weather_skill.main is imported.
os.environ.setdefault("SQLITE_PATH", str(Path(tempfile.mkdtemp(prefix="weather-skill-")) / "memory.db"))

from weather_skill.core.errors import CityNotFoundError, TransportError  # noqa: E402
from weather_skill.memory.models import City, Message  # noqa: E402
from weather_skill.tools.base import CityExtractor, WeatherReport, WeatherService  # noqa: E402


class StaticCityExtractor(CityExtractor):
    """Return canned cities for messages containing a known phrase."""

    name = "static"

    def __init__(self, cities: dict[str, list[City]] | None = None, error: Exception | None = None) -> None:
        self.cities = cities or {}
        self.error = error
        self.calls: list[str] = []

    def extract(self, message: Message) -> list[City]:
        self.calls.append(message.raw_text)
        if self.error is not None:
            raise self.error
        lowered = message.raw_text.lower()
        for phrase, cities in self.cities.items():
            if phrase.lower() in lowered:
                return list(cities)
        raise CityNotFoundError(message.raw_text)


class StaticWeatherService(WeatherService):
    """Serve canned reports and record which cities were looked up."""

    name = "static-weather"

    def __init__(self, reports: dict[str, WeatherReport] | None = None, default: WeatherReport | None = None) -> None:
        self.reports = reports or {}
        self.default = default
        self.fail = False
        self.calls: list[str] = []

    def fetch(self, city_name: str) -> WeatherReport:
        self.calls.append(city_name)
        if self.fail:
            raise TransportError("connection refused")
        report = self.reports.get(city_name, self.default)
        if report is None:
            raise TransportError(f"no data for {city_name}")
        return report


@pytest.fixture(scope="session")
def fixtures_dir() -> Path:
    return Path(__file__).parent / "fixtures"


@pytest.fixture
def rain_payload(fixtures_dir: Path) -> dict:
    return json.loads((fixtures_dir / "weather_rain.json").read_text(encoding="utf-8"))


@pytest.fixture
def clear_sky_payload(fixtures_dir: Path) -> dict:
    return json.loads((fixtures_dir / "weather_clear_sky.json").read_text(encoding="utf-8"))


@pytest.fixture
def city_extractor() -> StaticCityExtractor:
    return StaticCityExtractor(
        {
            "los angeles": [City(name="Los Angeles")],
            " la": [City(name="LA")],
            "paris": [City(name="Paris")],
        }
    )


@pytest.fixture
def weather_service() -> StaticWeatherService:
    return StaticWeatherService(
        {
            "LA": WeatherReport(description=["rain"], temp=65.4, humidity=81),
            "Los Angeles": WeatherReport(description=["sunny"], temp=71.6, humidity=30),
            "Paris": WeatherReport(description=[], temp=72.4, humidity=55),
        }
    )
