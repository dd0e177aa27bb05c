"""API routes for direct collaborator access."""

from __future__ import annotations

from fastapi import APIRouter, HTTPException

from weather_skill.core.errors import CityNotFoundError, ExtractionError, TransportError
from weather_skill.memory.models import Message
from weather_skill.planner.weather import format_weather
from weather_skill.tools.base import CityExtractor, WeatherService


def create_tools_router(extractor: CityExtractor, weather: WeatherService) -> APIRouter:
    router = APIRouter(prefix="/tools", tags=["tools"])

    @router.get("/weather")
    def weather_endpoint(city: str | None = None) -> dict:
        if not city or not city.strip():
            raise HTTPException(status_code=400, detail="city parameter is required")

        name = city.strip()
        try:
            report = weather.fetch(name)
        except TransportError as exc:
            raise HTTPException(status_code=404, detail=f"weather unavailable for {name}") from exc

        return {
            "message": format_weather(report, name),
            "report": {
                "description": report.description,
                "temp": report.temp,
                "humidity": report.humidity,
            },
        }

    @router.get("/cities")
    def cities_endpoint(query: str | None = None) -> dict:
        if not query:
            raise HTTPException(status_code=400, detail="query parameter is required")

        message = Message.from_text("tool-cities", query)
        try:
            cities = extractor.extract(message)
        except CityNotFoundError as exc:
            raise HTTPException(status_code=404, detail="no city found") from exc
        except ExtractionError as exc:
            raise HTTPException(status_code=502, detail="city extraction failed") from exc

        return {"results": [city.to_dict() for city in cities]}

    return router
