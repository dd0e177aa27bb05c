"""HTTP client for the weather data source."""

from __future__ import annotations

import logging

import httpx
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from weather_skill.core.errors import TransportError
from weather_skill.tools.base import WeatherReport, WeatherService


class WeatherPayload(BaseModel):
    """Wire shape of the weather source response."""

    model_config = ConfigDict(populate_by_name=True)

    description: list[str] = Field(default_factory=list, alias="Description")
    temp: float = Field(alias="Temp")
    humidity: int = Field(default=0, alias="Humidity")

    @field_validator("description", mode="before")
    @classmethod
    def _null_description(cls, value: object) -> object:
        return [] if value is None else value


class HTTPWeatherService(WeatherService):
    """Fetch current conditions from ``GET <base>/weather?city=<name>``."""

    name = "weather"

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = 4.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.base_url = str(base_url).rstrip("/")
        self.timeout = timeout
        self._transport = transport
        self._logger = logging.getLogger("weather.service")

    def fetch(self, city_name: str) -> WeatherReport:
        self._logger.debug("Getting weather for city %s", city_name)
        try:
            with httpx.Client(timeout=self.timeout, transport=self._transport) as client:
                response = client.get(f"{self.base_url}/weather", params={"city": city_name})
                response.raise_for_status()
                data = response.json()
        except httpx.HTTPStatusError as exc:
            raise TransportError(f"weather source returned {exc.response.status_code}") from exc
        except httpx.HTTPError as exc:
            raise TransportError(f"weather source unreachable: {exc}") from exc
        except ValueError as exc:
            raise TransportError(f"weather source sent invalid JSON: {exc}") from exc

        try:
            payload = WeatherPayload.model_validate(data)
        except ValidationError as exc:
            raise TransportError(f"unexpected weather document: {exc.error_count()} errors") from exc

        return WeatherReport(
            description=list(payload.description),
            temp=payload.temp,
            humidity=payload.humidity,
        )
