"""Contracts for the collaborators the skill consumes."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field

from weather_skill.memory.models import City, Message


@dataclass(slots=True)
class WeatherReport:
    """Current conditions as returned by the weather source."""

    description: list[str] = field(default_factory=list)
    temp: float = 0.0
    humidity: int = 0


class CityExtractor(ABC):
    """Find city entities mentioned in a message."""

    name: str

    @abstractmethod
    def extract(self, message: Message) -> list[City]:
        """Return matches ordered by confidence, best first.

        Raises ``CityNotFoundError`` when nothing matches and
        ``ExtractionError`` for any other failure.
        """

    def describe(self) -> str:
        """Return a human-readable description for observability dashboards."""

        return self.__doc__ or self.name


class WeatherService(ABC):
    """Look up current conditions for a city."""

    name: str

    @abstractmethod
    def fetch(self, city_name: str) -> WeatherReport:
        """Return the report for ``city_name`` or raise ``TransportError``."""

    def describe(self) -> str:
        return self.__doc__ or self.name
