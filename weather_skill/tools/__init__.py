"""Collaborator package exports."""

from .base import CityExtractor, WeatherReport, WeatherService
from .cities import GazetteerCityExtractor
from .weather import HTTPWeatherService

__all__ = [
    "CityExtractor",
    "WeatherReport",
    "WeatherService",
    "GazetteerCityExtractor",
    "HTTPWeatherService",
]
