"""Gazetteer-based city extraction."""

from __future__ import annotations

import json
import logging
import re
from pathlib import Path
from typing import Any, Iterable

from weather_skill.core.errors import CityNotFoundError, ExtractionError
from weather_skill.memory.models import City, Message, tokenize
from weather_skill.tools.base import CityExtractor

logger = logging.getLogger("weather.cities")

MAX_PHRASE_WORDS = 3


class GazetteerCityExtractor(CityExtractor):
    """Match one- to three-word phrases of a message against a table of known cities."""

    name = "gazetteer"

    def __init__(self, extra_cities_path: Path | None = None) -> None:
        self.extra_cities_path = Path(extra_cities_path) if extra_cities_path else None
        self._cities: dict[str, City] = {}
        self._aliases: dict[str, str] = {}
        for entry in STATIC_CITIES:
            self._add(entry)
        if self.extra_cities_path is not None:
            for entry in self._load_extra(self.extra_cities_path):
                self._add(entry)

    def __len__(self) -> int:
        return len(self._cities)

    def extract(self, message: Message) -> list[City]:
        tokens = list(message.tokens)
        if not tokens:
            raise CityNotFoundError("empty message")

        try:
            matches = self._scan(tokens)
        except Exception as exc:  # noqa: BLE001
            raise ExtractionError(f"city lookup failed: {exc}") from exc

        if not matches:
            raise CityNotFoundError(f"no known city in {message.raw_text!r}")

        # Longer phrases are more specific, then earlier mentions win.
        matches.sort(key=lambda item: (-item[0], item[1]))
        seen: set[str] = set()
        cities: list[City] = []
        for _, _, canonical in matches:
            if canonical in seen:
                continue
            seen.add(canonical)
            city = self._cities[canonical]
            cities.append(City(name=city.name, latitude=city.latitude, longitude=city.longitude))
        return cities

    def _scan(self, tokens: list[str]) -> list[tuple[int, int, str]]:
        matches: list[tuple[int, int, str]] = []
        consumed: set[int] = set()
        for size in range(min(MAX_PHRASE_WORDS, len(tokens)), 0, -1):
            for start in range(len(tokens) - size + 1):
                span = range(start, start + size)
                if any(idx in consumed for idx in span):
                    continue
                phrase = " ".join(tokens[start : start + size])
                canonical = self._aliases.get(phrase)
                if canonical is None:
                    continue
                consumed.update(span)
                matches.append((size, start, canonical))
        return matches

    def _add(self, entry: dict[str, Any]) -> None:
        city = City.from_dict(entry)
        canonical = city.name
        self._cities[canonical] = city
        for alias in _aliases_for_value(canonical, entry.get("aliases", ())):
            self._aliases.setdefault(alias, canonical)

    @staticmethod
    def _load_extra(path: Path) -> list[dict[str, Any]]:
        if not path.exists():
            logger.warning("City file %s not found; using built-in gazetteer only", path)
            return []
        with path.open("r", encoding="utf-8") as handle:
            data = json.load(handle)
        entries = data.get("cities") if isinstance(data, dict) else data
        if not isinstance(entries, list):
            raise ValueError(f"{path} must hold a list of cities")
        return [entry for entry in entries if isinstance(entry, dict)]


def _aliases_for_value(value: str, extra: Iterable[str] = ()) -> list[str]:
    lowered = value.strip().lower()
    if not lowered:
        return []

    aliases: set[str] = {" ".join(tokenize(lowered))}
    for alias in extra:
        normalized = " ".join(tokenize(str(alias)))
        if normalized:
            aliases.add(normalized)

    # "St. Louis" should also match "saint louis".
    if re.match(r"^st\b", lowered):
        aliases.add(" ".join(tokenize("saint" + lowered[2:])))

    return [alias for alias in aliases if alias]


STATIC_CITIES: list[dict[str, Any]] = [
    {"name": "Los Angeles", "latitude": 34.0522, "longitude": -118.2437, "aliases": ["la", "l a"]},
    {"name": "San Francisco", "latitude": 37.7749, "longitude": -122.4194, "aliases": ["sf", "frisco"]},
    {"name": "San Diego", "latitude": 32.7157, "longitude": -117.1611},
    {"name": "Seattle", "latitude": 47.6062, "longitude": -122.3321},
    {"name": "Portland", "latitude": 45.5152, "longitude": -122.6784},
    {"name": "Las Vegas", "latitude": 36.1699, "longitude": -115.1398, "aliases": ["vegas"]},
    {"name": "Phoenix", "latitude": 33.4484, "longitude": -112.0740},
    {"name": "Denver", "latitude": 39.7392, "longitude": -104.9903},
    {"name": "Dallas", "latitude": 32.7767, "longitude": -96.7970},
    {"name": "Houston", "latitude": 29.7604, "longitude": -95.3698},
    {"name": "Austin", "latitude": 30.2672, "longitude": -97.7431},
    {"name": "Chicago", "latitude": 41.8781, "longitude": -87.6298, "aliases": ["chi town"]},
    {"name": "St. Louis", "latitude": 38.6270, "longitude": -90.1994},
    {"name": "Atlanta", "latitude": 33.7490, "longitude": -84.3880},
    {"name": "Miami", "latitude": 25.7617, "longitude": -80.1918},
    {"name": "Boston", "latitude": 42.3601, "longitude": -71.0589},
    {"name": "New York", "latitude": 40.7128, "longitude": -74.0060, "aliases": ["nyc", "new york city"]},
    {"name": "Washington", "latitude": 38.9072, "longitude": -77.0369, "aliases": ["dc", "washington dc"]},
    {"name": "Philadelphia", "latitude": 39.9526, "longitude": -75.1652, "aliases": ["philly"]},
    {"name": "London", "latitude": 51.5074, "longitude": -0.1278},
    {"name": "Paris", "latitude": 48.8566, "longitude": 2.3522},
    {"name": "Berlin", "latitude": 52.5200, "longitude": 13.4050},
    {"name": "Tokyo", "latitude": 35.6762, "longitude": 139.6503},
    {"name": "Sydney", "latitude": -33.8688, "longitude": 151.2093},
    {"name": "Toronto", "latitude": 43.6532, "longitude": -79.3832},
]
