"""Pytest unit test fixtures."""

import pytest

from weather_skill.memory.store import SQLiteMemoryStore
from weather_skill.planner.weather import WeatherSkill


@pytest.fixture()
def memory_store(tmp_path):
    db_path = tmp_path / "memory.db"
    return SQLiteMemoryStore(db_path)


@pytest.fixture()
def skill(city_extractor, weather_service):
    return WeatherSkill(city_extractor, weather_service)


@pytest.fixture()
def engine(skill, memory_store):
    return skill.build_engine("weather", memory_store)
