import sqlite3

import pytest

from weather_skill.core.errors import SerializationError
from weather_skill.memory.models import City, MemoryEntry
from weather_skill.memory.store import SQLiteMemoryStore, json_loads


def test_set_and_get_round_trip(memory_store):
    city = City(name="Los Angeles", latitude=34.05, longitude=-118.24)
    memory_store.set("weather", "sess-1", "city", city.to_dict())

    blob, present = memory_store.get("weather", "sess-1", "city")

    assert present is True
    assert City.from_dict(json_loads(blob)) == city


def test_get_missing_key_reports_absent(memory_store):
    blob, present = memory_store.get("weather", "sess-1", "city")

    assert blob is None
    assert present is False
    assert memory_store.has("weather", "sess-1", "city") is False


def test_set_overwrites_previous_value(memory_store):
    memory_store.set("weather", "sess-1", "city", {"name": "Paris"})
    memory_store.set("weather", "sess-1", "city", {"name": "Berlin"})

    blob, _ = memory_store.get("weather", "sess-1", "city")

    assert json_loads(blob) == {"name": "Berlin"}


def test_keys_are_scoped_by_plugin_and_session(memory_store):
    memory_store.set("weather", "sess-1", "city", {"name": "Paris"})

    assert memory_store.has("weather", "sess-2", "city") is False
    assert memory_store.has("calendar", "sess-1", "city") is False


def test_clear_only_removes_named_key(memory_store):
    memory_store.set("weather", "sess-1", "city", {"name": "Paris"})
    memory_store.set("weather", "sess-1", "units", "metric")

    memory_store.clear("weather", "sess-1", "city")
    memory_store.clear("weather", "sess-1", "never-set")

    assert memory_store.has("weather", "sess-1", "city") is False
    assert memory_store.has("weather", "sess-1", "units") is True


def test_cursor_defaults_to_none_then_persists(tmp_path):
    db_path = tmp_path / "memory.db"
    store = SQLiteMemoryStore(db_path)
    assert store.load_cursor("weather", "sess-1") is None

    store.save_cursor("weather", "sess-1", 2)

    reopened = SQLiteMemoryStore(db_path)
    assert reopened.load_cursor("weather", "sess-1") == 2


def test_negative_cursor_rejected(memory_store):
    with pytest.raises(ValueError):
        memory_store.save_cursor("weather", "sess-1", -1)


def test_iter_sessions_lists_memory_and_cursor_sessions(memory_store):
    memory_store.set("weather", "b-session", "city", {"name": "Paris"})
    memory_store.save_cursor("weather", "a-session", 1)
    memory_store.save_cursor("calendar", "c-session", 1)

    assert list(memory_store.iter_sessions("weather")) == ["a-session", "b-session"]


def test_corrupt_blob_raises_serialization_error(memory_store):
    with sqlite3.connect(memory_store.db_path) as conn:
        conn.execute(
            "INSERT INTO memory (plugin_id, session_id, key, value, updated_at) VALUES (?, ?, ?, ?, ?)",
            ("weather", "sess-1", "city", "{not json", "2024-01-01T00:00:00"),
        )

    blob, present = memory_store.get("weather", "sess-1", "city")

    assert present is True
    with pytest.raises(SerializationError):
        json_loads(blob)


def test_entry_carries_update_time(memory_store):
    memory_store.set("weather", "sess-1", "city", {"name": "Paris"})

    entry = memory_store.get_entry("weather", "sess-1", "city")

    assert entry is not None
    assert entry.key == "city"
    assert entry.updated_at.tzinfo is not None


def test_new_entries_default_to_an_aware_timestamp():
    entry = MemoryEntry(session_id="sess-1", key="city", value="{}")

    assert entry.updated_at.utcoffset() is not None
