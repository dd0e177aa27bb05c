"""FastAPI application entry point for the weather skill."""

import logging
import sqlite3
from pathlib import Path
from typing import Any

from fastapi import Depends, FastAPI, HTTPException

from weather_skill.api.tools import create_tools_router
from weather_skill.core.config import get_settings
from weather_skill.core.errors import APOLOGY, unhandled_exception_handler
from weather_skill.core.logging import configure_logging, request_id_middleware
from weather_skill.core.metrics import MetricsCollector
from weather_skill.core.registration import register_with_host
from weather_skill.memory.models import Message
from weather_skill.memory.store import SQLiteMemoryStore
from weather_skill.planner.engine import DialogueEngine, TurnResult
from weather_skill.planner.weather import PLUGIN_TRIGGER, WeatherSkill
from weather_skill.tools.cities import GazetteerCityExtractor
from weather_skill.tools.weather import HTTPWeatherService

settings = get_settings()
logger = logging.getLogger("weather.app")

memory_store = SQLiteMemoryStore(settings.sqlite_path)
city_extractor = GazetteerCityExtractor(settings.cities_path)
weather_service = HTTPWeatherService(
    str(settings.weather_api_base),
    timeout=settings.weather_timeout_seconds,
)
skill = WeatherSkill(city_extractor, weather_service)
engine = skill.build_engine(settings.plugin_id, memory_store)
metrics = MetricsCollector()

app = FastAPI(title=settings.app_name, version="0.1.0", docs_url="/docs")

app.middleware("http")(request_id_middleware)

app.include_router(create_tools_router(city_extractor, weather_service))


@app.get("/health", tags=["health"])
async def health_check() -> dict[str, str]:
    """Return basic service status for monitoring."""

    return {"status": "ok"}


@app.get("/ready", tags=["health"])
async def readiness_probe() -> dict[str, Any]:
    """Readiness endpoint that verifies the memory DB and the city gazetteer."""

    components: dict[str, dict[str, Any]] = {}

    memory_ok = False
    memory_error: str | None = None
    try:
        db_path = Path(settings.sqlite_path)
        with sqlite3.connect(db_path) as conn:
            rows = conn.execute(
                "SELECT name FROM sqlite_master WHERE type='table' AND name IN ('memory','dialogue_states')"
            ).fetchall()
            memory_ok = len(rows) == 2
    except Exception as exc:  # noqa: BLE001
        memory_error = str(exc)
    components["memory_db"] = {
        "path": str(settings.sqlite_path),
        "ok": memory_ok,
        **({"error": memory_error} if memory_error else {}),
    }

    components["city_gazetteer"] = {
        "cities": len(city_extractor),
        "ok": len(city_extractor) > 0,
    }

    overall = "ok" if all(component["ok"] for component in components.values()) else "fail"
    return {
        "status": overall,
        "environment": settings.environment,
        "components": components,
    }


@app.get("/triggers", tags=["host"])
async def triggers() -> dict[str, Any]:
    """Coarse trigger the host uses to decide whether to invoke this skill."""

    return {"plugin_id": settings.plugin_id, "trigger": PLUGIN_TRIGGER.to_dict()}


def get_engine() -> DialogueEngine:
    """Dependency injector for the dialogue engine."""

    return engine


def get_memory_store() -> SQLiteMemoryStore:
    """Dependency injector for the memory store."""

    return memory_store


@app.get("/sessions", tags=["dialogue"])
def list_sessions(store: SQLiteMemoryStore = Depends(get_memory_store)) -> list[str]:
    """List sessions holding dialogue state (development helper)."""

    return list(store.iter_sessions(settings.plugin_id))


def _parse_turn(payload: dict) -> Message:
    session_id = payload.get("session_id")
    content = payload.get("content")
    if not session_id or not content:
        raise HTTPException(status_code=400, detail="session_id and content are required")
    return Message.from_text(str(session_id), str(content))


def _turn_payload(message: Message, result: TurnResult) -> dict[str, Any]:
    return {
        "session_id": message.session_id,
        "message": result.response,
        "source": result.source.value,
        "cursor": result.cursor,
        "handler": result.handler,
    }


def _record(collector: MetricsCollector, entry_point: str, result: TurnResult) -> None:
    collector.record_turn(
        entry_point,
        result.source.value,
        result.handler,
        apology=result.response == APOLOGY,
    )


@app.post("/run", tags=["dialogue"])
def run_turn(payload: dict, dialogue: DialogueEngine = Depends(get_engine)) -> dict[str, Any]:
    """Fresh top-level command: resets the session's flow before answering."""

    message = _parse_turn(payload)
    result = dialogue.run(message)
    _record(metrics, "run", result)
    return _turn_payload(message, result)


@app.post("/follow_up", tags=["dialogue"])
def follow_up_turn(payload: dict, dialogue: DialogueEngine = Depends(get_engine)) -> dict[str, Any]:
    """Continuation of an in-progress flow."""

    message = _parse_turn(payload)
    result = dialogue.follow_up(message)
    _record(metrics, "follow_up", result)
    return _turn_payload(message, result)


@app.on_event("startup")
async def configure_app() -> None:
    level = configure_logging(settings.log_level)
    logger.info("Logging configured at %s level for %s environment", logging.getLevelName(level), settings.environment)
    register_with_host(
        settings.registration_addr,
        settings.plugin_id,
        PLUGIN_TRIGGER.to_dict(),
        timeout=settings.weather_timeout_seconds,
    )


app.add_exception_handler(Exception, unhandled_exception_handler)


@app.get("/metrics", tags=["metrics"])
async def metrics_endpoint() -> dict:
    snapshot = metrics.snapshot()
    return {
        "total_turns": snapshot.total_turns,
        "entry_points": snapshot.entry_points,
        "response_sources": snapshot.response_sources,
        "handlers": snapshot.handlers,
        "apologies": snapshot.apologies,
    }
