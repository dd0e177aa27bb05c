"""Weather skill: keyword handlers, city-collecting dialogue and answer formatting."""

from __future__ import annotations

import logging

from weather_skill.core.errors import (
    APOLOGY,
    CityNotFoundError,
    ExtractionError,
    SerializationError,
    TransportError,
)
from weather_skill.core.locks import SessionLocks
from weather_skill.memory.models import City
from weather_skill.memory.store import MemoryStore, json_loads
from weather_skill.planner.engine import DialogueEngine
from weather_skill.planner.state_machine import ConversationStateMachine
from weather_skill.planner.types import DialogueState, KeywordHandler, Trigger, TurnContext
from weather_skill.planner.vocab import IntentRouter
from weather_skill.tools.base import CityExtractor, WeatherReport, WeatherService

logger = logging.getLogger("weather.skill")

CITY_KEY = "city"
PROMPTED_KEY = "city_prompted"
CITY_PROMPT = "What city are you in?"

# Coarse trigger advertised to the host so it knows when to invoke the skill at all.
PLUGIN_TRIGGER = Trigger.of(
    commands=["what", "show", "tell", "is"],
    objects=["weather", "temperature", "temp", "outside", "raining"],
)
TEMP_TRIGGER = Trigger.of(
    commands=["what", "show", "tell"],
    objects=["weather", "temperature", "temp", "outside"],
)
RAIN_TRIGGER = Trigger.of(
    commands=["tell", "is"],
    objects=["rain", "raining"],
)

PLAIN_ADJECTIVES = {
    "clear",
    "overcast",
    "humid",
    "hot",
    "cold",
    "warm",
    "cool",
    "mild",
    "dry",
}


def format_weather(report: WeatherReport, city_name: str) -> str:
    """Render a report as one sentence."""

    temp = int(round(report.temp))
    phrase = report.description[0].strip() if report.description else ""
    if not phrase:
        return f"It's {temp} in {city_name} right now."

    if _is_adjective(phrase):
        return f"It's {temp} and {phrase} in {city_name}."
    return f"It's {temp} with {phrase} in {city_name}."


def _is_adjective(phrase: str) -> bool:
    words = phrase.split()
    if len(words) != 1:
        return False
    word = words[0].lower()
    return word.endswith("y") or word in PLAIN_ADJECTIVES


class WeatherSkill:
    """Answer temperature and rain questions, asking for the city when it is unknown."""

    def __init__(self, extractor: CityExtractor, weather: WeatherService) -> None:
        self.extractor = extractor
        self.weather = weather

    def describe(self) -> str:
        return "Keyword weather answers with a city-collecting dialogue fallback"

    def keyword_handlers(self) -> list[KeywordHandler]:
        return [
            KeywordHandler(trigger=TEMP_TRIGGER, fn=self.kw_get_temp, name="temperature"),
            KeywordHandler(trigger=RAIN_TRIGGER, fn=self.kw_get_raining, name="raining"),
        ]

    def states(self) -> list[DialogueState]:
        return [
            DialogueState(
                name="city",
                on_entry=self._ask_city,
                on_input=self._store_city,
                is_complete=self._city_known,
            ),
            DialogueState(
                name="temperature",
                on_entry=self._answer_temperature,
                on_input=self._store_city,
                is_complete=self._conversation_moved_on,
            ),
        ]

    def build_engine(
        self,
        plugin_id: str,
        memory: MemoryStore,
        locks: SessionLocks | None = None,
    ) -> DialogueEngine:
        router = IntentRouter(self.keyword_handlers())
        machine = ConversationStateMachine(plugin_id, self.states(), reset_keys=(CITY_KEY, PROMPTED_KEY))
        return DialogueEngine(plugin_id, router, machine, memory, locks=locks)

    # Keyword handlers

    def kw_get_temp(self, ctx: TurnContext) -> str:
        try:
            city = self.get_city(ctx)
        except ExtractionError:
            logger.exception("City extraction failed")
            return APOLOGY
        if city is None:
            return ""
        return self.lookup(city)

    def kw_get_raining(self, ctx: TurnContext) -> str:
        try:
            city = self.get_city(ctx)
        except ExtractionError:
            logger.exception("City extraction failed")
            return APOLOGY
        if city is None:
            return ""

        try:
            report = self.weather.fetch(city.name)
        except TransportError as exc:
            logger.warning("Weather lookup for %s failed: %s", city.name, exc)
            return APOLOGY

        if any("rain" in description.lower() for description in report.description):
            return f"It's raining in {city.name} right now."
        return f"It's not raining in {city.name} right now."

    # Dialogue states

    def _ask_city(self, ctx: TurnContext) -> str:
        # Only temperature questions open a city prompt; a rain-only question with
        # no city defers unless the user is already answering our prompt.
        if ctx.message.token_set & TEMP_TRIGGER.objects or ctx.has_memory(PROMPTED_KEY):
            ctx.remember(PROMPTED_KEY, True)
            return CITY_PROMPT
        return ""

    def _store_city(self, ctx: TurnContext) -> None:
        try:
            cities = self.extract_cities(ctx)
        except ExtractionError as exc:
            logger.warning("City extraction failed: %s", exc)
            ctx.scratch["extraction_error"] = exc
            return
        if cities:
            ctx.remember(CITY_KEY, cities[0].to_dict())

    def _city_known(self, ctx: TurnContext) -> tuple[bool, str]:
        if "extraction_error" in ctx.scratch:
            return False, APOLOGY
        return self.remembered_city(ctx) is not None, ""

    def _answer_temperature(self, ctx: TurnContext) -> str:
        city = self.remembered_city(ctx)
        if city is None:
            return CITY_PROMPT
        return self.lookup(city)

    def _conversation_moved_on(self, ctx: TurnContext) -> tuple[bool, str]:
        # A new city or another weather word keeps the answer state live.
        if "extraction_error" in ctx.scratch:
            return False, APOLOGY
        if ctx.scratch.get("cities"):
            return False, ""
        if ctx.message.token_set & TEMP_TRIGGER.objects:
            return False, ""
        return True, ""

    # Helpers

    def extract_cities(self, ctx: TurnContext) -> list[City]:
        """Return the cities in the turn's message, extracting at most once per turn."""

        if "cities" not in ctx.scratch:
            try:
                cities = self.extractor.extract(ctx.message)
            except CityNotFoundError:
                logger.debug("No city in %r", ctx.message.raw_text)
                cities = []
            ctx.scratch["cities"] = cities
        return ctx.scratch["cities"]

    def get_city(self, ctx: TurnContext) -> City | None:
        """Resolve the city from the message, falling back to memory.

        A city found in the message is remembered for later turns.
        """

        cities = self.extract_cities(ctx)
        if cities:
            city = cities[0]
            ctx.remember(CITY_KEY, city.to_dict())
            return city
        return self.remembered_city(ctx)

    def remembered_city(self, ctx: TurnContext) -> City | None:
        blob, present = ctx.recall(CITY_KEY)
        if not present:
            return None
        try:
            return City.from_dict(json_loads(blob))
        except (SerializationError, TypeError, ValueError) as exc:
            logger.warning("Ignoring unreadable city memory for session %s: %s", ctx.session_id, exc)
            return None

    def lookup(self, city: City) -> str:
        try:
            report = self.weather.fetch(city.name)
        except TransportError as exc:
            logger.warning("Weather lookup for %s failed: %s", city.name, exc)
            return APOLOGY
        return format_weather(report, city.name)
