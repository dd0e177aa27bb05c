"""Application settings and configuration helpers."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic import AnyHttpUrl, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Strongly-typed configuration sourced from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    app_name: str = Field(default="Weather Skill", description="Human-readable service name.")
    environment: str = Field(default="local", description="Deployment environment identifier.")
    plugin_id: str = Field(default="weather", description="Identifier registered with the host assistant.")

    sqlite_path: Path = Field(
        default=Path("../db/weather_memory.db"),
        description="Slot memory and dialogue cursor DB path.",
    )
    cities_path: Path | None = Field(
        default=None,
        description="Optional JSON file extending the built-in city gazetteer.",
    )

    weather_api_base: AnyHttpUrl = Field(
        default="https://www.itsabot.org/api",
        description="Base URL of the weather data source.",
    )
    weather_timeout_seconds: float = Field(
        default=4.0,
        ge=1.0,
        le=30.0,
        description="Timeout applied to every weather lookup.",
    )

    core_addr: str | None = Field(
        default=None,
        description="Host address the skill registers with on startup.",
    )
    test_core_addr: str | None = Field(
        default=None,
        description="Host address used instead of core_addr when running in test mode.",
    )
    abot_env: str = Field(default="", description="Set to 'test' to select test-mode addressing.")

    log_level: str = Field(default="INFO", description="Application log level.")

    @property
    def test_mode(self) -> bool:
        return self.abot_env.strip().lower() == "test"

    @property
    def registration_addr(self) -> str | None:
        """Return the host address to register with, honouring test mode."""

        addr = self.test_core_addr if self.test_mode else self.core_addr
        if not addr:
            return None
        return addr.rstrip("/")


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached application settings instance."""

    return Settings()
