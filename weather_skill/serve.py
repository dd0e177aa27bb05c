"""Launch script that seeds data before starting Uvicorn."""

from __future__ import annotations

import importlib
import logging
import os

import uvicorn

logger = logging.getLogger("weather.launcher")


def main() -> None:
    # Seed the gazetteer before the app module builds its extractor.
    try:
        from weather_skill.init_data import seed_on_startup  # noqa: WPS433 (import position)

        seed_on_startup()
    except Exception as exc:  # noqa: BLE001
        logger.warning("Data seeding step skipped: %s", exc)

    app_module = importlib.import_module("weather_skill.main")
    app = app_module.app  # type: ignore[attr-defined]

    port = int(os.environ.get("PORT", "8000"))
    uvicorn.run(app, host="0.0.0.0", port=port)


if __name__ == "__main__":
    main()
