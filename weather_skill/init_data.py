"""One-time data seeding for the city gazetteer extension file.

If the configured ``cities_path`` does not exist yet, copy the seed file
bundled in the image under ``/app/db-seed``.
"""

from __future__ import annotations

import logging
import shutil
from pathlib import Path

from weather_skill.core.config import get_settings

logger = logging.getLogger("weather.init")

SEED_DIR = Path("/app/db-seed")


def _copy_if_missing(src: Path, dst: Path) -> bool:
    try:
        if dst.exists():
            return False
        if not src.exists():
            return False
        dst.parent.mkdir(parents=True, exist_ok=True)
        shutil.copy2(src, dst)
        logger.info("Seeded %s -> %s", src, dst)
        return True
    except OSError as exc:
        logger.warning("Failed to seed %s to %s: %s", src, dst, exc)
        return False


def seed_on_startup(seed_dir: Path = SEED_DIR) -> bool:
    """Copy the seed city list into place if missing; return whether anything was copied."""

    settings = get_settings()

    if settings.cities_path is None:
        logger.debug("No cities_path configured; skipping data seeding")
        return False
    if not seed_dir.exists():
        logger.debug("No seed directory present; skipping data seeding")
        return False

    return _copy_if_missing(seed_dir / "cities.json", Path(settings.cities_path))
