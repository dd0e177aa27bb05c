"""Announce the skill to the host assistant on startup."""

from __future__ import annotations

import logging
from typing import Any

import httpx

logger = logging.getLogger("weather.registration")


def registration_payload(plugin_id: str, trigger: dict[str, list[str]]) -> dict[str, Any]:
    return {
        "plugin_id": plugin_id,
        "trigger": trigger,
        "entry_points": {"run": "/run", "follow_up": "/follow_up"},
    }


def register_with_host(
    addr: str | None,
    plugin_id: str,
    trigger: dict[str, list[str]],
    *,
    timeout: float = 4.0,
    transport: httpx.BaseTransport | None = None,
) -> bool:
    """POST the registration to ``<addr>/plugins``; return whether the host accepted it."""

    if not addr:
        logger.info("No host address configured; skipping registration")
        return False

    try:
        with httpx.Client(timeout=timeout, transport=transport) as client:
            response = client.post(f"{addr}/plugins", json=registration_payload(plugin_id, trigger))
            response.raise_for_status()
    except httpx.HTTPError as exc:
        logger.warning("Registration with host %s failed: %s", addr, exc)
        return False

    logger.info("Registered plugin %s with host %s", plugin_id, addr)
    return True
