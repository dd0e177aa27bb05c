"""Process logging setup and per-request logging for the skill service."""

from __future__ import annotations

import logging
import time
import uuid
from typing import Callable

from fastapi import Request

logger = logging.getLogger("weather.request")

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"


def configure_logging(level_name: str) -> int:
    """Apply the process-wide logging configuration and return the numeric level."""

    level = getattr(logging, str(level_name).upper(), logging.INFO)
    logging.basicConfig(level=level, format=LOG_FORMAT)
    # Every weather lookup would otherwise log its own request line.
    logging.getLogger("httpx").setLevel(logging.WARNING)
    return level


async def request_id_middleware(request: Request, call_next: Callable):
    """Tag the request with an id and log one line once it has been answered."""

    request_id = request.headers.get("x-request-id") or uuid.uuid4().hex
    request.state.request_id = request_id
    started = time.perf_counter()

    response = await call_next(request)

    elapsed_ms = (time.perf_counter() - started) * 1000
    logger.info(
        "%s %s -> %d in %.1fms [rid=%s]",
        request.method,
        request.url.path,
        response.status_code,
        elapsed_ms,
        request_id,
    )
    response.headers["X-Request-ID"] = request_id
    return response
