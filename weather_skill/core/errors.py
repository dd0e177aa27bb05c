"""Exception taxonomy and HTTP exception handling utilities."""

from __future__ import annotations

import logging

from fastapi import Request
from fastapi.responses import JSONResponse

logger = logging.getLogger("weather.errors")

APOLOGY = "Something went wrong, but I'll try to get that fixed right away."


class SkillError(Exception):
    """Base class for errors raised by the weather skill and its collaborators."""


class CityNotFoundError(SkillError):
    """No city could be found in the message or in memory."""


class ExtractionError(SkillError):
    """City extraction failed for a reason other than finding nothing."""


class TransportError(SkillError):
    """The weather source could not be reached or returned an unusable document."""


class SerializationError(SkillError):
    """A stored memory value does not deserialize to the expected shape."""


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:  # noqa: D401
    """Return a generic JSON error response while logging the exception."""

    logger.exception("Unhandled exception on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=500,
        content={
            "error": "internal_error",
            "message": APOLOGY,
        },
    )
