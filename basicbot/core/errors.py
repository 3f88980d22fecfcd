"""Exception types and handling utilities."""

from __future__ import annotations

import logging

from fastapi import Request
from fastapi.responses import JSONResponse

logger = logging.getLogger("basicbot.errors")


class BotError(Exception):
    """Base class for errors raised by the bot."""


class ConfigurationError(BotError):
    """A collaborator was selected but its settings are incomplete."""


class CollaboratorError(BotError):
    """An external collaborator (knowledge base, recognizer, catalog) failed."""

    def __init__(self, collaborator: str, message: str) -> None:
        super().__init__(f"{collaborator}: {message}")
        self.collaborator = collaborator


class DialogError(BotError):
    """The dialog engine was asked to do something it cannot do."""


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:  # noqa: D401
    """Return a generic JSON error response while logging the exception."""

    logger.exception("Unhandled exception on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=500,
        content={
            "error": "internal_error",
            "message": "Something unexpected happened. Please try again later.",
        },
    )
