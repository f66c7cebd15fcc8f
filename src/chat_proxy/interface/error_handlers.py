"""Global exception handlers — translate domain errors to HTTP responses.

Each domain exception maps to an HTTP status code and a short label inside
the standard ``{"error": ..., "message": ..., "timestamp": ...}`` envelope.
Caller mistakes are 400; everything else the gateway classifies is 500.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from chat_proxy.domain.exceptions import (
    ChatProxyError,
    ConfigPersistenceError,
    ConfigurationError,
    NetworkError,
    NoResponseError,
    RequestError,
    UpstreamError,
    ValidationError,
)
from chat_proxy.interface.schemas import ErrorResponse

logger = logging.getLogger(__name__)

_EXCEPTION_STATUS: list[tuple[type[ChatProxyError], int, str]] = [
    (ValidationError, 400, "Invalid request"),
    (ConfigurationError, 500, "LLM API not configured"),
    (UpstreamError, 500, "LLM API error"),
    (NetworkError, 500, "LLM API unreachable"),
    (NoResponseError, 500, "No response from LLM"),
    (RequestError, 500, "Request failed"),
    (ConfigPersistenceError, 500, "Failed to save configuration"),
]


def error_json(
    status_code: int, error: str, message: str, details: list[str] | None = None
) -> JSONResponse:
    body = ErrorResponse(error=error, message=message, details=details)
    return JSONResponse(
        status_code=status_code,
        content=body.model_dump(exclude_none=True),
    )


def register_error_handlers(app: FastAPI) -> None:
    """Attach exception handlers to the FastAPI application."""

    # ── Domain exceptions ───────────────────────────────────────────────

    for exc_type, code, label in _EXCEPTION_STATUS:

        def _make_handler(
            status_code: int, error: str
        ):  # type: ignore[no-untyped-def]
            async def handler(request: Request, exc: Exception) -> JSONResponse:
                logger.warning("%s: %s", type(exc).__name__, exc)
                details = exc.errors if isinstance(exc, ValidationError) else None
                return error_json(status_code, error, str(exc), details)

            return handler

        app.add_exception_handler(exc_type, _make_handler(code, label))

    # ── Pydantic / FastAPI validation errors ────────────────────────────

    @app.exception_handler(RequestValidationError)
    async def validation_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        messages = []
        for err in exc.errors():
            loc = " → ".join(str(p) for p in err.get("loc", []))
            messages.append(f"{loc}: {err.get('msg', 'validation error')}")
        return error_json(400, "Invalid request", "; ".join(messages), messages)

    # ── Catch-all for unexpected errors ─────────────────────────────────

    @app.exception_handler(Exception)
    async def generic_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled exception")
        return error_json(
            500, "Internal server error", "An unexpected error occurred. Please try again later."
        )
