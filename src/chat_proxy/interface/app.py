"""FastAPI application factory."""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator

import httpx
from fastapi import FastAPI

from chat_proxy.infrastructure.config import Settings, get_settings
from chat_proxy.interface.dependencies import shutdown, startup
from chat_proxy.interface.error_handlers import register_error_handlers
from chat_proxy.interface.routes import chat_router, config_router
from chat_proxy.services.config_store import ConfigStore
from chat_proxy.utils.time import utc_timestamp


def create_app(
    settings: Settings | None = None,
    *,
    config_store: ConfigStore | None = None,
    http_client: httpx.AsyncClient | None = None,
) -> FastAPI:
    """Build and wire the FastAPI application.

    *config_store* and *http_client* are created during startup when not
    supplied; a supplied client is left open on shutdown.
    """
    settings = settings or get_settings()

    @asynccontextmanager
    async def _lifespan(app: FastAPI) -> AsyncIterator[None]:
        """Manage startup / shutdown of shared resources."""
        await startup(app, settings, config_store=config_store, http_client=http_client)
        yield
        await shutdown(app)

    app = FastAPI(
        title="Chat Proxy",
        version="1.0.0",
        description=(
            "Local proxy that relays editor chat prompts to a configurable "
            "LLM completion endpoint and manages its stored settings."
        ),
        lifespan=_lifespan,
    )

    register_error_handlers(app)
    app.include_router(config_router)
    app.include_router(chat_router)

    # ── Health check ────────────────────────────────────────────────

    @app.get("/health", include_in_schema=False)
    async def health() -> dict[str, str]:
        return {"status": "ok", "timestamp": utc_timestamp()}

    return app
