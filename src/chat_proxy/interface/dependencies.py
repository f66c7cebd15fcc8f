"""FastAPI dependency injection wiring.

The configuration store and gateway are owned by the application object
(``app.state``) rather than module globals, so tests can build isolated
apps with their own store and HTTP transport.
"""

from __future__ import annotations

import httpx
from fastapi import FastAPI, Request

from chat_proxy.infrastructure.config import LlmSeedSettings, Settings
from chat_proxy.infrastructure.http_completion_adapter import HttpCompletionAdapter
from chat_proxy.infrastructure.json_config_repository import JsonFileConfigRepository
from chat_proxy.services.completion_gateway import CompletionGateway
from chat_proxy.services.config_defaults import resolve_default_config
from chat_proxy.services.config_store import ConfigStore


async def startup(
    app: FastAPI,
    settings: Settings,
    *,
    config_store: ConfigStore | None = None,
    http_client: httpx.AsyncClient | None = None,
) -> None:
    """Initialise shared resources — called from the lifespan context manager."""
    owned_client = None
    if http_client is None:
        http_client = owned_client = httpx.AsyncClient(follow_redirects=True)
    if config_store is None:
        config_store = ConfigStore(
            JsonFileConfigRepository(settings.config_file),
            defaults=resolve_default_config(LlmSeedSettings()),
        )

    app.state.config_store = config_store
    app.state.gateway = CompletionGateway(config_store, HttpCompletionAdapter(http_client))
    app.state.owned_http_client = owned_client


async def shutdown(app: FastAPI) -> None:
    """Release shared resources."""
    client = getattr(app.state, "owned_http_client", None)
    if client is not None:
        await client.aclose()
        app.state.owned_http_client = None


def get_config_store(request: Request) -> ConfigStore:
    store = getattr(request.app.state, "config_store", None)
    assert store is not None, "startup() was not called"
    return store


def get_gateway(request: Request) -> CompletionGateway:
    gateway = getattr(request.app.state, "gateway", None)
    assert gateway is not None, "startup() was not called"
    return gateway
