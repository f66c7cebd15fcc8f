"""API routes — thin controllers that delegate to the store and gateway.

Configuration routes are plain ``def`` handlers (FastAPI runs them in its
threadpool); the store's lock serializes concurrent writes.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from chat_proxy.domain.entities import CompletionRequest
from chat_proxy.domain.exceptions import ValidationError
from chat_proxy.interface.dependencies import get_config_store, get_gateway
from chat_proxy.interface.schemas import (
    ApiConfigRequest,
    CompletionData,
    CompletionRequestBody,
    CompletionResponse,
    ConfigResponse,
    ConfigStatusBody,
    ConfigStatusResponse,
    ConfigUpdateRequest,
    ConfigUpdateResponse,
    ConnectionTestResponse,
    ErrorResponse,
    MessageResponse,
    SimpleCompletionRequest,
    SimpleCompletionResponse,
)
from chat_proxy.services.completion_gateway import CompletionGateway
from chat_proxy.services.config_store import ConfigStore

_ERRORS = {
    400: {"model": ErrorResponse, "description": "Invalid request or configuration value"},
    500: {"model": ErrorResponse, "description": "Configuration, upstream or network failure"},
}

config_router = APIRouter(prefix="/api/config", tags=["config"], responses=_ERRORS)
chat_router = APIRouter(prefix="/api/chat", tags=["chat"], responses=_ERRORS)


# ── Configuration ───────────────────────────────────────────────────────────


@config_router.get("", response_model=ConfigResponse)
def get_config(store: ConfigStore = Depends(get_config_store)) -> ConfigResponse:
    """Current configuration with the token masked."""
    status = store.get_config_status()
    return ConfigResponse(
        config=store.get_masked_config(),
        status=ConfigStatusBody(
            configured=status.configured, missing_fields=status.missing_fields
        ),
    )


@config_router.post("", response_model=ConfigUpdateResponse)
def update_config(
    body: ConfigUpdateRequest,
    store: ConfigStore = Depends(get_config_store),
) -> ConfigUpdateResponse:
    """Merge any subset of the LLM settings into the stored configuration."""
    changes = body.model_dump(exclude_none=True)
    if "endpoint_url" in changes or "auth_token" in changes:
        if not changes.get("endpoint_url") or not changes.get("auth_token"):
            raise ValidationError(
                "Both endpointUrl and authToken are required when updating API configuration",
                field="endpointUrl" if not changes.get("endpoint_url") else "authToken",
            )

    store.update_config(changes)
    return ConfigUpdateResponse(
        message="Configuration updated successfully",
        config=store.get_masked_config(),
    )


@config_router.post("/api", response_model=MessageResponse)
def set_api_config(
    body: ApiConfigRequest,
    store: ConfigStore = Depends(get_config_store),
) -> MessageResponse:
    """Set endpoint URL and token together."""
    if not body.api_url or not body.api_token:
        raise ValidationError("Both apiUrl and apiToken are required")

    store.set_api_config(body.api_url, body.api_token)
    return MessageResponse(message="API configuration updated successfully")


@config_router.get("/status", response_model=ConfigStatusResponse)
def get_config_status(store: ConfigStore = Depends(get_config_store)) -> ConfigStatusResponse:
    status = store.get_config_status()
    return ConfigStatusResponse(
        configured=status.configured, missing_fields=status.missing_fields
    )


@config_router.post("/reset", response_model=ConfigUpdateResponse)
def reset_config(store: ConfigStore = Depends(get_config_store)) -> ConfigUpdateResponse:
    store.reset_config()
    return ConfigUpdateResponse(
        message="Configuration reset to defaults",
        config=store.get_masked_config(),
    )


# ── Chat ────────────────────────────────────────────────────────────────────


@chat_router.post("/completion", response_model=CompletionResponse)
async def chat_completion(
    body: CompletionRequestBody,
    gateway: CompletionGateway = Depends(get_gateway),
) -> CompletionResponse:
    """Relay one prompt to the configured LLM endpoint."""
    result = await gateway.send_chat_completion(
        CompletionRequest(
            prompt=body.prompt,
            model=body.model,
            max_tokens=body.max_tokens,
            temperature=body.temperature,
        )
    )
    return CompletionResponse(
        data=CompletionData(
            id=result.id,
            model=result.model,
            text=result.text,
            total_tokens=result.total_tokens,
        )
    )


@chat_router.post("/simple", response_model=SimpleCompletionResponse)
async def simple_completion(
    body: SimpleCompletionRequest,
    gateway: CompletionGateway = Depends(get_gateway),
) -> SimpleCompletionResponse:
    """Relay one prompt and return only the generated text."""
    text = await gateway.send_completion(body.prompt, body.max_tokens)
    return SimpleCompletionResponse(response=text)


@chat_router.post(
    "/test",
    response_model=ConnectionTestResponse,
    responses={500: {"model": ConnectionTestResponse, "description": "Connection test failed"}},
)
async def test_connection(
    gateway: CompletionGateway = Depends(get_gateway),
) -> ConnectionTestResponse | JSONResponse:
    """Send a short fixed prompt and report latency."""
    result = await gateway.test_connection()
    response = ConnectionTestResponse(
        success=result.success,
        message=result.message,
        response_time_ms=result.response_time_ms,
    )
    if result.success:
        return response
    return JSONResponse(
        status_code=500,
        content=response.model_dump(by_alias=True, exclude_none=True),
    )
