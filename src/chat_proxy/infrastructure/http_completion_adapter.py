"""HTTP adapter — implements the CompletionClient port with httpx."""

from __future__ import annotations

import asyncio
import logging
from http import HTTPStatus
from typing import Any, Mapping

import httpx

from chat_proxy.domain.exceptions import NetworkError, RequestError, UpstreamError

logger = logging.getLogger(__name__)

_USER_AGENT = "chat-proxy/1.0"

# Redirects are followed; a 3xx that survives (no usable Location) cannot
# carry a completion and is reported like any other upstream answer.
UPSTREAM_UNFOLLOWED_MIN_STATUS = HTTPStatus.MULTIPLE_CHOICES
# Statuses from here up mean the upstream answered but refused the call;
# the request reached it, so this is an application error, not transport.
UPSTREAM_REJECTED_MIN_STATUS = HTTPStatus.BAD_REQUEST
# Statuses from here up mean the upstream itself failed while answering.
UPSTREAM_FAILED_MIN_STATUS = HTTPStatus.INTERNAL_SERVER_ERROR

_NETWORK_HINT = (
    "LLM API is not responding. Please check the API URL and network connection."
)


class HttpCompletionAdapter:
    """Concrete ``CompletionClient`` backed by a shared ``httpx.AsyncClient``."""

    def __init__(self, client: httpx.AsyncClient) -> None:
        self._client = client

    async def post_completion(
        self,
        endpoint_url: str,
        auth_token: str,
        payload: Mapping[str, Any],
        *,
        timeout_ms: int,
    ) -> dict[str, Any]:
        """POST the payload with bearer auth and translate every failure."""
        timeout_s = timeout_ms / 1000
        headers = {
            "Authorization": f"Bearer {auth_token}",
            "Content-Type": "application/json",
            "User-Agent": _USER_AGENT,
        }
        try:
            # httpx bounds each phase; wait_for bounds the whole exchange.
            resp = await asyncio.wait_for(
                self._client.post(
                    endpoint_url,
                    json=dict(payload),
                    headers=headers,
                    timeout=timeout_s,
                    follow_redirects=True,
                ),
                timeout=timeout_s,
            )
        except (httpx.TransportError, asyncio.TimeoutError) as exc:
            logger.warning("No response from LLM endpoint: %s", type(exc).__name__)
            raise NetworkError(_NETWORK_HINT) from exc
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            raise RequestError(f"Request failed: {exc}") from exc

        if resp.status_code >= UPSTREAM_UNFOLLOWED_MIN_STATUS:
            message = _extract_error_message(resp)
            logger.warning("LLM endpoint returned HTTP %d: %s", resp.status_code, message)
            raise UpstreamError(
                resp.status_code,
                message,
                rejected=resp.status_code < UPSTREAM_FAILED_MIN_STATUS,
            )

        try:
            data = resp.json()
        except ValueError as exc:
            raise RequestError("Request failed: LLM API returned a non-JSON body") from exc

        if not isinstance(data, dict):
            raise RequestError("Request failed: LLM API returned an unexpected response shape")
        return data


def _extract_error_message(resp: httpx.Response) -> str:
    """Best-effort message from an error body, falling back to the reason phrase."""
    try:
        body = resp.json()
    except ValueError:
        body = None

    if isinstance(body, dict):
        error = body.get("error")
        if isinstance(error, dict) and isinstance(error.get("message"), str):
            return error["message"]
        if isinstance(error, str) and error:
            return error
        for key in ("message", "detail"):
            value = body.get(key)
            if isinstance(value, str) and value:
                return value

    return resp.reason_phrase or f"HTTP {resp.status_code}"
