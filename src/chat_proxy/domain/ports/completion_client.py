"""Port: outbound completion call — defined by the domain, implemented by infrastructure."""

from __future__ import annotations

from typing import Any, Mapping, Protocol


class CompletionClient(Protocol):
    """Abstract contract for a single authenticated HTTP completion call.

    Implementations raise :class:`UpstreamError`, :class:`NetworkError` or
    :class:`RequestError` and never leak transport exceptions.
    """

    async def post_completion(
        self,
        endpoint_url: str,
        auth_token: str,
        payload: Mapping[str, Any],
        *,
        timeout_ms: int,
    ) -> dict[str, Any]:
        """POST *payload* and return the decoded JSON object body."""
        ...
