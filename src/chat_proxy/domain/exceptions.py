"""Domain exception hierarchy.

Each exception maps to an HTTP status code at the interface layer.
Inner layers raise these; the outermost error-handler translates them.
Messages never include the upstream auth token.
"""

from __future__ import annotations

from typing import Sequence


class ChatProxyError(Exception):
    """Base exception for the entire application."""


# ── Caller input ────────────────────────────────────────────────────────────


class ValidationError(ChatProxyError):
    """A request or configuration value violates a stated bound.

    ``field`` names the offending configuration field (camelCase) when a
    single field is at fault; ``errors`` carries every violated rule when a
    completion request is rejected.
    """

    def __init__(
        self,
        message: str,
        *,
        field: str | None = None,
        errors: Sequence[str] = (),
    ) -> None:
        super().__init__(message)
        self.field = field
        self.errors = list(errors) or [message]

    @classmethod
    def from_messages(cls, errors: Sequence[str]) -> ValidationError:
        return cls("Invalid request: " + "; ".join(errors), errors=errors)


# ── Configuration ───────────────────────────────────────────────────────────


class ConfigurationError(ChatProxyError):
    """Endpoint URL and/or auth token are not configured; no call was made."""

    def __init__(self, missing_fields: Sequence[str]) -> None:
        self.missing_fields = list(missing_fields)
        super().__init__(
            f"LLM API not configured (missing: {', '.join(self.missing_fields)}). "
            "Set the API URL and token via POST /api/config/api."
        )


class ConfigPersistenceError(ChatProxyError):
    """The configuration file could not be written."""


# ── Upstream LLM call ───────────────────────────────────────────────────────


class UpstreamError(ChatProxyError):
    """The LLM endpoint answered with an error status."""

    def __init__(self, status_code: int, upstream_message: str, *, rejected: bool) -> None:
        self.status_code = status_code
        self.upstream_message = upstream_message
        self.rejected = rejected
        super().__init__(f"LLM API Error ({status_code}): {upstream_message}")


class NetworkError(ChatProxyError):
    """No response was received (timeout, DNS failure, connection refused)."""


class NoResponseError(ChatProxyError):
    """The upstream response contained no usable choice."""


class RequestError(ChatProxyError):
    """Any other failure while issuing the call or reading its response."""
