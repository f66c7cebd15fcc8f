"""Port: configuration persistence — defined by the domain, implemented by infrastructure."""

from __future__ import annotations

from typing import Any, Mapping, Protocol


class ConfigRepository(Protocol):
    """Abstract contract for loading and saving the persisted LLM settings."""

    def load(self) -> Mapping[str, Any] | None:
        """Return the stored camelCase mapping, or ``None`` when absent or unreadable."""
        ...

    def save(self, data: Mapping[str, Any]) -> None:
        """Persist *data* completely or not at all."""
        ...
