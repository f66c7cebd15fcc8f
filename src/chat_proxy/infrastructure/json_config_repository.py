"""JSON file adapter — implements the ConfigRepository port."""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Mapping

from chat_proxy.domain.exceptions import ConfigPersistenceError

logger = logging.getLogger(__name__)

_DIR_MODE = 0o700
_FILE_MODE = 0o600


class JsonFileConfigRepository:
    """Stores the LLM configuration as one JSON object in a user-private file."""

    def __init__(self, path: Path | str) -> None:
        self._path = Path(path).expanduser()

    def load(self) -> Mapping[str, Any] | None:
        """Read the stored object; damaged or missing files yield ``None``."""
        try:
            raw = self._path.read_text(encoding="utf-8")
        except FileNotFoundError:
            logger.info("No configuration file at %s, using defaults", self._path)
            return None
        except OSError as exc:
            logger.warning("Cannot read configuration file %s: %s", self._path, exc)
            return None

        try:
            data = json.loads(raw)
        except json.JSONDecodeError as exc:
            logger.warning("Configuration file %s is not valid JSON (%s), ignoring it", self._path, exc)
            return None

        if not isinstance(data, dict):
            logger.warning("Configuration file %s does not hold a JSON object, ignoring it", self._path)
            return None
        return data

    def save(self, data: Mapping[str, Any]) -> None:
        """Write *data* atomically (temp file + fsync + rename)."""
        try:
            self._path.parent.mkdir(mode=_DIR_MODE, parents=True, exist_ok=True)
            descriptor, tmp_name = tempfile.mkstemp(
                dir=str(self._path.parent), prefix=f".{self._path.name}.", suffix=".tmp"
            )
            try:
                with os.fdopen(descriptor, "w", encoding="utf-8") as handle:
                    json.dump(dict(data), handle, indent=2)
                    handle.flush()
                    os.fsync(handle.fileno())
                os.chmod(tmp_name, _FILE_MODE)
                os.replace(tmp_name, self._path)
            finally:
                if os.path.exists(tmp_name):
                    os.unlink(tmp_name)
        except OSError as exc:
            logger.error("Failed to save configuration to %s: %s", self._path, exc)
            raise ConfigPersistenceError(f"Failed to save configuration: {exc.strerror or exc}") from exc
        logger.debug("Configuration saved to %s", self._path)
