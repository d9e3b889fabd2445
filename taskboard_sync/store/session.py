"""
Durable storage for session values.

Only the credential key, the authenticated identity and the connection
descriptor are stored here. Entity collections live in the remote backend.
"""
from __future__ import annotations

import json
import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)

CREDENTIAL_KEY = "credential_key"
CURRENT_USER = "current_user"
CONNECTION = "connection"


class SessionStorage(ABC):
    """Abstract key/value storage for JSON-compatible session values."""

    @abstractmethod
    def load(self, key: str) -> Optional[Any]:
        """Return the stored value, or None if absent."""
        pass

    @abstractmethod
    def save(self, key: str, value: Any) -> None:
        """Store a JSON-compatible value."""
        pass

    @abstractmethod
    def delete(self, key: str) -> None:
        """Remove a key if present."""
        pass


class MemorySessionStorage(SessionStorage):
    """Non-durable storage, for tests and throwaway sessions."""

    def __init__(self, initial: Optional[Dict[str, Any]] = None):
        self.data: Dict[str, Any] = dict(initial or {})

    def load(self, key: str) -> Optional[Any]:
        return self.data.get(key)

    def save(self, key: str, value: Any) -> None:
        self.data[key] = value

    def delete(self, key: str) -> None:
        self.data.pop(key, None)


class FileSessionStorage(SessionStorage):
    """Session values in a single JSON file.

    Structure:
        {
          "credential_key": "...",
          "current_user": {"id": ..., "name": ..., "email": ..., "role": ...},
          "connection": {"endpoint_url": "..."}
        }
    """

    def __init__(self, path: Path):
        """Initialize with the path of the session file.

        Args:
            path: JSON file, created on first save
        """
        self.path = Path(path)

    def _read(self) -> Dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Error reading session file {self.path}: {e}")
            return {}
        if not isinstance(data, dict):
            logger.warning(f"Ignoring session file {self.path}: not a JSON object")
            return {}
        return data

    def _write(self, data: Dict[str, Any]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        tmp.write_text(json.dumps(data, indent=2, sort_keys=True), encoding="utf-8")
        tmp.replace(self.path)

    def load(self, key: str) -> Optional[Any]:
        return self._read().get(key)

    def save(self, key: str, value: Any) -> None:
        data = self._read()
        data[key] = value
        self._write(data)

    def delete(self, key: str) -> None:
        data = self._read()
        if key in data:
            del data[key]
            self._write(data)

    def get_uri(self) -> str:
        return f"file://{self.path.absolute()}"
