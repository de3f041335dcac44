from __future__ import annotations

import copy
import json
import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, Optional
from urllib.parse import quote

from ledger.config import SNAPSHOT_DIR, STORAGE_KEY
from ledger.errors import PersistenceError

logger = logging.getLogger(__name__)


def storage_key(owner: str, prefix: str = STORAGE_KEY) -> str:
    return f"{prefix}_{owner}"


class SnapshotRepository(ABC):

    @abstractmethod
    def load(self, key: str) -> Optional[Dict[str, Any]]:
        """Return the stored payload, ``None`` if absent.

        Raises PersistenceError when the payload exists but cannot be read.
        """

    @abstractmethod
    def save(self, key: str, payload: Dict[str, Any]) -> None:
        """Replace the payload stored under ``key``."""


class InMemorySnapshotRepository(SnapshotRepository):
    """Keeps payloads in a dict; used by tests and throwaway sessions."""

    def __init__(self, initial: Optional[Dict[str, Dict[str, Any]]] = None):
        self._data: Dict[str, Dict[str, Any]] = copy.deepcopy(initial or {})

    def load(self, key: str) -> Optional[Dict[str, Any]]:
        payload = self._data.get(key)
        return copy.deepcopy(payload) if payload is not None else None

    def save(self, key: str, payload: Dict[str, Any]) -> None:
        self._data[key] = copy.deepcopy(payload)

    def keys(self) -> list[str]:
        return sorted(self._data)


class JsonFileSnapshotRepository(SnapshotRepository):
    """One JSON file per key inside ``directory``."""

    def __init__(self, directory: Path | None = None):
        self.directory = Path(directory or SNAPSHOT_DIR)

    def get_path(self, key: str) -> Path:
        # percent-encoding keeps distinct owners in distinct files
        return self.directory / f"{quote(key, safe='@.-_')}.json"

    def load(self, key: str) -> Optional[Dict[str, Any]]:
        target = self.get_path(key)
        if not target.exists():
            return None
        try:
            with target.open('r', encoding='utf-8') as handle:
                return json.load(handle)
        except (json.JSONDecodeError, OSError, UnicodeDecodeError) as e:
            raise PersistenceError(f"Could not read snapshot {target.name}: {e}") from e

    def save(self, key: str, payload: Dict[str, Any]) -> None:
        target = self.get_path(key)
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            with target.open('w', encoding='utf-8') as handle:
                json.dump(payload, handle, indent=2, sort_keys=True)
        except OSError as e:
            raise PersistenceError(f"Could not write snapshot {target.name}: {e}") from e
        logger.debug("Saved snapshot %s", target)
