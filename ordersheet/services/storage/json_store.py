"""
JSON file state storage.

One ``<key>.json`` file per document in a state directory; the on-disk
counterpart of browser local storage.
"""

import copy
import json
import os
import tempfile
from pathlib import Path
from typing import Any

from loguru import logger

from .state_store_base import StateStoreBase


class JsonFileStore(StateStoreBase):
    """
    File-backed state store.

    Features:
    - Persistent storage across application restarts
    - Whole-document rewrite on every change (atomic rename)
    - Corrupt or unreadable documents fall back to the caller's default
    """

    def __init__(self, directory: str | Path):
        """
        Initialize store with its state directory.

        Args:
            directory: Folder holding the JSON documents (created if missing)
        """
        self.directory = Path(directory)
        self.directory.mkdir(parents=True, exist_ok=True)

    def path_for(self, key: str) -> Path:
        return self.directory / f"{key}.json"

    def read(self, key: str, default: Any = None) -> Any:
        path = self.path_for(key)
        if not path.exists():
            return default

        try:
            with open(path, "r", encoding="utf-8") as f:
                return json.load(f)
        except (OSError, ValueError) as e:
            logger.error("Failed to parse stored state, using default", key=key, path=str(path), error=str(e))
            return default

    def write(self, key: str, value: Any) -> None:
        path = self.path_for(key)
        fd, tmp_path = tempfile.mkstemp(dir=self.directory, suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(value, f, indent=2)
            os.replace(tmp_path, path)
        except Exception:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise


class MemoryStore(StateStoreBase):
    """In-memory state store (for testing/demo)"""

    def __init__(self):
        self._documents: dict[str, Any] = {}

    def read(self, key: str, default: Any = None) -> Any:
        if key not in self._documents:
            return default
        return copy.deepcopy(self._documents[key])

    def write(self, key: str, value: Any) -> None:
        # Round-trip through JSON so the in-memory store rejects what a file would
        self._documents[key] = json.loads(json.dumps(value))
