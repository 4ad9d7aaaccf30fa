# src/exbook/adapters/persistence/kv_store.py
"""
Key-Value Store - String-keyed Persistent Storage

The ledger, the admin settings feed and the auto-backup all persist through a
tiny getItem/setItem/removeItem contract. Two implementations are provided:

- JsonFileStore: every key lives in one JSON file, rewritten atomically
- MemoryStore: a plain dict, for hosts that persist elsewhere and for tests

Files that USE this module:
- exbook.adapters.persistence.ledger_store (snapshot read/write)
- exbook.adapters.persistence.admin_settings (admin settings feed)
- exbook.application.backup (backup preference and last run)
- exbook.app (builds the JsonFileStore)

Files that this module USES:
- exbook.domain.errors (PersistenceError)
"""
from __future__ import annotations

import json
import logging
import os
import shutil
import tempfile
from pathlib import Path
from typing import Dict, Optional, Protocol, Union

from exbook.domain.errors import PersistenceError

logger = logging.getLogger(__name__)


class KeyValueStore(Protocol):
    """Protocol for string-keyed storage backends."""

    def get_item(self, key: str) -> Optional[str]:
        ...

    def set_item(self, key: str, value: str) -> None:
        ...

    def remove_item(self, key: str) -> None:
        ...


class MemoryStore:
    """In-memory store."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._data: Dict[str, str] = dict(initial or {})

    def get_item(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._data[key] = value

    def remove_item(self, key: str) -> None:
        self._data.pop(key, None)

    def keys(self):
        return list(self._data)


class JsonFileStore:
    """
    Store backed by a single JSON object on disk.

    Reads are served from memory; every write rewrites the whole file with a
    temporary file and an atomic rename, so a crash leaves either the old or
    the new content, never half of each.
    """

    def __init__(self, path: Union[str, Path]):
        """
        Initialize the store and load the existing file if any.

        Args:
            path: Location of the JSON file
        """
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self._data: Dict[str, str] = self._load()

    def _load(self) -> Dict[str, str]:
        """
        Load the file from disk.

        Handles corrupt files gracefully by backing them up to *.corrupt and
        starting empty.
        """
        if not self.path.exists():
            logger.info("No store file found at %s", self.path)
            return {}

        try:
            with self.path.open("r", encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            backup_path = self.path.with_suffix(self.path.suffix + ".corrupt")
            try:
                shutil.copy2(self.path, backup_path)
                self.path.unlink()
                logger.warning("Store file corrupted, backed up to %s: %s", backup_path, e)
            except OSError as backup_error:
                logger.error("Failed to back up corrupt store file: %s", backup_error)
            return {}
        except OSError as e:
            logger.error("Failed to read store file %s: %s", self.path, e)
            return {}

        if not isinstance(data, dict):
            logger.warning("Store file %s does not hold an object, ignoring it", self.path)
            return {}
        return {str(k): str(v) for k, v in data.items() if v is not None}

    def _flush(self, data: Dict[str, str]) -> None:
        """
        Write data to disk using temp file + atomic rename.

        Raises:
            PersistenceError: If the file cannot be written
        """
        temp_fd, temp_path = tempfile.mkstemp(
            suffix=".json.tmp",
            dir=str(self.path.parent),
            text=True,
        )
        try:
            with os.fdopen(temp_fd, "w", encoding="utf-8") as f:
                json.dump(data, f, ensure_ascii=False, indent=2)
                f.flush()
                os.fsync(f.fileno())
            os.replace(temp_path, str(self.path))
        except Exception as e:
            try:
                os.unlink(temp_path)
            except OSError:
                pass
            logger.error("Failed to write store file %s: %s", self.path, e)
            raise PersistenceError(f"Failed to save store file: {e}") from e

    def get_item(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set_item(self, key: str, value: str) -> None:
        updated = dict(self._data)
        updated[key] = value
        self._flush(updated)
        self._data = updated

    def remove_item(self, key: str) -> None:
        if key not in self._data:
            return
        updated = dict(self._data)
        del updated[key]
        self._flush(updated)
        self._data = updated
