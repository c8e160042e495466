"""
Durable key-value storage on the local filesystem.

Each key is one JSON file inside the store directory. Writes go to a
temporary file first and are renamed into place so a crash mid-write never
leaves a truncated record.
"""

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Optional

from hotel_occupancy.core.errors import StorageError

logger = logging.getLogger(__name__)


class JsonFileStore:
    """
    Key-value store backed by one JSON file per key.

    Keys must be plain names (letters, digits, "_", "-", ".").
    """

    def __init__(self, directory: str | Path) -> None:
        """
        Initialize the store.

        Args:
            directory: Directory holding the record files (created on first write)
        """
        self.directory = Path(directory)

    def _path(self, key: str) -> Path:
        if not key or "/" in key or "\\" in key or key.startswith("."):
            raise ValueError(f"Invalid storage key: {key!r}")
        return self.directory / f"{key}.json"

    def get(self, key: str) -> Optional[Any]:
        """
        Read a record.

        Args:
            key: Record name

        Returns:
            The decoded JSON value, or None if the record does not exist

        Raises:
            StorageError: If the record exists but cannot be read or decoded
        """
        path = self._path(key)
        if not path.exists():
            return None

        try:
            with path.open("r", encoding="utf-8") as f:
                return json.load(f)
        except (OSError, json.JSONDecodeError, UnicodeDecodeError) as e:
            raise StorageError(f"Failed to read record '{key}' from {path}: {e}") from e

    def set(self, key: str, value: Any) -> None:
        """
        Write a record atomically.

        Args:
            key: Record name
            value: JSON-serializable value

        Raises:
            StorageError: If the record cannot be written
        """
        path = self._path(key)
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(prefix=f".{key}.", suffix=".tmp", dir=self.directory)
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    json.dump(value, f)
                os.replace(tmp_name, path)
            except BaseException:
                if os.path.exists(tmp_name):
                    os.unlink(tmp_name)
                raise
        except (OSError, TypeError, ValueError) as e:
            raise StorageError(f"Failed to write record '{key}' to {path}: {e}") from e

        logger.debug(f"Wrote record '{key}' to {path}")

    def delete(self, key: str) -> None:
        """
        Remove a record if present.

        Args:
            key: Record name
        """
        path = self._path(key)
        try:
            path.unlink(missing_ok=True)
        except OSError as e:
            raise StorageError(f"Failed to delete record '{key}': {e}") from e
