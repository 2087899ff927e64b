"""JSON file implementation of the key-value store."""

import json
import logging
from dataclasses import dataclass
from pathlib import Path

from calorie_tracker.services.storage import KeyValueStore

_logger = logging.getLogger(__name__)


@dataclass
class JsonFileKeyValueStore(KeyValueStore):
    """Key-value store persisted as a single JSON object on disk."""

    path: Path

    @classmethod
    def create(cls, path: str) -> "JsonFileKeyValueStore":
        """Create a store for the given file path."""
        return cls(path=Path(path).expanduser())

    def get_item(self, key: str) -> str | None:
        """Return the raw value stored for a key."""
        value = self._read().get(key)
        return value if isinstance(value, str) else None

    def set_item(self, key: str, value: str) -> None:
        """Write a raw value for a key."""
        items = self._read_for_write()
        items[key] = value
        self._write(items)

    def remove_item(self, key: str) -> None:
        """Delete a key from the file if present."""
        items = self._read_for_write()
        if items.pop(key, None) is not None:
            self._write(items)

    def _read(self) -> dict[str, object]:
        if not self.path.exists():
            return {}
        data = json.loads(self.path.read_text(encoding="utf-8") or "{}")
        if not isinstance(data, dict):
            raise ValueError(f"Storage file {self.path} is not a JSON object")
        return data

    def _read_for_write(self) -> dict[str, object]:
        # Unreadable content is replaced by the next write.
        try:
            return self._read()
        except ValueError:
            _logger.warning(
                "Discarding unreadable storage file %s", self.path, exc_info=True
            )
            return {}

    def _write(self, items: dict[str, object]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        tmp_path.write_text(json.dumps(items, indent=2), encoding="utf-8")
        tmp_path.replace(self.path)
