"""Persistent key-value values backed by a synchronous string store."""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Generic, Protocol, TypeVar

from pydantic import TypeAdapter

HISTORY_STORAGE_KEY = "calorie-tracker:history"
GOAL_STORAGE_KEY = "calorie-tracker:daily-goal"
USER_PROFILE_STORAGE_KEY = "calorie-tracker:user-profile"
PROFILE_SETUP_COMPLETE_KEY = "calorie-tracker:profile-setup-complete"

T = TypeVar("T")

_logger = logging.getLogger(__name__)


class KeyValueStore(Protocol):
    """Synchronous string key-value storage, such as a local storage file."""

    def get_item(self, key: str) -> str | None:
        """Return the raw value for a key, or None when absent."""

    def set_item(self, key: str, value: str) -> None:
        """Store a raw value for a key."""

    def remove_item(self, key: str) -> None:
        """Remove a key if present."""


@dataclass
class PersistentValue(Generic[T]):
    """One JSON-serialized value stored under a key.

    The stored value is read by ``load``. Until then ``initialized`` is False
    and ``value`` holds the default, which callers must not treat as the
    persisted state. Writes are fire-and-forget: failures are logged and
    never raised.
    """

    store: KeyValueStore
    key: str
    default: T
    adapter: TypeAdapter[T]
    _value: T = field(init=False)
    _initialized: bool = field(init=False, default=False)

    def __post_init__(self) -> None:
        self._value = self.default

    @property
    def value(self) -> T:
        """Return the current in-memory value."""
        return self._value

    @property
    def initialized(self) -> bool:
        """Return True once the stored value has been read."""
        return self._initialized

    def get(self) -> tuple[T, bool]:
        """Return the current value and whether it is initialized."""
        return self._value, self._initialized

    def load(self) -> T:
        """Read the stored value, keeping the default when absent or unreadable."""
        try:
            raw = self.store.get_item(self.key)
            if raw:
                self._value = self.adapter.validate_json(raw)
        except Exception:
            _logger.exception("Error reading storage key %s", self.key)
        self._initialized = True
        return self._value

    def set(self, value: T | Callable[[T], T]) -> None:
        """Replace the value, or apply an updater to the current value."""
        self._value = value(self._value) if callable(value) else value
        if not self._initialized:
            return
        try:
            raw = self.adapter.dump_json(self._value, by_alias=True).decode("utf-8")
            self.store.set_item(self.key, raw)
        except Exception:
            _logger.exception("Error writing storage key %s", self.key)
